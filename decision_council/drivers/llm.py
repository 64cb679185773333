"""Driver that answers through an AIProvider per council member."""

import asyncio
import logging
import uuid
from collections.abc import Mapping

from decision_council.drivers.base import AgentDriver, AgentUnavailableError
from decision_council.models import CouncilMember
from decision_council.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = (
    "You are {name}, a {role} in a decision-making council. "
    "Provide thoughtful, concise responses based on your role."
)


def system_prompt_for(member: CouncilMember) -> str:
    if member.system_prompt_override and member.system_prompt_override.strip():
        return member.system_prompt_override
    return SYSTEM_PROMPT_TEMPLATE.format(name=member.name, role=member.role.value)


class LLMAgentDriver(AgentDriver):
    """Routes each member to its assigned provider.

    A member without an assigned provider is unavailable. Timeouts and provider
    failures surface as AgentUnavailableError.
    """

    def __init__(self, assignments: Mapping[uuid.UUID, AIProvider], timeout_sec: float | None = None) -> None:
        self._assignments = dict(assignments)
        self._timeout_sec = timeout_sec
        self._calls: dict[uuid.UUID, int] = {}

    async def is_available(self, agent_id: uuid.UUID) -> bool:
        return agent_id in self._assignments

    async def get_response(self, member: CouncilMember, prompt: str) -> str:
        provider = self._assignments.get(member.agent_id)
        if provider is None:
            raise AgentUnavailableError(member.agent_id, "no provider assigned")

        round_number = self._calls.get(member.agent_id, 0) + 1
        self._calls[member.agent_id] = round_number
        try:
            response = await asyncio.wait_for(
                provider.generate(prompt, round_number, system_prompt=system_prompt_for(member)),
                timeout=self._timeout_sec,
            )
        except TimeoutError as exc:
            raise AgentUnavailableError(member.agent_id, f"timed out after {self._timeout_sec}s") from exc
        except ProviderError as exc:
            raise AgentUnavailableError(member.agent_id, str(exc)) from exc

        logger.debug(
            "%s (%s) answered in %.2fs", member.name, response.model, response.latency_sec,
        )
        return response.content

    async def notify(self, agent_id: uuid.UUID, message: str) -> None:
        logger.info("Session notice for %s: %s", agent_id, message)
