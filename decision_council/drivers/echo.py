"""Offline driver: canned, role-flavoured replies, optionally scripted per agent."""

import logging
import uuid
from collections.abc import Mapping, Sequence

from decision_council.drivers.base import AgentDriver
from decision_council.models import CouncilMember, Role

logger = logging.getLogger(__name__)


def canned_reply(member: CouncilMember, prompt: str) -> str:
    if member.role is Role.MODERATOR:
        return (
            f"[{member.name} - Moderator] I acknowledge the prompt and suggest we proceed "
            f"methodically: {prompt[:50]}..."
        )
    if member.role is Role.EXPERT:
        return (
            f"[{member.name} - Expert] From my expertise, I would analyse this as follows: "
            "this requires careful consideration of multiple factors."
        )
    if member.role is Role.CRITIC:
        return (
            f"[{member.name} - Critic] I see potential issues with this approach. "
            "We should consider the risks and alternative perspectives."
        )
    if member.role is Role.OBSERVER:
        return (
            f"[{member.name} - Observer] I've noted the discussion. "
            "The group seems to be converging on key points."
        )
    return f"[{member.name}] Acknowledged: {prompt[:30]}..."


class EchoAgentDriver(AgentDriver):
    """Answers every prompt without any model.

    ``scripted`` maps an agent id to replies handed out in order; once an agent's script
    runs out it falls back to the canned reply. Agents in ``unavailable`` report as
    unavailable.
    """

    def __init__(
        self,
        scripted: Mapping[uuid.UUID, Sequence[str]] | None = None,
        unavailable: set[uuid.UUID] | None = None,
    ) -> None:
        self._scripts = {agent_id: list(replies) for agent_id, replies in (scripted or {}).items()}
        self._unavailable = set(unavailable or ())
        self.notifications: list[tuple[uuid.UUID, str]] = []

    async def is_available(self, agent_id: uuid.UUID) -> bool:
        return agent_id not in self._unavailable

    async def get_response(self, member: CouncilMember, prompt: str) -> str:
        script = self._scripts.get(member.agent_id)
        if script:
            return script.pop(0)
        return canned_reply(member, prompt)

    async def notify(self, agent_id: uuid.UUID, message: str) -> None:
        logger.debug("Notify %s: %s", agent_id, message)
        self.notifications.append((agent_id, message))
