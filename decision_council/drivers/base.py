"""Abstract base for the drivers that relay prompts to council members."""

import uuid
from abc import ABC, abstractmethod

from decision_council.errors import CouncilError
from decision_council.models import CouncilMember


class AgentUnavailableError(CouncilError):
    """Raised when a member cannot answer: no backing model, timeout, or provider failure."""

    def __init__(self, agent_id: uuid.UUID, reason: str) -> None:
        self.agent_id = agent_id
        self.reason = reason
        super().__init__(f"Agent {agent_id} unavailable: {reason}")


class AgentDriver(ABC):
    @abstractmethod
    async def is_available(self, agent_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def get_response(self, member: CouncilMember, prompt: str) -> str:
        """Return the member's reply to ``prompt``.

        Raises:
            AgentUnavailableError: If the member cannot answer.
        """
        ...

    async def notify(self, agent_id: uuid.UUID, message: str) -> None:
        """Out-of-band message (e.g. session completed). No-op by default."""
        return None
