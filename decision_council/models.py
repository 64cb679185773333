"""Dataclasses for issues, councils, sessions and rounds.

Entities carry their own small state transitions (archive, add_member, complete, ...);
everything method-specific lives in the opaque ``state_payload`` JSON string.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from decision_council.errors import DuplicateMemberError, SessionStateError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MethodType(str, Enum):
    DELPHI = "delphi"
    NGT = "ngt"
    BRAINSTORMING = "brainstorming"
    CONSENSUS_BUILDING = "consensus"
    ADKAR = "adkar"
    WEIGHTED_DELIBERATION = "weighted_deliberation"
    AHP = "ahp"
    ELECTRE = "electre"
    TOPSIS = "topsis"
    PROMETHEE = "promethee"
    GREY_THEORY = "grey_theory"
    MAJORITY_VOTING = "majority_voting"
    SIX_THINKING_HATS = "six_hats"
    COST_BENEFIT_ANALYSIS = "cost_benefit"
    RAPID = "rapid"
    OODA_LOOP = "ooda"


class ToolType(str, Enum):
    SWOT = "swot"
    PESTLE = "pestle"
    WEIGHTED_SCORING = "weighted_scoring"


class Role(str, Enum):
    MODERATOR = "Moderator"
    EXPERT = "Expert"
    CRITIC = "Critic"
    OBSERVER = "Observer"


class SessionStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass
class Issue:
    title: str
    context: str
    owner_id: uuid.UUID = field(default_factory=uuid.uuid4)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    is_archived: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime | None = None

    def update_title(self, title: str) -> None:
        if not title or not title.strip():
            raise ValueError("Title cannot be empty")
        self.title = title
        self.updated_at = _now()

    def update_context(self, context: str) -> None:
        if not context or not context.strip():
            raise ValueError("Context cannot be empty")
        self.context = context
        self.updated_at = _now()

    def archive(self) -> None:
        self.is_archived = True
        self.updated_at = _now()

    def restore(self) -> None:
        self.is_archived = False
        self.updated_at = _now()


@dataclass
class CouncilMember:
    agent_id: uuid.UUID
    name: str
    role: Role
    is_ai: bool = True
    system_prompt_override: str | None = None

    def assign_role(self, role: Role) -> None:
        self.role = role

    def update_system_prompt(self, system_prompt: str | None) -> None:
        self.system_prompt_override = system_prompt


@dataclass
class Council:
    issue_id: uuid.UUID
    method: MethodType
    tool: ToolType
    members: list[CouncilMember] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)

    def add_member(self, member: CouncilMember) -> None:
        if any(m.agent_id == member.agent_id for m in self.members):
            raise DuplicateMemberError(f"Agent {member.agent_id} is already a member of this council")
        self.members.append(member)

    def remove_member(self, agent_id: uuid.UUID) -> None:
        self.members = [m for m in self.members if m.agent_id != agent_id]

    def get_member(self, agent_id: uuid.UUID) -> CouncilMember | None:
        return next((m for m in self.members if m.agent_id == agent_id), None)

    def change_method(self, method: MethodType) -> None:
        self.method = method

    def change_tool(self, tool: ToolType) -> None:
        self.tool = tool


@dataclass
class Contribution:
    session_round_id: uuid.UUID
    agent_id: uuid.UUID
    raw_content: str
    structured_data: str = "{}"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)

    def update_structured_data(self, structured_data: str) -> None:
        if not structured_data or not structured_data.strip():
            raise ValueError("Structured data cannot be empty")
        self.structured_data = structured_data


@dataclass
class SessionRound:
    session_id: uuid.UUID
    round_number: int
    instructions: str
    summary: str | None = None
    contributions: list[Contribution] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)

    def add_contribution(self, contribution: Contribution) -> None:
        self.contributions.append(contribution)

    def set_summary(self, summary: str) -> None:
        if not summary or not summary.strip():
            raise ValueError("Summary cannot be empty")
        self.summary = summary


@dataclass
class Session:
    council_id: uuid.UUID
    state_payload: str = "{}"
    status: SessionStatus = SessionStatus.ACTIVE
    current_round_number: int = 0
    rounds: list[SessionRound] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime | None = None

    def add_round(self, session_round: SessionRound) -> None:
        if session_round.round_number <= self.current_round_number:
            raise SessionStateError(
                f"Round {session_round.round_number} does not advance past round {self.current_round_number}"
            )
        self.rounds.append(session_round)
        self.current_round_number = session_round.round_number
        self.updated_at = _now()

    def update_state_payload(self, payload: str) -> None:
        if not payload or not payload.strip():
            raise ValueError("State payload cannot be empty")
        self.state_payload = payload
        self.updated_at = _now()

    def pause(self) -> None:
        if self.status in (SessionStatus.COMPLETED, SessionStatus.FAILED):
            raise SessionStateError(f"Cannot pause a session in {self.status.value} state")
        self.status = SessionStatus.PAUSED

    def resume(self) -> None:
        if self.status is not SessionStatus.PAUSED:
            raise SessionStateError("Cannot resume a session that is not paused")
        self.status = SessionStatus.ACTIVE

    def complete(self) -> None:
        if self.status is SessionStatus.COMPLETED:
            raise SessionStateError("Session is already completed")
        self.status = SessionStatus.COMPLETED
        self.updated_at = _now()

    def fail(self) -> None:
        if self.status is SessionStatus.COMPLETED:
            raise SessionStateError("Cannot fail a completed session")
        self.status = SessionStatus.FAILED
        self.updated_at = _now()

    def get_round(self, round_number: int) -> SessionRound | None:
        return next((r for r in self.rounds if r.round_number == round_number), None)

    def get_current_round(self) -> SessionRound | None:
        return self.get_round(self.current_round_number)


@dataclass
class NextPrompt:
    prompt_text: str
    is_complete: bool = False
    completion_reason: str | None = None


@dataclass
class AggregationResult:
    summary_text: str
    updated_state_payload: str
    should_continue: bool


@dataclass
class ModelResponse:
    provider: str          # "claude", "openai", "deepseek", ...
    model: str             # actual model string used
    round_number: int
    content: str
    latency_sec: float
    token_count: int | None
