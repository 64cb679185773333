"""Shared pytest fixtures."""

import uuid
from collections.abc import Sequence
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PanelMemberConfig
from decision_council.drivers.base import AgentDriver
from decision_council.methods.registry import build_registry
from decision_council.models import (
    Contribution,
    Council,
    CouncilMember,
    Issue,
    MethodType,
    ModelResponse,
    Role,
    Session,
    SessionRound,
    ToolType,
)
from decision_council.providers.base import AIProvider
from decision_council.tools.registry import build_tool_adapters


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        method="delphi",
        tool="swot",
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def sample_app_config(sample_defaults_config: DefaultsConfig) -> AppConfig:
    model_cfg = ModelConfig(
        name="claude",
        sdk="anthropic",
        model="claude-sonnet-4-20250514",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=4096,
    )
    return AppConfig(
        defaults=sample_defaults_config,
        models={"claude": model_cfg},
        panel=[PanelMemberConfig(name="Chair", role="Moderator", provider="claude")],
        available_providers={"claude"},
    )


@pytest.fixture
def sample_issue() -> Issue:
    return Issue(title="Should we migrate to Kubernetes?", context="Three services, one ops engineer.")


def make_member(name: str, role: Role = Role.EXPERT) -> CouncilMember:
    return CouncilMember(agent_id=uuid.uuid4(), name=name, role=role)


def make_council(
    issue: Issue,
    method: MethodType = MethodType.DELPHI,
    tool: ToolType = ToolType.WEIGHTED_SCORING,
    member_count: int = 2,
) -> Council:
    council = Council(issue_id=issue.id, method=method, tool=tool)
    roles = [Role.MODERATOR, Role.EXPERT, Role.CRITIC, Role.OBSERVER]
    for i in range(member_count):
        council.add_member(make_member(f"Member {i + 1}", roles[i % len(roles)]))
    return council


def make_round(replies: Sequence[str], round_number: int = 1, session_id: uuid.UUID | None = None) -> SessionRound:
    """A SessionRound with one contribution per reply, each from a distinct agent."""
    session_round = SessionRound(
        session_id=session_id or uuid.uuid4(),
        round_number=round_number,
        instructions="test",
    )
    for reply in replies:
        session_round.add_contribution(
            Contribution(session_round_id=session_round.id, agent_id=uuid.uuid4(), raw_content=reply)
        )
    return session_round


def session_at(round_number: int, payload: str = "{}") -> Session:
    return Session(council_id=uuid.uuid4(), state_payload=payload, current_round_number=round_number)


@pytest.fixture
def sample_council(sample_issue: Issue) -> Council:
    return make_council(sample_issue, member_count=3)


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def tool_adapters():
    return build_tool_adapters()


class ScriptedDriver(AgentDriver):
    """Test double AgentDriver: replies from a callable, records every prompt."""

    def __init__(self, reply=None, unavailable: set[uuid.UUID] | None = None) -> None:
        self._reply = reply or (lambda member, prompt: f"{member.name} says: proceed carefully.")
        self._unavailable = set(unavailable or ())
        self.prompts: list[tuple[str, str]] = []
        self.notify = AsyncMock()  # type: ignore[method-assign]

    async def is_available(self, agent_id: uuid.UUID) -> bool:
        return agent_id not in self._unavailable

    async def get_response(self, member: CouncilMember, prompt: str) -> str:
        self.prompts.append((member.name, prompt))
        return self._reply(member, prompt)


@pytest.fixture
def scripted_driver() -> ScriptedDriver:
    return ScriptedDriver()


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=ModelResponse(
                provider=provider_name,
                model="mock-model",
                round_number=1,
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, prompt: str, round_number: int, system_prompt: str | None = None) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse(
            provider=self._name,
            model="mock-model",
            round_number=round_number,
            content=self._response_content,
            latency_sec=0.1,
            token_count=10,
        )


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
