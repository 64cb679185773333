"""Abstract base for every decision method, plus the shared phased-discussion variant."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from decision_council.models import (
    AggregationResult,
    Council,
    Issue,
    MethodType,
    NextPrompt,
    Session,
    SessionRound,
)

logger = logging.getLogger(__name__)

NO_CONTRIBUTIONS = "(no contributions)"


def load_state(payload: str | None) -> dict[str, Any]:
    """Parse a state payload, treating anything unreadable as an empty state."""
    if not payload:
        return {}
    try:
        state = json.loads(payload)
    except (TypeError, ValueError) as exc:
        logger.debug("Discarding unreadable state payload: %s", exc)
        return {}
    if not isinstance(state, dict):
        logger.debug("Discarding non-object state payload of type %s", type(state).__name__)
        return {}
    return state


def dump_state(state: dict[str, Any]) -> str:
    return json.dumps(state, ensure_ascii=False)


def text_field(state: dict[str, Any], key: str, default: str = "") -> str:
    value = state.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


class DecisionMethod(ABC):
    """A finite-round procedure: emits prompts and folds each round into the state.

    Implementations must be pure with respect to their inputs: the same session and
    payload always produce the same prompt and the same aggregation.
    """

    method_type: MethodType
    max_rounds: int
    min_members: int = 1
    display_name: str = ""
    completion_reason: str = "Session complete."

    @abstractmethod
    def next_prompt(self, session: Session) -> NextPrompt:
        """Return the prompt for round ``session.current_round_number + 1``.

        Reports completion once ``current_round_number >= max_rounds``.
        """
        ...

    @abstractmethod
    def aggregate_round(self, session_round: SessionRound, current_state_payload: str) -> AggregationResult:
        """Fold a finished round into a summary and an updated state payload."""
        ...

    @abstractmethod
    def initialize_state(self, council: Council, issue: Issue) -> str:
        """Seed the JSON state payload for a new session."""
        ...

    def validate_council(self, council: Council) -> bool:
        return len(council.members) >= self.min_members

    def is_finished(self, round_number: int) -> bool:
        return round_number >= self.max_rounds

    def completed(self) -> NextPrompt:
        return NextPrompt(prompt_text="", is_complete=True, completion_reason=self.completion_reason)


@dataclass(frozen=True)
class Phase:
    """One round of a narrative method.

    ``prompt`` and ``heading`` are ``str.format`` templates; available fields are
    ``topic``, ``context``, ``summary``, ``round`` and ``total`` plus whatever
    ``prompt_fields`` adds.
    """

    label: str
    prompt: str
    heading: str = "{label}:"


class PhasedDiscussionMethod(DecisionMethod):
    """Narrative method that walks a fixed list of phases, one per round.

    State keys: ``topic``, ``context``, ``roundsCompleted``, ``lastSummary``, ``history``.
    """

    phases: tuple[Phase, ...] = ()
    fallback_topic: str = "the topic"
    fallback_context: str = "(no additional context)"
    contribution_format: str = "- {content}"
    contribution_separator: str = "\n"

    @property
    def max_rounds(self) -> int:  # type: ignore[override]
        return len(self.phases)

    def topic(self, state: dict[str, Any]) -> str:
        return text_field(state, "topic", self.fallback_topic)

    def prompt_fields(self, state: dict[str, Any], index: int) -> dict[str, Any]:
        return {
            "topic": self.topic(state),
            "context": text_field(state, "context", self.fallback_context),
            "summary": text_field(state, "lastSummary", "(no previous responses)"),
            "round": index + 1,
            "total": self.max_rounds,
        }

    def phase_at(self, round_number: int) -> Phase:
        index = min(max(round_number - 1, 0), len(self.phases) - 1)
        return self.phases[index]

    def next_prompt(self, session: Session) -> NextPrompt:
        if self.is_finished(session.current_round_number):
            return self.completed()
        state = load_state(session.state_payload)
        index = session.current_round_number
        phase = self.phases[index]
        return NextPrompt(prompt_text=phase.prompt.format(label=phase.label, **self.prompt_fields(state, index)))

    def summarize(self, session_round: SessionRound, state: dict[str, Any]) -> str:
        phase = self.phase_at(session_round.round_number)
        fields = self.prompt_fields(state, session_round.round_number - 1)
        heading = phase.heading.format(label=phase.label, **fields)
        lines = [
            self.contribution_format.format(content=c.raw_content.strip())
            for c in session_round.contributions
        ]
        body = self.contribution_separator.join(lines) if lines else NO_CONTRIBUTIONS
        return f"{heading}\n{body}"

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        """Hook for method-specific state. May return a replacement summary."""
        return summary

    def aggregate_round(self, session_round: SessionRound, current_state_payload: str) -> AggregationResult:
        state = load_state(current_state_payload)
        summary = self.summarize(session_round, state)
        summary = self.extend_state(state, session_round, summary)

        history = state.get("history")
        if not isinstance(history, list):
            history = []
        history.append({
            "round": session_round.round_number,
            "phase": self.phase_at(session_round.round_number).label,
            "summary": summary,
        })
        state["history"] = history
        state["lastSummary"] = summary
        state["roundsCompleted"] = session_round.round_number

        return AggregationResult(
            summary_text=summary,
            updated_state_payload=dump_state(state),
            should_continue=not self.is_finished(session_round.round_number),
        )

    def initialize_state(self, council: Council, issue: Issue) -> str:
        state = {
            "topic": issue.title,
            "context": issue.context,
            "roundsCompleted": 0,
            "lastSummary": "",
            "history": [],
        }
        return dump_state(state)
