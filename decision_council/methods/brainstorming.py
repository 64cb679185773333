"""Brainstorming: a single round of unfiltered idea collection."""

from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType, SessionRound


class BrainstormingMethod(PhasedDiscussionMethod):
    method_type = MethodType.BRAINSTORMING
    display_name = "Brainstorming"
    completion_reason = "Brainstorming session complete after idea collection round."
    phases = (
        Phase(
            "Idea Collection",
            "Please brainstorm as many ideas as possible about: {topic}. "
            "There are no wrong answers. Share all your ideas freely.",
            "Round {round} Ideas:",
        ),
    )

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        ideas = state.get("ideas") if isinstance(state.get("ideas"), list) else []
        ideas.extend(c.raw_content.strip() for c in session_round.contributions if c.raw_content.strip())
        state["ideas"] = ideas
        return summary
