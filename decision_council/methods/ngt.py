"""Nominal Group Technique: silent generation, round-robin, clarification, ranked vote."""

from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod, text_field
from decision_council.models import MethodType, SessionRound

_HEADING = "NGT Phase {round} - {label}:"


class NgtMethod(PhasedDiscussionMethod):
    method_type = MethodType.NGT
    display_name = "Nominal Group Technique"
    min_members = 2
    completion_reason = (
        "NGT session complete after idea generation, sharing, clarification, and voting phases."
    )
    phases = (
        Phase(
            "Silent Generation",
            "NGT Phase 1 - Silent Generation: Without discussion, individually write down all ideas "
            "related to: {topic}. List as many ideas as possible.",
            _HEADING,
        ),
        Phase(
            "Round-Robin Sharing",
            "NGT Phase 2 - Round-Robin Sharing: Share your ideas one at a time in turn. "
            "Previous ideas collected:\n{ideas}\nAdd any new ideas not yet listed for: {topic}.",
            _HEADING,
        ),
        Phase(
            "Clarification",
            "NGT Phase 3 - Clarification: Review and clarify the collected ideas. "
            "Discuss the meaning of each idea:\n{ideas}\n"
            "Ask questions or provide explanations where needed for: {topic}.",
            _HEADING,
        ),
        Phase(
            "Voting & Ranking",
            "NGT Phase 4 - Voting & Ranking: Rank the top ideas by importance for: {topic}. "
            "Ideas to consider:\n{ideas}\n"
            "Assign a priority score (1=low, 5=high) and brief rationale for each.",
            _HEADING,
        ),
    )

    def prompt_fields(self, state: dict[str, Any], index: int) -> dict[str, Any]:
        fields = super().prompt_fields(state, index)
        fields["ideas"] = text_field(state, "ideasSummary", "(no ideas collected yet)")
        return fields

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        state["ideasSummary"] = summary
        state["lastPhase"] = self.phase_at(session_round.round_number).label
        return summary
