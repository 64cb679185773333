"""ADKAR change-readiness assessment, one round per phase."""

from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType, SessionRound

_PROMPT = "ADKAR Phase {round}/{total} - {label}: "
_HEADING = "ADKAR Phase {round} - {label}:"


class AdkarMethod(PhasedDiscussionMethod):
    method_type = MethodType.ADKAR
    display_name = "ADKAR"
    completion_reason = "ADKAR assessment complete across all five change phases."
    phases = (
        Phase(
            "Awareness",
            _PROMPT + "Assess the awareness of the need for change regarding: {topic}. "
            "What do stakeholders currently know? What communication gaps exist?",
            _HEADING,
        ),
        Phase(
            "Desire",
            _PROMPT + "Evaluate the desire and willingness to support this change: {topic}. "
            "What motivates or inhibits stakeholder buy-in?",
            _HEADING,
        ),
        Phase(
            "Knowledge",
            _PROMPT + "Identify knowledge and training gaps for implementing the change: {topic}. "
            "What skills, processes, or information are needed?",
            _HEADING,
        ),
        Phase(
            "Ability",
            _PROMPT + "Evaluate the ability to implement required behaviours and skills for: {topic}. "
            "What barriers exist? What support mechanisms are in place?",
            _HEADING,
        ),
        Phase(
            "Reinforcement",
            _PROMPT + "Plan how to sustain and reinforce the change: {topic}. "
            "What mechanisms will prevent regression and celebrate progress?",
            _HEADING,
        ),
    )

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        phases = state.get("phases") if isinstance(state.get("phases"), dict) else {}
        label = self.phase_at(session_round.round_number).label
        phases[label] = [c.raw_content.strip() for c in session_round.contributions]
        state["phases"] = phases
        return summary
