"""Six Thinking Hats: one perspective per round in a fixed order."""

from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType, SessionRound

HATS = (
    ("White Hat", "Facts",
     "Focus ONLY on facts, data, and information. What do we know? What information is missing? "
     "Avoid opinions and judgments entirely."),
    ("Red Hat", "Emotions",
     "Share your emotional response and gut feeling. How does this make you feel? "
     "What is your intuition telling you? No justification needed."),
    ("Black Hat", "Caution",
     "Be the devil's advocate. Identify risks, weaknesses, dangers, and reasons why this might fail. "
     "Be rigorously critical."),
    ("Yellow Hat", "Optimism",
     "Be optimistic. Identify benefits, value, and reasons why this could succeed. "
     "Explore the best-case scenario."),
    ("Green Hat", "Creativity",
     "Think creatively. Propose new ideas, alternatives, and possibilities. Challenge assumptions. "
     "No idea is too wild."),
    ("Blue Hat", "Process",
     "Step back and reflect on the whole discussion. Summarise the key insights from all hats, "
     "identify the decision direction, and propose clear next steps."),
)


class SixThinkingHatsMethod(PhasedDiscussionMethod):
    method_type = MethodType.SIX_THINKING_HATS
    display_name = "Six Thinking Hats"
    completion_reason = "Six Thinking Hats complete - all six perspectives explored."
    contribution_format = "{content}"
    contribution_separator = "\n---\n"
    phases = tuple(
        Phase(
            hat,
            "Round {round} of {total} - {label} (" + colour + " perspective)\n\n"
            "Topic: {topic}\n\n" + instruction,
            "{label} insights:",
        )
        for hat, colour, instruction in HATS
    )

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        hats = state.get("hats") if isinstance(state.get("hats"), dict) else {}
        hats[self.phase_at(session_round.round_number).label] = summary
        state["hats"] = hats
        return summary
