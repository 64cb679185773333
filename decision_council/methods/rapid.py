"""RAPID decision-rights framework: Recommend, Input, Agree, Decide."""

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType


class RapidMethod(PhasedDiscussionMethod):
    method_type = MethodType.RAPID
    display_name = "RAPID"
    min_members = 2
    fallback_topic = "the decision"
    completion_reason = "RAPID framework complete - recommendation, input, agreement, and decision phases done."
    contribution_format = "{content}"
    contribution_separator = "\n---\n"
    phases = (
        Phase(
            "R - Recommend",
            "RAPID - R (Recommend): You are tasked with recommending a decision about \"{topic}\".\n\n"
            "Context: {context}\n\n"
            "If you hold the Recommend role: present your specific recommendation, the key data points "
            "supporting it, the options you evaluated, and why you favour it over the alternatives.\n"
            "If you hold an Expert or Critic role: note any questions you will raise in the Input round.",
            "RAPID {label}:",
        ),
        Phase(
            "I - Input",
            "RAPID - I (Input): Provide domain-specific expert input on the recommendation for \"{topic}\".\n\n"
            "Share data, facts, constraints, or considerations that should influence the decision. "
            "This is not your vote; it is information the decision-maker needs.",
            "RAPID {label}:",
        ),
        Phase(
            "A - Agree",
            "RAPID - A (Agree): Identify any issues, objections, or conditions required before you can "
            "agree to proceed with the recommendation on \"{topic}\".\n\n"
            "If you agree: state clearly that you agree and why.\n"
            "If you have conditions: state precisely what must change or be guaranteed.\n"
            "If you disagree: state why and what alternative you propose.",
            "RAPID {label}:",
        ),
        Phase(
            "D - Decide",
            "RAPID - D (Decide): You hold the Decide authority for \"{topic}\".\n\n"
            "Review the recommendation, expert inputs, and agreement round. Deliver the final decision. "
            "State: (1) DECISION: [what is decided], (2) KEY CONDITIONS from the Agree round that will be "
            "honoured, (3) any expert inputs that changed the recommendation, (4) the rationale.",
            "RAPID {label}:",
        ),
    )
