"""OODA loop: Observe, Orient, Decide, Act."""

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType


class OodaLoopMethod(PhasedDiscussionMethod):
    method_type = MethodType.OODA_LOOP
    display_name = "OODA Loop"
    fallback_topic = "the situation"
    completion_reason = "OODA Loop complete - observe, orient, decide, and act phases finished."
    contribution_format = "{content}"
    contribution_separator = "\n---\n"
    phases = (
        Phase(
            "Observe",
            "OODA - O (Observe): Gather and report raw observations about \"{topic}\".\n\n"
            "Context: {context}\n\n"
            "List only FACTS and SIGNALS, no interpretation yet. What data is available? "
            "Which signals from the environment, competitors, customers, or technology are relevant? "
            "What is notably absent or ambiguous?",
            "OODA - {label}:",
        ),
        Phase(
            "Orient",
            "OODA - O (Orient): Make sense of the observations about \"{topic}\".\n\n"
            "Orient by: (1) identifying patterns in the observations, "
            "(2) surfacing mental models or biases that might distort our view, "
            "(3) analysing organisational and historical context, "
            "(4) identifying what the data means for the decision at hand.",
            "OODA - {label}:",
        ),
        Phase(
            "Decide",
            "OODA - D (Decide): Select a course of action for \"{topic}\".\n\n"
            "Based on the observations and orientation, (1) list the feasible options, "
            "(2) evaluate each against speed, effectiveness, and reversibility, "
            "(3) select the option you recommend and state why. State your DECISION clearly.",
            "OODA - {label}:",
        ),
        Phase(
            "Act",
            "OODA - A (Act): Define the implementation and feedback loop for \"{topic}\".\n\n"
            "Specify: (1) the immediate actions and owners, (2) the timeline and milestones, "
            "(3) the success metrics, (4) the early warning signals that should trigger a new cycle, "
            "(5) how observations feed back into the next loop.",
            "OODA - {label}:",
        ),
    )
