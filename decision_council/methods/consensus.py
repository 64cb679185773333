"""Consensus building: gather perspectives, then measure agreement."""

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType


class ConsensusMethod(PhasedDiscussionMethod):
    method_type = MethodType.CONSENSUS_BUILDING
    display_name = "Consensus Building"
    completion_reason = "Consensus building complete."
    contribution_format = "{content}"
    contribution_separator = " | "
    phases = (
        Phase(
            "Perspectives",
            "Please share your perspective on reaching consensus about: {topic}",
            "Consensus Round {round}:",
        ),
        Phase(
            "Agreement",
            "Based on group discussion, please indicate your level of agreement "
            "and any remaining concerns about: {topic}\n\nGroup discussion so far:\n{summary}",
            "Consensus Round {round}:",
        ),
    )
