"""Weighted Deliberation: moderated discussion, then a 0-10 vote combined by weighted sum."""

from decision_council.mcda import run_weighted_sum
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType


class WeightedDeliberationMethod(MatrixScoringMethod):
    method_type = MethodType.WEIGHTED_DELIBERATION
    display_name = "Weighted Deliberation"
    completion_reason = "Weighted deliberation and voting complete."
    synthetic_range = (5, 9)
    phase_labels = ("Moderator Framing", "Expert Discussion - Round 1", "Expert Discussion - Round 2")
    algorithm = staticmethod(run_weighted_sum)

    discussion_focus = (
        "Share your expert analysis. What are the strengths and weaknesses of each option "
        "against the criteria?"
    )
    deliberation_focus = (
        "Having considered all perspectives from the previous round, elaborate on your final "
        "assessment. What are the critical trade-offs? What is your recommendation and why?"
    )
