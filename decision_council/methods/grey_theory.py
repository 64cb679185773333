"""Grey Relational Analysis against the ideal reference sequence."""

from decision_council.mcda import run_grey_theory
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType


class GreyTheoryMethod(MatrixScoringMethod):
    method_type = MethodType.GREY_THEORY
    display_name = "Grey Theory"
    completion_reason = "Grey Relational Analysis complete."
    label_prefix = "Grey Theory"
    algorithm = staticmethod(run_grey_theory)

    framing_focus = (
        "Introduce Grey Relational Analysis: each option is compared with an ideal reference "
        "option, which suits decisions with incomplete or uncertain information."
    )
    discussion_focus = (
        "How does each option compare to the ideal performance on each criterion? "
        "Where is information incomplete?"
    )
    deliberation_focus = (
        "Revisit the group discussion and consider uncertainty in the performance data. "
        "How confident are you in your assessments? Finalise your scoring intentions."
    )
    scoring_guidance = "Scores will be compared against the ideal sequence to compute grey relational grades."
