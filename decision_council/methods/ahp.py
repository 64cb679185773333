"""Analytic Hierarchy Process over Saaty-scale scores."""

from decision_council.mcda import run_ahp
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType
from decision_council.parsing import SAATY_SCALE


class AhpMethod(MatrixScoringMethod):
    """AHP scores on 1-9. A cell a voter left blank is left out of that cell's mean."""

    method_type = MethodType.AHP
    display_name = "AHP"
    completion_reason = "AHP analysis complete."
    label_prefix = "AHP"
    scale = SAATY_SCALE
    synthetic_range = (3, 8)
    impute_missing = False
    algorithm = staticmethod(run_ahp)

    framing_focus = (
        "Frame the decision hierarchy: goal, criteria and alternatives. "
        "Which criteria matter most, and why?"
    )
    discussion_focus = (
        "Discuss the relative importance of each criterion and the strengths and weaknesses "
        "of each option."
    )
    deliberation_focus = (
        "Consider the group discussion and sharpen your expert judgement. How do the criteria "
        "compare in relative importance? Which options best satisfy each criterion?"
    )
    scoring_guidance = (
        "Use the Saaty scale: 1=equally preferred, 3=moderately, 5=strongly, "
        "7=very strongly, 9=extremely preferred."
    )
