"""PROMETHEE II net-flow ranking over 0-10 scores."""

from decision_council.mcda import run_promethee
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType


class PrometheeMethod(MatrixScoringMethod):
    method_type = MethodType.PROMETHEE
    display_name = "PROMETHEE II"
    completion_reason = "PROMETHEE II net-flow ranking complete."
    label_prefix = "PROMETHEE"
    algorithm = staticmethod(run_promethee)

    framing_focus = (
        "Introduce the PROMETHEE approach: options are compared pairwise on every criterion and "
        "ranked by net preference flow."
    )
    discussion_focus = (
        "Compare options pairwise. Where does one option clearly outperform another, and by how much?"
    )
    deliberation_focus = (
        "Consider the group's pairwise comparisons. Are your preferences consistent? "
        "What is your overall view on the ranking?"
    )
    scoring_guidance = "Scores will be used to compute positive, negative and net outranking flows."
