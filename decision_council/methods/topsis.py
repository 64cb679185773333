"""TOPSIS: closeness to the ideal solution, with benefit and cost criteria."""

from typing import Any

from decision_council.mcda import run_topsis
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType


def _direction(criterion: dict[str, Any]) -> str:
    return "benefit" if criterion["isBenefit"] else "cost"


class TopsisMethod(MatrixScoringMethod):
    method_type = MethodType.TOPSIS
    display_name = "TOPSIS"
    completion_reason = "TOPSIS ideal-solution analysis complete."
    label_prefix = "TOPSIS"
    algorithm = staticmethod(run_topsis)

    criteria_title = "weight | type"
    framing_focus = (
        "Introduce the TOPSIS approach: we seek the option closest to the ideal and farthest "
        "from the anti-ideal solution."
    )
    discussion_focus = (
        "Assess how well each option performs on benefit and cost criteria. "
        "Which options resemble the ideal solution most closely?"
    )
    deliberation_focus = (
        "Revisit the group discussion. Consider the trade-offs between ideal proximity and "
        "anti-ideal distance. Confirm your scoring intentions."
    )
    scoring_guidance = (
        "For cost criteria a higher score means a higher cost. "
        "Scores will be used to compute closeness coefficients."
    )

    def criterion_legend(self, criterion: dict[str, Any]) -> str:
        return f"  • {criterion['name']} ({criterion['weight']:.0%} | {_direction(criterion)})"

    def criterion_tag(self, criterion: dict[str, Any]) -> str:
        flag = "B" if criterion["isBenefit"] else "C"
        return f"{criterion['name']}({criterion['weight']:.0%},{flag})"
