"""ELECTRE outranking over 0-10 scores."""

from decision_council.mcda import CONCORDANCE_THRESHOLD, DISCORDANCE_THRESHOLD, run_electre
from decision_council.methods.matrix import MatrixScoringMethod
from decision_council.models import MethodType


class ElectreMethod(MatrixScoringMethod):
    method_type = MethodType.ELECTRE
    display_name = "ELECTRE"
    completion_reason = "ELECTRE outranking analysis complete."
    label_prefix = "ELECTRE"
    algorithm = staticmethod(run_electre)

    framing_focus = (
        "Introduce the outranking approach: an option outranks another when enough weighted "
        f"criteria agree (concordance >= {CONCORDANCE_THRESHOLD}) and no criterion strongly "
        f"objects (discordance <= {DISCORDANCE_THRESHOLD})."
    )
    discussion_focus = (
        "For each option, assess its performance on each criterion. Where is one option "
        "clearly better than another, and where would it be unacceptably worse?"
    )
    deliberation_focus = (
        "Review the group discussion. Finalise your views on which options should be eliminated "
        "and which should be preferred based on concordance (strength of preference) and "
        "discordance (intensity of disadvantage)."
    )
    scoring_guidance = "Scores will be used to build the concordance and discordance matrices."
