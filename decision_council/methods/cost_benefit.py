"""Cost-Benefit Analysis: costs, benefits, then a synthesis with a PROCEED verdict."""

import re
from collections import Counter
from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType, SessionRound

VERDICTS = ("PROCEED WITH CONDITIONS", "DO NOT PROCEED", "PROCEED")
_VERDICT_RE = re.compile(r"\b(PROCEED WITH CONDITIONS|DO NOT PROCEED|PROCEED)\b")


def extract_verdict(text: str) -> str | None:
    """First recommendation keyword in the reply; longest form wins at the same spot."""
    match = _VERDICT_RE.search(text)
    return match.group(1) if match else None


class CostBenefitMethod(PhasedDiscussionMethod):
    method_type = MethodType.COST_BENEFIT_ANALYSIS
    display_name = "Cost-Benefit Analysis"
    fallback_topic = "the proposal"
    completion_reason = "Cost-Benefit Analysis complete after cost, benefit, and synthesis rounds."
    contribution_format = "{content}"
    contribution_separator = "\n---\n"
    phases = (
        Phase(
            "Cost Analysis",
            "Round 1 - Cost Identification: Analyse the COSTS of \"{topic}\".\n\n"
            "Context: {context}\n\n"
            "For each cost, specify: (1) cost category (financial/time/risk/opportunity), "
            "(2) estimated magnitude, (3) likelihood of occurrence, (4) time horizon. "
            "Include direct costs, indirect costs, hidden costs, and opportunity costs.",
        ),
        Phase(
            "Benefit Analysis",
            "Round 2 - Benefit Identification: Analyse the BENEFITS of \"{topic}\".\n\n"
            "Context: {context}\n\n"
            "For each benefit, specify: (1) benefit category (financial/strategic/operational/reputational), "
            "(2) estimated magnitude, (3) confidence level, (4) time horizon. "
            "Include direct benefits, indirect benefits, and option value.",
        ),
        Phase(
            "Synthesis & Recommendation",
            "Round 3 - Synthesis & Recommendation: Weigh ALL costs and benefits for \"{topic}\".\n\n"
            "Provide: (1) a net value assessment (do benefits outweigh costs?), "
            "(2) the key risk factors that could change the outcome, "
            "(3) any non-quantifiable factors that should influence the decision, "
            "(4) a clear recommendation: PROCEED / DO NOT PROCEED / PROCEED WITH CONDITIONS, "
            "and (5) if conditional, specify the conditions.",
        ),
    )

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        label = self.phase_at(session_round.round_number).label
        if label == "Cost Analysis":
            state["costs"] = summary
        elif label == "Benefit Analysis":
            state["benefits"] = summary
        else:
            verdicts = [extract_verdict(c.raw_content) for c in session_round.contributions]
            tally = Counter(v for v in verdicts if v)
            state["verdicts"] = dict(tally)
            if tally:
                verdict = tally.most_common(1)[0][0]
                state["verdict"] = verdict
                summary += f"\n\nRecommendation: {verdict}"
        return summary
