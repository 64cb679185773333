from decision_council.models import ToolType
from decision_council.tools.base import SectionedToolAdapter


class SwotAdapter(SectionedToolAdapter):
    tool_type = ToolType.SWOT
    title = "SWOT analysis"
    description = "SWOT Analysis: Strengths, Weaknesses, Opportunities, Threats"
    sections = {
        "strengths": "strength",
        "weaknesses": "weakness",
        "opportunities": "opportunit",
        "threats": "threat",
    }
