from decision_council.models import ToolType
from decision_council.tools.base import SectionedToolAdapter


class PestleAdapter(SectionedToolAdapter):
    tool_type = ToolType.PESTLE
    title = "PESTLE analysis"
    description = "PESTLE Analysis: Political, Economic, Social, Technological, Legal, Environmental"
    sections = {
        "political": "politic",
        "economic": "econom",
        "social": "social",
        "technological": "technolog",
        "legal": "legal",
        "environmental": "environment",
    }
