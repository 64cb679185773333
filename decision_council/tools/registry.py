from decision_council.errors import UnknownToolError
from decision_council.models import ToolType
from decision_council.tools.base import ToolAdapter
from decision_council.tools.pestle import PestleAdapter
from decision_council.tools.swot import SwotAdapter
from decision_council.tools.weighted_scoring import WeightedScoringAdapter


def build_tool_adapters() -> dict[ToolType, ToolAdapter]:
    adapters: list[ToolAdapter] = [SwotAdapter(), PestleAdapter(), WeightedScoringAdapter()]
    return {a.tool_type: a for a in adapters}


def get_adapter(adapters: dict[ToolType, ToolAdapter], tool: ToolType | str) -> ToolAdapter:
    """Raises UnknownToolError when no adapter handles ``tool``."""
    try:
        return adapters[ToolType(tool)]
    except (KeyError, ValueError):
        raise UnknownToolError(f"No tool adapter registered for {tool!r}") from None
