"""Weighted scoring matrix: keeps the raw reply plus any ``option: criterion=score`` lines."""

import json

from decision_council.models import ToolType
from decision_council.parsing import STANDARD_SCALE, ScoreExtractor
from decision_council.tools.base import ParsedToolData, ToolAdapter, ToolSchema


class WeightedScoringAdapter(ToolAdapter):
    tool_type = ToolType.WEIGHTED_SCORING

    def __init__(self) -> None:
        self._extractor = ScoreExtractor(STANDARD_SCALE)

    def schema(self) -> ToolSchema:
        schema = {
            "type": "object",
            "properties": {
                "raw": {"type": "string"},
                "scores": {"type": "object", "description": "option -> criterion -> score (0-10)"},
            },
            "required": ["raw"],
        }
        return ToolSchema(schema_json=json.dumps(schema), description="Weighted scoring matrix")

    def generate_prompt_template(self) -> str:
        return (
            "Please score each option against the criteria on a scale of 0-10, one line per option:\n\n"
            "[Option]: [Criterion 1]=[score] | [Criterion 2]=[score]\n\n"
            "Follow each score line with a short reason."
        )

    def parse_response(self, raw_content: str) -> ParsedToolData:
        data = {"raw": raw_content, "scores": self._extractor.extract_any(raw_content)}
        return ParsedToolData(json.dumps(data, ensure_ascii=False))

    def validate_data(self, structured_data_json: str) -> bool:
        try:
            data = json.loads(structured_data_json)
        except (TypeError, ValueError):
            return False
        return isinstance(data, dict) and isinstance(data.get("raw"), str)
