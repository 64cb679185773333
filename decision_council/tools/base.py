"""Abstract base for tool adapters and the heading-section extractor SWOT and PESTLE share."""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from decision_council.models import ToolType

logger = logging.getLogger(__name__)

_BULLET_RE = re.compile(r"^\s*(?:[-•+]|\*(?!\*)|\d+[.)])\s+")
_HEADING_RE = re.compile(r"^\s*(?:#+\s*)?\**\s*([A-Za-z][A-Za-z &/()-]{0,40}?)\s*\**\s*:\s*\**\s*(.*)$")
_MD_HEADING_RE = re.compile(r"^\s*#+\s*\**\s*(.+?)\s*\**\s*$")


@dataclass
class ToolSchema:
    schema_json: str
    description: str


@dataclass
class ParsedToolData:
    structured_data_json: str
    is_valid: bool = True
    validation_error: str | None = None


class ToolAdapter(ABC):
    """Shapes how agents answer (prompt template) and what is kept from the answer."""

    tool_type: ToolType

    @abstractmethod
    def schema(self) -> ToolSchema:
        ...

    @abstractmethod
    def generate_prompt_template(self) -> str:
        """Instructions appended to every round prompt."""
        ...

    @abstractmethod
    def parse_response(self, raw_content: str) -> ParsedToolData:
        ...

    @abstractmethod
    def validate_data(self, structured_data_json: str) -> bool:
        ...


def _heading_of(line: str) -> tuple[str, str] | None:
    """Return (label, inline rest) when ``line`` is a section heading."""
    if _BULLET_RE.match(line):
        return None
    match = _HEADING_RE.match(line)
    if match:
        return match.group(1), match.group(2).strip(" *")
    match = _MD_HEADING_RE.match(line)
    if match:
        return match.group(1), ""
    return None


class SectionedToolAdapter(ToolAdapter):
    """Collects bulleted lines under headings such as ``**Strengths:**`` or ``## Threats``.

    ``sections`` maps the output key to a lowercase keyword the heading must contain.
    A heading that matches no keyword closes the current section.
    """

    sections: dict[str, str] = {}
    title = ""
    description = ""

    def extract_sections(self, raw_content: str) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {key: [] for key in self.sections}
        current: str | None = None
        for line in (raw_content or "").splitlines():
            heading = _heading_of(line)
            if heading is not None:
                label, rest = heading
                current = next(
                    (key for key, keyword in self.sections.items() if keyword in label.lower()),
                    None,
                )
                if current and rest:
                    result[current].append(rest)
                continue
            if current is None:
                continue
            item = _BULLET_RE.sub("", line).strip()
            if item:
                result[current].append(item)
        return result

    def schema(self) -> ToolSchema:
        schema = {
            "type": "object",
            "properties": {key: {"type": "array", "items": {"type": "string"}} for key in self.sections},
            "required": list(self.sections),
        }
        return ToolSchema(schema_json=json.dumps(schema), description=self.description)

    def generate_prompt_template(self) -> str:
        blocks = [f"**{key.capitalize()}:**\n- [list {key}]" for key in self.sections]
        return f"Please structure your response as a {self.title}:\n\n" + "\n\n".join(blocks)

    def parse_response(self, raw_content: str) -> ParsedToolData:
        sections = self.extract_sections(raw_content)
        data = json.dumps(sections, ensure_ascii=False)
        if not any(sections.values()):
            logger.debug("No %s sections found in response", self.title)
            return ParsedToolData(data, is_valid=False, validation_error=f"No {self.title} sections found")
        return ParsedToolData(data)

    def validate_data(self, structured_data_json: str) -> bool:
        try:
            data = json.loads(structured_data_json)
        except (TypeError, ValueError):
            return False
        return isinstance(data, dict) and all(isinstance(data.get(key), list) for key in self.sections)
