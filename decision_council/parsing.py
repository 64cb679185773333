"""Lenient extraction of per-option, per-criterion scores from freeform agent text.

Grammar, applied line by line:

    option-line := [bullet] option-name [**] ":" token-list
    token       := criterion-name ("=" | ":") number

Separators between tokens (``|``, ``,``, ``;`` or plain spaces) are ignored. The first
line for an option that yields at least one recognised criterion wins; values are rounded
to integers and clamped into the scale.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from decision_council.scoring import clamp

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"([^\W\d_][\w\s\-/&()']*?)\s*[=:]\s*(\d+(?:\.\d+)?)")
_LEADER = r"^[ \t>*\-•+#\d.)]*"
_ANY_LINE_RE = re.compile(_LEADER + r"\**[ \t]*([^\W\d_][^:\n*]*?)[ \t]*\**[ \t]*:[ \t]*(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class ScoreScale:
    low: int
    high: int

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    @property
    def span(self) -> float:
        return float(self.high - self.low)

    def label(self) -> str:
        return f"{self.low}-{self.high}"


SAATY_SCALE = ScoreScale(1, 9)
STANDARD_SCALE = ScoreScale(0, 10)


def _match_criterion(token: str, criteria: Sequence[str]) -> str | None:
    """Map a token name onto a declared criterion, case-insensitively.

    An exact match wins; otherwise the longest criterion the token ends with
    ("because Cost" -> "Cost").
    """
    name = " ".join(token.split()).strip(" -*_'()").lower()
    if not name:
        return None
    for criterion in criteria:
        if criterion.lower() == name:
            return criterion
    suffixes = [c for c in criteria if re.search(rf"(?:^|\W){re.escape(c.lower())}$", name)]
    if suffixes:
        return max(suffixes, key=len)
    return None


class ScoreExtractor:
    """Extracts a sparse ``{option: {criterion: score}}`` table from one reply."""

    def __init__(self, scale: ScoreScale = STANDARD_SCALE) -> None:
        self.scale = scale

    def _option_pattern(self, option: str) -> re.Pattern[str]:
        return re.compile(
            _LEADER + r"\**[ \t]*" + re.escape(option) + r"[ \t]*\**[ \t]*:[ \t]*(.+)$",
            re.IGNORECASE | re.MULTILINE,
        )

    def parse_tokens(self, text: str, criteria: Sequence[str]) -> dict[str, int]:
        scores: dict[str, int] = {}
        for match in _TOKEN_RE.finditer(text):
            criterion = _match_criterion(match.group(1), criteria)
            if criterion is None:
                continue
            value = int(float(match.group(2)) + 0.5)
            scores[criterion] = int(clamp(value, self.scale.low, self.scale.high))
        return scores

    def extract(
        self,
        raw_content: str,
        options: Sequence[str],
        criteria: Sequence[str],
    ) -> dict[str, dict[str, int]]:
        result: dict[str, dict[str, int]] = {}
        if not raw_content:
            return result
        for option in options:
            for line_match in self._option_pattern(option).finditer(raw_content):
                scores = self.parse_tokens(line_match.group(1), criteria)
                if scores:
                    result[option] = scores
                    break
        logger.debug("Extracted scores for %d/%d options", len(result), len(options))
        return result

    def extract_any(self, raw_content: str) -> dict[str, dict[str, int]]:
        """Like ``extract`` but with no declared options or criteria: every
        ``name: key=value ...`` line is taken as-is."""
        result: dict[str, dict[str, int]] = {}
        for line_match in _ANY_LINE_RE.finditer(raw_content or ""):
            option = " ".join(line_match.group(1).split())
            if option in result:
                continue
            scores: dict[str, int] = {}
            for token in _TOKEN_RE.finditer(line_match.group(2)):
                name = " ".join(token.group(1).split()).strip(" -*_'()")
                value = int(float(token.group(2)) + 0.5)
                scores[name] = int(clamp(value, self.scale.low, self.scale.high))
            if scores:
                result[option] = scores
        return result
