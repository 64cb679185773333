"""Standalone multi-criteria decision analysis: AHP, ELECTRE, TOPSIS, PROMETHEE II, Grey Theory.

Every function is pure. Input is an explicit decision matrix ``scores[option][criterion]``;
no sessions, agents or storage are involved. Missing cells default to 5.0 (mid-point of
the 0-10 scale) and criterion weights are normalised to sum to 1 before computing.
"""

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from decision_council.errors import McdaValidationError
from decision_council.scoring import (
    DEFAULT_SCORE,
    ScoreTable,
    column_normalize,
    fill_score_table,
    min_max_normalize,
    normalize_weights,
    rank_descending,
    to_matrix,
    vector_normalize,
)

logger = logging.getLogger(__name__)

CONCORDANCE_THRESHOLD = 0.6   # c* for ELECTRE
DISCORDANCE_THRESHOLD = 0.4   # d* for ELECTRE
DISTINGUISHING_COEFFICIENT = 0.5  # zeta for Grey Theory
# Normalises pairwise differences in ELECTRE and PROMETHEE (0-10 input scale).
SCORE_RANGE = 10.0


@dataclass
class McdaCriterion:
    name: str
    weight: float = 1.0
    is_benefit: bool = True  # TOPSIS only: False means lower is better


_TRUE_WORDS = frozenset({"true", "yes", "1", "benefit"})
_FALSE_WORDS = frozenset({"false", "no", "0", "cost"})


def _parse_flag(value: Any, criterion: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise McdaValidationError(f"Criterion '{criterion}' has an unreadable is_benefit flag: {value!r}.")


@dataclass
class McdaInput:
    options: list[str]
    criteria: list[McdaCriterion]
    scores: dict[str, dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McdaInput":
        """Build from a plain mapping (YAML/JSON). Accepts ``is_benefit`` or ``isBenefit``.

        Raises:
            McdaValidationError: On a criteria entry that is neither a name nor a mapping,
                an unreadable benefit flag, or a scores row that is not a mapping.
        """
        criteria = []
        for raw in data.get("criteria") or []:
            if isinstance(raw, str):
                criteria.append(McdaCriterion(name=raw))
                continue
            if not isinstance(raw, Mapping):
                raise McdaValidationError(f"Criteria entries must be names or mappings, got {raw!r}.")
            name = str(raw.get("name", ""))
            is_benefit = raw.get("is_benefit", raw.get("isBenefit", True))
            criteria.append(
                McdaCriterion(
                    name=name,
                    weight=float(raw.get("weight", 1.0)),
                    is_benefit=_parse_flag(is_benefit, name),
                )
            )
        raw_scores = data.get("scores") or {}
        if not isinstance(raw_scores, Mapping):
            raise McdaValidationError("Scores must be a mapping of option to criterion scores.")
        scores = {}
        for option, row in raw_scores.items():
            if row is None:
                row = {}
            if not isinstance(row, Mapping):
                raise McdaValidationError(f"Scores for option '{option}' must be a mapping, got {row!r}.")
            scores[str(option)] = {str(c): v for c, v in row.items()}
        return cls(
            options=[str(o) for o in data.get("options") or []],
            criteria=criteria,
            scores=scores,
        )


@dataclass
class McdaResult:
    method: str
    ranking: list[str]
    scores: dict[str, float]
    summary: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _Prepared:
    options: list[str]
    criteria: list[McdaCriterion]   # weights already normalised
    table: ScoreTable
    matrix: np.ndarray              # options x criteria
    weights: np.ndarray

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.criteria]


# ─── Validation & preparation ───────────────────────────────────────────────


def validate(mcda_input: McdaInput) -> None:
    """Reject degenerate input before any computation.

    Raises:
        McdaValidationError: On fewer than 2 distinct options, no criteria, blank or
            duplicate criterion names, negative or non-positive total weight, missing
            score table, or non-numeric scores.
    """
    options = list(dict.fromkeys(mcda_input.options or []))
    if len(options) < 2:
        raise McdaValidationError("At least 2 options are required.")
    if any(not str(o).strip() for o in options):
        raise McdaValidationError("Option names cannot be blank.")

    criteria = mcda_input.criteria or []
    if not criteria:
        raise McdaValidationError("At least 1 criterion is required.")
    names = [c.name for c in criteria]
    if any(not n or not n.strip() for n in names):
        raise McdaValidationError("Criterion names cannot be blank.")
    if len(set(names)) != len(names):
        raise McdaValidationError("Criterion names must be unique.")

    weights = [c.weight for c in criteria]
    if any(not isinstance(w, (int, float)) or not math.isfinite(w) for w in weights):
        raise McdaValidationError("Criterion weights must be finite numbers.")
    if any(w < 0 for w in weights):
        raise McdaValidationError("Criterion weights cannot be negative.")
    if sum(weights) <= 0:
        raise McdaValidationError("Total criterion weight must be positive.")

    if not mcda_input.scores:
        raise McdaValidationError("Scores must be provided.")
    for option, row in mcda_input.scores.items():
        for criterion, value in (row or {}).items():
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise McdaValidationError(
                    f"Score for {option!r}/{criterion!r} is not a number: {value!r}"
                ) from exc
            if not math.isfinite(number):
                raise McdaValidationError(f"Score for {option!r}/{criterion!r} is not finite.")


def _prepare(mcda_input: McdaInput) -> _Prepared:
    validate(mcda_input)
    options = list(dict.fromkeys(mcda_input.options))
    weights = normalize_weights([c.weight for c in mcda_input.criteria])
    criteria = [
        McdaCriterion(c.name, float(w), c.is_benefit)
        for c, w in zip(mcda_input.criteria, weights)
    ]
    names = [c.name for c in criteria]

    unknown = set(mcda_input.scores) - set(options)
    if unknown:
        logger.debug("Ignoring scores for unknown options: %s", sorted(unknown))

    table = fill_score_table(mcda_input.scores, options, names, DEFAULT_SCORE)
    return _Prepared(
        options=options,
        criteria=criteria,
        table=table,
        matrix=to_matrix(table, options, names),
        weights=weights,
    )


# ─── Formatting helpers ─────────────────────────────────────────────────────


def _signed(value: float) -> str:
    if value == 0:
        return "0.0000"
    return f"{value:+.4f}"


def _as_row_map(options: list[str], names: list[str], matrix: np.ndarray) -> dict[str, dict[str, float]]:
    return {
        o: {n: float(matrix[i, j]) for j, n in enumerate(names)}
        for i, o in enumerate(options)
    }


def _as_pair_map(options: list[str], matrix: np.ndarray) -> dict[str, dict[str, float]]:
    return {
        a: {b: float(matrix[i, j]) for j, b in enumerate(options)}
        for i, a in enumerate(options)
    }


def _ranking_block(ranking: list[str], scores: Mapping[str, float], label: str) -> list[str]:
    lines = ["", f"**{label}:**"]
    lines += [f"{i}. {o} ({_signed(scores[o])})" for i, o in enumerate(ranking, start=1)]
    return lines


def _table_header(first: str, columns: list[str]) -> list[str]:
    return [
        "| " + " | ".join([first, *columns]) + " |",
        "|" + "---|" * (len(columns) + 1),
    ]


# ─── Algorithms ─────────────────────────────────────────────────────────────


def run_ahp(mcda_input: McdaInput) -> McdaResult:
    """Analytic Hierarchy Process: column-normalise, then weighted sum of priorities.

    Recommended input scale is the Saaty 1-9 scale.
    """
    p = _prepare(mcda_input)
    norm = column_normalize(p.matrix)
    priority = norm @ p.weights
    scores = {o: float(priority[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)
    norm_map = _as_row_map(p.options, p.names, norm)

    lines = ["**AHP Priority Matrix:**", ""]
    lines += _table_header("Option", [f"{c.name} (w={c.weight:.3f})" for c in p.criteria] + ["**Priority**"])
    for o in ranking:
        cells = [f"{norm_map[o][n]:.4f}" for n in p.names]
        lines.append("| " + " | ".join([o, *cells, f"**{scores[o]:.4f}**"]) + " |")
    lines += _ranking_block(ranking, scores, "AHP Ranking")

    return McdaResult(
        method="AHP",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "normalised_matrix": norm_map,
            "weights": {c.name: c.weight for c in p.criteria},
        },
    )


def run_electre(mcda_input: McdaInput) -> McdaResult:
    """ELECTRE outranking: concordance/discordance matrices and net outranking score."""
    p = _prepare(mcda_input)
    n = len(p.options)
    concordance = np.ones((n, n))
    discordance = np.zeros((n, n))
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            a, b = p.matrix[i], p.matrix[j]
            concordance[i, j] = float(p.weights[a >= b].sum())
            discordance[i, j] = float(np.max(np.maximum(b - a, 0.0)) / SCORE_RANGE) if len(a) else 0.0

    outranks = (concordance >= CONCORDANCE_THRESHOLD) & (discordance <= DISCORDANCE_THRESHOLD)
    np.fill_diagonal(outranks, False)
    net = outranks.sum(axis=1) - outranks.sum(axis=0)
    scores = {o: float(net[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)

    relations = [
        [p.options[i], p.options[j]]
        for i in range(n) for j in range(n) if outranks[i, j]
    ]

    lines = [
        f"**ELECTRE Outranking Analysis (c*={CONCORDANCE_THRESHOLD}, d*={DISCORDANCE_THRESHOLD}):**",
        "",
        "Concordance Matrix:",
    ]
    lines += _table_header("", p.options)
    for i, a in enumerate(p.options):
        lines.append("| " + " | ".join([a, *(f"{concordance[i, j]:.2f}" for j in range(n))]) + " |")
    lines += ["", "Discordance Matrix:"]
    lines += _table_header("", p.options)
    for i, a in enumerate(p.options):
        lines.append("| " + " | ".join([a, *(f"{discordance[i, j]:.2f}" for j in range(n))]) + " |")
    lines += _ranking_block(ranking, scores, "ELECTRE Ranking (by net outranking score)")

    return McdaResult(
        method="ELECTRE",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "concordance_matrix": _as_pair_map(p.options, concordance),
            "discordance_matrix": _as_pair_map(p.options, discordance),
            "outranking_relations": relations,
        },
    )


def run_topsis(mcda_input: McdaInput) -> McdaResult:
    """TOPSIS: rank by closeness coefficient to the positive ideal solution.

    Cost criteria (``is_benefit=False``) take the minimum as ideal.
    """
    p = _prepare(mcda_input)
    weighted = vector_normalize(p.matrix) * p.weights
    benefit = np.array([c.is_benefit for c in p.criteria], dtype=bool)
    pis = np.where(benefit, weighted.max(axis=0), weighted.min(axis=0))
    nis = np.where(benefit, weighted.min(axis=0), weighted.max(axis=0))
    d_plus = np.sqrt(((weighted - pis) ** 2).sum(axis=1))
    d_minus = np.sqrt(((weighted - nis) ** 2).sum(axis=1))
    total = d_plus + d_minus
    closeness = np.divide(d_minus, total, out=np.zeros_like(total), where=total > 0)

    scores = {o: float(closeness[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)
    index = {o: i for i, o in enumerate(p.options)}

    lines = ["**TOPSIS Closeness Analysis:**", ""]
    columns = [f"{c.name} ({'B' if c.is_benefit else 'C'})" for c in p.criteria] + ["D+", "D-", "**C***"]
    lines += _table_header("Option", columns)
    for o in ranking:
        i = index[o]
        cells = [f"{p.table[o][n]:.2f}" for n in p.names]
        lines.append(
            "| " + " | ".join([o, *cells, f"{d_plus[i]:.4f}", f"{d_minus[i]:.4f}", f"**{closeness[i]:.4f}**"]) + " |"
        )
    lines += _ranking_block(ranking, scores, "TOPSIS Ranking (higher C* = closer to ideal)")

    return McdaResult(
        method="TOPSIS",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "distance_to_pis": {o: float(d_plus[i]) for o, i in index.items()},
            "distance_to_nis": {o: float(d_minus[i]) for o, i in index.items()},
            "positive_ideal_solution": {n: float(pis[j]) for j, n in enumerate(p.names)},
            "negative_ideal_solution": {n: float(nis[j]) for j, n in enumerate(p.names)},
        },
    )


def run_promethee(mcda_input: McdaInput) -> McdaResult:
    """PROMETHEE II with the linear preference function P(d) = max(d, 0) / 10."""
    p = _prepare(mcda_input)
    n = len(p.options)
    preference = np.zeros((n, n))
    for i in range(n):
        for j in range(n):
            if i != j:
                diff = p.matrix[i] - p.matrix[j]
                preference[i, j] = float((p.weights * np.maximum(diff, 0.0) / SCORE_RANGE).sum())

    comparisons = n - 1 if n > 1 else 1
    phi_plus = preference.sum(axis=1) / comparisons
    phi_minus = preference.sum(axis=0) / comparisons
    net = phi_plus - phi_minus

    scores = {o: float(net[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)
    index = {o: i for i, o in enumerate(p.options)}

    lines = ["**PROMETHEE II Net Flow Analysis:**", ""]
    lines += _table_header("Option", ["φ+ (Leaving)", "φ− (Entering)", "**φ (Net)**"])
    for o in ranking:
        i = index[o]
        lines.append(f"| {o} | {phi_plus[i]:.4f} | {phi_minus[i]:.4f} | **{_signed(net[i])}** |")
    lines += _ranking_block(ranking, scores, "PROMETHEE II Ranking (higher φ = more preferred)")

    return McdaResult(
        method="PROMETHEE",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "positive_flow": {o: float(phi_plus[i]) for o, i in index.items()},
            "negative_flow": {o: float(phi_minus[i]) for o, i in index.items()},
            "preference_matrix": _as_pair_map(p.options, preference),
        },
    )


def run_grey_theory(mcda_input: McdaInput, zeta: float = DISTINGUISHING_COEFFICIENT) -> McdaResult:
    """Grey Relational Analysis against the ideal reference sequence (all 1.0)."""
    p = _prepare(mcda_input)
    norm = min_max_normalize(p.matrix)
    delta = np.abs(1.0 - norm)
    delta_min = float(delta.min())
    delta_max = float(delta.max())
    denominator = delta + zeta * delta_max
    coefficients = np.divide(
        np.full_like(delta, delta_min + zeta * delta_max),
        denominator,
        out=np.ones_like(delta),
        where=denominator > 0,
    )
    grades = coefficients @ p.weights

    scores = {o: float(grades[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)
    grc = _as_row_map(p.options, p.names, coefficients)

    lines = [f"**Grey Relational Analysis (ζ={zeta}):**", ""]
    lines += _table_header("Option", [f"GRC({n})" for n in p.names] + ["**GRG**"])
    for o in ranking:
        cells = [f"{grc[o][n]:.4f}" for n in p.names]
        lines.append("| " + " | ".join([o, *cells, f"**{scores[o]:.4f}**"]) + " |")
    lines += _ranking_block(ranking, scores, "Grey Theory Ranking (higher GRG = closer to ideal)")

    return McdaResult(
        method="GreyTheory",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "grey_relational_coefficients": grc,
            "normalised_matrix": _as_row_map(p.options, p.names, norm),
        },
    )


def run_weighted_sum(mcda_input: McdaInput) -> McdaResult:
    """Simple additive weighting on the raw 0-10 scores. Every criterion counts as benefit."""
    p = _prepare(mcda_input)
    totals = p.matrix @ p.weights
    scores = {o: float(totals[i]) for i, o in enumerate(p.options)}
    ranking = rank_descending(p.options, scores)

    lines = ["**Voting & Weighted Scoring Matrix:**", ""]
    lines += _table_header("Option", [f"{c.name} ({c.weight:.0%})" for c in p.criteria] + ["**Score**"])
    for o in ranking:
        cells = [f"{p.table[o][n]:.1f}" for n in p.names]
        lines.append("| " + " | ".join([o, *cells, f"**{scores[o]:.2f}**"]) + " |")
    lines += ["", "**Ranking:**"]
    lines += [f"{i}. {o} ({scores[o]:.2f})" for i, o in enumerate(ranking, start=1)]

    return McdaResult(
        method="WeightedSum",
        ranking=ranking,
        scores=scores,
        summary="\n".join(lines),
        details={
            "average_scores": p.table,
            "weights": {c.name: c.weight for c in p.criteria},
        },
    )


ALGORITHMS: dict[str, Callable[[McdaInput], McdaResult]] = {
    "weighted_sum": run_weighted_sum,
    "ahp": run_ahp,
    "electre": run_electre,
    "topsis": run_topsis,
    "promethee": run_promethee,
    "grey": run_grey_theory,
}


def run(method: str, mcda_input: McdaInput) -> McdaResult:
    """Dispatch by algorithm name (``ahp``, ``electre``, ``topsis``, ``promethee``, ``grey``,
    ``weighted_sum``)."""
    key = method.lower().replace("-", "_")
    if key in ("grey_theory", "gra"):
        key = "grey"
    elif key in ("saw", "wsm"):
        key = "weighted_sum"
    try:
        algorithm = ALGORITHMS[key]
    except KeyError:
        raise McdaValidationError(
            f"Unknown MCDA method {method!r}; expected one of {', '.join(ALGORITHMS)}"
        ) from None
    return algorithm(mcda_input)
