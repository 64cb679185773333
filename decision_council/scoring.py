"""Score-matrix primitives shared by the decision methods and the MCDA layer."""

from collections.abc import Mapping, Sequence

import numpy as np

# Neutral mid-point of the 0-10 scale, used wherever a cell has no score.
DEFAULT_SCORE = 5.0

# voter id -> option -> criterion -> score
Votes = Mapping[str, Mapping[str, Mapping[str, float]]]
ScoreTable = dict[str, dict[str, float]]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def average_votes(
    votes: Votes,
    options: Sequence[str],
    criteria: Sequence[str],
    *,
    impute_missing: bool = True,
    default: float = DEFAULT_SCORE,
) -> ScoreTable:
    """Average every voter's score per option and criterion.

    With ``impute_missing`` a voter who left a cell blank contributes ``default`` to that
    cell's mean. Without it the blank is left out of the mean, and a cell that no voter
    scored at all falls back to ``default``.
    """
    averages: ScoreTable = {}
    for option in options:
        averages[option] = {}
        for criterion in criteria:
            cell: list[float] = []
            for ballot in votes.values():
                value = ballot.get(option, {}).get(criterion)
                if value is not None:
                    cell.append(float(value))
                elif impute_missing:
                    cell.append(default)
            averages[option][criterion] = float(np.mean(cell)) if cell else default
    return averages


def fill_score_table(
    scores: Mapping[str, Mapping[str, float]] | None,
    options: Sequence[str],
    criteria: Sequence[str],
    default: float = DEFAULT_SCORE,
) -> ScoreTable:
    """Return a dense copy of a sparse ``scores[option][criterion]`` table."""
    scores = scores or {}
    return {
        option: {
            criterion: float(scores.get(option, {}).get(criterion, default))
            for criterion in criteria
        }
        for option in options
    }


def to_matrix(table: Mapping[str, Mapping[str, float]], options: Sequence[str], criteria: Sequence[str]) -> np.ndarray:
    """Dense table -> (options x criteria) float array."""
    return np.array(
        [[float(table[o][c]) for c in criteria] for o in options],
        dtype=float,
    ).reshape(len(options), len(criteria))


def normalize_weights(weights: Sequence[float]) -> np.ndarray:
    """Scale weights so they sum to 1.

    Raises:
        ValueError: If the weights do not have a positive total.
    """
    arr = np.asarray(weights, dtype=float)
    total = arr.sum()
    if not np.isfinite(total) or total <= 0:
        raise ValueError(f"Total criterion weight must be positive, got {total}")
    return arr / total


def column_normalize(matrix: np.ndarray) -> np.ndarray:
    """Divide each cell by its column sum. Zero-sum columns become 0."""
    totals = matrix.sum(axis=0)
    safe = np.where(totals > 0, totals, 1.0)
    return np.where(totals > 0, matrix / safe, 0.0)


def vector_normalize(matrix: np.ndarray) -> np.ndarray:
    """Divide each cell by its column's Euclidean norm. Zero-norm columns become 0."""
    norms = np.sqrt((matrix ** 2).sum(axis=0))
    safe = np.where(norms > 0, norms, 1.0)
    return np.where(norms > 0, matrix / safe, 0.0)


def min_max_normalize(matrix: np.ndarray) -> np.ndarray:
    """Linear higher-is-better rescale of each column to [0, 1]. Constant columns become 1."""
    low = matrix.min(axis=0)
    span = matrix.max(axis=0) - low
    safe = np.where(span > 0, span, 1.0)
    return np.where(span > 0, (matrix - low) / safe, 1.0)


def rank_descending(options: Sequence[str], scores: Mapping[str, float]) -> list[str]:
    """Order options by score, highest first. Ties keep input order."""
    return sorted(options, key=lambda o: -scores[o])
