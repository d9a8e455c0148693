"""
Recall/precision evaluation of a ranked retrieval list.

Points are sampled only at ranks holding a relevant document (the stair-step
sampling of the standard 11-point curve), then interpolated onto
RECALL_LEVELS working from the highest level down so that each level inherits
the next level's precision as a floor.
"""

import logging
from typing import Iterable, List, Sequence

import numpy as np

from src.evaluation.data_types import PerQueryCurve, RecallPrecisionPoint, RetrievalResult

logger = logging.getLogger(__name__)

# Standard recall levels at which interpolated precision is reported
RECALL_LEVELS = (0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)


def recall_precision_points(
        retrievals: RetrievalResult,
        relevant: Iterable[str],
) -> List[RecallPrecisionPoint]:
    """
    Walk the ranking and emit a point at every relevant rank.

    Args:
        retrievals: ranked (doc_id, score) pairs
        relevant: ids of the truly relevant documents

    Returns:
        Points with non-decreasing recall; empty if there are no relevant docs.
    """
    relevant = frozenset(relevant)
    n_relevant = len(relevant)
    points: List[RecallPrecisionPoint] = []
    if n_relevant == 0:
        return points

    hits = 0
    for rank, (doc_id, _score) in enumerate(retrievals, start=1):
        if doc_id not in relevant:
            continue
        hits += 1
        recall = hits / n_relevant
        precision = hits / rank
        logger.debug(f"{rank:4d} is relevant; Recall = {100 * recall:6.3f}%; Precision = {100 * precision:6.3f}%")
        points.append(RecallPrecisionPoint(rank=rank, recall=recall, precision=precision))
    return points


def interpolate_precision(points: Sequence[RecallPrecisionPoint]) -> np.ndarray:
    """
    Interpolated precision at each of RECALL_LEVELS.

    Level i takes the max of the level i+1 value and the best sampled
    precision with recall in [level_i, level_i+1); the top level is the
    closed interval [1.0, 1.0].
    """
    n_levels = len(RECALL_LEVELS)
    precisions = np.zeros(n_levels, dtype=np.float64)

    for i in range(n_levels - 1, -1, -1):
        lower = RECALL_LEVELS[i]
        is_top = i == n_levels - 1
        best = precisions[i + 1] if not is_top else 0.0
        for p in points:
            if p.recall < lower:
                continue
            if is_top or p.recall < RECALL_LEVELS[i + 1]:
                best = max(best, p.precision)
        precisions[i] = best

    return precisions


def evaluate_curve(retrievals: RetrievalResult, relevant: Iterable[str]) -> PerQueryCurve:
    points = recall_precision_points(retrievals, relevant)
    return PerQueryCurve(points=tuple(points), interpolated=interpolate_precision(points))


def average_precisions(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """Elementwise mean of interpolated precision vectors (zeros if none)."""
    if not vectors:
        return np.zeros(len(RECALL_LEVELS), dtype=np.float64)
    return np.mean(np.vstack(vectors), axis=0)
