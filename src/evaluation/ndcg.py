"""
Graded-relevance NDCG at ranks 1..K.

DCG arrays here are cumulative: dcg[r] is DCG@(r+1), the discounted gain of
the whole prefix, not the isolated term at rank r+1. The ideal DCG array is
built the same way, so normalization divides prefix by prefix:

    dcg@1 = g@1
    dcg@n = dcg@(n-1) + g@n / log2(n + 1)      for n >= 2
    ndcg@n = dcg@n / ideal_dcg@n
"""

import logging
from typing import Mapping, Optional

import numpy as np

from src.evaluation.data_types import RetrievalResult
from src.evaluation.errors import DegenerateQueryError, MissingRelevanceError

logger = logging.getLogger(__name__)

# Maximum N for computing NDCG@N
DEFAULT_NDCG_LIMIT = 10


def gain_vector(
        retrievals: RetrievalResult,
        ratings: Mapping[str, float],
        k: int = DEFAULT_NDCG_LIMIT,
        relevant: Optional[frozenset] = None,
        query_index: Optional[int] = None,
) -> np.ndarray:
    """
    Gain at each of the top k ranks.

    Args:
        retrievals: ranked (doc_id, score) pairs
        ratings: doc_id -> graded relevance of the relevant documents
        k: rank limit
        relevant: relevant doc ids; defaults to the keys of ratings
        query_index: only used in error messages

    Returns:
        Array of length k; ranks past the end of the ranking are 0.
    """
    if relevant is None:
        relevant = frozenset(ratings)

    gains = np.zeros(k, dtype=np.float64)
    for i, (doc_id, _score) in enumerate(retrievals[:k]):
        if doc_id not in relevant:
            continue
        if doc_id not in ratings:
            raise MissingRelevanceError(doc_id, query_index)
        gains[i] = float(ratings[doc_id])
    return gains


def cumulative_dcg(gains: np.ndarray) -> np.ndarray:
    """Cumulative discounted gain of every prefix of a gain vector."""
    gains = np.asarray(gains, dtype=np.float64)
    ranks = np.arange(1, len(gains) + 1)
    # log2(1 + 1) == 1, so rank 1 is undiscounted
    return np.cumsum(gains / np.log2(ranks + 1))


def ideal_gain_vector(ratings: Mapping[str, float], k: int = DEFAULT_NDCG_LIMIT) -> np.ndarray:
    """The k highest ratings in descending order, zero padded."""
    best = sorted((float(v) for v in ratings.values()), reverse=True)[:k]
    ideal = np.zeros(k, dtype=np.float64)
    ideal[:len(best)] = best
    return ideal


def ndcg_at_ranks(
        retrievals: RetrievalResult,
        ratings: Mapping[str, float],
        k: int = DEFAULT_NDCG_LIMIT,
        query_index: Optional[int] = None,
) -> np.ndarray:
    """
    NDCG@1..k for one query.

    Raises:
        DegenerateQueryError: if the ideal DCG is not strictly positive at
                              every rank (no relevant documents, or only
                              zero-rated ones).
        MissingRelevanceError: if a relevant document has no rating.
    """
    if not ratings:
        raise DegenerateQueryError(query_index, "no relevant documents")

    ideal_dcg = cumulative_dcg(ideal_gain_vector(ratings, k))
    if not np.all(ideal_dcg > 0):
        raise DegenerateQueryError(query_index, "ideal DCG is not positive")

    gains = gain_vector(retrievals, ratings, k, query_index=query_index)
    logger.debug(f"Ranked retrieval gains: {gains.tolist()}")
    dcg = cumulative_dcg(gains)
    logger.debug(f"DCGs: {dcg.tolist()}")
    logger.debug(f"Ideal DCGs: {ideal_dcg.tolist()}")

    ndcg = dcg / ideal_dcg
    logger.debug(f"NDCGs: {ndcg.tolist()}")
    return ndcg
