from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

# A ranked retrieval list: (doc_id, score) sorted by non-increasing score.
RetrievalResult = Sequence[Tuple[str, float]]


class RelevanceMode(Enum):
    """How the relevance line of each query block is interpreted."""
    BINARY = "binary"
    GRADED = "graded"


@dataclass(frozen=True)
class Query:
    """
    One query block of the corpus file.

    Fields:
        index: 0-based position in the corpus file
        text: query text line
        embedding_ref: path of the pre-computed query embedding file
        relevant_docs: relevant document ids, in file order, without duplicates
        ratings: doc_id -> graded relevance (graded mode only)
    """
    index: int
    text: str
    embedding_ref: Optional[Path]
    relevant_docs: Tuple[str, ...]
    ratings: Optional[Dict[str, float]] = None

    @property
    def relevant_set(self) -> frozenset:
        return frozenset(self.relevant_docs)

    @property
    def is_graded(self) -> bool:
        return self.ratings is not None


@dataclass(frozen=True)
class RecallPrecisionPoint:
    """Recall and precision after thresholding at a relevant document's rank."""
    rank: int
    recall: float
    precision: float


@dataclass(frozen=True)
class PerQueryCurve:
    """Sampled RP points of one query plus precision on the 11 recall levels."""
    points: Tuple[RecallPrecisionPoint, ...]
    interpolated: np.ndarray


@dataclass(frozen=True)
class QueryOutcome:
    """
    Everything the driver keeps from evaluating one query.

    Fields:
        query: the evaluated query
        curve: recall/precision curve
        ndcg: NDCG@1..K (None in binary mode or for a degenerate graded query)
        run_entry: rank-scored top of the retrieval list, for summary metrics
    """
    query: Query
    curve: PerQueryCurve
    ndcg: Optional[np.ndarray]
    run_entry: Dict[str, float]


@dataclass(frozen=True)
class AggregateResult:
    """Averages over the whole run, ready to be written out."""
    mode: RelevanceMode
    average_precisions: np.ndarray
    average_ndcg: Optional[np.ndarray]
    n_queries: int
    n_ndcg_queries: int
    summary: Dict[str, float] = field(default_factory=dict)
