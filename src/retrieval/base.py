from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple


class Retriever(ABC):
    """
    Ranked retrieval for one query.

    Implementations return (doc_id, score) pairs sorted by non-increasing
    score and must be deterministic for identical inputs.
    """

    @abstractmethod
    def retrieve(self, embedding_ref: Optional[Path], query_text: str) -> List[Tuple[str, float]]:
        raise NotImplementedError


def rank_scores(scores: dict) -> List[Tuple[str, float]]:
    """Sort {doc_id: score} by descending score, ties by ascending doc_id."""
    return sorted(((doc_id, float(s)) for doc_id, s in scores.items()), key=lambda x: (-x[1], x[0]))
