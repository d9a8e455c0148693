"""
Hybrid dense + sparse retrieval.

    score(d) = lam * sparse(d) + (1 - lam) * dense(d)

lam = 0 is pure dense retrieval and lam = 1 pure TF-IDF retrieval. Both
component scores are cosine similarities, so they are already on a
comparable scale and are combined without further normalization.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from src.retrieval.base import Retriever, rank_scores
from src.retrieval.dense_retriever import DenseRetriever
from src.retrieval.sparse_retriever import SparseRetriever
from src.utils.file_utils import load_vector

logger = logging.getLogger(__name__)


class HybridRetriever(Retriever):

    def __init__(self, dense: DenseRetriever, sparse: SparseRetriever, lam: float = 0.0):
        if not 0.0 <= lam <= 1.0:
            raise ValueError(f"Hybrid weight lambda must be in [0, 1], got {lam}")
        self.dense = dense
        self.sparse = sparse
        self.lam = lam

        missing = set(sparse.doc_ids) - set(dense.doc_ids)
        if missing:
            logger.warning(f"{len(missing)} documents have no embedding and get a dense score of 0")

    @classmethod
    def from_directories(cls, corpus_dir: str, embed_dir: str, lam: float = 0.0) -> "HybridRetriever":
        return cls(DenseRetriever(embed_dir), SparseRetriever(corpus_dir), lam)

    def retrieve(self, embedding_ref: Optional[Path], query_text: str) -> List[Tuple[str, float]]:
        dense_scores = {}
        if self.lam < 1.0:
            if embedding_ref is None:
                raise ValueError("Hybrid retrieval with lambda < 1 needs a query embedding file")
            dense_scores = self.dense.similarities(load_vector(embedding_ref))
        sparse_scores = self.sparse.similarities(query_text) if self.lam > 0.0 else {}

        combined = {}
        for doc_id in set(dense_scores) | set(sparse_scores):
            combined[doc_id] = (
                self.lam * sparse_scores.get(doc_id, 0.0)
                + (1.0 - self.lam) * dense_scores.get(doc_id, 0.0)
            )
        return rank_scores(combined)
