import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from src.retrieval.base import Retriever, rank_scores
from src.utils.file_utils import list_sorted_files, load_vector

logger = logging.getLogger(__name__)


class DenseRetriever(Retriever):
    """
    Dense retrieval using pre-computed document embeddings.

    The embedding directory holds one file per document, named like the
    document itself, each containing a single line of whitespace-separated
    reals. Query embeddings use the same format.
    """

    def __init__(self, embed_dir: str):
        self.embed_dir = Path(embed_dir)

        files = list_sorted_files(self.embed_dir)
        if not files:
            raise FileNotFoundError(f"No document embeddings found in {self.embed_dir}")

        logger.info(f"Loading document embeddings from {self.embed_dir}")
        self.doc_ids = [p.name for p in files]
        vectors = [load_vector(p) for p in tqdm(files, desc="Loading embeddings", disable=len(files) < 1000)]

        self.dimension = len(vectors[0])
        for doc_id, vec in zip(self.doc_ids, vectors):
            if len(vec) != self.dimension:
                raise ValueError(
                    f"Embedding for {doc_id} has dimension {len(vec)}, expected {self.dimension}"
                )

        # Normalize once so retrieval is a single matrix-vector product
        matrix = np.vstack(vectors)
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        self.doc_embeddings = matrix / (norms + 1e-12)

        logger.info(f"Loaded {len(self.doc_ids)} document embeddings, dim={self.dimension}")

    def similarities(self, query_embedding: np.ndarray) -> Dict[str, float]:
        """Cosine similarity of the query to every document."""
        if len(query_embedding) != self.dimension:
            raise ValueError(
                f"Query embedding has dimension {len(query_embedding)}, expected {self.dimension}"
            )
        q_norm = query_embedding / (np.linalg.norm(query_embedding) + 1e-12)
        sims = self.doc_embeddings @ q_norm
        return {doc_id: float(s) for doc_id, s in zip(self.doc_ids, sims)}

    def retrieve(self, embedding_ref: Optional[Path], query_text: str = "") -> List[Tuple[str, float]]:
        if embedding_ref is None:
            raise ValueError("Dense retrieval needs a query embedding file")
        return rank_scores(self.similarities(load_vector(embedding_ref)))
