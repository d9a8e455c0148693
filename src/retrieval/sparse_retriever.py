import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from sklearn.feature_extraction.text import TfidfVectorizer
from tqdm import tqdm

from src.retrieval.base import Retriever, rank_scores
from src.utils.file_utils import list_sorted_files

logger = logging.getLogger(__name__)


class SparseRetriever(Retriever):
    """
    TF-IDF vector-space retrieval over a directory of text documents.

    Document ids are file names. Rows produced by TfidfVectorizer are
    L2-normalized, so a dot product is the cosine similarity.
    """

    def __init__(self, corpus_dir: str, lowercase: bool = True, stop_words: Optional[str] = None):
        self.corpus_dir = Path(corpus_dir)

        files = list_sorted_files(self.corpus_dir)
        if not files:
            raise FileNotFoundError(f"No documents found in {self.corpus_dir}")

        self.doc_ids = [p.name for p in files]
        texts = []
        for p in tqdm(files, desc="Reading corpus", disable=len(files) < 1000):
            with open(p, "r", encoding="utf-8", errors="ignore") as f:
                texts.append(f.read())

        self.vectorizer = TfidfVectorizer(lowercase=lowercase, stop_words=stop_words)
        self.doc_matrix = self.vectorizer.fit_transform(texts)

        logger.info(
            f"Indexed {len(self.doc_ids)} documents from {self.corpus_dir}, "
            f"vocabulary size={len(self.vectorizer.vocabulary_)}"
        )

    def similarities(self, query_text: str) -> Dict[str, float]:
        """Cosine similarity of the query to every document (zeros included)."""
        q_vec = self.vectorizer.transform([query_text])
        sims = (self.doc_matrix @ q_vec.T).toarray().ravel()
        return {doc_id: float(s) for doc_id, s in zip(self.doc_ids, sims)}

    def retrieve(self, embedding_ref: Optional[Path], query_text: str) -> List[Tuple[str, float]]:
        # Only documents sharing at least one term with the query are retrieved
        scores = {doc_id: s for doc_id, s in self.similarities(query_text).items() if s > 0}
        return rank_scores(scores)
