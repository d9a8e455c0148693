"""
Error taxonomy for the evaluation run.

Every error here is fatal to the batch except DegenerateQueryError, which the
experiment driver catches to exclude a query from NDCG aggregation.
"""

from typing import Optional


class EvaluationError(Exception):
    """Base class for all evaluation failures."""


class FormatError(EvaluationError):
    """
    The query corpus file does not follow the
    <query line> / <relevance line> / <blank line> layout.

    Fields:
        line_number: 1-based line number of the offending line (None at EOF)
        line: raw content of the offending line, if any
    """

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        self.line_number = line_number
        self.line = line
        location = f"line {line_number}: " if line_number is not None else ""
        detail = f" (got {line!r})" if line is not None else ""
        super().__init__(f"{location}{message}{detail}")


class MissingRelevanceError(EvaluationError):
    """A relevant document has no entry in the graded relevance mapping."""

    def __init__(self, doc_id: str, query_index: Optional[int] = None):
        self.doc_id = doc_id
        self.query_index = query_index
        super().__init__(f"No relevance rating for relevant document {doc_id!r} (query {query_index})")


class DegenerateQueryError(EvaluationError):
    """Ideal DCG is not strictly positive, so NDCG is undefined for the query."""

    def __init__(self, query_index: Optional[int] = None, reason: str = "no positively rated documents"):
        self.query_index = query_index
        super().__init__(f"Cannot compute NDCG for query {query_index}: {reason}")


class QueryAlignmentError(EvaluationError):
    """There is no query embedding file at the position of a corpus query."""

    def __init__(self, query_index: int, n_embeddings: int):
        self.query_index = query_index
        self.n_embeddings = n_embeddings
        super().__init__(
            f"Query {query_index} has no embedding file: only {n_embeddings} "
            f"query embedding files were found"
        )
