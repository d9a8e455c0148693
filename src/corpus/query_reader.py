"""
Query corpus reader.

The query file is a sequence of blocks:

    <query text>
    <relevance line>
    <blank line>

In binary mode the relevance line lists the relevant document file names
separated by whitespace. In graded mode it alternates file names and decimal
relevance scores:

    doc12 1.0 doc7 0.5 doc31 0.25

Queries are yielded lazily in file order, so a malformed block aborts the run
before any later query is evaluated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from src.evaluation.data_types import Query, RelevanceMode
from src.evaluation.errors import FormatError, QueryAlignmentError
from src.utils.file_utils import list_sorted_files

logger = logging.getLogger(__name__)


def parse_binary_relevance(line: str) -> Tuple[str, ...]:
    """Relevant doc ids in order of first appearance."""
    return tuple(dict.fromkeys(line.split()))


def parse_graded_relevance(line: str, line_number: Optional[int] = None) -> Tuple[Tuple[str, ...], Dict[str, float]]:
    """
    Parse alternating (doc_id, score) tokens.

    Returns:
        (relevant doc ids in order of first appearance, doc_id -> score).
        A repeated doc id keeps its last score.
    """
    tokens = line.split()
    if len(tokens) % 2 != 0:
        raise FormatError(
            f"graded relevance line has an odd number of tokens ({len(tokens)})",
            line_number, line,
        )

    ratings: Dict[str, float] = {}
    for doc_id, raw_score in zip(tokens[0::2], tokens[1::2]):
        try:
            ratings[doc_id] = float(raw_score)
        except ValueError:
            raise FormatError(f"unparsable relevance score {raw_score!r} for {doc_id!r}", line_number, line)
    return tuple(ratings.keys()), ratings


def parse_queries(
        lines: Iterable[str],
        mode: RelevanceMode = RelevanceMode.BINARY,
        embedding_refs: Optional[Sequence[Path]] = None,
) -> Iterator[Query]:
    """
    Yield Query objects from the lines of a query corpus.

    Args:
        lines: raw lines, with or without trailing newlines.
        mode: how to read the relevance line.
        embedding_refs: query embedding files in lexicographic order; the i-th
                        query gets the i-th file. None leaves refs unset.

    Raises:
        FormatError: on a missing relevance line, a malformed graded line or a
                     non-blank separator.
        QueryAlignmentError: if there are more queries than embedding files.
    """
    numbered = ((n, raw.rstrip("\r\n")) for n, raw in enumerate(lines, start=1))
    index = 0

    for line_number, text in numbered:
        # Tolerate extra blank lines between blocks and at end of file
        if not text.strip():
            continue

        try:
            rel_number, rel_line = next(numbered)
        except StopIteration:
            raise FormatError(f"query {index} has no relevance line", line_number, text)

        if mode is RelevanceMode.GRADED:
            relevant, ratings = parse_graded_relevance(rel_line, rel_number)
        else:
            relevant, ratings = parse_binary_relevance(rel_line), None

        embedding_ref = None
        if embedding_refs is not None:
            if index >= len(embedding_refs):
                raise QueryAlignmentError(index, len(embedding_refs))
            embedding_ref = Path(embedding_refs[index])

        # The separator must be blank or absent (EOF)
        separator = next(numbered, None)
        if separator is not None and separator[1].strip():
            raise FormatError(
                "could not find blank line after query, bad query file format",
                separator[0], separator[1],
            )

        yield Query(
            index=index,
            text=text,
            embedding_ref=embedding_ref,
            relevant_docs=relevant,
            ratings=ratings,
        )
        index += 1

    if embedding_refs is not None and index < len(embedding_refs):
        logger.warning(
            f"{len(embedding_refs) - index} query embedding files have no matching query "
            f"({index} queries, {len(embedding_refs)} embeddings)"
        )


def read_queries(
        query_file: str | Path,
        mode: RelevanceMode = RelevanceMode.BINARY,
        query_embedding_dir: Optional[str | Path] = None,
) -> Iterator[Query]:
    """Open a query corpus file and yield its queries in order."""
    embedding_refs: Optional[List[Path]] = None
    if query_embedding_dir is not None:
        embedding_refs = list_sorted_files(query_embedding_dir)
        logger.info(f"Found {len(embedding_refs)} query embedding files in {query_embedding_dir}")

    with open(query_file, "r", encoding="utf-8") as f:
        yield from parse_queries(f, mode, embedding_refs)
