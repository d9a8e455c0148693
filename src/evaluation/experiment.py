# src/evaluation/experiment.py

"""
Evaluation driver for hybrid retrieval experiments.

For every query of the corpus, in file order:

  1. ask the retriever for a ranking (query embedding file + query text)
  2. compute recall/precision points and the interpolated 11-point curve
  3. in graded mode, compute NDCG@1..K
  4. merge the outcome into an immutable RunAccumulator

The driver does no similarity computation itself. Binary and graded
experiments share this single loop; RelevanceMode selects the NDCG step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from src.corpus.query_reader import read_queries
from src.evaluation.data_types import AggregateResult, Query, QueryOutcome, RelevanceMode, RetrievalResult
from src.evaluation.errors import DegenerateQueryError
from src.evaluation.ndcg import DEFAULT_NDCG_LIMIT, ndcg_at_ranks
from src.evaluation.output_writer import write_results
from src.evaluation.recall_precision import average_precisions, evaluate_curve
from src.retrieval.base import Retriever
from src.retrieval.hybrid_retriever import HybridRetriever
from src.retrieval.metrics import build_trec_dicts, rank_run_entry, summary_metrics

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExperimentConfig:
    """
    Inputs of one experiment run.

    Fields:
      - corpus_dir: directory of document text files
      - embed_dir: directory of document embeddings, same names as documents
      - query_file: query corpus file (query / relevance / blank blocks)
      - query_embed_dir: directory of query embeddings, one file per query
      - lam: hybrid weight of the sparse score, in [0, 1]
      - out_file: recall/precision table path; other artifacts add suffixes
      - mode: binary or graded relevance
      - ndcg_limit: K for NDCG@1..K
    """
    corpus_dir: Path
    embed_dir: Path
    query_file: Path
    query_embed_dir: Path
    lam: float
    out_file: Path
    mode: RelevanceMode = RelevanceMode.BINARY
    ndcg_limit: int = DEFAULT_NDCG_LIMIT

    def __post_init__(self):
        if not 0.0 <= self.lam <= 1.0:
            raise ValueError(f"lambda must be in [0, 1], got {self.lam}")
        if self.ndcg_limit < 1:
            raise ValueError(f"ndcg_limit must be positive, got {self.ndcg_limit}")
        for name in ("corpus_dir", "embed_dir", "query_embed_dir"):
            if not Path(getattr(self, name)).is_dir():
                raise FileNotFoundError(f"{name} is not a directory: {getattr(self, name)}")
        if not Path(self.query_file).is_file():
            raise FileNotFoundError(f"Query file not found: {self.query_file}")


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RunAccumulator:
    """
    Per-run state, rebuilt (never mutated) after each query.

      - curves: interpolated precision vector of each query, in corpus order
      - ndcg_sum: running per-rank NDCG sum over NDCG-contributing queries
      - n_ndcg_queries: number of queries included in ndcg_sum
      - judged_runs: (query id, relevant docs, run entry) for summary metrics

    Retrieval lists themselves are never kept; run entries are cut to
    SUMMARY_DEPTH documents.
    """
    curves: Tuple[np.ndarray, ...] = ()
    ndcg_sum: Optional[np.ndarray] = None
    n_ndcg_queries: int = 0
    judged_runs: Tuple[Tuple[str, Tuple[str, ...], Dict[str, float]], ...] = ()

    def merge(self, outcome: QueryOutcome) -> "RunAccumulator":
        ndcg_sum, n_ndcg = self.ndcg_sum, self.n_ndcg_queries
        if outcome.ndcg is not None:
            ndcg_sum = outcome.ndcg.copy() if ndcg_sum is None else ndcg_sum + outcome.ndcg
            n_ndcg += 1
        judged = (f"Q{outcome.query.index}", outcome.query.relevant_docs, outcome.run_entry)
        return RunAccumulator(
            curves=self.curves + (outcome.curve.interpolated,),
            ndcg_sum=ndcg_sum,
            n_ndcg_queries=n_ndcg,
            judged_runs=self.judged_runs + (judged,),
        )

    @property
    def n_queries(self) -> int:
        return len(self.curves)

    def finalize(self, mode: RelevanceMode, ndcg_limit: int = DEFAULT_NDCG_LIMIT) -> AggregateResult:
        avg_precisions = average_precisions(self.curves)

        avg_ndcg = None
        if mode is RelevanceMode.GRADED:
            if self.n_ndcg_queries:
                avg_ndcg = self.ndcg_sum / self.n_ndcg_queries
            else:
                avg_ndcg = np.zeros(ndcg_limit, dtype=np.float64)

        return AggregateResult(
            mode=mode,
            average_precisions=avg_precisions,
            average_ndcg=avg_ndcg,
            n_queries=self.n_queries,
            n_ndcg_queries=self.n_ndcg_queries,
        )


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

class HybridExperiment:
    """
    Runs a retriever over a query corpus and aggregates RP and NDCG results.

    Typical use:
        experiment = HybridExperiment(retriever, RelevanceMode.GRADED)
        result = experiment.run(read_queries(query_file, RelevanceMode.GRADED, query_dir))
    """

    def __init__(
            self,
            retriever: Retriever,
            mode: RelevanceMode = RelevanceMode.BINARY,
            ndcg_limit: int = DEFAULT_NDCG_LIMIT,
            compute_summary: bool = True,
    ):
        self.retriever = retriever
        self.mode = mode
        self.ndcg_limit = ndcg_limit
        self.compute_summary = compute_summary

    def evaluate_query(self, query: Query, retrievals: RetrievalResult) -> QueryOutcome:
        """Evaluate one ranking against the query's judgments."""
        logger.info(f"{len(query.relevant_docs)} truly relevant documents.")
        curve = evaluate_curve(retrievals, query.relevant_set)

        ndcg = None
        if self.mode is RelevanceMode.GRADED:
            try:
                ndcg = ndcg_at_ranks(retrievals, query.ratings or {}, self.ndcg_limit, query.index)
            except DegenerateQueryError as e:
                logger.warning(f"{e}; excluded from NDCG averages")

        return QueryOutcome(
            query=query,
            curve=curve,
            ndcg=ndcg,
            run_entry=rank_run_entry(retrievals),
        )

    def step(self, accumulator: RunAccumulator, query: Query) -> RunAccumulator:
        """Retrieve for one query and merge its outcome into the accumulator."""
        ref_name = query.embedding_ref.name if query.embedding_ref is not None else query.index
        logger.info(f"Query {ref_name}: {query.text}")

        retrievals = self.retriever.retrieve(query.embedding_ref, query.text)
        logger.info(f"Returned {len(retrievals)} documents.")
        return accumulator.merge(self.evaluate_query(query, retrievals))

    def run(self, queries: Iterable[Query]) -> AggregateResult:
        accumulator = RunAccumulator()
        for query in tqdm(queries, desc="Evaluating queries", unit="query"):
            accumulator = self.step(accumulator, query)

        result = accumulator.finalize(self.mode, self.ndcg_limit)
        logger.info(f"Average interpolated precisions: {np.round(result.average_precisions, 4).tolist()}")
        if result.average_ndcg is not None:
            logger.info(
                f"Average NDCG over {result.n_ndcg_queries}/{result.n_queries} queries: "
                f"{np.round(result.average_ndcg, 4).tolist()}"
            )

        if self.compute_summary and accumulator.judged_runs:
            result = replace(result, summary=self.summarize(accumulator.judged_runs))
        return result

    @staticmethod
    def summarize(judged_runs: Iterable[Tuple[str, Iterable[str], Dict[str, float]]]) -> dict:
        """trec_eval summary measures (MAP, MRR, P@10) over the judged run entries."""
        qrel_dict, run_dict = build_trec_dicts(judged_runs)
        summary = summary_metrics(qrel_dict, run_dict)
        for name, value in summary.items():
            logger.info(f"{name:<12}: {value:.4f}")
        return summary


def run_experiment(config: ExperimentConfig, retriever: Optional[Retriever] = None) -> Tuple[AggregateResult, List[Path]]:
    """
    Full batch run: build the retriever, evaluate every query, write artifacts.

    Returns:
        (aggregate result, paths of the written artifacts)
    """
    if retriever is None:
        retriever = HybridRetriever.from_directories(str(config.corpus_dir), str(config.embed_dir), config.lam)

    experiment = HybridExperiment(retriever, config.mode, config.ndcg_limit)
    queries = read_queries(config.query_file, config.mode, config.query_embed_dir)
    result = experiment.run(queries)

    written = write_results(result, config.out_file, title=f"Hybrid lambda={config.lam}")
    return result, written
