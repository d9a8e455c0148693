import logging
from typing import Dict, Iterable, Mapping, Sequence, Tuple

import pytrec_eval

logger = logging.getLogger(__name__)

SUMMARY_MEASURES = ('map', 'recip_rank', 'P_10')

# Retrieval depth kept per query for summary measures
SUMMARY_DEPTH = 1000


def get_metric(
        qrel_dict: Mapping[str, Mapping[str, int]],
        run_dict: Mapping[str, Mapping[str, float]],
        metric: str = 'map',
) -> float:
    """Mean of a single trec_eval measure over the queries in qrel_dict."""
    return summary_metrics(qrel_dict, run_dict, (metric,)).get(metric, 0.0)


def summary_metrics(
        qrel_dict: Mapping[str, Mapping[str, int]],
        run_dict: Mapping[str, Mapping[str, float]],
        measures: Iterable[str] = SUMMARY_MEASURES,
) -> Dict[str, float]:
    """
    Aggregate trec_eval measures for a run.

    Args:
        qrel_dict: {query_id: {doc_id: relevance}}
        run_dict: {query_id: {doc_id: score}}
        measures: pytrec_eval measure names

    Returns:
        {measure: aggregated value}; empty if no query has judgments.
    """
    measures = set(measures)
    # Queries without any relevant document carry no information for trec_eval
    qrel_dict = {qid: dict(rels) for qid, rels in qrel_dict.items() if rels}
    if not qrel_dict:
        return {}

    # Only init evaluator with the measures we care about
    evaluator = pytrec_eval.RelevanceEvaluator(qrel_dict, measures)
    results = evaluator.evaluate({qid: dict(docs) for qid, docs in run_dict.items()})
    if not results:
        return {}

    aggregated = {}
    for metric in sorted(measures):
        values = [query_meas[metric] for query_meas in results.values()]
        aggregated[metric] = pytrec_eval.compute_aggregated_measure(metric, values)
    return aggregated


def rank_run_entry(
        retrievals: Sequence[Tuple[str, float]],
        depth: int = SUMMARY_DEPTH,
) -> Dict[str, float]:
    """
    Run-dict entry for the top `depth` retrievals of one query.

    trec_eval re-sorts by score and breaks ties by doc id descending, so the
    retriever's scores are replaced by (length - rank). The order trec_eval sees
    is then exactly the ranking that was evaluated.
    """
    top = retrievals[:depth]
    n = len(top)
    return {doc_id: float(n - rank) for rank, (doc_id, _score) in enumerate(top)}


def build_trec_dicts(
        judged_runs: Iterable[Tuple[str, Iterable[str], Mapping[str, float]]],
) -> Tuple[Dict[str, Dict[str, int]], Dict[str, Dict[str, float]]]:
    """
    Convert (query_id, relevant doc ids, run entry) triples into the qrel and
    run dictionaries pytrec_eval expects. Every listed relevant doc gets
    relevance 1, whatever its graded rating.
    """
    qrel_dict: Dict[str, Dict[str, int]] = {}
    run_dict: Dict[str, Dict[str, float]] = {}
    for qid, relevant, run_entry in judged_runs:
        qrel_dict[qid] = {doc_id: 1 for doc_id in relevant}
        run_dict[qid] = dict(run_entry)
    return qrel_dict, run_dict
