#!/usr/bin/env python3
# scripts/run_hybrid_experiment.py

"""
Evaluate hybrid dense/sparse retrieval on a query corpus with binary
relevance judgments and write an interpolated recall/precision curve.

Usage:
  python -m scripts.run_hybrid_experiment CORPUS_DIR EMBED_DIR QUERIES QUERY_DIR LAMBDA OUTFILE

  CORPUS_DIR  directory of document text files
  EMBED_DIR   directory of document embeddings, one file per document with the
              same name as the document (a line of space-separated reals)
  QUERIES     query file: query text / relevant docs / blank line, repeated
  QUERY_DIR   directory of query embeddings, one file per query, matched to
              queries by sorted file name
  LAMBDA      weight of the sparse TF-IDF score in [0, 1] (0 = dense only)
  OUTFILE     recall/precision data; OUTFILE.gplot is the gnuplot script
"""

import argparse
import logging
import sys
from pathlib import Path

from src.evaluation.data_types import RelevanceMode
from src.evaluation.errors import EvaluationError
from src.evaluation.experiment import ExperimentConfig, run_experiment

logger = logging.getLogger(__name__)


def build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("corpus_dir", type=Path, help="Directory of document text files")
    parser.add_argument("embed_dir", type=Path, help="Directory of document embedding files")
    parser.add_argument("queries", type=Path, help="Query file with relevance judgments")
    parser.add_argument("query_dir", type=Path, help="Directory of query embedding files")
    parser.add_argument("lam", type=float, metavar="lambda", help="Hybrid weight of the sparse score")
    parser.add_argument("out_file", type=Path, help="Output path for the recall/precision data")
    return parser


def main(argv=None, mode: RelevanceMode = RelevanceMode.BINARY) -> int:
    description = (
        "Evaluate hybrid retrieval: recall/precision curve and NDCG table"
        if mode is RelevanceMode.GRADED
        else "Evaluate hybrid retrieval: recall/precision curve"
    )
    args = build_parser(description).parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s')

    try:
        config = ExperimentConfig(
            corpus_dir=args.corpus_dir,
            embed_dir=args.embed_dir,
            query_file=args.queries,
            query_embed_dir=args.query_dir,
            lam=args.lam,
            out_file=args.out_file,
            mode=mode,
        )
        result, written = run_experiment(config)
    except (EvaluationError, ValueError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1

    print("\n=== HYBRID EXPERIMENT ===")
    print(f"Queries evaluated: {result.n_queries}")
    for name, value in result.summary.items():
        print(f"{name:<15}: {value:.4f}")
    for path in written:
        print(f"  - {path}")
    print("=========================\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
