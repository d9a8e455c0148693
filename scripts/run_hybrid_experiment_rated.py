#!/usr/bin/env python3
# scripts/run_hybrid_experiment_rated.py

"""
Same experiment as run_hybrid_experiment.py, but the relevance line of each
query lists (document, rating) pairs with ratings between 0 and 1:

    doc12 1.0 doc7 0.5 doc31 0.25

Besides the recall/precision curve this writes OUTFILE.ndcg (average
NDCG@1..10) and OUTFILE.ndcg.gplot.
"""

import sys

from src.evaluation.data_types import RelevanceMode
from scripts.run_hybrid_experiment import main as run_main


def main(argv=None) -> int:
    return run_main(argv, mode=RelevanceMode.GRADED)


if __name__ == "__main__":
    sys.exit(main())
