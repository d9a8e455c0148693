"""
Writes the averaged results of a run.

    <out>             recall/precision table, "<recall level> <precision>"
    <out>.gplot       gnuplot script for the recall/precision graph
    <out>.ndcg        NDCG table, "<rank> <ndcg>" (graded runs only)
    <out>.ndcg.gplot  gnuplot script for the NDCG graph (graded runs only)

Tables are the space-separated two-column format gnuplot reads directly.
"""

import logging
from pathlib import Path
from typing import List, Sequence

from src.evaluation.data_types import AggregateResult
from src.evaluation.recall_precision import RECALL_LEVELS

logger = logging.getLogger(__name__)

GPLOT_SUFFIX = ".gplot"
NDCG_SUFFIX = ".ndcg"

_GPLOT_TEMPLATE = (
    'set xlabel "{xlabel}"\n'
    'set ylabel "{ylabel}"\n'
    '\n'
    'set terminal postscript color\n'
    'set size 0.75,0.75\n'
    '\n'
    'set style data linespoints\n'
    'set key top right\n'
    '\n'
    'set xrange [{xmin}:{xmax}]\n'
    'set yrange [0:1]\n'
    '\n'
    "plot '{data_file}' title \"{title}\"\n"
)


def gnuplot_script(xlabel: str, ylabel: str, xmin, xmax, data_file: str, title: str) -> str:
    return _GPLOT_TEMPLATE.format(
        xlabel=xlabel, ylabel=ylabel, xmin=xmin, xmax=xmax, data_file=data_file, title=title,
    )


def _write_lines(path: Path, lines: Sequence[str]) -> Path:
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(line + "\n")
    logger.info(f"Wrote {path}")
    return path


def _write_text(path: Path, text: str) -> Path:
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)
    logger.info(f"Wrote {path}")
    return path


def write_rp_curve(average_precisions: Sequence[float], out_file: Path) -> Path:
    """One 'R-value P-value' line per standard recall level."""
    lines = [f"{level} {float(p)}" for level, p in zip(RECALL_LEVELS, average_precisions)]
    return _write_lines(out_file, lines)


def write_ndcg_table(average_ndcg: Sequence[float], out_file: Path) -> Path:
    """One 'rank NDCG' line per rank 1..K."""
    lines = [f"{rank} {float(v)}" for rank, v in enumerate(average_ndcg, start=1)]
    return _write_lines(out_file, lines)


def write_results(result: AggregateResult, out_file, title: str = "VSR") -> List[Path]:
    """
    Write all artifacts for a finished run.

    Args:
        result: aggregated run results
        out_file: path of the recall/precision table; the other artifacts
                  share it as a prefix
        title: curve title used in the gnuplot scripts

    Returns:
        Written paths, in the order listed in the module docstring.
    """
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)

    written = [
        write_rp_curve(result.average_precisions, out_file),
        _write_text(
            Path(f"{out_file}{GPLOT_SUFFIX}"),
            gnuplot_script("Recall", "Precision", 0, 1, out_file.name, title),
        ),
    ]

    if result.average_ndcg is not None:
        ndcg_file = Path(f"{out_file}{NDCG_SUFFIX}")
        written.append(write_ndcg_table(result.average_ndcg, ndcg_file))
        written.append(_write_text(
            Path(f"{ndcg_file}{GPLOT_SUFFIX}"),
            gnuplot_script("Rank", "NDCG", 1, len(result.average_ndcg), ndcg_file.name, title),
        ))

    return written
