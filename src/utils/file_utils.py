# src/utils/file_utils.py

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np


def list_sorted_files(directory: str | Path) -> List[Path]:
    """
    Return the regular files in a directory sorted lexicographically by name.

    Query embeddings are matched to corpus queries by this order, so
    Q1, Q10, Q2 sort as strings, not numerically.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Not a directory: {directory}")
    return sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name)


def load_vector(path: str | Path) -> np.ndarray:
    """
    Load a dense embedding stored as one line of whitespace-separated reals.

    Raises:
        ValueError: if the file is empty or holds a non-numeric token.
    """
    with open(path, "r", encoding="utf-8") as f:
        tokens = f.read().split()
    if not tokens:
        raise ValueError(f"Empty embedding file: {path}")
    try:
        return np.array([float(t) for t in tokens], dtype=np.float64)
    except ValueError as e:
        raise ValueError(f"Malformed embedding file {path}: {e}") from e
