"""Input datasets: synthetic normal samples or a vector loaded from disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
from numpy.random import Generator, PCG64

from median_bootstrap.config import check_positive


def generate_normal_data(
    n: int,
    *,
    mu: float = 0.0,
    sigma: float = 1.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Draw ``n`` samples from N(mu, sigma^2)."""
    check_positive(sample_size=n)
    if sigma < 0:
        raise ValueError(f"sigma must be non-negative, got {sigma}")
    rng = Generator(PCG64(seed))
    return rng.normal(mu, sigma, size=n)


def load_data(path: Path | str) -> np.ndarray:
    """
    Load a 1D dataset from ``path``.

    ``.npy`` files are read with ``np.load``; anything else is parsed as
    whitespace separated numbers.

    Raises:
        ValueError: If the file holds no values, is not 1D, or has NaN/inf.
    """
    path = Path(path)
    if path.suffix == ".npy":
        values = np.load(path, allow_pickle=False)
    else:
        values = np.loadtxt(path, dtype=np.float64, ndmin=1)

    values = np.asarray(values, dtype=np.float64)
    if values.ndim != 1:
        raise ValueError(f"{path}: expected a 1D vector, got shape {values.shape}")
    if values.size == 0:
        raise ValueError(f"{path}: dataset is empty")
    if not np.all(np.isfinite(values)):
        raise ValueError(f"{path}: dataset contains NaN or infinite values")
    return values
