"""
Random Streams for Bootstrap Workers

Hierarchical seeding: one run-level seed, from which every worker derives an
independent PCG64 stream. Workers never share generator state, and a fixed
run seed reproduces each worker's draws in isolation.
"""

from __future__ import annotations

import hashlib
from typing import Optional, Protocol

import numpy as np
from numpy.random import Generator, PCG64, SeedSequence


class IndexSource(Protocol):
    """Anything that can draw uniform integer indices like a numpy Generator."""

    def integers(self, low: int, high: int, size: Optional[int] = None): ...


def int_to_hex_seed(seed: int) -> str:
    """Convert integer seed to a 16-digit hex string."""
    return f"{seed:016x}"


def new_run_seed() -> int:
    """
    Return a fresh 64-bit run seed drawn from OS entropy.

    Runs seeded this way are not reproducible; pass an explicit seed to the
    resampler when reproducibility matters.
    """
    return int(SeedSequence().entropy) & 0xFFFFFFFFFFFFFFFF


def derive_seed(run_seed: int, *path_components: str) -> int:
    """Derive a child seed for a specific path under ``run_seed``.

    Args:
        run_seed: Run-level seed
        *path_components: Path components (e.g., "worker", "3")

    Returns:
        64-bit integer seed, identical for identical inputs
    """
    path_str = "/".join(path_components)
    combined = f"{int_to_hex_seed(run_seed)}::{path_str}"
    return int(hashlib.sha256(combined.encode("utf-8")).hexdigest()[:16], 16)


def worker_generator(run_seed: int, worker_index: int) -> Generator:
    """Create the private generator owned by worker ``worker_index``."""
    return Generator(PCG64(derive_seed(run_seed, "worker", str(worker_index))))


def draw_resample(data: np.ndarray, rng: IndexSource) -> np.ndarray:
    """
    Draw one resample of ``len(data)`` elements with replacement.

    Each position takes ``data[k]`` for an index k drawn uniformly in
    [0, n). Fancy indexing returns a fresh array, so the resample is private
    to the caller.
    """
    n = len(data)
    indices = np.asarray(rng.integers(0, n, size=n))
    return data[indices]
