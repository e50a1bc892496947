"""
Summary Statistics and Profiling for Bootstrap Medians

Turns the array of bootstrap medians into the reported quantities:

    mean       = sum(m_i) / B
    variance   = sum((m_i - mean)^2) / B
    std_error  = sqrt(variance)

``std_error`` is the standard deviation of the bootstrap medians, i.e. the
bootstrap estimate of the standard error of the sample median.

``profile_resampling`` wraps a full concurrent run with wall-clock timing and
tracemalloc memory tracking, and bins the medians into a histogram for
inspection without plotting.
"""

from __future__ import annotations

import logging
import time
import tracemalloc
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from median_bootstrap.resampler import ResampleRun, run_resampling

logger = logging.getLogger(__name__)


# =============================================================================
# Summary
# =============================================================================

@dataclass(frozen=True)
class BootstrapSummary:
    """Mean, spread and range of a set of bootstrap medians."""
    mean: float
    variance: float
    std_error: float
    min_value: float
    max_value: float
    n_trials: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "mean": float(self.mean),
            "variance": float(self.variance),
            "std_error": float(self.std_error),
            "min_value": float(self.min_value),
            "max_value": float(self.max_value),
            "n_trials": self.n_trials,
        }


def summarize_medians(medians: Union[Sequence[float], np.ndarray]) -> BootstrapSummary:
    """
    Summarize bootstrap medians.

    Raises:
        ValueError: If ``medians`` is empty or contains NaN (an incomplete run).
    """
    arr = np.asarray(medians, dtype=np.float64)
    if arr.size == 0:
        raise ValueError("cannot summarize an empty set of medians")
    if np.any(np.isnan(arr)):
        raise ValueError("medians contain NaN values; the run was incomplete")

    mean = float(np.mean(arr))
    variance = float(np.mean((arr - mean) ** 2))
    return BootstrapSummary(
        mean=mean,
        variance=variance,
        std_error=float(np.sqrt(variance)),
        min_value=float(np.min(arr)),
        max_value=float(np.max(arr)),
        n_trials=int(arr.size),
    )


# =============================================================================
# Histogram
# =============================================================================

@dataclass(frozen=True)
class HistogramBin:
    """Single histogram bin."""
    left_edge: float
    right_edge: float
    count: int
    density: float


@dataclass(frozen=True)
class MedianHistogram:
    """Binned view of the bootstrap median distribution."""
    bins: Tuple[HistogramBin, ...]
    n_total: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "bins": [
                {
                    "left_edge": float(b.left_edge),
                    "right_edge": float(b.right_edge),
                    "count": b.count,
                    "density": float(b.density),
                }
                for b in self.bins
            ],
            "n_total": self.n_total,
        }


def build_histogram(values: np.ndarray, n_bins: int = 50) -> MedianHistogram:
    """
    Bin ``values`` into ``n_bins`` equal-width bins.

    A set with no spread (e.g. constant data) collapses into one bin.
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return MedianHistogram(bins=(), n_total=0)

    if np.ptp(values) == 0:
        single_value = float(values[0])
        return MedianHistogram(
            bins=(HistogramBin(
                left_edge=single_value,
                right_edge=single_value,
                count=len(values),
                density=1.0,
            ),),
            n_total=len(values),
        )

    counts, bin_edges = np.histogram(values, bins=n_bins, density=False)
    densities = counts / (len(values) * (bin_edges[1] - bin_edges[0]))

    bins = tuple(
        HistogramBin(
            left_edge=float(bin_edges[i]),
            right_edge=float(bin_edges[i + 1]),
            count=int(counts[i]),
            density=float(densities[i]),
        )
        for i in range(len(counts))
    )
    return MedianHistogram(bins=bins, n_total=len(values))


# =============================================================================
# Profiling
# =============================================================================

@dataclass(frozen=True)
class ResamplingProfile:
    """
    Profiling results for one resampling run.

    Includes timing, memory, summary statistics and the median histogram.
    """
    execution_time_ms: float
    peak_memory_bytes: int
    memory_allocated_bytes: int
    n_samples: int
    n_trials: int
    n_workers: int
    seed: Optional[int]
    summary: BootstrapSummary
    histogram: MedianHistogram

    @property
    def time_per_trial_us(self) -> float:
        """Microseconds of wall time per trial."""
        return (self.execution_time_ms * 1000) / self.n_trials

    @property
    def memory_per_trial_bytes(self) -> float:
        """Bytes still allocated at the end of the run, per trial."""
        return self.memory_allocated_bytes / self.n_trials

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "execution_time_ms": float(self.execution_time_ms),
            "peak_memory_bytes": self.peak_memory_bytes,
            "memory_allocated_bytes": self.memory_allocated_bytes,
            "n_samples": self.n_samples,
            "n_trials": self.n_trials,
            "n_workers": self.n_workers,
            "seed": self.seed,
            "time_per_trial_us": float(self.time_per_trial_us),
            "memory_per_trial_bytes": float(self.memory_per_trial_bytes),
            "summary": self.summary.to_dict(),
            "histogram": self.histogram.to_dict(),
        }


def profile_resampling(
    data: Union[Sequence[float], np.ndarray],
    trials: int,
    workers: int,
    *,
    seed: Optional[int] = None,
    n_histogram_bins: int = 50,
) -> Tuple[ResamplingProfile, ResampleRun]:
    """
    Run the concurrent resampler under timing and memory tracking.

    Timing and memory figures vary with system state even when ``seed`` is
    fixed; the medians themselves do not.

    Returns
    -------
    (ResamplingProfile, ResampleRun)
        The profile and the underlying run with its medians.
    """
    was_tracing = tracemalloc.is_tracing()
    if not was_tracing:
        tracemalloc.start()
    tracemalloc.reset_peak()

    start_time = time.perf_counter()
    try:
        run = run_resampling(data, trials, workers, seed=seed)
    finally:
        end_time = time.perf_counter()
        current, peak = tracemalloc.get_traced_memory()
        if not was_tracing:
            tracemalloc.stop()

    execution_time_ms = (end_time - start_time) * 1000
    profile = ResamplingProfile(
        execution_time_ms=execution_time_ms,
        peak_memory_bytes=peak,
        memory_allocated_bytes=current,
        n_samples=run.n_samples,
        n_trials=run.n_trials,
        n_workers=run.n_workers,
        seed=run.seed,
        summary=summarize_medians(run.medians),
        histogram=build_histogram(run.medians, n_bins=n_histogram_bins),
    )
    logger.debug("profiled %d trials in %.3f ms", trials, execution_time_ms)
    return profile, run
