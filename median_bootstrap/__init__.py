"""
Bootstrap Median Estimator

Estimates the standard error of the sample median by bootstrap resampling
on a pool of worker threads. Runs are reproducible when a seed is supplied.
"""

from median_bootstrap.median import median
from median_bootstrap.resampler import (
    # Core resampling
    resample,
    run_resampling,
    resample_serial,
    ResampleRun,
    ResamplingError,
)
from median_bootstrap.summary import (
    # Summary statistics
    summarize_medians,
    BootstrapSummary,
    # Profiling
    profile_resampling,
    ResamplingProfile,
    MedianHistogram,
    HistogramBin,
)
from median_bootstrap.config import (
    # Configuration
    RunConfig,
    load_config,
    InvalidParameterError,
    ConfigError,
)

__all__ = [
    "median",
    # Core resampling
    "resample",
    "run_resampling",
    "resample_serial",
    "ResampleRun",
    "ResamplingError",
    # Summary statistics
    "summarize_medians",
    "BootstrapSummary",
    # Profiling
    "profile_resampling",
    "ResamplingProfile",
    "MedianHistogram",
    "HistogramBin",
    # Configuration
    "RunConfig",
    "load_config",
    "InvalidParameterError",
    "ConfigError",
]
