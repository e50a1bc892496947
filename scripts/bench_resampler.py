#!/usr/bin/env python3
"""
Resampler Benchmark

Times repeated concurrent resampling runs over a fixed synthetic dataset for
a range of worker counts.

Usage:
    python scripts/bench_resampler.py --trials 1000 --sample-size 100 --workers 1 2 4 8

Exit Codes:
    0: Benchmark completed
    1: Invalid parameters
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List

import numpy as np

# Ensure the package is importable from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from median_bootstrap.config import InvalidParameterError, check_positive
from median_bootstrap.data import generate_normal_data
from median_bootstrap.resampler import resample

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def bench_workers(data: np.ndarray, trials: int, workers: int, repeats: int) -> Dict[str, float]:
    timings_ms: List[float] = []
    for _ in range(repeats):
        start = time.perf_counter()
        resample(data, trials, workers)
        timings_ms.append((time.perf_counter() - start) * 1000)
    arr = np.array(timings_ms, dtype=np.float64)
    return {
        "workers": workers,
        "mean_ms": float(arr.mean()),
        "p50_ms": float(np.percentile(arr, 50)),
        "min_ms": float(arr.min()),
        "max_ms": float(arr.max()),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark the concurrent bootstrap resampler")
    parser.add_argument("--trials", type=int, default=1000, help="Resamples per run")
    parser.add_argument("--sample-size", type=int, default=100, help="Dataset size")
    parser.add_argument("--workers", type=int, nargs="+", default=[1, 2, 4, 8], help="Worker counts to compare")
    parser.add_argument("--repeats", type=int, default=20, help="Runs per worker count")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the synthetic dataset")
    args = parser.parse_args()

    try:
        check_positive(trials=args.trials, sample_size=args.sample_size, repeats=args.repeats)
        check_positive(**{f"workers[{i}]": w for i, w in enumerate(args.workers)})
    except InvalidParameterError as exc:
        logger.error("%s", exc)
        return 1

    data = generate_normal_data(args.sample_size, seed=args.seed)
    results = []
    for workers in args.workers:
        row = bench_workers(data, args.trials, workers, args.repeats)
        logger.info("workers=%d mean=%.3fms p50=%.3fms", workers, row["mean_ms"], row["p50_ms"])
        results.append(row)

    print(json.dumps({"trials": args.trials, "sample_size": args.sample_size, "results": results}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
