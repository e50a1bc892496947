#!/usr/bin/env python3
"""
Bootstrap median estimator CLI.

Estimates the standard error of the sample median by bootstrap resampling
over a pool of worker threads.

Usage:
    python -m median_bootstrap -b 1000 -n 100 -w 4
    python -m median_bootstrap --data observations.npy -b 5000 -w 8 --seed 42
    python -m median_bootstrap --config run.yaml --json

Exit Codes:
    0: Run completed
    1: Invalid parameters, configuration or input data
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from dotenv import find_dotenv, load_dotenv

from median_bootstrap.config import (
    ConfigError,
    InvalidParameterError,
    RunConfig,
    load_config,
)
from median_bootstrap.data import generate_normal_data, load_data
from median_bootstrap.diagnostics import (
    DiagnosticsServer,
    DiagnosticsState,
    create_diagnostics_app,
)
from median_bootstrap.prng import derive_seed
from median_bootstrap.run_logging import close_run_logging, configure_run_logging
from median_bootstrap.summary import ResamplingProfile, profile_resampling

logger = logging.getLogger(__name__)

INVALID_PARAMS_MESSAGE = "Error: All input values (-b, -n, -w) must be greater than 0."


def build_parser() -> argparse.ArgumentParser:
    defaults = RunConfig()
    parser = argparse.ArgumentParser(
        description="Estimate the standard error of the median by bootstrap resampling.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration precedence (lowest to highest):
    defaults < --config YAML < MEDIAN_BOOTSTRAP_* environment < flags
        """,
    )
    parser.add_argument(
        "-b", dest="trials", type=int, default=None,
        help=f"Number of bootstrap resamples (default {defaults.trials})",
    )
    parser.add_argument(
        "-n", dest="sample_size", type=int, default=None,
        help=f"Sample size of the synthetic dataset (default {defaults.sample_size})",
    )
    parser.add_argument(
        "-w", dest="workers", type=int, default=None,
        help=f"Number of worker threads (default {defaults.workers})",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Run seed for reproducible data and resamples (default: OS entropy)",
    )
    parser.add_argument(
        "--data", dest="data_path", default=None,
        help="Load the dataset from a .npy or whitespace separated text file instead of generating one",
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML configuration file (default: $MEDIAN_BOOTSTRAP_CONFIG)",
    )
    parser.add_argument(
        "--log-file", dest="log_file", default=None,
        help=f"Append run log records to this file (default {defaults.log_file})",
    )
    parser.add_argument(
        "--diagnostics-port", dest="diagnostics_port", type=int, default=None,
        help=f"Port for the diagnostics HTTP endpoint (default {defaults.diagnostics_port})",
    )
    parser.add_argument(
        "--no-diagnostics", dest="diagnostics", action="store_const", const=False, default=None,
        help="Do not start the diagnostics HTTP endpoint",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the run profile as JSON instead of the text report",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    keys = (
        "trials",
        "sample_size",
        "workers",
        "seed",
        "data_path",
        "log_file",
        "diagnostics",
        "diagnostics_port",
    )
    return {key: getattr(args, key) for key in keys}


def print_report(profile: ResamplingProfile) -> None:
    memory_kb = profile.memory_allocated_bytes / 1024.0
    print(f"Standard Error of the Median: {profile.summary.std_error:.6f}")
    print(f"Execution Time: {profile.execution_time_ms:.3f}ms")
    print(f"Memory Used: {memory_kb:.2f} KB")

    logger.info("Standard Error: %.6f", profile.summary.std_error)
    logger.info("Execution Time: %.3fms", profile.execution_time_ms)
    logger.info("Memory Used: %.2f KB", memory_kb)


def run(
    config: RunConfig,
    *,
    state: Optional[DiagnosticsState] = None,
    json_output: bool = False,
) -> ResamplingProfile:
    """Load or generate the dataset, resample it, and report the results."""
    if config.data_path is not None:
        data = load_data(config.data_path)
        config = replace(config, sample_size=len(data))
    else:
        data_seed = derive_seed(config.seed, "data") if config.seed is not None else None
        data = generate_normal_data(config.sample_size, seed=data_seed)

    if not json_output:
        print("This is a bootstrap median estimator using Python:")
        print(
            f"Using B={config.trials}, sample size={config.sample_size}, "
            f"workers={config.workers}\n"
        )

    profile, _ = profile_resampling(data, config.trials, config.workers, seed=config.seed)
    if state is not None:
        state.record(profile)

    if json_output:
        print(json.dumps({"config": config.to_dict(), "profile": profile.to_dict()}, indent=2))
        logger.info("Standard Error: %.6f", profile.summary.std_error)
    else:
        print_report(profile)
    return profile


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    args = parse_args(argv)

    try:
        config = load_config(args.config, overrides=_cli_overrides(args))
        config.validate()
    except InvalidParameterError:
        print(INVALID_PARAMS_MESSAGE)
        return 1
    except ConfigError as exc:
        print(f"Error: {exc}")
        return 1

    try:
        handler = configure_run_logging(config.log_file)
    except OSError as exc:
        print(f"Failed to open log file: {exc}")
        return 1

    server: Optional[DiagnosticsServer] = None
    state = DiagnosticsState()
    try:
        if config.diagnostics:
            server = DiagnosticsServer(
                create_diagnostics_app(state),
                host=config.diagnostics_host,
                port=config.diagnostics_port,
            )
            server.start()

        try:
            run(config, state=state, json_output=args.json)
        except (OSError, ValueError) as exc:
            logger.error("run failed: %s", exc)
            print(f"Error: {exc}")
            return 1
    finally:
        if server is not None:
            server.stop()
        close_run_logging(handler)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI execution
    raise SystemExit(main())
