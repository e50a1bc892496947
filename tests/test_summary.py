"""
Unit tests for bootstrap summary statistics and profiling.
"""

import math
import tracemalloc

import numpy as np
import pytest

from median_bootstrap.summary import (
    BootstrapSummary,
    build_histogram,
    profile_resampling,
    summarize_medians,
)


def test_std_error_is_root_mean_squared_deviation():
    """std_error = sqrt(sum((m - mean)^2) / B)."""
    medians = [1.0, 2.0, 3.0, 4.0]
    summary = summarize_medians(medians)

    mean = 2.5
    expected = math.sqrt(sum((m - mean) ** 2 for m in medians) / len(medians))
    assert summary.mean == pytest.approx(mean)
    assert summary.variance == pytest.approx(1.25)
    assert summary.std_error == pytest.approx(expected)
    assert summary.min_value == 1.0
    assert summary.max_value == 4.0
    assert summary.n_trials == 4


def test_constant_medians_have_zero_std_error():
    summary = summarize_medians(np.full(50, 7.0))
    assert summary.mean == 7.0
    assert summary.std_error == 0.0


def test_summarize_rejects_empty():
    with pytest.raises(ValueError, match="empty"):
        summarize_medians([])


def test_summarize_rejects_incomplete_run():
    with pytest.raises(ValueError, match="incomplete"):
        summarize_medians([1.0, float("nan")])


def test_summary_to_dict():
    payload = summarize_medians([0.0, 2.0]).to_dict()
    assert payload == {
        "mean": 1.0,
        "variance": 1.0,
        "std_error": 1.0,
        "min_value": 0.0,
        "max_value": 2.0,
        "n_trials": 2,
    }


class TestHistogram:
    """Histogram binning."""

    def test_counts_cover_all_values(self):
        values = np.random.default_rng(0).normal(size=1000)
        histogram = build_histogram(values, n_bins=20)

        assert len(histogram.bins) == 20
        assert sum(b.count for b in histogram.bins) == 1000
        assert histogram.n_total == 1000

    def test_density_integrates_to_one(self):
        values = np.random.default_rng(1).uniform(size=500)
        histogram = build_histogram(values, n_bins=10)
        area = sum(b.density * (b.right_edge - b.left_edge) for b in histogram.bins)
        assert area == pytest.approx(1.0)

    def test_constant_values_collapse_to_one_bin(self):
        histogram = build_histogram(np.full(30, 7.0))
        assert len(histogram.bins) == 1
        assert histogram.bins[0].count == 30
        assert histogram.bins[0].left_edge == 7.0

    def test_empty_values(self):
        histogram = build_histogram(np.array([]))
        assert histogram.bins == ()
        assert histogram.to_dict() == {"bins": [], "n_total": 0}


class TestProfileResampling:
    """Timing and memory profiling of a full run."""

    def test_profile_fields(self, normal_data):
        profile, run = profile_resampling(normal_data, 200, 4, seed=21, n_histogram_bins=10)

        assert profile.n_samples == 100
        assert profile.n_trials == 200
        assert profile.n_workers == 4
        assert profile.seed == 21
        assert profile.execution_time_ms > 0
        assert profile.peak_memory_bytes >= 0
        assert profile.time_per_trial_us == pytest.approx(profile.execution_time_ms * 1000 / 200)
        assert isinstance(profile.summary, BootstrapSummary)
        assert profile.histogram.n_total == 200
        assert run.complete

    def test_profile_summary_matches_medians(self, normal_data):
        profile, run = profile_resampling(normal_data, 300, 3, seed=22)
        assert profile.summary.mean == pytest.approx(float(np.mean(run.medians)))
        assert profile.summary.std_error == pytest.approx(float(np.std(run.medians)))

    def test_tracemalloc_state_restored(self, normal_data):
        before = tracemalloc.is_tracing()
        profile_resampling(normal_data, 20, 2, seed=1)
        assert tracemalloc.is_tracing() == before

    def test_existing_trace_left_running(self, normal_data):
        tracemalloc.start()
        try:
            profile_resampling(normal_data, 20, 2, seed=1)
            assert tracemalloc.is_tracing()
        finally:
            tracemalloc.stop()

    def test_profile_to_dict_is_json_ready(self, normal_data):
        import json

        profile, _ = profile_resampling(normal_data, 50, 2, seed=3)
        payload = json.loads(json.dumps(profile.to_dict()))
        assert payload["n_trials"] == 50
        assert payload["summary"]["n_trials"] == 50
        assert "histogram" in payload
