# tests/conftest.py
import numpy as np
import pytest


@pytest.fixture
def normal_data():
    """100 standard-normal observations with a fixed seed."""
    return np.random.default_rng(2024).normal(0.0, 1.0, size=100)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove MEDIAN_BOOTSTRAP_* variables so config layering starts from defaults."""
    import os

    for name in list(os.environ):
        if name.startswith("MEDIAN_BOOTSTRAP_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch
