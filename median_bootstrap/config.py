"""
Run configuration for the bootstrap median estimator.

Sources are layered lowest to highest: dataclass defaults, a YAML file,
MEDIAN_BOOTSTRAP_* environment variables, then command line flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

ENV_PREFIX = "MEDIAN_BOOTSTRAP_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class InvalidParameterError(ValueError):
    """Raised when trials, sample size or worker count is not positive."""


class ConfigError(ValueError):
    """Raised when a configuration source holds a malformed value."""


def check_positive(**params: int) -> None:
    """
    Raise InvalidParameterError unless every keyword value is a positive int.

    >>> check_positive(trials=10, workers=2)
    """
    bad = {name: value for name, value in params.items() if value is None or value <= 0}
    if bad:
        listing = ", ".join(f"{name}={value}" for name, value in bad.items())
        raise InvalidParameterError(f"parameters must be greater than 0: {listing}")


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got {value!r}")


def _optional_path(value: Any) -> Optional[Path]:
    if value is None or str(value).strip() == "":
        return None
    return Path(value)


_COERCERS = {
    "trials": _as_int,
    "sample_size": _as_int,
    "workers": _as_int,
    "seed": lambda name, value: None if value is None else _as_int(name, value),
    "data_path": lambda name, value: _optional_path(value),
    "log_file": lambda name, value: Path(value),
    "diagnostics": _as_bool,
    "diagnostics_host": lambda name, value: str(value),
    "diagnostics_port": _as_int,
}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class RunConfig:
    """Parameters for one bootstrap run."""

    trials: int = 1000
    sample_size: int = 100
    workers: int = 4
    seed: Optional[int] = None
    data_path: Optional[Path] = None
    log_file: Path = Path("bootstrap.log")
    diagnostics: bool = True
    diagnostics_host: str = "localhost"
    diagnostics_port: int = 6060

    def validate(self) -> None:
        """Validate the run parameters the resampler depends on."""
        check_positive(
            trials=self.trials,
            sample_size=self.sample_size,
            workers=self.workers,
        )
        if not 0 <= self.diagnostics_port <= 65535:
            raise ConfigError(
                f"diagnostics_port must be in [0, 65535], got {self.diagnostics_port}"
            )

    def merged(self, overrides: Mapping[str, Any]) -> "RunConfig":
        """Return a copy with ``overrides`` applied; ``None`` values are ignored."""
        known = {f.name for f in fields(self)}
        updates: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f"unknown configuration key: {key!r}")
            if value is None:
                continue
            updates[key] = _COERCERS[key](key, value)
        return replace(self, **updates)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "trials": self.trials,
            "sample_size": self.sample_size,
            "workers": self.workers,
            "seed": self.seed,
            "data_path": str(self.data_path) if self.data_path else None,
            "log_file": str(self.log_file),
            "diagnostics": self.diagnostics,
            "diagnostics_host": self.diagnostics_host,
            "diagnostics_port": self.diagnostics_port,
        }

    @classmethod
    def from_file(cls, path: Path | str) -> "RunConfig":
        """Load a config from a YAML mapping of field names to values."""
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigError(f"cannot read config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        return cls().merged(data)


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect MEDIAN_BOOTSTRAP_* variables keyed by RunConfig field name."""
    env = os.environ if environ is None else environ
    overrides: Dict[str, str] = {}
    for f in fields(RunConfig):
        raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None and raw.strip() != "":
            overrides[f.name] = raw.strip()
    return overrides


def load_config(
    config_path: Optional[Path | str] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """
    Build a RunConfig from every source.

    ``config_path`` falls back to $MEDIAN_BOOTSTRAP_CONFIG. A missing file
    named explicitly is an error; ``overrides`` (usually CLI flags) win over
    everything else. The result is not validated here.
    """
    env = os.environ if environ is None else environ
    path = config_path or env.get(CONFIG_ENV_VAR)

    config = RunConfig()
    if path:
        if not Path(path).exists():
            raise ConfigError(f"config file not found: {path}")
        config = RunConfig.from_file(path)

    config = config.merged(env_overrides(env))
    if overrides:
        config = config.merged(overrides)
    return config
