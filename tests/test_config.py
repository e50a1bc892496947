"""
Configuration layering and validation tests.
"""

from pathlib import Path

import pytest
import yaml

from median_bootstrap.config import (
    ConfigError,
    InvalidParameterError,
    RunConfig,
    check_positive,
    env_overrides,
    load_config,
)


def test_defaults_match_cli_flags():
    config = RunConfig()
    assert (config.trials, config.sample_size, config.workers) == (1000, 100, 4)
    assert config.log_file == Path("bootstrap.log")
    assert (config.diagnostics_host, config.diagnostics_port) == ("localhost", 6060)
    config.validate()


@pytest.mark.parametrize("field", ["trials", "sample_size", "workers"])
@pytest.mark.parametrize("value", [0, -1])
def test_validate_rejects_non_positive(field, value):
    config = RunConfig().merged({field: value})
    with pytest.raises(InvalidParameterError, match=field):
        config.validate()


def test_validate_rejects_bad_port():
    with pytest.raises(ConfigError, match="diagnostics_port"):
        RunConfig(diagnostics_port=70000).validate()


def test_check_positive_lists_every_bad_value():
    with pytest.raises(InvalidParameterError) as excinfo:
        check_positive(trials=0, workers=-2, sample_size=5)
    message = str(excinfo.value)
    assert "trials=0" in message
    assert "workers=-2" in message
    assert "sample_size" not in message


def test_from_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("trials: 250\nworkers: 2\nseed: 9\nlog_file: runs/boot.log\n")

    config = RunConfig.from_file(path)
    assert config.trials == 250
    assert config.workers == 2
    assert config.seed == 9
    assert config.log_file == Path("runs/boot.log")
    assert config.sample_size == 100


def test_from_file_rejects_non_mapping(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        RunConfig.from_file(path)


def test_from_file_wraps_yaml_errors(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("trials: [1, 2\n")
    with pytest.raises(ConfigError, match="cannot read config file") as excinfo:
        RunConfig.from_file(path)
    assert isinstance(excinfo.value.__cause__, yaml.YAMLError)


def test_unknown_key_rejected():
    with pytest.raises(ConfigError, match="unknown"):
        RunConfig().merged({"trails": 10})


def test_env_overrides_collects_prefixed_variables():
    environ = {
        "MEDIAN_BOOTSTRAP_TRIALS": "64",
        "MEDIAN_BOOTSTRAP_DIAGNOSTICS": "off",
        "MEDIAN_BOOTSTRAP_SEED": "  ",
        "UNRELATED": "1",
    }
    assert env_overrides(environ) == {"trials": "64", "diagnostics": "off"}


def test_layering_precedence(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("trials: 250\nworkers: 2\nsample_size: 30\n")
    environ = {"MEDIAN_BOOTSTRAP_WORKERS": "6", "MEDIAN_BOOTSTRAP_TRIALS": "500"}

    config = load_config(path, overrides={"trials": 750, "seed": None}, environ=environ)

    assert config.sample_size == 30  # file
    assert config.workers == 6  # environment beats file
    assert config.trials == 750  # flags beat environment
    assert config.seed is None


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("workers: 12\n")
    config = load_config(environ={"MEDIAN_BOOTSTRAP_CONFIG": str(path)})
    assert config.workers == 12


def test_missing_config_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yaml", environ={})


@pytest.mark.parametrize(
    "environ, match",
    [
        ({"MEDIAN_BOOTSTRAP_TRIALS": "many"}, "trials"),
        ({"MEDIAN_BOOTSTRAP_DIAGNOSTICS": "maybe"}, "diagnostics"),
    ],
)
def test_malformed_environment_values(environ, match):
    with pytest.raises(ConfigError, match=match):
        load_config(environ=environ)


def test_boolean_and_path_coercion():
    config = RunConfig().merged({"diagnostics": "false", "data_path": "obs.npy", "seed": "17"})
    assert config.diagnostics is False
    assert config.data_path == Path("obs.npy")
    assert config.seed == 17


def test_to_dict_round_trips_through_merged():
    config = RunConfig(trials=5, data_path=Path("x.txt"), seed=3)
    assert RunConfig().merged(config.to_dict()) == config
