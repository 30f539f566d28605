"""
Test configuration loading and validation.
"""
import copy
import sys
from pathlib import Path

import pytest
import yaml

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.utils.config import DEFAULT_CONFIG, load_config, validate_config
from src.utils.paths import get_config_path


def write_yaml(path: Path, data) -> Path:
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path


def test_project_config_is_valid():
    """The shipped config/config.yaml loads and validates."""
    config = load_config(get_config_path())
    assert config["distribution"] == {"mean": 0.0, "stddev": 1.0}
    assert config["histogram"]["nbins"] == 1000


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "nope.yaml")
    assert config == DEFAULT_CONFIG


def test_partial_override_merges(tmp_path):
    path = write_yaml(tmp_path / "config.yaml", {"tutorial": {"n_entries": 500}})
    config = load_config(path)
    assert config["tutorial"]["n_entries"] == 500
    assert config["tutorial"]["n_threads"] == DEFAULT_CONFIG["tutorial"]["n_threads"]
    assert config["histogram"] == DEFAULT_CONFIG["histogram"]


def test_defaults_not_mutated(tmp_path):
    path = write_yaml(tmp_path / "config.yaml", {"histogram": {"nbins": 10}})
    load_config(path)
    assert DEFAULT_CONFIG["histogram"]["nbins"] == 1000


def test_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == DEFAULT_CONFIG


@pytest.mark.parametrize("section,key,value", [
    ("tutorial", "n_entries", -1),
    ("tutorial", "n_threads", -3),
    ("tutorial", "chunk_size", 0),
    ("histogram", "nbins", 0),
    ("histogram", "xup", -4.0),
    ("distribution", "stddev", 0.0),
    ("reproducible", "base_seed", -1),
    ("tolerance", "mean", 0.0),
])
def test_invalid_values(section, key, value):
    config = copy.deepcopy(DEFAULT_CONFIG)
    config[section][key] = value
    with pytest.raises(ValueError):
        validate_config(config)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
