"""
Configuration loading.

Reads config/config.yaml, fills missing keys from DEFAULT_CONFIG and
validates the values the tutorial depends on.
"""
import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.utils.paths import get_config_path


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "seed": 42,
    "tutorial": {
        "n_entries": 1_000_000,
        "n_threads": 32,
        "chunk_size": 10_000,
        "include_race_demo": False,
    },
    "histogram": {
        "nbins": 1000,
        "xlow": -4.0,
        "xup": 4.0,
    },
    "distribution": {
        "mean": 0.0,
        "stddev": 1.0,
    },
    "reproducible": {
        "base_seed": None,
    },
    "tolerance": {
        "mean": 0.01,
        "std": 0.01,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration values.

    Args:
        config: Merged configuration dictionary

    Raises:
        ValueError: If a value is out of range or of the wrong type
    """
    tutorial = config["tutorial"]
    hist = config["histogram"]
    dist = config["distribution"]

    if not isinstance(tutorial["n_entries"], int) or tutorial["n_entries"] < 0:
        raise ValueError(f"tutorial.n_entries must be a non-negative int, got {tutorial['n_entries']!r}")
    if not isinstance(tutorial["n_threads"], int) or tutorial["n_threads"] < 0:
        raise ValueError(f"tutorial.n_threads must be a non-negative int, got {tutorial['n_threads']!r}")
    if not isinstance(tutorial["chunk_size"], int) or tutorial["chunk_size"] < 1:
        raise ValueError(f"tutorial.chunk_size must be a positive int, got {tutorial['chunk_size']!r}")

    if not isinstance(hist["nbins"], int) or hist["nbins"] < 1:
        raise ValueError(f"histogram.nbins must be a positive int, got {hist['nbins']!r}")
    if float(hist["xup"]) <= float(hist["xlow"]):
        raise ValueError(f"histogram.xup ({hist['xup']}) must exceed histogram.xlow ({hist['xlow']})")

    if float(dist["stddev"]) <= 0:
        raise ValueError(f"distribution.stddev must be positive, got {dist['stddev']!r}")

    base_seed = config["reproducible"]["base_seed"]
    if base_seed is not None and (not isinstance(base_seed, int) or base_seed < 0):
        raise ValueError(f"reproducible.base_seed must be null or a non-negative int, got {base_seed!r}")

    for key in ("mean", "std"):
        if float(config["tolerance"][key]) <= 0:
            raise ValueError(f"tolerance.{key} must be positive")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load YAML configuration merged over the built-in defaults.

    Args:
        config_path: Path to YAML file (default: config/config.yaml). A
            missing file yields the defaults.

    Returns:
        Validated configuration dictionary
    """
    if config_path is None:
        config_path = get_config_path()

    user_config: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            user_config = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using defaults")

    config = _merge(DEFAULT_CONFIG, user_config)
    validate_config(config)
    return config
