"""
Checks for generated sample columns.

- Distribution shape: empirical mean/std against the target normal.
- Reproducibility: per-entry comparison of two pipeline runs.
"""
import hashlib
import logging
from typing import Any, Dict, Optional

import numpy as np
import polars as pl

from src.frame.entry_frame import ENTRY_COLUMN


logger = logging.getLogger(__name__)


def summarize_column(df: pl.DataFrame, column: str) -> Dict[str, Any]:
    """
    Summary statistics for one sample column.

    Args:
        df: Collected pipeline output
        column: Sample column name

    Returns:
        Dictionary with n, mean, std, min, max
    """
    if column not in df.columns:
        raise KeyError(f"Unknown column: {column}")

    summary = df.select([
        pl.col(column).count().alias("n"),
        pl.col(column).mean().alias("mean"),
        pl.col(column).std().alias("std"),
        pl.col(column).min().alias("min"),
        pl.col(column).max().alias("max"),
    ])
    return summary.to_dicts()[0]


def check_distribution(
    stats: Dict[str, Any],
    mean: float = 0.0,
    stddev: float = 1.0,
    tolerance: Optional[Dict[str, float]] = None,
) -> Dict[str, Any]:
    """
    Compare empirical mean/std with the target distribution.

    Args:
        stats: Dictionary with "mean" and "std" keys
        mean: Expected mean
        stddev: Expected standard deviation
        tolerance: Absolute tolerances keyed "mean" and "std"

    Returns:
        Dictionary with deviations and pass flags
    """
    if tolerance is None:
        tolerance = {"mean": 0.01, "std": 0.01}

    mean_dev = abs(stats["mean"] - mean)
    std_dev = abs(stats["std"] - stddev)
    result = {
        "mean_deviation": mean_dev,
        "std_deviation": std_dev,
        "mean_ok": mean_dev <= tolerance["mean"],
        "std_ok": std_dev <= tolerance["std"],
    }
    result["passed"] = result["mean_ok"] and result["std_ok"]

    if not result["passed"]:
        logger.warning(
            f"Distribution check failed: mean {stats['mean']:.4f} (expected {mean}), "
            f"std {stats['std']:.4f} (expected {stddev})"
        )
    return result


def compare_samples(df_a: pl.DataFrame, df_b: pl.DataFrame, column: str) -> Dict[str, Any]:
    """
    Compare two runs entry by entry (bit-exact).

    Args:
        df_a: First run output
        df_b: Second run output
        column: Sample column to compare

    Returns:
        Dictionary with n_common, n_mismatch, missing entries, identical flag
    """
    a = df_a.select([ENTRY_COLUMN, pl.col(column).alias("a")])
    b = df_b.select([ENTRY_COLUMN, pl.col(column).alias("b")])
    joined = a.join(b, on=ENTRY_COLUMN, how="inner")

    # Compare bit patterns so NaN == NaN and -0.0 != 0.0
    bits_a = joined["a"].cast(pl.Float64).to_numpy().view(np.uint64)
    bits_b = joined["b"].cast(pl.Float64).to_numpy().view(np.uint64)
    n_mismatch = int((bits_a != bits_b).sum())

    result = {
        "n_common": joined.height,
        "n_mismatch": n_mismatch,
        "n_only_a": a.height - joined.height,
        "n_only_b": b.height - joined.height,
    }
    result["identical"] = (
        n_mismatch == 0 and result["n_only_a"] == 0 and result["n_only_b"] == 0
    )
    return result


def sample_digest(df: pl.DataFrame, column: str) -> str:
    """
    SHA-256 of the entry-ordered float64 sample bytes.

    Args:
        df: Pipeline output
        column: Sample column

    Returns:
        Hexadecimal digest
    """
    values = df.sort(ENTRY_COLUMN)[column].cast(pl.Float64).to_numpy()
    return hashlib.sha256(values.tobytes()).hexdigest()
