"""
Plotting helpers for the thread-safe RNG tutorial.

These functions only draw already-filled histograms.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from src.analysis.histogram import Histogram1D

logger = logging.getLogger(__name__)


def plot_histograms(
    histograms: Sequence[Histogram1D],
    output_path: str | Path,
    reference_mean: Optional[float] = None,
) -> None:
    """
    Draw histograms side by side, one panel each.

    Parameters
    ----------
    histograms : sequence of Histogram1D
        Filled histograms (titles are used as panel titles)
    output_path : str or Path
        Path to save figure
    reference_mean : float, optional
        Draw a vertical line at the expected mean
    """
    if not histograms:
        raise ValueError("No histograms to plot")

    n = len(histograms)
    fig, axes = plt.subplots(1, n, figsize=(5 * n, 5), squeeze=False)

    for ax, hist in zip(axes[0], histograms):
        ax.stairs(hist.counts, hist.edges, fill=True, alpha=0.7)
        if reference_mean is not None:
            ax.axvline(reference_mean, color="k", linestyle="--", linewidth=0.8)

        stats = f"Entries {hist.entries}\nMean {hist.mean:.3f}\nStd Dev {hist.std_dev:.3f}"
        ax.text(
            0.97, 0.97, stats,
            transform=ax.transAxes, ha="right", va="top", fontsize=9,
            bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8},
        )

        ax.set_xlabel("x", fontsize=12)
        ax.set_ylabel("Entries / bin", fontsize=12)
        ax.set_title(hist.title, fontsize=14)
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=100)
    plt.close(fig)

    logger.info(f"Saved histogram plot: {output_path}")
