"""
Fixed-binning 1-D histogram.

Statistics (mean, std_dev) are accumulated from the filled values that land
inside [xlow, xup), not from bin centres; under/overflow is counted apart.
"""
import math
from dataclasses import dataclass

import numpy as np
import polars as pl


@dataclass(frozen=True)
class HistogramModel:
    name: str
    title: str
    nbins: int
    xlow: float
    xup: float

    def __post_init__(self):
        if self.nbins < 1:
            raise ValueError(f"nbins must be positive, got {self.nbins}")
        if not self.xup > self.xlow:
            raise ValueError(f"xup ({self.xup}) must exceed xlow ({self.xlow})")


class Histogram1D:
    """Histogram with running sums for mean and standard deviation."""

    def __init__(self, model: HistogramModel):
        self.model = model
        self.edges = np.linspace(model.xlow, model.xup, model.nbins + 1)
        self.counts = np.zeros(model.nbins, dtype=np.int64)
        self.underflow = 0
        self.overflow = 0
        self.entries = 0
        self._sum_w = 0.0
        self._sum_wx = 0.0
        self._sum_wx2 = 0.0

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def title(self) -> str:
        return self.model.title

    def fill(self, values) -> "Histogram1D":
        values = np.asarray(values, dtype=np.float64).ravel()
        values = values[~np.isnan(values)]
        self.entries += values.size

        below = values < self.model.xlow
        above = values >= self.model.xup
        self.underflow += int(below.sum())
        self.overflow += int(above.sum())

        inside = values[~(below | above)]
        counts, _ = np.histogram(inside, bins=self.edges)
        self.counts += counts
        self._sum_w += inside.size
        self._sum_wx += float(inside.sum())
        self._sum_wx2 += float(np.square(inside).sum())
        return self

    @property
    def integral(self) -> int:
        return int(self.counts.sum())

    @property
    def mean(self) -> float:
        if self._sum_w == 0:
            return 0.0
        return self._sum_wx / self._sum_w

    @property
    def std_dev(self) -> float:
        if self._sum_w == 0:
            return 0.0
        mean = self.mean
        variance = self._sum_wx2 / self._sum_w - mean * mean
        return math.sqrt(max(variance, 0.0))

    @property
    def bin_centers(self) -> np.ndarray:
        return 0.5 * (self.edges[:-1] + self.edges[1:])

    def to_polars(self) -> pl.DataFrame:
        """Bin table: bin index, low/high edge, centre and count."""
        return pl.DataFrame({
            "bin": np.arange(1, self.model.nbins + 1),
            "low": self.edges[:-1],
            "high": self.edges[1:],
            "center": self.bin_centers,
            "count": self.counts,
        })

    def __repr__(self) -> str:
        return (
            f"Histogram1D(name={self.name!r}, entries={self.entries}, "
            f"mean={self.mean:.3f}, std_dev={self.std_dev:.3f})"
        )
