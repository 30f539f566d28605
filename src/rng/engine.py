"""
Reseedable random engine and Gaussian sampler.

MersenneTwister wraps numpy's MT19937 bit generator so it can be reseeded in
place. NormalDistribution is a stateful transform over an engine: the polar
method produces deviates in pairs and keeps the second one for the next call,
so it must be reset() whenever the engine underneath is reseeded.
"""
import math
from typing import Optional

import numpy as np

from src.utils.seeds import SeedLike, as_seed_int, entropy_seed


_UINT32_MAX = 2**32 - 1


def _seed_material(seed: SeedLike):
    """Convert a seed into what RandomState.seed() takes: a 32-bit int or uint32 words."""
    if isinstance(seed, np.random.SeedSequence):
        return seed.generate_state(4)
    seed = as_seed_int(seed, "Seed")
    if seed <= _UINT32_MAX:
        return seed
    words = []
    while seed:
        words.append(seed & _UINT32_MAX)
        seed >>= 32
    return np.array(words, dtype=np.uint32)


class MersenneTwister:
    """
    MT19937 engine that can be reseeded without being rebuilt.

    Integer seeds up to 2**32 - 1 use the classic MT19937 initialisation, so
    MersenneTwister(5) gives the same stream as np.random.RandomState(5).
    Wider integers and SeedSequences seed through the init-by-array path.

    Parameters
    ----------
    seed : int, SeedSequence or None
        Initial seed. None draws a seed from OS entropy.
    """

    def __init__(self, seed: Optional[SeedLike] = None):
        if seed is None:
            seed = entropy_seed()
        self._bit_generator = np.random.MT19937(0)
        self._legacy = np.random.RandomState(self._bit_generator)
        self._generator = np.random.Generator(self._bit_generator)
        self.seed(seed)

    def seed(self, seed: SeedLike) -> None:
        """Reseed in place; the bit generator object is kept."""
        self._legacy.seed(_seed_material(seed))

    def uniform(self) -> float:
        """Next uniform deviate in [0, 1)."""
        return float(self._generator.random())


class NormalDistribution:
    """
    Gaussian sampler using the Marsaglia polar method.

    Each accepted polar step yields two independent deviates. The first is
    returned and the second is cached and returned by the following call.
    """

    def __init__(self, mean: float = 0.0, stddev: float = 1.0):
        if not stddev > 0:
            raise ValueError(f"stddev must be positive, got {stddev}")
        self._mean = float(mean)
        self._stddev = float(stddev)
        self._saved: Optional[float] = None

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def stddev(self) -> float:
        return self._stddev

    @property
    def has_cached(self) -> bool:
        return self._saved is not None

    def reset(self) -> None:
        """Discard the cached deviate."""
        self._saved = None

    def __call__(self, engine: MersenneTwister) -> float:
        z = self._saved
        if z is not None:
            self._saved = None
        else:
            while True:
                u = 2.0 * engine.uniform() - 1.0
                v = 2.0 * engine.uniform() - 1.0
                s = u * u + v * v
                if 0.0 < s < 1.0:
                    break
            factor = math.sqrt(-2.0 * math.log(s) / s)
            self._saved = v * factor
            z = u * factor
        return z * self._stddev + self._mean

    def __repr__(self) -> str:
        return f"NormalDistribution(mean={self._mean}, stddev={self._stddev})"
