"""
Random number generators for use inside a multithreaded entry pipeline.

Three variants, from wrong to reproducible:

- get_global_rng: one engine shared by every thread. Concurrent calls race
  on the cached deviate of the sampler and distort the distribution. Only
  correct with implicit multithreading disabled.
- ThreadLocalGenerator: one engine per thread, seeded from OS entropy on the
  thread's first call. Thread-safe, but the values depend on how entries were
  scheduled, so runs are not reproducible.
- ReproducibleGenerator / FreshGenerator: the value for an entry depends only
  on the entry number. The first reuses a per-thread engine and reseeds it for
  every entry; the second builds a new engine per entry.

Callables follow the column-function signatures of EntryFrame: fn(),
fn(slot) and fn(slot, entry).
"""
import logging
import threading
from typing import Optional, Tuple

from src.rng.engine import MersenneTwister, NormalDistribution
from src.utils.seeds import SeedLike, entry_seed


logger = logging.getLogger(__name__)


# -----------------------------
# Global shared generator
# -----------------------------

_global_engine = MersenneTwister()
_global_gaus = NormalDistribution(0.0, 1.0)


def get_global_rng() -> float:
    """Draw from the process-wide generator. Not thread-safe."""
    return _global_gaus(_global_engine)


def reset_global_rng(seed: Optional[SeedLike] = None) -> None:
    """
    Reseed the process-wide generator and clear its cached deviate.

    Args:
        seed: New seed, or None for OS entropy
    """
    global _global_engine
    _global_gaus.reset()
    if seed is None:
        _global_engine = MersenneTwister()
    else:
        _global_engine.seed(seed)


# -----------------------------
# Thread-local generators
# -----------------------------

class ThreadLocalGenerator:
    """
    Free-running generator with one engine per thread.

    The engine is created and seeded from OS entropy the first time a thread
    calls the generator, and lives as long as the thread. Each instance has
    its own thread-local storage.

    Parameters
    ----------
    mean, stddev : float
        Parameters of the normal distribution
    """

    def __init__(self, mean: float = 0.0, stddev: float = 1.0):
        self.mean = mean
        self.stddev = stddev
        self._local = threading.local()

    def _state(self) -> Tuple[MersenneTwister, NormalDistribution]:
        local = self._local
        if not hasattr(local, "engine"):
            local.engine = MersenneTwister()
            local.gaus = NormalDistribution(self.mean, self.stddev)
            logger.debug(f"Created generator for thread {threading.current_thread().name}")
        return local.engine, local.gaus

    def __call__(self, slot: int) -> float:
        engine, gaus = self._state()
        return gaus(engine)


class ReproducibleGenerator(ThreadLocalGenerator):
    """
    Per-entry deterministic generator reusing one engine per thread.

    Every call clears the sampler's cached deviate and then reseeds the
    engine from the entry number, in that order. Skipping the reset would
    return a deviate computed from the previous entry's seed.

    Parameters
    ----------
    mean, stddev : float
        Parameters of the normal distribution
    base_seed : int, optional
        Run-level seed mixed into every entry seed
    """

    def __init__(self, mean: float = 0.0, stddev: float = 1.0, base_seed: Optional[int] = None):
        super().__init__(mean, stddev)
        self.base_seed = base_seed

    def __call__(self, slot: int, entry: int) -> float:
        engine, gaus = self._state()
        gaus.reset()
        engine.seed(entry_seed(entry, self.base_seed))
        return gaus(engine)


class FreshGenerator:
    """
    Per-entry deterministic generator building a new engine for every entry.

    Needs no reset step and no thread-local storage, at the cost of one
    engine construction per entry.
    """

    def __init__(self, mean: float = 0.0, stddev: float = 1.0, base_seed: Optional[int] = None):
        self.mean = mean
        self.stddev = stddev
        self.base_seed = base_seed

    def __call__(self, slot: int, entry: int) -> float:
        engine = MersenneTwister(entry_seed(entry, self.base_seed))
        gaus = NormalDistribution(self.mean, self.stddev)
        return gaus(engine)


# Module-level instances with the tutorial's N(0, 1) parameters
get_thread_safe_rng = ThreadLocalGenerator()
get_reproducible_rng = ReproducibleGenerator()
get_fresh_rng = FreshGenerator()
