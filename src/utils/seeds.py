"""
Seed derivation utilities.

Per-entry seeds make a computation reproducible regardless of which thread
processed which entry. Entropy seeds are for generators that are not meant
to be reproducible.
"""
import operator
from typing import Optional, Union

import numpy as np


SeedLike = Union[int, np.random.SeedSequence]


def as_seed_int(value, what: str = "Seed") -> int:
    """
    Convert an integer-like value (int or numpy integer) to a non-negative int.

    Floats and other non-integral values are rejected rather than truncated.
    """
    try:
        value = operator.index(value)
    except TypeError:
        raise ValueError(f"{what} must be an integer, got {value!r}") from None
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value}")
    return value


def entry_seed(entry: int, base_seed: Optional[int] = None) -> SeedLike:
    """
    Map an entry identifier to an engine seed.

    Args:
        entry: Stable, non-negative entry identifier (e.g. rdfentry_)
        base_seed: Optional run-level seed. None seeds directly from the entry

    Returns:
        Seed accepted by MersenneTwister.seed()
    """
    entry = as_seed_int(entry, "Entry identifier")

    if base_seed is None:
        return entry

    # Independent stream per (base_seed, entry) pair
    return np.random.SeedSequence(as_seed_int(base_seed, "Base seed"), spawn_key=(entry,))


def entropy_seed() -> int:
    """
    Draw a fresh non-deterministic seed from the OS entropy pool.

    Returns:
        128-bit integer seed
    """
    return int(np.random.SeedSequence().entropy)


def get_derived_seed(base_seed: int, offset: int) -> int:
    """
    Generate a derived seed for sub-processes or parallel tasks.

    Args:
        base_seed: Base seed value
        offset: Integer offset to create variation

    Returns:
        Derived seed value
    """
    return (base_seed + offset) % (2**31 - 1)
