"""
Test the reseedable engine and the Gaussian sampler.
"""
import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.rng.engine import MersenneTwister, NormalDistribution


class TestMersenneTwister:
    """Tests for MersenneTwister."""

    def test_matches_classic_mt19937_seeding(self):
        """Small integer seeds use the classic MT19937 initialisation."""
        engine = MersenneTwister(5)
        reference = np.random.RandomState(5)
        for _ in range(10):
            assert engine.uniform() == reference.random_sample()

    def test_seed_does_not_construct_bit_generator(self, monkeypatch):
        """seed() reuses the existing MT19937 for every kind of seed."""
        engine = MersenneTwister(1)
        bit_generator = engine._bit_generator

        def fail(*args, **kwargs):
            raise AssertionError("seed() constructed a new MT19937")

        monkeypatch.setattr(np.random, "MT19937", fail)
        engine.seed(5)
        engine.seed(2**40 + 3)
        engine.seed(np.random.SeedSequence(42, spawn_key=(3,)))
        engine.uniform()
        assert engine._bit_generator is bit_generator

    @pytest.mark.parametrize("seed", [
        0,
        2**32 - 1,
        2**32,
        2**127 + 11,
        np.uint64(2**63 + 5),
    ])
    def test_reseed_matches_construction(self, seed):
        """Reseeding gives the stream a fresh engine with that seed gives."""
        engine = MersenneTwister(99)
        engine.uniform()
        engine.seed(seed)
        fresh = MersenneTwister(seed)
        for _ in range(5):
            assert engine.uniform() == fresh.uniform()

    def test_wide_seeds_differ(self):
        """Seeds that only differ above 32 bits give different streams."""
        assert MersenneTwister(2**32 + 1).uniform() != MersenneTwister(2**33 + 1).uniform()
        assert MersenneTwister(2**32 + 1).uniform() != MersenneTwister(1).uniform()

    def test_reseed_in_place_restarts_stream(self):
        """Reseeding discards everything drawn before."""
        engine = MersenneTwister(1)
        for _ in range(7):
            engine.uniform()
        engine.seed(5)
        assert engine.uniform() == MersenneTwister(5).uniform()

    def test_uniform_range(self):
        engine = MersenneTwister(123)
        values = [engine.uniform() for _ in range(1000)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_seed_sequence_accepted(self):
        seq = np.random.SeedSequence(42, spawn_key=(3,))
        a = MersenneTwister(seq)
        b = MersenneTwister(np.random.SeedSequence(42, spawn_key=(3,)))
        assert a.uniform() == b.uniform()

    def test_negative_seed_rejected(self):
        with pytest.raises(ValueError):
            MersenneTwister(-1)
        engine = MersenneTwister(0)
        with pytest.raises(ValueError):
            engine.seed(-5)

    def test_non_integral_seed_rejected(self):
        """Float seeds raise instead of being truncated to a colliding int."""
        with pytest.raises(ValueError):
            MersenneTwister(2.5)
        engine = MersenneTwister(0)
        with pytest.raises(ValueError):
            engine.seed(1.0)
        with pytest.raises(ValueError):
            engine.seed("7")

    def test_entropy_seeded_engines_differ(self):
        """Unseeded engines draw their seed from OS entropy."""
        a = [MersenneTwister().uniform() for _ in range(3)]
        assert len(set(a)) == 3


class TestNormalDistribution:
    """Tests for NormalDistribution."""

    def test_invalid_stddev(self):
        with pytest.raises(ValueError):
            NormalDistribution(0.0, 0.0)
        with pytest.raises(ValueError):
            NormalDistribution(0.0, -1.0)

    def test_parameters(self):
        gaus = NormalDistribution(2.0, 3.0)
        assert gaus.mean == 2.0
        assert gaus.stddev == 3.0

    def test_pairs_are_cached(self):
        """The second deviate of a pair comes from the cache, not the engine."""
        engine = MersenneTwister(9)
        gaus = NormalDistribution()
        assert not gaus.has_cached

        gaus(engine)
        assert gaus.has_cached
        state_before = engine._bit_generator.state["state"]["pos"]
        gaus(engine)
        assert engine._bit_generator.state["state"]["pos"] == state_before
        assert not gaus.has_cached

    def test_reset_clears_cache(self):
        engine = MersenneTwister(9)
        gaus = NormalDistribution()
        gaus(engine)
        gaus.reset()
        assert not gaus.has_cached

    def test_scaling(self):
        """mean/stddev apply as an affine transform of the standard deviate."""
        standard = NormalDistribution()(MersenneTwister(7))
        scaled = NormalDistribution(3.0, 2.0)(MersenneTwister(7))
        assert scaled == standard * 2.0 + 3.0

    def test_reset_then_reseed_depends_only_on_seed(self):
        """After reset + reseed the draw equals a fresh engine/sampler draw."""
        engine = MersenneTwister(1)
        gaus = NormalDistribution()
        gaus(engine)

        gaus.reset()
        engine.seed(2)
        assert gaus(engine) == NormalDistribution()(MersenneTwister(2))

    def test_reseed_without_reset_leaks_previous_value(self):
        """Reseeding alone returns the deviate cached under the old seed."""
        engine = MersenneTwister(1)
        gaus = NormalDistribution()
        gaus(engine)

        engine.seed(2)
        leaked = gaus(engine)
        fresh = NormalDistribution()(MersenneTwister(2))
        assert leaked != fresh

        # The leaked value is the partner deviate of seed 1
        reference = NormalDistribution()
        reference_engine = MersenneTwister(1)
        reference(reference_engine)
        assert leaked == reference(reference_engine)

    def test_moments(self):
        engine = MersenneTwister(2024)
        gaus = NormalDistribution()
        values = np.array([gaus(engine) for _ in range(50_000)])
        assert abs(values.mean()) < 0.03
        assert abs(values.std() - 1.0) < 0.03
        assert all(math.isfinite(v) for v in values)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
