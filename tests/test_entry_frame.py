"""
Test the entry pipeline and the implicit MT switch.
"""
import os
import sys
from pathlib import Path

import polars as pl
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.analysis.histogram import HistogramModel
from src.frame.entry_frame import EntryFrame
from src.frame.implicit_mt import (
    disable_implicit_mt,
    enable_implicit_mt,
    get_thread_pool_size,
    is_implicit_mt_enabled,
)


@pytest.fixture(autouse=True)
def no_implicit_mt():
    """Every test starts and ends with implicit MT off."""
    disable_implicit_mt()
    yield
    disable_implicit_mt()


class TestImplicitMT:

    def test_default_disabled(self):
        assert not is_implicit_mt_enabled()
        assert get_thread_pool_size() == 1

    def test_enable_and_disable(self):
        enable_implicit_mt(6)
        assert is_implicit_mt_enabled()
        assert get_thread_pool_size() == 6
        disable_implicit_mt()
        assert get_thread_pool_size() == 1

    def test_zero_means_all_cpus(self):
        enable_implicit_mt(0)
        assert get_thread_pool_size() == (os.cpu_count() or 1)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            enable_implicit_mt(-2)

    def test_frame_follows_setting(self):
        enable_implicit_mt(3)
        df = EntryFrame(300, chunk_size=10).define_slot("s", lambda slot: float(slot)).collect()
        assert set(df["rdfslot_"].unique().to_list()) <= {0, 1, 2}


class TestEntryFrame:

    def test_collect_schema(self):
        df = EntryFrame(10).define("x", lambda: 1.5).collect()
        assert df.columns == ["rdfentry_", "rdfslot_", "x"]
        assert df.schema["rdfentry_"] == pl.UInt64
        assert df.schema["rdfslot_"] == pl.UInt32
        assert df.schema["x"] == pl.Float64
        assert df["rdfentry_"].to_list() == list(range(10))
        assert df["x"].to_list() == [1.5] * 10

    def test_single_thread_uses_slot_zero(self):
        df = EntryFrame(50, chunk_size=7).define_slot("s", lambda slot: float(slot)).collect()
        assert df["rdfslot_"].unique().to_list() == [0]
        assert df["s"].unique().to_list() == [0.0]

    def test_slot_entry_arguments(self):
        frame = EntryFrame(1000, chunk_size=13, n_workers=4)
        df = frame.define_slot_entry("e", lambda slot, entry: float(entry)) \
                  .define_slot_entry("s", lambda slot, entry: float(slot)) \
                  .collect()
        assert df["e"].to_list() == [float(i) for i in range(1000)]
        # The slot seen by the function is the one recorded for the entry
        assert (df["s"].cast(pl.UInt32) == df["rdfslot_"]).all()
        assert df["rdfslot_"].max() < 4

    def test_shuffled_chunks_keep_entry_order(self):
        frame = EntryFrame(500, chunk_size=9, n_workers=3, shuffle_seed=1)
        df = frame.define_slot_entry("e", lambda slot, entry: float(entry)).collect()
        assert df["e"].to_list() == [float(i) for i in range(500)]

    def test_define_is_immutable(self):
        base = EntryFrame(5)
        derived = base.define("x", lambda: 0.0)
        assert base.columns == ["rdfentry_", "rdfslot_"]
        assert derived.columns == ["rdfentry_", "rdfslot_", "x"]

    def test_empty_frame(self):
        df = EntryFrame(0, n_workers=4).define("x", lambda: 1.0).collect()
        assert df.height == 0
        assert EntryFrame(0).count() == 0

    def test_more_workers_than_entries(self):
        df = EntryFrame(3, n_workers=16).define_slot_entry("e", lambda s, e: float(e)).collect()
        assert df["e"].to_list() == [0.0, 1.0, 2.0]

    @pytest.mark.parametrize("name", ["rdfentry_", "rdfslot_", "1x", "", "a b"])
    def test_invalid_column_names(self, name):
        with pytest.raises(ValueError):
            EntryFrame(5).define(name, lambda: 0.0)

    def test_duplicate_column(self):
        frame = EntryFrame(5).define("x", lambda: 0.0)
        with pytest.raises(ValueError):
            frame.define_slot("x", lambda slot: 1.0)

    def test_non_callable(self):
        with pytest.raises(ValueError):
            EntryFrame(5).define("x", 3.0)

    @pytest.mark.parametrize("kwargs", [
        {"n_entries": -1},
        {"n_entries": 5, "chunk_size": 0},
        {"n_entries": 5, "n_workers": 0},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            EntryFrame(**kwargs)

    def test_errors_propagate_from_workers(self):
        def boom(slot, entry):
            if entry == 77:
                raise RuntimeError("bad entry")
            return 0.0

        frame = EntryFrame(200, chunk_size=10, n_workers=4).define_slot_entry("x", boom)
        with pytest.raises(RuntimeError, match="bad entry"):
            frame.collect()

    def test_histo1d(self):
        model = HistogramModel("h", "ones", 4, 0.0, 2.0)
        hist = EntryFrame(100, n_workers=2).define("x", lambda: 1.0).histo1d(model, "x")
        assert hist.entries == 100
        assert hist.counts.tolist() == [0, 0, 100, 0]
        assert hist.mean == pytest.approx(1.0)

    def test_histo1d_unknown_column(self):
        model = HistogramModel("h", "h", 4, 0.0, 2.0)
        with pytest.raises(KeyError):
            EntryFrame(10).define("x", lambda: 1.0).histo1d(model, "y")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
