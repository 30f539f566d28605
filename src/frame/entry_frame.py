"""
Minimal entry-based dataframe with implicit multithreading.

An EntryFrame describes n empty entries numbered 0..n-1 plus a list of
computed columns. Nothing runs until collect() (or histo1d()) is called.
The event loop splits the entry range into chunks on a shared backlog and,
with implicit MT enabled, lets one pulling loop per worker slot drain it, so
the entry -> slot assignment is decided at runtime and differs between runs.
"""
import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import polars as pl

from src.analysis.histogram import Histogram1D, HistogramModel
from src.frame.implicit_mt import get_thread_pool_size


logger = logging.getLogger(__name__)


ENTRY_COLUMN = "rdfentry_"
SLOT_COLUMN = "rdfslot_"
RESERVED_COLUMNS = (ENTRY_COLUMN, SLOT_COLUMN)

MAX_CHUNK_SIZE = 10_000
CHUNKS_PER_WORKER = 4


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    kind: str  # "plain", "slot" or "slot_entry"
    fn: Callable

    def bind(self) -> Callable[[int, int], float]:
        """Return a uniform fn(slot, entry) view of the column function."""
        fn = self.fn
        if self.kind == "plain":
            return lambda slot, entry: fn()
        if self.kind == "slot":
            return lambda slot, entry: fn(slot)
        return fn


def _make_chunks(n_entries: int, chunk_size: int) -> List[Tuple[int, int]]:
    return [
        (start, min(start + chunk_size, n_entries))
        for start in range(0, n_entries, chunk_size)
    ]


class EntryFrame:
    """
    Lazy computation graph over a fixed number of entries.

    Parameters
    ----------
    n_entries : int
        Number of entries to process
    chunk_size : int, optional
        Entries per backlog chunk. Default scales with the worker count
    n_workers : int, optional
        Worker slots to use. Default follows the implicit MT setting
    shuffle_seed : int, optional
        If given, chunks are queued in a permuted order
    """

    def __init__(
        self,
        n_entries: int,
        chunk_size: Optional[int] = None,
        n_workers: Optional[int] = None,
        shuffle_seed: Optional[int] = None,
        _columns: Tuple[ColumnDefinition, ...] = (),
    ):
        if n_entries < 0:
            raise ValueError(f"n_entries must be non-negative, got {n_entries}")
        if chunk_size is not None and chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if n_workers is not None and n_workers < 1:
            raise ValueError(f"n_workers must be positive, got {n_workers}")

        self.n_entries = int(n_entries)
        self.chunk_size = chunk_size
        self.n_workers = n_workers
        self.shuffle_seed = shuffle_seed
        self._columns = _columns

    # -----------------------------
    # Graph construction
    # -----------------------------

    @property
    def columns(self) -> List[str]:
        return [ENTRY_COLUMN, SLOT_COLUMN] + [c.name for c in self._columns]

    def _with_column(self, name: str, kind: str, fn: Callable) -> "EntryFrame":
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Invalid column name: {name!r}")
        if name in RESERVED_COLUMNS:
            raise ValueError(f"Column name {name!r} is reserved")
        if name in self.columns:
            raise ValueError(f"Column {name!r} is already defined")
        if not callable(fn):
            raise ValueError(f"Column {name!r} needs a callable, got {type(fn).__name__}")

        return EntryFrame(
            self.n_entries,
            chunk_size=self.chunk_size,
            n_workers=self.n_workers,
            shuffle_seed=self.shuffle_seed,
            _columns=self._columns + (ColumnDefinition(name, kind, fn),),
        )

    def define(self, name: str, fn: Callable[[], float]) -> "EntryFrame":
        """Define a column computed as fn()."""
        return self._with_column(name, "plain", fn)

    def define_slot(self, name: str, fn: Callable[[int], float]) -> "EntryFrame":
        """Define a column computed as fn(slot)."""
        return self._with_column(name, "slot", fn)

    def define_slot_entry(self, name: str, fn: Callable[[int, int], float]) -> "EntryFrame":
        """Define a column computed as fn(slot, entry)."""
        return self._with_column(name, "slot_entry", fn)

    # -----------------------------
    # Event loop
    # -----------------------------

    def _resolve_workers(self) -> int:
        n_workers = self.n_workers if self.n_workers is not None else get_thread_pool_size()
        # No point in more slots than entries
        return max(1, min(n_workers, self.n_entries))

    def _resolve_chunk_size(self, n_workers: int) -> int:
        if self.chunk_size is not None:
            return self.chunk_size
        per_chunk = -(-self.n_entries // (CHUNKS_PER_WORKER * n_workers))
        return max(1, min(MAX_CHUNK_SIZE, per_chunk))

    def _run(self) -> Tuple[np.ndarray, Dict[str, np.ndarray]]:
        n = self.n_entries
        n_workers = self._resolve_workers()
        chunks = _make_chunks(n, self._resolve_chunk_size(n_workers))

        if self.shuffle_seed is not None:
            order = np.random.default_rng(self.shuffle_seed).permutation(len(chunks))
            chunks = [chunks[i] for i in order]

        slots = np.zeros(n, dtype=np.uint32)
        values = {c.name: np.empty(n, dtype=np.float64) for c in self._columns}
        bound = [(values[c.name], c.bind()) for c in self._columns]

        def process_chunk(slot: int, start: int, stop: int) -> None:
            for entry in range(start, stop):
                slots[entry] = slot
                for out, fn in bound:
                    out[entry] = fn(slot, entry)

        logger.debug(f"Event loop: {n} entries, {len(chunks)} chunks, {n_workers} slots")
        t0 = time.time()

        if n_workers == 1:
            for start, stop in chunks:
                process_chunk(0, start, stop)
        else:
            backlog: "queue.SimpleQueue[Tuple[int, int]]" = queue.SimpleQueue()
            for chunk in chunks:
                backlog.put(chunk)

            def drain(slot: int) -> int:
                processed = 0
                while True:
                    try:
                        start, stop = backlog.get_nowait()
                    except queue.Empty:
                        return processed
                    process_chunk(slot, start, stop)
                    processed += stop - start

            with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="entry-slot") as executor:
                futures = [executor.submit(drain, slot) for slot in range(n_workers)]
                per_slot = [future.result() for future in futures]
            logger.debug(f"Entries per slot: {per_slot}")

        logger.debug(f"Event loop finished in {(time.time() - t0) * 1000:.1f}ms")
        return slots, values

    # -----------------------------
    # Actions
    # -----------------------------

    def count(self) -> int:
        return self.n_entries

    def collect(self) -> pl.DataFrame:
        """
        Run the event loop and return every column.

        Returns
        -------
        pl.DataFrame
            rdfentry_ (UInt64), rdfslot_ (UInt32) and one Float64 column per
            definition, ordered by entry
        """
        slots, values = self._run()
        data = {
            ENTRY_COLUMN: pl.Series(ENTRY_COLUMN, np.arange(self.n_entries, dtype=np.uint64)),
            SLOT_COLUMN: pl.Series(SLOT_COLUMN, slots),
        }
        for name, array in values.items():
            data[name] = pl.Series(name, array, dtype=pl.Float64)
        return pl.DataFrame(data)

    def histo1d(self, model: HistogramModel, column: str) -> Histogram1D:
        """Run the event loop and fill a histogram from one column."""
        if column not in self.columns:
            raise KeyError(f"Unknown column: {column}")
        df = self.collect()
        hist = Histogram1D(model)
        hist.fill(df[column].to_numpy())
        return hist

    def __repr__(self) -> str:
        defined = ", ".join(c.name for c in self._columns)
        return f"EntryFrame(n_entries={self.n_entries}, columns=[{defined}])"
