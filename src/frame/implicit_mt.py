"""
Process-wide implicit multithreading switch.

When enabled, EntryFrame runs its event loop on a thread pool of the
configured size; otherwise every entry is processed on the calling thread.
"""
import logging
import os
import threading


logger = logging.getLogger(__name__)

_lock = threading.Lock()
_state = {"enabled": False, "pool_size": 1}


def enable_implicit_mt(n_threads: int = 0) -> None:
    """
    Enable implicit multithreading.

    Args:
        n_threads: Thread pool size. 0 means one thread per CPU
    """
    if n_threads < 0:
        raise ValueError(f"n_threads must be non-negative, got {n_threads}")
    if n_threads == 0:
        n_threads = os.cpu_count() or 1
    with _lock:
        _state["enabled"] = True
        _state["pool_size"] = n_threads
    logger.info(f"Implicit MT enabled with {n_threads} threads")


def disable_implicit_mt() -> None:
    with _lock:
        _state["enabled"] = False
        _state["pool_size"] = 1
    logger.info("Implicit MT disabled")


def is_implicit_mt_enabled() -> bool:
    return _state["enabled"]


def get_thread_pool_size() -> int:
    """Number of worker slots the next event loop will use (1 when disabled)."""
    return _state["pool_size"] if _state["enabled"] else 1
