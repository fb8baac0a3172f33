"""Thread-pool execution over contiguous shards of samples."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

__all__ = ["check_n_jobs", "parallel_map", "shard"]


def check_n_jobs(n_jobs):
    """Reject worker counts other than -1 or a positive integer."""
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, (int, np.integer)) or (n_jobs != -1 and n_jobs < 1):
        raise ValueError(f"n_jobs must be -1 or at least 1, got {n_jobs!r}.")


def parallel_map(func, args_list, n_jobs=1):
    """Call ``func(*args)`` for every tuple in ``args_list``.

    Shard work is a NumPy matrix product that releases the GIL, so threads
    give real parallelism without copying samples into subprocesses.

    Parameters
    ----------
    func : callable
        Function applied to each argument tuple.
    args_list : list of tuple
        Arguments, one tuple per call.
    n_jobs : int, default 1
        1 runs inline, -1 uses one thread per core, any other positive
        value is the thread count.

    Returns
    -------
    list
        Results in the order of ``args_list``. The first exception raised
        by a call propagates.
    """
    check_n_jobs(n_jobs)
    if n_jobs == 1 or len(args_list) <= 1:
        return [func(*args) for args in args_list]
    workers = os.cpu_count() if n_jobs == -1 else n_jobs
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="celldb") as pool:
        return list(pool.map(lambda args: func(*args), args_list))


def shard(items, n_shards):
    """Split a sequence into at most ``n_shards`` contiguous, non-empty shards.

    Parameters
    ----------
    items : sequence
        Items to split.
    n_shards : int
        Requested number of shards (at least 1).

    Returns
    -------
    list of list
        Shards covering ``items`` in order.
    """
    if n_shards < 1:
        raise ValueError(f"n_shards must be at least 1, got {n_shards}.")
    items = list(items)
    if not items:
        return []
    bounds = np.linspace(0, len(items), min(n_shards, len(items)) + 1).astype(int)
    return [items[lo:hi] for lo, hi in zip(bounds[:-1], bounds[1:], strict=True)]
