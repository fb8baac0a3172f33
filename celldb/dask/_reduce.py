"""Tree reduction of Dask futures."""

from __future__ import annotations

from functools import reduce


def tree_reduce(client, futures, combine_fn, split_every=8):
    """Combine futures on the workers, ``split_every`` at a time, level by level.

    Only the final value travels back to the driver, so a reduction over
    many shards of :math:`d \\times d` moments never gathers them all at once.

    Parameters
    ----------
    client : distributed.Client
        Dask client.
    futures : list of Future
        Futures to combine (at least one).
    combine_fn : callable
        Associative pairwise combiner ``(a, b) -> c``.
    split_every : int, default 8
        Fan-in of each combine task.

    Returns
    -------
    object
        The combined value.
    """
    if split_every < 2:
        raise ValueError(f"split_every must be at least 2, got {split_every}.")
    if not futures:
        raise ValueError("tree_reduce needs at least one future.")
    level = list(futures)
    while len(level) > 1:
        groups = [level[i : i + split_every] for i in range(0, len(level), split_every)]
        level = [g[0] if len(g) == 1 else client.submit(_combine_group, combine_fn, *g, pure=False) for g in groups]
    return level[0].result()


def _combine_group(combine_fn, first, *rest):
    return reduce(combine_fn, rest, first)
