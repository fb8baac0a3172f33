"""Keyed projection of sample shards onto principal components."""

from __future__ import annotations

import numpy as np

from ._moments import dense_rows


def partition_projection(samples, components):
    """Project one shard of samples and key each result by sample id.

    Parameters
    ----------
    samples : sequence of SparseSample
        Samples in this shard.
    components : ndarray of shape (d, k)
        Principal directions.

    Returns
    -------
    list of (str, ndarray)
        ``(id, projection)`` pairs. The id travels with its row so shards
        can be recombined without relying on position.
    """
    if not samples:
        return []
    X = dense_rows(samples, components.shape[0])
    projected = X @ components
    return [(s.id, np.array(row)) for s, row in zip(samples, projected, strict=True)]


def merge_keyed(parts, ids):
    """Join keyed shard results back onto the input ids.

    Parameters
    ----------
    parts : iterable of list of (str, ndarray)
        Shard outputs from :func:`partition_projection`, in any order.
    ids : sequence of str
        Input ids, which fix the output order.

    Returns
    -------
    dict
        ``id -> projection`` in the order of ``ids``.

    Raises
    ------
    RuntimeError
        If the shards do not cover ``ids`` exactly once each.
    """
    by_id = {}
    for part in parts:
        for sample_id, row in part:
            if sample_id in by_id:
                raise RuntimeError(f"Sample {sample_id!r} was projected more than once.")
            by_id[sample_id] = row
    if by_id.keys() != set(ids):
        missing = sorted(set(ids) - by_id.keys())
        extra = sorted(by_id.keys() - set(ids))
        raise RuntimeError(f"Projection does not match input ids (missing {missing}, unexpected {extra}).")
    return {sample_id: by_id[sample_id] for sample_id in ids}
