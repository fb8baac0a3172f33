"""Entry points for distributed principal components via Dask futures."""

from __future__ import annotations

import logging

import numpy as np

from celldb.analysis.pca import build_pca_result, validate_rank
from celldb.analysis.queries import as_samples
from celldb.core.errors import DimensionMismatch
from celldb.core.parallel import shard
from celldb.distributed import dense_rows, merge_keyed, partition_moments, partition_projection, sum_moment_pair

from ._reduce import tree_reduce
from ._utils import get_default_partitions, get_or_create_client

log = logging.getLogger("celldb.dask.pca")


def _shard_moments(samples, dimension):
    return partition_moments(dense_rows(samples, dimension))


def dask_fit_pca(samples, k, client=None, n_partitions=None, split_every=8):
    """Fit principal components with per-shard moments on Dask workers.

    Samples are split into contiguous shards, each worker computes column
    sums and :math:`X^T X` for its shard, and the results are tree-reduced
    before the driver-side eigen-step shared with
    :func:`~celldb.analysis.pca.fit_pca`.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.
    k : int
        Number of components.
    client : distributed.Client, optional
        Dask client. If None, the current client is used or a local one is
        created.
    n_partitions : int, optional
        Number of shards. Defaults to the total worker thread count.
    split_every : int, default 8
        Fan-in of the tree reduction.

    Returns
    -------
    PCAResult
        Components, explained variance and column means.

    Raises
    ------
    InvalidRank
        If ``samples`` is empty or ``k`` is outside ``[1, dimension]``.
    """
    samples, dimension = as_samples(samples)
    validate_rank(k, dimension or 0, len(samples))

    client = get_or_create_client(client)
    if n_partitions is None:
        n_partitions = get_default_partitions(client)

    shards = shard(samples, n_partitions)
    log.info("dask_fit_pca: %d samples in %d shards", len(samples), len(shards))
    futures = [client.submit(_shard_moments, s, dimension, pure=False) for s in shards]
    moments = tree_reduce(client, futures, sum_moment_pair, split_every=split_every)
    return build_pca_result(moments, k)


def dask_principal_components(samples, k, client=None, n_partitions=None):
    """Return the top-``k`` principal directions, shape ``(dimension, k)``."""
    return dask_fit_pca(samples, k, client=client, n_partitions=n_partitions).components


def dask_project(samples, components, client=None, n_partitions=None):
    """Project samples onto ``components`` on Dask workers.

    Every shard returns ``(id, row)`` pairs, and the driver joins them back
    by id, so futures may complete in any order.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.
    components : array_like of shape (dimension, k)
        Principal directions.
    client : distributed.Client, optional
        Dask client.
    n_partitions : int, optional
        Number of shards. Defaults to the total worker thread count.

    Returns
    -------
    dict
        ``id -> ndarray`` of shape ``(k,)``, in input order.
    """
    samples, dimension = as_samples(samples)
    components = np.asarray(components, dtype=np.float64)
    if components.ndim != 2:
        raise DimensionMismatch(f"components must be a 2-D matrix, got shape {components.shape}.")
    if dimension is not None and components.shape[0] != dimension:
        raise DimensionMismatch(f"components have {components.shape[0]} rows, samples have dimension {dimension}.")
    if not samples:
        return {}

    client = get_or_create_client(client)
    if n_partitions is None:
        n_partitions = get_default_partitions(client)

    [components_future] = client.scatter([components], broadcast=True)
    futures = [
        client.submit(partition_projection, s, components_future, pure=False) for s in shard(samples, n_partitions)
    ]
    parts = client.gather(futures)
    return merge_keyed(parts, [s.id for s in samples])
