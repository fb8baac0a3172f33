"""Principal component analysis of sparse sample collections."""

from __future__ import annotations

import logging
import os

import numpy as np

from celldb.core.errors import DimensionMismatch, InvalidRank
from celldb.core.parallel import check_n_jobs, parallel_map, shard
from celldb.distributed import (
    components_from_moments,
    dense_rows,
    merge_keyed,
    partition_moments,
    partition_projection,
)

from .queries import as_samples
from .results import PCAResult

__all__ = [
    "build_pca_result",
    "compute_principal_components",
    "fit_pca",
    "project",
    "validate_rank",
]

log = logging.getLogger("celldb.analysis.pca")


def validate_rank(k, dimension, n_samples):
    """Check that ``k`` components can be computed.

    Raises
    ------
    InvalidRank
        If there are no samples, or ``k`` is not an integer in
        ``[1, dimension]``.
    """
    if n_samples == 0:
        raise InvalidRank("Principal components require at least one sample.")
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidRank(f"k must be an integer, got {type(k).__name__}.")
    if k < 1 or k > dimension:
        raise InvalidRank(f"k must be between 1 and the dimension ({dimension}), got {k}.")


def build_pca_result(moments, k):
    """Turn reduced (col_sum, XtX, n) moments into a :class:`PCAResult`."""
    col_sum, XtX, n = moments
    components, explained, total, mean = components_from_moments(col_sum, XtX, n, k)
    ratio = explained / total if total > 0 else np.zeros_like(explained)
    return PCAResult(
        components=components,
        explained_variance=explained,
        explained_variance_ratio=ratio,
        mean=mean,
        n_samples=int(n),
    )


def fit_pca(samples, k):
    """Fit principal components on the dense rows of ``samples``.

    Missing features are treated as ``0.0``. This is a deliberate, lossy
    conversion: PCA needs a real-valued matrix, so the distinction between
    an unmeasured feature and an explicit zero is dropped for this analysis
    only.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection, in a fixed order.
    k : int
        Number of components.

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
    X = dense_rows(samples, dimension)
    log.info("fit_pca: %d samples x %d features, k=%d", X.shape[0], X.shape[1], k)
    return build_pca_result(partition_moments(X), k)


def compute_principal_components(samples, k):
    """Return the top-``k`` principal directions of ``samples``.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.
    k : int
        Number of components.

    Returns
    -------
    ndarray of shape (dimension, k)
        Principal directions as columns, by descending variance.

    Raises
    ------
    InvalidRank
        If ``samples`` is empty or ``k`` is outside ``[1, dimension]``.

    See Also
    --------
    fit_pca : Same computation, also returning explained variance.
    """
    return fit_pca(samples, k).components


def project(samples, components, n_jobs=1, n_shards=None):
    """Multiply each dense sample row by ``components``.

    Rows are not centred, matching a plain row-matrix multiply. When the work
    is sharded, every shard returns ``(id, row)`` pairs and the results are
    joined back by id, so the output never depends on shard boundaries.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.
    components : array_like of shape (dimension, k)
        Principal directions.
    n_jobs : int, default 1
        1 = sequential, -1 = all cores, >1 = that many worker threads.
    n_shards : int, optional
        Number of shards. Defaults to the number of workers.

    Returns
    -------
    dict
        ``id -> ndarray`` of shape ``(k,)``, in input order.

    Raises
    ------
    DimensionMismatch
        If ``components`` does not have one row per feature.
    ValueError
        If ``n_jobs`` is not -1 or a positive integer.
    """
    samples, dimension = as_samples(samples)
    check_n_jobs(n_jobs)
    components = np.asarray(components, dtype=np.float64)
    if components.ndim != 2:
        raise DimensionMismatch(f"components must be a 2-D matrix, got shape {components.shape}.")
    if dimension is not None and components.shape[0] != dimension:
        raise DimensionMismatch(f"components have {components.shape[0]} rows, samples have dimension {dimension}.")

    if n_shards is None:
        n_shards = (os.cpu_count() or 1) if n_jobs == -1 else max(n_jobs, 1)
    shards = shard(samples, n_shards)
    log.debug("project: %d samples in %d shards", len(samples), len(shards))

    parts = parallel_map(partition_projection, [(s, components) for s in shards], n_jobs=n_jobs)
    return merge_keyed(parts, [s.id for s in samples])
