"""Stateless analytic queries over a collection of sparse samples."""

from __future__ import annotations

import numpy as np

from celldb.core.errors import DimensionMismatch, EmptyDataset, InvalidEntry
from celldb.core.sample import SparseSample
from celldb.core.store import SampleStore

__all__ = [
    "as_samples",
    "dataset_sparsity",
    "measurements_per_sample",
    "project_features",
    "true_zeros_per_sample",
]


def as_samples(samples):
    """Normalise a store or iterable of samples into a list and its dimension.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.

    Returns
    -------
    samples : list of SparseSample
        Samples in input order.
    dimension : int or None
        Shared dimension, or None for an empty iterable.

    Raises
    ------
    DimensionMismatch
        If samples disagree on the dimension.
    InvalidEntry
        If an element is not a SparseSample or an id repeats.
    """
    if isinstance(samples, SampleStore):
        return list(samples), samples.dimension

    out = list(samples)
    seen = set()
    dimension = None
    for s in out:
        if not isinstance(s, SparseSample):
            raise InvalidEntry(f"Expected SparseSample, got {type(s).__name__}.")
        if s.id in seen:
            raise InvalidEntry(f"Duplicate sample id {s.id!r} in collection.")
        seen.add(s.id)
        if dimension is None:
            dimension = s.dimension
        elif s.dimension != dimension:
            raise DimensionMismatch(f"Sample {s.id!r} has dimension {s.dimension}, expected {dimension}.")
    return out, dimension


def measurements_per_sample(samples):
    """Return the number of explicit measurements of each sample.

    Explicit zeros count as measurements.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.

    Returns
    -------
    dict
        ``id -> int``.
    """
    samples, _ = as_samples(samples)
    return {s.id: s.num_active() for s in samples}


def dataset_sparsity(samples):
    r"""Return the mean fraction of feature slots carrying a measurement.

    .. math::

        \text{sparsity} = \frac{1}{n d} \sum_i \text{nnz}_i

    where :math:`\text{nnz}_i` counts explicit entries of sample :math:`i`.
    The value lies in :math:`[0, 1]`; it is ``0.0`` when the dimension is 0.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.

    Returns
    -------
    float
        Dataset sparsity.

    Raises
    ------
    EmptyDataset
        If the collection holds no samples.
    """
    samples, dimension = as_samples(samples)
    if not samples:
        raise EmptyDataset("Sparsity is undefined for a dataset without samples.")
    if dimension == 0:
        return 0.0
    counts = np.array([s.num_active() for s in samples], dtype=np.float64)
    return float(counts.mean() / dimension)


def true_zeros_per_sample(samples):
    """Return the number of explicit entries exactly equal to ``0.0``.

    Unmeasured features are not zeros and are never counted.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.

    Returns
    -------
    dict
        ``id -> int``.
    """
    samples, _ = as_samples(samples)
    return {s.id: s.true_zeros() for s in samples}


def project_features(feature_indices, samples):
    """Return dense values of selected features for each sample.

    Missing features become ``0.0`` (see
    :meth:`~celldb.core.sample.SparseSample.dense_projection`).

    Parameters
    ----------
    feature_indices : sequence of int
        Features to keep, in output order.
    samples : SampleStore or iterable of SparseSample
        Input collection.

    Returns
    -------
    dict
        ``id -> ndarray`` of shape ``(len(feature_indices),)``.

    Raises
    ------
    IndexOutOfRange
        If a feature index is outside the dimension.
    """
    feature_indices = list(feature_indices)
    samples, _ = as_samples(samples)
    return {s.id: s.dense_projection(feature_indices) for s in samples}
