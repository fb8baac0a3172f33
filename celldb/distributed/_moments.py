"""Column moments and the covariance eigen-step for principal components."""

from __future__ import annotations

import logging
import warnings

import numpy as np
import scipy.linalg as la

log = logging.getLogger("celldb.distributed.moments")


def dense_rows(samples, dimension):
    """Stack samples into a dense ``(n, dimension)`` matrix, missing as ``0.0``.

    Parameters
    ----------
    samples : sequence of SparseSample
        Samples sharing ``dimension``.
    dimension : int
        Number of columns.

    Returns
    -------
    ndarray of shape (n, dimension)
        Dense rows in input order.
    """
    X = np.zeros((len(samples), dimension), dtype=np.float64)
    for i, sample in enumerate(samples):
        X[i, sample.indices] = sample.values
    return X


def partition_moments(X):
    r"""Compute local column sums and Gram matrix :math:`X^T X` on one partition.

    Parameters
    ----------
    X : ndarray of shape (n_local, d)
        Dense rows for this partition.

    Returns
    -------
    col_sum : ndarray of shape (d,)
        Column sums.
    XtX : ndarray of shape (d, d)
        Local Gram matrix.
    n : int
        Number of rows in this partition.
    """
    X = np.asarray(X, dtype=np.float64)
    return X.sum(axis=0), X.T @ X, X.shape[0]


def sum_moment_pair(a, b):
    """Sum two (col_sum, XtX, n) tuples element-wise."""
    return a[0] + b[0], a[1] + b[1], a[2] + b[2]


def reduce_moments(moment_list):
    """Driver-side sum of collected (col_sum, XtX, n) tuples.

    Parameters
    ----------
    moment_list : list of (ndarray, ndarray, int) or None
        Collected moment tuples from partitions.

    Returns
    -------
    tuple of (ndarray, ndarray, int) or None
        Summed (col_sum, XtX, n_total), or None if nothing was collected.
    """
    result = None
    for item in moment_list:
        if item is None:
            continue
        result = item if result is None else sum_moment_pair(result, item)
    return result


def components_from_moments(col_sum, XtX, n, k):
    r"""Top-``k`` principal directions from global column moments.

    The sample covariance is

    .. math::

        C = \frac{X^T X - n \bar{x} \bar{x}^T}{n - 1},

    with the denominator replaced by 1 when :math:`n = 1`. Its symmetric
    eigen-decomposition is computed with :func:`scipy.linalg.eigh`.
    Each returned direction is sign-normalised so that its largest-magnitude
    loading is positive, which makes the result deterministic.

    Parameters
    ----------
    col_sum : ndarray of shape (d,)
        Column sums over all rows.
    XtX : ndarray of shape (d, d)
        Global Gram matrix.
    n : int
        Total number of rows (at least 1).
    k : int
        Number of components, ``1 <= k <= d``.

    Returns
    -------
    components : ndarray of shape (d, k)
        Principal directions as columns, by descending variance.
    explained_variance : ndarray of shape (k,)
        Eigenvalues matching ``components``.
    total_variance : float
        Trace of the covariance matrix.
    mean : ndarray of shape (d,)
        Column means.
    """
    d = XtX.shape[0]
    mean = col_sum / n
    cov = (XtX - n * np.outer(mean, mean)) / max(n - 1, 1)
    cov = (cov + cov.T) / 2

    eigvals, eigvecs = la.eigh(cov, subset_by_index=[d - k, d - 1])
    order = np.argsort(eigvals, kind="stable")[::-1]
    eigvals = np.clip(eigvals[order], 0.0, None)
    components = eigvecs[:, order]

    pivot = np.argmax(np.abs(components), axis=0)
    signs = np.sign(components[pivot, np.arange(k)])
    signs[signs == 0] = 1.0
    components = components * signs

    total_variance = float(max(np.trace(cov), 0.0))
    if total_variance == 0.0:
        warnings.warn("All features have zero variance; principal components are arbitrary.", UserWarning)
    log.debug("eigen-step: d=%d, k=%d, n=%d, total variance %.6g", d, k, n, total_variance)
    return components, eigvals, total_variance, mean
