"""Result structures for principal component analysis."""

from typing import NamedTuple

import numpy as np


class PCAResult(NamedTuple):
    r"""Result from principal component analysis of a sample collection.

    Attributes
    ----------
    components : ndarray of shape (dimension, k)
        Principal directions as columns, ordered by descending variance.
    explained_variance : ndarray of shape (k,)
        Covariance eigenvalue of each direction.
    explained_variance_ratio : ndarray of shape (k,)
        ``explained_variance`` divided by the total variance (trace of the
        covariance). Zero when the total variance is zero.
    mean : ndarray of shape (dimension,)
        Column means of the dense rows (missing features as ``0.0``).
    n_samples : int
        Number of samples used.
    """

    components: np.ndarray
    explained_variance: np.ndarray
    explained_variance_ratio: np.ndarray
    mean: np.ndarray
    n_samples: int
