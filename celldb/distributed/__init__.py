"""Shared pure-numpy functions for local and distributed backends (Dask, Spark).

This package contains the framework-agnostic computation used by
:mod:`celldb.analysis.pca`, :mod:`celldb.dask` and :mod:`celldb.spark`.
Every function here operates on NumPy arrays and has **zero** Dask / Spark
dependencies, so all three paths produce identical components.
"""

from ._moments import (
    components_from_moments,
    dense_rows,
    partition_moments,
    reduce_moments,
    sum_moment_pair,
)
from ._projection import merge_keyed, partition_projection

__all__ = [
    "components_from_moments",
    "dense_rows",
    "merge_keyed",
    "partition_moments",
    "partition_projection",
    "reduce_moments",
    "sum_moment_pair",
]
