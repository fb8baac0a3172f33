"""Sparse sample storage, queries and principal component analysis.

The distributed backends live in :mod:`celldb.spark` and :mod:`celldb.dask`
and are imported on demand, since they need the optional ``spark`` and
``dask`` extras.
"""

from celldb.analysis import (
    PCAResult,
    compute_principal_components,
    dataset_sparsity,
    fit_pca,
    format_store_summary,
    measurements_per_sample,
    project,
    project_features,
    true_zeros_per_sample,
)
from celldb.core import (
    CelldbError,
    CellRow,
    Compression,
    DimensionMismatch,
    EmptyDataset,
    IndexOutOfRange,
    InvalidEntry,
    InvalidRank,
    NotFound,
    SampleStore,
    SchemaMismatch,
    SparseSample,
    StoreConfig,
    load_example,
    load_example_long,
    to_polars,
)

__version__ = "0.1.0"

__all__ = [
    "CellRow",
    "CelldbError",
    "Compression",
    "DimensionMismatch",
    "EmptyDataset",
    "IndexOutOfRange",
    "InvalidEntry",
    "InvalidRank",
    "NotFound",
    "PCAResult",
    "SampleStore",
    "SchemaMismatch",
    "SparseSample",
    "StoreConfig",
    "compute_principal_components",
    "dataset_sparsity",
    "fit_pca",
    "format_store_summary",
    "load_example",
    "load_example_long",
    "measurements_per_sample",
    "project",
    "project_features",
    "to_polars",
    "true_zeros_per_sample",
]
