"""Dask distributed backend for celldb."""

from ._pca import dask_fit_pca, dask_principal_components, dask_project
from ._reduce import tree_reduce
from ._utils import get_default_partitions, get_or_create_client

__all__ = [
    "dask_fit_pca",
    "dask_principal_components",
    "dask_project",
    "get_default_partitions",
    "get_or_create_client",
    "tree_reduce",
]
