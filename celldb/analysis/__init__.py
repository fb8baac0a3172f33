"""Queries and dimensionality reduction over sparse sample collections."""

from .format import format_store_summary
from .pca import build_pca_result, compute_principal_components, fit_pca, project, validate_rank
from .queries import (
    as_samples,
    dataset_sparsity,
    measurements_per_sample,
    project_features,
    true_zeros_per_sample,
)
from .results import PCAResult

__all__ = [
    "PCAResult",
    "as_samples",
    "build_pca_result",
    "compute_principal_components",
    "dataset_sparsity",
    "fit_pca",
    "format_store_summary",
    "measurements_per_sample",
    "project",
    "project_features",
    "true_zeros_per_sample",
    "validate_rank",
]
