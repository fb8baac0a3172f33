"""Tests for principal component analysis and keyed projection."""

import numpy as np
import pytest

from celldb import (
    DimensionMismatch,
    InvalidRank,
    PCAResult,
    SampleStore,
    SparseSample,
    compute_principal_components,
    fit_pca,
    project,
)
from celldb.distributed import dense_rows


def _reference_components(X, k):
    cov = np.cov(X, rowvar=False)
    eigvals, eigvecs = np.linalg.eigh(cov)
    order = np.argsort(eigvals)[::-1][:k]
    return eigvals[order], eigvecs[:, order]


def _align_signs(reference, actual):
    signs = np.sign(np.sum(reference * actual, axis=0))
    return reference * signs


def test_components_shape_and_orthonormality(example_store):
    pc = compute_principal_components(example_store, 2)
    assert pc.shape == (5, 2)
    np.testing.assert_allclose(pc.T @ pc, np.eye(2), atol=1e-10)


def test_components_match_covariance_eigenvectors(random_store):
    X = dense_rows(list(random_store), random_store.dimension)
    result = fit_pca(random_store, 4)
    ref_vals, ref_vecs = _reference_components(X, 4)
    np.testing.assert_allclose(result.explained_variance, ref_vals, rtol=1e-8, atol=1e-10)
    np.testing.assert_allclose(result.components, _align_signs(ref_vecs, result.components), atol=1e-8)


def test_example_matches_reference(example_store):
    X = np.array(
        [[0.0, 1.0, 0.0, 7.0, 0.0], [2.0, 0.0, 3.0, 4.0, 5.0], [4.0, 0.0, 0.0, 6.0, 7.0]],
    )
    pc = compute_principal_components(example_store, 2)
    ref_vals, ref_vecs = _reference_components(X, 2)
    np.testing.assert_allclose(pc, _align_signs(ref_vecs, pc), atol=1e-8)
    np.testing.assert_allclose(fit_pca(example_store, 2).explained_variance, ref_vals, rtol=1e-8)


def test_sign_normalisation(random_store):
    pc = compute_principal_components(random_store, 3)
    pivots = np.argmax(np.abs(pc), axis=0)
    assert np.all(pc[pivots, np.arange(3)] > 0)


def test_deterministic(random_store):
    a = compute_principal_components(random_store, 3)
    b = compute_principal_components(random_store, 3)
    np.testing.assert_array_equal(a, b)


def test_missing_treated_as_zero():
    measured_zero = [
        SparseSample("a", 3, [0, 1, 2], [1.0, 0.0, 2.0]),
        SparseSample("b", 3, [0, 1, 2], [3.0, 1.0, 0.0]),
        SparseSample("c", 3, [0, 1, 2], [0.0, 5.0, 1.0]),
    ]
    missing = [
        SparseSample("a", 3, [0, 2], [1.0, 2.0]),
        SparseSample("b", 3, [0, 1], [3.0, 1.0]),
        SparseSample("c", 3, [1, 2], [5.0, 1.0]),
    ]
    np.testing.assert_allclose(
        compute_principal_components(measured_zero, 2), compute_principal_components(missing, 2)
    )


def test_fit_pca_result(random_store):
    result = fit_pca(random_store, random_store.dimension)
    assert isinstance(result, PCAResult)
    assert result.n_samples == len(random_store)
    assert np.all(np.diff(result.explained_variance) <= 1e-12)
    assert result.explained_variance_ratio.sum() == pytest.approx(1.0)
    X = dense_rows(list(random_store), random_store.dimension)
    np.testing.assert_allclose(result.mean, X.mean(axis=0))


def test_fit_pca_repr(example_store):
    text = repr(fit_pca(example_store, 2))
    assert "Principal Component Analysis" in text
    assert "PC1" in text
    assert "PC2" in text
    assert "3 samples" in text


@pytest.mark.parametrize("k", [0, 6, -1])
def test_invalid_rank(example_store, k):
    with pytest.raises(InvalidRank, match="between 1 and the dimension"):
        compute_principal_components(example_store, k)


def test_invalid_rank_non_integer(example_store):
    with pytest.raises(InvalidRank, match="integer"):
        compute_principal_components(example_store, 1.5)


def test_invalid_rank_empty():
    with pytest.raises(InvalidRank, match="at least one sample"):
        compute_principal_components(SampleStore(5), 1)
    with pytest.raises(InvalidRank):
        compute_principal_components([], 1)


def test_single_sample_warns_zero_variance():
    with pytest.warns(UserWarning, match="zero variance"):
        result = fit_pca([SparseSample("only", 3, [0], [1.0])], 2)
    assert result.components.shape == (3, 2)
    np.testing.assert_array_equal(result.explained_variance_ratio, [0.0, 0.0])


def test_project_matches_matrix_product(random_store):
    pc = compute_principal_components(random_store, 2)
    X = dense_rows(list(random_store), random_store.dimension)
    expected = X @ pc
    result = project(random_store, pc)
    assert list(result) == random_store.ids()
    for i, sample_id in enumerate(random_store.ids()):
        np.testing.assert_allclose(result[sample_id], expected[i])


def test_project_is_not_centered(example_store):
    pc = compute_principal_components(example_store, 2)
    result = project(example_store, pc)
    np.testing.assert_allclose(result["s1"], np.array([0.0, 1.0, 0.0, 7.0, 0.0]) @ pc)


@pytest.mark.parametrize("n_jobs,n_shards", [(1, 1), (1, 7), (2, None), (4, 3), (-1, None), (3, 40)])
def test_project_sharding_keeps_id_correspondence(random_store, n_jobs, n_shards):
    pc = compute_principal_components(random_store, 3)
    baseline = project(random_store, pc)
    sharded = project(random_store, pc, n_jobs=n_jobs, n_shards=n_shards)
    assert list(sharded) == list(baseline)
    for sample_id, row in baseline.items():
        np.testing.assert_array_equal(sharded[sample_id], row)


def test_project_identity_components(example_store):
    result = project(example_store, np.eye(5))
    for sample in example_store:
        np.testing.assert_array_equal(result[sample.id], sample.to_dense())


def test_project_dimension_mismatch(example_store):
    with pytest.raises(DimensionMismatch, match="components have 4 rows"):
        project(example_store, np.ones((4, 2)))
    with pytest.raises(DimensionMismatch, match="2-D"):
        project(example_store, np.ones(5))


def test_project_empty():
    assert project([], np.eye(3)) == {}


@pytest.mark.parametrize("n_jobs", [0, -3])
def test_project_invalid_n_jobs(example_store, n_jobs):
    pc = compute_principal_components(example_store, 2)
    with pytest.raises(ValueError, match="n_jobs must be -1 or at least 1"):
        project(example_store, pc, n_jobs=n_jobs, n_shards=3)
