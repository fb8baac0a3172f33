"""Tests for dataset summary formatting."""

from celldb import SampleStore, SparseSample, dataset_sparsity, format_store_summary


def test_store_summary(example_store):
    text = format_store_summary(example_store)
    assert "Sparse Sample Store" in text
    assert "Samples: 3" in text
    assert "Features: 5" in text
    assert "Sparsity: 0.6667" in text
    assert "True zeros" in text
    for sample_id in ("s1", "s2", "s3"):
        assert sample_id in text


def test_store_summary_empty():
    text = format_store_summary(SampleStore(4), title="Empty")
    assert "Empty" in text
    assert "Samples: 0" in text
    assert "Sparsity" not in text


def test_store_summary_plain_list(example_store):
    assert "Samples: 3" in format_store_summary(list(example_store))


def test_store_str_is_summary(example_store):
    text = str(example_store)
    assert text == example_store.summary()
    assert "Sparsity: 0.6667" in text
    assert repr(example_store) == "SampleStore(dimension=5, samples=3)"


def test_store_summary_custom_title(example_store):
    assert "Cells" in example_store.summary(title="Cells")


def test_store_summary_sparsity_matches_query(random_store):
    text = format_store_summary(random_store)
    assert f"Sparsity: {dataset_sparsity(random_store):.4f}" in text


def test_store_summary_zero_dimension():
    store = SampleStore.from_samples([SparseSample("a", 0, [], [])])
    assert "Sparsity: 0.0000" in format_store_summary(store)
