"""Shared test fixtures for celldb."""

import numpy as np
import pytest

from celldb import SampleStore, SparseSample, load_example


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def example_store():
    return load_example()


@pytest.fixture
def random_store(rng):
    """Store of 40 samples over 12 features with ~50% measured and some true zeros."""
    dimension = 12
    samples = []
    for i in range(40):
        mask = rng.random(dimension) < 0.5
        idx = np.flatnonzero(mask)
        rng.shuffle(idx)
        vals = rng.standard_normal(len(idx))
        vals[rng.random(len(idx)) < 0.15] = 0.0
        samples.append(SparseSample(f"cell_{i:03d}", dimension, idx, vals))
    return SampleStore.from_samples(samples, dimension=dimension)
