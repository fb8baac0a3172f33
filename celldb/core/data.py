"""Datasets."""

import polars as pl

from .sample import SparseSample
from .store import SampleStore

__all__ = [
    "load_example",
    "load_example_long",
]

EXAMPLE_DIMENSION = 5


def load_example() -> SampleStore:
    """Load the illustrative three-sample, five-feature dataset.

    Sample ``s1`` carries an explicit (true) zero at feature 2, which must be
    kept distinct from the unmeasured features 0 and 4.

    Returns
    -------
    SampleStore
        A store with samples ``s1``, ``s2`` and ``s3``:

        - *s1*: ``{1: 1.0, 2: 0.0, 3: 7.0}``
        - *s2*: ``{0: 2.0, 2: 3.0, 3: 4.0, 4: 5.0}``
        - *s3*: ``{0: 4.0, 3: 6.0, 4: 7.0}``
    """
    return SampleStore.from_samples(
        [
            SparseSample("s1", EXAMPLE_DIMENSION, [1, 2, 3], [1.0, 0.0, 7.0]),
            SparseSample("s2", EXAMPLE_DIMENSION, [0, 2, 3, 4], [2.0, 3.0, 4.0, 5.0]),
            SparseSample("s3", EXAMPLE_DIMENSION, [0, 3, 4], [4.0, 6.0, 7.0]),
        ],
        dimension=EXAMPLE_DIMENSION,
    )


def load_example_long() -> pl.DataFrame:
    """Load the illustrative dataset as a raw long-format table.

    Returns
    -------
    pl.DataFrame
        One row per measurement with columns *id*, *idx* and *quant*. The
        unmeasured cells appear as rows with a null *quant*, as they would in
        a tab-separated export.
    """
    rows = [
        ("s1", 0, None),
        ("s1", 1, 1.0),
        ("s1", 2, 0.0),
        ("s1", 3, 7.0),
        ("s2", 0, 2.0),
        ("s2", 2, 3.0),
        ("s2", 3, 4.0),
        ("s2", 4, 5.0),
        ("s3", 0, 4.0),
        ("s3", 3, 6.0),
        ("s3", 4, 7.0),
        ("s3", 1, None),
    ]
    return pl.DataFrame(rows, schema={"id": pl.String, "idx": pl.Int64, "quant": pl.Float64}, orient="row")
