"""Distributed principal components via Spark collect and driver-side reduce."""

from __future__ import annotations

import logging
import pickle

import numpy as np
import pandas as pd
from pyspark.sql.types import ArrayType, BinaryType, DoubleType, StringType, StructField, StructType

from celldb.analysis.pca import build_pca_result, validate_rank
from celldb.core.config import ID_COL, INDEX_COL, VALUE_COL
from celldb.core.errors import DimensionMismatch
from celldb.core.schema import CellRow
from celldb.distributed import dense_rows, partition_moments, partition_projection, reduce_moments

from ._io import validate_spark_schema
from ._utils import quiet_py4j

log = logging.getLogger("celldb.spark.pca")

PROJECTION_COL = "projection"


def _pandas_samples(pdf, dimension):
    """Rebuild validated samples from one pandas batch of ``celldb`` rows."""
    return [
        CellRow(
            sample_id,
            np.asarray(idx, dtype=np.int32),
            np.asarray(quant, dtype=np.float64),
        ).to_sample(dimension)
        for sample_id, idx, quant in zip(pdf[ID_COL], pdf[INDEX_COL], pdf[VALUE_COL], strict=True)
    ]


def spark_fit_pca(sdf, dimension, k):
    r"""Fit principal components over a ``celldb`` Spark DataFrame.

    Uses ``mapInPandas`` to compute per-partition column sums and
    :math:`X^T X` on dense rows (missing features as ``0.0``), collects the
    small results to the driver, sums them, and runs the same eigen-step as
    :func:`~celldb.analysis.pca.fit_pca`.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        DataFrame with the ``celldb`` layout.
    dimension : int
        Feature dimension.
    k : int
        Number of components.

    Returns
    -------
    PCAResult
        Components, explained variance and column means.

    Raises
    ------
    InvalidRank
        If the DataFrame is empty or ``k`` is outside ``[1, dimension]``.
    """
    validate_spark_schema(sdf.schema)
    validate_rank(k, dimension, 1)
    quiet_py4j()

    out_schema = StructType([StructField("moments_bytes", BinaryType(), False)])

    def _moments_udf(iterator):
        for pdf in iterator:
            if len(pdf) == 0:
                continue
            X = dense_rows(_pandas_samples(pdf, dimension), dimension)
            yield pd.DataFrame({"moments_bytes": [pickle.dumps(partition_moments(X))]})

    rows = sdf.select(ID_COL, INDEX_COL, VALUE_COL).mapInPandas(_moments_udf, schema=out_schema).collect()
    moments = reduce_moments([pickle.loads(row["moments_bytes"]) for row in rows])
    n_total = 0 if moments is None else moments[2]
    validate_rank(k, dimension, n_total)

    log.info("spark_fit_pca: %d batches, %d samples", len(rows), n_total)
    return build_pca_result(moments, k)


def spark_principal_components(sdf, dimension, k):
    """Return the top-``k`` principal directions, shape ``(dimension, k)``."""
    return spark_fit_pca(sdf, dimension, k).components


def spark_project(sdf, components):
    """Project every sample onto ``components`` inside Spark.

    Each output row carries its sample id, so results can be joined to
    other per-sample data by key regardless of partitioning.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        DataFrame with the ``celldb`` layout.
    components : array_like of shape (dimension, k)
        Principal directions.

    Returns
    -------
    pyspark.sql.DataFrame
        Columns ``id`` and ``projection`` (``array<double>`` of length k).
    """
    validate_spark_schema(sdf.schema)
    components = np.asarray(components, dtype=np.float64)
    if components.ndim != 2:
        raise DimensionMismatch(f"components must be a 2-D matrix, got shape {components.shape}.")
    dimension = components.shape[0]

    out_schema = StructType(
        [
            StructField(ID_COL, StringType(), False),
            StructField(PROJECTION_COL, ArrayType(DoubleType(), False), False),
        ]
    )

    def _project_udf(iterator):
        for pdf in iterator:
            if len(pdf) == 0:
                continue
            keyed = partition_projection(_pandas_samples(pdf, dimension), components)
            yield pd.DataFrame(
                {
                    ID_COL: [sample_id for sample_id, _ in keyed],
                    PROJECTION_COL: [row.tolist() for _, row in keyed],
                }
            )

    return sdf.select(ID_COL, INDEX_COL, VALUE_COL).mapInPandas(_project_udf, schema=out_schema)
