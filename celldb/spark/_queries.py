"""Per-sample statistics computed inside Spark."""

from __future__ import annotations

from pyspark.sql import functions as F

from celldb.core.config import ID_COL, INDEX_COL, VALUE_COL
from celldb.core.errors import EmptyDataset

from ._io import validate_spark_schema


def spark_sample_stats(sdf):
    """Count measurements and true zeros per sample with Spark SQL functions.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        DataFrame with the ``celldb`` layout.

    Returns
    -------
    pyspark.sql.DataFrame
        Columns ``id``, ``n_active`` (explicit entries, zeros included) and
        ``n_true_zeros`` (entries exactly equal to ``0.0``).
    """
    validate_spark_schema(sdf.schema)
    return sdf.select(
        F.col(ID_COL),
        F.size(F.col(INDEX_COL)).alias("n_active"),
        F.size(F.filter(F.col(VALUE_COL), lambda v: v == F.lit(0.0))).alias("n_true_zeros"),
    )


def spark_dataset_sparsity(sdf, dimension):
    """Mean fraction of measured feature slots, computed in Spark.

    Raises
    ------
    EmptyDataset
        If the DataFrame has no rows.
    """
    validate_spark_schema(sdf.schema)
    row = sdf.agg(F.count(F.lit(1)).alias("n"), F.avg(F.size(F.col(INDEX_COL))).alias("mean_active")).first()
    if row is None or row["n"] == 0:
        raise EmptyDataset("Sparsity is undefined for a dataset without samples.")
    if dimension == 0:
        return 0.0
    return float(row["mean_active"]) / dimension
