"""Reading and writing the ``celldb`` table with Spark."""

from __future__ import annotations

import logging

import numpy as np
from pyspark.sql.types import ArrayType, DoubleType, IntegerType, StringType, StructField, StructType

from celldb.core.config import ID_COL, INDEX_COL, VALUE_COL
from celldb.core.errors import SchemaMismatch
from celldb.core.schema import CELLDB_COLUMNS, CellRow
from celldb.core.store import SampleStore

from ._utils import get_default_partitions, get_or_create_spark, is_spark_dataframe, quiet_py4j

log = logging.getLogger("celldb.spark.io")

CELLDB_SPARK_SCHEMA = StructType(
    [
        StructField(ID_COL, StringType(), False),
        StructField(INDEX_COL, ArrayType(IntegerType(), False), False),
        StructField(VALUE_COL, ArrayType(DoubleType(), False), False),
    ]
)


def validate_spark_schema(schema):
    """Check that a Spark schema has the ``(id, idx, quant)`` layout.

    Nullability is not checked, since Parquet round-trips may relax it.

    Parameters
    ----------
    schema : pyspark.sql.types.StructType
        Schema to check.

    Raises
    ------
    SchemaMismatch
        If columns are missing or extra, or have the wrong types.
    """
    names = [f.name for f in schema.fields]
    if sorted(names) != sorted(CELLDB_COLUMNS):
        raise SchemaMismatch(f"Expected columns {list(CELLDB_COLUMNS)}, got {names}.")

    types = {f.name: f.dataType for f in schema.fields}
    errors = []
    if not isinstance(types[ID_COL], StringType):
        errors.append(f"'{ID_COL}' must be a string column, got {types[ID_COL].simpleString()}")
    if not (isinstance(types[INDEX_COL], ArrayType) and isinstance(types[INDEX_COL].elementType, IntegerType)):
        errors.append(f"'{INDEX_COL}' must be array<int>, got {types[INDEX_COL].simpleString()}")
    if not (isinstance(types[VALUE_COL], ArrayType) and isinstance(types[VALUE_COL].elementType, DoubleType)):
        errors.append(f"'{VALUE_COL}' must be array<double>, got {types[VALUE_COL].simpleString()}")
    if errors:
        raise SchemaMismatch("; ".join(errors) + ".")


def to_spark_dataframe(store, spark=None, n_partitions=None):
    """Convert a :class:`SampleStore` into a Spark DataFrame.

    Each row carries exactly the explicit entries of one sample, explicit
    zeros included.

    Parameters
    ----------
    store : SampleStore
        Store to convert.
    spark : pyspark.sql.SparkSession, optional
        Spark session. If None, an active session is used or created.
    n_partitions : int, optional
        Number of partitions. Defaults to the Spark default parallelism.

    Returns
    -------
    pyspark.sql.DataFrame
        DataFrame with schema :data:`CELLDB_SPARK_SCHEMA`.
    """
    spark = get_or_create_spark(spark)
    if n_partitions is None:
        n_partitions = get_default_partitions(spark)
    records = [(s.id, s.indices.tolist(), s.values.tolist()) for s in store]
    rdd = spark.sparkContext.parallelize(records, max(min(n_partitions, len(records)), 1))
    return spark.createDataFrame(rdd, schema=CELLDB_SPARK_SCHEMA)


def spark_write_celldb(data, path, spark=None, mode="errorifexists"):
    """Write a store or Spark DataFrame as a Parquet ``celldb`` directory.

    Parameters
    ----------
    data : SampleStore or pyspark.sql.DataFrame
        Data to write.
    path : str
        Output directory.
    spark : pyspark.sql.SparkSession, optional
        Spark session.
    mode : str, default "errorifexists"
        Spark save mode (``"overwrite"``, ``"append"``, ``"ignore"``,
        ``"errorifexists"``).

    Raises
    ------
    SchemaMismatch
        If a Spark DataFrame does not have the ``celldb`` layout.
    """
    if isinstance(data, SampleStore):
        sdf = to_spark_dataframe(data, spark)
    elif is_spark_dataframe(data):
        validate_spark_schema(data.schema)
        sdf = data
    else:
        raise TypeError(f"Expected SampleStore or Spark DataFrame, got {type(data).__name__}.")

    quiet_py4j()
    sdf.select(*CELLDB_COLUMNS).write.mode(mode).parquet(path)
    log.info("wrote celldb table to %s", path)


def spark_read_celldb(path, spark=None):
    """Read a Parquet ``celldb`` table into a Spark DataFrame.

    Parameters
    ----------
    path : str
        Parquet file or directory.
    spark : pyspark.sql.SparkSession, optional
        Spark session.

    Returns
    -------
    pyspark.sql.DataFrame
        Validated DataFrame with columns ``id``, ``idx`` and ``quant``.

    Raises
    ------
    SchemaMismatch
        If the stored layout does not match.
    """
    spark = get_or_create_spark(spark)
    quiet_py4j()
    sdf = spark.read.parquet(path)
    validate_spark_schema(sdf.schema)
    return sdf.select(*CELLDB_COLUMNS)


def spark_to_store(sdf, dimension):
    """Collect a ``celldb`` Spark DataFrame into a :class:`SampleStore`.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        DataFrame with the ``celldb`` layout.
    dimension : int
        Feature dimension of the samples.

    Returns
    -------
    SampleStore
        Samples in collection order.

    Raises
    ------
    SchemaMismatch
        If the layout, a row, or id uniqueness is violated.
    """
    validate_spark_schema(sdf.schema)
    store = SampleStore(dimension)
    for row in sdf.select(*CELLDB_COLUMNS).toLocalIterator():
        sample_id, idx, quant = row[ID_COL], row[INDEX_COL], row[VALUE_COL]
        if sample_id is None or idx is None or quant is None:
            raise SchemaMismatch(f"Row {sample_id!r} has null fields.")
        if sample_id in store:
            raise SchemaMismatch(f"Duplicate sample id {sample_id!r}.")
        cell = CellRow(sample_id, np.asarray(idx, dtype=np.int32), np.asarray(quant, dtype=np.float64))
        store.put(cell.to_sample(dimension))
    log.info("collected %d samples from Spark", len(store))
    return store
