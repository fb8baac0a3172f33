"""Spark session helpers."""

from __future__ import annotations

import logging

APP_NAME = "celldb"


def is_spark_dataframe(data) -> bool:
    """Return True when ``data`` is a ``pyspark.sql.DataFrame``."""
    from pyspark.sql import DataFrame

    return isinstance(data, DataFrame)


def quiet_py4j():
    """Silence the py4j gateway chatter that Spark jobs log at INFO."""
    logging.getLogger("py4j").setLevel(logging.ERROR)


def get_default_partitions(spark):
    """Number of partitions to split a local store into: Spark's default parallelism."""
    return max(spark.sparkContext.defaultParallelism, 1)


def get_or_create_spark(spark=None):
    """Return ``spark``, else the active session, else a new local session.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession, optional
        Session to use as is.

    Returns
    -------
    pyspark.sql.SparkSession
        A usable session.
    """
    if spark is not None:
        return spark
    from pyspark.sql import SparkSession

    return SparkSession.getActiveSession() or SparkSession.builder.master("local[*]").appName(APP_NAME).getOrCreate()
