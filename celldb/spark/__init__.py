"""PySpark distributed backend for celldb."""

from ._io import (
    CELLDB_SPARK_SCHEMA,
    spark_read_celldb,
    spark_to_store,
    spark_write_celldb,
    to_spark_dataframe,
    validate_spark_schema,
)
from ._pca import spark_fit_pca, spark_principal_components, spark_project
from ._queries import spark_dataset_sparsity, spark_sample_stats
from ._utils import get_default_partitions, get_or_create_spark, is_spark_dataframe

__all__ = [
    "CELLDB_SPARK_SCHEMA",
    "get_default_partitions",
    "get_or_create_spark",
    "is_spark_dataframe",
    "spark_dataset_sparsity",
    "spark_fit_pca",
    "spark_principal_components",
    "spark_project",
    "spark_read_celldb",
    "spark_sample_stats",
    "spark_to_store",
    "spark_write_celldb",
    "to_spark_dataframe",
    "validate_spark_schema",
]
