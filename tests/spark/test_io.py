"""Tests for reading and writing the celldb table with Spark."""

import pytest

from celldb import SampleStore, SchemaMismatch
from celldb.spark import (
    CELLDB_SPARK_SCHEMA,
    spark_read_celldb,
    spark_to_store,
    spark_write_celldb,
    to_spark_dataframe,
    validate_spark_schema,
)


def test_to_spark_dataframe_keeps_explicit_zero(spark_session, example_store):
    sdf = to_spark_dataframe(example_store, spark_session)
    rows = {row["id"]: row for row in sdf.collect()}
    assert set(rows) == {"s1", "s2", "s3"}
    assert list(rows["s1"]["idx"]) == [1, 2, 3]
    assert list(rows["s1"]["quant"]) == [1.0, 0.0, 7.0]


def test_to_spark_dataframe_schema(spark_session, example_store):
    sdf = to_spark_dataframe(example_store, spark_session, n_partitions=2)
    assert sdf.schema == CELLDB_SPARK_SCHEMA
    assert sdf.rdd.getNumPartitions() == 2


def test_spark_write_then_local_load(spark_session, example_store, tmp_path):
    path = str(tmp_path / "celldb")
    spark_write_celldb(example_store, path, spark_session)
    with pytest.raises(SchemaMismatch, match="does not record its dimension"):
        SampleStore.load(path)
    loaded = SampleStore.load(path, dimension=5)
    assert sorted(loaded.ids()) == ["s1", "s2", "s3"]
    for sample in example_store:
        assert loaded.get(sample.id) == sample


def test_local_persist_then_spark_read(spark_session, random_store, tmp_path):
    path = random_store.persist(tmp_path / "celldb.parquet")
    sdf = spark_read_celldb(path, spark_session)
    store = spark_to_store(sdf, random_store.dimension)
    assert len(store) == len(random_store)
    for sample in random_store:
        assert store.get(sample.id) == sample


def test_spark_round_trip(spark_session, random_store, tmp_path):
    path = str(tmp_path / "celldb")
    spark_write_celldb(to_spark_dataframe(random_store, spark_session), path, spark_session, mode="overwrite")
    store = spark_to_store(spark_read_celldb(path, spark_session), random_store.dimension)
    assert SampleStore.from_samples([store.get(i) for i in random_store.ids()]) == random_store


def test_write_rejects_other_types(tmp_path):
    with pytest.raises(TypeError, match="Expected SampleStore or Spark DataFrame"):
        spark_write_celldb({"s1": [1.0]}, str(tmp_path / "x"))


def test_read_schema_mismatch(spark_session, tmp_path):
    path = str(tmp_path / "bad")
    spark_session.createDataFrame([("a", 1.0)], ["id", "value"]).write.parquet(path)
    with pytest.raises(SchemaMismatch, match="Expected columns"):
        spark_read_celldb(path, spark_session)


def test_validate_spark_schema_types():
    from pyspark.sql.types import ArrayType, DoubleType, LongType, StringType, StructField, StructType

    schema = StructType(
        [
            StructField("id", StringType()),
            StructField("idx", ArrayType(LongType())),
            StructField("quant", ArrayType(DoubleType())),
        ]
    )
    with pytest.raises(SchemaMismatch, match="array<int>"):
        validate_spark_schema(schema)
    validate_spark_schema(CELLDB_SPARK_SCHEMA)


def test_spark_to_store_duplicate_ids(spark_session):
    sdf = spark_session.createDataFrame([("a", [0], [1.0]), ("a", [1], [2.0])], schema=CELLDB_SPARK_SCHEMA)
    with pytest.raises(SchemaMismatch, match="Duplicate sample id"):
        spark_to_store(sdf, 3)
