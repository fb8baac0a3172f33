"""Tests for the typed row layout."""

import numpy as np
import pyarrow as pa
import pytest

from celldb import CellRow, SchemaMismatch, SparseSample
from celldb.core.schema import CELLDB_ARROW_SCHEMA, rows_from_frame, validate_arrow_schema

pl = pytest.importorskip("polars")


def test_arrow_schema_layout():
    assert CELLDB_ARROW_SCHEMA.names == ["id", "idx", "quant"]
    validate_arrow_schema(CELLDB_ARROW_SCHEMA)


@pytest.mark.parametrize(
    "id_type,list_type",
    [
        (pa.string(), pa.list_),
        (pa.large_string(), pa.large_list),
    ],
)
def test_accepts_string_and_list_variants(id_type, list_type):
    schema = pa.schema([("id", id_type), ("idx", list_type(pa.int32())), ("quant", list_type(pa.float64()))])
    validate_arrow_schema(schema)


def test_accepts_reordered_columns():
    schema = pa.schema([("quant", pa.list_(pa.float64())), ("id", pa.string()), ("idx", pa.list_(pa.int32()))])
    validate_arrow_schema(schema)


def test_rejects_extra_column():
    schema = CELLDB_ARROW_SCHEMA.append(pa.field("extra", pa.int64()))
    with pytest.raises(SchemaMismatch, match="Expected columns"):
        validate_arrow_schema(schema)


def test_reports_all_type_errors():
    schema = pa.schema([("id", pa.int64()), ("idx", pa.int32()), ("quant", pa.list_(pa.float32()))])
    with pytest.raises(SchemaMismatch) as excinfo:
        validate_arrow_schema(schema)
    message = str(excinfo.value)
    assert "'id' must be a string" in message
    assert "'idx' must be a list of int32" in message
    assert "'quant' must be a list of float64" in message


def test_cell_row_round_trip():
    sample = SparseSample("s1", 5, [1, 2, 3], [1.0, 0.0, 7.0])
    row = CellRow.from_sample(sample)
    assert row.id == "s1"
    assert row.idx.tolist() == [1, 2, 3]
    assert row.to_sample(5) == sample


def test_cell_row_invalid_sample():
    row = CellRow("bad", np.array([0, 0], dtype=np.int32), np.array([1.0, 2.0]))
    with pytest.raises(SchemaMismatch, match="not a valid sample"):
        row.to_sample(3)


def test_rows_from_frame():
    df = pl.DataFrame(
        {"id": ["a", "b"], "idx": [[2, 0], []], "quant": [[0.0, 1.5], []]},
        schema={"id": pl.String, "idx": pl.List(pl.Int32), "quant": pl.List(pl.Float64)},
    )
    rows = rows_from_frame(df)
    assert [r.id for r in rows] == ["a", "b"]
    assert rows[0].idx.dtype == np.int32
    assert rows[0].idx.tolist() == [2, 0]
    assert rows[0].quant.tolist() == [0.0, 1.5]
    assert rows[1].idx.size == 0


def test_rows_from_frame_null_field():
    df = pl.DataFrame(
        {"id": ["a"], "idx": [None], "quant": [[1.0]]},
        schema={"id": pl.String, "idx": pl.List(pl.Int32), "quant": pl.List(pl.Float64)},
    )
    with pytest.raises(SchemaMismatch, match="null fields"):
        rows_from_frame(df)


def test_rows_from_frame_null_element():
    df = pl.DataFrame(
        {"id": ["a"], "idx": [[0, 1]], "quant": [[1.0, None]]},
        schema={"id": pl.String, "idx": pl.List(pl.Int32), "quant": pl.List(pl.Float64)},
    )
    with pytest.raises(SchemaMismatch, match="null array elements"):
        rows_from_frame(df)
