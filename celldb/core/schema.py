"""Typed row layout of the persisted ``celldb`` table."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
import polars as pl
import pyarrow as pa

from .config import ID_COL, INDEX_COL, VALUE_COL
from .errors import InvalidEntry, SchemaMismatch
from .sample import SparseSample

__all__ = [
    "CELLDB_ARROW_SCHEMA",
    "CELLDB_COLUMNS",
    "CellRow",
    "rows_from_frame",
    "validate_arrow_schema",
]

CELLDB_COLUMNS = (ID_COL, INDEX_COL, VALUE_COL)

CELLDB_ARROW_SCHEMA = pa.schema(
    [
        pa.field(ID_COL, pa.string(), nullable=False),
        pa.field(INDEX_COL, pa.list_(pa.field("element", pa.int32(), nullable=False)), nullable=False),
        pa.field(VALUE_COL, pa.list_(pa.field("element", pa.float64(), nullable=False)), nullable=False),
    ]
)


class CellRow(NamedTuple):
    """One persisted row.

    Attributes
    ----------
    id : str
        Sample identifier.
    idx : ndarray of int32
        Indices of the explicit measurements.
    quant : ndarray of float64
        Values parallel to ``idx``.
    """

    id: str
    idx: np.ndarray
    quant: np.ndarray

    @classmethod
    def from_sample(cls, sample: SparseSample) -> CellRow:
        return cls(sample.id, sample.indices, sample.values)

    def to_sample(self, dimension: int) -> SparseSample:
        """Rebuild the sample, reporting bad rows as schema errors."""
        try:
            return SparseSample(self.id, dimension, self.idx, self.quant)
        except InvalidEntry as exc:
            raise SchemaMismatch(f"Row {self.id!r} is not a valid sample: {exc}") from exc


def _is_string(t: pa.DataType) -> bool:
    return pa.types.is_string(t) or pa.types.is_large_string(t) or pa.types.is_string_view(t)


def _list_value_type(t: pa.DataType) -> pa.DataType | None:
    if pa.types.is_list(t) or pa.types.is_large_list(t) or pa.types.is_list_view(t):
        return t.value_type
    return None


def validate_arrow_schema(schema: pa.Schema) -> None:
    """Check that an Arrow schema has exactly the ``(id, idx, quant)`` layout.

    Parameters
    ----------
    schema : pyarrow.Schema
        Schema read from a Parquet file or produced by a DataFrame.

    Raises
    ------
    SchemaMismatch
        If columns are missing or extra, or have the wrong types.
    """
    names = list(schema.names)
    if sorted(names) != sorted(CELLDB_COLUMNS):
        raise SchemaMismatch(f"Expected columns {list(CELLDB_COLUMNS)}, got {names}.")

    errors = []
    id_type = schema.field(ID_COL).type
    if not _is_string(id_type):
        errors.append(f"'{ID_COL}' must be a string column, got {id_type}")

    idx_value = _list_value_type(schema.field(INDEX_COL).type)
    if idx_value is None or not pa.types.is_int32(idx_value):
        errors.append(f"'{INDEX_COL}' must be a list of int32, got {schema.field(INDEX_COL).type}")

    quant_value = _list_value_type(schema.field(VALUE_COL).type)
    if quant_value is None or not pa.types.is_float64(quant_value):
        errors.append(f"'{VALUE_COL}' must be a list of float64, got {schema.field(VALUE_COL).type}")

    if errors:
        raise SchemaMismatch("; ".join(errors) + ".")


def rows_from_frame(df: pl.DataFrame) -> list[CellRow]:
    """Convert a validated polars frame into typed rows.

    Raises
    ------
    SchemaMismatch
        If a row has null fields or ``idx`` and ``quant`` of unequal length.
    """
    rows = []
    for sample_id, idx, quant in df.select(CELLDB_COLUMNS).iter_rows():
        if sample_id is None or idx is None or quant is None:
            raise SchemaMismatch(f"Row {sample_id!r} has null fields.")
        if len(idx) != len(quant):
            raise SchemaMismatch(
                f"Row {sample_id!r}: '{INDEX_COL}' and '{VALUE_COL}' differ in length ({len(idx)} vs {len(quant)})."
            )
        if any(i is None for i in idx) or any(v is None for v in quant):
            raise SchemaMismatch(f"Row {sample_id!r} has null array elements.")
        rows.append(
            CellRow(
                sample_id,
                np.asarray(idx, dtype=np.int32),
                np.asarray(quant, dtype=np.float64),
            )
        )
    return rows
