"""Reading user-supplied tables into polars."""

from __future__ import annotations

import narwhals as nw
import polars as pl

from .errors import SchemaMismatch

__all__ = ["require_columns", "to_polars"]


def to_polars(data) -> pl.DataFrame:
    """Return ``data`` as a polars DataFrame.

    polars frames pass through unchanged. Anything else must expose the
    Arrow PyCapsule stream (``__arrow_c_stream__``), which covers pandas 2,
    pyarrow tables and duckdb relations.

    Raises
    ------
    TypeError
        If ``data`` cannot be read as an Arrow stream.
    """
    if isinstance(data, pl.DataFrame):
        return data
    if not hasattr(data, "__arrow_c_stream__"):
        raise TypeError(
            f"Cannot read a table from {type(data).__name__}; expected an object implementing '__arrow_c_stream__'."
        )
    return nw.from_arrow(data, backend=pl).to_native()


def require_columns(df: pl.DataFrame, columns) -> pl.DataFrame:
    """Select ``columns`` from ``df``, reporting every absent one at once."""
    columns = list(columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaMismatch(f"Columns not found in input data: {missing}")
    return df.select(columns)
