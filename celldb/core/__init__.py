"""Core data structures, storage and shared utilities."""

from .config import Compression, StoreConfig
from .data import load_example, load_example_long
from .dataframe import to_polars
from .errors import (
    CelldbError,
    DimensionMismatch,
    EmptyDataset,
    IndexOutOfRange,
    InvalidEntry,
    InvalidRank,
    NotFound,
    SchemaMismatch,
)
from .sample import SparseSample
from .schema import CELLDB_ARROW_SCHEMA, CellRow, validate_arrow_schema
from .store import SampleStore

__all__ = [
    "CELLDB_ARROW_SCHEMA",
    "CellRow",
    "CelldbError",
    "Compression",
    "DimensionMismatch",
    "EmptyDataset",
    "IndexOutOfRange",
    "InvalidEntry",
    "InvalidRank",
    "NotFound",
    "SampleStore",
    "SchemaMismatch",
    "SparseSample",
    "StoreConfig",
    "load_example",
    "load_example_long",
    "to_polars",
    "validate_arrow_schema",
]
