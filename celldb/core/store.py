"""Sample store with columnar (Parquet) persistence."""

from __future__ import annotations

import logging
import os
import warnings
from collections.abc import Iterable, Iterator
from pathlib import Path

import numpy as np
import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq
import scipy.sparse as sp

from .config import ID_COL, INDEX_COL, VALUE_COL, Compression, StoreConfig
from .dataframe import require_columns, to_polars
from .errors import DimensionMismatch, InvalidEntry, NotFound, SchemaMismatch
from .sample import SparseSample
from .schema import CELLDB_ARROW_SCHEMA, CellRow, rows_from_frame, validate_arrow_schema

__all__ = ["SampleStore"]

log = logging.getLogger("celldb.store")


class SampleStore:
    """Mapping from sample id to :class:`SparseSample` sharing one dimension.

    Samples are kept in insertion order. The store persists to a Parquet
    table with one ``(id, idx, quant)`` row per sample holding exactly the
    explicit entries of that sample, explicit zeros included.

    Parameters
    ----------
    dimension : int
        Number of logical features shared by every sample.

    Examples
    --------
    .. code-block:: python

        from celldb import SampleStore, SparseSample

        store = SampleStore(5)
        store.put(SparseSample("s1", 5, [1, 2, 3], [1.0, 0.0, 7.0]))
        store.persist("celldb.parquet")
        same = SampleStore.load("celldb.parquet")
        assert same == store
    """

    def __init__(self, dimension):
        if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)) or dimension < 0:
            raise ValueError(f"dimension must be a non-negative integer, got {dimension!r}.")
        self._dimension = int(dimension)
        self._samples: dict[str, SparseSample] = {}

    @property
    def dimension(self) -> int:
        return self._dimension

    @classmethod
    def from_samples(cls, samples: Iterable[SparseSample], dimension=None) -> SampleStore:
        """Build a store from sparse samples.

        Parameters
        ----------
        samples : iterable of SparseSample
            Samples to insert, in order.
        dimension : int, optional
            Store dimension. Taken from the first sample when omitted.

        Returns
        -------
        SampleStore
            The populated store.

        Raises
        ------
        ValueError
            If ``samples`` is empty and ``dimension`` is not given.
        DimensionMismatch
            If a sample disagrees with the store dimension.
        """
        samples = list(samples)
        if dimension is None:
            if not samples:
                raise ValueError("dimension is required when building a store from no samples.")
            dimension = samples[0].dimension
        store = cls(dimension)
        for sample in samples:
            if sample.id in store:
                warnings.warn(f"Duplicate sample id {sample.id!r}; keeping the last occurrence.", UserWarning)
            store.put(sample)
        return store

    @classmethod
    def from_long(cls, data, dimension, id_col=ID_COL, index_col=INDEX_COL, value_col=VALUE_COL) -> SampleStore:
        """Ingest raw long-format data with one measurement per row.

        Rows whose value is null or NaN are unmeasured and are skipped.
        Explicit zeros are kept. A sample whose rows are all unmeasured is
        kept with no entries. Entries keep their row order within each
        sample, and samples keep the order of their first appearance.

        Parameters
        ----------
        data : DataFrame
            Any object implementing ``__arrow_c_stream__``: polars, pandas,
            pyarrow Table, duckdb results.
        dimension : int
            Number of logical features.
        id_col, index_col, value_col : str
            Column names for sample id, feature index and value.

        Returns
        -------
        SampleStore
            The populated store.

        Raises
        ------
        SchemaMismatch
            If a column is missing or the index column is not integral.
        InvalidEntry
            If a sample repeats a feature index or an index is out of range.
        """
        df = require_columns(to_polars(data), [id_col, index_col, value_col])
        if not df.schema[index_col].is_integer():
            raise SchemaMismatch(f"Index column '{index_col}' must be integral, got {df.schema[index_col]}.")

        value = pl.col(value_col).cast(pl.Float64)
        rows = df.select(
            pl.col(id_col).cast(pl.String),
            pl.col(index_col).cast(pl.Int64),
            value,
        )
        measured = (
            rows.filter(value.is_not_null() & value.is_not_nan())
            .group_by(id_col, maintain_order=True)
            .agg(pl.col(index_col), pl.col(value_col))
        )
        entries = {sample_id: (idx, vals) for sample_id, idx, vals in measured.iter_rows()}

        # Ids with no measured row still become (empty) samples.
        store = cls(dimension)
        for sample_id in rows.get_column(id_col).unique(maintain_order=True).to_list():
            idx, vals = entries.get(sample_id, ([], []))
            store.put(SparseSample(sample_id, dimension, idx, vals))
        log.info("ingested %d samples from %d long-format rows", len(store), df.height)
        return store

    def put(self, sample: SparseSample) -> None:
        """Insert ``sample`` or replace the sample with the same id.

        Raises
        ------
        DimensionMismatch
            If ``sample.dimension`` differs from the store dimension.
        """
        if not isinstance(sample, SparseSample):
            raise InvalidEntry(f"Expected SparseSample, got {type(sample).__name__}.")
        if sample.dimension != self._dimension:
            raise DimensionMismatch(
                f"Sample {sample.id!r} has dimension {sample.dimension}, store has {self._dimension}."
            )
        self._samples[sample.id] = sample

    def get(self, id) -> SparseSample:
        """Return the sample with ``id``.

        Raises
        ------
        NotFound
            If no sample has that id.
        """
        try:
            return self._samples[id]
        except KeyError:
            raise NotFound(f"Sample {id!r} not found.") from None

    def remove(self, id) -> SparseSample:
        """Remove and return the sample with ``id``."""
        try:
            return self._samples.pop(id)
        except KeyError:
            raise NotFound(f"Sample {id!r} not found.") from None

    def ids(self) -> list[str]:
        return list(self._samples)

    def __len__(self):
        return len(self._samples)

    def __iter__(self) -> Iterator[SparseSample]:
        return iter(list(self._samples.values()))

    def __contains__(self, id):
        return id in self._samples

    def __eq__(self, other):
        if not isinstance(other, SampleStore):
            return NotImplemented
        return self._dimension == other._dimension and self._samples == other._samples

    __hash__ = None

    def __repr__(self):
        return f"SampleStore(dimension={self._dimension}, samples={len(self._samples)})"

    def summary(self, title="Sparse Sample Store") -> str:
        """Return a printable table of per-sample counts and dataset sparsity."""
        from celldb.analysis.format import format_store_summary

        return format_store_summary(self, title=title)

    __str__ = summary

    def to_arrow(self, metadata_key=None) -> pa.Table:
        """Return the persisted row layout as a pyarrow Table.

        Parameters
        ----------
        metadata_key : str, optional
            When given, the dimension is stored in the schema metadata under
            this key.
        """
        rows = [CellRow.from_sample(s) for s in self._samples.values()]
        schema = CELLDB_ARROW_SCHEMA
        if metadata_key is not None:
            schema = schema.with_metadata({metadata_key: str(self._dimension)})
        return pa.table(
            {
                ID_COL: pa.array([r.id for r in rows], type=pa.string()),
                INDEX_COL: pa.array([r.idx.tolist() for r in rows], type=schema.field(INDEX_COL).type),
                VALUE_COL: pa.array([r.quant.tolist() for r in rows], type=schema.field(VALUE_COL).type),
            },
            schema=schema,
        )

    def to_frame(self) -> pl.DataFrame:
        """Return the persisted row layout as a polars DataFrame."""
        return pl.from_arrow(self.to_arrow())

    def to_csr(self) -> tuple[list[str], sp.csr_matrix]:
        """Return sample ids and a CSR matrix with one row per sample.

        Explicit zeros are kept as stored entries of the matrix, so
        ``matrix.getnnz(axis=1)`` equals the per-sample measurement count.
        """
        samples = list(self._samples.values())
        counts = np.array([s.num_active() for s in samples], dtype=np.int64)
        indptr = np.concatenate([[0], np.cumsum(counts)])
        if samples:
            indices = np.concatenate([s.indices for s in samples])
            data = np.concatenate([s.values for s in samples])
        else:
            indices = np.empty(0, dtype=np.int32)
            data = np.empty(0, dtype=np.float64)
        matrix = sp.csr_matrix((data, indices, indptr), shape=(len(samples), self._dimension))
        return [s.id for s in samples], matrix

    def persist(self, target=None, *, config: StoreConfig | None = None) -> str:
        """Write every sample to a Parquet file.

        Parameters
        ----------
        target : str or path-like, optional
            Output file. Defaults to ``config.path``.
        config : StoreConfig, optional
            Storage settings (path, compression, metadata key).

        Returns
        -------
        str
            The path written.
        """
        config = config or StoreConfig()
        path = Path(target if target is not None else config.path)
        path.parent.mkdir(parents=True, exist_ok=True)

        table = self.to_arrow(metadata_key=config.metadata_key)
        compression = None if config.compression is Compression.UNCOMPRESSED else config.compression.value
        pq.write_table(table, path, compression=compression)
        log.info("persisted %d samples (dimension %d) to %s", len(self), self._dimension, path)
        return os.fspath(path)

    @classmethod
    def load(cls, source=None, dimension=None, *, config: StoreConfig | None = None) -> SampleStore:
        """Read a store written by :meth:`persist` (or by the Spark backend).

        Parameters
        ----------
        source : str or path-like, optional
            Parquet file or directory of part files. Defaults to
            ``config.path``.
        dimension : int, optional
            Expected dimension. Required when the data does not record one.
        config : StoreConfig, optional
            Storage settings.

        Returns
        -------
        SampleStore
            The loaded store.

        Raises
        ------
        SchemaMismatch
            If the row layout is not ``{id, idx, quant}`` with the expected
            types, a row is malformed, ids repeat, or no dimension is known.
        DimensionMismatch
            If the recorded dimension disagrees with ``dimension``.
        """
        config = config or StoreConfig()
        path = source if source is not None else config.path
        if dimension is None:
            dimension = config.dimension

        table = pq.read_table(path)
        validate_arrow_schema(table.schema)
        stored = _stored_dimension(table.schema, config.metadata_key)

        if stored is not None and dimension is not None and stored != dimension:
            raise DimensionMismatch(f"Data at {path} has dimension {stored}, expected {dimension}.")
        if stored is None and dimension is None:
            raise SchemaMismatch(f"Data at {path} does not record its dimension; pass dimension= explicitly.")
        dim = stored if stored is not None else int(dimension)

        store = cls(dim)
        for row in rows_from_frame(pl.from_arrow(table)):
            if row.id in store:
                raise SchemaMismatch(f"Duplicate sample id {row.id!r} in {path}.")
            store.put(row.to_sample(dim))
        log.info("loaded %d samples (dimension %d) from %s", len(store), dim, path)
        return store


def _stored_dimension(schema: pa.Schema, key: str) -> int | None:
    metadata = schema.metadata or {}
    raw = metadata.get(key.encode())
    if raw is None:
        return None
    try:
        value = int(raw.decode())
    except ValueError:
        raise SchemaMismatch(f"Invalid dimension metadata {raw!r}.") from None
    if value < 0:
        raise SchemaMismatch(f"Invalid dimension metadata {raw!r}.")
    return value
