"""Sparse sample representation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

import numpy as np

from .errors import IndexOutOfRange, InvalidEntry

__all__ = ["MAX_DIMENSION", "SparseSample"]

# Indices are stored and persisted as int32.
MAX_DIMENSION = int(np.iinfo(np.int32).max) + 1


class SparseSample:
    r"""One row of a sparse dataset: a sample identifier and a sparse vector.

    Only explicitly specified ``(index, value)`` pairs are stored. An index
    that is absent from the sample is *missing* (not measured), which is
    different from an explicit entry whose value is ``0.0`` (measured and
    found to be zero).

    Parameters
    ----------
    id : str
        Sample identifier.
    dimension : int
        Number of logical features, at most :math:`2^{31}` so that every
        index fits in ``int32``.
    indices : array_like of int
        Indices of the explicit entries. Must be unique and lie in
        :math:`[0, \text{dimension})`. Their order is kept as given.
    values : array_like of float
        Values parallel to ``indices``.

    Raises
    ------
    InvalidEntry
        If ``indices`` and ``values`` differ in length, an index is
        duplicated or out of range, ``dimension`` is outside
        :math:`[0, 2^{31}]`, or the inputs have the wrong type.

    Notes
    -----
    Instances are immutable. ``indices`` and ``values`` are exposed as
    read-only ``int32`` and ``float64`` arrays.
    """

    __slots__ = ("_dimension", "_id", "_indices", "_lookup", "_values")

    def __init__(self, id, dimension, indices, values):
        if not isinstance(id, str):
            raise InvalidEntry(f"Sample id must be a string, got {type(id).__name__}.")
        if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)):
            raise InvalidEntry(f"dimension must be an integer, got {type(dimension).__name__}.")
        dimension = int(dimension)
        if dimension < 0:
            raise InvalidEntry(f"dimension must be non-negative, got {dimension}.")
        if dimension > MAX_DIMENSION:
            raise InvalidEntry(f"dimension {dimension} exceeds the int32 index range (at most {MAX_DIMENSION}).")

        idx = np.asarray(indices)
        try:
            vals = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidEntry(f"Sample {id!r}: values must be numeric ({exc}).") from None
        if idx.size == 0:
            idx = idx.astype(np.int64).reshape(0)
        if idx.ndim != 1 or vals.ndim != 1:
            raise InvalidEntry(f"Sample {id!r}: indices and values must be one-dimensional.")
        if not np.issubdtype(idx.dtype, np.integer):
            raise InvalidEntry(f"Sample {id!r}: indices must be integers, got dtype {idx.dtype}.")
        if len(idx) != len(vals):
            raise InvalidEntry(
                f"Sample {id!r}: indices and values must have equal length, got {len(idx)} and {len(vals)}."
            )

        out_of_range = (idx < 0) | (idx >= dimension)
        if out_of_range.any():
            bad = idx[out_of_range].tolist()
            raise InvalidEntry(f"Sample {id!r}: indices {bad} out of range for dimension {dimension}.")

        uniq, counts = np.unique(idx, return_counts=True)
        if (counts > 1).any():
            raise InvalidEntry(f"Sample {id!r}: duplicated indices {uniq[counts > 1].tolist()}.")

        idx = idx.astype(np.int32, copy=True)
        vals = vals.copy()
        idx.flags.writeable = False
        vals.flags.writeable = False

        object.__setattr__(self, "_id", id)
        object.__setattr__(self, "_dimension", dimension)
        object.__setattr__(self, "_indices", idx)
        object.__setattr__(self, "_values", vals)
        object.__setattr__(self, "_lookup", {int(i): pos for pos, i in enumerate(idx)})

    @classmethod
    def from_mapping(cls, id, dimension, entries: Mapping[int, float]) -> SparseSample:
        """Build a sample from an ``{index: value}`` mapping."""
        return cls(id, dimension, list(entries.keys()), list(entries.values()))

    def __reduce__(self):
        return (type(self), (self._id, self._dimension, self._indices, self._values))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def id(self) -> str:
        return self._id

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def indices(self) -> np.ndarray:
        return self._indices

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def entries(self) -> Iterator[tuple[int, float]]:
        """Explicit ``(index, value)`` pairs in stored order."""
        return zip(self._indices.tolist(), self._values.tolist(), strict=True)

    def num_active(self) -> int:
        """Return the number of explicit entries, explicit zeros included."""
        return len(self._indices)

    def true_zeros(self) -> int:
        """Return the number of explicit entries exactly equal to ``0.0``."""
        return int(np.count_nonzero(self._values == 0.0))

    def value_at(self, index) -> float | None:
        """Return the value stored at ``index``.

        Parameters
        ----------
        index : int
            Feature index.

        Returns
        -------
        float or None
            The explicit value (possibly ``0.0``), or ``None`` when the
            feature was not measured.

        Raises
        ------
        IndexOutOfRange
            If ``index`` is outside ``[0, dimension)``.
        """
        index = self._check_index(index)
        pos = self._lookup.get(index)
        if pos is None:
            return None
        return float(self._values[pos])

    def dense_projection(self, indices: Iterable[int]) -> np.ndarray:
        """Return values at ``indices`` as a dense ``float64`` array.

        Missing features become ``0.0``. This conversion is lossy: the result
        no longer distinguishes an unmeasured feature from an explicit zero.

        Parameters
        ----------
        indices : iterable of int
            Feature indices to read, in output order.

        Returns
        -------
        ndarray of shape (len(indices),)
            Dense values.

        Raises
        ------
        IndexOutOfRange
            If any index is outside ``[0, dimension)``.
        """
        checked = [self._check_index(i) for i in indices]
        out = np.zeros(len(checked), dtype=np.float64)
        for j, i in enumerate(checked):
            pos = self._lookup.get(i)
            if pos is not None:
                out[j] = self._values[pos]
        return out

    def to_dense(self) -> np.ndarray:
        """Return the full dense row (missing features as ``0.0``)."""
        out = np.zeros(self._dimension, dtype=np.float64)
        out[self._indices] = self._values
        return out

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise IndexOutOfRange(f"Feature index must be an integer, got {type(index).__name__}.")
        index = int(index)
        if index < 0 or index >= self._dimension:
            raise IndexOutOfRange(f"Feature index {index} out of range for dimension {self._dimension}.")
        return index

    def __len__(self):
        return self.num_active()

    def __eq__(self, other):
        if not isinstance(other, SparseSample):
            return NotImplemented
        # Bit-level comparison so that 0.0/-0.0 differ and identical NaNs match.
        return (
            self._id == other._id
            and self._dimension == other._dimension
            and np.array_equal(self._indices, other._indices)
            and np.array_equal(self._values.view(np.int64), other._values.view(np.int64))
        )

    __hash__ = None

    def __repr__(self):
        pairs = ", ".join(f"{i}: {v!r}" for i, v in self.entries)
        return f"SparseSample(id={self._id!r}, dimension={self._dimension}, entries={{{pairs}}})"
