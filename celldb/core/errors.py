"""Error types raised by celldb."""

__all__ = [
    "CelldbError",
    "DimensionMismatch",
    "EmptyDataset",
    "IndexOutOfRange",
    "InvalidEntry",
    "InvalidRank",
    "NotFound",
    "SchemaMismatch",
]


class CelldbError(Exception):
    """Base class for all celldb errors."""


class InvalidEntry(CelldbError, ValueError):
    """Malformed sample construction input."""


class IndexOutOfRange(CelldbError, IndexError):
    """Feature index outside ``[0, dimension)``."""


class DimensionMismatch(CelldbError, ValueError):
    """Samples, stores or components disagree on the feature dimension."""


class NotFound(CelldbError, KeyError):
    """Sample id not present in the store."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class SchemaMismatch(CelldbError, ValueError):
    """Persisted data does not match the ``(id, idx, quant)`` row layout."""


class EmptyDataset(CelldbError, ValueError):
    """Operation is undefined on a dataset without samples."""


class InvalidRank(CelldbError, ValueError):
    """Requested number of principal components is out of bounds."""
