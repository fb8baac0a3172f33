"""Configuration for celldb storage."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "DEFAULT_METADATA_KEY",
    "DEFAULT_STORE_PATH",
    "ID_COL",
    "INDEX_COL",
    "PATH_ENV_VAR",
    "VALUE_COL",
    "Compression",
    "StoreConfig",
]

ID_COL = "id"
INDEX_COL = "idx"
VALUE_COL = "quant"

DEFAULT_STORE_PATH = "celldb"
DEFAULT_METADATA_KEY = "celldb.dimension"
PATH_ENV_VAR = "CELLDB_PATH"


class Compression(str, Enum):
    """Parquet compression codecs."""

    ZSTD = "zstd"
    SNAPPY = "snappy"
    GZIP = "gzip"
    LZ4 = "lz4"
    UNCOMPRESSED = "uncompressed"


def _default_path() -> str:
    return os.environ.get(PATH_ENV_VAR, DEFAULT_STORE_PATH)


@dataclass
class StoreConfig:
    """Storage config.

    Attributes
    ----------
    path : str
        Location of the persisted ``celldb`` table. Defaults to the value of
        the ``CELLDB_PATH`` environment variable, or ``"celldb"``.
    dimension : int or None
        Expected feature dimension when loading data that does not record it.
    compression : Compression
        Parquet compression codec used on write.
    metadata_key : str
        Parquet key-value metadata key holding the dimension.
    """

    path: str = field(default_factory=_default_path)
    dimension: int | None = None
    compression: Compression = Compression.ZSTD
    metadata_key: str = DEFAULT_METADATA_KEY

    def __post_init__(self):
        self.path = os.fspath(self.path)
        if not isinstance(self.compression, Compression):
            try:
                self.compression = Compression(str(self.compression).lower())
            except ValueError:
                options = ", ".join(c.value for c in Compression)
                raise ValueError(f"Unknown compression {self.compression!r}. Choose one of: {options}.") from None
        if self.dimension is not None and self.dimension < 0:
            raise ValueError(f"dimension must be non-negative, got {self.dimension}.")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {k: v.value if isinstance(v, Enum) else v for k, v in self.__dict__.items()}
