"""Alias -> URL persistence backed by PostgreSQL."""

from .database import URLStoreBase, URLStorePostgreSQL, URLRecord
from .errors import (
    URLStoreError,
    URLExistsError,
    URLNotFoundError,
    StoreConnectionError,
    SchemaInitError,
    StorageError,
    StorageTimeoutError,
)

__version__ = "1.0.0"

__all__ = [
    "URLStoreBase",
    "URLStorePostgreSQL",
    "URLRecord",
    "URLStoreError",
    "URLExistsError",
    "URLNotFoundError",
    "StoreConnectionError",
    "SchemaInitError",
    "StorageError",
    "StorageTimeoutError",
]
