"""
Domain error classes for the URL store.

Every error carries the identifier of the operation that failed so callers
and logs can tell which call raised it. The underlying driver exception is
chained via ``raise ... from``.
"""

from typing import Optional, Dict, Any


class URLStoreError(Exception):
    """
    Base URL store error.

    Attributes:
        op: Operation identifier (e.g. "storage.postgresql.SaveURL")
        message: Error message (default: "URL store error")
        details: Optional additional error details
    """
    message: str = "URL store error"

    def __init__(
        self,
        op: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize URL store error.

        Args:
            op: Operation identifier
            message: Error message (overrides default)
            details: Optional additional error details
        """
        self.op = op
        self.message = message or self.message
        self.details = details or {}
        super().__init__(f"{op}: {self.message}")


class URLExistsError(URLStoreError):
    """Alias is already stored."""
    message = "url exists"


class URLNotFoundError(URLStoreError):
    """Alias is not stored."""
    message = "url not found"


class StoreConnectionError(URLStoreError):
    """Connection pool could not be created or did not answer a ping."""
    message = "connection error"


class SchemaInitError(URLStoreError):
    """Schema could not be created."""
    message = "schema init error"


class StorageError(URLStoreError):
    """Any other storage engine failure."""
    message = "storage error"


class StorageTimeoutError(StorageError):
    """Storage call exceeded its deadline."""
    message = "storage timeout"
