"""Abstract base class for URL store implementations."""

from abc import ABC, abstractmethod
from typing import Optional


class URLStoreBase(ABC):
    """Abstract base class for alias -> url storage."""

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def ensure_schema(self, timeout: Optional[float] = None) -> None:
        """Create the backing table and index if they don't exist.

        Raises:
            SchemaInitError: If the schema could not be created
        """
        pass

    @abstractmethod
    async def save_url(self, url: str, alias: str, timeout: Optional[float] = None) -> int:
        """Store a new alias -> url mapping.

        Args:
            url: Target URL
            alias: Alias to store it under
            timeout: Caller deadline in seconds (optional)

        Returns:
            The id assigned to the new record

        Raises:
            URLExistsError: If the alias is already stored
            StorageError: On any other storage failure
        """
        pass

    @abstractmethod
    async def get_url(self, alias: str, timeout: Optional[float] = None) -> str:
        """Look up the url stored under an alias.

        Raises:
            URLNotFoundError: If the alias is not stored
            StorageError: On any other storage failure
        """
        pass

    @abstractmethod
    async def delete_url(self, alias: str, timeout: Optional[float] = None) -> None:
        """Delete the mapping stored under an alias.

        Raises:
            URLNotFoundError: If the alias is not stored
            StorageError: On any other storage failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release database connections."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
