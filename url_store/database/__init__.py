"""Database layer for URL store."""

from .base import URLStoreBase
from .postgresql import URLStorePostgreSQL
from .models import URLRecord

__all__ = ["URLStoreBase", "URLStorePostgreSQL", "URLRecord"]
