"""Common utilities for URL store."""

from .validators import is_valid_url, is_valid_alias
from .logging_config import setup_logging, JSONFormatter

__all__ = [
    "is_valid_url",
    "is_valid_alias",
    "setup_logging",
    "JSONFormatter",
]
