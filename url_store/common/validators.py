"""Input validation for callers of the URL store.

The store itself stores whatever it is given; these checks run before it is
called.
"""

import re
from urllib.parse import urlparse
from typing import Tuple

MAX_URL_LENGTH = 2048
MAX_ALIAS_LENGTH = 64

_ALIAS_RE = re.compile(r'^[a-zA-Z0-9_-]+$')


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a target URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"

    if not result.netloc:
        return False, "URL must have a valid domain"

    return True, ""


def is_valid_alias(alias: str, max_length: int = MAX_ALIAS_LENGTH) -> Tuple[bool, str]:
    """Validate an alias.

    Args:
        alias: The alias to validate
        max_length: Maximum length for the alias

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not alias or not isinstance(alias, str):
        return False, "Alias is required"

    if len(alias) > max_length:
        return False, f"Alias must be at most {max_length} characters"

    if not _ALIAS_RE.match(alias):
        return False, "Alias can only contain letters, numbers, hyphens, and underscores"

    return True, ""
