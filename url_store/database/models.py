"""Data models for URL store."""

from dataclasses import dataclass


@dataclass
class URLRecord:
    """A stored alias -> url mapping."""

    id: int
    alias: str
    url: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "alias": self.alias,
            "url": self.url,
        }
