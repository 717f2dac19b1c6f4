"""
Core catalog structures: credentials, raw playlist entries, categories and items.
"""

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from pydantic import BaseModel, field_validator

UNCATEGORIZED = "Uncategorized"
UNKNOWN_ITEM_NAME = "Unknown"


class Kind(str, Enum):
    """Content classification of a category."""

    LIVE = "live"
    SERIES = "series"
    MOVIE = "movie"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


class Credentials(BaseModel):
    """Account credentials and the server they belong to."""

    username: str
    password: str
    server: str

    class Config:
        """Pydantic model configuration."""

        frozen = True

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be empty.")
        return v

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Requires an http(s) base URL and strips any trailing slash."""
        v = v.strip().rstrip("/")
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(
                f"Server must be an http:// or https:// URL, but got: {v!r}"
            )
        return v


@dataclass(frozen=True)
class RawEntry:
    """One playlist entry as found in the file, before categorization."""

    location: str
    attributes: dict[str, str] = field(default_factory=dict)
    title: str = ""
    duration: str = "-1"


@dataclass
class Item:
    """A playable media entry belonging to exactly one category."""

    name: str
    url: str
    logo: str | None = None
    id: int | None = None
    category_id: int | None = None


@dataclass
class Category:
    """A named group of items with a kind fixed at creation."""

    name: str
    kind: Kind
    items: list[Item] = field(default_factory=list)
    id: int | None = None
