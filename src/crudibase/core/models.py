"""
Core data models for Crudibase.

This module defines the data structures used for search results, entities,
cache rows and the outcome of calls to the Wikibase API.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as the UTC text stored in the cache table."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a cache table timestamp into an aware UTC datetime.

    Accepts both the stored format and SQLite's ``datetime('now')`` output.
    """
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _alias_list(value: Any) -> list[str]:
    # Anything but a JSON array counts as no aliases
    if not isinstance(value, list):
        return []
    return [alias for alias in value if isinstance(alias, str)]


@dataclass(frozen=True)
class SearchMatch:
    """Which field of an entity matched a search query."""

    type: str
    text: str
    language: str | None = None

    def to_dict(self) -> dict:
        data = {"type": self.type, "text": self.text}
        if self.language is not None:
            data["language"] = self.language
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SearchMatch":
        return cls(
            type=data.get("type", ""),
            text=data.get("text", ""),
            language=data.get("language"),
        )


@dataclass
class SearchResult:
    """A single hit from an entity search."""

    id: str
    label: str = ""
    description: str | None = None
    aliases: list[str] = field(default_factory=list)
    match: SearchMatch | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "SearchResult":
        """Map one item of a ``wbsearchentities`` response.

        Label and description fall back to the ``display`` block when the
        top-level field is absent.
        """
        display = item.get("display") or {}
        label = item.get("label") or (display.get("label") or {}).get("value") or ""
        description = (
            item.get("description")
            or (display.get("description") or {}).get("value")
            or ""
        )
        match = item.get("match")

        return cls(
            id=item.get("id", ""),
            label=label,
            description=description,
            aliases=_alias_list(item.get("aliases")),
            match=SearchMatch.from_dict(match) if isinstance(match, dict) else None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "aliases": self.aliases,
        }
        if self.match is not None:
            data["match"] = self.match.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResult":
        """Create from dictionary (cache retrieval)."""
        match = data.get("match")
        return cls(
            id=data.get("id", ""),
            label=data.get("label") or "",
            description=data.get("description"),
            aliases=_alias_list(data.get("aliases")),
            match=SearchMatch.from_dict(match) if match else None,
        )


@dataclass
class Entity:
    """A Wikibase entity as returned by ``wbgetentities``.

    Only the commonly used mappings are lifted into attributes. The raw
    upstream object is kept so it can be cached and returned unmodified.
    """

    id: str
    type: str
    labels: dict[str, dict[str, str]] = field(default_factory=dict)
    descriptions: dict[str, dict[str, str]] | None = None
    aliases: dict[str, list[dict[str, str]]] | None = None
    sitelinks: dict[str, dict[str, Any]] | None = None
    statements: dict[str, Any] | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entity":
        """Create from a raw entity object (API response or cache)."""
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            labels=data.get("labels") or {},
            descriptions=data.get("descriptions"),
            aliases=data.get("aliases"),
            sitelinks=data.get("sitelinks"),
            # The Action API names statements "claims"
            statements=data.get("statements", data.get("claims")),
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the raw entity object for caching."""
        if self.raw:
            return self.raw
        data: dict[str, Any] = {"id": self.id, "type": self.type, "labels": self.labels}
        for key in ("descriptions", "aliases", "sitelinks", "statements"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def label(self, language: str = "en") -> str | None:
        """Return the label value for a language, if present."""
        entry = self.labels.get(language)
        return entry.get("value") if entry else None

    def description(self, language: str = "en") -> str | None:
        """Return the description value for a language, if present."""
        entry = (self.descriptions or {}).get(language)
        return entry.get("value") if entry else None


@dataclass(frozen=True)
class CacheEntry:
    """A row of the search cache table."""

    query_hash: str
    query: str
    results: str
    cached_at: datetime
    expires_at: datetime

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= datetime.now(timezone.utc)

    @classmethod
    def from_row(cls, row: Any) -> "CacheEntry":
        return cls(
            query_hash=row["query_hash"],
            query=row["query"],
            results=row["results"],
            cached_at=parse_timestamp(row["cached_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
        )


class FetchStatus(Enum):
    """How a call to the Wikibase API ended."""

    OK = "ok"
    NOT_FOUND = "not_found"  # HTTP 404
    MISSING = "missing"  # 200, but the API flags the entity as missing
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    MALFORMED = "malformed"  # Body is not the JSON shape we expect

    def __str__(self) -> str:
        return self.value

    @property
    def is_failure(self) -> bool:
        """Return True for upstream failures, as opposed to absent data."""
        return self in (
            FetchStatus.HTTP_ERROR,
            FetchStatus.NETWORK_ERROR,
            FetchStatus.MALFORMED,
        )


@dataclass
class FetchOutcome:
    """Result of a single Wikibase API call.

    Upstream failures are returned, never raised, so the lookup service can
    degrade to an empty result while still telling failures apart from
    genuinely empty data.
    """

    status: FetchStatus
    url: str
    data: Any = None
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK
