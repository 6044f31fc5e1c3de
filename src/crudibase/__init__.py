"""
Crudibase

Cache-backed search and entity lookup over the Wikidata (Wikibase) API.
Results are kept in a local SQLite table with a per-row expiry, so repeated
lookups are served without hitting the network.

Quick Start:
    >>> import asyncio
    >>> from crudibase import search, get_entity
    >>> results = asyncio.run(search("Einstein"))
    >>> print(results[0].id, results[0].label)
    Q937 Albert Einstein

    # Or use synchronous API:
    >>> from crudibase import get_entity_sync
    >>> entity = get_entity_sync("Q937")
    >>> print(entity.label("en"))
    Albert Einstein
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from crudibase.api import (
    clear_expired_cache,
    get_entity,
    get_entity_sync,
    search,
    search_sync,
)

# Components (for advanced usage)
from crudibase.cache.sqlite import SearchCache
from crudibase.collectors.wikibase import WikibaseClient
from crudibase.core.config import Settings
from crudibase.services.lookup import LookupService

# Exceptions
from crudibase.core.exceptions import (
    CacheError,
    CrudibaseError,
    InvalidEntityIdError,
    ValidationError,
)

# Data models
from crudibase.core.models import (
    CacheEntry,
    Entity,
    FetchOutcome,
    FetchStatus,
    SearchMatch,
    SearchResult,
)

__all__ = [
    # Version
    "__version__",
    # High-level API
    "search",
    "search_sync",
    "get_entity",
    "get_entity_sync",
    "clear_expired_cache",
    # Models
    "CacheEntry",
    "Entity",
    "FetchOutcome",
    "FetchStatus",
    "SearchMatch",
    "SearchResult",
    # Components
    "LookupService",
    "SearchCache",
    "Settings",
    "WikibaseClient",
    # Exceptions
    "CrudibaseError",
    "ValidationError",
    "InvalidEntityIdError",
    "CacheError",
]
