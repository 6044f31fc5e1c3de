"""
Core module for Crudibase.

Contains data models, configuration, validation, and exceptions.
"""

from crudibase.core.config import Settings
from crudibase.core.exceptions import (
    CacheError,
    CrudibaseError,
    InvalidEntityIdError,
    ValidationError,
)
from crudibase.core.models import (
    CacheEntry,
    Entity,
    FetchOutcome,
    FetchStatus,
    SearchMatch,
    SearchResult,
)

__all__ = [
    # Models
    "CacheEntry",
    "Entity",
    "FetchOutcome",
    "FetchStatus",
    "SearchMatch",
    "SearchResult",
    # Configuration
    "Settings",
    # Exceptions
    "CrudibaseError",
    "ValidationError",
    "InvalidEntityIdError",
    "CacheError",
]
