"""
Input validation utilities for Crudibase.

Entity ids are checked before any cache or network access so a malformed
id never reaches the Wikibase API.
"""

import re
from functools import lru_cache

from crudibase.core.exceptions import InvalidEntityIdError, ValidationError

DEFAULT_ENTITY_PREFIXES = ("Q", "P")

# Bounds accepted for the search limit by the command line
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 50

# Maximum response size (10 MB)
MAX_RESPONSE_SIZE = 10 * 1024 * 1024


@lru_cache(maxsize=None)
def _entity_id_pattern(prefixes: str) -> re.Pattern[str]:
    return re.compile(rf"[{re.escape(prefixes)}][0-9]+")


def validate_entity_id(
    entity_id: str,
    prefixes: tuple[str, ...] = DEFAULT_ENTITY_PREFIXES,
) -> str:
    """Validate a Wikibase entity id such as ``Q937`` or ``P31``.

    Args:
        entity_id: Entity id supplied by the caller.
        prefixes: Single uppercase letters accepted as the id prefix.

    Returns:
        The entity id, unchanged.

    Raises:
        InvalidEntityIdError: If the id is not a prefix letter followed by digits.
    """
    joined = "".join(prefixes)
    if not isinstance(entity_id, str) or not _entity_id_pattern(joined).fullmatch(entity_id):
        raise InvalidEntityIdError(str(entity_id), joined)
    return entity_id


def is_blank_query(query: str | None) -> bool:
    """Return True for queries that should short-circuit to no results."""
    return not query or not query.strip()


def validate_search_limit(limit: int) -> int:
    """Check that a search limit is within the supported range.

    Raises:
        ValidationError: If the limit is out of range.
    """
    if not MIN_SEARCH_LIMIT <= limit <= MAX_SEARCH_LIMIT:
        raise ValidationError(
            "limit",
            str(limit),
            f"must be between {MIN_SEARCH_LIMIT} and {MAX_SEARCH_LIMIT}",
        )
    return limit


def validate_response_size(
    content_length: int | None,
    max_size: int = MAX_RESPONSE_SIZE,
) -> None:
    """Validate that a response size is within acceptable limits.

    Args:
        content_length: The Content-Length header value (may be None).
        max_size: Maximum allowed response size in bytes.

    Raises:
        ValidationError: If the response is too large.
    """
    if content_length is not None and content_length > max_size:
        size_mb = content_length / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            "response_size",
            f"{size_mb:.1f} MB",
            f"Response exceeds maximum size of {max_mb:.0f} MB",
        )
