"""
High-level programmatic API for Crudibase.

These functions assemble a lookup service from ``Settings`` (environment
variables by default), run one operation and release the HTTP session.
For repeated lookups, build a ``LookupService`` once and reuse it.

Example:
    import asyncio
    from crudibase import search, get_entity

    async def main():
        for result in await search("Einstein", limit=5):
            print(result.id, result.label)

        entity = await get_entity("Q937")
        if entity is not None:
            print(entity.label("en"))

    asyncio.run(main())
"""

import asyncio

from crudibase.core.config import Settings
from crudibase.core.models import Entity, SearchResult


async def search(
    query: str,
    limit: int = 10,
    *,
    settings: Settings | None = None,
) -> list[SearchResult]:
    """Search Wikibase entities, using the local cache when possible.

    Args:
        query: Search text. Blank queries return an empty list.
        limit: Maximum number of results to request on a cache miss.
        settings: Optional settings. Defaults to ``Settings.from_env()``.

    Returns:
        List of SearchResult objects (empty if the API call failed).
    """
    settings = settings or Settings.from_env()
    async with settings.build_service() as service:
        return await service.search(query, limit)


async def get_entity(
    entity_id: str,
    *,
    settings: Settings | None = None,
) -> Entity | None:
    """Fetch a Wikibase entity by id, using the local cache when possible.

    Args:
        entity_id: Entity id such as ``Q937`` or ``P31``.
        settings: Optional settings. Defaults to ``Settings.from_env()``.

    Returns:
        The Entity, or None if it does not exist or could not be fetched.

    Raises:
        InvalidEntityIdError: If the id is malformed.

    Example:
        >>> import asyncio
        >>> from crudibase import get_entity
        >>> entity = asyncio.run(get_entity("Q937"))
        >>> entity.id
        'Q937'
    """
    settings = settings or Settings.from_env()
    async with settings.build_service() as service:
        return await service.get_entity(entity_id)


def clear_expired_cache(*, settings: Settings | None = None) -> int:
    """Remove expired rows from the search cache.

    Returns:
        Number of rows removed.
    """
    settings = settings or Settings.from_env()
    from crudibase.cache.sqlite import SearchCache

    cache = SearchCache(settings.database_path, default_ttl=settings.cache_ttl_seconds)
    return cache.sweep_expired()


def search_sync(
    query: str,
    limit: int = 10,
    *,
    settings: Settings | None = None,
) -> list[SearchResult]:
    """Synchronous wrapper for search().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(search(query, limit, settings=settings))


def get_entity_sync(
    entity_id: str,
    *,
    settings: Settings | None = None,
) -> Entity | None:
    """Synchronous wrapper for get_entity().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(get_entity(entity_id, settings=settings))
