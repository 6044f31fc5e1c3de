"""
Cache-backed lookup service.

Sits between callers and the Wikibase API: every lookup consults the search
cache first, and only a miss (or an expired row) goes upstream. Upstream
failures degrade to an empty result and are never raised to the caller.
"""

from typing import Optional

from crudibase.cache.sqlite import SearchCache
from crudibase.collectors.wikibase import WikibaseClient
from crudibase.core.models import Entity, FetchOutcome, FetchStatus, SearchResult
from crudibase.core.validation import DEFAULT_ENTITY_PREFIXES, is_blank_query, validate_entity_id
from crudibase.log import get_logger

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 10
ENTITY_KEY_PREFIX = "entity:"


class LookupService:
    """Search and entity lookup through the search cache.

    The cache and client are supplied by whoever assembles the service.
    ``close()`` releases the client's HTTP session; the cache holds no open
    connection between calls.
    """

    def __init__(
        self,
        cache: SearchCache,
        client: WikibaseClient,
        ttl_seconds: Optional[int] = None,
        entity_prefixes: tuple[str, ...] = DEFAULT_ENTITY_PREFIXES,
    ):
        """Initialize the lookup service.

        Args:
            cache: Search cache used for every lookup.
            client: Wikibase API client used on cache misses.
            ttl_seconds: TTL for new rows. Defaults to the cache's default.
            entity_prefixes: Accepted entity id prefixes.
        """
        self.cache = cache
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.entity_prefixes = entity_prefixes

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "LookupService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def search(
        self,
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[SearchResult]:
        """Search for entities.

        Blank queries return an empty list without touching the cache or the
        network. The cache key is the query exactly as given, and ``limit``
        is not part of it: a cached result set is returned as-is whatever
        limit the later call asks for.

        Args:
            query: Search text.
            limit: Maximum results to request on a cache miss.

        Returns:
            Matching results, or an empty list if the upstream call failed.
        """
        if is_blank_query(query):
            return []

        cached = self.cache.get_value(query)
        if _is_search_payload(cached):
            logger.debug("Search cache hit for %r", query)
            return [SearchResult.from_dict(item) for item in cached]
        if cached is not None:
            # Row written by an entity lookup under the same key
            logger.debug("Ignoring non-search cache row for %r", query)

        logger.debug("Search cache miss for %r", query)
        outcome = await self.client.search_entities(query, limit)
        if not outcome.ok:
            self._log_failure("search", query, outcome)
            return []

        results = [
            SearchResult.from_api(item) for item in outcome.data if isinstance(item, dict)
        ]
        self.cache.put(query, [r.to_dict() for r in results], self.ttl_seconds)
        return results

    async def get_entity(self, entity_id: str) -> Optional[Entity]:
        """Get entity details by id.

        Args:
            entity_id: Entity id such as ``Q937``.

        Returns:
            The entity, or None if it does not exist or could not be fetched.

        Raises:
            InvalidEntityIdError: If the id is malformed. Raised before any
                cache or network access.
        """
        validate_entity_id(entity_id, self.entity_prefixes)

        cache_key = f"{ENTITY_KEY_PREFIX}{entity_id}"
        cached = self.cache.get_value(cache_key)
        if isinstance(cached, dict) and cached.get("id") == entity_id:
            logger.debug("Entity cache hit for %s", entity_id)
            return Entity.from_dict(cached)
        if cached is not None:
            # Row written by a search for the literal text "entity:<id>"
            logger.debug("Ignoring non-entity cache row for %s", entity_id)

        logger.debug("Entity cache miss for %s", entity_id)
        outcome = await self.client.get_entities(entity_id)
        if not outcome.ok:
            self._log_failure("entity", entity_id, outcome)
            return None

        entity = Entity.from_dict(outcome.data)
        self.cache.put(cache_key, entity.to_dict(), self.ttl_seconds)
        return entity

    def clear_expired_cache(self) -> int:
        """Delete expired cache rows.

        Meant to be called periodically by an external scheduler.

        Returns:
            Number of rows removed.
        """
        removed = self.cache.sweep_expired()
        if removed:
            logger.info("Removed %d expired cache entries", removed)
        return removed

    @staticmethod
    def _log_failure(kind: str, key: str, outcome: FetchOutcome) -> None:
        if outcome.status in (FetchStatus.NOT_FOUND, FetchStatus.MISSING):
            logger.debug("Wikibase %s %r: %s", kind, key, outcome.status)
        elif outcome.status is FetchStatus.NETWORK_ERROR:
            logger.error("Error fetching %s %r from Wikibase: %s", kind, key, outcome.error)
        else:
            logger.warning(
                "Wikibase API error for %s %r: %s (status %s) %s",
                kind,
                key,
                outcome.status,
                outcome.status_code,
                outcome.error or "",
            )


def _is_search_payload(value: object) -> bool:
    """Return True if a cached value is a list of search result dicts."""
    return isinstance(value, list) and all(isinstance(item, dict) for item in value)
