"""
Wikibase Action API client.

Wraps the ``wbsearchentities`` and ``wbgetentities`` actions of a Wikibase
instance (Wikidata by default). Calls never raise for upstream problems;
they return a FetchOutcome describing what happened.
"""

import asyncio
from typing import Any, Optional

import aiohttp

from crudibase import __version__
from crudibase.core.exceptions import ValidationError
from crudibase.core.models import FetchOutcome, FetchStatus
from crudibase.core.validation import MAX_RESPONSE_SIZE, validate_response_size
from crudibase.log import get_logger

logger = get_logger(__name__)


class WikibaseClient:
    """Async client for the Wikibase Action API.

    A session passed in by the caller is left open on ``close()``; one the
    client creates for itself is closed there.
    """

    BASE_URL = "https://www.wikidata.org/w/api.php"
    DEFAULT_LANGUAGE = "en"
    DEFAULT_SEARCH_LIMIT = 10
    MAX_RESPONSE_SIZE = MAX_RESPONSE_SIZE

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 30,
        base_url: str = BASE_URL,
        language: str = DEFAULT_LANGUAGE,
    ):
        """Initialize the Wikibase client.

        Args:
            session: Optional aiohttp session. If not provided, one will
                     be created when needed.
            timeout: Total request timeout in seconds.
            base_url: URL of the instance's ``api.php`` endpoint.
            language: Default language for labels and search.
        """
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.base_url = base_url
        self.language = language
        self.headers = {
            "User-Agent": f"Crudibase/{__version__}",
            "Accept": "application/json",
        }

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "WikibaseClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def search_entities(
        self,
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
        language: Optional[str] = None,
    ) -> FetchOutcome:
        """Search entities by label or alias.

        Args:
            query: Search text, passed through as given.
            limit: Maximum number of results requested from the API.
            language: Search language. Defaults to the client language.

        Returns:
            FetchOutcome whose data is the raw ``search`` array on success.
        """
        params = {
            "action": "wbsearchentities",
            "search": query,
            "format": "json",
            "language": language or self.language,
            "limit": str(limit),
        }
        outcome = await self._get_json(params)
        if not outcome.ok:
            return outcome

        results = outcome.data.get("search") or []
        if not isinstance(results, list):
            return FetchOutcome(
                FetchStatus.MALFORMED,
                outcome.url,
                status_code=outcome.status_code,
                error="'search' is not a list",
            )

        outcome.data = results
        return outcome

    async def get_entities(
        self,
        entity_id: str,
        languages: Optional[str] = None,
    ) -> FetchOutcome:
        """Fetch one entity.

        Args:
            entity_id: Entity id, e.g. ``Q937``.
            languages: Languages to include. Defaults to the client language.

        Returns:
            FetchOutcome whose data is the raw entity object on success.
            A 404 yields NOT_FOUND; an entity flagged ``missing`` yields MISSING.
        """
        params = {
            "action": "wbgetentities",
            "ids": entity_id,
            "format": "json",
            "languages": languages or self.language,
        }
        outcome = await self._get_json(params)
        if not outcome.ok:
            return outcome

        entities = outcome.data.get("entities") or {}
        entity = entities.get(entity_id) if isinstance(entities, dict) else None

        if not isinstance(entity, dict) or "missing" in entity:
            return FetchOutcome(
                FetchStatus.MISSING,
                outcome.url,
                status_code=outcome.status_code,
                error=entity_id,
            )

        outcome.data = entity
        return outcome

    async def _get_json(self, params: dict[str, str]) -> FetchOutcome:
        """Issue a GET against the API and decode a JSON object body."""
        url = self.base_url

        try:
            async with self.session.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            ) as resp:
                if resp.status == 404:
                    return FetchOutcome(FetchStatus.NOT_FOUND, url, status_code=404)
                if resp.status < 200 or resp.status >= 300:
                    return FetchOutcome(
                        FetchStatus.HTTP_ERROR,
                        url,
                        status_code=resp.status,
                        error=resp.reason,
                    )

                self._check_response_size(resp)
                data = await resp.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return FetchOutcome(
                FetchStatus.NETWORK_ERROR,
                url,
                error=str(e) or type(e).__name__,
            )
        except (ValueError, ValidationError) as e:
            # JSONDecodeError is a ValueError
            return FetchOutcome(FetchStatus.MALFORMED, url, error=str(e))

        if not isinstance(data, dict):
            return FetchOutcome(FetchStatus.MALFORMED, url, error="Body is not a JSON object")

        if "error" in data:
            # The Action API reports parameter errors with HTTP 200
            error = data["error"] if isinstance(data["error"], dict) else {"info": str(data["error"])}
            status = (
                FetchStatus.MISSING
                if error.get("code") == "no-such-entity"
                else FetchStatus.HTTP_ERROR
            )
            return FetchOutcome(status, url, status_code=resp.status, error=error.get("info"))

        logger.debug("Wikibase %s returned %s", params.get("action"), resp.status)
        return FetchOutcome(FetchStatus.OK, url, data=data, status_code=resp.status)

    def _check_response_size(self, response: aiohttp.ClientResponse) -> None:
        """Reject responses whose Content-Length exceeds MAX_RESPONSE_SIZE.

        Raises:
            ValidationError: If the response is too large.
        """
        content_length = response.headers.get("Content-Length")
        if content_length is None:
            return
        try:
            size = int(content_length)
        except ValueError:
            return  # Unparseable Content-Length, let the body read decide
        validate_response_size(size, self.MAX_RESPONSE_SIZE)
