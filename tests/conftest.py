"""
Pytest fixtures and configuration for Crudibase tests.

Provides mock Wikibase API responses, a temporary search cache and fake
aiohttp sessions so no test touches the network.
"""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from crudibase.cache.sqlite import SearchCache
from crudibase.core.models import FetchOutcome, FetchStatus

API_URL = "https://www.wikidata.org/w/api.php"

# =============================================================================
# Mock API Response Fixtures
# =============================================================================


@pytest.fixture
def mock_search_response() -> dict[str, Any]:
    """Create a mock wbsearchentities response."""
    return {
        "searchinfo": {"search": "Einstein"},
        "search": [
            {
                "id": "Q937",
                "title": "Q937",
                "label": "Albert Einstein",
                "description": "German-born theoretical physicist (1879-1955)",
                "aliases": ["Einstein"],
                "match": {"type": "label", "language": "en", "text": "Albert Einstein"},
            },
            {
                "id": "Q2067325",
                "display": {
                    "label": {"value": "Einstein", "language": "en"},
                    "description": {"value": "family name", "language": "en"},
                },
                "match": {"type": "alias", "language": "en", "text": "Einstein"},
            },
        ],
        "success": 1,
    }


@pytest.fixture
def mock_entity() -> dict[str, Any]:
    """Create a mock entity object as found under ``entities``."""
    return {
        "type": "item",
        "id": "Q937",
        "labels": {"en": {"language": "en", "value": "Albert Einstein"}},
        "descriptions": {
            "en": {
                "language": "en",
                "value": "German-born theoretical physicist (1879-1955)",
            }
        },
        "aliases": {"en": [{"language": "en", "value": "Einstein"}]},
        "claims": {"P31": [{"mainsnak": {"property": "P31"}}]},
        "sitelinks": {
            "enwiki": {"site": "enwiki", "title": "Albert Einstein", "badges": []}
        },
    }


@pytest.fixture
def mock_entities_response(mock_entity: dict) -> dict[str, Any]:
    """Create a mock wbgetentities response."""
    return {"entities": {"Q937": mock_entity}, "success": 1}


@pytest.fixture
def mock_missing_response() -> dict[str, Any]:
    """Create a wbgetentities response for an entity that does not exist."""
    return {
        "entities": {"Q999999999999": {"id": "Q999999999999", "missing": ""}},
        "success": 1,
    }


# =============================================================================
# Fake aiohttp Fixtures
# =============================================================================


def make_response(
    status: int = 200,
    payload: Any = None,
    reason: str = "OK",
    headers: dict[str, str] | None = None,
    json_error: Exception | None = None,
) -> MagicMock:
    """Build a fake aiohttp response."""
    resp = MagicMock()
    resp.status = status
    resp.reason = reason
    resp.headers = headers or {}
    resp.json = AsyncMock(return_value=payload, side_effect=json_error)
    return resp


def make_session(response: MagicMock | None = None, error: Exception | None = None) -> MagicMock:
    """Build a fake aiohttp session whose ``get`` yields ``response``."""
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        ctx = session.get.return_value
        ctx.__aenter__.return_value = response
        ctx.__aexit__.return_value = False
    return session


# =============================================================================
# Cache and Client Fixtures
# =============================================================================


@pytest.fixture
def tmp_cache_db(tmp_path: Path) -> Path:
    """Create a temporary cache database path."""
    return tmp_path / "data" / "test_cache.db"


@pytest.fixture
def search_cache(tmp_cache_db: Path) -> SearchCache:
    """Create a search cache backed by a temporary database."""
    return SearchCache(tmp_cache_db)


@pytest.fixture
def mock_client(mock_search_response: dict, mock_entity: dict) -> MagicMock:
    """Create a mock Wikibase client returning successful outcomes."""
    client = MagicMock()
    client.search_entities = AsyncMock(
        return_value=FetchOutcome(
            FetchStatus.OK, API_URL, data=mock_search_response["search"], status_code=200
        )
    )
    client.get_entities = AsyncMock(
        return_value=FetchOutcome(FetchStatus.OK, API_URL, data=mock_entity, status_code=200)
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def fake_response():
    """Factory for fake aiohttp responses."""
    return make_response


@pytest.fixture
def fake_session():
    """Factory for fake aiohttp sessions."""
    return make_session
