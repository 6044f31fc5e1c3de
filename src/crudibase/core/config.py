"""
Runtime configuration for Crudibase.

Settings have sensible defaults and can be overridden from environment
variables with ``Settings.from_env()``.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, TYPE_CHECKING

from crudibase.core.exceptions import ValidationError

if TYPE_CHECKING:
    from crudibase.services.lookup import LookupService

DEFAULT_DATABASE_PATH = Path("./data/crudibase.db")
DEFAULT_CACHE_TTL_HOURS = 24
DEFAULT_API_URL = "https://www.wikidata.org/w/api.php"
DEFAULT_LANGUAGE = "en"
DEFAULT_TIMEOUT = 30


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(name, raw, "must be an integer")
    if value <= 0:
        raise ValidationError(name, raw, "must be positive")
    return value


@dataclass
class Settings:
    """Deployment settings for the lookup service."""

    database_path: Path = DEFAULT_DATABASE_PATH
    cache_ttl_hours: int = DEFAULT_CACHE_TTL_HOURS
    api_url: str = DEFAULT_API_URL
    language: str = DEFAULT_LANGUAGE
    request_timeout: int = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl_hours * 3600

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ValidationError: If a numeric variable is not a positive integer.
        """
        if env is None:
            env = os.environ

        return cls(
            database_path=Path(env.get("DATABASE_PATH") or DEFAULT_DATABASE_PATH),
            cache_ttl_hours=_env_int(env, "CACHE_TTL_HOURS", DEFAULT_CACHE_TTL_HOURS),
            api_url=env.get("WIKIBASE_API_URL") or DEFAULT_API_URL,
            language=env.get("WIKIBASE_LANGUAGE") or DEFAULT_LANGUAGE,
            request_timeout=_env_int(env, "WIKIBASE_TIMEOUT", DEFAULT_TIMEOUT),
            log_level=(env.get("CRUDIBASE_LOG_LEVEL") or "INFO").upper(),
        )

    def build_service(self) -> "LookupService":
        """Assemble a cache, an API client and a lookup service.

        The caller owns the returned service and should close it (or use it
        as an async context manager) when done.
        """
        from crudibase.cache.sqlite import SearchCache
        from crudibase.collectors.wikibase import WikibaseClient
        from crudibase.services.lookup import LookupService

        cache = SearchCache(self.database_path, default_ttl=self.cache_ttl_seconds)
        client = WikibaseClient(
            base_url=self.api_url,
            language=self.language,
            timeout=self.request_timeout,
        )
        return LookupService(cache, client)
