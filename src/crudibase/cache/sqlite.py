"""
SQLite-based search cache.

Stores serialized lookup results keyed by a hash of the lowercased lookup
string, with an absolute expiry timestamp per row.
"""

import hashlib
import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Generator, Optional

from crudibase.core.exceptions import CacheError
from crudibase.core.models import CacheEntry, format_timestamp


class SearchCache:
    """SQLite-backed cache for Wikibase lookups.

    Each row is identified by ``sha256(lower(key))``. Writes are a single
    ``INSERT OR REPLACE`` against the unique hash column, so concurrent
    writers for the same key leave exactly one row. Reads also match the
    stored query text exactly, so a row written for "einstein" is not
    served for "Einstein".
    """

    DEFAULT_TTL = 24 * 3600  # 24 hours

    def __init__(
        self,
        db_path: Optional[Path] = None,
        default_ttl: int = DEFAULT_TTL,
    ):
        """Initialize the search cache.

        Args:
            db_path: Path to SQLite database file. Defaults to ./data/crudibase.db
            default_ttl: Default time-to-live in seconds for cached entries.
        """
        if db_path is None:
            db_path = Path("./data/crudibase.db")

        self.db_path = Path(db_path)
        self.default_ttl = default_ttl

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Initialize the cache database schema."""
        try:
            with self._connection() as conn:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS search_cache (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        query_hash TEXT UNIQUE NOT NULL,
                        query TEXT NOT NULL,
                        results TEXT NOT NULL,
                        cached_at DATETIME NOT NULL,
                        expires_at DATETIME NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_search_cache_expires_at
                    ON search_cache(expires_at);
                """)
        except sqlite3.Error as e:
            raise CacheError("initialization", str(e))

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection context manager.

        Yields:
            sqlite3.Connection that auto-commits on success.
        """
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise CacheError("database operation", str(e))
        finally:
            conn.close()

    @staticmethod
    def make_hash(key: str) -> str:
        """Return the row identity for a lookup key."""
        return hashlib.sha256(key.lower().encode("utf-8")).hexdigest()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get the cache row for a key if it has not expired.

        Args:
            key: Lookup key (raw query or ``entity:<id>``).

        Returns:
            CacheEntry, or None if not found or expired.
        """
        try:
            with self._connection() as conn:
                row = conn.execute(
                    """
                    SELECT query_hash, query, results, cached_at, expires_at
                    FROM search_cache
                    WHERE query_hash = ? AND query = ? AND expires_at > ?
                    """,
                    (self.make_hash(key), key, format_timestamp(self._now())),
                ).fetchone()

                return CacheEntry.from_row(row) if row else None

        except (sqlite3.Error, ValueError) as e:
            raise CacheError("get", str(e))

    def get_value(self, key: str) -> Optional[Any]:
        """Get the deserialized cached payload.

        Args:
            key: Lookup key.

        Returns:
            Cached value or None if not found or expired.
        """
        entry = self.get(key)
        if entry is None:
            return None
        try:
            return json.loads(entry.results)
        except json.JSONDecodeError as e:
            raise CacheError("get", str(e))

    def put(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a value, replacing any existing row for the same key.

        Args:
            key: Lookup key.
            value: Value to cache (must be JSON-serializable).
            ttl_seconds: Time-to-live in seconds. Uses default if not specified.
        """
        if ttl_seconds is None:
            ttl_seconds = self.default_ttl

        now = self._now()
        expires_at = now + timedelta(seconds=ttl_seconds)

        try:
            value_json = json.dumps(value)

            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO search_cache
                        (query_hash, query, results, cached_at, expires_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        self.make_hash(key),
                        key,
                        value_json,
                        format_timestamp(now),
                        format_timestamp(expires_at),
                    ),
                )

        except (sqlite3.Error, TypeError, ValueError) as e:
            raise CacheError("put", str(e))

    def delete(self, key: str) -> bool:
        """Delete a specific cache entry.

        Args:
            key: Lookup key to delete.

        Returns:
            True if entry was deleted, False if not found.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM search_cache WHERE query_hash = ?",
                    (self.make_hash(key),),
                )
                return cursor.rowcount > 0

        except sqlite3.Error as e:
            raise CacheError("delete", str(e))

    def sweep_expired(self) -> int:
        """Remove entries whose expiry is at or before now.

        Returns:
            Number of entries removed.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM search_cache WHERE expires_at <= ?",
                    (format_timestamp(self._now()),),
                )
                return cursor.rowcount

        except sqlite3.Error as e:
            raise CacheError("sweep", str(e))

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries removed.
        """
        try:
            with self._connection() as conn:
                return conn.execute("DELETE FROM search_cache").rowcount

        except sqlite3.Error as e:
            raise CacheError("clear", str(e))

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with entry counts, database size and path.
        """
        try:
            with self._connection() as conn:
                total = conn.execute("SELECT COUNT(*) FROM search_cache").fetchone()[0]

                valid = conn.execute(
                    "SELECT COUNT(*) FROM search_cache WHERE expires_at > ?",
                    (format_timestamp(self._now()),),
                ).fetchone()[0]

                entities = conn.execute(
                    "SELECT COUNT(*) FROM search_cache WHERE query LIKE 'entity:%'"
                ).fetchone()[0]

                db_size = self.db_path.stat().st_size if self.db_path.exists() else 0

                return {
                    "total_entries": total,
                    "valid_entries": valid,
                    "expired_entries": total - valid,
                    "entity_entries": entities,
                    "search_entries": total - entities,
                    "db_size_bytes": db_size,
                    "db_path": str(self.db_path),
                }

        except sqlite3.Error as e:
            raise CacheError("stats", str(e))
