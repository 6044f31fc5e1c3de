"""
Tests for the SQLite search cache.
"""

import sqlite3
import threading
from datetime import datetime, timedelta, timezone

import pytest

from crudibase.cache.sqlite import SearchCache
from crudibase.core.exceptions import CacheError
from crudibase.core.models import format_timestamp


def _rows(cache: SearchCache) -> list[sqlite3.Row]:
    conn = sqlite3.connect(cache.db_path)
    conn.row_factory = sqlite3.Row
    try:
        return conn.execute("SELECT * FROM search_cache ORDER BY id").fetchall()
    finally:
        conn.close()


def _insert_raw(cache: SearchCache, query: str, expires_at: datetime) -> None:
    conn = sqlite3.connect(cache.db_path)
    try:
        conn.execute(
            """
            INSERT INTO search_cache (query_hash, query, results, cached_at, expires_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                SearchCache.make_hash(query),
                query,
                "[]",
                format_timestamp(datetime.now(timezone.utc)),
                format_timestamp(expires_at),
            ),
        )
        conn.commit()
    finally:
        conn.close()


class TestSchema:
    """Tests for database initialization."""

    def test_creates_parent_directory(self, tmp_path):
        """Test that the database directory is created on demand."""
        db_path = tmp_path / "nested" / "dir" / "cache.db"
        SearchCache(db_path)
        assert db_path.exists()

    def test_reopen_existing_database(self, search_cache):
        """Test that initializing twice keeps existing rows."""
        search_cache.put("Einstein", [{"id": "Q937"}])
        reopened = SearchCache(search_cache.db_path)
        assert reopened.get_value("Einstein") == [{"id": "Q937"}]

    def test_expiry_index_exists(self, search_cache):
        """Test that sweeps can use an index on expires_at."""
        conn = sqlite3.connect(search_cache.db_path)
        try:
            names = {
                row[0]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'index'"
                )
            }
        finally:
            conn.close()
        assert "idx_search_cache_expires_at" in names

    def test_default_ttl_is_one_day(self, search_cache):
        """Test the default time-to-live."""
        assert search_cache.default_ttl == 24 * 3600


class TestGetPut:
    """Tests for reading and writing entries."""

    def test_get_missing_key(self, search_cache):
        """Test that an absent key yields nothing."""
        assert search_cache.get("nothing") is None
        assert search_cache.get_value("nothing") is None

    def test_put_then_get(self, search_cache):
        """Test a simple write and read."""
        search_cache.put("Einstein", [{"id": "Q937", "label": "Albert Einstein"}])

        entry = search_cache.get("Einstein")
        assert entry is not None
        assert entry.query == "Einstein"
        assert entry.query_hash == SearchCache.make_hash("einstein")
        assert entry.expires_at > entry.cached_at
        assert search_cache.get_value("Einstein") == [
            {"id": "Q937", "label": "Albert Einstein"}
        ]

    def test_ttl_sets_expiry(self, search_cache):
        """Test that expires_at is cached_at plus the TTL."""
        search_cache.put("Einstein", [], ttl_seconds=600)
        entry = search_cache.get("Einstein")
        assert entry.expires_at - entry.cached_at == timedelta(seconds=600)

    def test_hash_uses_lowercased_key(self):
        """Test that the row identity ignores case."""
        assert SearchCache.make_hash("Einstein") == SearchCache.make_hash("EINSTEIN")
        assert SearchCache.make_hash("Einstein") != SearchCache.make_hash("Einstein ")
        assert len(SearchCache.make_hash("x")) == 64

    def test_put_replaces_existing_row(self, search_cache):
        """Test that writing the same key twice leaves one row."""
        search_cache.put("Einstein", [{"id": "Q1"}])
        search_cache.put("Einstein", [{"id": "Q2"}])

        rows = _rows(search_cache)
        assert len(rows) == 1
        assert search_cache.get_value("Einstein") == [{"id": "Q2"}]

    def test_case_variants_share_one_row(self, search_cache):
        """Test that keys differing only in case replace each other."""
        search_cache.put("Einstein", [{"id": "Q1"}])
        search_cache.put("einstein", [{"id": "Q2"}])

        rows = _rows(search_cache)
        assert len(rows) == 1
        assert rows[0]["query"] == "einstein"
        # Reads match the stored text exactly
        assert search_cache.get("Einstein") is None
        assert search_cache.get_value("einstein") == [{"id": "Q2"}]

    def test_get_requires_exact_query_text(self, search_cache):
        """Test that a case variant of a stored key is a miss."""
        search_cache.put("Einstein", [{"id": "Q937"}])

        assert search_cache.get("EINSTEIN") is None
        assert search_cache.get("einstein") is None
        assert search_cache.get("Einstein") is not None

    def test_expired_row_not_returned(self, search_cache):
        """Test that rows at or past expiry are treated as absent."""
        _insert_raw(search_cache, "old", datetime.now(timezone.utc) - timedelta(hours=1))
        assert search_cache.get("old") is None
        # The row is still on disk until swept
        assert len(_rows(search_cache)) == 1

    def test_row_expired_by_sqlite_datetime(self, search_cache):
        """Test expiry written with SQLite's own datetime() format."""
        search_cache.put("Einstein", [])
        conn = sqlite3.connect(search_cache.db_path)
        try:
            conn.execute(
                "UPDATE search_cache SET expires_at = datetime('now', '-1 hour')"
            )
            conn.commit()
        finally:
            conn.close()

        assert search_cache.get("Einstein") is None

    def test_unserializable_value(self, search_cache):
        """Test that non-JSON values raise CacheError."""
        with pytest.raises(CacheError):
            search_cache.put("bad", {"value": object()})
        assert _rows(search_cache) == []

    def test_concurrent_writers_leave_one_row(self, search_cache):
        """Test that racing upserts for one key never duplicate the row."""
        errors = []

        def writer(n: int) -> None:
            try:
                for i in range(10):
                    search_cache.put("Einstein", [{"writer": n, "i": i}])
            except CacheError as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(_rows(search_cache)) == 1


class TestHousekeeping:
    """Tests for sweep, delete, clear and stats."""

    def test_sweep_removes_only_expired(self, search_cache):
        """Test that sweeping keeps rows that are still valid."""
        now = datetime.now(timezone.utc)
        _insert_raw(search_cache, "old-query", now - timedelta(hours=2))
        _insert_raw(search_cache, "new-query", now + timedelta(hours=1))

        removed = search_cache.sweep_expired()

        assert removed == 1
        assert [row["query"] for row in _rows(search_cache)] == ["new-query"]

    def test_sweep_empty_cache(self, search_cache):
        """Test sweeping an empty table."""
        assert search_cache.sweep_expired() == 0

    def test_delete(self, search_cache):
        """Test deleting a single key."""
        search_cache.put("Einstein", [])
        assert search_cache.delete("EINSTEIN") is True
        assert search_cache.delete("Einstein") is False

    def test_clear(self, search_cache):
        """Test clearing every row."""
        search_cache.put("a", [])
        search_cache.put("entity:Q1", {"id": "Q1"})
        assert search_cache.clear() == 2
        assert _rows(search_cache) == []

    def test_stats(self, search_cache):
        """Test cache statistics."""
        search_cache.put("Einstein", [])
        search_cache.put("entity:Q937", {"id": "Q937"})
        _insert_raw(search_cache, "old", datetime.now(timezone.utc) - timedelta(hours=1))

        stats = search_cache.stats()

        assert stats["total_entries"] == 3
        assert stats["valid_entries"] == 2
        assert stats["expired_entries"] == 1
        assert stats["entity_entries"] == 1
        assert stats["search_entries"] == 2
        assert stats["db_path"] == str(search_cache.db_path)
        assert stats["db_size_bytes"] > 0
