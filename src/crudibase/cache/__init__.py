"""
Cache module for storing lookup results.

Provides a SQLite-based search cache with per-row expiry.
"""

from crudibase.cache.sqlite import SearchCache

__all__ = ["SearchCache"]
