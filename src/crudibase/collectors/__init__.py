"""
Clients for fetching entity data from external sources.
"""

from crudibase.collectors.wikibase import WikibaseClient

__all__ = [
    "WikibaseClient",
]
