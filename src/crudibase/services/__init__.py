"""
Lookup services combining the search cache and API clients.
"""

from crudibase.services.lookup import LookupService

__all__ = ["LookupService"]
