"""
Sync module for catbreeds.

Reconciles The Cat API with the local cache:
    - engine: online-first reads with cache fallback, enrichment, favorites
    - errors: error policies and network classification
    - pagination: page count and window math
"""

from catbreeds.sync.engine import CatalogSyncEngine, CountSource, TotalCount
from catbreeds.sync.errors import ErrorPolicy, attempt, classify_error, is_network_error
from catbreeds.sync.pagination import PageWindow, clamp_page, total_pages

__all__ = [
    "CatalogSyncEngine",
    "CountSource",
    "TotalCount",
    "ErrorPolicy",
    "attempt",
    "classify_error",
    "is_network_error",
    "PageWindow",
    "clamp_page",
    "total_pages",
]
