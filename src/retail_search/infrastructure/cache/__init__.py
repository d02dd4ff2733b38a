"""
Cache Infrastructure

In-memory caches with per-entry expiry.
"""

from .expiring_cache import CacheStats, ExpiringCache

__all__ = [
    "ExpiringCache",
    "CacheStats",
]
