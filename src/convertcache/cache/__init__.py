"""Content-addressed cache for convert-cache.

Persistent, eviction-free storage of transformed buffers keyed by the SHA-1
of their input.
"""

from convertcache.cache.store import CacheRead, CacheStatus, CacheStore, CacheWrite

__all__ = ["CacheRead", "CacheStatus", "CacheStore", "CacheWrite"]
