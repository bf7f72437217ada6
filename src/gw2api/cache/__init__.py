"""In-process response caching for gw2api.

This package provides the two halves of the caching layer:

* :class:`CacheKeys` -- the key strategy that turns a request shape
  (path, language, API key, parameters or a single id) into a
  deterministic string.
* :class:`MemoryCache` -- a bounded, TTL-based store implementing the
  :class:`CacheStore` protocol, with least-recently-used eviction.

The store is owned by a single :class:`~gw2api.client.GW2Client` and
injected at construction, so independently configured clients never share
entries unless the caller passes the same store to both.
"""

from gw2api.cache.keys import CacheKeys
from gw2api.cache.store import CacheStore, MemoryCache

__all__ = ["CacheKeys", "CacheStore", "MemoryCache"]
