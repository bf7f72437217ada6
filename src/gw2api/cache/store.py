"""Bounded in-memory cache store with per-entry TTL.

:class:`MemoryCache` keeps decoded API responses in a
:class:`cachetools.TLRUCache`: entries expire after their time-to-live and,
once ``max_entries`` is reached, the least recently used entry is evicted
to make room. Each call takes a lock, so a store can be shared between
threads and event loops; a single ``get`` or ``set`` is atomic, a
read-then-write sequence across calls is not.

Any object with the async ``get`` / ``set`` / ``delete`` / ``clear``
methods of :class:`CacheStore` can be injected into the client instead,
e.g. a wrapper around an external cache service.
"""

from __future__ import annotations

import copy
import threading
import time
from typing import Any, Callable, NamedTuple, Optional, Protocol, runtime_checkable

from cachetools import TLRUCache


@runtime_checkable
class CacheStore(Protocol):
    """Interface the request orchestrator needs from a cache."""

    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None`` when absent or expired."""
        ...

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds."""
        ...

    async def delete(self, key: str) -> None:
        """Remove *key* if present."""
        ...

    async def clear(self) -> None:
        """Remove every entry."""
        ...


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCache:
    """In-process TTL + LRU cache for decoded API responses.

    Values are deep-copied on the way in and on the way out, so a caller
    mutating a returned object cannot alter what later callers receive.

    Args:
        max_entries: Maximum number of entries before LRU eviction.
        ttl: Default time-to-live in seconds for :meth:`set` calls that
            do not pass one.
        timer: Clock used for expiry; defaults to :func:`time.monotonic`.

    Example::

        cache = MemoryCache(max_entries=1000, ttl=1800)
        await cache.set("en#items#id:15", {"id": 15})
        await cache.get("en#items#id:15")   # {'id': 15}
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl: float = 1800,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._ttl = ttl
        self._lock = threading.Lock()
        self._cache: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_time_to_use, timer=timer)

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
        if entry is None:
            return None
        return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        entry = _Entry(copy.deepcopy(value), self._ttl if ttl is None else ttl)
        with self._lock:
            self._cache[key] = entry

    async def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (live entries), ``max_entries`` and
            ``ttl_seconds``.
        """
        with self._lock:
            self._cache.expire()
            size = len(self._cache)
        return {
            "size": size,
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl,
        }
