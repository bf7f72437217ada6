"""Cache key strategy.

Every key starts with a shared prefix built from the language, an optional
API key digest, and the resource path::

    en#items
    en#auth:3f2a9c0e1b7d4a55#account/bank

Collection requests append a canonical JSON serialisation of their query
parameters (keys sorted, so parameter order never matters); detail
requests append one id each. Keeping the per-id component separate from
the prefix is what lets a batch of ids be probed one key at a time and
served partly from cache.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Optional

from gw2api.models import Id

_AUTH_DIGEST_LENGTH = 16


def canonical_params(params: Optional[dict[str, Any]]) -> str:
    """Serialise *params* deterministically, dropping ``None`` values."""
    cleaned = {k: v for k, v in (params or {}).items() if v is not None}
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), default=str)


def auth_digest(api_key: str) -> str:
    """Return a short SHA-256 digest so raw API keys never appear in cache keys."""
    return hashlib.sha256(api_key.encode()).hexdigest()[:_AUTH_DIGEST_LENGTH]


@dataclass(frozen=True)
class CacheKeys:
    """Key builder for one resource path under one language and API key.

    Args:
        path: Resource path, e.g. ``"achievements/groups"``.
        lang: Language code the response is requested in.
        api_key: API key for authenticated resources, or ``None``.

    Example::

        keys = CacheKeys("items", "en")
        keys.detail(15)                  # 'en#items#id:15'
        keys.collection({"page": 1})     # 'en#items#params:{"page":1}'
    """

    path: str
    lang: str
    api_key: Optional[str] = None

    @property
    def prefix(self) -> str:
        if self.api_key:
            return f"{self.lang}#auth:{auth_digest(self.api_key)}#{self.path}"
        return f"{self.lang}#{self.path}"

    def collection(self, params: Optional[dict[str, Any]] = None) -> str:
        """Key for a whole-collection (or paged) response body."""
        return f"{self.prefix}#params:{canonical_params(params)}"

    def page(self, params: Optional[dict[str, Any]] = None) -> str:
        """Key for a :class:`~gw2api.models.Page` envelope."""
        return f"{self.prefix}#page:{canonical_params(params)}"

    def detail(self, id: Id) -> str:
        """Key for a single detail object."""
        return f"{self.prefix}#id:{id}"
