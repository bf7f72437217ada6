"""Cache-aware request orchestration.

:class:`RequestOrchestrator` sits between the public per-resource methods
and the transport. It has three entry points:

- :meth:`~RequestOrchestrator.fetch_collection` -- whole or paged
  listings, one cache entry per distinct parameter set.
- :meth:`~RequestOrchestrator.fetch_page` -- the same, returning a
  :class:`~gw2api.models.Page` envelope with pagination metadata.
- :meth:`~RequestOrchestrator.fetch_details` -- id-keyed objects, one
  cache entry per id. A batch is split into cached and missing ids, only
  the missing ids are fetched (in a single request), and the results are
  merged back into the caller's order by :func:`merge_results`.

Cache failures never fail a request: a failing ``get`` counts as a miss
and a failing ``set`` is logged. When an upstream request for missing ids
fails but some ids were already cached, the cached subset is returned
instead of raising.

No single-flight guarantee is given: concurrent calls for the same
uncached ids may each hit the API, and the later cache write wins.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Optional, Sequence

from gw2api.cache import CacheKeys, CacheStore
from gw2api.client.request import (
    auth_headers,
    build_params,
    build_url,
    check_status,
    decode_json,
    ids_to_params,
    page_from_response,
)
from gw2api.client.transport import Transport, TransportResponse
from gw2api.exceptions import (
    MalformedResponseError,
    MissingIdsError,
    TransportError,
    UpstreamError,
)
from gw2api.models import ClientConfig, Id, Page, Single, normalize_ids

logger = logging.getLogger(__name__)

_DEGRADABLE_ERRORS = (UpstreamError, MalformedResponseError, TransportError)


def id_token(id: Id) -> str:
    """Lookup token for an id; ``15`` and ``"15"`` resolve to the same object."""
    return str(id)


def batch_order(ids: Sequence[Id]) -> list[Id]:
    """Unique ids in ascending order (integers before strings) for the upstream request."""
    unique = {id_token(i): i for i in ids}
    return sorted(unique.values(), key=lambda i: (isinstance(i, str), i))


def merge_results(requested: Sequence[Id], lookup: dict[str, Any]) -> list[Any]:
    """Project *lookup* onto the requested order.

    Each requested id yields its object, so an id requested twice appears
    twice. Repeats are deep copies, so mutating one entry never changes
    another. Ids with no entry in *lookup* are left out; callers decide
    whether that is an error.

    Args:
        requested: Ids in the caller's order, duplicates allowed.
        lookup: Objects keyed by :func:`id_token`.

    Returns:
        The resolved objects in requested order.
    """
    results: list[Any] = []
    seen: set[str] = set()
    for i in requested:
        token = id_token(i)
        if token not in lookup:
            continue
        obj = lookup[token]
        results.append(copy.deepcopy(obj) if token in seen else obj)
        seen.add(token)
    return results


class RequestOrchestrator:
    """Serves requests from the cache and fetches whatever is missing.

    Holds no per-request state; the only shared state is the injected
    cache store.

    Args:
        config: Client configuration (language, TTL, base URL).
        cache: Store for decoded responses.
        transport: Performs the HTTP GET requests.
    """

    def __init__(
        self,
        config: ClientConfig,
        cache: CacheStore,
        transport: Transport,
    ) -> None:
        self._config = config
        self._cache = cache
        self._transport = transport

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> CacheStore:
        return self._cache

    # ------------------------------------------------------------------ #
    # Collections
    # ------------------------------------------------------------------ #

    async def fetch_collection(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        api_key: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> Any:
        """Return the decoded body for *path*, from cache when possible.

        Args:
            path: Resource path, e.g. ``"achievements"``.
            params: Query parameters (``page``, ``page_size``, ``quantity`` ...).
            api_key: API key for authenticated resources.
            lang: Language override; defaults to the configured language.

        Returns:
            The decoded JSON value.

        Raises:
            UpstreamError: On a status other than 200 / 206.
            MalformedResponseError: If the body is not JSON.
            TransportError: On network failures.
        """
        lang = lang or self._config.lang
        key = CacheKeys(path, lang, api_key).collection(params)

        cached = await self._cache_get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        response = await self._get(path, build_params(lang, params), api_key)
        data = decode_json(response.body)
        await self._cache_set(key, data)
        return data

    async def fetch_page(
        self,
        path: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        api_key: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> Page:
        """Like :meth:`fetch_collection` but keeps the pagination headers.

        Returns:
            A :class:`~gw2api.models.Page` with the decoded body in ``data``.
        """
        lang = lang or self._config.lang
        params = {"page": page, "page_size": page_size}
        key = CacheKeys(path, lang, api_key).page(params)

        cached = await self._cache_get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return Page.model_validate(cached)

        response = await self._get(path, build_params(lang, params), api_key)
        envelope = page_from_response(response, decode_json(response.body))
        await self._cache_set(key, envelope.model_dump())
        return envelope

    # ------------------------------------------------------------------ #
    # Details
    # ------------------------------------------------------------------ #

    async def fetch_details(
        self,
        path: str,
        ids: Any,
        api_key: Optional[str] = None,
        lang: Optional[str] = None,
        id_field: str = "id",
    ) -> Any:
        """Return detail objects for *ids*, fetching only the uncached ones.

        A single id returns a single object; a list returns a list in the
        same order, with duplicates repeated.

        Args:
            path: Resource path, e.g. ``"items"``.
            ids: A single id, a list of ids, or a normalised identifier.
            api_key: API key for authenticated resources.
            lang: Language override; defaults to the configured language.
            id_field: Field of each returned object holding its id.

        Returns:
            One object for a single id, otherwise a list of objects.

        Raises:
            InvalidArgumentError: If *ids* is not a valid identifier.
            UpstreamError: If the fetch fails and no id was cached.
            MalformedResponseError: If the body is not JSON and no id was cached.
            TransportError: On network failures when no id was cached.
            MissingIdsError: If a successful response omits requested ids.
        """
        identifier = normalize_ids(ids)
        single = isinstance(identifier, Single)
        requested: list[Id] = [identifier.id] if single else list(identifier.ids)
        lang = lang or self._config.lang
        keys = CacheKeys(path, lang, api_key)

        batch = batch_order(requested)
        probes = await asyncio.gather(*(self._cache_get(keys.detail(i)) for i in batch))
        lookup = {id_token(i): obj for i, obj in zip(batch, probes) if obj is not None}
        missing = [i for i in batch if id_token(i) not in lookup]

        if not missing:
            logger.debug("Cache hit for all %d %s ids", len(batch), path)
            return self._shape(single, merge_results(requested, lookup))

        logger.debug(
            "Fetching %d of %d %s ids (%d cached)",
            len(missing), len(batch), path, len(lookup),
        )
        try:
            fetched = await self._fetch_objects(path, missing, api_key, lang)
        except _DEGRADABLE_ERRORS as exc:
            if not lookup:
                raise
            logger.warning(
                "Returning %d cached %s ids after failed fetch of %d: %s",
                len(lookup), path, len(missing), exc,
            )
            return merge_results(requested, lookup)

        writes = []
        for obj in fetched:
            obj_id = obj.get(id_field) if isinstance(obj, dict) else None
            if obj_id is None:
                logger.warning("Skipping %s object without %r field", path, id_field)
                continue
            lookup[id_token(obj_id)] = obj
            writes.append(self._cache_set(keys.detail(obj_id), obj))
        await asyncio.gather(*writes)

        results = merge_results(requested, lookup)
        unresolved = [i for i in missing if id_token(i) not in lookup]
        if unresolved:
            raise MissingIdsError(unresolved, results)
        return self._shape(single, results)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _shape(single: bool, results: list[Any]) -> Any:
        return results[0] if single else results

    async def _fetch_objects(
        self,
        path: str,
        ids: list[Id],
        api_key: Optional[str],
        lang: str,
    ) -> list[Any]:
        """Fetch *ids* in one request; a one-id request yields a one-element list."""
        response = await self._get(path, build_params(lang, ids_to_params(ids)), api_key)
        data = decode_json(response.body)
        if isinstance(data, list):
            return data
        return [data]

    async def _get(
        self,
        path: str,
        params: dict[str, Any],
        api_key: Optional[str],
    ) -> TransportResponse:
        url = build_url(self._config.base_url, path)
        logger.debug("GET %s %s", url, params)
        response = await self._transport.get(url, params, auth_headers(api_key))
        check_status(response)
        return response

    async def _cache_get(self, key: str) -> Optional[Any]:
        try:
            return await self._cache.get(key)
        except Exception:
            logger.warning("Cache lookup failed for %s; treating as a miss", key, exc_info=True)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self._cache.set(key, value, self._config.cache_timeout)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)
