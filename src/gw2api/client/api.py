"""Public client exposing one method per Guild Wars 2 API resource.

Every method is a thin mapping from arguments to a resource path plus a
call into :class:`~gw2api.client.orchestrator.RequestOrchestrator`:

- ``list_*`` methods return the whole listing (usually the id list), or
  one page of full objects when ``page`` / ``page_size`` are given.
- ``get_*`` methods take a single id or a list of ids and return one
  object or a list of objects in the requested order.
- Authenticated methods take an ``api_key`` argument, sent as a bearer
  token and mixed into cache keys so accounts never see each other's data.

Resource reference: https://wiki.guildwars2.com/wiki/API:Main
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from gw2api.cache import CacheStore, MemoryCache
from gw2api.client.orchestrator import RequestOrchestrator
from gw2api.client.request import page_params
from gw2api.client.transport import HttpxTransport, Transport
from gw2api.exceptions import InvalidArgumentError
from gw2api.models import ClientConfig, Page, Single, normalize_ids

_EXCHANGE_CURRENCIES = ("coins", "gems")
_TRANSACTION_PERIODS = ("current", "history")
_TRANSACTION_SIDES = ("buys", "sells")


def _segment(value: Any) -> str:
    """Validate a single id used inside a resource path and percent-encode it."""
    identifier = normalize_ids(value)
    if not isinstance(identifier, Single):
        raise InvalidArgumentError(f"Expected a single id in path, got {value!r}")
    segment = str(identifier.id)
    # dot segments are collapsed by URL normalisation even when encoded
    if segment in (".", ".."):
        raise InvalidArgumentError(f"Invalid id in path: {value!r}")
    return quote(segment, safe="")


def _require_key(api_key: Any) -> str:
    if not isinstance(api_key, str) or not api_key:
        raise InvalidArgumentError("This resource requires a non-empty API key")
    return api_key


def _choice(name: str, value: str, allowed: tuple[str, ...]) -> str:
    if value not in allowed:
        raise InvalidArgumentError(f"{name} must be one of {', '.join(allowed)}, got {value!r}")
    return value


class GW2Client:
    """Asynchronous Guild Wars 2 API client with response caching.

    Args:
        config: Client configuration. When omitted, one is built from
            *overrides* (``lang``, ``cache_timeout``, ``max_cache_objects``,
            ``base_url``, ``timeout``).
        cache: Cache store; defaults to a :class:`~gw2api.cache.MemoryCache`
            sized from the config. Pass the same store to several clients
            to share entries.
        transport: HTTP transport; defaults to an
            :class:`~gw2api.client.transport.HttpxTransport` owned and
            closed by this client.
        **overrides: Config fields applied on top of *config*.

    Example::

        async with GW2Client(lang="de") as api:
            ids = await api.list_items()
            bar = await api.get_items(12452)
            pair = await api.get_items([15, 2016])
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        cache: Optional[CacheStore] = None,
        transport: Optional[Transport] = None,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**overrides)
        elif overrides:
            config = ClientConfig.model_validate({**config.model_dump(), **overrides})
        self._config = config

        if cache is None:
            cache = MemoryCache(
                max_entries=config.max_cache_objects,
                ttl=config.cache_timeout,
            )
        self._owned_transport: Optional[HttpxTransport] = None
        if transport is None:
            transport = self._owned_transport = HttpxTransport(timeout=config.timeout)

        self._orchestrator = RequestOrchestrator(config, cache, transport)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> GW2Client:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> CacheStore:
        return self._orchestrator.cache

    # ------------------------------------------------------------------ #
    # Generic access
    # ------------------------------------------------------------------ #

    async def fetch(
        self,
        path: str,
        ids: Any = None,
        *,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        api_key: Optional[str] = None,
    ) -> Any:
        """Fetch any resource path: details when *ids* is given, else the listing.

        Raises:
            InvalidArgumentError: If *ids* is combined with *page* or *page_size*.
        """
        if ids is not None:
            if page is not None or page_size is not None:
                raise InvalidArgumentError("page and page_size cannot be combined with ids")
            return await self._details(path, ids, api_key)
        return await self._list(path, page, page_size, api_key)

    async def get_page(
        self,
        path: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        api_key: Optional[str] = None,
    ) -> Page:
        """Fetch a listing together with its pagination metadata."""
        return await self._orchestrator.fetch_page(path, page, page_size, api_key)

    # ------------------------------------------------------------------ #
    # Achievements
    # ------------------------------------------------------------------ #

    async def list_achievements(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        """All achievement ids, or one page of achievements.

        See https://wiki.guildwars2.com/wiki/API:2/achievements
        """
        return await self._list("achievements", page, page_size)

    async def get_achievements(self, ids: Any) -> Any:
        return await self._details("achievements", ids)

    async def get_daily_achievements(self) -> Any:
        """The current daily achievements, grouped by game mode."""
        return await self._list("achievements/daily")

    async def list_achievement_groups(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("achievements/groups", page, page_size)

    async def get_achievement_groups(self, ids: Any) -> Any:
        """Achievement groups by GUID."""
        return await self._details("achievements/groups", ids)

    async def list_achievement_categories(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> Any:
        return await self._list("achievements/categories", page, page_size)

    async def get_achievement_categories(self, ids: Any) -> Any:
        return await self._details("achievements/categories", ids)

    # ------------------------------------------------------------------ #
    # Game mechanics
    # ------------------------------------------------------------------ #

    async def list_specializations(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("specializations", page, page_size)

    async def get_specializations(self, ids: Any) -> Any:
        return await self._details("specializations", ids)

    async def list_skills(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("skills", page, page_size)

    async def get_skills(self, ids: Any) -> Any:
        return await self._details("skills", ids)

    async def list_traits(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("traits", page, page_size)

    async def get_traits(self, ids: Any) -> Any:
        return await self._details("traits", ids)

    # ------------------------------------------------------------------ #
    # Guild
    # ------------------------------------------------------------------ #

    async def list_emblem_foregrounds(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("emblem/foregrounds", page, page_size)

    async def get_emblem_foregrounds(self, ids: Any) -> Any:
        return await self._details("emblem/foregrounds", ids)

    async def list_emblem_backgrounds(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("emblem/backgrounds", page, page_size)

    async def get_emblem_backgrounds(self, ids: Any) -> Any:
        return await self._details("emblem/backgrounds", ids)

    async def list_guild_permissions(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("guild/permissions", page, page_size)

    async def get_guild_permissions(self, ids: Any) -> Any:
        """Guild permissions by string id, e.g. ``"StartingRole"``."""
        return await self._details("guild/permissions", ids)

    async def list_guild_upgrades(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("guild/upgrades", page, page_size)

    async def get_guild_upgrades(self, ids: Any) -> Any:
        return await self._details("guild/upgrades", ids)

    async def get_guild(self, guild_id: str, api_key: Optional[str] = None) -> Any:
        """Public guild details; a guild leader's key adds the private fields."""
        return await self._list(f"guild/{_segment(guild_id)}", api_key=api_key)

    async def get_guild_members(self, guild_id: str, api_key: str) -> Any:
        return await self._list(f"guild/{_segment(guild_id)}/members", api_key=_require_key(api_key))

    async def get_guild_log(self, guild_id: str, api_key: str, since: Optional[int] = None) -> Any:
        """Guild log entries, optionally only those newer than log id *since*."""
        return await self._orchestrator.fetch_collection(
            f"guild/{_segment(guild_id)}/log",
            {"since": since},
            api_key=_require_key(api_key),
        )

    async def get_guild_stash(self, guild_id: str, api_key: str) -> Any:
        return await self._list(f"guild/{_segment(guild_id)}/stash", api_key=_require_key(api_key))

    async def get_guild_treasury(self, guild_id: str, api_key: str) -> Any:
        return await self._list(f"guild/{_segment(guild_id)}/treasury", api_key=_require_key(api_key))

    # ------------------------------------------------------------------ #
    # Items
    # ------------------------------------------------------------------ #

    async def list_items(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        """All item ids, or one page of items.

        See https://wiki.guildwars2.com/wiki/API:2/items
        """
        return await self._list("items", page, page_size)

    async def get_items(self, ids: Any) -> Any:
        """Item details for one id or a list of ids.

        See https://wiki.guildwars2.com/wiki/API:2/items
        """
        return await self._details("items", ids)

    async def list_recipes(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("recipes", page, page_size)

    async def get_recipes(self, ids: Any) -> Any:
        return await self._details("recipes", ids)

    async def search_recipes(self, input: Optional[int] = None, output: Optional[int] = None) -> Any:
        """Recipe ids that consume item *input* or produce item *output* (exactly one)."""
        if (input is None) == (output is None):
            raise InvalidArgumentError("search_recipes needs exactly one of input or output")
        item = input if input is not None else output
        param = "input" if input is not None else "output"
        if isinstance(item, bool) or not isinstance(item, int):
            raise InvalidArgumentError(f"{param} must be an item id, got {item!r}")
        return await self._orchestrator.fetch_collection("recipes/search", {param: item})

    async def list_skins(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("skins", page, page_size)

    async def get_skins(self, ids: Any) -> Any:
        return await self._details("skins", ids)

    async def list_materials(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("materials", page, page_size)

    async def get_materials(self, ids: Any) -> Any:
        return await self._details("materials", ids)

    async def list_itemstats(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("itemstats", page, page_size)

    async def get_itemstats(self, ids: Any) -> Any:
        return await self._details("itemstats", ids)

    # ------------------------------------------------------------------ #
    # Map information
    # ------------------------------------------------------------------ #

    async def list_continents(self) -> Any:
        return await self._list("continents")

    async def get_continents(self, ids: Any) -> Any:
        return await self._details("continents", ids)

    async def get_continent_floors(self, continent_id: int, floor_ids: Any = None) -> Any:
        """Floor ids of a continent, or floor details when *floor_ids* is given."""
        path = f"continents/{_segment(continent_id)}/floors"
        return await self._list_or_details(path, floor_ids)

    async def get_continent_regions(self, continent_id: int, floor_id: int, region_ids: Any = None) -> Any:
        path = f"continents/{_segment(continent_id)}/floors/{_segment(floor_id)}/regions"
        return await self._list_or_details(path, region_ids)

    async def get_continent_maps(
        self,
        continent_id: int,
        floor_id: int,
        region_id: int,
        map_ids: Any = None,
    ) -> Any:
        path = (
            f"continents/{_segment(continent_id)}/floors/{_segment(floor_id)}"
            f"/regions/{_segment(region_id)}/maps"
        )
        return await self._list_or_details(path, map_ids)

    async def list_maps(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("maps", page, page_size)

    async def get_maps(self, ids: Any) -> Any:
        return await self._details("maps", ids)

    # ------------------------------------------------------------------ #
    # Trading post
    # ------------------------------------------------------------------ #

    async def list_commerce_listings(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("commerce/listings", page, page_size)

    async def get_commerce_listings(self, ids: Any) -> Any:
        """Buy and sell order books for the given item ids."""
        return await self._details("commerce/listings", ids)

    async def list_commerce_prices(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("commerce/prices", page, page_size)

    async def get_commerce_prices(self, ids: Any) -> Any:
        return await self._details("commerce/prices", ids)

    async def get_commerce_exchange(self, currency: str, quantity: int) -> Any:
        """Current gem exchange rate for *quantity* of ``coins`` or ``gems``."""
        currency = _choice("currency", currency, _EXCHANGE_CURRENCIES)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidArgumentError(f"quantity must be a positive integer, got {quantity!r}")
        return await self._orchestrator.fetch_collection(
            f"commerce/exchange/{currency}", {"quantity": quantity}
        )

    async def get_commerce_transactions(
        self,
        api_key: str,
        period: str = "current",
        side: str = "buys",
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Any:
        """The account's current or past (``history``) buy or sell orders."""
        period = _choice("period", period, _TRANSACTION_PERIODS)
        side = _choice("side", side, _TRANSACTION_SIDES)
        return await self._list(
            f"commerce/transactions/{period}/{side}", page, page_size, _require_key(api_key)
        )

    # ------------------------------------------------------------------ #
    # Account (authenticated)
    # ------------------------------------------------------------------ #

    async def get_account(self, api_key: str) -> Any:
        return await self._list("account", api_key=_require_key(api_key))

    async def get_account_achievements(self, api_key: str) -> Any:
        return await self._list("account/achievements", api_key=_require_key(api_key))

    async def get_account_bank(self, api_key: str) -> Any:
        return await self._list("account/bank", api_key=_require_key(api_key))

    async def get_account_materials(self, api_key: str) -> Any:
        return await self._list("account/materials", api_key=_require_key(api_key))

    async def get_account_wallet(self, api_key: str) -> Any:
        return await self._list("account/wallet", api_key=_require_key(api_key))

    async def get_account_inventory(self, api_key: str) -> Any:
        """Shared inventory slots."""
        return await self._list("account/inventory", api_key=_require_key(api_key))

    async def list_characters(self, api_key: str) -> Any:
        """Names of the account's characters."""
        return await self._list("characters", api_key=_require_key(api_key))

    async def get_characters(self, names: Any, api_key: str) -> Any:
        """Character details; characters are identified by ``name``, not ``id``."""
        return await self._orchestrator.fetch_details(
            "characters", normalize_ids(names), api_key=_require_key(api_key), id_field="name"
        )

    async def get_token_info(self, api_key: str) -> Any:
        """Name and permissions of the API key itself."""
        return await self._list("tokeninfo", api_key=_require_key(api_key))

    # ------------------------------------------------------------------ #
    # Miscellaneous
    # ------------------------------------------------------------------ #

    async def get_build(self) -> Any:
        return await self._list("build")

    async def list_colors(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("colors", page, page_size)

    async def get_colors(self, ids: Any) -> Any:
        return await self._details("colors", ids)

    async def list_currencies(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("currencies", page, page_size)

    async def get_currencies(self, ids: Any) -> Any:
        return await self._details("currencies", ids)

    async def list_worlds(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("worlds", page, page_size)

    async def get_worlds(self, ids: Any) -> Any:
        return await self._details("worlds", ids)

    async def list_files(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("files", page, page_size)

    async def get_files(self, ids: Any) -> Any:
        """Commonly requested in-game asset icons, by string id."""
        return await self._details("files", ids)

    async def list_quaggans(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("quaggans", page, page_size)

    async def get_quaggans(self, ids: Any) -> Any:
        return await self._details("quaggans", ids)

    async def list_minis(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return await self._list("minis", page, page_size)

    async def get_minis(self, ids: Any) -> Any:
        return await self._details("minis", ids)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _list(
        self,
        path: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        api_key: Optional[str] = None,
    ) -> Any:
        return await self._orchestrator.fetch_collection(
            path, page_params(page, page_size), api_key=api_key
        )

    async def _details(self, path: str, ids: Any, api_key: Optional[str] = None) -> Any:
        return await self._orchestrator.fetch_details(path, normalize_ids(ids), api_key=api_key)

    async def _list_or_details(self, path: str, ids: Any) -> Any:
        if ids is None:
            return await self._list(path)
        return await self._details(path, ids)
