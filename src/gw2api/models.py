"""Canonical data shapes shared across all gw2api modules.

The models fall into two groups:

**Configuration** -- :class:`ClientConfig`, serialised as JSON in the
user's config directory and accepted by :class:`~gw2api.client.GW2Client`
at construction.

**Request/response shapes** -- :class:`Page`, the pagination envelope
returned by :meth:`~gw2api.client.orchestrator.RequestOrchestrator.fetch_page`,
and the :class:`Single` / :class:`Many` identifier union that every
detail request is normalised into at the public-method edge by
:func:`normalize_ids`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from gw2api.exceptions import InvalidArgumentError

DEFAULT_BASE_URL = "https://api.guildwars2.com/v2"

Id = Union[int, str]


# --- Configuration ---


class ClientConfig(BaseModel):
    """Static client configuration, fixed for the lifetime of a client.

    Field names follow Python conventions; the camel-case names used by the
    upstream documentation (``cacheTimeout``, ``maxCacheObjects``) are
    accepted as aliases.

    Example::

        ClientConfig(lang="de", cache_timeout=600)
        ClientConfig.model_validate({"lang": "fr", "maxCacheObjects": 50})
    """

    model_config = ConfigDict(populate_by_name=True)

    lang: str = Field(default="en", min_length=1, description="Default language code")
    cache_timeout: int = Field(
        default=1800, ge=1, alias="cacheTimeout", description="Cache TTL in seconds"
    )
    max_cache_objects: int = Field(
        default=1000,
        ge=1,
        alias="maxCacheObjects",
        description="Maximum number of cached entries before LRU eviction",
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    timeout: float = Field(default=30, gt=0, description="HTTP timeout in seconds")


# --- Response envelope ---


class Page(BaseModel):
    """Decoded collection body plus the pagination metadata the API sent with it.

    Metadata comes from the ``X-Page-Size``, ``X-Page-Total``,
    ``X-Result-Count`` and ``X-Result-Total`` headers and is best-effort:
    a header that is absent or unparsable leaves its field ``None``.
    """

    data: Any = None
    page_size: Optional[int] = None
    page_total: Optional[int] = None
    result_count: Optional[int] = None
    result_total: Optional[int] = None


# --- Identifiers ---


@dataclass(frozen=True)
class Single:
    """A single id: the detail response is one object."""

    id: Id


@dataclass(frozen=True)
class Many:
    """An ordered id list: the detail response is a list in the same order.

    Duplicates are allowed and produce duplicate entries in the response.
    """

    ids: tuple[Id, ...]


Identifier = Union[Single, Many]


def _is_id(value: Any) -> bool:
    # bool is an int subclass but never a valid id
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value != ""


def normalize_ids(value: Any) -> Identifier:
    """Resolve a caller-supplied id argument into :class:`Single` or :class:`Many`.

    Args:
        value: An ``int`` / non-empty ``str`` id, a list or tuple of such ids,
            or an already-normalised :class:`Single` / :class:`Many`.

    Returns:
        The normalised identifier.

    Raises:
        InvalidArgumentError: If *value* is not an id, is an empty sequence,
            or contains anything that is not an id.
    """
    if isinstance(value, (Single, Many)):
        return value
    if _is_id(value):
        return Single(value)
    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidArgumentError("ids parameter must not be empty")
        bad = [v for v in value if not _is_id(v)]
        if bad:
            raise InvalidArgumentError(f"Invalid ids in list: {bad!r}")
        return Many(tuple(value))
    raise InvalidArgumentError(
        "ids parameter must be an array of ids or a single id, "
        f"got {type(value).__name__}"
    )
