"""HTTP transport -- the only place gw2api touches the network.

The orchestrator talks to a :class:`Transport`: anything with an async
``get(url, params, headers)`` returning a :class:`TransportResponse`.
:class:`HttpxTransport` is the default implementation, a thin wrapper
around :class:`httpx.AsyncClient`. Tests and callers with special needs
(proxies, custom retry policies, recorded fixtures) can inject their own.

The transport does not interpret status codes; mapping non-success
statuses to errors is done by :func:`gw2api.client.request.check_status`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from gw2api import __version__
from gw2api.exceptions import InvalidArgumentError, TransportError


@dataclass
class TransportResponse:
    """Status, headers and raw body of one HTTP response.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers with lower-cased names.
        body: Undecoded response text.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())


@runtime_checkable
class Transport(Protocol):
    """Interface the orchestrator needs to perform a GET request."""

    async def get(
        self,
        url: str,
        params: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> TransportResponse:
        ...


class HttpxTransport:
    """Asynchronous transport backed by :class:`httpx.AsyncClient`.

    The underlying client is created lazily on first use, so the transport
    works with or without ``async with``. A client passed in by the caller
    is used as-is and left open on :meth:`aclose`.

    Args:
        timeout: Request timeout in seconds.
        client: Optional pre-configured :class:`httpx.AsyncClient`.

    Example::

        async with HttpxTransport(timeout=10) as transport:
            resp = await transport.get("https://api.guildwars2.com/v2/build", {})
    """

    def __init__(
        self,
        timeout: float = 30,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpxTransport:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def get(
        self,
        url: str,
        params: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> TransportResponse:
        """Send a GET request and return the raw response.

        Args:
            url: Absolute request URL.
            params: Flat query parameter mapping.
            headers: Extra request headers (e.g. ``Authorization``).

        Returns:
            The :class:`TransportResponse`, whatever its status code.

        Raises:
            InvalidArgumentError: If *url* cannot be parsed (e.g. control characters).
            TransportError: On network, protocol or timeout errors.
        """
        client = self._ensure_client()
        try:
            response = await client.get(url, params=params, headers=headers or {})
        except httpx.InvalidURL as exc:
            raise InvalidArgumentError(f"Invalid request URL {url!r}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        return TransportResponse(
            status_code=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.text,
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"gw2api/{__version__}",
                },
            )
        return self._client
