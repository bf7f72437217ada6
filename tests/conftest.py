"""Shared test fixtures for gw2api.

Provides an in-memory fake of the Guild Wars 2 API (a :class:`Transport`
that records every call), ready-made clients and orchestrators wired to it,
config isolation, and output-state cleanup. These fixtures are discovered
by pytest automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from gw2api.cache import MemoryCache
from gw2api.client import GW2Client, RequestOrchestrator, TransportResponse
from gw2api.models import ClientConfig
from gw2api.output import OutputFormat, OutputManager, reset_output, set_output


ITEMS: dict[Any, dict[str, Any]] = {
    15: {"id": 15, "name": "Abomination Hammer", "type": "Weapon"},
    2016: {"id": 2016, "name": "Tattered Bandana", "type": "Armor"},
    12452: {"id": 12452, "name": "Omnomberry Bar", "type": "Consumable"},
}

RESOURCES: dict[str, dict[Any, dict[str, Any]]] = {
    "items": ITEMS,
    "achievements": {
        1: {"id": 1, "name": "Centaur Slayer"},
        2: {"id": 2, "name": "Hobbyist"},
    },
    "guild/permissions": {
        "StartingRole": {"id": "StartingRole", "description": "Set starting role"},
        "Admin": {"id": "Admin", "description": "Administrator"},
    },
    "characters": {
        "Zojja": {"name": "Zojja", "profession": "Elementalist"},
    },
}

Handler = Callable[[str, dict[str, Any], dict[str, str]], TransportResponse]


def json_response(
    data: Any,
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
) -> TransportResponse:
    """Build a :class:`TransportResponse` with a JSON body."""
    return TransportResponse(
        status_code=status_code,
        headers={k.lower(): v for k, v in (headers or {}).items()},
        body=json.dumps(data),
    )


def _parse_id(raw: Any) -> Any:
    text = str(raw)
    return int(text) if text.isdigit() else text


def api_handler(resources: dict[str, dict[Any, dict[str, Any]]]) -> Handler:
    """Simulate the API: ``id``/``ids`` lookups, full listings, and paging.

    Mirrors upstream behaviour: 206 when only some ids exist, 404 when none
    do, and ``X-Page-*`` / ``X-Result-*`` headers on listings.
    """

    def handler(url: str, params: dict[str, Any], headers: dict[str, str]) -> TransportResponse:
        path = url.split("/v2/", 1)[-1]
        objects = resources.get(path)
        if objects is None:
            return json_response({"text": "not found"}, 404)

        if "id" in params:
            obj = objects.get(_parse_id(params["id"]))
            if obj is None:
                return json_response({"text": "no such id"}, 404)
            return json_response(obj)

        if "ids" in params:
            wanted = [_parse_id(i) for i in str(params["ids"]).split(",")]
            found = [objects[i] for i in wanted if i in objects]
            if not found:
                return json_response({"text": "all ids provided are invalid"}, 404)
            return json_response(found, 200 if len(found) == len(wanted) else 206)

        if "page" in params or "page_size" in params:
            page = int(params.get("page", 0))
            size = int(params.get("page_size", 50))
            values = list(objects.values())
            chunk = values[page * size:(page + 1) * size]
            total_pages = max(1, -(-len(values) // size))
            return json_response(
                chunk,
                206,
                {
                    "X-Page-Size": str(size),
                    "X-Page-Total": str(total_pages),
                    "X-Result-Count": str(len(chunk)),
                    "X-Result-Total": str(len(values)),
                },
            )

        return json_response(list(objects), 200, {"X-Result-Total": str(len(objects))})

    return handler


class FakeTransport:
    """Transport double that records calls and answers through a handler.

    Set ``error`` to make every call raise instead.
    """

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.calls: list[dict[str, Any]] = []
        self.error: Optional[Exception] = None

    async def get(
        self,
        url: str,
        params: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> TransportResponse:
        self.calls.append({"url": url, "params": dict(params), "headers": dict(headers or {})})
        if self.error is not None:
            raise self.error
        return self.handler(url, params, headers or {})


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager caches sys.stdout/sys.stderr at creation; CliRunner swaps
    those streams, so a stale manager would write to closed files.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Fake API wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for a :class:`FakeTransport`; defaults to the simulated API."""

    def _make(handler: Optional[Handler] = None) -> FakeTransport:
        return FakeTransport(handler or api_handler(RESOURCES))

    return _make


@pytest.fixture
def fake_api(make_transport) -> FakeTransport:
    return make_transport()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(lang="en", cache_timeout=300, max_cache_objects=100)


@pytest.fixture
def cache(config: ClientConfig) -> MemoryCache:
    return MemoryCache(max_entries=config.max_cache_objects, ttl=config.cache_timeout)


@pytest.fixture
def orchestrator(config: ClientConfig, cache: MemoryCache, fake_api: FakeTransport) -> RequestOrchestrator:
    return RequestOrchestrator(config, cache, fake_api)


@pytest.fixture
def client(config: ClientConfig, cache: MemoryCache, fake_api: FakeTransport) -> GW2Client:
    return GW2Client(config, cache=cache, transport=fake_api)


@pytest.fixture
def json_body() -> Callable[..., TransportResponse]:
    """Expose :func:`json_response` to test modules."""
    return json_response


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at tmp_path and clear every GW2API_* variable."""
    monkeypatch.setattr("gw2api.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in [
        "GW2API_LANG",
        "GW2API_CACHE_TIMEOUT",
        "GW2API_MAX_CACHE_OBJECTS",
        "GW2API_BASE_URL",
        "GW2API_TIMEOUT",
        "GW2API_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
