"""gw2api -- async client for the Guild Wars 2 public REST API (v2).

This package turns per-resource method calls (``get_items``,
``list_achievements``, ``get_account_bank`` ...) into HTTP GET requests
against ``api.guildwars2.com/v2``, decodes the JSON responses, and memoises
them in a bounded in-process cache keyed by resource path, query
parameters, language, and API key.

Typical usage::

    from gw2api import GW2Client

    async with GW2Client(lang="en") as api:
        items = await api.get_items([15, 2016])

Modules:
    client: Public client, request orchestration, request builder, transport.
    cache: Cache key strategy and the in-memory TTL/LRU store.
    models: Pydantic models and the identifier union shared across the package.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes used by the CLI.
    output: stdout/stderr formatting system with Rich support.
    app: Typer command-line front end.
"""

__version__ = "0.1.0"

from gw2api.client import GW2Client  # noqa: E402

__all__ = ["GW2Client", "__version__"]
