"""Typer application and CLI entry point for gw2api.

The ``gw2api`` console script exposes the client for quick lookups::

    gw2api get items 15 2016          # detail objects, in the given order
    gw2api get achievements           # the whole listing
    gw2api get items --page 0 --page-size 50 --meta
    gw2api --api-key $KEY get account/bank

Data goes to stdout, diagnostics to stderr (see :mod:`gw2api.output`).
A :class:`~gw2api.exceptions.GW2APIError` ends the process with the
error's ``exit_code``.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Optional

import typer

from gw2api import __version__
from gw2api.client import GW2Client
from gw2api.config import resolve_api_key, resolve_config
from gw2api.exceptions import GW2APIError, InvalidArgumentError, MissingIdsError
from gw2api.models import ClientConfig
from gw2api.output import (
    OutputFormat,
    OutputManager,
    debug,
    error,
    format_response,
    info,
    set_output,
    warning,
)


app = typer.Typer(
    name="gw2api",
    help="Query the Guild Wars 2 API with response caching.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"gw2api {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Response language (en, de, es, fr, zh)."),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="API key for account resources (default: $GW2API_KEY)."
    ),
) -> None:
    """Root callback: installs the output manager and stores shared options in ``ctx.obj``."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(name)s] %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["lang"] = lang
    ctx.obj["api_key"] = api_key


def _parse_id(raw: str) -> Any:
    """Numeric ids become ints; anything else (GUIDs, names) stays a string."""
    try:
        return int(raw)
    except ValueError:
        return raw


def _make_client(config: ClientConfig) -> GW2Client:
    return GW2Client(config)


async def _fetch(
    config: ClientConfig,
    path: str,
    ids: list[Any],
    page: Optional[int],
    page_size: Optional[int],
    api_key: Optional[str],
    meta: bool,
) -> Any:
    async with _make_client(config) as client:
        if meta:
            envelope = await client.get_page(path, page, page_size, api_key=api_key)
            return envelope.model_dump()
        target = None
        if ids:
            target = ids[0] if len(ids) == 1 else ids
        return await client.fetch(path, target, page=page, page_size=page_size, api_key=api_key)


@app.command("get")
def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Resource path, e.g. items or achievements/groups."),
    ids: Optional[list[str]] = typer.Argument(None, help="Ids to fetch details for."),
    page: Optional[int] = typer.Option(None, "--page", help="Page number (0-based)."),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Entries per page."),
    meta: bool = typer.Option(False, "--meta", help="Include pagination metadata."),
) -> None:
    """Fetch a resource listing, or details for the given ids."""
    obj = ctx.obj or {}
    parsed = [_parse_id(raw) for raw in ids or []]

    try:
        if meta and parsed:
            raise InvalidArgumentError("--meta cannot be combined with ids")
        config = resolve_config(lang=obj.get("lang"))
        api_key = resolve_api_key(obj.get("api_key"))
        debug(f"GET {config.base_url}/{path} lang={config.lang}")
        result = asyncio.run(_fetch(config, path, parsed, page, page_size, api_key, meta))
    except MissingIdsError as exc:
        format_response(exc.partial)
        warning(str(exc))
        info(f"{len(exc.partial)} of {len(parsed)} requested objects returned")
        raise typer.Exit(code=exc.exit_code) from None
    except GW2APIError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(result)


def main() -> None:
    """Entry point for the ``gw2api`` console script."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
