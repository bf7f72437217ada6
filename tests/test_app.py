"""CLI tests: ``gw2api get`` against the simulated API via CliRunner."""

from __future__ import annotations

import json

import pytest

from gw2api import __version__
from gw2api.app import app
from gw2api.client import GW2Client
from gw2api.exceptions import TransportError

from conftest import ITEMS


@pytest.fixture
def wired(isolated_config, fake_api, monkeypatch: pytest.MonkeyPatch):
    """Route every client the CLI builds through the fake API."""
    monkeypatch.setattr(
        "gw2api.app._make_client",
        lambda config: GW2Client(config, transport=fake_api),
    )
    return fake_api


class TestGetCommand:
    def test_details_in_requested_order(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "get", "items", "2016", "15"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == [ITEMS[2016], ITEMS[15]]

    def test_single_id_returns_object(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "get", "items", "12452"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == ITEMS[12452]

    def test_string_ids(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "get", "guild/permissions", "Admin"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["id"] == "Admin"

    def test_listing(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "get", "achievements"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == [1, 2]

    def test_paged_listing_with_meta(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(
            app, ["--json", "get", "items", "--page", "0", "--page-size", "2", "--meta"]
        )
        assert result.exit_code == 0
        envelope = json.loads(result.stdout)
        assert envelope["data"] == [ITEMS[15], ITEMS[2016]]
        assert envelope["page_total"] == 2
        assert envelope["result_total"] == 3

    def test_plain_output(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--plain", "get", "items", "15"])
        assert result.exit_code == 0
        assert "id\t15" in result.stdout.splitlines()

    def test_lang_option(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--lang", "de", "--json", "get", "items", "15"])
        assert result.exit_code == 0
        assert wired.calls[0]["params"]["lang"] == "de"

    def test_lang_from_environment(self, cli_runner, wired, monkeypatch) -> None:
        monkeypatch.setenv("GW2API_LANG", "fr")
        cli_runner.invoke(app, ["--json", "get", "items", "15"])
        assert wired.calls[0]["params"]["lang"] == "fr"

    def test_api_key_option(self, cli_runner, wired) -> None:
        cli_runner.invoke(app, ["--api-key", "SECRET", "--json", "get", "achievements"])
        assert wired.calls[0]["headers"] == {"Authorization": "Bearer SECRET"}

    def test_api_key_from_environment(self, cli_runner, wired, monkeypatch) -> None:
        monkeypatch.setenv("GW2API_KEY", "ENVKEY")
        cli_runner.invoke(app, ["--json", "get", "achievements"])
        assert wired.calls[0]["headers"] == {"Authorization": "Bearer ENVKEY"}


class TestErrors:
    def test_meta_with_ids_is_usage_error(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "get", "items", "15", "--meta"])
        assert result.exit_code == 2
        assert "--meta cannot be combined with ids" in result.output
        assert wired.calls == []

    def test_paging_with_ids_is_usage_error(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "get", "items", "15", "--page", "1"])
        assert result.exit_code == 2
        assert "cannot be combined with ids" in result.output
        assert wired.calls == []

    def test_unknown_path_exits_not_found(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "get", "nonexistent"])
        assert result.exit_code == 4
        assert "HTTP 404" in result.output

    def test_missing_ids_prints_partial_and_warns(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "get", "items", "15", "99999"])
        assert result.exit_code == 4
        assert '"Abomination Hammer"' in result.output
        assert "Ids not returned by the API: 99999" in result.output
        assert "1 of 2 requested objects returned" in result.output

    def test_missing_ids_summary_suppressed_by_quiet(self, cli_runner, wired) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "--quiet", "get", "items", "15", "99999"])
        assert result.exit_code == 4
        assert "Ids not returned by the API: 99999" in result.output
        assert "requested objects returned" not in result.output

    def test_transport_error_exits_connection_error(self, cli_runner, wired) -> None:
        wired.error = TransportError("network unreachable")
        result = cli_runner.invoke(app, ["--plain", "--no-color", "get", "build"])
        assert result.exit_code == 6
        assert "network unreachable" in result.output

    def test_invalid_config_exits_generic_failure(self, cli_runner, wired, monkeypatch) -> None:
        monkeypatch.setenv("GW2API_CACHE_TIMEOUT", "-5")
        result = cli_runner.invoke(app, ["--plain", "--no-color", "get", "build"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"gw2api {__version__}" in result.stdout

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "get" in result.output
