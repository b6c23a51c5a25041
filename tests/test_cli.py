"""Tests for the specquery CLI (specquery.app)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specquery import __version__
from specquery.app import app
from specquery.config import load_global_config
from specquery.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_LOAD_ERROR,
    EXIT_SPEC_NOT_LOADED,
)
from specquery.service import SpecService


@pytest.fixture(autouse=True)
def _env(isolated_config: Path) -> None:
    """Every CLI test runs against an empty config directory."""
    yield
    # Drop the stderr handler bound to the runner's closed stream.
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


def _json(output: str) -> Any:
    return json.loads(output)


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"specquery {__version__}"

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "serve" in result.output
        assert "call" in result.output

    def test_tools_json(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--json", "tools"])
        assert result.exit_code == 0
        rows = _json(result.stdout)
        assert len(rows) == 12
        assert rows[0]["Tool"] == "load_spec"

    def test_tools_plain(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--plain", "tools"])
        lines = result.stdout.splitlines()
        assert lines[0] == "Tool\tDescription"
        assert lines[1].startswith("load_spec\t")


class TestCall:
    def test_list_endpoints(self, cli_runner, petstore_30_path: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--json", "call", "list_endpoints", "--spec", str(petstore_30_path), "--arg", "tag=users"],
        )
        assert result.exit_code == 0, result.output
        envelope = _json(result.stdout)
        assert envelope["success"] is True
        assert envelope["data"]["totalCount"] == 1
        assert envelope["data"]["endpoints"][0]["path"] == "/users"

    def test_input_json_and_typed_args(self, cli_runner, petstore_30_path: Path) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--json",
                "call",
                "list_endpoints",
                "-s",
                str(petstore_30_path),
                "-i",
                '{"tag": "pets", "limit": 10}',
                "-a",
                "deprecated=false",
                "-a",
                "limit=1",
            ],
        )
        data = _json(result.stdout)["data"]
        assert data["totalCount"] == 3
        assert len(data["endpoints"]) == 1

    def test_load_spec_merges_source(self, cli_runner, swagger_20_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "call", "load_spec", "--spec", str(swagger_20_path)])
        assert result.exit_code == 0, result.output
        assert _json(result.stdout)["data"]["openApiVersion"] == "2.0"

    def test_not_found_exit_code(self, cli_runner, petstore_30_path: Path) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--json",
                "call",
                "get_endpoint_details",
                "--spec",
                str(petstore_30_path),
                "--arg",
                "path=/nope",
                "--arg",
                "method=get",
            ],
        )
        assert result.exit_code == EXIT_NOT_FOUND
        assert _json(result.stdout)["code"] == "ENDPOINT_NOT_FOUND"

    def test_spec_not_loaded_exit_code(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--json", "call", "get_servers"])
        assert result.exit_code == EXIT_SPEC_NOT_LOADED

    def test_bad_spec_exit_code(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "call", "get_servers", "--spec", str(tmp_path / "missing.yaml")]
        )
        assert result.exit_code == EXIT_SPEC_LOAD_ERROR
        assert _json(result.stdout)["code"] == "SPEC_LOAD_ERROR"

    def test_invalid_input_json(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["call", "list_endpoints", "--input", "{nope"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_input_must_be_object(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["call", "list_endpoints", "--input", "[1]"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_malformed_arg(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["call", "list_endpoints", "--arg", "tag"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_project_config_content_type(self, cli_runner, petstore_30_path: Path) -> None:
        Path("specquery.json").write_text(json.dumps({"default_content_type": "application/xml"}))
        result = cli_runner.invoke(
            app,
            [
                "--json",
                "call",
                "get_request_schema",
                "-s",
                str(petstore_30_path),
                "-a",
                "path=/pets",
                "-a",
                "method=post",
            ],
        )
        assert _json(result.stdout)["data"]["contentType"] == "application/xml"


class TestServe:
    def test_serve_preloads_spec(self, cli_runner, petstore_30_path: Path) -> None:
        with patch("specquery.server.serve") as mock_serve:
            result = cli_runner.invoke(app, ["serve", "--spec", str(petstore_30_path)])

        assert result.exit_code == 0, result.output
        [service] = mock_serve.call_args.args
        assert isinstance(service, SpecService)
        assert service.spec.info.title == "Petstore"

    def test_serve_without_spec(self, cli_runner) -> None:
        with patch("specquery.server.serve") as mock_serve:
            result = cli_runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        assert mock_serve.call_args.args[0].is_loaded is False

    def test_serve_bad_spec(self, cli_runner, tmp_path: Path) -> None:
        with patch("specquery.server.serve") as mock_serve:
            result = cli_runner.invoke(app, ["serve", "--spec", str(tmp_path / "nope.json")])

        assert result.exit_code == EXIT_SPEC_LOAD_ERROR
        mock_serve.assert_not_called()


class TestConfigCommands:
    def test_set_and_show(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["config", "set", "cache.ttl_seconds", "600"])
        assert result.exit_code == 0, result.output
        assert load_global_config().cache.ttl_seconds == 600

        shown = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert _json(shown.stdout)["cache"]["ttl_seconds"] == 600

    def test_set_bool(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["config", "set", "validate_spec", "false"])
        assert result.exit_code == 0
        assert load_global_config().validate_spec is False

    def test_set_unknown_key(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["config", "set", "nope", "1"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_set_invalid_value(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["config", "set", "fetch_timeout", "never"])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert load_global_config().fetch_timeout == 30.0

    def test_reset(self, cli_runner) -> None:
        cli_runner.invoke(app, ["config", "set", "log_level", "DEBUG"])
        result = cli_runner.invoke(app, ["config", "reset", "--yes"])
        assert result.exit_code == 0
        assert load_global_config().log_level == "WARNING"

    def test_reset_declined(self, cli_runner) -> None:
        cli_runner.invoke(app, ["config", "set", "log_level", "DEBUG"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_global_config().log_level == "DEBUG"
