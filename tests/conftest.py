"""Shared test fixtures for specquery.

Provides reusable fixtures for loading spec fixtures, building loaded
services, creating isolated config environments, managing output state,
and running CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specquery.config import ENV_OVERRIDES
from specquery.models import ParsedSpec
from specquery.output import OutputFormat, OutputManager, reset_output, set_output
from specquery.parser.normalizer import normalize
from specquery.parser.resolver import resolve_refs
from specquery.service import SpecService


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE_30 = FIXTURES_DIR / "petstore_3.0.json"
SWAGGER_20 = FIXTURES_DIR / "swagger_2.0.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. CliRunner swaps those streams per invocation, so a
    manager left over from one test would write to a closed file.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load raw petstore 3.0 spec dict."""
    with open(PETSTORE_30) as f:
        return json.load(f)


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    """Load raw Swagger 2.0 petstore spec dict."""
    with open(SWAGGER_20) as f:
        return json.load(f)


@pytest.fixture
def petstore_30_path() -> Path:
    return PETSTORE_30


@pytest.fixture
def swagger_20_path() -> Path:
    return SWAGGER_20


# ---------------------------------------------------------------------------
# Normalized spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_spec(petstore_30_raw: dict[str, Any]) -> ParsedSpec:
    return normalize(resolve_refs(petstore_30_raw), str(PETSTORE_30))


@pytest.fixture
def swagger_20_spec(swagger_20_raw: dict[str, Any]) -> ParsedSpec:
    return normalize(resolve_refs(swagger_20_raw), str(SWAGGER_20))


@pytest.fixture
def service() -> SpecService:
    """A service with the petstore 3.0 fixture loaded from disk."""
    svc = SpecService()
    svc.load(file_path=str(PETSTORE_30))
    return svc


@pytest.fixture
def swagger_service() -> SpecService:
    """A service with the Swagger 2.0 fixture loaded from disk."""
    svc = SpecService()
    svc.load(file_path=str(SWAGGER_20))
    return svc


# ---------------------------------------------------------------------------
# Isolated config environment
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at tmp_path and clear SPECQUERY_* variables.

    Also changes the working directory so a stray ``specquery.json`` in the
    repository cannot leak into the resolved config.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr("specquery.config._is_xdg_platform", lambda: True)
    for env_var in ENV_OVERRIDES:
        monkeypatch.delenv(env_var, raising=False)

    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    return output


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
