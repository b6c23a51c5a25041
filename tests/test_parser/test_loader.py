"""Tests for specquery.parser.loader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from specquery.exceptions import SpecLoadError
from specquery.parser.loader import (
    LoadResult,
    _load_from_file,
    _load_from_url,
    _parse_content,
    load_spec_document,
    validate_spec_version,
)

MINIMAL_30 = {
    "openapi": "3.0.3",
    "info": {"title": "Minimal", "version": "1.0.0"},
    "paths": {},
}


def _response(status: int, text: str, content_type: str, url: str) -> httpx.Response:
    return httpx.Response(
        status,
        text=text,
        headers={"content-type": content_type},
        request=httpx.Request("GET", url),
    )


# ---------------------------------------------------------------------------
# load_spec_document
# ---------------------------------------------------------------------------


class TestLoadSpecDocument:
    def test_loads_file_and_resolves_refs(self, petstore_30_path: Path) -> None:
        result = load_spec_document(file_path=str(petstore_30_path))

        assert isinstance(result, LoadResult)
        assert result.source == str(petstore_30_path)
        schema = result.document["paths"]["/pets"]["post"]["requestBody"]["content"][
            "application/json"
        ]["schema"]
        assert "$ref" not in schema
        assert schema["required"] == ["name"]

    def test_loads_swagger_file(self, swagger_20_path: Path) -> None:
        result = load_spec_document(file_path=str(swagger_20_path))
        assert result.document["swagger"] == "2.0"

    def test_requires_a_source(self) -> None:
        with pytest.raises(SpecLoadError, match="Either url or file_path"):
            load_spec_document()

    def test_url_wins_over_file(self, petstore_30_path: Path) -> None:
        url = "https://example.com/openapi.json"
        response = _response(200, json.dumps(MINIMAL_30), "application/json", url)
        with patch("specquery.parser.loader.httpx.get", return_value=response) as mock_get:
            result = load_spec_document(url=url, file_path=str(petstore_30_path))

        mock_get.assert_called_once()
        assert result.source == url
        assert result.document["info"]["title"] == "Minimal"

    def test_structural_validation_failure(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "broken.json"
        spec_file.write_text(json.dumps({"openapi": "3.0.3", "info": {"title": "x"}, "paths": {}}))

        with pytest.raises(SpecLoadError, match="Invalid OpenAPI spec") as exc_info:
            load_spec_document(file_path=str(spec_file))
        assert exc_info.value.context == {"source": str(spec_file)}

    def test_validation_can_be_skipped(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "loose.json"
        spec_file.write_text(json.dumps({"openapi": "3.0.3", "info": {"title": "x"}, "paths": {}}))

        result = load_spec_document(file_path=str(spec_file), validate=False)

        assert result.document["info"] == {"title": "x"}

    def test_unresolvable_ref_carries_source(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "dangling.json"
        document = {
            **MINIMAL_30,
            "paths": {
                "/pets": {
                    "get": {
                        "responses": {
                            "200": {
                                "description": "ok",
                                "content": {
                                    "application/json": {
                                        "schema": {"$ref": "#/components/schemas/Missing"}
                                    }
                                },
                            }
                        }
                    }
                }
            },
        }
        spec_file.write_text(json.dumps(document))

        with pytest.raises(SpecLoadError, match=r"Cannot resolve \$ref") as exc_info:
            load_spec_document(file_path=str(spec_file))

        assert exc_info.value.context == {
            "ref": "#/components/schemas/Missing",
            "source": str(spec_file),
        }
        assert isinstance(exc_info.value.__cause__, SpecLoadError)

    def test_unsupported_version(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "old.json"
        spec_file.write_text(json.dumps({"swagger": "1.2", "info": {}}))

        with pytest.raises(SpecLoadError, match="Unsupported Swagger version: 1.2"):
            load_spec_document(file_path=str(spec_file))


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestLoadFromFile:
    def test_yaml_file(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "spec.yaml"
        spec_file.write_text(
            "openapi: 3.0.3\ninfo:\n  title: YAML API\n  version: '2.0'\npaths: {}\n"
        )

        raw = _load_from_file(str(spec_file))

        assert raw["info"]["title"] == "YAML API"

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = str(tmp_path / "nope.json")
        with pytest.raises(SpecLoadError, match="Spec file not found") as exc_info:
            _load_from_file(missing)
        assert exc_info.value.context == {"file_path": missing}

    def test_directory_traversal_rejected(self) -> None:
        with pytest.raises(SpecLoadError, match="Directory traversal not allowed"):
            _load_from_file("../secrets/openapi.json")

    def test_empty_file(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "empty.yaml"
        spec_file.write_text("   \n")
        with pytest.raises(SpecLoadError, match="Spec file is empty"):
            _load_from_file(str(spec_file))

    def test_invalid_json_with_json_extension(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "bad.json"
        spec_file.write_text("{not json")
        with pytest.raises(SpecLoadError, match="Invalid JSON"):
            _load_from_file(str(spec_file))


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    def test_json_response(self) -> None:
        url = "https://example.com/spec.json"
        response = _response(200, json.dumps(MINIMAL_30), "application/json", url)
        with patch("specquery.parser.loader.httpx.get", return_value=response):
            raw = _load_from_url(url)
        assert raw["openapi"] == "3.0.3"

    def test_yaml_response(self) -> None:
        url = "https://example.com/spec.yaml"
        body = "openapi: 3.0.3\ninfo:\n  title: Remote\n  version: '1'\npaths: {}\n"
        response = _response(200, body, "application/x-yaml", url)
        with patch("specquery.parser.loader.httpx.get", return_value=response):
            raw = _load_from_url(url)
        assert raw["info"]["title"] == "Remote"

    def test_http_error_status(self) -> None:
        url = "https://example.com/missing.json"
        response = _response(404, "not found", "text/plain", url)
        with patch("specquery.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecLoadError, match="HTTP 404") as exc_info:
                _load_from_url(url)
        assert exc_info.value.context == {"url": url, "status": 404}

    def test_timeout(self) -> None:
        url = "https://example.com/slow.json"
        with patch(
            "specquery.parser.loader.httpx.get",
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            with pytest.raises(SpecLoadError, match="Timed out"):
                _load_from_url(url, timeout=1.0)

    def test_connection_error(self) -> None:
        url = "https://unreachable.example.com/spec.json"
        with patch(
            "specquery.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("refused"),
        ):
            with pytest.raises(SpecLoadError, match="Failed to fetch spec"):
                _load_from_url(url)

    def test_rejects_non_http_scheme(self) -> None:
        with pytest.raises(SpecLoadError, match="Invalid URL protocol: ftp"):
            load_spec_document(url="ftp://example.com/spec.json")


# ---------------------------------------------------------------------------
# Parsing and version checks
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_json_first(self) -> None:
        assert _parse_content('{"a": 1}') == {"a": 1}

    def test_yaml_fallback(self) -> None:
        assert _parse_content("a: 1\nb: [x, y]\n") == {"a": 1, "b": ["x", "y"]}

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(SpecLoadError, match="must be a JSON/YAML object"):
            _parse_content("[1, 2, 3]")

    def test_unparseable(self) -> None:
        with pytest.raises(SpecLoadError, match="Failed to parse spec as JSON or YAML"):
            _parse_content("key: [unclosed")


class TestValidateSpecVersion:
    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
    def test_openapi_3(self, version: str) -> None:
        assert validate_spec_version({"openapi": version}) == version

    def test_swagger_2(self) -> None:
        assert validate_spec_version({"swagger": "2.0"}) == "2.0"

    def test_missing_field(self) -> None:
        with pytest.raises(SpecLoadError, match="Missing 'openapi' or 'swagger'"):
            validate_spec_version({"info": {}})

    def test_unsupported_openapi(self) -> None:
        spec: dict[str, Any] = {"openapi": "4.0.0"}
        with pytest.raises(SpecLoadError, match="Unsupported OpenAPI version: 4.0.0"):
            validate_spec_version(spec, source="x.json")
