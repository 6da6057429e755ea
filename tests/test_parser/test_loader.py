"""Tests for apinav.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from apinav.exceptions import ConnectionError_, SpecParseError
from apinav.models import Dialect
from apinav.parser.loader import detect_dialect, load_spec

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _response(status_code: int, url: str, **kwargs) -> httpx.Response:
    return httpx.Response(status_code=status_code, request=httpx.Request("GET", url), **kwargs)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestLoadFromFile:
    """Local JSON and YAML files."""

    def test_loads_json_fixture(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "petstore_3.0.json"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Petstore API"

    def test_loads_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "spec.yaml"
        yaml_file.write_text(
            textwrap.dedent("""\
                swagger: "2.0"
                info:
                  title: YAML Test
                  version: "1.0.0"
                paths: {}
            """),
            encoding="utf-8",
        )

        result = load_spec(str(yaml_file))

        assert result["swagger"] == "2.0"
        assert result["info"]["title"] == "YAML Test"

    def test_yaml_content_without_hint(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "spec.txt"
        spec_file.write_text("openapi: 3.1.0\ninfo: {title: T, version: '1'}\npaths: {}\n")
        assert load_spec(str(spec_file))["openapi"] == "3.1.0"

    def test_json_suffix_rejects_yaml(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "spec.json"
        spec_file.write_text("openapi: 3.1.0\n")
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_spec(str(spec_file))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="Spec file not found"):
            load_spec(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "empty.yaml"
        spec_file.write_text("  \n")
        with pytest.raises(SpecParseError, match="empty"):
            load_spec(str(spec_file))

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "list.yaml"
        spec_file.write_text("- a\n- b\n")
        with pytest.raises(SpecParseError, match=r"JSON/YAML object \(got list\)"):
            load_spec(str(spec_file))

    def test_undecodable_content(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "broken.txt"
        spec_file.write_text("{unclosed: [\n")
        with pytest.raises(SpecParseError, match="Failed to parse spec as JSON or YAML"):
            load_spec(str(spec_file))


# ---------------------------------------------------------------------------
# stdin
# ---------------------------------------------------------------------------


class TestLoadFromStdin:
    """``-`` reads standard input."""

    def test_json_from_stdin(self) -> None:
        spec_json = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin test", "version": "1.0"}})
        with patch("apinav.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(spec_json)
            result = load_spec("-")
        assert result["info"]["title"] == "stdin test"

    def test_yaml_from_stdin(self) -> None:
        with patch("apinav.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("swagger: '2.0'\ninfo: {title: piped, version: '1'}\n")
            result = load_spec("-")
        assert result["info"]["title"] == "piped"

    def test_empty_stdin(self) -> None:
        with patch("apinav.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("")
            with pytest.raises(SpecParseError, match="empty"):
                load_spec("-")


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    """http(s) sources fetched with httpx."""

    URL = "https://example.com/openapi.json"

    def test_loads_json(self) -> None:
        spec = {"openapi": "3.0.3", "info": {"title": "URL test", "version": "1.0"}}
        mock_response = _response(200, self.URL, json=spec)

        with patch("apinav.parser.loader.httpx.get", return_value=mock_response) as mock_get:
            result = load_spec(self.URL)

        assert result == spec
        _, kwargs = mock_get.call_args
        assert kwargs["follow_redirects"] is True
        assert kwargs["headers"]["User-Agent"].startswith("apinav/")

    def test_loads_yaml_by_content_type(self) -> None:
        mock_response = _response(
            200,
            self.URL,
            text="swagger: '2.0'\ninfo: {title: Remote, version: '1'}\n",
            headers={"Content-Type": "application/x-yaml"},
        )

        with patch("apinav.parser.loader.httpx.get", return_value=mock_response):
            result = load_spec(self.URL)

        assert result["info"]["title"] == "Remote"

    def test_http_error_status(self) -> None:
        mock_response = _response(404, self.URL, text="not found")

        with patch("apinav.parser.loader.httpx.get", return_value=mock_response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                load_spec(self.URL)

    def test_network_failure(self) -> None:
        with patch(
            "apinav.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(ConnectionError_, match="Failed to fetch spec"):
                load_spec(self.URL)

    def test_network_failure_exit_code(self) -> None:
        with patch(
            "apinav.parser.loader.httpx.get",
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            with pytest.raises(ConnectionError_) as exc_info:
                load_spec(self.URL)
        assert exc_info.value.exit_code == 6


# ---------------------------------------------------------------------------
# detect_dialect
# ---------------------------------------------------------------------------


class TestDetectDialect:
    """Version marker detection."""

    @pytest.mark.parametrize(
        ("document", "expected"),
        [
            ({"swagger": "2.0"}, (Dialect.SWAGGER2, "2.0")),
            ({"openapi": "3.0.3"}, (Dialect.OPENAPI3, "3.0.3")),
            ({"openapi": "3.1.0"}, (Dialect.OPENAPI3, "3.1.0")),
            ({"swagger": "2.0", "openapi": "3.0.0"}, (Dialect.SWAGGER2, "2.0")),
        ],
    )
    def test_supported(self, document: dict, expected: tuple[Dialect, str]) -> None:
        assert detect_dialect(document) == expected

    def test_unsupported_swagger(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported Swagger version: 1.2"):
            detect_dialect({"swagger": "1.2"})

    def test_unsupported_openapi(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version: 4.0.0"):
            detect_dialect({"openapi": "4.0.0"})

    def test_no_marker(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi' or 'swagger'"):
            detect_dialect({"info": {}})
