"""Load specification documents from a URL, local file, or stdin.

This module is the thin I/O layer in front of the parser.  It turns a
*source* string into a raw document dictionary and never interprets the
document beyond checking that it is a mapping.  JSON and YAML are both
accepted; the file extension or ``Content-Type`` header is used as a hint
and the content itself decides when no hint is available.

The two public functions are:

* :func:`load_spec` -- Read and decode a document from any supported source.
* :func:`detect_dialect` -- Decide whether a decoded document is Swagger 2.0
  or OpenAPI 3.x from its version marker.

Fetching is unauthenticated.  Network failures surface as
:class:`~apinav.exceptions.ConnectionError_`; everything else (HTTP error
statuses, unreadable files, undecodable content) as
:class:`~apinav.exceptions.SpecParseError`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from apinav import __version__
from apinav.exceptions import ConnectionError_, SpecParseError
from apinav.models import Dialect

logger = logging.getLogger(__name__)

_FETCH_TIMEOUT = 30.0

# File suffix / content-type fragment -> decoder hint
_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}
_CONTENT_TYPE_HINTS = (("json", "json"), ("yaml", "yaml"), ("yml", "yaml"))


def load_spec(source: str) -> dict[str, Any]:
    """Load a specification document from a URL, file path, or stdin (``-``).

    Args:
        source: An ``http://``/``https://`` URL, a file path, or ``-``.

    Returns:
        The decoded document.

    Raises:
        ConnectionError_: If a URL cannot be reached.
        SpecParseError: If the source cannot be read or decoded, or does not
            hold a mapping.

    Example::

        raw = load_spec("https://petstore.swagger.io/v2/swagger.json")
        dialect, version = detect_dialect(raw)
    """
    if source == "-":
        text, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch_url(source)
    else:
        text, hint = _read_file(source)

    if not text.strip():
        raise SpecParseError(f"Specification source is empty: {source}")

    return _decode(text, hint)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch_url(url: str) -> tuple[str, str]:
    """GET *url* and return its body together with a decoder hint."""
    logger.debug("Fetching specification from %s", url)
    try:
        response = httpx.get(
            url,
            timeout=_FETCH_TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": f"apinav/{__version__}"},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ConnectionError_(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "").lower()
    hint = next((h for fragment, h in _CONTENT_TYPE_HINTS if fragment in content_type), "")
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a local file and return its text together with a decoder hint."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    return text, _SUFFIX_HINTS.get(file_path.suffix.lower(), "")


def _decode(text: str, hint: str = "") -> dict[str, Any]:
    """Decode *text* as JSON or YAML.

    JSON is tried first unless the hint says YAML, since every JSON
    document is also YAML but the JSON decoder is stricter and faster.  A
    ``json`` hint disables the YAML fallback.

    Raises:
        SpecParseError: If neither decoder accepts *text*, or the result is
            not a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(text))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError(
        "Failed to parse spec as JSON or YAML\n  " + "\n  ".join(errors)
    )


def _require_mapping(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return document


def detect_dialect(spec: dict[str, Any]) -> tuple[Dialect, str]:
    """Detect the dialect of *spec* and return it with its version string.

    A ``swagger`` key marks Swagger 2.0, otherwise an ``openapi`` key marks
    OpenAPI 3.x.  The version must match the dialect (``2.*`` or ``3.*``).

    Args:
        spec: The decoded document.

    Returns:
        A ``(dialect, version)`` tuple, e.g. ``(Dialect.OPENAPI3, "3.0.3")``.

    Raises:
        SpecParseError: If neither marker is present or the version does not
            belong to a supported dialect.
    """
    if "swagger" in spec:
        version = str(spec["swagger"])
        if version.startswith("2."):
            return Dialect.SWAGGER2, version
        raise SpecParseError(
            f"Unsupported Swagger version: {version}. Only Swagger 2.0 is supported."
        )

    if "openapi" in spec:
        version = str(spec["openapi"])
        if version.startswith("3."):
            return Dialect.OPENAPI3, version
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )

    raise SpecParseError(
        "Missing 'openapi' or 'swagger' field. Is this an OpenAPI or Swagger document?"
    )
