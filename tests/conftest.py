"""Shared test fixtures for apinav.

Provides reusable fixtures for loading spec fixtures, building parsed specs,
and keeping global output and logging state isolated between tests.  These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from apinav.models import ParsedSpec
from apinav.output import reset_output
from apinav.parser.extractor import extract_spec


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    """Undo the handler and level the CLI callback installs on ``apinav``."""
    logger = logging.getLogger("apinav")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def load_fixture(name: str) -> dict[str, Any]:
    """Load a JSON fixture by file name."""
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load raw petstore OpenAPI 3.0 spec dict."""
    return load_fixture("petstore_3.0.json")


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    """Load raw inventory Swagger 2.0 spec dict."""
    return load_fixture("swagger_2.0.json")


@pytest.fixture
def minimal_30_raw() -> dict[str, Any]:
    """A one-operation OpenAPI 3.0 document."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Users", "version": "1.0"},
        "paths": {
            "/users/{id}": {
                "get": {
                    "tags": ["Users"],
                    "operationId": "getUser",
                    "parameters": [
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": {"200": {"description": "OK"}},
                }
            }
        },
    }


@pytest.fixture
def collision_raw() -> dict[str, Any]:
    """Three operations whose ids slugify to the same navigable path."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Collide", "version": "1.0"},
        "paths": {
            "/a": {"get": {"tags": ["things"], "operationId": "listThings", "responses": {}}},
            "/b": {"get": {"tags": ["things"], "operationId": "ListThings", "responses": {}}},
            "/c": {"get": {"tags": ["things"], "operationId": "LISTTHINGS", "responses": {}}},
        },
    }


# ---------------------------------------------------------------------------
# Parsed spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_parsed(petstore_30_raw: dict[str, Any]) -> ParsedSpec:
    """Fully parsed petstore OpenAPI 3.0 spec."""
    return extract_spec(copy.deepcopy(petstore_30_raw))


@pytest.fixture
def swagger_20_parsed(swagger_20_raw: dict[str, Any]) -> ParsedSpec:
    """Fully parsed inventory Swagger 2.0 spec."""
    return extract_spec(copy.deepcopy(swagger_20_raw))
