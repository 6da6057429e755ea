"""Find endpoints of a :class:`~apinav.models.ParsedSpec` by page path or operation id."""

from __future__ import annotations

from typing import Optional

from apinav.generator.navigation import assign_navigation_paths
from apinav.models import Endpoint, ParsedSpec, ParserConfig


def _normalize_page_path(path: str) -> str:
    path = path[1:] if path.startswith("/") else path
    return path[: -len(".mdx")] if path.endswith(".mdx") else path


def get_endpoint_by_path(
    spec: ParsedSpec,
    path: str,
    config: Optional[ParserConfig] = None,
) -> Optional[Endpoint]:
    """Return the endpoint whose navigable path is *path*.

    *path* may carry a leading ``/`` and a trailing ``.mdx``; both are
    ignored.  Paths are recomputed with the same *config* the spec was
    parsed with, so suffixed collision paths resolve as well.  When several
    endpoints share a path the first in document order is returned.
    """
    wanted = _normalize_page_path(path)
    for endpoint, candidate in zip(spec.endpoints, assign_navigation_paths(spec.endpoints, config)):
        if _normalize_page_path(candidate) == wanted:
            return endpoint
    return None


def get_endpoint_by_operation_id(spec: ParsedSpec, operation_id: str) -> Optional[Endpoint]:
    """Return the first endpoint declaring *operation_id*, or ``None``."""
    return next((ep for ep in spec.endpoints if ep.operation_id == operation_id), None)
