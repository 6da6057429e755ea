"""Navigation generator -- group endpoints by tag and derive page paths.

This sub-package takes the endpoints of a :class:`~apinav.models.ParsedSpec`
and produces the two-level navigation tree a documentation sidebar renders,
plus the inverse lookups from a page path or operation id back to an
endpoint.

Typical usage::

    from apinav.generator import generate_navigation, get_endpoint_by_path

    nav = generate_navigation(parsed.endpoints, parsed.tags)
    endpoint = get_endpoint_by_path(parsed, nav[0].children[0].path)

Sub-modules:

* :mod:`~apinav.generator.navigation` -- Slugs, page paths, collision
  policy and group ordering.
* :mod:`~apinav.generator.lookup` -- Page path and operation id lookups.
"""

from apinav.generator.lookup import get_endpoint_by_operation_id, get_endpoint_by_path
from apinav.generator.navigation import (
    assign_navigation_paths,
    format_tag_name,
    generate_navigation,
    slugify,
)

__all__ = [
    "assign_navigation_paths",
    "format_tag_name",
    "generate_navigation",
    "get_endpoint_by_operation_id",
    "get_endpoint_by_path",
    "slugify",
]
