"""Resolve ``$ref`` JSON Reference pointers in API specification documents.

Both OpenAPI 3.x and Swagger 2.0 documents use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}`` or ``{"$ref": "#/definitions/Pet"}``)
to avoid repetition.  This module performs a depth-first traversal of the
document, building a new structure in which every local ``$ref`` is replaced
with the object it points to.

Nothing in here is fatal:

* **Missing targets** -- a local pointer whose path does not exist is logged
  as a warning and the original ``$ref`` node is kept.
* **Cycles** -- re-entering a pointer that is still being resolved yields a
  :class:`~apinav.models.CircularRef` marker instead of recursing, so
  self-referential schemas (tree nodes, linked lists) terminate.
* **External references** -- ``other.yaml#/Pet`` or ``https://...`` pointers
  are left untouched and logged at debug level.
* **Pathological depth** -- past ``max_depth`` nesting levels nodes are
  returned unresolved rather than overflowing the call stack.

Every pointer that resolves successfully is memoised, so later references to
the same pointer return the same resolved subtree.

The public entry points are :func:`resolve_refs` and :class:`RefResolver`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from apinav.models import CircularRef

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50

_MISSING = object()


def resolve_refs(document: dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> dict[str, Any]:
    """Resolve all local ``$ref`` pointers in *document*.

    Args:
        document: The raw specification dictionary.  It is never mutated.
        max_depth: Nesting ceiling; nodes deeper than this are copied
            without resolving their references.

    Returns:
        A **new** dictionary with every resolvable local ``$ref`` replaced
        by its target and every cycle re-entry replaced by a
        :class:`~apinav.models.CircularRef`.

    Example::

        resolved = resolve_refs(raw)
        # resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"]
        # now contains the inlined schema instead of a $ref pointer.
    """
    return RefResolver(document, max_depth=max_depth).resolve()


class RefResolver:
    """One resolution pass over a single document.

    The resolver owns two pieces of state for the duration of the pass:
    the set of pointers currently on the resolution stack (for cycle
    detection) and the memo of pointers already resolved.  Create a new
    instance for each document.

    Args:
        root: The document that every local pointer is resolved against.
        max_depth: Nesting ceiling for the walk.
    """

    def __init__(self, root: dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._root = root
        self._max_depth = max_depth
        self._in_progress: set[str] = set()
        self._resolved: dict[str, Any] = {}

    def resolve(self) -> dict[str, Any]:
        """Resolve the whole root document and return the new structure."""
        return self._walk(self._root, 0)

    @property
    def resolved_pointers(self) -> frozenset[str]:
        """Pointers that resolved successfully during this pass."""
        return frozenset(self._resolved)

    def _walk(self, node: Any, depth: int) -> Any:
        """Recursively resolve *node*, which sits *depth* levels below the root."""
        if depth > self._max_depth:
            logger.debug("Depth ceiling %d reached; leaving node unresolved", self._max_depth)
            return copy.deepcopy(node)

        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return self._resolve_pointer(node, ref, depth)
            return {key: self._walk(value, depth + 1) for key, value in node.items()}

        if isinstance(node, list):
            return [self._walk(item, depth + 1) for item in node]

        # Scalars pass through unchanged
        return node

    def _resolve_pointer(self, node: dict[str, Any], ref: str, depth: int) -> Any:
        """Replace the ``$ref`` dict *node* with the resolved target of *ref*."""
        if ref in self._resolved:
            return self._resolved[ref]

        if ref in self._in_progress:
            return CircularRef(pointer=ref)

        if not (ref == "#" or ref.startswith("#/")):
            logger.debug("Non-local $ref not supported, leaving unresolved: %s", ref)
            return copy.deepcopy(node)

        target = _lookup_pointer(self._root, ref)
        if target is _MISSING:
            logger.warning("Could not resolve $ref: %s", ref)
            return copy.deepcopy(node)

        self._in_progress.add(ref)
        try:
            result = self._walk(target, depth + 1)
        finally:
            self._in_progress.discard(ref)

        self._resolved[ref] = result
        return result


def _lookup_pointer(root: Any, ref: str) -> Any:
    """Walk the local JSON Pointer *ref* from *root*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``) and list
    indices.  ``"#"`` addresses the root itself.

    Returns:
        The addressed value, or ``_MISSING`` when a segment does not exist.
    """
    if ref == "#":
        return root

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING

    return current


def is_resolved(value: Any) -> bool:
    """Return ``True`` unless *value* is a ``$ref`` dict left unresolved."""
    return not (isinstance(value, dict) and isinstance(value.get("$ref"), str))
