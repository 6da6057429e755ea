"""Group parsed endpoints by tag and give each one a stable navigable path.

The navigation tree is always exactly two levels deep: one
:class:`~apinav.models.NavigationGroup` per first tag, each holding
:class:`~apinav.models.NavigationPage` entries.  Groups are ordered by the
position of their tag in the document's declared ``tags`` list, with
undeclared tags after all declared ones in lexicographic order.  Inside a
group, pages keep the order in which the paths map was walked.

Every endpoint's page path is ``{prefix}/{slugify(tag)}/{slug}`` where the
slug is ``slugify(operationId)`` or, without one, ``slugify(METHOD_path)``.
Two endpoints can end up with the same path (e.g. operations whose ids only
differ in punctuation).  :func:`assign_navigation_paths` detects this and
applies the configured :class:`~apinav.models.CollisionPolicy`.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Optional, Sequence

from apinav.exceptions import SlugCollisionError
from apinav.models import (
    CollisionPolicy,
    Endpoint,
    NavigationGroup,
    NavigationNode,
    NavigationPage,
    ParserConfig,
    TagInfo,
)

logger = logging.getLogger(__name__)

_BRACES_RE = re.compile(r"[{}]")
_UNSAFE_RE = re.compile(r"[^a-z0-9_-]")
_UNDERSCORES_RE = re.compile(r"_+")
_TAG_SEPARATOR_RE = re.compile(r"[-_]")
_WORD_START_RE = re.compile(r"\b\w")


def slugify(text: str) -> str:
    """Turn *text* into a lower-case, URL-safe identifier.

    Path-template braces are dropped, ``/`` and every other character
    outside ``[a-z0-9_-]`` become ``_``, runs of ``_`` collapse to one and
    leading/trailing ``_`` are trimmed.  The function is idempotent.

    Example::

        slugify("GET_/users/{id}")   # "get_users_id"
        slugify("listPets")          # "listpets"
    """
    slug = _BRACES_RE.sub("", text.lower())
    slug = slug.replace("/", "_")
    slug = _UNSAFE_RE.sub("_", slug)
    slug = _UNDERSCORES_RE.sub("_", slug)
    return slug.strip("_")


def format_tag_name(tag: str) -> str:
    """Display title of a tag group: ``user-accounts`` -> ``User Accounts``."""
    return _WORD_START_RE.sub(lambda m: m.group().upper(), _TAG_SEPARATOR_RE.sub(" ", tag))


def endpoint_slug(endpoint: Endpoint) -> str:
    """Slug of *endpoint*: its operation id when present, else ``METHOD_path``."""
    if endpoint.operation_id:
        return slugify(endpoint.operation_id)
    return slugify(f"{endpoint.method.value}_{endpoint.path}")


def navigation_path(tag: str, endpoint: Endpoint, prefix: str = "/api_reference") -> str:
    """Navigable path of *endpoint* inside the group of *tag*, before collision handling."""
    return f"{prefix}/{slugify(tag)}/{endpoint_slug(endpoint)}"


def assign_navigation_paths(
    endpoints: Sequence[Endpoint],
    config: Optional[ParserConfig] = None,
) -> list[str]:
    """Compute the navigable path of every endpoint, applying the collision policy.

    Args:
        endpoints: Endpoints in document order.
        config: Supplies ``nav_prefix`` and ``collision_policy``.  Defaults
            to :class:`~apinav.models.ParserConfig` defaults.

    Returns:
        One path per endpoint, in the same order as *endpoints*.

    Raises:
        SlugCollisionError: When two endpoints share a path and the policy
            is :attr:`~apinav.models.CollisionPolicy.ERROR`.
    """
    config = config or ParserConfig()
    paths = [navigation_path(ep.tags[0], ep, config.nav_prefix) for ep in endpoints]

    claimed: dict[str, list[int]] = defaultdict(list)
    for index, path in enumerate(paths):
        claimed[path].append(index)

    for path, indices in claimed.items():
        if len(indices) < 2:
            continue

        labels = [f"{endpoints[i].method.value} {endpoints[i].path}" for i in indices]
        if config.collision_policy is CollisionPolicy.ERROR:
            raise SlugCollisionError(path, labels)

        if config.collision_policy is CollisionPolicy.WARN:
            logger.warning(
                "Navigable path %s is shared by %s; lookups return the first",
                path,
                ", ".join(labels),
            )
            continue

        # SUFFIX: the first claimant keeps the path, later ones get _2, _3, ...
        taken = set(paths)
        counter = 2
        for i in indices[1:]:
            while f"{path}_{counter}" in taken:
                counter += 1
            paths[i] = f"{path}_{counter}"
            taken.add(paths[i])
            counter += 1

    return paths


def generate_navigation(
    endpoints: Sequence[Endpoint],
    declared_tags: Sequence[TagInfo],
    config: Optional[ParserConfig] = None,
) -> list[NavigationNode]:
    """Build the two-level navigation tree.

    Args:
        endpoints: Parsed endpoints in document order.
        declared_tags: The document's top-level ``tags`` list; its order
            decides group order.
        config: Navigation prefix and collision policy.

    Returns:
        One :class:`~apinav.models.NavigationGroup` per distinct first tag.

    Raises:
        SlugCollisionError: Propagated from :func:`assign_navigation_paths`.
    """
    paths = assign_navigation_paths(endpoints, config)

    groups: dict[str, list[NavigationPage]] = {}
    for endpoint, path in zip(endpoints, paths):
        groups.setdefault(endpoint.tags[0], []).append(
            NavigationPage(title=endpoint.title, path=path, method=endpoint.method)
        )

    tag_order = {tag.name: index for index, tag in enumerate(declared_tags)}
    undeclared = len(tag_order)

    ordered = sorted(groups, key=lambda name: (tag_order.get(name, undeclared), name))
    return [
        NavigationGroup(title=format_tag_name(name), children=groups[name])
        for name in ordered
    ]
