"""Source-keyed registry of loaded specification documents.

A documentation site usually serves several API references at once, each
identified by where its document lives (``/api_reference/openapi.json``,
``https://.../swagger.json``).  :class:`SpecCatalog` loads each source once,
keeps its :class:`~apinav.models.ParsedSpec`, and answers the questions a
sidebar or page renderer asks about it: the sidebar items, the endpoint at a
page path, the endpoint with an operation id.

Lookups against a source that has not been loaded return empty results
rather than raising, so renderers can ask before the load has finished.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Union

from apinav.models import (
    APIInfo,
    Endpoint,
    NavigationGroup,
    NavigationPage,
    ParsedSpec,
    SidebarGroup,
    SidebarOpenAPIItem,
)
from apinav.parser.loader import load_spec
from apinav.parser.spec_parser import SpecParser

logger = logging.getLogger(__name__)

SidebarItem = Union[SidebarGroup, SidebarOpenAPIItem]


class SpecCatalog:
    """Load, keep and query parsed documents by source.

    Args:
        parser: The parser (and through it the cache) used for every load.
            A default :class:`~apinav.parser.spec_parser.SpecParser` is
            created when omitted.
        loader: Callable turning a source string into a raw document.
            Defaults to :func:`~apinav.parser.loader.load_spec`.

    Example::

        catalog = SpecCatalog()
        catalog.load("specs/petstore.yaml")
        items = catalog.navigation_items("specs/petstore.yaml")
        endpoint = catalog.endpoint("specs/petstore.yaml", items[0].children[0].page)
    """

    def __init__(
        self,
        parser: Optional[SpecParser] = None,
        loader: Callable[[str], dict[str, Any]] = load_spec,
    ) -> None:
        self.parser = parser or SpecParser()
        self._loader = loader
        self._specs: dict[str, ParsedSpec] = {}
        self._lock = threading.Lock()

    def load(self, source: str) -> ParsedSpec:
        """Load and parse *source*, or return the spec already loaded from it.

        Raises:
            ConnectionError_: If a remote source cannot be reached.
            SpecParseError: If the document cannot be read or parsed.
                Nothing is registered for *source* in that case.
        """
        with self._lock:
            existing = self._specs.get(source)
        if existing is not None:
            return existing

        logger.debug("Loading specification from %s", source)
        parsed = self.parser.parse(self._loader(source))
        logger.debug("Parsed %d endpoints from %s", len(parsed.endpoints), source)

        with self._lock:
            return self._specs.setdefault(source, parsed)

    def get(self, source: str) -> Optional[ParsedSpec]:
        """The spec loaded from *source*, or ``None``."""
        with self._lock:
            return self._specs.get(source)

    def is_loaded(self, source: str) -> bool:
        """Whether *source* has been loaded successfully."""
        with self._lock:
            return source in self._specs

    def navigation_items(self, source: str) -> list[SidebarItem]:
        """The navigation of *source* converted to sidebar entries.

        Every page becomes a :class:`~apinav.models.SidebarOpenAPIItem`
        carrying ``spec_path=source`` so the renderer knows which document
        to ask for the endpoint.
        """
        spec = self.get(source)
        if spec is None:
            return []
        return [_to_sidebar(node, source) for node in spec.navigation]

    def endpoint(self, source: str, nav_path: str) -> Optional[Endpoint]:
        """The endpoint of *source* at page path *nav_path*."""
        spec = self.get(source)
        if spec is None:
            return None
        return self.parser.get_endpoint_by_path(spec, nav_path)

    def endpoint_by_operation_id(self, source: str, operation_id: str) -> Optional[Endpoint]:
        """The endpoint of *source* declaring *operation_id*."""
        spec = self.get(source)
        if spec is None:
            return None
        return self.parser.get_endpoint_by_operation_id(spec, operation_id)

    def all_endpoints(self, source: str) -> list[Endpoint]:
        """Every endpoint of *source* in document order."""
        spec = self.get(source)
        return list(spec.endpoints) if spec is not None else []

    def spec_info(self, source: str) -> Optional[APIInfo]:
        """The ``info`` metadata of *source*."""
        spec = self.get(source)
        return spec.info if spec is not None else None

    def clear(self, source: Optional[str] = None) -> None:
        """Forget *source* (or every source) and evict its parse from the cache.

        Evicting the cache entry forces the next :meth:`load` to re-parse,
        which is what an edited document needs.
        """
        with self._lock:
            if source is None:
                removed = list(self._specs.values())
                self._specs.clear()
            else:
                spec = self._specs.pop(source, None)
                removed = [spec] if spec is not None else []

        for spec in removed:
            if spec.cache_key:
                self.parser.clear_cache(spec.cache_key)


def _to_sidebar(node: Union[NavigationGroup, NavigationPage], source: str) -> SidebarItem:
    if isinstance(node, NavigationGroup):
        return SidebarGroup(
            title=node.title,
            children=[_to_sidebar_page(child, source) for child in node.children],
        )
    return _to_sidebar_page(node, source)


def _to_sidebar_page(page: NavigationPage, source: str) -> SidebarOpenAPIItem:
    return SidebarOpenAPIItem(title=page.title, page=page.path, method=page.method, spec_path=source)
