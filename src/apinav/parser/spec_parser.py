"""Cached entry point of the parser.

:class:`SpecParser` ties the pipeline in :mod:`apinav.parser.extractor` to a
:class:`~apinav.cache.SpecCache` and exposes the two endpoint lookups the UI
layer uses.  A repeated :meth:`SpecParser.parse` of an identical document
returns the cached :class:`~apinav.models.ParsedSpec` object without
re-running the pipeline; entries are only dropped by :meth:`clear_cache`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from apinav.cache import SpecCache, cache_key
from apinav.generator.lookup import get_endpoint_by_operation_id, get_endpoint_by_path
from apinav.models import Endpoint, ParsedSpec, ParserConfig
from apinav.parser.extractor import extract_spec

logger = logging.getLogger(__name__)


class SpecParser:
    """Parse raw documents, caching results by document content.

    Args:
        config: Parser configuration used for every parse.  Defaults to
            :class:`~apinav.models.ParserConfig` defaults.
        cache: The cache to read and fill.  A private one is created when
            omitted.  Parsers sharing a cache should share a configuration
            too, since the key covers the document only.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        cache: Optional[SpecCache] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.cache = cache if cache is not None else SpecCache()

    def parse(self, raw: Any) -> ParsedSpec:
        """Return the :class:`ParsedSpec` of *raw*, from the cache when possible.

        Raises:
            SpecParseError: If the document's top level is malformed.
                Failed parses are not cached.
            SlugCollisionError: Under the ``error`` collision policy.
        """
        key = cache_key(raw)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        parsed = extract_spec(raw, self.config)
        parsed.cache_key = key
        self.cache.set(key, parsed)
        return parsed

    def clear_cache(self, key: Optional[str] = None) -> None:
        """Drop the entry under *key*, or the whole cache when *key* is ``None``."""
        logger.debug("Clearing spec cache (%s)", key or "all entries")
        self.cache.clear(key)

    def get_endpoint_by_path(self, spec: ParsedSpec, path: str) -> Optional[Endpoint]:
        """Find the endpoint at navigable *path* (``.mdx`` suffix allowed)."""
        return get_endpoint_by_path(spec, path, self.config)

    def get_endpoint_by_operation_id(self, spec: ParsedSpec, operation_id: str) -> Optional[Endpoint]:
        """Find the endpoint declaring *operation_id*."""
        return get_endpoint_by_operation_id(spec, operation_id)
