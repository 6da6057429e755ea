"""In-memory caching of parsed specification documents.

This package provides :class:`SpecCache`, a caller-owned map from a
document's content hash (:func:`cache_key`) to its
:class:`~apinav.models.ParsedSpec`.  Entries live until they are cleared
explicitly; there is no expiry.

The cache is consumed by :class:`~apinav.parser.spec_parser.SpecParser`
and, through it, by :class:`~apinav.catalog.SpecCatalog`.
"""

from apinav.cache.cache import SpecCache, cache_key

__all__ = ["SpecCache", "cache_key"]
