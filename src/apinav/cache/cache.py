"""Process-lifetime cache of parsed specification documents.

Keys are SHA-256 hashes of the document's JSON serialisation.  Key order is
deliberately *not* normalised: path order decides endpoint and navigation
order, so two documents that differ only in key order parse differently and
must not share an entry.

Values are stored and returned as-is, so a cache hit hands back the very
:class:`~apinav.models.ParsedSpec` object produced by the first parse.

See Also:
    :class:`~apinav.parser.spec_parser.SpecParser` -- the parser that
    consults the cache before running the pipeline.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Any, Optional

from apinav.models import ParsedSpec

logger = logging.getLogger(__name__)


def cache_key(document: Any) -> str:
    """Return the cache key of a raw *document*.

    Values JSON cannot represent (dates from YAML, for instance) are
    serialised through ``str`` so every decoded document has a key.
    """
    serialised = json.dumps(document, default=str, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(serialised.encode("utf-8")).hexdigest()


class SpecCache:
    """Thread-safe in-memory map of cache key -> :class:`ParsedSpec`.

    Create one per process (or per content-loading layer) and hand it to
    every :class:`~apinav.parser.spec_parser.SpecParser` that should share
    results.  Concurrent parses of the same document may both miss and both
    store; the later store wins and both results are equivalent.

    Example::

        from apinav.cache import SpecCache
        from apinav.parser import SpecParser

        cache = SpecCache()
        parser = SpecParser(cache=cache)
        first = parser.parse(raw)
        assert parser.parse(raw) is first
        cache.clear()
    """

    def __init__(self) -> None:
        self._entries: dict[str, ParsedSpec] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[ParsedSpec]:
        """Return the entry stored under *key*, or ``None`` on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
        if entry is not None:
            logger.debug("Spec cache hit: %s", key[:12])
        return entry

    def set(self, key: str, spec: ParsedSpec) -> None:
        """Store *spec* under *key*, replacing any existing entry."""
        with self._lock:
            self._entries[key] = spec

    def clear(self, key: Optional[str] = None) -> None:
        """Remove the entry under *key*, or every entry when *key* is ``None``.

        Clearing a key that is not cached is a no-op.
        """
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (number of entries), ``hits`` and
            ``misses`` (lookup counters since construction).
        """
        with self._lock:
            return {"size": len(self._entries), "hits": self._hits, "misses": self._misses}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
