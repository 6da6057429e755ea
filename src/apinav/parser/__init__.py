"""Specification parser -- load, resolve ``$ref`` pointers, normalise and extract.

This sub-package turns a raw Swagger 2.0 or OpenAPI 3.x document (JSON or
YAML, local file, remote URL or stdin) into a
:class:`~apinav.models.ParsedSpec` holding every endpoint and the navigation
tree built from them.

Typical usage::

    from apinav.parser import SpecParser, load_spec

    parser = SpecParser()
    parsed = parser.parse(load_spec("https://petstore3.swagger.io/api/v3/openapi.json"))
    endpoint = parser.get_endpoint_by_path(parsed, "/api_reference/pet/addpet.mdx")

Sub-modules:

* :mod:`~apinav.parser.loader` -- I/O layer (URL, file, stdin), format
  detection and dialect detection.
* :mod:`~apinav.parser.resolver` -- ``$ref`` resolution with cycle markers.
* :mod:`~apinav.parser.normalizer` -- Dialect-agnostic schema normalisation.
* :mod:`~apinav.parser.operation` -- One path + method pair to an
  :class:`~apinav.models.Endpoint`.
* :mod:`~apinav.parser.extractor` -- The uncached document pipeline.
* :mod:`~apinav.parser.spec_parser` -- :class:`SpecParser`, the cached
  entry point.
"""

from apinav.parser.extractor import extract_spec
from apinav.parser.loader import detect_dialect, load_spec
from apinav.parser.resolver import RefResolver, resolve_refs
from apinav.parser.spec_parser import SpecParser

__all__ = [
    "RefResolver",
    "SpecParser",
    "detect_dialect",
    "extract_spec",
    "load_spec",
    "resolve_refs",
]
