"""Build a :class:`~apinav.models.ParsedSpec` from a raw specification document.

This module is the uncached pipeline behind
:class:`~apinav.parser.spec_parser.SpecParser`.  It validates the top level
of the document, resolves every local ``$ref`` once, then walks the resolved
tree:

* ``_extract_info`` -- the ``info`` object (title, version, contact, license).
* ``_BASE_URL_EXTRACTORS`` -- ``servers[0].url`` (OpenAPI 3.x) or
  ``scheme://host{basePath}`` (Swagger 2.0).
* ``_extract_security_schemas`` -- ``components.securitySchemes`` or
  ``securityDefinitions``.
* ``_extract_tags`` -- the declared ``tags`` list.
* ``_extract_endpoints`` -- every path + HTTP method pair, handed to
  :func:`~apinav.parser.operation.parse_operation`.

Finally the navigation tree is generated from the endpoints.

Only a malformed top level raises :class:`~apinav.exceptions.SpecParseError`;
problems inside individual nodes are logged and recovered.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from apinav.exceptions import SpecParseError
from apinav.generator.navigation import generate_navigation
from apinav.models import (
    APIInfo,
    Dialect,
    Endpoint,
    ExternalDocs,
    HTTPMethod,
    ParsedSpec,
    ParserConfig,
    SecuritySchema,
    TagInfo,
)
from apinav.parser.loader import detect_dialect
from apinav.parser.operation import parse_operation
from apinav.parser.resolver import resolve_refs

logger = logging.getLogger(__name__)

_SERVER_VARIABLE_RE = re.compile(r"\{([^{}]+)\}")


def extract_spec(raw: Any, config: Optional[ParserConfig] = None) -> ParsedSpec:
    """Parse a raw Swagger 2.0 or OpenAPI 3.x document into a :class:`ParsedSpec`.

    Args:
        raw: The document as returned by :func:`~apinav.parser.loader.load_spec`
            (or any equivalent mapping).  It is never mutated.
        config: Parser configuration; defaults apply when omitted.

    Returns:
        The fully populated :class:`~apinav.models.ParsedSpec`.  Its
        ``cache_key`` is left unset; the caching layer fills it in.

    Raises:
        SpecParseError: If the document is not a mapping, carries no
            supported dialect marker, or lacks an ``info`` or ``paths``
            mapping.
        SlugCollisionError: If two endpoints share a navigable path under
            the ``error`` collision policy.

    Example::

        raw = load_spec("petstore.yaml")
        parsed = extract_spec(raw)
        for ep in parsed.endpoints:
            print(f"{ep.method.value} {ep.path}")
    """
    config = config or ParserConfig()

    if not isinstance(raw, dict):
        raise SpecParseError(
            f"Specification must be a JSON/YAML object (got {type(raw).__name__})"
        )

    dialect, spec_version = detect_dialect(raw)

    if not isinstance(raw.get("info"), dict):
        raise SpecParseError("Missing or invalid 'info' object")
    if not isinstance(raw.get("paths"), dict):
        raise SpecParseError("Missing or invalid 'paths' object")

    spec = resolve_refs(raw, max_depth=config.max_ref_depth)

    base_url = _BASE_URL_EXTRACTORS[dialect](spec)
    security_schemas = _extract_security_schemas(spec, dialect)
    tags = _extract_tags(spec)
    endpoints = _extract_endpoints(spec, dialect, base_url, security_schemas, config)

    parsed = ParsedSpec(
        info=_extract_info(spec),
        dialect=dialect,
        spec_version=spec_version,
        base_url=base_url,
        endpoints=endpoints,
        navigation=generate_navigation(endpoints, tags, config),
        tags=tags,
    )
    # Same dict object as every endpoint's security_schemas.
    parsed.security_schemas = security_schemas

    logger.debug(
        "Parsed %s %s document: %d endpoints, %d groups",
        dialect.value,
        spec_version,
        len(endpoints),
        len(parsed.navigation),
    )
    return parsed


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    """Extract API metadata from the document's ``info`` object.

    Missing optional fields default to ``None``; a missing title or version
    gets a placeholder so the result is always renderable.
    """
    info = spec.get("info") or {}
    contact = info.get("contact") if isinstance(info.get("contact"), dict) else {}
    license_info = info.get("license") if isinstance(info.get("license"), dict) else {}

    return APIInfo(
        title=str(info.get("title", "Untitled API")),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
        terms_of_service=info.get("termsOfService"),
        contact_name=contact.get("name"),
        contact_email=contact.get("email"),
        contact_url=contact.get("url"),
        license_name=license_info.get("name"),
        license_url=license_info.get("url"),
    )


def _openapi3_base_url(spec: dict[str, Any]) -> str:
    """First ``servers[].url``, with ``{variables}`` replaced by their defaults."""
    servers = spec.get("servers")
    if not isinstance(servers, list) or not servers or not isinstance(servers[0], dict):
        return ""

    server = servers[0]
    url = str(server.get("url", ""))
    variables = server.get("variables")
    if not isinstance(variables, dict):
        return url

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE_RE.sub(substitute, url)


def _swagger2_base_url(spec: dict[str, Any]) -> str:
    """``scheme://host{basePath}`` using the first scheme, ``https`` by default."""
    host = spec.get("host")
    if not host:
        return ""

    schemes = spec.get("schemes")
    scheme = schemes[0] if isinstance(schemes, list) and schemes else "https"
    base_path = spec.get("basePath") or ""
    return f"{scheme}://{host}{base_path}"


_BASE_URL_EXTRACTORS: dict[Dialect, Callable[[dict[str, Any]], str]] = {
    Dialect.SWAGGER2: _swagger2_base_url,
    Dialect.OPENAPI3: _openapi3_base_url,
}


def _extract_security_schemas(spec: dict[str, Any], dialect: Dialect) -> dict[str, SecuritySchema]:
    """Read the document-level security scheme map of either dialect.

    Args:
        spec: The resolved document.
        dialect: Decides whether ``securityDefinitions`` (Swagger 2.0) or
            ``components.securitySchemes`` (OpenAPI 3.x) is read.

    Returns:
        Scheme name -> :class:`~apinav.models.SecuritySchema`.  Entries that
        are not objects are skipped.
    """
    if dialect is Dialect.SWAGGER2:
        raw_schemes = spec.get("securityDefinitions")
    else:
        components = spec.get("components")
        raw_schemes = components.get("securitySchemes") if isinstance(components, dict) else None

    schemas: dict[str, SecuritySchema] = {}
    if not isinstance(raw_schemes, dict):
        return schemas

    for name, scheme in raw_schemes.items():
        if not isinstance(scheme, dict):
            logger.debug("Skipping security scheme %r: not an object", name)
            continue
        flows = scheme.get("flows")
        schemas[str(name)] = SecuritySchema(
            type=scheme.get("type"),
            name=scheme.get("name"),
            location=scheme.get("in"),
            scheme=scheme.get("scheme"),
            bearer_format=scheme.get("bearerFormat"),
            description=scheme.get("description"),
            flows=flows if isinstance(flows, dict) else None,
            openid_connect_url=scheme.get("openIdConnectUrl"),
        )
    return schemas


def _extract_tags(spec: dict[str, Any]) -> list[TagInfo]:
    """The declared top-level ``tags``, in document order."""
    tags: list[TagInfo] = []
    for tag in spec.get("tags") or []:
        if not isinstance(tag, dict) or not isinstance(tag.get("name"), str):
            continue
        docs = tag.get("externalDocs")
        tags.append(
            TagInfo(
                name=tag["name"],
                description=tag.get("description"),
                external_docs=ExternalDocs(url=docs.get("url"), description=docs.get("description"))
                if isinstance(docs, dict)
                else None,
            )
        )
    return tags


def _extract_endpoints(
    spec: dict[str, Any],
    dialect: Dialect,
    base_url: str,
    security_schemas: dict[str, SecuritySchema],
    config: ParserConfig,
) -> list[Endpoint]:
    """Walk the ``paths`` map and parse every supported operation.

    Paths are visited in document order and, within a path item, methods
    in :class:`~apinav.models.HTTPMethod` order.  That order is the
    encounter order navigation groups preserve.
    """
    global_security = spec.get("security")
    if not isinstance(global_security, list):
        global_security = None

    consumes = spec.get("consumes") if isinstance(spec.get("consumes"), list) else None

    endpoints: list[Endpoint] = []
    for path, path_item in spec["paths"].items():
        if not isinstance(path_item, dict):
            logger.debug("Skipping path %s: path item is not an object", path)
            continue

        path_parameters = path_item.get("parameters")
        if not isinstance(path_parameters, list):
            path_parameters = []

        for method in HTTPMethod:
            operation = path_item.get(method.value.lower())
            if not isinstance(operation, dict):
                continue
            endpoints.append(
                parse_operation(
                    str(path),
                    method,
                    operation,
                    path_parameters,
                    base_url,
                    security_schemas,
                    dialect,
                    global_security,
                    default_tag=config.default_tag,
                    consumes=consumes,
                )
            )

    return endpoints
