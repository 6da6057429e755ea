"""Turn one path + method pair of a resolved document into an :class:`Endpoint`.

The single public entry point is :func:`parse_operation`.  It is called by
:func:`~apinav.parser.extractor.extract_spec` once per operation and
delegates to private helpers that each handle one part of the operation
object:

* ``merge_parameters`` -- path-level parameters merged with operation-level
  ones, keyed by ``(name, in)``.
* ``_extract_parameters`` -- query/path/header/cookie parameters with
  normalised schemas.
* ``_BODY_EXTRACTORS`` -- the request body, dispatched on the dialect:
  Swagger 2.0 carries it as an ``in: body`` (or ``formData``) parameter,
  OpenAPI 3.x as a ``requestBody`` object with a ``content`` map.
* ``_RESPONSE_EXTRACTORS`` -- per-status responses, again dialect-dispatched.

Security follows the override rule: an operation-level ``security`` list,
even an empty one, replaces the document's global list; an operation
without the key inherits it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from apinav.models import (
    Dialect,
    Endpoint,
    ExternalDocs,
    HTTPMethod,
    MediaTypeContent,
    Parameter,
    ParameterLocation,
    RequestBody,
    ResponseSchema,
    SecuritySchema,
    UnifiedSchema,
)
from apinav.parser.normalizer import normalize_parameter_schema, normalize_schema

logger = logging.getLogger(__name__)

_JSON = "application/json"
_FORM_URLENCODED = "application/x-www-form-urlencoded"
_MULTIPART = "multipart/form-data"

_LOCATIONS = frozenset(loc.value for loc in ParameterLocation)


def parse_operation(
    path: str,
    method: HTTPMethod,
    operation: dict[str, Any],
    path_parameters: list[Any],
    base_url: str,
    security_schemas: dict[str, SecuritySchema],
    dialect: Dialect,
    global_security: Optional[list[dict[str, list[str]]]],
    default_tag: str = "default",
    consumes: Optional[list[str]] = None,
) -> Endpoint:
    """Parse a single resolved operation object into an :class:`Endpoint`.

    Args:
        path: The raw path template (e.g. ``"/users/{id}"``).
        method: The HTTP method the operation is declared under.
        operation: The resolved operation object.
        path_parameters: Parameters declared on the enclosing path item.
        base_url: The document's base URL, copied onto the endpoint.
        security_schemas: The document-level security scheme map.  The
            endpoint keeps a reference to this exact dict.
        dialect: Which dialect the document uses.
        global_security: The document's top-level ``security`` list, or
            ``None`` when it declares none.
        default_tag: Tag assigned when the operation declares no tags.
        consumes: Swagger 2.0 document-level ``consumes`` list, used when
            the operation has none of its own.

    Returns:
        The parsed :class:`~apinav.models.Endpoint`.
    """
    merged = merge_parameters(path_parameters, operation.get("parameters") or [])

    operation_consumes = operation.get("consumes")
    if not isinstance(operation_consumes, list):
        operation_consumes = consumes or []

    request_body = _BODY_EXTRACTORS[dialect](operation, merged, operation_consumes)
    responses = _RESPONSE_EXTRACTORS[dialect](operation.get("responses") or {})

    operation_id = operation.get("operationId")
    summary = operation.get("summary")
    title = summary or operation_id or f"{method.value} {path}"

    # Absent means "inherit"; an explicit [] means "no auth" and must survive.
    declared = operation.get("security")
    declared_security = declared if isinstance(declared, list) else None
    security = declared_security if declared_security is not None else global_security

    tags = [t for t in operation.get("tags") or [] if isinstance(t, str)]

    external_docs = operation.get("externalDocs")

    endpoint = Endpoint(
        title=title,
        summary=summary,
        description=operation.get("description"),
        method=method,
        path=path,
        deprecated=bool(operation.get("deprecated", False)),
        tags=tags or [default_tag],
        external_docs=ExternalDocs(**_pick(external_docs, "url", "description"))
        if isinstance(external_docs, dict)
        else None,
        parameters=_extract_parameters(merged, dialect),
        request_body=request_body,
        responses=responses,
        base_url=base_url,
        security=security,
        declared_security=declared_security,
        operation_id=operation_id if isinstance(operation_id, str) else None,
    )
    # Assigned after validation so every endpoint shares the document's dict.
    endpoint.security_schemas = security_schemas
    return endpoint


def merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Parameters are keyed by ``(name, in)``.  Path-level parameters come
    first, then operation-level ones; when a key repeats, the later
    declaration replaces the earlier one and takes its position at the end.
    This makes operation-level parameters win over path-level ones, and the
    last of several duplicates within one level win as well.

    Entries that are not resolved parameter objects (unresolvable or
    circular ``$ref`` nodes) are dropped.

    Args:
        path_params: Parameters defined at the path level.
        op_params: Parameters defined at the operation level.

    Returns:
        The merged list of parameter dicts.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for param in [*path_params, *op_params]:
        if not isinstance(param, dict) or "$ref" in param:
            logger.debug("Skipping unresolved parameter entry: %r", param)
            continue
        key = (str(param.get("name", "")), str(param.get("in", "")))
        merged.pop(key, None)
        merged[key] = param
    return list(merged.values())


def _extract_parameters(params: list[dict[str, Any]], dialect: Dialect) -> list[Parameter]:
    """Convert merged parameter dicts into :class:`Parameter` models.

    Body and form parameters are excluded (they feed the request body), as
    are parameters with an unknown location or no name.  Path parameters
    are always required.
    """
    parameters: list[Parameter] = []

    for param in params:
        name = param.get("name")
        location = param.get("in")
        if location in ("body", "formData"):
            continue
        if location not in _LOCATIONS or not isinstance(name, str) or not name:
            logger.debug("Skipping parameter %r in %r", name, location)
            continue

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH.value:
            required = True

        examples = param.get("examples")

        parameters.append(
            Parameter(
                name=name,
                location=ParameterLocation(location),
                description=param.get("description"),
                required=required,
                schema_=normalize_parameter_schema(param, dialect),
                example=param.get("example"),
                examples=examples if isinstance(examples, dict) else None,
            )
        )

    return parameters


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


def _swagger2_request_body(
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    consumes: list[str],
) -> RequestBody | None:
    """Swagger 2.0: the body is an ``in: body`` parameter, or the form fields.

    Only one body parameter is meaningful; when several are declared the
    first wins and the rest are ignored with a warning.
    """
    body_params = [p for p in params if p.get("in") == "body"]
    if body_params:
        if len(body_params) > 1:
            logger.warning(
                "Operation %s declares %d body parameters; using '%s'",
                operation.get("operationId") or "<anonymous>",
                len(body_params),
                body_params[0].get("name"),
            )
        body = body_params[0]
        return RequestBody(
            description=body.get("description"),
            required=bool(body.get("required", False)),
            content={_JSON: MediaTypeContent(schema_=normalize_schema(body.get("schema"), Dialect.SWAGGER2))},
        )

    form_params = [p for p in params if p.get("in") == "formData" and isinstance(p.get("name"), str)]
    if form_params:
        return _swagger2_form_body(form_params, consumes)

    return None


def _swagger2_form_body(form_params: list[dict[str, Any]], consumes: list[str]) -> RequestBody:
    """Collect Swagger 2.0 ``formData`` parameters into one object schema."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    has_file = False

    for param in form_params:
        name = param["name"]
        schema = normalize_parameter_schema(param, Dialect.SWAGGER2)
        if isinstance(schema, UnifiedSchema):
            update: dict[str, Any] = {"description": param.get("description")}
            if schema.type == "file":
                has_file = True
                update.update(type="string", format="binary")
            schema = schema.model_copy(update=update)
        properties[name] = schema
        if param.get("required"):
            required.append(name)

    media_type = _MULTIPART if has_file or _MULTIPART in consumes else _FORM_URLENCODED
    return RequestBody(
        required=bool(required),
        content={
            media_type: MediaTypeContent(
                schema_=UnifiedSchema(
                    type="object", properties=properties, required=required or None
                )
            )
        },
    )


def _openapi3_request_body(
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    consumes: list[str],
) -> RequestBody | None:
    """OpenAPI 3.x: a top-level ``requestBody`` with a ``content`` map."""
    body = operation.get("requestBody")
    if not isinstance(body, dict) or "$ref" in body:
        return None

    return RequestBody(
        description=body.get("description"),
        required=bool(body.get("required", False)),
        content=_parse_content(body.get("content") or {}),
    )


_BODY_EXTRACTORS: dict[
    Dialect, Callable[[dict[str, Any], list[dict[str, Any]], list[str]], Optional[RequestBody]]
] = {
    Dialect.SWAGGER2: _swagger2_request_body,
    Dialect.OPENAPI3: _openapi3_request_body,
}


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _swagger2_responses(responses: dict[Any, Any]) -> dict[str, ResponseSchema]:
    """Swagger 2.0: each response carries at most one implicit JSON ``schema``."""
    result: dict[str, ResponseSchema] = {}
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            result[str(status_code)] = ResponseSchema()
            continue
        content = None
        if response.get("schema") is not None:
            content = {_JSON: MediaTypeContent(schema_=normalize_schema(response["schema"], Dialect.SWAGGER2))}
        result[str(status_code)] = ResponseSchema(
            description=response.get("description") or "",
            content=content,
        )
    return result


def _openapi3_responses(responses: dict[Any, Any]) -> dict[str, ResponseSchema]:
    """OpenAPI 3.x: each response may carry a ``content`` map."""
    result: dict[str, ResponseSchema] = {}
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            result[str(status_code)] = ResponseSchema()
            continue
        content = response.get("content")
        result[str(status_code)] = ResponseSchema(
            description=response.get("description") or "",
            content=_parse_content(content) if isinstance(content, dict) else None,
        )
    return result


_RESPONSE_EXTRACTORS: dict[Dialect, Callable[[dict[Any, Any]], dict[str, ResponseSchema]]] = {
    Dialect.SWAGGER2: _swagger2_responses,
    Dialect.OPENAPI3: _openapi3_responses,
}


def _parse_content(content: dict[str, Any]) -> dict[str, MediaTypeContent]:
    """Normalise an OpenAPI 3.x ``content`` map media type by media type."""
    result: dict[str, MediaTypeContent] = {}
    for media_type, media in content.items():
        schema = media.get("schema") if isinstance(media, dict) else None
        result[str(media_type)] = MediaTypeContent(schema_=normalize_schema(schema, Dialect.OPENAPI3))
    return result


def _pick(source: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Return the string-valued *keys* present in *source*."""
    return {k: source[k] for k in keys if isinstance(source.get(k), str)}
