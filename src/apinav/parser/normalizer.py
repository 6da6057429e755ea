"""Normalise Swagger 2.0 and OpenAPI 3.x schema fragments into one model.

The two dialects describe the same constraints with different layouts:

* OpenAPI 3.x parameters nest a full schema object under ``schema``.
* Swagger 2.0 non-body parameters put ``type``, ``format`` and constraints
  directly on the parameter ("parameter-shaped" fragments), while body
  parameters and responses carry a nested schema object.

:func:`normalize_schema` handles schema objects of either dialect and
:func:`normalize_parameter_schema` handles parameters.  Both return a
:class:`~apinav.models.UnifiedSchema` (or pass a
:class:`~apinav.models.CircularRef` through untouched), so an OpenAPI 3.x
``{"type": "string", "minLength": 1}`` and a Swagger 2.0 query parameter
with ``type: string, minLength: 1`` produce equal values.

Dialect-specific extensions are folded in as well: Swagger's ``x-nullable``
and ``x-example`` vendor keys, and OpenAPI 3.1 ``type`` arrays such as
``["string", "null"]``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Union

from apinav.models import CircularRef, Dialect, UnifiedSchema
from apinav.parser.resolver import is_resolved

logger = logging.getLogger(__name__)

NormalizedSchema = Union[UnifiedSchema, CircularRef]

# Source key -> (UnifiedSchema field, accepted Python types).  Values of any
# other type are dropped so a sloppy document cannot fail model validation.
_SCALAR_FIELDS: dict[str, tuple[str, tuple[type, ...]]] = {
    "type": ("type", (str,)),
    "format": ("format", (str,)),
    "enum": ("enum", (list,)),
    "minimum": ("minimum", (int, float)),
    "maximum": ("maximum", (int, float)),
    "minLength": ("min_length", (int,)),
    "maxLength": ("max_length", (int,)),
    "pattern": ("pattern", (str,)),
    "multipleOf": ("multiple_of", (int, float)),
    "uniqueItems": ("unique_items", (bool,)),
    "nullable": ("nullable", (bool,)),
    "deprecated": ("deprecated", (bool,)),
    "readOnly": ("read_only", (bool,)),
    "writeOnly": ("write_only", (bool,)),
    "description": ("description", (str,)),
}

# Keys a Swagger 2.0 parameter shares with a schema.  ``description`` and
# ``required`` belong to the parameter itself, not to its schema.
_PARAMETER_SCHEMA_KEYS = frozenset(_SCALAR_FIELDS) - {
    "description",
    "nullable",
    "deprecated",
    "readOnly",
    "writeOnly",
}


def normalize_schema(fragment: Any, dialect: Dialect) -> NormalizedSchema:
    """Convert a schema object of either dialect into a :class:`UnifiedSchema`.

    Args:
        fragment: A resolved schema object.  ``None``, non-dict values and
            ``$ref`` dicts the resolver could not follow normalise to an
            empty schema.
        dialect: The dialect of the document *fragment* came from.

    Returns:
        The normalised schema, or *fragment* itself when it is a
        :class:`~apinav.models.CircularRef`.
    """
    if isinstance(fragment, CircularRef):
        return fragment
    if not isinstance(fragment, dict) or not is_resolved(fragment):
        return UnifiedSchema()

    return _NORMALIZERS[dialect](fragment, _SCALAR_FIELDS.keys())


def normalize_parameter_schema(parameter: dict[str, Any], dialect: Dialect) -> NormalizedSchema:
    """Return the schema of a (non-body) parameter.

    OpenAPI 3.x parameters, and Swagger 2.0 parameters that happen to carry
    a nested ``schema``, delegate to :func:`normalize_schema`.  Otherwise
    the Swagger 2.0 parameter is parameter-shaped and its flat fields are
    mapped directly.

    Args:
        parameter: A resolved parameter object.
        dialect: The dialect of the document.
    """
    if dialect is Dialect.OPENAPI3 or "schema" in parameter:
        return normalize_schema(parameter.get("schema"), dialect)

    return _normalize_swagger2(parameter, _PARAMETER_SCHEMA_KEYS)


# ---------------------------------------------------------------------------
# Dialect handlers
# ---------------------------------------------------------------------------


def _normalize_swagger2(fragment: dict[str, Any], keys: Iterable[str]) -> UnifiedSchema:
    """Swagger 2.0: schema fields plus the ``x-nullable``/``x-example`` extensions."""
    fields = _copy_scalars(fragment, keys)

    if "nullable" not in fields and isinstance(fragment.get("x-nullable"), bool):
        fields["nullable"] = fragment["x-nullable"]

    example = fragment.get("example")
    if example is None:
        example = fragment.get("x-example")
    fields["example"] = example

    return _finish(fragment, fields, Dialect.SWAGGER2)


def _normalize_openapi3(fragment: dict[str, Any], keys: Iterable[str]) -> UnifiedSchema:
    """OpenAPI 3.x: schema fields, folding 3.1 ``type`` arrays into ``nullable``."""
    fields = _copy_scalars(fragment, keys)

    type_value = fragment.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if isinstance(t, str) and t != "null"]
        if non_null:
            fields["type"] = non_null[0]
        if "null" in type_value:
            fields["nullable"] = True

    fields["example"] = fragment.get("example")
    return _finish(fragment, fields, Dialect.OPENAPI3)


_NORMALIZERS: dict[Dialect, Callable[[dict[str, Any], Iterable[str]], UnifiedSchema]] = {
    Dialect.SWAGGER2: _normalize_swagger2,
    Dialect.OPENAPI3: _normalize_openapi3,
}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _copy_scalars(fragment: dict[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Copy the recognised scalar constraint fields of *fragment*."""
    fields: dict[str, Any] = {}
    for key in keys:
        if key not in fragment:
            continue
        field_name, accepted = _SCALAR_FIELDS[key]
        value = fragment[key]
        # bool is an int subclass; keep it out of the numeric fields.
        if isinstance(value, bool) and bool not in accepted:
            value = None
        if isinstance(value, accepted):
            fields[field_name] = value
        elif value is not None:
            logger.debug("Dropping %s=%r: unexpected type", key, value)
    return fields


def _finish(fragment: dict[str, Any], fields: dict[str, Any], dialect: Dialect) -> UnifiedSchema:
    """Add ``default``, ``required``, ``items`` and ``properties`` and build the model."""
    fields["default"] = fragment.get("default")

    required = fragment.get("required")
    if isinstance(required, list):
        fields["required"] = [name for name in required if isinstance(name, str)]

    items = fragment.get("items")
    if items is not None and fields.get("type") in (None, "array"):
        fields["type"] = "array"
        fields["items"] = normalize_schema(items, dialect)

    properties = fragment.get("properties")
    if isinstance(properties, dict) and fields.get("type") in (None, "object"):
        fields["properties"] = {
            name: normalize_schema(prop, dialect) for name, prop in properties.items()
        }

    return UnifiedSchema(**fields)
