"""Canonical Pydantic models shared across all apinav modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- how a parse is tuned:
    :class:`CollisionPolicy` and :class:`ParserConfig`.

**Parser output models** -- produced by the specification parser and consumed
by the UI layer:
    :class:`Dialect`, :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`CircularRef`, :class:`UnifiedSchema`, :class:`Parameter`,
    :class:`MediaTypeContent`, :class:`RequestBody`, :class:`ResponseSchema`,
    :class:`SecuritySchema`, :class:`ExternalDocs`, :class:`TagInfo`,
    :class:`APIInfo`, :class:`Endpoint`, :class:`NavigationPage`,
    :class:`NavigationGroup` and :class:`ParsedSpec`.

**Sidebar models** -- navigation converted for a documentation sidebar:
    :class:`SidebarOpenAPIItem` and :class:`SidebarGroup`.

Field names are snake_case. Every field whose OpenAPI name is camelCase
carries an alias, so ``model_dump(by_alias=True, exclude_none=True)``
produces the JSON shape a renderer expects.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Parser Config ---


class CollisionPolicy(str, enum.Enum):
    """What to do when two endpoints map to the same navigable path.

    ``WARN`` keeps both paths as computed and logs the collision, ``ERROR``
    raises :class:`~apinav.exceptions.SlugCollisionError`, and ``SUFFIX``
    appends ``_2``, ``_3``, ... to later endpoints in document order.
    """

    WARN = "warn"
    ERROR = "error"
    SUFFIX = "suffix"


class ParserConfig(BaseModel):
    """Tuning knobs for a parse.

    Resolved by :func:`~apinav.config.resolve_config` from CLI flags,
    ``APINAV_*`` environment variables and ``./apinav.json``.
    """

    max_ref_depth: int = Field(
        default=50, ge=1, description="Nesting ceiling for $ref resolution"
    )
    nav_prefix: str = Field(
        default="/api_reference", description="Prefix of every navigable path"
    )
    default_tag: str = Field(
        default="default", description="Tag given to operations that declare none"
    )
    collision_policy: CollisionPolicy = Field(
        default=CollisionPolicy.WARN,
        description="How duplicate navigable paths are handled: warn, error, suffix",
    )


# --- Parser Output Models ---


class Dialect(str, enum.Enum):
    """The two specification formats the parser understands."""

    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


class HTTPMethod(str, enum.Enum):
    """HTTP methods walked in a path item, in walk order."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ParameterLocation(str, enum.Enum):
    """Locations where a rendered parameter can appear, per the ``in`` field."""

    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"


class CircularRef(BaseModel):
    """Marker left where a ``$ref`` re-enters a pointer already being resolved.

    Renderers show it as a link back to ``pointer`` instead of expanding it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pointer: str = Field(alias="$circularRef")


class UnifiedSchema(BaseModel):
    """Dialect-agnostic description of a schema.

    Built by :func:`~apinav.parser.normalizer.normalize_schema` from either an
    OpenAPI 3.x schema object or a Swagger 2.0 parameter/schema object.
    ``items`` is only set for arrays and ``properties`` only for objects (or
    schemas declaring properties without a type). Either may hold a
    :class:`CircularRef` instead of a nested schema.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None
    multiple_of: Optional[Union[int, float]] = Field(default=None, alias="multipleOf")
    unique_items: Optional[bool] = Field(default=None, alias="uniqueItems")
    default: Any = None
    example: Any = None
    nullable: Optional[bool] = None
    deprecated: Optional[bool] = None
    read_only: Optional[bool] = Field(default=None, alias="readOnly")
    write_only: Optional[bool] = Field(default=None, alias="writeOnly")
    description: Optional[str] = None
    required: Optional[list[str]] = None
    items: Optional[Union[UnifiedSchema, CircularRef]] = None
    properties: Optional[dict[str, Union[UnifiedSchema, CircularRef]]] = None


class Parameter(BaseModel):
    """A query, path, header or cookie parameter of an :class:`Endpoint`."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: ParameterLocation = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    schema_: Union[UnifiedSchema, CircularRef] = Field(
        default_factory=UnifiedSchema, alias="schema"
    )
    example: Any = None
    examples: Optional[dict[str, Any]] = None


class MediaTypeContent(BaseModel):
    """The schema carried under one media type of a body or response."""

    model_config = ConfigDict(populate_by_name=True)

    schema_: Union[UnifiedSchema, CircularRef] = Field(
        default_factory=UnifiedSchema, alias="schema"
    )


class RequestBody(BaseModel):
    """Request payload of an :class:`Endpoint`, keyed by media type."""

    description: Optional[str] = None
    required: bool = False
    content: dict[str, MediaTypeContent] = Field(default_factory=dict)


class ResponseSchema(BaseModel):
    """One status-code entry of an endpoint's responses."""

    description: str = ""
    content: Optional[dict[str, MediaTypeContent]] = None


class SecuritySchema(BaseModel):
    """A security scheme declared at document level.

    Read from ``components.securitySchemes`` (OpenAPI 3.x) or
    ``securityDefinitions`` (Swagger 2.0). Only the fields relevant to the
    scheme ``type`` are populated.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = None  # apiKey, http, basic, oauth2, openIdConnect
    name: Optional[str] = None
    location: Optional[str] = Field(default=None, alias="in")
    scheme: Optional[str] = None
    bearer_format: Optional[str] = Field(default=None, alias="bearerFormat")
    description: Optional[str] = None
    flows: Optional[dict[str, Any]] = None
    openid_connect_url: Optional[str] = Field(default=None, alias="openIdConnectUrl")


class ExternalDocs(BaseModel):
    """An *External Documentation Object*."""

    url: Optional[str] = None
    description: Optional[str] = None


class TagInfo(BaseModel):
    """A tag declared in the document's top-level ``tags`` list."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_url: Optional[str] = None
    license_name: Optional[str] = None
    license_url: Optional[str] = None


class Endpoint(BaseModel):
    """A single parsed operation (one path template + HTTP method pair).

    ``security`` is the effective requirement list: the operation's own when
    it declares one, otherwise the document's global list (``None`` when
    neither exists). ``declared_security`` keeps what the operation itself
    said: ``None`` means "inherit", ``[]`` means "explicitly no auth".

    ``security_schemas`` is the document-level map, shared by reference
    between every endpoint of one parse.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: Optional[str] = None
    description: Optional[str] = None
    method: HTTPMethod
    path: str
    deprecated: bool = False
    tags: list[str] = Field(min_length=1)
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, ResponseSchema] = Field(default_factory=dict)
    base_url: str = Field(default="", alias="baseUrl")
    security: Optional[list[dict[str, list[str]]]] = None
    declared_security: Optional[list[dict[str, list[str]]]] = Field(
        default=None, alias="declaredSecurity"
    )
    security_schemas: dict[str, SecuritySchema] = Field(
        default_factory=dict, alias="securitySchemas"
    )
    operation_id: Optional[str] = Field(default=None, alias="operationId")


class NavigationPage(BaseModel):
    """A navigable endpoint page."""

    type: Literal["page"] = "page"
    title: str
    path: str
    method: Optional[HTTPMethod] = None


class NavigationGroup(BaseModel):
    """A tag group. Groups only ever contain pages."""

    type: Literal["group"] = "group"
    title: str
    children: list[NavigationPage] = Field(default_factory=list)


NavigationNode = Annotated[
    Union[NavigationPage, NavigationGroup], Field(discriminator="type")
]


class ParsedSpec(BaseModel):
    """Complete parsed representation of one specification document.

    Produced by :func:`~apinav.parser.extractor.extract_spec` and cached by
    :class:`~apinav.parser.spec_parser.SpecParser` under ``cache_key``.

    See Also:
        :class:`Endpoint`: Individual operation within the document.
        :class:`NavigationGroup`: One tag group of the navigation tree.
    """

    info: APIInfo
    dialect: Dialect
    spec_version: str = Field(
        description="Version marker as written (e.g. '2.0', '3.0.3', '3.1.0')"
    )
    base_url: str = ""
    endpoints: list[Endpoint] = Field(default_factory=list)
    navigation: list[NavigationNode] = Field(default_factory=list)
    security_schemas: dict[str, SecuritySchema] = Field(default_factory=dict)
    tags: list[TagInfo] = Field(default_factory=list)
    cache_key: Optional[str] = None


# --- Sidebar Models ---


class SidebarOpenAPIItem(BaseModel):
    """A sidebar entry pointing at one endpoint page of a loaded document."""

    type: Literal["openapi"] = "openapi"
    title: str
    page: str
    method: Optional[HTTPMethod] = None
    spec_path: str


class SidebarGroup(BaseModel):
    """A sidebar group holding endpoint entries of one tag."""

    type: Literal["group"] = "group"
    title: str
    children: list[SidebarOpenAPIItem] = Field(default_factory=list)
