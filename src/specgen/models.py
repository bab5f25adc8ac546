"""Canonical Pydantic models shared across all specgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration** -- :class:`GeneratorConfig`, loaded by
:mod:`specgen.config` from JSON files and ``SPECGEN_*`` environment variables.

**Schema tree** -- a tagged union over :class:`PrimitiveSchema`,
:class:`ObjectSchema`, :class:`ArraySchema`, :class:`ReferenceSchema` and
:class:`CompositeSchema`, discriminated by the ``kind`` field. Every node keeps
the raw ``source`` fragment it was parsed from so the renderer receives the
document's own JSON, not a re-encoding.

**Generator output** -- :class:`Parameter`, :class:`Result`,
:class:`OperationSchema`, :class:`Operation` and :class:`Service`, plus the
intermediate :class:`ClassifiedParameters` and :class:`ResponseResolution`
records passed between generator stages.

Output records are frozen: they are built once per generation run and handed
to the renderer unchanged.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


DEFAULT_MEDIA_TYPES: tuple[str, ...] = (
    "application/json",
    "application/json-patch+json",
    "application/merge-patch+json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)


class GeneratorConfig(BaseModel):
    """Options controlling how operations are named and assembled.

    Loaded and merged by :func:`~specgen.config.resolve_config`. Every value
    has a default matching the renderer contract, so an empty config file is
    valid.

    Example::

        GeneratorConfig(
            default_service="Api",
            version_expression="${OpenAPI.VERSION}",
            max_workers=4,
        )
    """

    default_service: str = Field(
        default="Service", description="Tag used for operations that declare none"
    )
    service_suffix: str = Field(
        default="Service", description="Suffix appended to service class names"
    )
    version_parameter: str = Field(
        default="apiVersion",
        description="Normalized name of the path variable carrying the API version",
    )
    version_expression: str = Field(
        default="${OpenAPI.VERSION}",
        description="Runtime configuration expression substituted for the version variable",
    )
    preferred_media_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MEDIA_TYPES),
        description="Content types searched, in order, for body schemas",
    )
    max_workers: int = Field(
        default=1, ge=1, description="Threads used to build operations"
    )


# --- Schema tree ---


class _SchemaNode(BaseModel):
    """Fields and traversal shared by every schema variant."""

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    source: dict[str, Any] = Field(default_factory=dict, repr=False)

    def children(self) -> list[Schema]:
        """Direct sub-schemas, in declaration order."""
        return []

    def references(self) -> Iterator[ReferenceSchema]:
        """Yield every reference reachable from this node without dereferencing.

        Traversal is depth-first in declaration order, so the first
        occurrence of a model name is the first one a reader of the source
        would meet. Duplicates are yielded; de-duplication is the caller's
        concern.
        """
        for child in self.children():
            yield from child.references()


class PrimitiveSchema(_SchemaNode):
    """A scalar schema. ``type`` is ``None`` for an unconstrained ("any") schema."""

    kind: Literal["primitive"] = "primitive"
    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    nullable: bool = False


class ObjectSchema(_SchemaNode):
    """An object schema with named properties.

    ``required`` keeps the declaration order of the source so that
    serialised output stays stable.
    """

    kind: Literal["object"] = "object"
    properties: dict[str, Schema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: Optional[Schema] = None
    nullable: bool = False

    def children(self) -> list[Schema]:
        nodes = list(self.properties.values())
        if self.additional_properties is not None:
            nodes.append(self.additional_properties)
        return nodes


class ArraySchema(_SchemaNode):
    """A homogeneous array schema."""

    kind: Literal["array"] = "array"
    items: Schema
    nullable: bool = False

    def children(self) -> list[Schema]:
        return [self.items]


class ReferenceSchema(_SchemaNode):
    """A ``$ref`` to a reusable schema, kept unresolved.

    ``name`` is the import name of the target model (e.g. ``User`` for
    ``#/components/schemas/User``).
    """

    kind: Literal["reference"] = "reference"
    ref: str
    name: str

    def references(self) -> Iterator[ReferenceSchema]:
        yield self


class CompositeSchema(_SchemaNode):
    """A ``oneOf`` / ``anyOf`` / ``allOf`` composition."""

    kind: Literal["composite"] = "composite"
    composition: Literal["oneOf", "anyOf", "allOf"]
    members: list[Schema] = Field(default_factory=list)

    def children(self) -> list[Schema]:
        return list(self.members)


Schema = Annotated[
    Union[PrimitiveSchema, ObjectSchema, ArraySchema, ReferenceSchema, CompositeSchema],
    Field(discriminator="kind"),
]

for _model in (PrimitiveSchema, ObjectSchema, ArraySchema, ReferenceSchema, CompositeSchema):
    _model.model_rebuild()


# --- Generator output ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on OpenAPI path-item objects.

    Declaration order is the order in which operations of one path are
    built, so generated services list them predictably.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Transport locations a parameter can be sent in."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    FORM = "form"
    BODY = "body"


StatusCode = Union[int, str]
"""An HTTP status code, a range such as ``"2XX"``, or ``"default"``."""


class Parameter(BaseModel):
    """A single classified operation parameter.

    ``name`` is the wire name exactly as declared (used to build the HTTP
    request); ``prop`` is the normalized identifier the renderer uses for the
    generated argument. ``media_type`` is only set on the synthesized body
    parameter.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    prop: str
    location: ParameterLocation
    required: bool = False
    schema_: Schema = Field(default_factory=PrimitiveSchema, alias="schema")
    description: Optional[str] = None
    deprecated: bool = False
    default: Any = None
    media_type: Optional[str] = None


class Result(BaseModel):
    """One response variant of an operation.

    A ``schema`` of ``None`` is the void marker: the response declares no
    JSON content.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: StatusCode
    description: Optional[str] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    is_error: bool = False
    headers: list[str] = Field(default_factory=list)

    @property
    def is_void(self) -> bool:
        """Whether the response carries no body schema."""
        return self.schema_ is None


class OperationSchema(BaseModel):
    """Serialized JSON schema text handed to the renderer for validation code."""

    model_config = ConfigDict(frozen=True)

    request: Optional[str] = None
    response: Optional[str] = None
    params: Optional[str] = None


class ClassifiedParameters(BaseModel):
    """Parameters split by location, as produced by the parameter classifier.

    ``parameters`` is the unified list in required-first order and includes
    ``body`` when present; ``declared`` holds the same parameters in input
    order. Callers also use this record to supply path-level shared
    parameters to the operation assembler.
    """

    model_config = ConfigDict(frozen=True)

    parameters: list[Parameter] = Field(default_factory=list)
    declared: list[Parameter] = Field(default_factory=list)
    path: list[Parameter] = Field(default_factory=list)
    query: list[Parameter] = Field(default_factory=list)
    header: list[Parameter] = Field(default_factory=list)
    cookie: list[Parameter] = Field(default_factory=list)
    form: list[Parameter] = Field(default_factory=list)
    body: Optional[Parameter] = None
    imports: list[str] = Field(default_factory=list)


class ResponseResolution(BaseModel):
    """Results, error table and designated header derived from a responses map."""

    model_config = ConfigDict(frozen=True)

    results: list[Result] = Field(default_factory=list)
    responses: list[Result] = Field(default_factory=list)
    errors: dict[StatusCode, str] = Field(default_factory=dict)
    response_header: Optional[str] = None
    imports: list[str] = Field(default_factory=list)


class Operation(BaseModel):
    """A fully assembled operation (one path + HTTP method pair).

    This is the record the rendering stage consumes. ``path`` is the
    rewritten template (normalized variable names, version sentinel
    replaced); ``imports`` lists referenced model names once each, in the
    order they were first met across parameters and then results.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    service: str
    name: str
    file_name: str
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    method: HTTPMethod
    path: str
    parameters: list[Parameter] = Field(default_factory=list)
    parameters_path: list[Parameter] = Field(default_factory=list)
    parameters_query: list[Parameter] = Field(default_factory=list)
    parameters_header: list[Parameter] = Field(default_factory=list)
    parameters_cookie: list[Parameter] = Field(default_factory=list)
    parameters_form: list[Parameter] = Field(default_factory=list)
    parameters_body: Optional[Parameter] = None
    results: list[Result] = Field(default_factory=list)
    responses: list[Result] = Field(default_factory=list)
    errors: dict[StatusCode, str] = Field(default_factory=dict)
    response_header: Optional[str] = None
    imports: list[str] = Field(default_factory=list)
    schema_: OperationSchema = Field(default_factory=OperationSchema, alias="schema")


class Service(BaseModel):
    """Operations grouped under one service class.

    ``uses_version`` tells the renderer whether any operation path embeds the
    version configuration expression, so it can import the runtime config.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    file_name: str
    operations: list[Operation] = Field(default_factory=list)
    uses_version: bool = False
