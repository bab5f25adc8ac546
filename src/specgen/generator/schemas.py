"""Typed schema parsing, body-schema extraction and parameter-schema synthesis.

Raw schema nodes from the document are converted once into the tagged
:data:`~specgen.models.Schema` union by :func:`parse_schema`.  References
inside schemas are *not* followed: they become
:class:`~specgen.models.ReferenceSchema` nodes, which is what the renderer
imports, and it keeps recursive model graphs finite.

Body schemas are looked up through :func:`extract_schema` with a
:class:`SchemaLocation`, instead of string paths such as
``"200.content.application/json.schema"``.  Absence is reported as ``None``,
never as an empty schema, so callers can tell "no body" from "any body".
"""

from __future__ import annotations

import enum
import json
from typing import Any, Mapping, Optional, Sequence

from specgen.exceptions import RecursiveSchemaError
from specgen.generator.naming import type_name
from specgen.generator.status import is_success, parse_status_code
from specgen.models import (
    ArraySchema,
    CompositeSchema,
    ObjectSchema,
    Parameter,
    PrimitiveSchema,
    ReferenceSchema,
    Schema,
)
from specgen.parser.resolver import (
    REF_KEY,
    ROOT_POINTER,
    Document,
    escape_segment,
    is_reference,
    resolve_chain,
)

JSON_MEDIA_TYPE = "application/json"

_COMPOSITIONS = ("allOf", "oneOf", "anyOf")


class SchemaLocation(str, enum.Enum):
    """Where a body schema lives inside an operation definition."""

    REQUEST_BODY = "request_body"
    """The JSON content schema of a ``requestBody`` object."""

    SUCCESS_RESPONSE = "success_response"
    """The JSON content schema of the success response in a ``responses`` map."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_schema(node: Any) -> Schema:
    """Convert a raw schema node into a typed :data:`~specgen.models.Schema`.

    Classification order: ``$ref``, then ``allOf``/``oneOf``/``anyOf``, then
    array (``type: array`` or bare ``items``), then object (``type: object``
    or bare ``properties``/``additionalProperties``), else primitive.  A
    node that is not a mapping is treated as the unconstrained schema.

    Raises:
        RecursiveSchemaError: If the node contains itself, which YAML
            anchors and aliases allow (``&node {properties: {child: *node}}``).
    """
    return _parse(node, ROOT_POINTER, frozenset())


def _parse(node: Any, pointer: str, ancestors: frozenset[int]) -> Schema:
    if not isinstance(node, Mapping):
        return PrimitiveSchema()
    if id(node) in ancestors:
        raise RecursiveSchemaError(pointer)
    ancestors = ancestors | {id(node)}

    source = dict(node)
    description = node.get("description") if isinstance(node.get("description"), str) else None

    if is_reference(node):
        ref = node[REF_KEY]
        return ReferenceSchema(ref=ref, name=type_name(ref), description=description, source=source)

    for composition in _COMPOSITIONS:
        members = node.get(composition)
        if isinstance(members, list) and members:
            return CompositeSchema(
                composition=composition,
                members=[
                    _parse(member, f"{pointer}/{composition}/{index}", ancestors)
                    for index, member in enumerate(members)
                ],
                description=description,
                source=source,
            )

    schema_type, nullable = _schema_type(node)

    if schema_type == "array" or (schema_type is None and "items" in node):
        return ArraySchema(
            items=_parse(node.get("items"), f"{pointer}/items", ancestors),
            nullable=nullable,
            description=description,
            source=source,
        )

    if schema_type == "object" or (
        schema_type is None and ("properties" in node or "additionalProperties" in node)
    ):
        properties = node.get("properties")
        if not isinstance(properties, Mapping):
            properties = {}
        required = node.get("required")
        additional = node.get("additionalProperties")
        return ObjectSchema(
            properties={
                str(name): _parse(value, f"{pointer}/properties/{escape_segment(str(name))}", ancestors)
                for name, value in properties.items()
            },
            required=[name for name in required if isinstance(name, str)]
            if isinstance(required, list)
            else [],
            additional_properties=_parse(additional, f"{pointer}/additionalProperties", ancestors)
            if isinstance(additional, Mapping)
            else None,
            nullable=nullable,
            description=description,
            source=source,
        )

    enum_values = node.get("enum")
    return PrimitiveSchema(
        type=schema_type,
        format=node.get("format") if isinstance(node.get("format"), str) else None,
        enum=list(enum_values) if isinstance(enum_values, list) else None,
        nullable=nullable,
        description=description,
        source=source,
    )


def _schema_type(node: Mapping[str, Any]) -> tuple[Optional[str], bool]:
    """Return ``(type, nullable)`` for a schema node.

    OpenAPI 3.1 allows ``type`` to be a list such as ``["string", "null"]``;
    the first non-null entry is the type and a ``"null"`` entry marks the
    schema nullable, like OpenAPI 3.0's ``nullable: true``.
    """
    nullable = node.get("nullable") is True
    type_value = node.get("type")

    if isinstance(type_value, list):
        nullable = nullable or "null" in type_value
        non_null = [str(t) for t in type_value if t != "null"]
        return (non_null[0] if non_null else None), nullable

    if isinstance(type_value, str):
        return type_value, nullable
    return None, nullable


# ---------------------------------------------------------------------------
# Content selection and extraction
# ---------------------------------------------------------------------------


def _base_media_type(media_type: str) -> str:
    return media_type.split(";", 1)[0].strip().lower()


def is_json_media_type(media_type: str) -> bool:
    """Whether *media_type* is ``application/json`` or a ``+json`` variant."""
    base = _base_media_type(media_type)
    return base == JSON_MEDIA_TYPE or base.endswith("+json")


def select_content(
    content: Any,
    preferred: Sequence[str] = (JSON_MEDIA_TYPE,),
) -> Optional[tuple[str, Any]]:
    """Pick one entry of a ``content`` map that declares a schema.

    Preference order: the media types in *preferred* (in order, parameters
    such as ``; charset=utf-8`` ignored), then any ``+json`` type, then the
    first entry with a schema.

    Returns:
        ``(declared_media_type, raw_schema_node)``, or ``None`` when no entry
        declares a schema.
    """
    if not isinstance(content, Mapping):
        return None

    candidates: dict[str, tuple[str, Any]] = {}
    for media_type, entry in content.items():
        if isinstance(entry, Mapping) and "schema" in entry:
            candidates.setdefault(_base_media_type(str(media_type)), (str(media_type), entry["schema"]))

    if not candidates:
        return None

    for media_type in preferred:
        hit = candidates.get(_base_media_type(media_type))
        if hit is not None:
            return hit

    for base, hit in candidates.items():
        if base.endswith("+json"):
            return hit

    return next(iter(candidates.values()))


def _json_schema_node(content: Any) -> Optional[Any]:
    selected = select_content(content)
    if selected is None or not is_json_media_type(selected[0]):
        return None
    return selected[1]


def extract_schema(
    document: Document,
    container: Any,
    location: SchemaLocation,
) -> Optional[Schema]:
    """Return the JSON body schema at *location* inside *container*, or ``None``.

    * ``REQUEST_BODY`` -- *container* is a ``requestBody`` object (or a
      reference to one); the ``application/json`` content schema is returned.
    * ``SUCCESS_RESPONSE`` -- *container* is a ``responses`` map; the JSON
      content schema of ``200`` is returned, else that of the lowest other
      success code that declares one.

    Non-JSON content, missing ``content`` and missing containers all yield
    ``None``.

    Raises:
        ReferenceResolutionError: If a referenced request body or response
            does not resolve.
        CyclicReferenceError: If such a reference chain loops.
    """
    if container is None:
        return None

    if location is SchemaLocation.REQUEST_BODY:
        body = resolve_chain(document, container)
        if not isinstance(body, Mapping):
            return None
        node = _json_schema_node(body.get("content"))
        return parse_schema(node) if node is not None else None

    if not isinstance(container, Mapping):
        return None

    success_keys = []
    for key in container:
        code = parse_status_code(key)
        if code is not None and is_success(code):
            success_keys.append((0 if code == 200 else 1, str(code), key))

    for _, _, key in sorted(success_keys, key=lambda item: item[:2]):
        response = resolve_chain(document, container[key])
        if not isinstance(response, Mapping):
            continue
        node = _json_schema_node(response.get("content"))
        if node is not None:
            return parse_schema(node)
    return None


# ---------------------------------------------------------------------------
# Synthesis and serialisation
# ---------------------------------------------------------------------------


def synthesize_params_schema(parameters: Sequence[Parameter]) -> Optional[ObjectSchema]:
    """Aggregate *parameters* into one object schema.

    ``required`` lists the names of required parameters and ``properties``
    maps each parameter name to its schema, both in input order.  An empty
    input yields ``None``, not an empty object schema.
    """
    if not parameters:
        return None

    required = [param.name for param in parameters if param.required]
    properties = {param.name: param.schema_ for param in parameters}
    source = {
        "type": "object",
        "required": required,
        "properties": {name: schema.source for name, schema in properties.items()},
    }
    return ObjectSchema(properties=properties, required=required, source=source)


def serialize_schema(schema: Optional[Schema]) -> Optional[str]:
    """Pretty-print a schema's source as two-space indented JSON.

    Values JSON cannot represent (dates decoded from YAML, for instance) are
    written with ``str``.
    """
    if schema is None:
        return None
    return json.dumps(schema.source, indent=2, ensure_ascii=False, default=str)
