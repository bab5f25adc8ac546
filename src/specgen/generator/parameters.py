"""Classify declared parameters and the request body by transport location.

:func:`classify_parameters` is the single entry point.  It resolves every
parameter reference, turns each definition into a
:class:`~specgen.models.Parameter`, synthesizes one body parameter from the
``requestBody`` (if any), and returns the lot as a
:class:`~specgen.models.ClassifiedParameters`.

Two parameters may share a name as long as they travel in different
locations (``id`` in the path and ``id`` in the query is fine); the same
``(prop, location)`` pair twice is a :class:`~specgen.exceptions.ParameterConflict`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from specgen.exceptions import ParameterConflict, UnknownOperationLocation
from specgen.generator.naming import clean_comment, path_param_name
from specgen.generator.schemas import JSON_MEDIA_TYPE, parse_schema, select_content
from specgen.models import (
    ClassifiedParameters,
    GeneratorConfig,
    Parameter,
    ParameterLocation,
    PrimitiveSchema,
    Schema,
)
from specgen.parser.resolver import Document, resolve_chain

logger = logging.getLogger(__name__)

_LOCATIONS: dict[str, ParameterLocation] = {
    "path": ParameterLocation.PATH,
    "query": ParameterLocation.QUERY,
    "header": ParameterLocation.HEADER,
    "cookie": ParameterLocation.COOKIE,
    "formData": ParameterLocation.FORM,
    "form": ParameterLocation.FORM,
    "body": ParameterLocation.BODY,
}

_FORM_MEDIA_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})

REQUEST_BODY_NAME = "requestBody"
FORM_DATA_NAME = "formData"

# Keys of a parameter object that describe its value when no ``schema``
# is declared (Swagger-style ``formData`` parameters).
_INLINE_SCHEMA_KEYS = ("type", "format", "enum", "items", "nullable")


def sort_by_required(parameters: Sequence[Parameter]) -> list[Parameter]:
    """Return a new list with required parameters first.

    The sort is stable: relative order inside the required and optional
    partitions is the input order.
    """
    return sorted(parameters, key=lambda param: not param.required)


def classify_parameters(
    document: Document,
    declared: Optional[Sequence[Any]],
    request_body: Any = None,
    config: Optional[GeneratorConfig] = None,
) -> ClassifiedParameters:
    """Resolve and partition parameter definitions.

    Args:
        document: The document that *declared* and *request_body* belong to.
        declared: The raw ``parameters`` array of a path item or operation.
            Entries may be ``$ref`` objects.
        request_body: The raw ``requestBody`` object (or a reference to one).
        config: Generator options; defaults are used when omitted.

    Returns:
        The unified required-first list plus per-location lists, the body
        parameter and the model names referenced by parameter schemas.

    Raises:
        UnknownOperationLocation: If a parameter's ``in`` is not supported.
        ParameterConflict: If two parameters share ``(prop, location)`` or
            more than one body parameter is declared.
        ReferenceResolutionError: If a parameter reference does not resolve.
        CyclicReferenceError: If a parameter reference chain loops.
    """
    config = config or GeneratorConfig()

    by_location: dict[ParameterLocation, list[Parameter]] = {
        location: [] for location in ParameterLocation if location is not ParameterLocation.BODY
    }
    ordered: list[Parameter] = []
    seen: set[tuple[str, ParameterLocation]] = set()
    body: Optional[Parameter] = None

    candidates = [_parse_parameter(document, node, config) for node in declared or ()]
    if request_body is not None:
        candidates.append(body_parameter(document, request_body, config))

    for param in candidates:
        if param is None:
            continue

        is_body = param.location is ParameterLocation.BODY or param.media_type is not None
        if is_body:
            if body is not None:
                raise ParameterConflict(param.prop, param.location.value)
            body = param
        else:
            key = (param.prop, param.location)
            if key in seen:
                raise ParameterConflict(param.prop, param.location.value)
            seen.add(key)
            by_location[param.location].append(param)
        ordered.append(param)

    imports = dict.fromkeys(ref.name for param in ordered for ref in param.schema_.references())

    return ClassifiedParameters(
        parameters=sort_by_required(ordered),
        declared=ordered,
        path=by_location[ParameterLocation.PATH],
        query=by_location[ParameterLocation.QUERY],
        header=by_location[ParameterLocation.HEADER],
        cookie=by_location[ParameterLocation.COOKIE],
        form=by_location[ParameterLocation.FORM],
        body=body,
        imports=list(imports),
    )


def _parse_parameter(document: Document, node: Any, config: GeneratorConfig) -> Optional[Parameter]:
    """Build a :class:`Parameter` from one entry of a ``parameters`` array.

    Returns ``None`` for entries that are not parameter objects and for the
    path parameter carrying the API version.
    """
    definition = resolve_chain(document, node)
    if not isinstance(definition, Mapping):
        logger.warning("Skipping parameter entry that is not an object: %r", definition)
        return None

    name = str(definition.get("name", ""))
    raw_location = definition.get("in")
    location = _LOCATIONS.get(raw_location) if isinstance(raw_location, str) else None
    if location is None:
        raise UnknownOperationLocation(name, str(raw_location))

    prop = path_param_name(name)
    if location is ParameterLocation.PATH and prop == config.version_parameter:
        logger.debug("Dropping version path parameter '%s'", name)
        return None

    schema = _parameter_schema(definition, config)
    default = definition.get("default", schema.source.get("default"))

    return Parameter(
        name=name,
        prop=prop,
        location=location,
        required=location is ParameterLocation.PATH or definition.get("required") is True,
        schema_=schema,
        description=clean_comment(definition.get("description")),
        deprecated=definition.get("deprecated") is True,
        default=default,
    )


def _parameter_schema(definition: Mapping[str, Any], config: GeneratorConfig) -> Schema:
    if "schema" in definition:
        return parse_schema(definition["schema"])

    selected = select_content(definition.get("content"), [JSON_MEDIA_TYPE, *config.preferred_media_types])
    if selected is not None:
        return parse_schema(selected[1])

    inline = {key: definition[key] for key in _INLINE_SCHEMA_KEYS if key in definition}
    if inline:
        return parse_schema(inline)
    return PrimitiveSchema()


def body_parameter(document: Document, request_body: Any, config: Optional[GeneratorConfig] = None) -> Parameter:
    """Synthesize the single body parameter for a ``requestBody``.

    JSON bodies become ``requestBody`` in location ``body``; form-encoded and
    multipart bodies become ``formData`` in location ``form``.  A body with no
    content schema still yields a parameter, carrying the unconstrained
    schema.

    Raises:
        ReferenceResolutionError: If *request_body* is a reference that does
            not resolve.
    """
    config = config or GeneratorConfig()
    definition = resolve_chain(document, request_body)
    if not isinstance(definition, Mapping):
        definition = {}

    selected = select_content(definition.get("content"), [JSON_MEDIA_TYPE, *config.preferred_media_types])
    media_type: Optional[str] = None
    schema: Schema = PrimitiveSchema()
    if selected is not None:
        media_type, node = selected
        schema = parse_schema(node)
    elif isinstance(definition.get("content"), Mapping) and definition["content"]:
        media_type = str(next(iter(definition["content"])))

    name, location = REQUEST_BODY_NAME, ParameterLocation.BODY
    if media_type is not None and media_type.split(";", 1)[0].strip().lower() in _FORM_MEDIA_TYPES:
        name, location = FORM_DATA_NAME, ParameterLocation.FORM

    return Parameter(
        name=name,
        prop=name,
        location=location,
        required=definition.get("required") is True,
        schema_=schema,
        description=clean_comment(definition.get("description")),
        media_type=media_type or JSON_MEDIA_TYPE,
    )
