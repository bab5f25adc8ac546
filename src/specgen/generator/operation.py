"""Assemble one :class:`~specgen.models.Operation` from a path + method pair.

The assembler is the only generator stage that knows which operation it is
working on, so it is also where engine errors get their context: any
:class:`~specgen.exceptions.GenerationError` raised while building is
re-raised with the method, path and ``operationId`` attached.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Union

from specgen.exceptions import GenerationError
from specgen.generator.naming import (
    clean_comment,
    fallback_operation_name,
    operation_name,
    path_param_name,
    service_class_name,
    service_file_name,
)
from specgen.generator.parameters import classify_parameters, sort_by_required
from specgen.generator.responses import resolve_responses
from specgen.generator.schemas import (
    SchemaLocation,
    extract_schema,
    serialize_schema,
    synthesize_params_schema,
)
from specgen.models import (
    ClassifiedParameters,
    GeneratorConfig,
    HTTPMethod,
    Operation,
    OperationSchema,
    Parameter,
)
from specgen.parser.resolver import Document

logger = logging.getLogger(__name__)

_PATH_VARIABLE_RE = re.compile(r"\{([^{}]+)\}")


def rewrite_path(path: str, config: Optional[GeneratorConfig] = None) -> str:
    """Normalise the variables of a path template.

    Every ``{name}`` becomes ``{normalized}``; the variable whose normalized
    name is the configured version parameter is replaced by the version
    expression.  Literal segments are left alone.

    Example::

        >>> rewrite_path("/v{api-version}/users/{user_id}")
        '/v${OpenAPI.VERSION}/users/{userId}'
    """
    config = config or GeneratorConfig()

    def _replace(match: re.Match[str]) -> str:
        name = path_param_name(match.group(1))
        if name == config.version_parameter:
            return config.version_expression
        return f"{{{name}}}"

    return _PATH_VARIABLE_RE.sub(_replace, path)


def build_operation(
    document: Document,
    path: str,
    method: Union[HTTPMethod, str],
    definition: Mapping[str, Any],
    path_parameters: Optional[ClassifiedParameters] = None,
    config: Optional[GeneratorConfig] = None,
) -> Operation:
    """Build the operation declared at ``paths[path][method]``.

    Args:
        document: The document the operation belongs to.
        path: The path template as declared (e.g. ``"/users/{user_id}"``).
        method: The HTTP method.
        definition: The raw operation object.
        path_parameters: Parameters declared on the path item, already
            classified.  Operation-level parameters with the same
            ``(prop, location)`` override them.
        config: Generator options; defaults are used when omitted.

    Returns:
        The assembled :class:`~specgen.models.Operation`.

    Raises:
        GenerationError: Any engine error, bound to this operation.
    """
    config = config or GeneratorConfig()
    method = method if isinstance(method, HTTPMethod) else HTTPMethod(method.lower())
    operation_id = definition.get("operationId")
    operation_id = str(operation_id) if operation_id is not None else None

    try:
        operation = _assemble(document, path, method, definition, path_parameters, config)
    except GenerationError as exc:
        raise exc.with_operation(method.value, path, operation_id) from exc

    logger.debug(
        "Built %s.%s (%s %s) with %d parameter(s)",
        operation.service,
        operation.name,
        method.value.upper(),
        operation.path,
        len(operation.parameters),
    )
    return operation


def _assemble(
    document: Document,
    path: str,
    method: HTTPMethod,
    definition: Mapping[str, Any],
    path_parameters: Optional[ClassifiedParameters],
    config: GeneratorConfig,
) -> Operation:
    base = path_parameters or ClassifiedParameters()
    own = classify_parameters(
        document,
        definition.get("parameters"),
        definition.get("requestBody"),
        config,
    )
    own_declared = [param for param in own.declared if param != own.body]
    overridden = {(param.prop, param.location) for param in own_declared}

    def _merge(inherited: list[Parameter], declared: list[Parameter]) -> list[Parameter]:
        kept = [param for param in inherited if (param.prop, param.location) not in overridden]
        return kept + declared

    inherited = [param for param in base.parameters if param != base.body]
    merged = _merge(inherited, own_declared)
    body = own.body if own.body is not None else base.body
    if body is not None:
        merged.append(body)
    parameters = sort_by_required(merged)

    responses = resolve_responses(document, definition.get("responses"), config)

    imports = dict.fromkeys(
        [ref.name for param in merged for ref in param.schema_.references()] + responses.imports
    )

    rewritten = rewrite_path(path, config)
    tags = definition.get("tags")
    tag = str(tags[0]) if isinstance(tags, list) and tags else config.default_service
    service = service_class_name(tag, config.service_suffix)

    operation_id = definition.get("operationId")
    name = operation_name(
        str(operation_id) if operation_id else fallback_operation_name(method.value, rewritten)
    )

    schema = OperationSchema(
        request=serialize_schema(
            extract_schema(document, definition.get("requestBody"), SchemaLocation.REQUEST_BODY)
        ),
        response=serialize_schema(
            extract_schema(document, definition.get("responses"), SchemaLocation.SUCCESS_RESPONSE)
        ),
        params=serialize_schema(synthesize_params_schema(own_declared)),
    )

    return Operation(
        service=service,
        name=name,
        file_name=service_file_name(name),
        summary=clean_comment(definition.get("summary")),
        description=clean_comment(definition.get("description")),
        deprecated=definition.get("deprecated") is True,
        method=method,
        path=rewritten,
        parameters=parameters,
        parameters_path=_merge(base.path, own.path),
        parameters_query=_merge(base.query, own.query),
        parameters_header=_merge(base.header, own.header),
        parameters_cookie=_merge(base.cookie, own.cookie),
        parameters_form=_merge(base.form, own.form),
        parameters_body=body,
        results=responses.results,
        responses=responses.responses,
        errors=responses.errors,
        response_header=responses.response_header,
        imports=list(imports),
        schema_=schema,
    )
