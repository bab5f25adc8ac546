"""Turn an operation's ``responses`` map into results, errors and a header.

Rules applied by :func:`resolve_responses`:

* **results** are the success responses (``2xx`` codes and the ``2XX``
  range) in declaration order.  Without any, the ``default`` response is the
  result; without that either, a single void ``200`` result is produced.
* **errors** map every declared status that is not a result to its
  description, falling back to the standard reason phrase.
* **response_header** is set only when the first result declares exactly
  one header.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from specgen.generator.naming import clean_comment, header_name
from specgen.generator.schemas import is_json_media_type, parse_schema, select_content
from specgen.generator.status import (
    DEFAULT_STATUS,
    is_error,
    is_success,
    parse_status_code,
    reason_phrase,
)
from specgen.models import GeneratorConfig, ResponseResolution, Result, StatusCode
from specgen.parser.resolver import Document, resolve_chain

logger = logging.getLogger(__name__)


def resolve_responses(
    document: Document,
    responses: Any,
    config: Optional[GeneratorConfig] = None,
) -> ResponseResolution:
    """Resolve a ``responses`` map.

    Args:
        document: The document the responses belong to.
        responses: Status key to response object (or reference) map.  A
            missing map is treated as empty.
        config: Generator options; defaults are used when omitted.

    Returns:
        A :class:`~specgen.models.ResponseResolution`.

    Raises:
        ReferenceResolutionError: If a response reference does not resolve.
        CyclicReferenceError: If a response reference chain loops.

    Example::

        resolution = resolve_responses(doc, {
            "200": {"description": "OK", "headers": {"X-Rate-Limit": {}}},
            "404": {"description": "Not Found"},
        })
        resolution.errors           # {404: "Not Found"}
        resolution.response_header  # "X-Rate-Limit"
    """
    config = config or GeneratorConfig()
    if not isinstance(responses, Mapping):
        responses = {}

    declared: list[Result] = []
    for key, node in responses.items():
        code = parse_status_code(key)
        if code is None:
            logger.warning("Skipping response with invalid status key %r", key)
            continue
        declared.append(_build_result(document, code, node, config))

    results = [result for result in declared if is_success(result.status_code)]
    if not results:
        results = [result for result in declared if result.status_code == DEFAULT_STATUS]
    if not results:
        results = [Result(status_code=200)]

    result_codes = {result.status_code for result in results}
    errors: dict[StatusCode, str] = {
        result.status_code: result.description or reason_phrase(result.status_code)
        for result in declared
        if result.status_code not in result_codes
    }

    response_header = None
    if len(results[0].headers) == 1:
        response_header = header_name(results[0].headers[0])

    imports = dict.fromkeys(
        ref.name
        for result in results
        if result.schema_ is not None
        for ref in result.schema_.references()
    )

    return ResponseResolution(
        results=results,
        responses=declared,
        errors=errors,
        response_header=response_header,
        imports=list(imports),
    )


def _build_result(document: Document, code: StatusCode, node: Any, config: GeneratorConfig) -> Result:
    definition = resolve_chain(document, node)
    if not isinstance(definition, Mapping):
        definition = {}

    schema = None
    selected = select_content(definition.get("content"), config.preferred_media_types)
    if selected is not None and is_json_media_type(selected[0]):
        schema = parse_schema(selected[1])

    headers = definition.get("headers")
    return Result(
        status_code=code,
        description=clean_comment(definition.get("description")),
        schema_=schema,
        is_error=is_error(code),
        headers=[str(name) for name in headers] if isinstance(headers, Mapping) else [],
    )
