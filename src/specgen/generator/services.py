"""Build every operation of a document and group them into services."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional

from specgen.exceptions import GenerationError
from specgen.generator.naming import service_file_name
from specgen.generator.operation import build_operation
from specgen.generator.parameters import classify_parameters
from specgen.models import ClassifiedParameters, GeneratorConfig, HTTPMethod, Operation, Service
from specgen.parser.resolver import Document

logger = logging.getLogger(__name__)


def iter_operations(document: Document) -> list[tuple[str, HTTPMethod, Mapping[str, Any]]]:
    """List ``(path, method, definition)`` for every operation in *document*.

    Paths keep document order; methods of one path follow
    :class:`~specgen.models.HTTPMethod` declaration order.
    """
    found = []
    for path, item in document.paths.items():
        if not isinstance(item, Mapping):
            continue
        for method in HTTPMethod:
            definition = item.get(method.value)
            if isinstance(definition, Mapping):
                found.append((str(path), method, definition))
    return found


def build_services(document: Document, config: Optional[GeneratorConfig] = None) -> list[Service]:
    """Build all operations and group them by service name.

    Services appear in the order their first operation is met; operations
    within a service keep document order.  With ``config.max_workers > 1``
    operations are built on a thread pool, which does not change the
    output.

    Raises:
        GenerationError: If any operation fails to build.  The error carries
            the failing operation's method and path.
    """
    config = config or GeneratorConfig()

    shared: dict[str, ClassifiedParameters] = {}
    jobs = []
    for path, method, definition in iter_operations(document):
        if path not in shared:
            item = document.paths[path]
            try:
                shared[path] = classify_parameters(document, item.get("parameters"), config=config)
            except GenerationError as exc:
                raise exc.with_operation(method.value, path, definition.get("operationId")) from exc
        jobs.append((path, method, definition, shared[path]))

    def _build(job: tuple[str, HTTPMethod, Mapping[str, Any], ClassifiedParameters]) -> Operation:
        path, method, definition, path_parameters = job
        return build_operation(document, path, method, definition, path_parameters, config)

    if config.max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            operations = list(pool.map(_build, jobs))
    else:
        operations = [_build(job) for job in jobs]

    grouped: dict[str, list[Operation]] = {}
    for operation in operations:
        grouped.setdefault(operation.service, []).append(operation)

    logger.debug("Built %d operation(s) in %d service(s)", len(operations), len(grouped))

    return [
        Service(
            name=name,
            file_name=service_file_name(name),
            operations=members,
            uses_version=any(config.version_expression in op.path for op in members),
        )
        for name, members in grouped.items()
    ]
