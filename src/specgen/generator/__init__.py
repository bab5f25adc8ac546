"""Operation generator -- turn an indexed document into canonical records.

This sub-package is the second half of the specgen pipeline: taking a
:class:`~specgen.parser.resolver.Document` and producing one
:class:`~specgen.models.Operation` per path + method pair, grouped into
:class:`~specgen.models.Service` records for a code renderer.

Typical usage::

    from specgen.generator import build_services
    from specgen.parser import load_document

    for service in build_services(load_document("openapi.yaml")):
        print(service.name, [op.name for op in service.operations])

Sub-modules:

* :mod:`~specgen.generator.naming` -- Pure identifier and file-name helpers.
* :mod:`~specgen.generator.schemas` -- Typed schema parsing, body-schema
  extraction and parameter-schema synthesis.
* :mod:`~specgen.generator.parameters` -- Parameter classification by
  location, body synthesis and required-first ordering.
* :mod:`~specgen.generator.responses` -- Results, error table and response
  header from a ``responses`` map.
* :mod:`~specgen.generator.operation` -- Assembly of a single operation.
* :mod:`~specgen.generator.services` -- Whole-document build and grouping.
"""

from specgen.generator.operation import build_operation, rewrite_path
from specgen.generator.parameters import classify_parameters, sort_by_required
from specgen.generator.responses import resolve_responses
from specgen.generator.schemas import (
    SchemaLocation,
    extract_schema,
    parse_schema,
    select_content,
    serialize_schema,
    synthesize_params_schema,
)
from specgen.generator.services import build_services, iter_operations

__all__ = [
    "SchemaLocation",
    "build_operation",
    "build_services",
    "classify_parameters",
    "extract_schema",
    "iter_operations",
    "parse_schema",
    "resolve_responses",
    "rewrite_path",
    "select_content",
    "serialize_schema",
    "sort_by_required",
    "synthesize_params_schema",
]
