"""OpenAPI document input -- load, index, and resolve ``$ref`` pointers.

This sub-package is the first half of the specgen pipeline: turning a raw
OpenAPI 3.x document (JSON or YAML, local file or remote URL) into an indexed,
read-only :class:`~specgen.parser.resolver.Document` the generator can query.

Typical usage::

    from specgen.parser import load_document, resolve

    doc = load_document("https://petstore3.swagger.io/api/v3/openapi.json")
    pet = resolve(doc, "#/components/schemas/Pet")

Sub-modules:

* :mod:`~specgen.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specgen.parser.resolver` -- The pointer-indexed document, single
  level ``$ref`` resolution and cycle-checked chain resolution.
"""

from specgen.parser.loader import load_document, load_spec, validate_openapi_version
from specgen.parser.resolver import Document, is_reference, resolve, resolve_chain

__all__ = [
    "Document",
    "is_reference",
    "load_document",
    "load_spec",
    "resolve",
    "resolve_chain",
    "validate_openapi_version",
]
