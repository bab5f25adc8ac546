"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specgen.exceptions.SpecgenError` subclass.
Build scripts can inspect the exit code to tell a broken document apart
from a document that loads but cannot be turned into operations.

Example::

    $ specgen operations broken.yaml
    $ echo $?
    8   # EXIT_GENERATION_ERROR -- a $ref did not resolve
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed or validated."""

EXIT_GENERATION_ERROR = 8
"""The document loaded but an operation could not be built from it."""
