"""Exception hierarchy for specgen.

All exceptions inherit from :class:`SpecgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specgen.exit_codes`.
The top-level error handler in :func:`specgen.app.main` catches
``SpecgenError`` and exits with the appropriate code.

The engine's fatal conditions derive from :class:`GenerationError`. They are
raised deep inside the resolver or classifier, where the owning operation is
unknown, and re-raised by the operation assembler with the method, path and
operation id attached via :meth:`GenerationError.with_operation`.

Subclass hierarchy::

    SpecgenError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- SpecParseError             (exit 7)
    +-- ConfigError                (exit 1)
    +-- GenerationError            (exit 8)
        +-- ReferenceResolutionError
        +-- CyclicReferenceError
        +-- RecursiveSchemaError
        +-- ParameterConflict
        +-- UnknownOperationLocation
"""

from __future__ import annotations

from typing import Optional, Sequence

from specgen.exit_codes import (
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecgenError(Exception):
    """Base exception for all specgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecgenError):
    """Raised for invalid CLI arguments (e.g. an unknown operation name)."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecgenError):
    """Raised when the OpenAPI document cannot be loaded or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecgenError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE


class GenerationError(SpecgenError):
    """Base class for conditions that abort building a single operation.

    The message is composed from a ``detail`` string plus, once bound, the
    owning operation's context, e.g.::

        Cannot resolve $ref '#/components/schemas/Usr': key 'Usr' not found
        [in GET /users/{userId}, operationId: getUser]

    Args:
        detail: Description of the failure without operation context.
        method: HTTP method of the operation being built.
        path: Path template of the operation being built.
        operation_id: The operation's declared ``operationId``, if any.
    """

    exit_code = EXIT_GENERATION_ERROR

    def __init__(
        self,
        detail: str,
        *,
        method: Optional[str] = None,
        path: Optional[str] = None,
        operation_id: Optional[str] = None,
    ):
        self.detail = detail
        self.method = method
        self.path = path
        self.operation_id = operation_id
        super().__init__(self._compose())

    def _compose(self) -> str:
        if self.method is None and self.path is None:
            return self.detail
        where = " ".join(part for part in (self.method and self.method.upper(), self.path) if part)
        if self.operation_id:
            where = f"{where}, operationId: {self.operation_id}"
        return f"{self.detail} [in {where}]"

    def with_operation(
        self,
        method: str,
        path: str,
        operation_id: Optional[str] = None,
    ) -> GenerationError:
        """Return a copy of this error bound to the operation being built.

        The copy has the same class and attributes; only the operation
        context and the rendered message change. The original instance is
        left untouched.
        """
        bound = self.__class__.__new__(self.__class__)
        bound.__dict__.update(self.__dict__)
        bound.method = method
        bound.path = path
        bound.operation_id = operation_id
        bound.args = (bound._compose(),)
        return bound


class ReferenceResolutionError(GenerationError):
    """Raised when a ``$ref`` pointer does not address a node in the document.

    Args:
        pointer: The exact pointer string that failed.
        reason: What went wrong (missing key, bad index, external ref).
    """

    def __init__(self, pointer: str, reason: Optional[str] = None, **context: Optional[str]):
        self.pointer = pointer
        detail = f"Cannot resolve $ref '{pointer}'"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail, **context)


class CyclicReferenceError(GenerationError):
    """Raised when a chain of ``$ref`` pointers revisits a pointer.

    Args:
        pointer: The pointer that was reached a second time.
        chain: The pointers visited before it, in visiting order.
    """

    def __init__(self, pointer: str, chain: Sequence[str] = (), **context: Optional[str]):
        self.pointer = pointer
        self.chain = tuple(chain)
        trail = " -> ".join([*self.chain, pointer])
        super().__init__(f"Circular $ref '{pointer}': {trail}", **context)


class RecursiveSchemaError(GenerationError):
    """Raised when a schema node contains itself, as a YAML alias can make it do.

    Args:
        pointer: Where the node reappears, relative to the schema root.
    """

    def __init__(self, pointer: str, **context: Optional[str]):
        self.pointer = pointer
        super().__init__(
            f"Schema contains itself at '{pointer}'; declare the recursion with a $ref",
            **context,
        )


class ParameterConflict(GenerationError):
    """Raised when two parameters share a normalized name within one location."""

    def __init__(self, name: str, location: str, **context: Optional[str]):
        self.name = name
        self.location = location
        super().__init__(
            f"Duplicate parameter '{name}' in location '{location}'",
            **context,
        )


class UnknownOperationLocation(GenerationError):
    """Raised when a parameter's ``in`` field names an unsupported location."""

    def __init__(self, name: str, location: str, **context: Optional[str]):
        self.name = name
        self.location = location
        super().__init__(
            f"Parameter '{name}' declares unsupported location '{location}'",
            **context,
        )
