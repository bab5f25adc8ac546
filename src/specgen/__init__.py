"""specgen -- Resolve OpenAPI documents into canonical operation records.

This package turns a loaded OpenAPI 3.x document into one language-agnostic
:class:`~specgen.models.Operation` record per path + HTTP method, grouped into
:class:`~specgen.models.Service` records. Each operation carries its
parameters classified by transport location, the request/response schemas,
the success results, the error table and the model names it imports. A
downstream rendering stage turns those records into client source files.

Typical workflow::

    from specgen.parser import Document, load_spec, validate_openapi_version
    from specgen.generator import build_services

    raw = load_spec("openapi.yaml")
    validate_openapi_version(raw)
    services = build_services(Document(raw))

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Generator options with XDG-aware precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
