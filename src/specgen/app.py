"""Typer application and CLI entry point for specgen.

The CLI is a thin inspection layer over the generator: it loads a document,
builds every operation, and prints the resulting records.  Code rendering is
left to downstream tools, which can consume ``specgen --json operations``.

:func:`main` backs the ``specgen`` console script and maps :class:`~specgen.exceptions.SpecgenError` to the
error's exit code.

See Also:
    :mod:`specgen.config`: Generator configuration resolution.
    :mod:`specgen.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from specgen import __version__
from specgen.exceptions import InvalidUsageError, SpecgenError
from specgen.exit_codes import EXIT_GENERIC_FAILURE
from specgen.models import Operation, Service
from specgen.output import OutputFormat, OutputManager, error, get_output, info, set_output


app = typer.Typer(
    name="specgen",
    help="Build canonical operation records from OpenAPI 3.x documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Eager ``--version``: print the package version and stop."""
    if value:
        typer.echo(f"specgen {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, no_color: bool) -> None:
    """Route library logging to stderr through Rich."""
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        show_time=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the specgen version.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print records as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print tab-separated rows."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Never emit ANSI colour."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    default_service: Optional[str] = typer.Option(
        None, "--default-service", help="Tag for operations that declare none."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Threads used to build operations."
    ),
) -> None:
    """Set up output, logging and configuration overrides.

    Installs the global :class:`~specgen.output.OutputManager` and logging
    handler, and stores the configuration overrides in ``ctx.obj``.
    """
    if json_output:
        requested = OutputFormat.JSON
    elif plain_output:
        requested = OutputFormat.PLAIN
    else:
        requested = OutputFormat.AUTO

    output = OutputManager(format=requested, no_color=no_color)
    set_output(output)
    _configure_logging(verbose, output.no_color)

    ctx.obj = {
        "overrides": {"default_service": default_service, "max_workers": workers},
    }


def _build(ctx: typer.Context, spec: str) -> list[Service]:
    """Load *spec* and build all services with the resolved configuration."""
    from specgen.config import resolve_config
    from specgen.generator import build_services
    from specgen.parser import load_document

    overrides: dict[str, Any] = (ctx.obj or {}).get("overrides", {})
    config = resolve_config(overrides)
    document = load_document(spec)
    services = build_services(document, config)

    if get_output().format is OutputFormat.RICH:
        count = sum(len(item.operations) for item in services)
        info(f"Built {count} operation(s) in {len(services)} service(s) from {escape(spec)}")
    return services


def _record(operation: Operation) -> dict[str, Any]:
    return operation.model_dump(mode="json", by_alias=True)


@app.command("operations")
def operations_command(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
    service: Optional[str] = typer.Option(
        None, "--service", "-s", help="Only list operations of this service."
    ),
) -> None:
    """List every operation the document declares.

    Example::

        specgen operations openapi.yaml
        specgen --json operations openapi.yaml --service UsersService
    """
    services = _build(ctx, spec)
    if service is not None:
        services = [item for item in services if item.name == service]
        if not services:
            raise InvalidUsageError(f"Unknown service '{service}'")

    output = get_output()
    operations = [operation for item in services for operation in item.operations]

    if output.format == OutputFormat.JSON:
        output.print_json([_record(operation) for operation in operations])
        return

    rows = [
        [
            operation.service,
            operation.name,
            operation.method.value.upper(),
            operation.path,
            str(len(operation.parameters)),
            "Yes" if operation.deprecated else "",
        ]
        for operation in operations
    ]
    output.print_table(
        ["Service", "Operation", "Method", "Path", "Params", "Deprecated"],
        rows,
        title=f"Operations ({len(rows)})",
    )


@app.command("services")
def services_command(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """List services with their file names and operation counts."""
    services = _build(ctx, spec)
    rows = [
        [item.name, item.file_name, str(len(item.operations)), "Yes" if item.uses_version else ""]
        for item in services
    ]
    get_output().print_table(
        ["Service", "File", "Operations", "Versioned"],
        rows,
        title=f"Services ({len(rows)})",
    )


@app.command("show")
def show_command(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
    operation: str = typer.Argument(
        ..., help="Operation name, optionally qualified as 'Service.name'."
    ),
) -> None:
    """Print one operation record as JSON.

    Example::

        specgen show openapi.yaml getUser
        specgen show openapi.yaml UsersService.getUser
    """
    service_name, _, name = operation.rpartition(".")
    matches = [
        candidate
        for item in _build(ctx, spec)
        if not service_name or item.name == service_name
        for candidate in item.operations
        if candidate.name == name
    ]
    if not matches:
        raise InvalidUsageError(f"Unknown operation '{operation}'")
    if len(matches) > 1:
        choices = ", ".join(f"{match.service}.{match.name}" for match in matches)
        raise InvalidUsageError(f"Operation '{operation}' is ambiguous: {choices}")

    get_output().print_json(_record(matches[0]))


def _setup_signal_handlers() -> None:
    """Exit with status 130 on SIGINT instead of printing a traceback."""

    def _on_interrupt(signum: int, frame: Any) -> None:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _on_interrupt)


def main() -> None:
    """Run the CLI and turn failures into exit statuses.

    A :class:`~specgen.exceptions.SpecgenError` prints its message and exits
    with its ``exit_code``.  Anything else is reported as unexpected and
    exits with the generic failure status.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)
    except SpecgenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logging.getLogger(__name__).debug("Unhandled exception", exc_info=True)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
