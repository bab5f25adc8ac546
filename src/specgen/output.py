"""Printing of operation records and service summaries.

Records go to stdout, diagnostics to stderr, so ``specgen --json operations
api.yaml | jq`` never sees an error message.  Three renderings exist:

* ``json`` -- machine-readable records, always indented two spaces.
* ``plain`` -- tab-separated rows, one per line, no markup.
* ``rich`` -- Rich tables and highlighted JSON.

``auto`` picks ``rich`` for an interactive terminal and ``plain`` otherwise.
Colour is off when ``NO_COLOR`` is set, when ``TERM=dumb``, or with
``--no-color``.

:func:`~specgen.app.main_callback` installs one :class:`OutputManager` per
invocation via :func:`set_output`; commands fetch it with :func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Requested rendering. ``AUTO`` is resolved once, at manager creation."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    stream = sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def _should_disable_color() -> bool:
    """``True`` when the environment asks for monochrome output."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested is not OutputFormat.AUTO:
        return requested
    if _is_tty() and not no_color:
        return OutputFormat.RICH
    return OutputFormat.PLAIN


class OutputManager:
    """Writes records to stdout and diagnostics to stderr.

    Args:
        format: Requested rendering; ``AUTO`` is resolved from the terminal.
        no_color: Force monochrome output regardless of the environment.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._format = _resolve_format(format, self._no_color)
        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format is OutputFormat.RICH,
        )
        self._diagnostics = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved rendering (never ``AUTO``)."""
        return self._format

    @property
    def no_color(self) -> bool:
        return self._no_color

    # --- stdout ---

    def print_data(self, text: str) -> None:
        """Write *text* and a newline to stdout, unformatted."""
        sys.stdout.write(f"{text}\n")
        sys.stdout.flush()

    def print_json(self, data: Any) -> None:
        """Write *data* (records, a single record, ...) as indented JSON.

        Only the ``rich`` rendering adds syntax highlighting; every other
        rendering writes the bare text so it can be piped.
        """
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format is OutputFormat.RICH:
            self._console.print(Syntax(text, "json", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write a summary table.

        ``json`` emits one object per row keyed by header, ``plain`` emits
        tab-separated lines headed by *headers*, ``rich`` draws a table with
        *title*.
        """
        if self._format is OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
            return

        if self._format is OutputFormat.PLAIN:
            for line in (headers, *rows):
                self.print_data("\t".join(line))
            return

        table = Table(*headers, title=title, header_style="bold")
        for row in rows:
            table.add_row(*row)
        self._console.print(table)

    # --- stderr ---

    def info(self, message: str) -> None:
        """Write a status line to stderr."""
        if self._no_color:
            sys.stderr.write(f"{message}\n")
        else:
            self._diagnostics.print(message)

    def error(self, message: str) -> None:
        """Write an ``Error:``-prefixed line to stderr."""
        if self._no_color:
            sys.stderr.write(f"Error: {message}\n")
        else:
            self._diagnostics.print(f"[red]Error:[/red] {message}", highlight=False)


# --- Process-wide manager ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager (tests call this between runs)."""
    global _output
    _output = None


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)
