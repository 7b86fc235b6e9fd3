"""Rendering of API listings and mount tables.

Data (the API listing, the mount table) is written to stdout and
diagnostics to stderr, so ``samroute --json mounts ... | jq`` always gets
clean JSON even when some routes produced warnings.

Three renderings are supported, see :class:`OutputFormat`. ``AUTO`` picks
a Rich table on an interactive terminal and tab-separated lines when
piped; ``NO_COLOR`` and ``TERM=dumb`` force the plain form.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from samroute.models import MountDescriptor

_API_HEADERS = ["API", "Definition"]
_MOUNT_HEADERS = ["API", "Path", "Method", "Handler"]
_NO_HANDLER = "-"


class OutputFormat(str, Enum):
    """How listings are rendered on stdout."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Render samroute results and report problems.

    Args:
        format: Requested format. ``AUTO`` becomes ``RICH`` on a colour
            capable terminal and ``PLAIN`` otherwise.
        no_color: Disable colour even on a terminal.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()

        if format == OutputFormat.AUTO:
            format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def stderr_console(self) -> Console:
        """Console used for diagnostics; the CLI logging handler writes here too."""
        return self._stderr

    # --- Listings (stdout) ---

    def print_apis(self, definitions: dict[str, str]) -> None:
        """Print each API's logical id with a description of its definition source.

        JSON output is an object mapping logical id to the description.
        """
        if self._format == OutputFormat.JSON:
            self._print_json(definitions)
            return
        rows = [[logical_id, where] for logical_id, where in definitions.items()]
        self._print_table(
            _API_HEADERS, rows, title=f"Serverless APIs ({len(rows)})"
        )

    def print_mounts(self, results: dict[str, list[MountDescriptor]]) -> None:
        """Print the mounts of every resolved API.

        JSON output keeps the mount fields as they are; the tables show the
        method in upper case and ``-`` for a mount without a handler.
        """
        if self._format == OutputFormat.JSON:
            self._print_json(
                {
                    logical_id: [mount.model_dump() for mount in mounts]
                    for logical_id, mounts in results.items()
                }
            )
            return

        rows = [
            [
                logical_id,
                mount.path,
                mount.method.upper(),
                mount.handler_reference or _NO_HANDLER,
            ]
            for logical_id, mounts in results.items()
            for mount in mounts
        ]
        self._print_table(_MOUNT_HEADERS, rows, title=f"Mounts ({len(rows)})")

    def _print_json(self, data: Any) -> None:
        print(json.dumps(data, indent=2, ensure_ascii=False), file=sys.stdout, flush=True)

    def _print_table(
        self, headers: list[str], rows: list[list[str]], title: Optional[str]
    ) -> None:
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                print("\t".join(line), file=sys.stdout, flush=True)
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header, style="bold" if header == "Method" else None)
        for row in rows:
            table.add_row(
                *(Text(cell, style="dim" if cell == _NO_HANDLER else "") for cell in row)
            )
        self._stdout.print(table)

    # --- Diagnostics (stderr) ---

    def warning(self, message: str) -> None:
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Process-wide instance, installed by the CLI callback ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
