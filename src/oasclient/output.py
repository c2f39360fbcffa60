"""Terminal output for the oasclient CLI, with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** carries data only: API response bodies and operation tables.
  This is what downstream tools pipe and parse.
* **stderr** carries diagnostics: HTTP status lines, dry-run previews,
  warnings and errors.
* ``OutputFormat.AUTO`` renders with Rich on an interactive terminal and as
  plain text when piped. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color``
  switch colour off.

:class:`OutputManager` holds the preferences of one CLI invocation. The app
callback installs it with :func:`set_output`; library code and commands reach
it through :func:`get_output` or the module-level shortcuts (:func:`info`,
:func:`error`, ...).
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` resolves to ``RICH`` on a colour-capable TTY and to ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (prefix, rich style)
_DIAGNOSTICS = {
    "warning": ("Warning:", "yellow"),
    "error": ("Error:", "bold red"),
    "debug": ("[debug]", "dim"),
}


class OutputManager:
    """Renders response data and diagnostics for one CLI invocation.

    Args:
        format: Rendering of stdout data. ``AUTO`` is resolved once, here.
        no_color: Disable colour and markup (also implied by ``NO_COLOR`` and
            ``TERM=dumb``).
        quiet: Drop informational stderr lines (status lines, dry-run
            previews). Warnings and errors are always shown.
        verbose: Show debug lines on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Write a response payload to stdout in the active format.

        Args:
            data: The decoded body -- usually a dict, a list or text.
            content_type: Media type of the body. In Rich mode only JSON
                bodies are syntax highlighted.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_as_json_text(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        else:
            self._render_rich(data, content_type)

    def print_data(self, text: str) -> None:
        """Write one raw line to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout.

        JSON mode emits a list of objects keyed by header, plain mode one
        tab-separated line per row (headers first, *title* dropped), Rich
        mode a styled table.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return

        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Write a status line to stderr unless quiet."""
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message, markup=False)

    def warning(self, message: str) -> None:
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        """Write a debug line to stderr when verbose."""
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, level: str, message: str) -> None:
        prefix, style = _DIAGNOSTICS[level]
        if self._no_color:
            print(f"{prefix} {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[{style}]{escape(prefix)}[/{style}] {escape(message)}")

    def _render_rich(self, data: Any, content_type: str) -> None:
        if isinstance(data, str) and "json" in content_type:
            data = _maybe_json(data)
        if isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data), markup=False)


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _maybe_json(text: str) -> Any:
    """Decode *text* as JSON, returning it unchanged when it is not JSON."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return text


def _as_json_text(data: Any) -> str:
    if isinstance(data, str):
        data = _maybe_json(data)
        if isinstance(data, str):
            return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> Iterator[str]:
    """Yield the plain-text lines of *data*: ``key<TAB>value`` for objects, one line per list item."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                yield "\t".join(str(value) for value in item.values())
            else:
                yield str(item)
    else:
        yield str(data)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def format_response(data: Any, content_type: str = "application/json") -> None:
    get_output().format_response(data, content_type)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
