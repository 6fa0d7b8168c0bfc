"""Terminal rendering of records and diagnostics.

Records and operation results go to stdout, or replace the contents of
``--output FILE`` as JSON. Every status line, warning and error goes to
stderr so piped output stays parseable. Three formats are supported:

``json``
    the result serialised as indented JSON.
``plain``
    tab-separated text. A single record prints one ``key<TAB>value`` line per
    field; a list of records prints a header row with the union of their keys
    followed by one row per record.
``rich``
    a :class:`rich.table.Table` for flat record lists and highlighted JSON
    for everything else.

``auto`` picks ``rich`` on an interactive terminal and ``plain`` otherwise.
``NO_COLOR`` and ``TERM=dumb`` disable colour.

Library code never prints. It logs to the ``pbclient`` logger, which
:func:`configure_logging` routes to stderr through a
:class:`rich.logging.RichHandler` when ``--verbose`` is on.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _colour_disabled() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _columns(records: list[Mapping[str, Any]]) -> list[str]:
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return columns


def _is_record_list(data: Any) -> bool:
    return isinstance(data, list) and bool(data) and all(isinstance(i, Mapping) for i in data)


class OutputManager:
    """Holds the output preferences of one CLI invocation.

    Args:
        format: Requested format; ``AUTO`` is resolved on construction.
        no_color: Drop colour and markup on both streams.
        quiet: Hide informational stderr lines (errors are always shown).
        verbose: Show debug lines and enable debug logging.
        output_file: Write results to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self.no_color = no_color or _colour_disabled()
        self.quiet = quiet
        self.verbose = verbose
        self.output_file = output_file
        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self.no_color else OutputFormat.PLAIN
        self.format = format
        self.stdout = Console(
            file=sys.stdout, no_color=self.no_color, force_terminal=format == OutputFormat.RICH
        )
        self.stderr = Console(file=sys.stderr, no_color=self.no_color, stderr=True)

    # -- results ---------------------------------------------------------

    def emit(self, data: Any) -> None:
        """Render a record, a list of records, or a scalar result."""
        if self.output_file:
            with open(self.output_file, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n")
            return
        if self.format == OutputFormat.JSON:
            self._line(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self.format == OutputFormat.PLAIN:
            self._emit_plain(data)
        elif _is_record_list(data) and not any(
            isinstance(v, (dict, list)) for record in data for v in record.values()
        ):
            columns = _columns(data)
            self.table(columns, [[_cell(r.get(c)) for c in columns] for r in data])
        elif isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self.stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.stdout.print(escape(_cell(data)))

    def table(self, headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
        """Render rows under *headers*; JSON mode and ``--output`` get a list of objects."""
        if self.format == OutputFormat.JSON or self.output_file:
            self.emit([dict(zip(headers, row)) for row in rows])
        elif self.format == OutputFormat.PLAIN:
            self._line("\t".join(headers))
            for row in rows:
                self._line("\t".join(row))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self.stdout.print(table)

    def _emit_plain(self, data: Any) -> None:
        if isinstance(data, Mapping):
            for key, value in data.items():
                self._line(f"{key}\t{_cell(value)}")
        elif _is_record_list(data):
            columns = _columns(data)
            self._line("\t".join(columns))
            for record in data:
                self._line("\t".join(_cell(record.get(c)) for c in columns))
        elif isinstance(data, list):
            for item in data:
                self._line(_cell(item))
        else:
            self._line(_cell(data))

    def _line(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # -- diagnostics -----------------------------------------------------

    def _notice(self, message: str, prefix: str = "", style: str = "", always: bool = False) -> None:
        if self.quiet and not always:
            return
        if self.no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif style:
            self.stderr.print(f"[{style}]{escape(prefix)}[/{style}]{escape(message)}")
        else:
            self.stderr.print(escape(f"{prefix}{message}"))

    def info(self, message: str) -> None:
        self._notice(message)

    def success(self, message: str) -> None:
        self._notice(message, style="green")

    def suggest(self, message: str) -> None:
        self._notice(message, prefix="hint: ", style="dim")

    def warning(self, message: str) -> None:
        self._notice(message, prefix="Warning: ", style="yellow", always=True)

    def error(self, message: str) -> None:
        self._notice(message, prefix="Error: ", style="bold red", always=True)


def configure_logging(output: OutputManager) -> None:
    """Attach (or detach) the stderr log handler of the ``pbclient`` logger."""
    logger = logging.getLogger("pbclient")
    for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(handler)
    if not output.verbose:
        logger.setLevel(logging.WARNING)
        return
    handler = RichHandler(console=output.stderr, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the active :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: Optional[OutputManager]) -> None:
    global _output
    _output = output


def reset_output() -> None:
    set_output(None)


def emit(data: Any) -> None:
    get_output().emit(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
