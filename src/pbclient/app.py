"""The ``pbclient`` command line.

The root callback turns the global flags into an
:class:`~pbclient.output.OutputManager` and a small ``ctx.obj`` dict
(``profile``, ``base_url``, ``force``, ``verbose``) that the sub-commands in
:mod:`pbclient.commands` read. :func:`main` is the console-script entry
point: library errors exit with their own exit code, anything unexpected is
written to a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from pbclient import __version__
from pbclient.exceptions import ConfigError, PbclientError
from pbclient.exit_codes import EXIT_GENERIC_FAILURE
from pbclient.output import OutputFormat, OutputManager, configure_logging, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="pbclient",
    help="Work with the records, collections and auth endpoints of a backend.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"pbclient {__version__}")
        raise typer.Exit()


def _pick_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    from pbclient.config import load_global_config

    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile to use."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Backend URL, overriding the profile's."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print results as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and token handling."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations and overwrite existing profiles."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write results to this file."
    ),
) -> None:
    """Authenticated client for record-collection backends."""
    output = OutputManager(
        format=_pick_format(json_output, plain_output),
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(output)
    ctx.obj = {"profile": profile, "base_url": base_url, "force": force, "verbose": verbose}


def register_commands() -> None:
    """Attach the sub-commands to :data:`app`; safe to call repeatedly."""
    if getattr(app, "_pbclient_registered", False):
        return
    from pbclient.commands.auth import auth_app
    from pbclient.commands.collections import collections_command
    from pbclient.commands.config import config_app
    from pbclient.commands.records import records_app
    from pbclient.commands.request import request_command

    app.add_typer(config_app, name="config", help="Manage backend profiles.")
    app.add_typer(auth_app, name="auth", help="Test credentials, log in and refresh tokens.")
    app.add_typer(records_app, name="records", help="List, read and write records.")
    app.command("collections")(collections_command)
    app.command("request")(request_command)
    app._pbclient_registered = True  # type: ignore[attr-defined]


def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nInterrupted.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log(exc: BaseException) -> str:
    from pbclient.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(path)


def main() -> None:
    """Console-script entry point."""
    signal.signal(signal.SIGINT, _on_sigint)
    register_commands()
    try:
        app()
    except PbclientError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        error(f"Unexpected error; traceback written to {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
