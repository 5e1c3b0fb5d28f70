"""Typer application and CLI entry point for patcred.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``check-token``, ``encrypt``, ``describe``,
``types``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`patcred.config`: Configuration and master key resolution.
    :mod:`patcred.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from patcred import __version__
from patcred.commands.config import config_app
from patcred.commands.credentials import (
    check_token_command,
    describe_command,
    encrypt_command,
    types_command,
)
from patcred.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="patcred",
    help="Check, encrypt, and describe GitLab personal access token credentials.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("check-token")(check_token_command)
app.command("encrypt")(encrypt_command)
app.command("describe")(describe_command)
app.command("types")(types_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"patcred {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library log records to stderr through Rich when verbose."""
    if not verbose:
        return
    from rich.logging import RichHandler

    from patcred.output import get_output

    handler = RichHandler(console=get_output().stderr_console, show_path=False)
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[handler], force=True)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    key_source: Optional[str] = typer.Option(
        None, "--key-source", help="Master key source: env:VAR or file:/path."
    ),
) -> None:
    """Install the output manager and keep the key source for the commands."""
    from patcred.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    else:
        fmt = OutputFormat.PLAIN if plain_output else OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["key_source"] = key_source
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from patcred.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    A :class:`~patcred.exceptions.PatcredError` that escapes a command exits
    with its ``exit_code``; anything else leaves a crash log behind.
    """
    from patcred.exceptions import PatcredError
    from patcred.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except PatcredError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
