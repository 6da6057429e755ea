"""Typer application and CLI entry point for apinav.

This module wires together the top-level Typer application and registers the
inspection sub-commands (``info``, ``endpoints``, ``nav``, ``show``,
``auth``).  The root callback installs the output manager, routes library
log records to it, and collects parser configuration overrides for the
sub-commands.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`apinav.config`: Parser configuration resolution.
    :mod:`apinav.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from apinav import __version__
from apinav.commands.inspect import (
    inspect_auth,
    inspect_endpoints,
    inspect_info,
    inspect_nav,
    inspect_show,
)
from apinav.exit_codes import EXIT_GENERIC_FAILURE
from apinav.models import CollisionPolicy


app = typer.Typer(
    name="apinav",
    help="Parse OpenAPI 3.x / Swagger 2.0 documents into navigable API references.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("info")(inspect_info)
app.command("endpoints")(inspect_endpoints)
app.command("nav")(inspect_nav)
app.command("show")(inspect_show)
app.command("auth")(inspect_auth)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apinav {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send ``apinav.*`` log records to the output manager.

    WARNING is the default threshold; ``--verbose`` lowers it to DEBUG and
    ``--quiet`` raises it to ERROR.
    """
    from apinav.output import OutputLogHandler

    logger = logging.getLogger("apinav")
    for handler in list(logger.handlers):
        if isinstance(handler, OutputLogHandler):
            logger.removeHandler(handler)

    handler = OutputLogHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)


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
    nav_prefix: Optional[str] = typer.Option(
        None, "--nav-prefix", help="Prefix of every navigable path."
    ),
    default_tag: Optional[str] = typer.Option(
        None, "--default-tag", help="Tag for operations that declare none."
    ),
    collision_policy: Optional[CollisionPolicy] = typer.Option(
        None, "--collision-policy", help="How duplicate navigable paths are handled."
    ),
    max_ref_depth: Optional[int] = typer.Option(
        None, "--max-ref-depth", min=1, help="Nesting ceiling for $ref resolution."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~apinav.output.OutputManager` from CLI
    flags, hooks library logging into it, and stores the parser
    configuration overrides in ``ctx.obj["config_overrides"]``.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        nav_prefix: Override of :attr:`~apinav.models.ParserConfig.nav_prefix`.
        default_tag: Override of :attr:`~apinav.models.ParserConfig.default_tag`.
        collision_policy: Override of
            :attr:`~apinav.models.ParserConfig.collision_policy`.
        max_ref_depth: Override of
            :attr:`~apinav.models.ParserConfig.max_ref_depth`.
    """
    from apinav.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj["config_overrides"] = {
        "nav_prefix": nav_prefix,
        "default_tag": default_tag,
        "collision_policy": collision_policy,
        "max_ref_depth": max_ref_depth,
    }


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from apinav.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apinav`` console script.

    Unhandled :class:`~apinav.exceptions.ApinavError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from apinav.exceptions import ApinavError
        from apinav.output import error

        if isinstance(exc, ApinavError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
