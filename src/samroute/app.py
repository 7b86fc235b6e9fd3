"""Typer application and CLI entry point for samroute.

The CLI is a thin shell around :func:`samroute.api.resolve_mounts`:

* ``samroute apis TEMPLATE`` lists the ``AWS::Serverless::Api`` resources of
  a template and where each one's definition comes from.
* ``samroute mounts TEMPLATE [--api ID]`` resolves and prints the route
  mounts.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`samroute.config`: Settings resolution used by :func:`main_callback`.
    :mod:`samroute.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.logging import RichHandler

from samroute import __version__
from samroute.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="samroute",
    help="Resolve API Gateway route mounts from SAM templates.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"samroute {__version__}")
        raise typer.Exit()


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
        False, "--quiet", "-q", help="Only log errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    aws_profile: Optional[str] = typer.Option(
        None, "--aws-profile", help="AWS profile for S3-hosted definitions."
    ),
    region: Optional[str] = typer.Option(
        None, "--region", help="AWS region for S3-hosted definitions."
    ),
    endpoint_url: Optional[str] = typer.Option(
        None, "--endpoint-url", help="Alternative S3 endpoint URL."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective :class:`~samroute.models.Settings`, installs the
    global :class:`~samroute.output.OutputManager`, configures logging, and
    stores the settings in ``ctx.obj`` for the sub-commands.
    """
    from samroute.config import resolve_settings
    from samroute.exceptions import SamrouteError
    from samroute.output import OutputFormat, OutputManager, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    try:
        settings = resolve_settings(
            cli_profile=aws_profile,
            cli_region=region,
            cli_endpoint_url=endpoint_url,
            cli_format=cli_format,
        )
    except SamrouteError as exc:
        set_output(OutputManager(no_color=no_color))
        _fail(exc)

    try:
        fmt = OutputFormat(settings.output_format)
    except ValueError:
        fmt = OutputFormat.AUTO

    output = OutputManager(format=fmt, no_color=no_color)
    set_output(output)
    _configure_logging(output.stderr_console, verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _configure_logging(console: Any, verbose: bool, quiet: bool) -> None:
    """Route the ``samroute`` loggers to the diagnostics console."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    logger = logging.getLogger("samroute")
    logger.handlers = [handler]
    logger.setLevel(level)


def _fail(exc: Exception) -> NoReturn:
    """Report a samroute error and exit with its code."""
    from samroute.output import error

    error(str(exc))
    raise typer.Exit(code=getattr(exc, "exit_code", EXIT_GENERIC_FAILURE))


def _describe_source(api: Any) -> str:
    """Human-readable description of where *api*'s definition comes from."""
    from samroute.definition import select_source
    from samroute.exceptions import NoDefinitionFoundError

    try:
        source = select_source(api)
    except NoDefinitionFoundError:
        return "-"

    if source.kind == "local_file":
        return source.path
    if source.kind == "remote_object":
        location = f"s3://{source.bucket}/{source.key}"
        if source.version:
            location += f"?versionId={source.version}"
        return location
    if source.kind == "inline_text":
        return "inline (text)"
    return "inline (mapping)"


@app.command("apis")
def apis_command(
    template: Path = typer.Argument(..., help="Path to the SAM template."),
) -> None:
    """List the serverless APIs declared in a template.

    Example::

        samroute apis template.yaml
    """
    from samroute.exceptions import SamrouteError
    from samroute.output import get_output
    from samroute.template import load_template, serverless_apis

    try:
        apis = serverless_apis(load_template(template), base_dir=template.parent)
    except SamrouteError as exc:
        _fail(exc)

    get_output().print_apis({api.logical_id: _describe_source(api) for api in apis})


@app.command("mounts")
def mounts_command(
    ctx: typer.Context,
    template: Path = typer.Argument(..., help="Path to the SAM template."),
    api_id: Optional[str] = typer.Option(
        None, "--api", "-a", help="Only resolve the API with this logical id."
    ),
) -> None:
    """Resolve and print the route mounts of the template's APIs.

    Example::

        samroute mounts template.yaml
        samroute --json mounts template.yaml --api PetsApi
    """
    from samroute.api import resolve_mounts
    from samroute.exceptions import SamrouteError
    from samroute.output import get_output, warning
    from samroute.template import find_api, load_template, serverless_apis

    settings = (ctx.obj or {}).get("settings")

    try:
        apis = serverless_apis(load_template(template), base_dir=template.parent)
        if api_id is not None:
            apis = [find_api(apis, api_id)]
        results = {
            api.logical_id: resolve_mounts(api, settings=settings) for api in apis
        }
    except SamrouteError as exc:
        _fail(exc)

    if not apis:
        warning(f"No AWS::Serverless::Api resources found in {template}")

    get_output().print_mounts(results)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from samroute.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``samroute`` console script.

    :class:`~samroute.exceptions.SamrouteError` instances that escape a
    command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

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
        from samroute.exceptions import SamrouteError
        from samroute.output import error

        if isinstance(exc, SamrouteError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
