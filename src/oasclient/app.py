"""Typer application and CLI entry point for oasclient.

Commands:

* ``oasclient operations SPEC`` -- list the operations a spec exposes.
* ``oasclient call SPEC OPERATION`` -- build a request for one operation and
  send it (or print it with ``--dry-run``).
* ``oasclient info SPEC`` -- show API metadata.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Errors raised inside commands are reported on stderr and
mapped to exit codes by :func:`_cli_errors`; anything unexpected is written to
a crash log.

See Also:
    :mod:`oasclient.config`: Configuration precedence resolution.
    :mod:`oasclient.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
import tempfile
import traceback
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

import httpx
import typer

from oasclient import __version__
from oasclient.exceptions import ConfigError, OASClientError
from oasclient.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
)

app = typer.Typer(
    name="oasclient",
    help="Call OpenAPI 3.x operations from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oasclient {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~oasclient.output.OutputManager` from CLI
    flags. ``--verbose`` also routes library logging to stderr at DEBUG
    level.
    """
    from oasclient.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Report library errors on stderr and exit with their mapped code."""
    from oasclient.output import error

    try:
        yield
    except OASClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except httpx.HTTPError as exc:
        error(f"Request failed: {exc}")
        raise typer.Exit(code=EXIT_CONNECTION_ERROR) from None


def _parse_pairs(values: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` option values into a dict.

    Raises:
        ConfigError: If a value has no ``=`` or an empty key.
    """
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Invalid {option} value '{item}'. Expected key=value")
        pairs[key.strip()] = value
    return pairs


def _parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body


def _build_client(
    spec: str,
    config_path: Optional[Path],
    overrides: dict[str, Any],
    dry_run: bool = False,
):  # noqa: ANN202
    """Resolve the config and build an :class:`~oasclient.client.APIClient` for *spec*."""
    from oasclient.client import DryRunExecutor, HttpxExecutor, fetch_and_create
    from oasclient.config import resolve_config
    from oasclient.output import debug

    config = resolve_config(config_path, overrides)
    debug(f"Loading spec from: {spec}")
    executor = DryRunExecutor() if dry_run else HttpxExecutor()
    return fetch_and_create(spec, config=config, executor=executor)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("operations")
def operations_command(
    spec: str = typer.Argument(..., help="Spec URL, file path, or '-' for stdin."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file (JSON or YAML)."),
    server_index: Optional[int] = typer.Option(None, "--server-index", help="Server URL index to bind."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL for routes without servers."),
) -> None:
    """List every operation with its aliases and bound URL.

    Example::

        oasclient operations petstore.yaml
        oasclient --json operations https://example.com/openapi.json
    """
    from oasclient.output import get_output

    with _cli_errors():
        client = _build_client(
            spec,
            config_path,
            {"server_url_index": server_index, "base_server_url": base_url},
        )

    rows: list[list[str]] = []
    for route in client.routes:
        operation = client[route.key]
        rows.append([
            route.method.value.upper(),
            route.path,
            operation.operation_id or "-",
            operation.url,
        ])

    get_output().print_table(
        ["Method", "Path", "Operation ID", "URL"], rows, title=f"Operations ({len(rows)})"
    )


@app.command("call")
def call_command(
    spec: str = typer.Argument(..., help="Spec URL, file path, or '-' for stdin."),
    operation: str = typer.Argument(..., help="Operation ID or 'METHOD /path' key."),
    data: Optional[list[str]] = typer.Option(None, "--data", "-d", help="Parameter by name (key=value)."),
    path_params: Optional[list[str]] = typer.Option(None, "--path", "-P", help="Path parameter (key=value)."),
    query: Optional[list[str]] = typer.Option(None, "--query", "-q", help="Query parameter (key=value)."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header (key=value)."),
    cookie: Optional[list[str]] = typer.Option(None, "--cookie", "-c", help="Cookie (key=value)."),
    body: Optional[str] = typer.Option(None, "--body", help="Request body (JSON or raw text)."),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="Body content type."),
    server_index: Optional[int] = typer.Option(None, "--server-index", help="Server URL index to bind."),
    server_var: Optional[list[str]] = typer.Option(None, "--server-var", help="Server variable (key=value)."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL for routes without servers."),
    validate_body: bool = typer.Option(False, "--validate-body", help="Validate the body against its schema."),
    no_validate_params: bool = typer.Option(
        False, "--no-validate-params", help="Do not fail on missing required parameters."
    ),
    no_unexpected_params: bool = typer.Option(
        False, "--no-unexpected-params", help="Drop parameters the spec does not declare."
    ),
    expected_version: Optional[str] = typer.Option(
        None, "--expected-version", help="Fail unless info.version matches."
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file (JSON or YAML)."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the request instead of sending it."),
) -> None:
    """Invoke one operation and print the response.

    The response body goes to stdout, the status line to stderr. HTTP error
    statuses exit non-zero (401/403: 3, 404: 4, 5xx: 5, other: 1).

    Example::

        oasclient call petstore.yaml listPets -q limit=10
        oasclient call petstore.yaml "POST /pets" --body '{"name": "Rex"}' --dry-run
    """
    from oasclient.client.response import error_message, exit_code_for_status, format_api_response
    from oasclient.output import error

    with _cli_errors():
        overrides: dict[str, Any] = {
            "server_url_index": server_index,
            "base_server_url": base_url,
            "expected_version": expected_version,
            "server_variables": _parse_pairs(server_var, "--server-var") or None,
            "validate_body": True if validate_body else None,
            "validate_parameters": False if no_validate_params else None,
            "allow_unexpected_params": False if no_unexpected_params else None,
        }
        client = _build_client(spec, config_path, overrides, dry_run=dry_run)

        if operation not in client:
            error(f"Unknown operation '{operation}'. Run: oasclient operations {spec}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)

        async def _invoke() -> httpx.Response:
            async with client:
                return await client[operation](
                    data=_parse_pairs(data, "--data"),
                    path=_parse_pairs(path_params, "--path"),
                    query=_parse_pairs(query, "--query"),
                    headers=_parse_pairs(header, "--header"),
                    cookie=_parse_pairs(cookie, "--cookie"),
                    body=_parse_body(body),
                    content_type=content_type,
                )

        response = asyncio.run(_invoke())

    format_api_response(response)
    code = exit_code_for_status(response.status_code)
    if code:
        error(error_message(response))
        raise typer.Exit(code=code)


@app.command("info")
def info_command(
    spec: str = typer.Argument(..., help="Spec URL, file path, or '-' for stdin."),
) -> None:
    """Show API info (title, version, servers, operation count).

    Example::

        oasclient info petstore.yaml
    """
    from oasclient.client import create_client
    from oasclient.output import format_response
    from oasclient.parser import load_spec, validate_openapi_version

    with _cli_errors():
        raw = load_spec(spec)
        openapi_version = validate_openapi_version(raw)
        client = create_client(raw)

    info = raw.get("info") or {}
    format_response({
        "title": info.get("title", "-"),
        "version": info.get("version", "-"),
        "openapi_version": openapi_version,
        "description": info.get("description") or "-",
        "servers": [server.get("url", "") for server in raw.get("servers") or []],
        "operations": len(client.routes),
    })


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to the temp directory and return the log file path."""
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = Path(tempfile.gettempdir()) / f"oasclient-crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oasclient`` console script.

    Unhandled :class:`~oasclient.exceptions.OASClientError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions produce
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
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from oasclient.output import error

        if isinstance(exc, OASClientError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
