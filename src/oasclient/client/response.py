"""Response formatting bridge -- maps :class:`httpx.Response` to the output system.

Used by the CLI after an operation completes: the status line goes to stderr,
the body is rendered on stdout through
:meth:`~oasclient.output.OutputManager.format_response`, and error statuses
are translated into process exit codes by :func:`exit_code_for_status`.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from oasclient.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SUCCESS,
)
from oasclient.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Format and print an API response using the global output system.

    Args:
        response: The :class:`httpx.Response` to format and display.
    """
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    content_type = response.headers.get("content-type", "application/json")
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, content_type)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. the
    response is HTML or plain text), returns the raw text. Returns ``None``
    for responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def exit_code_for_status(status: int) -> int:
    """Map an HTTP status code to a process exit code.

    401/403 map to :data:`~oasclient.exit_codes.EXIT_AUTH_FAILURE`, 404 to
    :data:`~oasclient.exit_codes.EXIT_NOT_FOUND`, 5xx to
    :data:`~oasclient.exit_codes.EXIT_SERVER_ERROR`, any other status of 400
    or above to :data:`~oasclient.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    if status < 400:
        return EXIT_SUCCESS
    if status in (401, 403):
        return EXIT_AUTH_FAILURE
    if status == 404:
        return EXIT_NOT_FOUND
    if status >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE


def error_message(response: httpx.Response) -> str:
    """Build a one-line ``HTTP <status>: <detail>`` message for an error response.

    The detail is taken from a ``message``, ``error`` or ``detail`` field of
    a JSON body, else from the first 200 characters of the text body.
    """
    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except (json.JSONDecodeError, UnicodeDecodeError):
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {response.status_code}"
    return f"{prefix}: {msg}" if msg else prefix
