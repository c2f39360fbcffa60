"""Transport executors -- the only place where a request leaves the process.

An executor receives a fully built :class:`~oasclient.models.RequestDescriptor`
and performs (or simulates) the HTTP call. The client never interprets what
comes back: responses of any status, and any exception the executor raises,
reach the caller unchanged.

Classes:
    :class:`RequestExecutor` -- the protocol every executor satisfies.
    :class:`HttpxExecutor` -- sends requests with :class:`httpx.AsyncClient`.
    :class:`DryRunExecutor` -- prints the request and returns a synthetic
    200 response without network I/O.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from oasclient.models import RequestDescriptor
from oasclient.output import get_output

logger = logging.getLogger(__name__)


@runtime_checkable
class RequestExecutor(Protocol):
    """Performs the HTTP call for one request descriptor."""

    async def execute(self, request: RequestDescriptor) -> Any:
        ...


def build_httpx_kwargs(request: RequestDescriptor) -> dict[str, Any]:
    """Translate a descriptor into keyword arguments for :meth:`httpx.AsyncClient.request`.

    Header values are stringified. The body is encoded by content type:
    ``str``/``bytes`` bodies are sent verbatim, mappings with a
    form-urlencoded content type as form data, and everything else as JSON.
    The descriptor's own ``Content-Type`` header always wins over the one
    httpx would derive.
    """
    kwargs: dict[str, Any] = {
        "method": request.method.upper(),
        "url": request.url,
        "headers": {str(k): str(v) for k, v in request.headers.items()},
    }
    if request.query:
        kwargs["params"] = request.query

    body = request.body
    content_type = (request.content_type or "").lower()
    if body is None:
        return kwargs
    if isinstance(body, (str, bytes)):
        kwargs["content"] = body
    elif "x-www-form-urlencoded" in content_type and isinstance(body, dict):
        kwargs["data"] = body
    else:
        kwargs["json"] = body
    return kwargs


class HttpxExecutor:
    """Executor backed by :class:`httpx.AsyncClient`.

    Args:
        client: An existing client to send requests with. The executor does
            not close a client it was given.
        **client_kwargs: Options for the client the executor creates on first
            use when *client* is ``None`` (``timeout``, ``verify``,
            ``transport``, ...).

    Example::

        async with HttpxExecutor(timeout=10) as executor:
            client = create_client(spec, executor=executor)
            response = await client["GET /pets"](query={"limit": 10})
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any) -> None:
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs

    async def __aenter__(self) -> HttpxExecutor:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def execute(self, request: RequestDescriptor) -> httpx.Response:
        """Send *request* and return the :class:`httpx.Response` as-is."""
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        kwargs = build_httpx_kwargs(request)
        logger.debug("Sending %s %s", kwargs["method"], request.url)
        return await self._client.request(**kwargs)

    async def aclose(self) -> None:
        """Close the underlying client if this executor created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class DryRunExecutor:
    """Executor that prints requests to stderr instead of sending them.

    Returns a synthetic 200 :class:`httpx.Response` whose JSON body echoes
    the request, so callers can continue without special-casing ``None``.
    """

    async def execute(self, request: RequestDescriptor) -> httpx.Response:
        output = get_output()
        method = request.method.upper()
        output.info(f"[dry-run] {method} {request.url}")

        for key, value in request.headers.items():
            output.info(f"  Header: {key}: {value}")
        for key, value in request.query.items():
            output.info(f"  Param: {key}={value}")
        if request.body is not None:
            rendered = request.body if isinstance(request.body, str) else json.dumps(request.body, indent=2, default=str)
            output.info(f"  Body ({request.content_type or 'unknown'}): {rendered}")

        return httpx.Response(
            status_code=200,
            headers={"content-type": "application/json"},
            json={
                "dry_run": True,
                "method": method,
                "url": request.url,
                "query": request.query,
                "headers": {str(k): str(v) for k, v in request.headers.items()},
                "body": request.body if not isinstance(request.body, bytes) else None,
            },
            request=httpx.Request(method=method, url=request.url),
        )
