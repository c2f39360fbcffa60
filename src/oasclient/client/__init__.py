"""Client facade and transport executors.

:func:`create_client` and :func:`fetch_and_create` turn an OpenAPI 3.x
document into an :class:`APIClient`: an ordered mapping of operation keys to
async callables. Requests are sent through a pluggable
:class:`~oasclient.client.transport.RequestExecutor`.

Classes:
    :class:`APIClient` -- the operation table.
    :class:`Operation` -- one callable operation.
    :class:`HttpxExecutor` -- default executor backed by :class:`httpx.AsyncClient`.
    :class:`DryRunExecutor` -- prints requests instead of sending them.

Example::

    from oasclient.client import create_client

    async with create_client(spec) as client:
        resp = await client["GET /pets"](query={"limit": 10})
"""

from oasclient.client.api_client import APIClient, Operation, create_client, fetch_and_create
from oasclient.client.transport import DryRunExecutor, HttpxExecutor, RequestExecutor

__all__ = [
    "APIClient",
    "DryRunExecutor",
    "HttpxExecutor",
    "Operation",
    "RequestExecutor",
    "create_client",
    "fetch_and_create",
]
