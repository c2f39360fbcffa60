"""oasclient -- turn OpenAPI 3.x documents into callable HTTP clients.

Every ``path + method`` operation of a spec becomes an async callable that
resolves its parameters (per-call inputs, a flat ``data`` bag, then
configured defaults), templates the server URL, negotiates the body content
type, optionally validates the body against its schema, and hands the
finished request to a transport executor::

    from oasclient import create_client

    client = create_client(spec, default_parameters={"header": {"X-Api-Key": "..."}})
    response = await client.listPets(query={"limit": 10})

The ``oasclient`` console script exposes the same engine on the command line::

    oasclient operations petstore.yaml
    oasclient call petstore.yaml listPets -q limit=10 --dry-run

Modules:
    app: Typer CLI entry point.
    client: Client facade and transport executors.
    config: Config file loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    models: Pydantic models and per-call dataclasses.
    output: stdout/stderr formatting system with Rich support.
    parser: Spec loading, ``$ref`` resolution, routing, server templating.
    request: Parameter resolution and body negotiation.
"""

__version__ = "0.1.0"

from oasclient.client import (  # noqa: E402
    APIClient,
    DryRunExecutor,
    HttpxExecutor,
    Operation,
    RequestExecutor,
    create_client,
    fetch_and_create,
)
from oasclient.models import ClientConfig, RequestDescriptor  # noqa: E402

__all__ = [
    "APIClient",
    "ClientConfig",
    "DryRunExecutor",
    "HttpxExecutor",
    "Operation",
    "RequestDescriptor",
    "RequestExecutor",
    "__version__",
    "create_client",
    "fetch_and_create",
]
