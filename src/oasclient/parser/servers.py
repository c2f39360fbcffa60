"""Server URL templating.

Expands the ``servers`` declared for an operation into the candidate URLs a
route can be bound to. Each server URL may contain ``{variable}``
placeholders described by a *Server Variable Object*; callers may override
their values, but an override outside the variable's ``enum`` silently falls
back to the declared default.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from oasclient.models import Server, ServerVariable

logger = logging.getLogger(__name__)


def parse_servers(servers: Optional[Sequence[dict[str, Any]]]) -> tuple[Server, ...]:
    """Convert a raw ``servers`` array into :class:`~oasclient.models.Server` models.

    Returns an empty tuple when *servers* is ``None`` or empty.
    """
    parsed: list[Server] = []
    for server in servers or []:
        variables = tuple(
            ServerVariable(
                name=name,
                default=str(variable.get("default", "")),
                enum=[str(v) for v in variable["enum"]] if variable.get("enum") else None,
            )
            for name, variable in (server.get("variables") or {}).items()
        )
        parsed.append(
            Server(
                url=server.get("url", ""),
                description=server.get("description"),
                variables=variables,
            )
        )
    return tuple(parsed)


def variable_value(variable: ServerVariable, overrides: Mapping[str, Any]) -> str:
    """Return the effective value of one server variable.

    The caller's override wins when one was supplied and either the variable
    declares no ``enum`` or the override is a member of it. Otherwise the
    declared default is used.
    """
    value = overrides.get(variable.name)
    if value is None or value == "":
        return variable.default

    value = str(value)
    if variable.enum and value not in variable.enum:
        logger.debug(
            "Server variable '%s' value '%s' not in enum %s, using default '%s'",
            variable.name,
            value,
            variable.enum,
            variable.default,
        )
        return variable.default
    return value


def set_url_variables(url: str, variables: Sequence[ServerVariable], overrides: Mapping[str, Any]) -> str:
    """Substitute every ``{name}`` placeholder of *url* with its effective value."""
    for variable in variables:
        url = url.replace(f"{{{variable.name}}}", variable_value(variable, overrides))
    return url


def mount_path_urls(
    path: str,
    servers: Sequence[Server],
    server_variables: Optional[Mapping[str, Any]] = None,
    base_server_url: Optional[str] = None,
) -> list[str]:
    """Build the candidate URLs of an operation, one per server.

    Args:
        path: The operation path template (``{pathParam}`` placeholders are
            kept for the parameter resolver).
        servers: The servers in effect for the operation.
        server_variables: Caller overrides, keyed by variable name.
        base_server_url: Prefix used when no servers are declared at all.

    Returns:
        The server bases joined with *path*, in server order, or the single
        ``base_server_url + path`` fallback.

    Example::

        >>> mount_path_urls("/pets", parse_servers([{"url": "https://{env}.example.com",
        ...     "variables": {"env": {"default": "api", "enum": ["api", "staging"]}}}]),
        ...     {"env": "staging"})
        ['https://staging.example.com/pets']
    """
    if servers:
        overrides = server_variables or {}
        bases = [set_url_variables(server.url, server.variables, overrides) for server in servers]
    else:
        bases = [base_server_url or ""]

    # A base of "/" or "https://host/" must not produce "//pets".
    if path.startswith("/"):
        bases = [base.rstrip("/") for base in bases]
    return [f"{base}{path}" for base in bases]
