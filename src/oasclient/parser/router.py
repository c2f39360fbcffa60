"""Extract normalized :class:`~oasclient.models.Route` descriptors from an OpenAPI 3.x spec.

This module walks the ``paths`` object of a spec and builds one immutable
route per path + HTTP method operation, in document order. The single public
entry point is :func:`get_routes`. Internally it delegates to private helpers
that each handle one part of an operation:

* ``_merge_parameters`` -- operation-level parameters first, then path-level
  parameters not overridden by an operation parameter with the same ``name``
  and ``in`` values.
* ``_select_servers`` -- operation servers win over path-item servers, which
  win over root servers.
* ``_extract_request_body`` -- media types in declaration order, with their
  schemas' ``$ref`` pointers inlined.

Keys starting with ``x`` (vendor extensions) are skipped both in ``paths`` and
inside every path item.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional

from oasclient.exceptions import SpecParseError
from oasclient.models import (
    HTTPMethod,
    Parameter,
    ParameterLocation,
    RequestBodySpec,
    Route,
)
from oasclient.parser.resolver import bundle_schema, resolve_object, resolve_schema
from oasclient.parser.servers import mount_path_urls, parse_servers

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)
_LOCATIONS = frozenset(loc.value for loc in ParameterLocation)


def is_extension_property(key: str) -> bool:
    """Return ``True`` for vendor-extension keys (first character is ``x`` or ``X``)."""
    return bool(key) and key[0].lower() == "x"


def is_operation_key(key: str) -> bool:
    """Return ``True`` if *key* names one of the eight OpenAPI HTTP methods."""
    return key in _HTTP_METHODS


def get_routes(
    spec: Mapping[str, Any],
    base_server_url: Optional[str] = None,
    server_variables: Optional[Mapping[str, Any]] = None,
) -> list[Route]:
    """Extract every operation of *spec* as a :class:`~oasclient.models.Route`.

    The spec is deep-copied first, so the schemas stored on the routes never
    share mutable state with the caller's document.

    Args:
        spec: A deserialized OpenAPI 3.x document.
        base_server_url: Prefix for operations that have no servers declared
            at any level.
        server_variables: Overrides for server URL template variables, keyed
            by variable name.

    Returns:
        One route per operation, in document order.

    Raises:
        SpecParseError: If ``paths`` or a path item is not a mapping.
        RefResolutionError: If a parameter, request body, or body schema
            ``$ref`` cannot be resolved.

    Example::

        routes = get_routes(spec, base_server_url="http://127.0.0.1")
        for route in routes:
            print(route.key, route.urls[0])
    """
    root: dict[str, Any] = copy.deepcopy(dict(spec))
    root_servers = root.get("servers")
    paths = root.get("paths") or {}
    if not isinstance(paths, dict):
        raise SpecParseError(f"'paths' must be an object, got {type(paths).__name__}")

    routes: list[Route] = []
    for path, path_item in paths.items():
        if is_extension_property(path):
            continue
        if not isinstance(path_item, dict):
            raise SpecParseError(f"Path item '{path}' must be an object")

        path_params = path_item.get("parameters")
        path_servers = path_item.get("servers")

        for key, operation in path_item.items():
            if is_extension_property(key) or not is_operation_key(key):
                continue
            if not isinstance(operation, dict):
                raise SpecParseError(f"Operation '{key} {path}' must be an object")

            servers = parse_servers(_select_servers(operation.get("servers"), path_servers, root_servers))
            routes.append(
                Route(
                    path=path,
                    method=HTTPMethod(key.lower()),
                    operation_id=operation.get("operationId"),
                    urls=tuple(mount_path_urls(path, servers, server_variables, base_server_url)),
                    servers=servers,
                    parameters=_merge_parameters(operation.get("parameters"), path_params, root),
                    request_body=_extract_request_body(operation.get("requestBody"), root),
                )
            )

    logger.debug("Extracted %d routes from %d paths", len(routes), len(paths))
    return routes


def _select_servers(
    operation_servers: Optional[list[Any]],
    path_servers: Optional[list[Any]],
    root_servers: Optional[list[Any]],
) -> Optional[list[Any]]:
    """Pick the most specific declared ``servers`` array.

    An explicit empty array counts as declared, so ``servers: []`` on an
    operation drops the path and root servers and the route falls back to
    the base server URL.
    """
    for servers in (operation_servers, path_servers, root_servers):
        if servers is not None:
            return servers
    return None


def _merge_parameters(
    op_params: Optional[list[Any]],
    path_params: Optional[list[Any]],
    root: dict[str, Any],
) -> tuple[Parameter, ...]:
    """Merge operation-level and path-level parameters.

    Operation parameters come first, in declaration order. A path-level
    parameter is appended only when no operation parameter shares its
    ``(name, in)`` identity.

    Args:
        op_params: Raw parameters defined on the operation.
        path_params: Raw parameters defined on the path item.
        root: The root document, for ``$ref`` parameters.

    Returns:
        The merged parameters.
    """
    operation = [_extract_parameter(p, root) for p in op_params or []]
    path_level = [_extract_parameter(p, root) for p in path_params or []]

    merged = [p for p in operation if p is not None]
    taken = {p.identity for p in merged}
    merged.extend(p for p in path_level if p is not None and p.identity not in taken)
    return tuple(merged)


def _extract_parameter(raw: Any, root: dict[str, Any]) -> Optional[Parameter]:
    """Convert one raw parameter object, following a ``$ref`` if present.

    Parameters with an unrecognised ``in`` location are skipped.
    """
    param = resolve_object(raw, root)
    location = param.get("in")
    if location not in _LOCATIONS:
        logger.warning(
            "Skipping parameter '%s' with unsupported location '%s'",
            param.get("name"),
            location,
        )
        return None

    return Parameter(
        name=param.get("name", ""),
        location=ParameterLocation(location),
        required=bool(param.get("required", False)),
        description=param.get("description"),
    )


def _extract_request_body(raw: Any, root: dict[str, Any]) -> Optional[RequestBodySpec]:
    """Build the request body declaration of an operation.

    Follows a ``$ref`` request body, keeps media types in declaration order,
    inlines every ``$ref`` found in their schemas and bundles the targets of
    self-references under ``$defs``.

    Args:
        raw: The raw ``requestBody`` object, or ``None``.
        root: The root document.

    Returns:
        A :class:`~oasclient.models.RequestBodySpec`, or ``None`` when the
        operation declares no request body.
    """
    if raw is None:
        return None

    body = resolve_object(raw, root)
    content: dict[str, Any] = {}
    for content_type, media in (body.get("content") or {}).items():
        schema = media.get("schema") if isinstance(media, dict) else None
        if schema is not None:
            schema = bundle_schema(resolve_schema(schema, root), root)
        content[content_type] = schema

    return RequestBodySpec(required=bool(body.get("required", False)), content=content)
