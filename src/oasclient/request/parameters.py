"""Parameter resolution: turn one call's inputs into a :class:`~oasclient.models.RequestDescriptor`.

For every parameter a route declares, the value is taken from the first
source that defines it (``None`` counts as undefined):

1. the location-keyed input (``path``, ``query``, ``headers`` or ``cookie``),
2. the flat ``data`` bag, keyed by parameter name only,
3. the effective default parameters (global merged with path-specific).

Resolved values are written by location: path values replace the first
``{name}`` placeholder of the URL, query and header values become query keys
and headers, and cookies accumulate in a jar that is finally serialized into a
single ``Cookie`` header (``name=value;`` pairs, no separators).

When unexpected parameters are allowed, a second pass writes every undeclared
default and then every location-keyed input, declared or not, so callers can
send parameters the spec does not describe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from oasclient.exceptions import MissingParameterError, UnsupportedMethodError
from oasclient.models import (
    CallInputs,
    DefaultParameters,
    HTTPMethod,
    ParameterLocation,
    RequestDescriptor,
    Route,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolveOptions:
    """Options that control :func:`make_request_descriptor`.

    Attributes:
        default_parameters: Effective defaults for the operation
            (``location -> name -> value``).
        validate_parameters: Fail on a required parameter without a value.
        allow_unexpected_params: Also send parameters the route does not
            declare.
    """

    default_parameters: DefaultParameters = field(default_factory=dict)
    validate_parameters: bool = True
    allow_unexpected_params: bool = True


def make_request_descriptor(
    route: Route,
    url: str,
    inputs: CallInputs,
    options: ResolveOptions,
) -> RequestDescriptor:
    """Resolve every parameter of *route* for one call.

    Args:
        route: The route being invoked.
        url: The bound URL template (server base + path, with ``{pathParam}``
            placeholders).
        inputs: The caller's inputs.
        options: Defaults and validation switches.

    Returns:
        A new descriptor with the URL, query, headers and cookies filled in.
        The body is attached separately by the body negotiator.

    Raises:
        UnsupportedMethodError: If the route is a ``trace`` operation.
        MissingParameterError: For the first required parameter without a
            value, when ``validate_parameters`` is set.
    """
    if route.method == HTTPMethod.TRACE:
        raise UnsupportedMethodError(route.method.value)

    descriptor = RequestDescriptor(method=route.method.value, url=url)
    defaults = options.default_parameters

    for parameter in route.parameters:
        location = parameter.location.value
        value = _first_defined(
            inputs.for_location(location).get(parameter.name),
            inputs.data.get(parameter.name),
            defaults.get(location, {}).get(parameter.name),
        )

        if value is None:
            if parameter.required and options.validate_parameters:
                raise MissingParameterError(parameter.name, location)
            continue

        set_parameter(descriptor, location, parameter.name, value)

    if options.allow_unexpected_params:
        declared = {parameter.identity for parameter in route.parameters}
        set_parameters(descriptor, defaults, skip=declared)
        set_parameters(descriptor, inputs.location_inputs())

    mount_cookie_header(descriptor)
    return descriptor


def _first_defined(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def set_parameter(descriptor: RequestDescriptor, location: str, name: str, value: Any) -> None:
    """Write one parameter value onto *descriptor* according to its location.

    Unknown locations are ignored.
    """
    if location == ParameterLocation.PATH.value:
        descriptor.url = descriptor.url.replace(f"{{{name}}}", str(value), 1)
    elif location == ParameterLocation.QUERY.value:
        descriptor.query[name] = value
    elif location in (ParameterLocation.HEADER.value, "headers"):
        descriptor.headers[name] = value
    elif location == ParameterLocation.COOKIE.value:
        descriptor.cookies[name] = value
    else:
        logger.debug("Ignoring parameter '%s' with unknown location '%s'", name, location)


def set_parameters(
    descriptor: RequestDescriptor,
    parameters: Mapping[str, Mapping[str, Any]],
    skip: Iterable[tuple[str, str]] = (),
) -> None:
    """Write every ``location -> name -> value`` entry of *parameters* onto *descriptor*.

    Entries whose ``(name, location)`` identity is in *skip*, and ``None``
    values, are not written.
    """
    skipped = set(skip)
    for location, values in parameters.items():
        for name, value in (values or {}).items():
            if value is None or (name, location) in skipped:
                continue
            set_parameter(descriptor, location, name, value)


def mount_cookie_header(descriptor: RequestDescriptor) -> None:
    """Serialize the cookie jar into the ``Cookie`` header.

    Pairs are written as ``name=value;`` in jar order and appended to any
    ``Cookie`` header the caller already set. Does nothing for an empty jar.
    """
    if not descriptor.cookies:
        return
    serialized = "".join(f"{name}={value};" for name, value in descriptor.cookies.items())
    descriptor.headers["Cookie"] = f"{descriptor.headers.get('Cookie', '')}{serialized}"
