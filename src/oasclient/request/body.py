"""Request body content negotiation and validation.

Picks the content type an outgoing body is sent with, locates the schema the
spec declares for that type, and optionally validates the body against it.

Content type selection order:

1. an explicit override (the per-call ``content_type`` option, or a
   ``Content-Type`` header the caller already set),
2. ``application/json`` for post/put/patch when the spec declares a schema
   for it,
3. the first content type the spec declares for the body,
4. ``application/json`` for post/put/patch even without a declaration.

A call without a body skips all of this: no ``Content-Type`` is forced and
nothing is validated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from oasclient.exceptions import InvalidBodySchemaError, MissingDependencyError
from oasclient.models import HTTPMethod, RequestBodySpec, RequestDescriptor
from oasclient.request.validation import SchemaValidator

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

_METHOD_DEFAULT_CONTENT_TYPES = {
    HTTPMethod.POST: JSON_CONTENT_TYPE,
    HTTPMethod.PUT: JSON_CONTENT_TYPE,
    HTTPMethod.PATCH: JSON_CONTENT_TYPE,
}


@dataclass(frozen=True)
class NegotiatedBody:
    """A body together with the content type it will be sent as."""

    content_type: Optional[str]
    value: Any


def select_content_type(
    request_body: Optional[RequestBodySpec],
    method: HTTPMethod,
    override: Optional[str] = None,
) -> Optional[str]:
    """Return the content type a body should be sent with.

    Args:
        request_body: The route's body declaration, if any.
        method: The route's HTTP method.
        override: Caller-chosen content type; always wins when set.

    Returns:
        The selected content type, or ``None`` when nothing applies (e.g. a
        GET body with no declaration and no override).
    """
    if override:
        return override

    method_default = _METHOD_DEFAULT_CONTENT_TYPES.get(method)
    declared = request_body.content_types if request_body else []

    if method_default and request_body and request_body.schema_for(method_default) is not None:
        return method_default
    if declared:
        return declared[0]
    return method_default


def resolve_body(
    request_body: Optional[RequestBodySpec],
    body: Any,
    method: HTTPMethod,
    content_type: Optional[str] = None,
    validate: bool = False,
    validator: Optional[SchemaValidator] = None,
) -> Optional[NegotiatedBody]:
    """Negotiate the content type of *body* and validate it if requested.

    Args:
        request_body: The route's body declaration, if any.
        body: The caller's body. ``None`` means the call has no body.
        method: The route's HTTP method.
        content_type: Explicit content type override.
        validate: Whether to validate *body* against the declared schema.
        validator: The schema validator to use when *validate* is set.

    Returns:
        The negotiated body, or ``None`` when *body* is ``None``.

    Raises:
        InvalidBodySchemaError: If validation is requested and the selected
            content type has no declared schema, or the validator reports
            errors.
        MissingDependencyError: If validation is requested and no validator
            is available.
    """
    if body is None:
        return None

    selected = select_content_type(request_body, method, content_type)

    if validate:
        schema = request_body.schema_for(selected) if request_body and selected else None
        if schema is None:
            raise InvalidBodySchemaError(
                f'Invalid Body Schema: no schema declared for content type "{selected}"'
            )
        if validator is None:
            raise MissingDependencyError(
                "Body validation requires a schema validator. "
                "Install it with: pip install oasclient[validation]"
            )
        errors = validator.validate(schema, body)
        if errors:
            raise InvalidBodySchemaError(f"Invalid Body Schema: {'; '.join(errors)}")
        logger.debug("Body validated against %s schema", selected)

    return NegotiatedBody(content_type=selected, value=body)


def attach_body(
    descriptor: RequestDescriptor,
    request_body: Optional[RequestBodySpec],
    body: Any,
    method: HTTPMethod,
    content_type: Optional[str] = None,
    validate: bool = False,
    validator: Optional[SchemaValidator] = None,
) -> None:
    """Negotiate *body* and write it, with its ``Content-Type``, onto *descriptor*.

    A ``Content-Type`` header already present on the descriptor counts as an
    override when *content_type* is not given.
    """
    header_name = _find_header(descriptor.headers, "content-type")
    if content_type is None and header_name is not None:
        content_type = str(descriptor.headers[header_name])

    negotiated = resolve_body(request_body, body, method, content_type, validate, validator)
    if negotiated is None:
        return

    if negotiated.content_type is not None:
        if header_name is not None:
            del descriptor.headers[header_name]
        descriptor.headers["Content-Type"] = negotiated.content_type
    descriptor.content_type = negotiated.content_type
    descriptor.body = negotiated.value


def _find_header(headers: dict[str, Any], name: str) -> Optional[str]:
    """Return the key of header *name* in *headers*, matched case-insensitively."""
    for key in headers:
        if key.lower() == name:
            return key
    return None
