"""Per-call request construction.

Runs on every operation invocation and never touches the network:

* :mod:`~oasclient.request.parameters` -- resolves parameter values by
  precedence, validates required parameters, and fills the URL, query,
  headers and ``Cookie`` header.
* :mod:`~oasclient.request.body` -- negotiates the body content type and
  validates the body against the declared schema.
* :mod:`~oasclient.request.validation` -- the schema validator capability and
  its :mod:`jsonschema` adapter.
"""

from oasclient.request.body import NegotiatedBody, attach_body, resolve_body, select_content_type
from oasclient.request.parameters import ResolveOptions, make_request_descriptor
from oasclient.request.validation import JsonSchemaValidator, SchemaValidator, load_default_validator

__all__ = [
    "JsonSchemaValidator",
    "NegotiatedBody",
    "ResolveOptions",
    "SchemaValidator",
    "attach_body",
    "load_default_validator",
    "make_request_descriptor",
    "resolve_body",
    "select_content_type",
]
