"""OpenAPI spec parser -- load documents, resolve ``$ref`` pointers, and extract routes.

This sub-package is responsible for the construction half of the oasclient
pipeline: turning a raw OpenAPI 3.x document into an ordered list of
immutable :class:`~oasclient.models.Route` descriptors.

Typical usage::

    from oasclient.parser import get_routes, load_spec, validate_openapi_version

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_openapi_version(raw)
    routes = get_routes(raw)

Sub-modules:

* :mod:`~oasclient.parser.loader` -- I/O layer (URL, file, stdin, string)
  plus format detection and version checks.
* :mod:`~oasclient.parser.resolver` -- ``$ref`` pointer resolution.
* :mod:`~oasclient.parser.servers` -- server URL templating.
* :mod:`~oasclient.parser.router` -- walks ``paths`` and produces routes.
"""

from oasclient.parser.loader import load_spec, parse_spec_content, validate_openapi_version
from oasclient.parser.router import get_routes
from oasclient.parser.servers import mount_path_urls

__all__ = [
    "get_routes",
    "load_spec",
    "mount_path_urls",
    "parse_spec_content",
    "validate_openapi_version",
]
