"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oasclient.exceptions.OASClientError` subclass or by
the HTTP status mapping in :mod:`oasclient.app`.

Example::

    $ oasclient call petstore.json listPets
    $ echo $?
    2   # EXIT_INVALID_USAGE -- required parameter "limit" was not supplied
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The operation was invoked with missing parameters or an invalid body."""

EXIT_AUTH_FAILURE = 3
"""The remote API answered HTTP 401 or 403."""

EXIT_NOT_FOUND = 4
"""The remote API answered HTTP 404."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or resolved."""

EXIT_INTERRUPTED = 130
"""The command was cancelled with Ctrl-C."""
