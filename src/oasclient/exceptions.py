"""Exception hierarchy for oasclient.

All exceptions inherit from :class:`OASClientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oasclient.exit_codes`.
The CLI entry point in :func:`oasclient.app.main` catches ``OASClientError``
and exits with the appropriate code.

Errors fall into two groups:

* **Construction-time** -- :class:`SpecParseError` and its subclasses
  :class:`RefResolutionError` and :class:`VersionMismatchError`, plus
  :class:`ConfigError`. These prevent a client from being created.
* **Per-call** -- :class:`UnsupportedMethodError`,
  :class:`MissingParameterError`, :class:`InvalidBodySchemaError` and
  :class:`MissingDependencyError`. These fail a single operation call and
  leave the client usable.

Transport failures are not wrapped: whatever the executor raises reaches the
caller unchanged.

Subclass hierarchy::

    OASClientError (exit 1)
    +-- UnsupportedMethodError  (exit 2)
    +-- MissingParameterError   (exit 2)
    +-- InvalidBodySchemaError  (exit 2)
    +-- MissingDependencyError  (exit 1)
    +-- ConfigError             (exit 1)
    +-- SpecParseError          (exit 7)
        +-- RefResolutionError  (exit 7)
        +-- VersionMismatchError (exit 7)
"""

from __future__ import annotations

from oasclient.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class OASClientError(Exception):
    """Base exception for all oasclient errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnsupportedMethodError(OASClientError):
    """Raised when an operation whose method the client cannot send is invoked (``trace``)."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, method: str):
        super().__init__(f"{method.upper()} method is not implemented")
        self.method = method


class MissingParameterError(OASClientError):
    """Raised when a required parameter has no value and parameter validation is on.

    Only the first missing parameter (in declaration order) is reported.

    Attributes:
        name: The parameter name.
        location: The parameter location (``path``, ``query``, ``header``
            or ``cookie``).
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, name: str, location: str):
        super().__init__(f'Missing parameters: "{name}" in "{location}"')
        self.name = name
        self.location = location


class InvalidBodySchemaError(OASClientError):
    """Raised when a request body fails validation.

    Either the negotiated content type has no schema declared in the spec, or
    the schema validator reported errors (joined into one message).
    """

    exit_code = EXIT_INVALID_USAGE


class MissingDependencyError(OASClientError):
    """Raised when body validation is requested but no schema validator is available.

    Install the ``validation`` extra (``pip install oasclient[validation]``)
    or pass a validator to :func:`~oasclient.client.create_client`.
    """

    exit_code = EXIT_GENERIC_FAILURE


class ConfigError(OASClientError):
    """Raised for configuration problems (invalid files, bad values, out-of-range server index)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(OASClientError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or is not OpenAPI 3.x."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class RefResolutionError(SpecParseError):
    """Raised when a ``$ref`` pointer cannot be traversed.

    Always raised while the client is being constructed, never on a later call.
    """


class VersionMismatchError(SpecParseError):
    """Raised when a fetched spec's ``info.version`` differs from the expected version."""

    def __init__(self, expected: str, actual: str | None):
        super().__init__(f"Unexpected version: Expected {expected} but got {actual}")
        self.expected = expected
        self.actual = actual
