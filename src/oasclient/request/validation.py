"""Schema validator capability used by the body negotiator.

The negotiator only decides *which* schema applies to a body; evaluating it is
delegated to a :class:`SchemaValidator`. Any object with a
``validate(schema, value) -> list[str]`` method qualifies, so callers can
inject their own engine.

The bundled :class:`JsonSchemaValidator` wraps :mod:`jsonschema`, which is an
optional dependency (``pip install oasclient[validation]``).
:func:`load_default_validator` returns ``None`` when it is not installed; the
client then raises :class:`~oasclient.exceptions.MissingDependencyError` the
first time body validation is actually requested.
"""

from __future__ import annotations

import importlib.util
import logging
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SchemaValidator(Protocol):
    """Validates a value against a JSON Schema."""

    def validate(self, schema: Any, value: Any) -> list[str]:
        """Return human-readable error messages; an empty list means *value* is valid."""
        ...


class JsonSchemaValidator:
    """:class:`SchemaValidator` backed by :mod:`jsonschema`.

    The validator class is picked from the schema's ``$schema`` keyword via
    :func:`jsonschema.validators.validator_for`, defaulting to the latest
    draft for OpenAPI schemas, which usually omit it.

    Errors are reported in document order of the offending value, each
    prefixed with its JSON path when the error is not at the root::

        ["'status' is a required property", "age: 'x' is not of type 'integer'"]
    """

    def validate(self, schema: Any, value: Any) -> list[str]:
        import jsonschema

        validator_cls = jsonschema.validators.validator_for(schema)
        validator = validator_cls(schema)
        errors = sorted(
            validator.iter_errors(value),
            key=lambda e: [str(part) for part in e.absolute_path],
        )
        return [_format_error(error) for error in errors]


def _format_error(error: Any) -> str:
    location = "/".join(str(part) for part in error.absolute_path)
    return f"{location}: {error.message}" if location else error.message


def load_default_validator() -> Optional[SchemaValidator]:
    """Return a :class:`JsonSchemaValidator` if :mod:`jsonschema` is importable, else ``None``."""
    if importlib.util.find_spec("jsonschema") is None:
        logger.debug("jsonschema is not installed, no default body validator")
        return None
    return JsonSchemaValidator()
