"""Canonical models shared across all oasclient modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Route models** -- produced once by the spec router and read-only afterwards:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`RequestBodySpec`, :class:`ServerVariable`, :class:`Server` and
    :class:`Route`. All of them are frozen Pydantic models.

**Configuration models** -- construction-time options of a client, loadable
from JSON/YAML files:
    :class:`PathConfig` and :class:`ClientConfig`.

**Per-call models** -- built fresh for every operation invocation:
    :class:`CallInputs` and :class:`RequestDescriptor` (plain dataclasses).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DefaultParameters = dict[str, dict[str, Any]]
"""Two-level mapping ``location -> parameter name -> value``."""

_LOCATION_ALIASES = {"headers": "header"}


def normalize_parameter_map(params: Optional[Mapping[str, Any]]) -> DefaultParameters:
    """Return a copy of a ``location -> name -> value`` map with canonical location keys.

    The plural ``headers`` (the name of the per-call input) is accepted as an
    alias for the ``header`` location. Locations are copied one level deep so
    callers can keep mutating their own dicts.
    """
    normalized: DefaultParameters = {}
    for location, values in (params or {}).items():
        key = _LOCATION_ALIASES.get(location, location)
        normalized.setdefault(key, {}).update(values or {})
    return normalized


# --- Route models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class Parameter(BaseModel):
    """A single declared parameter of a route.

    Identity is the ``(name, location)`` pair: an operation-level parameter
    replaces a path-item parameter with the same identity.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None

    @property
    def identity(self) -> tuple[str, str]:
        return self.name, self.location.value


class RequestBodySpec(BaseModel):
    """Request body declaration of a route.

    ``content`` preserves the declaration order of the media types, which is
    what the body negotiator falls back to when no better content type is
    available. A media type that declares no schema maps to ``None``.
    """

    model_config = ConfigDict(frozen=True)

    required: bool = False
    content: dict[str, Optional[Any]] = Field(default_factory=dict)

    @property
    def content_types(self) -> list[str]:
        return list(self.content)

    def schema_for(self, content_type: str) -> Optional[Any]:
        return self.content.get(content_type)


class ServerVariable(BaseModel):
    """A ``{name}`` placeholder of a server URL template."""

    model_config = ConfigDict(frozen=True)

    name: str
    default: str
    enum: Optional[list[str]] = None


class Server(BaseModel):
    """A server entry from a ``servers`` array (root, path item, or operation)."""

    model_config = ConfigDict(frozen=True)

    url: str
    description: Optional[str] = None
    variables: tuple[ServerVariable, ...] = ()


class Route(BaseModel):
    """Normalized, immutable descriptor of one path + method operation.

    ``urls`` holds one candidate URL template per server (server base joined
    with the still-templated operation path). ``servers`` keeps the servers
    those URLs came from so a call can re-template them with its own server
    variables.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    urls: tuple[str, ...]
    servers: tuple[Server, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    request_body: Optional[RequestBodySpec] = None

    @property
    def key(self) -> str:
        """Canonical ``"METHOD /path"`` key, e.g. ``"GET /pets/{petId}"``."""
        return f"{self.method.value.upper()} {self.path}"


# --- Configuration models ---


class PathConfig(BaseModel):
    """Per-operation configuration, keyed by the canonical ``"METHOD /path"`` string."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    default_parameters: DefaultParameters = Field(
        default_factory=dict, alias="defaultParameters"
    )
    operation_id: Optional[str] = Field(
        default=None,
        alias="operationId",
        description="Alias that replaces the spec's operationId for this operation",
    )

    @field_validator("default_parameters", mode="before")
    @classmethod
    def _normalize_defaults(cls, value: Any) -> DefaultParameters:
        return normalize_parameter_map(value)


class ClientConfig(BaseModel):
    """Construction-time options of an :class:`~oasclient.client.APIClient`.

    Field names accept both the snake_case names below and the camelCase
    spelling used in JSON configuration files (``serverUrlIndex``,
    ``validateBody``, ...).

    See Also:
        :func:`~oasclient.config.resolve_config` for the precedence chain
        applied when the CLI builds a config.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    server_url_index: int = Field(
        default=0, alias="serverUrlIndex", description="Which candidate server URL to bind"
    )
    validate_parameters: bool = Field(default=True, alias="validateParameters")
    allow_unexpected_params: bool = Field(default=True, alias="allowUnexpectedParams")
    validate_body: bool = Field(default=False, alias="validateBody")
    default_parameters: DefaultParameters = Field(
        default_factory=dict, alias="defaultParameters"
    )
    path_default_parameters: dict[str, DefaultParameters] = Field(
        default_factory=dict, alias="pathDefaultParameters"
    )
    paths: dict[str, PathConfig] = Field(default_factory=dict)
    server_variables: dict[str, str] = Field(default_factory=dict, alias="serverVariables")
    base_server_url: Optional[str] = Field(
        default=None,
        alias="baseServerUrl",
        description="Prefix for routes whose spec declares no servers",
    )
    expected_version: Optional[str] = Field(
        default=None,
        alias="expectedVersion",
        description="Required info.version when the spec is fetched",
    )

    @field_validator("default_parameters", mode="before")
    @classmethod
    def _normalize_defaults(cls, value: Any) -> DefaultParameters:
        return normalize_parameter_map(value)

    @field_validator("path_default_parameters", mode="before")
    @classmethod
    def _normalize_path_defaults(cls, value: Any) -> dict[str, DefaultParameters]:
        return {key: normalize_parameter_map(params) for key, params in (value or {}).items()}

    @field_validator("server_variables", mode="before")
    @classmethod
    def _stringify_server_variables(cls, value: Any) -> Any:
        # YAML and JSON config files give numbers for values such as ports.
        if not isinstance(value, Mapping):
            return value
        return {str(key): str(val) for key, val in value.items() if val is not None}


# --- Per-call models ---


@dataclass
class CallInputs:
    """Caller-supplied inputs of one operation invocation.

    ``data`` is a flat bag keyed by parameter name regardless of location;
    the other mappings are keyed by location.
    """

    data: dict[str, Any] = field(default_factory=dict)
    path: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)
    cookie: dict[str, Any] = field(default_factory=dict)
    body: Any = None

    def for_location(self, location: str) -> dict[str, Any]:
        """Return the location-keyed input for a parameter location."""
        if location == ParameterLocation.HEADER.value:
            return self.headers
        return getattr(self, location, None) or {}

    def location_inputs(self) -> DefaultParameters:
        """Return the location-keyed inputs as a ``location -> name -> value`` map."""
        return {
            ParameterLocation.PATH.value: self.path,
            ParameterLocation.QUERY.value: self.query,
            ParameterLocation.HEADER.value: self.headers,
            ParameterLocation.COOKIE.value: self.cookie,
        }


@dataclass
class RequestDescriptor:
    """The fully resolved, transport-ready representation of one call.

    Attributes:
        method: Lowercase HTTP method.
        url: URL with server variables and path parameters substituted.
        query: Query parameters.
        headers: Request headers, including the synthesized ``Cookie`` and
            ``Content-Type`` headers.
        cookies: The cookie jar the ``Cookie`` header was serialized from.
        body: The request body, or ``None`` when the call has none.
        content_type: The negotiated body content type, if any.
    """

    method: str
    url: str
    query: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)
    cookies: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    content_type: Optional[str] = None
