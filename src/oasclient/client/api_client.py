"""Client facade -- one callable :class:`Operation` per OpenAPI operation.

:class:`APIClient` is a read-only, ordered :class:`~collections.abc.Mapping`
from operation keys to :class:`Operation` objects. Every operation is listed
under its canonical ``"METHOD /path"`` key and, when it has one, under its
operationId (a ``paths[<key>].operation_id`` config entry overrides the
spec's). Both keys map to the same object::

    client = create_client(spec, server_url_index=0)
    list(client)            # ['GET /pets', 'listPets', 'POST /pets', ...]
    response = await client["GET /pets"](query={"limit": 10})
    response = await client.listPets(query={"limit": 10})

Configuration, default-parameter tables, the executor and the validator are
held in a private :class:`_ClientState` and never appear among the keys.

Entry points:

* :func:`create_client` -- build a client from a mapping or a JSON/YAML
  string.
* :func:`fetch_and_create` -- load a spec from a URL, file, or stdin, check
  its version, then build a client.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from oasclient.client.transport import HttpxExecutor, RequestExecutor
from oasclient.config import validate_config
from oasclient.exceptions import ConfigError, SpecParseError
from oasclient.models import (
    CallInputs,
    ClientConfig,
    DefaultParameters,
    RequestDescriptor,
    Route,
    normalize_parameter_map,
)
from oasclient.parser.loader import (
    base_server_url_from,
    check_expected_version,
    load_spec,
    parse_spec_content,
    validate_openapi_version,
)
from oasclient.parser.router import get_routes
from oasclient.parser.servers import mount_path_urls
from oasclient.request.body import attach_body
from oasclient.request.parameters import ResolveOptions, make_request_descriptor
from oasclient.request.validation import SchemaValidator, load_default_validator

logger = logging.getLogger(__name__)

_SPEC_FORMATS = ("json", "yaml", "yml")


@dataclass
class _ClientState:
    """Mutable state shared by a client and its operations."""

    config: ClientConfig
    executor: RequestExecutor
    validator: Optional[SchemaValidator] = None
    validator_loaded: bool = False
    default_parameters: DefaultParameters = field(default_factory=dict)
    path_default_parameters: dict[str, DefaultParameters] = field(default_factory=dict)

    def effective_defaults(self, key: str) -> DefaultParameters:
        """Global defaults overlaid with the path-specific ones, per ``location.name``."""
        merged = normalize_parameter_map(self.default_parameters)
        for location, values in self.path_default_parameters.get(key, {}).items():
            merged.setdefault(location, {}).update(values)
        return merged

    def get_validator(self) -> Optional[SchemaValidator]:
        if self.validator is None and not self.validator_loaded:
            self.validator = load_default_validator()
            self.validator_loaded = True
        return self.validator


class Operation:
    """A callable bound to one route of the spec.

    Attributes:
        key: Canonical ``"METHOD /path"`` key.
        route: The parsed route.
        url: The URL template bound at construction (``server_url_index``).
        operation_id: The alias the operation is also listed under, if any.
    """

    def __init__(self, route: Route, url: str, state: _ClientState, operation_id: Optional[str] = None) -> None:
        self.route = route
        self.url = url
        self.operation_id = operation_id
        self._state = state

    @property
    def key(self) -> str:
        return self.route.key

    def __repr__(self) -> str:
        return f"<Operation {self.key} -> {self.url}>"

    def build_request(
        self,
        data: Optional[Mapping[str, Any]] = None,
        path: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
        cookie: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        *,
        content_type: Optional[str] = None,
        server_variables: Optional[Mapping[str, Any]] = None,
    ) -> RequestDescriptor:
        """Build the request for one call without sending it.

        Args:
            data: Values keyed by parameter name, whatever their location.
            path: Path parameter values.
            query: Query parameter values.
            headers: Header values.
            cookie: Cookie values.
            body: The request body; ``None`` sends no body.
            content_type: Content type to send the body with.
            server_variables: Server variable overrides for this call only.

        Raises:
            UnsupportedMethodError: For ``trace`` operations.
            MissingParameterError: For the first unresolved required
                parameter, when parameter validation is on.
            InvalidBodySchemaError: When body validation is on and the body
                does not match its schema.
            MissingDependencyError: When body validation is on and no
                validator is available.
        """
        state = self._state
        config = state.config
        inputs = CallInputs(
            data=dict(data or {}),
            path=dict(path or {}),
            query=dict(query or {}),
            headers=dict(headers or {}),
            cookie=dict(cookie or {}),
            body=body,
        )
        options = ResolveOptions(
            default_parameters=state.effective_defaults(self.key),
            validate_parameters=config.validate_parameters,
            allow_unexpected_params=config.allow_unexpected_params,
        )

        descriptor = make_request_descriptor(self.route, self._bind_url(server_variables), inputs, options)
        attach_body(
            descriptor,
            self.route.request_body,
            inputs.body,
            self.route.method,
            content_type=content_type,
            validate=config.validate_body,
            validator=state.get_validator() if config.validate_body and inputs.body is not None else None,
        )
        logger.debug("Built %s request for %s", descriptor.method.upper(), descriptor.url)
        return descriptor

    async def __call__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        path: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
        cookie: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        *,
        content_type: Optional[str] = None,
        server_variables: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Build the request and hand it to the executor.

        Returns whatever the executor returns, unmodified. Executor
        exceptions propagate unchanged.
        """
        descriptor = self.build_request(
            data,
            path,
            query,
            headers,
            cookie,
            body,
            content_type=content_type,
            server_variables=server_variables,
        )
        return await self._state.executor.execute(descriptor)

    def _bind_url(self, server_variables: Optional[Mapping[str, Any]]) -> str:
        if not server_variables:
            return self.url
        config = self._state.config
        urls = mount_path_urls(
            self.route.path,
            self.route.servers,
            {**config.server_variables, **server_variables},
            config.base_server_url,
        )
        return urls[config.server_url_index]


class APIClient(Mapping[str, Operation]):
    """Ordered mapping of operation keys to :class:`Operation` objects.

    Use :func:`create_client` or :func:`fetch_and_create` rather than
    constructing this directly.

    Args:
        routes: Parsed routes, in document order.
        config: Validated client configuration.
        executor: Transport executor. Defaults to a new
            :class:`~oasclient.client.transport.HttpxExecutor`.
        validator: Schema validator for body validation. When ``None``, the
            :mod:`jsonschema` adapter is loaded on first use if installed.

    Raises:
        ConfigError: If ``server_url_index`` is outside the candidate URLs of
            any route.
    """

    def __init__(
        self,
        routes: list[Route],
        config: ClientConfig,
        executor: Optional[RequestExecutor] = None,
        validator: Optional[SchemaValidator] = None,
    ) -> None:
        self._state = _ClientState(
            config=config,
            executor=executor if executor is not None else HttpxExecutor(),
            validator=validator,
            validator_loaded=validator is not None,
            default_parameters=normalize_parameter_map(config.default_parameters),
        )
        self._operations: dict[str, Operation] = {}
        self._aliases: dict[str, str] = {}
        self._configure_routes(routes)

        self.set_path_default_parameters(config.path_default_parameters)

    def _configure_routes(self, routes: list[Route]) -> None:
        config = self._state.config
        index = config.server_url_index

        for route in routes:
            key = route.key
            if not 0 <= index < len(route.urls):
                raise ConfigError(
                    f"server_url_index {index} is out of range for '{key}' "
                    f"({len(route.urls)} server URL(s) available)"
                )

            path_config = config.paths.get(key)
            operation_id = (path_config and path_config.operation_id) or route.operation_id
            operation = Operation(route, route.urls[index], self._state, operation_id)
            self._operations[key] = operation

            if path_config and path_config.default_parameters:
                self._state.path_default_parameters[key] = normalize_parameter_map(
                    path_config.default_parameters
                )

            if operation_id:
                if operation_id in self._operations:
                    logger.warning(
                        "Operation alias '%s' is already taken; '%s' now owns it", operation_id, key
                    )
                self._operations[operation_id] = operation
                self._aliases[operation_id] = key

        logger.debug("Configured %d operations (%d aliases)", len(routes), len(self._aliases))

    # ------------------------------------------------------------------ #
    # Mapping protocol
    # ------------------------------------------------------------------ #

    def __getitem__(self, key: str) -> Operation:
        return self._operations[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __getattr__(self, name: str) -> Operation:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._operations[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!s} has no operation '{name}'") from None

    def __repr__(self) -> str:
        return f"<APIClient {len(self.routes)} operations>"

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._state.config

    @property
    def executor(self) -> RequestExecutor:
        return self._state.executor

    @property
    def routes(self) -> list[Route]:
        """The routes of the client in document order (canonical keys only)."""
        seen: dict[str, Route] = {}
        for operation in self._operations.values():
            seen.setdefault(operation.key, operation.route)
        return list(seen.values())

    def canonical_key(self, key: str) -> str:
        """Return the ``"METHOD /path"`` key for an operation key or alias."""
        return self._aliases.get(key, key)

    # ------------------------------------------------------------------ #
    # Default parameters
    # ------------------------------------------------------------------ #

    @property
    def default_parameters(self) -> DefaultParameters:
        return self._state.default_parameters

    def set_default_parameters(self, params: Mapping[str, Mapping[str, Any]]) -> None:
        """Replace the global defaults of each location present in *params*.

        Locations absent from *params* keep their current defaults. Takes
        effect from the next call.
        """
        for location, values in normalize_parameter_map(params).items():
            self._state.default_parameters[location] = values

    def set_path_default_parameters(self, params: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> None:
        """Replace path-specific defaults, per operation key and location.

        Args:
            params: ``{operation key or alias: {location: {name: value}}}``.
        """
        for key, operation_params in params.items():
            canonical = self.canonical_key(key)
            current = self._state.path_default_parameters.setdefault(canonical, {})
            for location, values in normalize_parameter_map(operation_params).items():
                current[location] = values

    def get_path_default_parameters(self, key: str) -> DefaultParameters:
        """Return the effective defaults one call of operation *key* would use."""
        return self._state.effective_defaults(self.canonical_key(key))

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def aclose(self) -> None:
        """Close the executor, if it supports closing."""
        close = getattr(self._state.executor, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def _merge_config(config: Optional[ClientConfig], options: Mapping[str, Any]) -> ClientConfig:
    if not options:
        return config if config is not None else ClientConfig()
    base = config.model_dump() if config is not None else {}
    return validate_config({**base, **options})


def create_client(
    spec: Union[Mapping[str, Any], str],
    *,
    spec_format: Optional[str] = None,
    config: Optional[ClientConfig] = None,
    executor: Optional[RequestExecutor] = None,
    validator: Optional[SchemaValidator] = None,
    **options: Any,
) -> APIClient:
    """Build an :class:`APIClient` from an OpenAPI 3.x document.

    Args:
        spec: The deserialized document, or its JSON/YAML text.
        spec_format: ``"json"``, ``"yaml"`` or ``"yml"`` when *spec* is a
            string. Without it, a string is parsed as JSON, then YAML.
        config: Base configuration.
        executor: Transport executor (default: :class:`HttpxExecutor`).
        validator: Schema validator for body validation.
        **options: :class:`~oasclient.models.ClientConfig` fields overriding
            *config* (``server_url_index=1``, ``validate_body=True``, ...).

    Raises:
        SpecParseError: If *spec* cannot be parsed.
        RefResolutionError: If a ``$ref`` cannot be resolved.
        ConfigError: For invalid options or an out-of-range
            ``server_url_index``.
    """
    if spec_format is not None and spec_format.lower() not in _SPEC_FORMATS:
        raise ConfigError(f"Unsupported spec format '{spec_format}'. Expected one of: {', '.join(_SPEC_FORMATS)}")

    if isinstance(spec, str):
        spec = parse_spec_content(spec, hint=spec_format or "")
    elif not isinstance(spec, Mapping):
        raise SpecParseError(f"Spec must be a mapping or a JSON/YAML string, got {type(spec).__name__}")

    client_config = _merge_config(config, options)
    routes = get_routes(
        spec,
        base_server_url=client_config.base_server_url,
        server_variables=client_config.server_variables,
    )
    return APIClient(routes, client_config, executor=executor, validator=validator)


def fetch_and_create(
    source: str,
    *,
    expected_version: Optional[str] = None,
    config: Optional[ClientConfig] = None,
    executor: Optional[RequestExecutor] = None,
    validator: Optional[SchemaValidator] = None,
    **options: Any,
) -> APIClient:
    """Load a spec from a URL, file path, or ``-`` (stdin) and build a client.

    For http(s) sources without a configured ``base_server_url``, the
    ``scheme://host`` of *source* becomes the prefix of routes that declare
    no servers.

    Args:
        source: Where to load the spec from.
        expected_version: Required ``info.version`` of the document.
            Overrides ``config.expected_version``.
        config: Base configuration.
        executor: Transport executor.
        validator: Schema validator for body validation.
        **options: :class:`~oasclient.models.ClientConfig` field overrides.

    Raises:
        VersionMismatchError: If ``info.version`` differs from the expected
            version.
        SpecParseError: If the spec cannot be loaded or is not OpenAPI 3.x.
    """
    client_config = _merge_config(config, options)
    spec = load_spec(source)
    validate_openapi_version(spec)
    check_expected_version(spec, expected_version or client_config.expected_version)

    if client_config.base_server_url is None:
        base_server_url = base_server_url_from(source)
        if base_server_url is not None:
            client_config = client_config.model_copy(update={"base_server_url": base_server_url})

    return create_client(spec, config=client_config, executor=executor, validator=validator)
