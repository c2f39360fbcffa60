"""Tests for the client facade (oasclient.client.api_client)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from oasclient.client import APIClient, HttpxExecutor, Operation, create_client, fetch_and_create
from oasclient.exceptions import (
    ConfigError,
    InvalidBodySchemaError,
    MissingDependencyError,
    MissingParameterError,
    RefResolutionError,
    SpecParseError,
    UnsupportedMethodError,
    VersionMismatchError,
)
from oasclient.models import ClientConfig, PathConfig

EXPECTED_KEYS = [
    "GET /login",
    "GET /pets",
    "GET /pets/{petId}",
    "POST /pets",
    "createPets",
    "listPets",
    "login",
    "showPetById",
]


def _server_spec() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Servers", "version": "1"},
        "servers": [
            {
                "url": "https://{env}.example.com/{version}",
                "variables": {
                    "env": {"default": "api", "enum": ["api", "sandbox"]},
                    "version": {"default": "v1"},
                },
            },
            {"url": "http://localhost:8080"},
        ],
        "paths": {
            "/items": {"get": {"operationId": "listItems"}},
            "/trace": {"trace": {"operationId": "traceIt"}},
        },
    }


def _tree_spec() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Trees", "version": "1"},
        "servers": [{"url": "https://trees.example.com"}],
        "paths": {
            "/nodes": {
                "post": {
                    "operationId": "createNode",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Node"}},
                        },
                    },
                },
            },
        },
        "components": {
            "schemas": {
                "Node": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string"},
                        "children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}},
                    },
                },
            },
        },
    }


# ---------------------------------------------------------------------------
# Operation table
# ---------------------------------------------------------------------------


class TestOperationTable:
    def test_contains_canonical_keys_and_aliases(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert sorted(client) == EXPECTED_KEYS
        assert len(client) == len(EXPECTED_KEYS)

    def test_iteration_order_follows_document(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert list(client)[:4] == ["GET /login", "login", "GET /pets", "listPets"]

    def test_alias_and_key_share_operation(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert client["listPets"] is client["GET /pets"]
        assert isinstance(client["listPets"], Operation)

    def test_attribute_access(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert client.showPetById is client["GET /pets/{petId}"]

    def test_unknown_attribute_raises(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        with pytest.raises(AttributeError, match="no operation 'deletePets'"):
            client.deletePets  # noqa: B018
        with pytest.raises(AttributeError):
            client._missing  # noqa: B018

    def test_unknown_key_raises(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        with pytest.raises(KeyError):
            client["DELETE /pets"]
        assert "DELETE /pets" not in client

    def test_internal_state_not_enumerated(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec, default_parameters={"query": {"a": 1}})
        assert sorted(client) == EXPECTED_KEYS
        assert "default_parameters" not in client
        assert "config" not in client

    def test_config_operation_id_override(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec, paths={"GET /pets": {"operationId": "allPets"}})
        assert "allPets" in client
        assert "listPets" not in client
        assert client["allPets"].operation_id == "allPets"

    def test_routes_listed_once(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert [route.key for route in client.routes] == [
            "GET /login",
            "GET /pets",
            "POST /pets",
            "GET /pets/{petId}",
        ]

    def test_canonical_key(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert client.canonical_key("listPets") == "GET /pets"
        assert client.canonical_key("GET /pets") == "GET /pets"

    def test_is_a_mapping(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec)
        assert isinstance(client, APIClient)
        assert dict(client.items())["login"] is client["GET /login"]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestCreateClient:
    def test_from_json_string(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(json.dumps(pets_spec), spec_format="json")
        assert sorted(client) == EXPECTED_KEYS

    def test_from_yaml_string(self) -> None:
        text = "openapi: 3.0.0\npaths:\n  /ping:\n    get:\n      operationId: ping\n"
        client = create_client(text, spec_format="yml")
        assert list(client) == ["GET /ping", "ping"]

    def test_string_without_format_is_detected(self) -> None:
        client = create_client("openapi: 3.0.0\npaths:\n  /ping:\n    get: {}\n")
        assert list(client) == ["GET /ping"]

    def test_unknown_format_raises(self, pets_spec: dict[str, Any]) -> None:
        with pytest.raises(ConfigError, match="Unsupported spec format 'toml'"):
            create_client(json.dumps(pets_spec), spec_format="toml")

    def test_non_mapping_spec_raises(self) -> None:
        with pytest.raises(SpecParseError):
            create_client(42)  # type: ignore[arg-type]

    def test_bad_ref_fails_construction(self) -> None:
        spec = {"paths": {"/a": {"get": {"parameters": [{"$ref": "#/components/parameters/X"}]}}}}
        with pytest.raises(RefResolutionError):
            create_client(spec)

    def test_options_override_config(self, pets_spec: dict[str, Any]) -> None:
        config = ClientConfig(validate_body=False, server_url_index=0)
        client = create_client(pets_spec, config=config, validate_body=True)
        assert client.config.validate_body is True
        assert config.validate_body is False

    def test_camel_case_options(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec, validateParameters=False)
        assert client.config.validate_parameters is False

    def test_unknown_option_raises(self, pets_spec: dict[str, Any]) -> None:
        with pytest.raises(ConfigError, match="Invalid config"):
            create_client(pets_spec, retries=3)

    def test_default_executor(self, pets_spec: dict[str, Any]) -> None:
        assert isinstance(create_client(pets_spec).executor, HttpxExecutor)

    def test_server_url_index_out_of_range(self, pets_spec: dict[str, Any]) -> None:
        with pytest.raises(ConfigError, match="server_url_index 1 is out of range"):
            create_client(pets_spec, server_url_index=1)

    def test_negative_server_url_index(self, pets_spec: dict[str, Any]) -> None:
        with pytest.raises(ConfigError):
            create_client(pets_spec, server_url_index=-1)


# ---------------------------------------------------------------------------
# Server binding
# ---------------------------------------------------------------------------


class TestServerBinding:
    def test_index_zero_by_default(self) -> None:
        client = create_client(_server_spec())
        assert client["listItems"].url == "https://api.example.com/v1/items"

    def test_index_selects_candidate(self) -> None:
        client = create_client(_server_spec(), server_url_index=1)
        assert client["listItems"].url == "http://localhost:8080/items"

    def test_construction_server_variables(self) -> None:
        client = create_client(_server_spec(), server_variables={"env": "sandbox", "version": "v2"})
        assert client["listItems"].url == "https://sandbox.example.com/v2/items"

    def test_enum_violation_falls_back(self) -> None:
        client = create_client(_server_spec(), server_variables={"env": "prod"})
        assert client["listItems"].url == "https://api.example.com/v1/items"

    def test_per_call_server_variables(self, recording_executor) -> None:
        client = create_client(
            _server_spec(), executor=recording_executor, server_variables={"version": "v2"}
        )
        descriptor = client["listItems"].build_request(server_variables={"env": "sandbox"})
        assert descriptor.url == "https://sandbox.example.com/v2/items"
        assert client["listItems"].build_request().url == "https://api.example.com/v2/items"

    def test_base_server_url_fallback(self) -> None:
        spec = {"openapi": "3.0.0", "paths": {"/pets": {"get": {}}}}
        client = create_client(spec, base_server_url="http://127.0.0.1")
        assert client["GET /pets"].url == "http://127.0.0.1/pets"

    def test_base_server_url_trailing_slash(self) -> None:
        spec = {"openapi": "3.0.0", "paths": {"/pets": {"get": {}}}}
        client = create_client(spec, base_server_url="http://127.0.0.1/")
        assert client["GET /pets"].url == "http://127.0.0.1/pets"

    def test_numeric_server_variables(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "servers": [{"url": "https://api.example.com:{port}", "variables": {"port": {"default": "443"}}}],
            "paths": {"/pets": {"get": {}}},
        }
        client = create_client(spec, server_variables={"port": 8443})
        assert client["GET /pets"].url == "https://api.example.com:8443/pets"


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


class TestCalls:
    def test_returns_executor_response_unmodified(self, pets_spec: dict[str, Any], recording_executor) -> None:
        sentinel = object()
        recording_executor.response = sentinel
        client = create_client(pets_spec, executor=recording_executor)
        assert asyncio.run(client.showPetById(path={"petId": "007"})) is sentinel
        assert recording_executor.last.url == "http://127.0.0.1/pets/007"
        assert recording_executor.last.method == "get"

    def test_path_param_via_data(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.showPetById(data={"petId": "007"}))
        assert recording_executor.last.url == "http://127.0.0.1/pets/007"

    def test_query_param_via_data_and_query(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.listPets(data={"limit": "1984"}))
        assert recording_executor.last.query == {"limit": "1984"}
        asyncio.run(client.listPets(query={"limit": "1984"}))
        assert recording_executor.last.query == {"limit": "1984"}

    def test_missing_required_raises_and_client_stays_usable(
        self, pets_spec: dict[str, Any], recording_executor
    ) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        with pytest.raises(MissingParameterError, match='Missing parameters: "limit" in "query"'):
            asyncio.run(client.listPets())
        assert recording_executor.requests == []
        asyncio.run(client.listPets(query={"limit": 1}))
        assert len(recording_executor.requests) == 1

    def test_validation_disabled_sends_unknown_param(
        self, pets_spec: dict[str, Any], recording_executor
    ) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_parameters=False)
        asyncio.run(client.listPets(query={"unknown": "param"}))
        assert recording_executor.last.query == {"unknown": "param"}

    def test_unexpected_params_disallowed(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(
            pets_spec,
            executor=recording_executor,
            validate_parameters=False,
            allow_unexpected_params=False,
        )
        asyncio.run(client.listPets(query={"unknown": "param"}))
        assert recording_executor.last.query == {}

    def test_cookie(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.login(cookie={"Authorization": "bearer token!!!"}))
        assert recording_executor.last.headers["Cookie"] == "Authorization=bearer token!!!;"

    def test_trace_rejected(self, recording_executor) -> None:
        client = create_client(_server_spec(), executor=recording_executor)
        with pytest.raises(UnsupportedMethodError):
            asyncio.run(client.traceIt())
        assert recording_executor.requests == []

    def test_body_sent_with_json_content_type(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.createPets(body={"name": "Janis"}))
        assert recording_executor.last.headers["Content-Type"] == "application/json"
        assert recording_executor.last.body == {"name": "Janis"}

    def test_no_body_no_content_type(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_body=True)
        asyncio.run(client.createPets())
        assert "Content-Type" not in recording_executor.last.headers
        assert recording_executor.last.body is None

    def test_per_call_content_type(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.createPets(body="name=Janis", content_type="application/x-www-form-urlencoded"))
        assert recording_executor.last.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_build_request_does_not_execute(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        descriptor = client.listPets.build_request(query={"limit": 5})
        assert descriptor.url == "http://127.0.0.1/pets"
        assert recording_executor.requests == []

    def test_caller_inputs_not_mutated(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        query = {"limit": 5}
        descriptor = client.listPets.build_request(query=query)
        descriptor.query["limit"] = 99
        assert query == {"limit": 5}

    def test_executor_errors_propagate(self, pets_spec: dict[str, Any]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        executor = HttpxExecutor(transport=httpx.MockTransport(handler))
        client = create_client(pets_spec, executor=executor)
        with pytest.raises(httpx.ConnectError):
            asyncio.run(client.listPets(query={"limit": 1}))


# ---------------------------------------------------------------------------
# Body validation
# ---------------------------------------------------------------------------


class TestBodyValidation:
    def test_invalid_body_rejected(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_body=True)
        with pytest.raises(InvalidBodySchemaError) as exc_info:
            asyncio.run(client.createPets(body={"name": "Janis"}))
        assert str(exc_info.value) == "Invalid Body Schema: 'status' is a required property"
        assert recording_executor.requests == []

    def test_valid_body_sent(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_body=True)
        body = {"name": "Janis", "status": "messing around"}
        asyncio.run(client.createPets(body=body))
        assert recording_executor.last.body == body

    def test_body_not_validated_by_default(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.createPets(body={"name": "Janis"}))
        assert recording_executor.last.body == {"name": "Janis"}

    def test_content_type_without_schema(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_body=True)
        with pytest.raises(InvalidBodySchemaError, match='content type "text/plain"'):
            asyncio.run(client.createPets(body="Janis", content_type="text/plain"))

    def test_injected_validator_used(self, pets_spec: dict[str, Any], recording_executor) -> None:
        class Rejecting:
            def validate(self, schema: Any, value: Any) -> list[str]:
                return ["nope"]

        client = create_client(
            pets_spec, executor=recording_executor, validator=Rejecting(), validate_body=True
        )
        with pytest.raises(InvalidBodySchemaError, match="Invalid Body Schema: nope"):
            asyncio.run(client.createPets(body={"name": "Janis", "status": "x"}))

    def test_missing_validator_dependency(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor, validate_body=True)
        with patch("oasclient.client.api_client.load_default_validator", return_value=None):
            with pytest.raises(MissingDependencyError):
                asyncio.run(client.createPets(body={"name": "Janis", "status": "x"}))

    def test_recursive_schema_valid_body(self, recording_executor) -> None:
        client = create_client(_tree_spec(), executor=recording_executor, validate_body=True)
        body = {"name": "root", "children": [{"name": "leaf", "children": [{"name": "twig"}]}]}
        asyncio.run(client.createNode(body=body))
        assert recording_executor.last.body == body

    def test_recursive_schema_invalid_child(self, recording_executor) -> None:
        client = create_client(_tree_spec(), executor=recording_executor, validate_body=True)
        with pytest.raises(InvalidBodySchemaError) as exc_info:
            asyncio.run(client.createNode(body={"name": "root", "children": [{"label": "leaf"}]}))
        assert str(exc_info.value) == "Invalid Body Schema: children/0: 'name' is a required property"
        assert recording_executor.requests == []


# ---------------------------------------------------------------------------
# Default parameters
# ---------------------------------------------------------------------------


class TestDefaultParameters:
    def test_global_default(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(
            pets_spec,
            executor=recording_executor,
            default_parameters={"cookie": {"Authorization": "bearer token!!!"}},
        )
        asyncio.run(client.login())
        assert recording_executor.last.headers["Cookie"] == "Authorization=bearer token!!!;"

    def test_path_default_from_paths_config(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(
            pets_spec,
            executor=recording_executor,
            paths={"GET /login": {"defaultParameters": {"cookie": {"Authorization": "path specific token"}}}},
        )
        asyncio.run(client.login())
        assert recording_executor.last.headers["Cookie"] == "Authorization=path specific token;"

    def test_path_default_beats_global(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(
            pets_spec,
            executor=recording_executor,
            default_parameters={"cookie": {"Authorization": "global"}},
            path_default_parameters={"GET /login": {"cookie": {"Authorization": "specific"}}},
        )
        asyncio.run(client.login())
        assert recording_executor.last.headers["Cookie"] == "Authorization=specific;"

    def test_set_path_default_parameters_on_the_fly(
        self, pets_spec: dict[str, Any], recording_executor
    ) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        client.set_path_default_parameters(
            {"login": {"cookie": {"Authorization": "path specific token on the fly"}}}
        )
        asyncio.run(client.login())
        assert recording_executor.last.headers["Cookie"] == "Authorization=path specific token on the fly;"
        assert client.get_path_default_parameters("GET /login") == {
            "cookie": {"Authorization": "path specific token on the fly"}
        }

    def test_set_default_parameters_affects_next_call(
        self, pets_spec: dict[str, Any], recording_executor
    ) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        client.set_default_parameters({"query": {"limit": 20}})
        asyncio.run(client.listPets())
        assert recording_executor.last.query == {"limit": 20}

    def test_set_default_parameters_is_per_location_overwrite(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(
            pets_spec,
            default_parameters={"query": {"a": 1, "b": 2}, "header": {"X-Key": "k"}},
        )
        client.set_default_parameters({"query": {"c": 3}})
        assert client.default_parameters == {"query": {"c": 3}, "header": {"X-Key": "k"}}

    def test_headers_location_normalized(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        client.set_default_parameters({"headers": {"X-Api-Key": "secret"}})
        asyncio.run(client.listPets(query={"limit": 1}))
        assert recording_executor.last.headers["X-Api-Key"] == "secret"

    def test_effective_defaults_merge_per_name(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(
            pets_spec,
            default_parameters={"query": {"limit": 1, "page": 1}},
            path_default_parameters={"GET /pets": {"query": {"limit": 50}}},
        )
        assert client.get_path_default_parameters("listPets") == {"query": {"limit": 50, "page": 1}}
        assert client.get_path_default_parameters("GET /login") == {"query": {"limit": 1, "page": 1}}

    def test_getter_returns_copy(self, pets_spec: dict[str, Any]) -> None:
        client = create_client(pets_spec, default_parameters={"query": {"limit": 1}})
        client.get_path_default_parameters("GET /pets")["query"]["limit"] = 99
        assert client.default_parameters == {"query": {"limit": 1}}

    def test_explicit_value_beats_default_for_declared_param(
        self, pets_spec: dict[str, Any], recording_executor
    ) -> None:
        client = create_client(
            pets_spec, executor=recording_executor, default_parameters={"query": {"limit": 100}}
        )
        asyncio.run(client.listPets(data={"limit": 5}))
        assert recording_executor.last.query == {"limit": 5}

    def test_path_config_model_accepted(self, pets_spec: dict[str, Any], recording_executor) -> None:
        config = ClientConfig(
            paths={"GET /login": PathConfig(default_parameters={"cookie": {"sid": "1"}})}
        )
        client = create_client(pets_spec, config=config, executor=recording_executor)
        asyncio.run(client.login())
        assert recording_executor.last.headers["Cookie"] == "sid=1;"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_aclose_closes_executor(self, pets_spec: dict[str, Any], recording_executor) -> None:
        client = create_client(pets_spec, executor=recording_executor)
        asyncio.run(client.aclose())
        assert recording_executor.closed is True

    def test_async_context_manager(self, pets_spec: dict[str, Any], recording_executor) -> None:
        async def run() -> None:
            async with create_client(pets_spec, executor=recording_executor) as client:
                await client.listPets(query={"limit": 1})

        asyncio.run(run())
        assert recording_executor.closed is True

    def test_executor_without_aclose(self, pets_spec: dict[str, Any]) -> None:
        class Minimal:
            async def execute(self, request: Any) -> str:
                return "ok"

        client = create_client(pets_spec, executor=Minimal())
        asyncio.run(client.aclose())


# ---------------------------------------------------------------------------
# fetch_and_create
# ---------------------------------------------------------------------------


class TestFetchAndCreate:
    def _mock_get(self, spec: dict[str, Any], url: str) -> httpx.Response:
        return httpx.Response(200, json=spec, request=httpx.Request("GET", url))

    def test_from_file(self, pets_spec_path: Path) -> None:
        client = fetch_and_create(str(pets_spec_path))
        assert sorted(client) == EXPECTED_KEYS

    def test_version_match(self, pets_spec_path: Path) -> None:
        client = fetch_and_create(str(pets_spec_path), expected_version="1.0.0")
        assert "listPets" in client

    def test_version_mismatch(self, pets_spec_path: Path) -> None:
        with pytest.raises(VersionMismatchError, match="Expected 2.0.0 but got 1.0.0"):
            fetch_and_create(str(pets_spec_path), expected_version="2.0.0")

    def test_version_from_config(self, pets_spec_path: Path) -> None:
        with pytest.raises(VersionMismatchError):
            fetch_and_create(str(pets_spec_path), config=ClientConfig(expected_version="9"))

    def test_base_server_url_derived_from_url(self) -> None:
        spec = {"openapi": "3.0.0", "info": {"version": "1"}, "paths": {"/pets": {"get": {}}}}
        url = "https://api.example.com/docs/openapi.json"
        with patch("oasclient.parser.loader.httpx.get", return_value=self._mock_get(spec, url)):
            client = fetch_and_create(url)
        assert client["GET /pets"].url == "https://api.example.com/pets"
        assert client.config.base_server_url == "https://api.example.com"

    def test_explicit_base_server_url_kept(self) -> None:
        spec = {"openapi": "3.0.0", "info": {"version": "1"}, "paths": {"/pets": {"get": {}}}}
        url = "https://api.example.com/docs/openapi.json"
        with patch("oasclient.parser.loader.httpx.get", return_value=self._mock_get(spec, url)):
            client = fetch_and_create(url, base_server_url="http://proxy:9000")
        assert client["GET /pets"].url == "http://proxy:9000/pets"

    def test_swagger_rejected(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "swagger.json"
        spec_file.write_text(json.dumps({"swagger": "2.0", "paths": {}}))
        with pytest.raises(SpecParseError, match="Swagger 2.0"):
            fetch_and_create(str(spec_file))
