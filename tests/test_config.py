"""Tests for oasclient.config -- config files, environment, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from oasclient.config import (
    config_from_env,
    find_project_config,
    load_config_file,
    resolve_config,
    validate_config,
)
from oasclient.exceptions import ConfigError
from oasclient.models import ClientConfig


def _write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestLoadConfigFile:
    def test_json_with_camel_case_keys(self, tmp_path: Path) -> None:
        path = _write_json(
            tmp_path / "client.json",
            {
                "serverUrlIndex": 1,
                "validateBody": True,
                "defaultParameters": {"headers": {"X-Api-Key": "secret"}},
                "paths": {"GET /pets": {"operationId": "allPets"}},
            },
        )
        config = load_config_file(path)

        assert config.server_url_index == 1
        assert config.validate_body is True
        assert config.default_parameters == {"header": {"X-Api-Key": "secret"}}
        assert config.paths["GET /pets"].operation_id == "allPets"

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "client.yaml"
        path.write_text(
            "server_url_index: 2\nserverVariables:\n  env: sandbox\n", encoding="utf-8"
        )
        config = load_config_file(path)
        assert config.server_url_index == 2
        assert config.server_variables == {"env": "sandbox"}

    def test_yaml_numeric_server_variable(self, tmp_path: Path) -> None:
        path = tmp_path / "client.yaml"
        path.write_text("serverVariables:\n  port: 8443\n", encoding="utf-8")
        assert load_config_file(path).server_variables == {"port": "8443"}

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "client.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == ClientConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "client.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config at"):
            load_config_file(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "client.json", [1, 2])
        with pytest.raises(ConfigError, match="expected a mapping, got list"):
            load_config_file(path)

    def test_unknown_field(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "client.json", {"retries": 3})
        with pytest.raises(ConfigError, match="Invalid config in"):
            load_config_file(path)


class TestFindProjectConfig:
    def test_none_when_absent(self, tmp_path: Path) -> None:
        assert find_project_config(tmp_path) is None

    def test_json_preferred_over_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "oasclient.yaml").write_text("validateBody: true\n", encoding="utf-8")
        _write_json(tmp_path / "oasclient.json", {})
        assert find_project_config(tmp_path) == tmp_path / "oasclient.json"

    def test_yml(self, tmp_path: Path) -> None:
        (tmp_path / "oasclient.yml").write_text("{}\n", encoding="utf-8")
        assert find_project_config(tmp_path) == tmp_path / "oasclient.yml"

    def test_defaults_to_cwd(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "oasclient.json", {})
        assert find_project_config() == isolated_config / "oasclient.json"


class TestValidateConfig:
    def test_wraps_validation_error(self) -> None:
        with pytest.raises(ConfigError, match="Invalid config in options"):
            validate_config({"server_url_index": "first"})

    def test_source_named_in_message(self) -> None:
        with pytest.raises(ConfigError, match="Invalid config in client.json"):
            validate_config({"paths": {"GET /": {"bogus": 1}}}, source="client.json")

    def test_path_default_locations_normalized(self) -> None:
        config = validate_config(
            {"pathDefaultParameters": {"GET /pets": {"headers": {"X-Trace": "1"}}}}
        )
        assert config.path_default_parameters == {"GET /pets": {"header": {"X-Trace": "1"}}}


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestConfigFromEnv:
    def test_empty(self) -> None:
        assert config_from_env({}) == {}

    def test_parses_values(self) -> None:
        values = config_from_env(
            {
                "OASCLIENT_SERVER_URL_INDEX": "1",
                "OASCLIENT_VALIDATE_BODY": "yes",
                "OASCLIENT_VALIDATE_PARAMETERS": "off",
                "OASCLIENT_BASE_URL": "http://localhost:8080",
                "OASCLIENT_EXPECTED_VERSION": "1.0.0",
            }
        )
        assert values == {
            "server_url_index": 1,
            "validate_body": True,
            "validate_parameters": False,
            "base_server_url": "http://localhost:8080",
            "expected_version": "1.0.0",
        }

    def test_empty_values_skipped(self) -> None:
        assert config_from_env({"OASCLIENT_BASE_URL": ""}) == {}

    def test_invalid_integer(self) -> None:
        with pytest.raises(ConfigError, match="OASCLIENT_SERVER_URL_INDEX must be an integer"):
            config_from_env({"OASCLIENT_SERVER_URL_INDEX": "one"})

    def test_invalid_boolean(self) -> None:
        with pytest.raises(ConfigError, match="must be a boolean"):
            config_from_env({"OASCLIENT_ALLOW_UNEXPECTED_PARAMS": "maybe"})


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == ClientConfig()

    def test_project_config_picked_up(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "oasclient.json", {"validateBody": True})
        assert resolve_config().validate_body is True

    def test_explicit_path_beats_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "oasclient.json", {"serverUrlIndex": 1})
        explicit = _write_json(isolated_config / "other.json", {"serverUrlIndex": 2})
        assert resolve_config(explicit).server_url_index == 2

    def test_env_beats_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "oasclient.json", {"serverUrlIndex": 1})
        monkeypatch.setenv("OASCLIENT_SERVER_URL_INDEX", "3")
        assert resolve_config().server_url_index == 3

    def test_overrides_beat_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OASCLIENT_BASE_URL", "http://env")
        config = resolve_config(overrides={"base_server_url": "http://cli"})
        assert config.base_server_url == "http://cli"

    def test_none_overrides_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OASCLIENT_VALIDATE_BODY", "true")
        config = resolve_config(overrides={"validate_body": None, "server_url_index": None})
        assert config.validate_body is True
        assert config.server_url_index == 0

    def test_mapping_overrides_merged(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "oasclient.json",
            {"serverVariables": {"env": "sandbox", "version": "v1"}},
        )
        config = resolve_config(overrides={"server_variables": {"version": "v2"}})
        assert config.server_variables == {"env": "sandbox", "version": "v2"}

    def test_missing_explicit_path(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            resolve_config(isolated_config / "missing.json")

    def test_invalid_override(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_config(overrides={"server_url_index": "x"})
