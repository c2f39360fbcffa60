"""Configuration loading and precedence resolution.

Client options live in a :class:`~oasclient.models.ClientConfig`. This module
builds one from the layers a CLI invocation can draw on:

* **Config files** -- JSON or YAML, parsed by :func:`load_config_file`. An
  explicit ``--config`` path wins; otherwise ``./oasclient.json``,
  ``./oasclient.yaml`` or ``./oasclient.yml`` in the working directory is
  picked up (:func:`find_project_config`).
* **Environment variables** -- ``OASCLIENT_*`` scalars, see
  :data:`ENV_VARS`.
* **Overrides** -- keyword values supplied by the caller (CLI flags).

:func:`resolve_config` merges them into the final configuration.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from oasclient.exceptions import ConfigError
from oasclient.models import ClientConfig

_PROJECT_CONFIG_FILENAMES = ("oasclient.json", "oasclient.yaml", "oasclient.yml")

ENV_VARS: dict[str, str] = {
    "OASCLIENT_SERVER_URL_INDEX": "server_url_index",
    "OASCLIENT_VALIDATE_PARAMETERS": "validate_parameters",
    "OASCLIENT_ALLOW_UNEXPECTED_PARAMS": "allow_unexpected_params",
    "OASCLIENT_VALIDATE_BODY": "validate_body",
    "OASCLIENT_BASE_URL": "base_server_url",
    "OASCLIENT_EXPECTED_VERSION": "expected_version",
}
"""Environment variable -> :class:`~oasclient.models.ClientConfig` field."""

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


# --- Files ---


def load_config_file(path: Union[str, Path]) -> ClientConfig:
    """Load and validate a client configuration file.

    The format is picked from the suffix: ``.yaml``/``.yml`` are read with
    PyYAML, everything else as JSON.

    Args:
        path: Path to the configuration file.

    Returns:
        The validated :class:`~oasclient.models.ClientConfig`.

    Raises:
        ConfigError: If the file does not exist, cannot be parsed, or fails
            Pydantic validation.
    """
    return validate_config(_read_config_data(Path(path)), source=str(path))


def _read_config_data(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a mapping, got {type(data).__name__}")
    return data


def find_project_config(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first project config file in *directory* (default: cwd), if any."""
    base = directory or Path.cwd()
    for name in _PROJECT_CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def validate_config(data: Mapping[str, Any], source: str = "options") -> ClientConfig:
    """Validate a raw mapping into a :class:`~oasclient.models.ClientConfig`.

    Raises:
        ConfigError: Wrapping the Pydantic validation error.
    """
    try:
        return ClientConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {source}: {exc}") from exc


# --- Environment ---


def _parse_env_value(var: str, field: str, raw: str) -> Any:
    if field == "server_url_index":
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigError(f"{var} must be an integer, got '{raw}'") from exc
    if field in ("validate_parameters", "allow_unexpected_params", "validate_body"):
        lowered = raw.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ConfigError(f"{var} must be a boolean (true/false), got '{raw}'")
    return raw


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect the ``OASCLIENT_*`` environment variables as config field values.

    Unset and empty variables are skipped.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        raw = env.get(var, "")
        if raw:
            values[field] = _parse_env_value(var, field, raw)
    return values


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ClientConfig:
    """Resolve the effective client config with the full precedence chain.

    Precedence (high to low):
        1. *overrides* (CLI flags); ``None`` values are ignored, mappings are
           merged into the lower layers
        2. Environment variables (:data:`ENV_VARS`)
        3. *config_path*, else the project config in the working directory
        4. Defaults

    Returns:
        The merged and validated :class:`~oasclient.models.ClientConfig`.

    Raises:
        ConfigError: If any layer is invalid.
    """
    # 4 + 3. File layer on top of the model defaults
    path = Path(config_path) if config_path is not None else find_project_config()
    base = load_config_file(path) if path is not None else ClientConfig()
    merged = base.model_dump()

    # 2. Environment
    merged.update(config_from_env())

    # 1. Explicit overrides
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    return validate_config(merged, source=str(path) if path is not None else "options")
