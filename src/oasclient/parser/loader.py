"""Read OpenAPI documents from a URL, a local file, stdin, or a string.

Loading happens in two steps. :func:`load_spec` reads the raw text together
with a format hint (the file suffix or the response ``Content-Type``), then
:func:`parse_spec_content` decodes it as JSON or YAML. A document is accepted
only when it decodes to an object.

The version helpers run after loading:

* :func:`validate_openapi_version` rejects Swagger 2.x and anything that is
  not OpenAPI 3.x.
* :func:`check_expected_version` pins ``info.version``.
* :func:`base_server_url_from` derives the ``scheme://host`` prefix of a spec
  URL, used for routes that declare no servers.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from oasclient.exceptions import SpecParseError, VersionMismatchError

_BASE_URL_RE = re.compile(r"^(https?://[^/]*)")

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}

FETCH_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or does not decode to an
            object.
    """
    if source == "-":
        text, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch(source)
    else:
        text, hint = _read_file(Path(source))
    return parse_spec_content(text, hint=hint)


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not text.strip():
        raise SpecParseError("No input received from stdin")
    return text


def _fetch(url: str) -> tuple[str, str]:
    """GET *url* and return its body with a hint taken from the ``Content-Type``."""
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(f"HTTP {exc.response.status_code} fetching spec from {url}") from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _read_file(path: Path) -> tuple[str, str]:
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not text.strip():
        raise SpecParseError(f"Spec file is empty: {path}")
    return text, _SUFFIX_HINTS.get(path.suffix.lower(), "")


def parse_spec_content(content: str, hint: str = "") -> dict[str, Any]:
    """Decode *content* as JSON or YAML.

    Without a hint JSON is tried first and YAML second, so both error
    messages are reported when neither works. A ``json`` hint skips the
    YAML attempt; a ``yaml``/``yml`` hint skips the JSON one.

    Args:
        content: The raw document text.
        hint: ``"json"``, ``"yaml"``, ``"yml"`` or ``""``, case-insensitive.

    Raises:
        SpecParseError: If the text cannot be decoded, or does not hold an
            object.
    """
    hint = hint.lower()
    json_error: Optional[json.JSONDecodeError] = None

    if hint not in ("yaml", "yml"):
        try:
            return _expect_object(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        details = [f"JSON error: {json_error}"] if json_error else []
        details.append(f"YAML error: {exc}")
        raise SpecParseError(
            "Failed to parse spec as JSON or YAML\n  " + "\n  ".join(details)
        ) from exc
    return _expect_object(document)


def _expect_object(document: Any) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    kind = "empty document" if document is None else type(document).__name__
    raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. Only OpenAPI 3.x documents are supported."
        )
    if spec.get("openapi") is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version = str(spec["openapi"])
    if not version.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version}. Only OpenAPI 3.x documents are supported."
        )
    return version


def check_expected_version(spec: dict[str, Any], expected_version: Optional[str]) -> None:
    """Raise :class:`~oasclient.exceptions.VersionMismatchError` unless ``info.version`` equals *expected_version*.

    An empty or ``None`` expectation always passes.
    """
    if not expected_version:
        return
    actual = (spec.get("info") or {}).get("version")
    if actual is None or str(actual) != expected_version:
        raise VersionMismatchError(expected_version, None if actual is None else str(actual))


def base_server_url_from(url: str) -> Optional[str]:
    """Return the ``scheme://host[:port]`` prefix of an http(s) URL, or ``None``.

    Example::

        >>> base_server_url_from("https://api.example.com/v3/openapi.json")
        'https://api.example.com'
    """
    match = _BASE_URL_RE.match(url)
    return match.group(1) if match else None
