"""Shared test fixtures for oasclient.

Provides reusable fixtures for loading spec fixtures, recording the requests
a client hands to its executor, isolating configuration, managing output
state, and running CLI commands. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from oasclient.models import RequestDescriptor
from oasclient.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the global OutputManager after every test.

    Its Rich consoles hold on to the sys.stdout/sys.stderr objects that were
    current when it was built. CliRunner swaps those streams per invocation,
    so a manager surviving into the next test would write to closed files.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def pets_spec_path() -> Path:
    return FIXTURES_DIR / "openapi-pets.json"


@pytest.fixture
def pets_spec(pets_spec_path: Path) -> dict[str, Any]:
    """Load the raw pets spec dict."""
    with open(pets_spec_path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------


class RecordingExecutor:
    """Executor that records every descriptor and answers with a canned response."""

    def __init__(self, response: Any = "ok") -> None:
        self.requests: list[RequestDescriptor] = []
        self.response = response
        self.closed = False

    async def execute(self, request: RequestDescriptor) -> Any:
        self.requests.append(request)
        return self.response

    async def aclose(self) -> None:
        self.closed = True

    @property
    def last(self) -> RequestDescriptor:
        return self.requests[-1]


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Clears all OASCLIENT_* environment variables and changes the working
    directory to tmp_path so that no project config file is picked up.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    from oasclient.config import ENV_VARS

    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
