"""Shared test fixtures for samroute.

Provides reusable fixtures for loading definition fixtures, building
integration payloads, isolating configuration, and resetting the global
output and logging state between tests. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from samroute.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the global OutputManager and the ``samroute`` logger.

    The CLI callback installs a Rich logging handler bound to the stderr
    stream of the current invocation. Once a CliRunner invocation ends
    that stream is closed, so the handler is removed after every test.
    """
    yield
    reset_output()
    logger = logging.getLogger("samroute")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Definition fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the JSON/YAML fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def users_definition() -> dict[str, Any]:
    """Raw users API definition (Swagger 2.0 with API Gateway extensions)."""
    with open(FIXTURES_DIR / "users_api.json") as f:
        return json.load(f)


@pytest.fixture
def lambda_integration() -> Callable[[str], dict[str, Any]]:
    """Factory for ``aws_proxy`` integration payloads invoking a named function."""

    def _make(function: str) -> dict[str, Any]:
        return {
            "type": "aws_proxy",
            "httpMethod": "POST",
            "uri": (
                "arn:aws:apigateway:us-east-1:lambda:path/2015-03-31/functions/"
                f"arn:aws:lambda:us-east-1:123456789012:function:{function}/invocations"
            ),
        }

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME at tmp_path, clears all SAMROUTE_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "SAMROUTE_AWS_PROFILE",
        "SAMROUTE_AWS_REGION",
        "SAMROUTE_S3_ENDPOINT_URL",
        "SAMROUTE_OUTPUT",
    ]:
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
