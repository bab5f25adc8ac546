"""Fixtures shared by the specgen test suite: documents, config isolation, CLI runner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from specgen.models import GeneratorConfig
from specgen.output import reset_output
from specgen.parser.resolver import Document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Output state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the process-wide OutputManager once a test is done.

    A manager binds sys.stdout and sys.stderr when it is created, and
    CliRunner swaps both streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_api_raw() -> dict[str, Any]:
    """Load the raw Users API document."""
    return json.loads((FIXTURES_DIR / "users_api.json").read_text(encoding="utf-8"))


@pytest.fixture
def users_api(users_api_raw: dict[str, Any]) -> Document:
    """The Users API document, indexed."""
    return Document(users_api_raw)


@pytest.fixture
def config() -> GeneratorConfig:
    """Default generator configuration."""
    return GeneratorConfig()


@pytest.fixture
def make_document():
    """Factory building a small indexed document from ``paths`` and component maps.

    Example::

        doc = make_document(schemas={"User": {"type": "object"}})
    """

    def _make(paths: dict[str, Any] | None = None, **components: dict[str, Any]) -> Document:
        raw: dict[str, Any] = {
            "openapi": "3.0.3",
            "info": {"title": "Test", "version": "1.0.0"},
            "paths": paths or {},
        }
        if components:
            raw["components"] = components
        return Document(raw)

    return _make


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point user config into *tmp_path*, drop SPECGEN_* overrides and chdir there.

    Returns:
        *tmp_path*, which is also the project directory searched for
        ``specgen.json``.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))

    for var in [
        "SPECGEN_DEFAULT_SERVICE",
        "SPECGEN_SERVICE_SUFFIX",
        "SPECGEN_VERSION_PARAMETER",
        "SPECGEN_VERSION_EXPRESSION",
        "SPECGEN_PREFERRED_MEDIA_TYPES",
        "SPECGEN_MAX_WORKERS",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
