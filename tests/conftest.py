"""Shared pytest fixtures and test helpers for crust tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from crust.config.discovery import CONFIG_ENV_VAR
from crust.services.telemetry import _current_span, disable_telemetry

_PROJECT_TOML = """\
[project]
name = "demo"
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory holding a minimal crust.toml.

    This is the single source of truth for the project layout; the
    ``_isolated_project`` fixture builds on it.
    """
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    (tmp_path / "crust.toml").write_text(_PROJECT_TOML, encoding="utf-8")
    (tmp_path / ".crust" / "plugins").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project root so the CLI discovers its crust.toml.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture(autouse=True)
def _restore_global_state() -> Generator[None]:
    """Undo logging and telemetry changes made by AppContext."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    crust_logger = logging.getLogger("crust")
    crust_level = crust_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    crust_logger.setLevel(crust_level)
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def write_plugin(project_root: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a single-file local plugin into the project."""

    def write(name: str, source: str) -> Path:
        path = project_root / ".crust" / "plugins" / f"{name}.py"
        path.write_text(source, encoding="utf-8")
        return path

    return write
