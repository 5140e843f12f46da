"""Tests for the list CLI command."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from crust.cli import cli

_FAILING_PLUGIN_SRC = """\
from crust.plugins.hookspecs import hookimpl


class ExplodingPlugin:
    @hookimpl
    def register_commands(self, settings):
        raise RuntimeError("plugin exploded")
"""


@pytest.mark.usefixtures("_isolated_project")
class TestListCommand:
    def test_list_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "list"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "list_commands"
        names = [item["name"] for item in data["data"]["items"]]
        assert "setup" in names
        assert "setup/go" in names
        assert names == sorted(names)

    def test_list_prefix(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "list", "setup"])
        assert result.exit_code == 0
        assert result.stdout.split() == [
            "setup",
            "setup/docker",
            "setup/git",
            "setup/go",
            "setup/golangci-lint",
        ]

    def test_list_human_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["list", "setup/go"])
        assert result.exit_code == 0
        assert "Name" in result.stdout
        assert "setup/go" in result.stdout
        assert "1 commands" in result.stdout

    def test_list_unknown_prefix(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "list", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_FOUND"

    def test_config_driven_commands(self, cli_runner: CliRunner, project_root: Path) -> None:
        (project_root / "crust.toml").write_text(
            '[go.binaries.cored]\npackage = "./cmd/cored"\noutput = "bin/cored"\n'
        )
        result = cli_runner.invoke(cli, ["-q", "list", "build"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["build", "build/cored"]

    def test_plugin_failure_warns(
        self,
        cli_runner: CliRunner,
        write_plugin: Callable[[str, str], Path],
    ) -> None:
        write_plugin("exploding", _FAILING_PLUGIN_SRC)
        result = cli_runner.invoke(cli, ["--json", "list"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert any("plugin exploded" in w for w in data["warnings"])

    def test_plugins_disabled(
        self,
        cli_runner: CliRunner,
        project_root: Path,
        write_plugin: Callable[[str, str], Path],
    ) -> None:
        write_plugin("exploding", _FAILING_PLUGIN_SRC)
        (project_root / "crust.toml").write_text("[plugins]\nenabled = false\n")
        result = cli_runner.invoke(cli, ["--json", "list"])
        data = json.loads(result.stdout)
        assert data["warnings"] == []
