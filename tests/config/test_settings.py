"""Tests for CrustSettings — unified settings with TOML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from crust.config.discovery import CONFIG_ENV_VAR
from crust.config.settings import CrustSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("CRUST_VERBOSE", raising=False)
    monkeypatch.delenv("CRUST_GO__LINT_TIMEOUT", raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = CrustSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.project.name == "crust"
        assert settings.go.lint_timeout == "10m"
        assert settings.go.modules == {}
        assert settings.git.require_clean is False
        assert settings.plugins.local_dir == ".crust/plugins"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = CrustSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "crust.toml").write_text(
            """\
[project]
name = "cosmos"

[go]
lint_timeout = "5m"

[go.modules.cored]
path = "cored"

[go.binaries.cored]
module = "cored"
package = "./cmd/cored"
output = "bin/cored"
tags = ["netgo"]

[docker.images.cored]
binaries = ["cored"]
build_args = { VERSION = "dev" }

[git.repositories.cored]
url = "https://example.com/cored.git"
""",
            encoding="utf-8",
        )
        settings = CrustSettings.from_cli(project_root=tmp_path)
        assert settings.project.name == "cosmos"
        assert settings.go.lint_timeout == "5m"
        assert settings.go.modules["cored"].path == "cored"
        assert settings.go.binaries["cored"].tags == ["netgo"]
        assert settings.go.binaries["cored"].cgo is False
        assert settings.docker.images["cored"].build_args == {"VERSION": "dev"}
        assert settings.docker.images["cored"].dockerfile == "Dockerfile"
        assert settings.git.repositories["cored"].path is None

    def test_project_root_from_discovered_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "crust.toml").write_text("")
        nested = tmp_path / "deep" / "er"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = CrustSettings.from_cli()
        assert settings.project_root.resolve() == tmp_path.resolve()
        assert settings.config_path is not None

    def test_project_root_from_env_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        custom = tmp_path / "ci" / "crust.toml"
        custom.parent.mkdir()
        custom.write_text('[go.binaries.cored]\noutput = "bin/cored"\n')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        monkeypatch.chdir(tmp_path)
        settings = CrustSettings.from_cli()
        assert settings.project_root == custom.parent
        assert settings.resolve_path("bin/cored") == (custom.parent / "bin" / "cored").resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "ci" / "crust.toml"
        custom.parent.mkdir()
        custom.write_text('[project]\nname = "ci"\n')
        settings = CrustSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.project.name == "ci"
        assert settings.config_path == custom

    def test_missing_explicit_config_uses_defaults(self, tmp_path: Path) -> None:
        settings = CrustSettings.from_cli(
            config_path=str(tmp_path / "nope.toml"), project_root=tmp_path
        )
        assert settings.project.name == "crust"
        assert settings.config_path is None

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "crust.toml").write_text("[project\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            CrustSettings.from_cli(project_root=tmp_path)

    def test_binary_requires_output(self, tmp_path: Path) -> None:
        (tmp_path / "crust.toml").write_text("[go.binaries.cored]\npackage = '.'\n")
        with pytest.raises(Exception, match="output"):
            CrustSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "crust.toml").write_text('[go]\nlint_timeout = "5m"\n')
        monkeypatch.setenv("CRUST_GO__LINT_TIMEOUT", "1m")
        settings = CrustSettings.from_cli(project_root=tmp_path)
        assert settings.go.lint_timeout == "1m"

    def test_cli_flags_override_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CRUST_VERBOSE", "true")
        settings = CrustSettings.from_cli(project_root=tmp_path, verbose=False)
        assert settings.verbose is False


class TestResolvePath:
    def test_relative(self, tmp_path: Path) -> None:
        settings = CrustSettings.from_cli(project_root=tmp_path)
        assert settings.resolve_path("bin/cored") == (tmp_path / "bin" / "cored").resolve()

    def test_absolute(self, tmp_path: Path) -> None:
        settings = CrustSettings.from_cli(project_root=tmp_path)
        assert settings.resolve_path("/usr/bin") == Path("/usr/bin")
