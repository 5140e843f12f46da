"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``CRUST_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``crust.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from crust.config.discovery import locate_project
from crust.config.models import (
    DockerConfig,
    GitConfig,
    GoConfig,
    PluginsConfig,
    ProjectConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``crust.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class CrustSettings(BaseSettings):
    """Settings for the crust CLI and the command catalogue.

    Attributes:
        project_root: Parent of ``crust.toml``, or the CWD if none was found.
            Relative paths in every section resolve against it.
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CRUST_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    go: GoConfig = Field(default_factory=GoConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> CrustSettings:
        """Construct settings from a CLI invocation.

        The config file and project root come from :func:`locate_project`:
        *config_path* wins (a missing file is ignored), then ``CRUST_CONFIG``,
        then a walk up from *project_root* or the CWD.
        """
        location = locate_project(config=config_path, start=project_root)

        _tls.toml_path = location.config
        try:
            return cls(
                project_root=location.root,
                config_path=location.config,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

    def resolve_path(self, path: str | Path) -> Path:
        """Resolve *path* against the project root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return (self.project_root / candidate).resolve()
