"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, crust.toml only contains
overrides.  An empty crust.toml yields a registry with the setup, git and
aggregate commands and no per-module children.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProjectConfig(BaseModel):
    """[project] section."""

    model_config = {"frozen": True}

    name: str = "crust"


class GoModuleConfig(BaseModel):
    """[go.modules.<name>] — a Go module that is tested, linted and tidied."""

    model_config = {"frozen": True}

    path: str = "."
    repository: str | None = None


class GoBinaryConfig(BaseModel):
    """[go.binaries.<name>] — a binary produced by ``go build``."""

    model_config = {"frozen": True}

    package: str = "."
    output: str
    module: str | None = None
    cgo: bool = False
    tags: list[str] = Field(default_factory=list)
    ldflags: list[str] = Field(default_factory=list)


class GoConfig(BaseModel):
    """[go] section."""

    model_config = {"frozen": True}

    modules: dict[str, GoModuleConfig] = Field(default_factory=dict)
    binaries: dict[str, GoBinaryConfig] = Field(default_factory=dict)
    lint_timeout: str = "10m"
    test_flags: list[str] = Field(default_factory=list)


class DockerImageConfig(BaseModel):
    """[docker.images.<name>] — an image produced by ``docker build``."""

    model_config = {"frozen": True}

    context: str = "."
    dockerfile: str = "Dockerfile"
    tag: str | None = None
    build_args: dict[str, str] = Field(default_factory=dict)
    binaries: list[str] = Field(default_factory=list)


class DockerConfig(BaseModel):
    """[docker] section."""

    model_config = {"frozen": True}

    images: dict[str, DockerImageConfig] = Field(default_factory=dict)


class GitRepoConfig(BaseModel):
    """[git.repositories.<name>] — a repository cloned next to the project."""

    model_config = {"frozen": True}

    url: str
    path: str | None = None


class GitConfig(BaseModel):
    """[git] section."""

    model_config = {"frozen": True}

    repositories: dict[str, GitRepoConfig] = Field(default_factory=dict)
    require_clean: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".crust/plugins"
