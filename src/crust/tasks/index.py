"""Catalogue assembly: config-driven command names and their units.

Aggregate commands depend on the very units registered under their child
names, so ``crust run build build/cored`` builds cored only once.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from crust.domain.errors import RegistryError
from crust.domain.units import Command, Unit
from crust.tasks import docker, git, golang
from crust.tasks.toolchain import ensure_all, ensure_docker, ensure_git, ensure_go, ensure_golangci

if TYPE_CHECKING:
    from crust.config.settings import CrustSettings
    from crust.domain.context import Context
    from crust.domain.units import DepsFunc


def aggregate(name: str, units: Sequence[Unit], *, after: Sequence[Unit] = ()) -> Unit:
    """Unit that runs *units* then *after*, in order."""
    targets = (*units, *after)

    def run(ctx: Context, deps: DepsFunc) -> None:
        deps(*targets)

    return Unit(run, name=name)


def _group(
    commands: dict[str, Command],
    root: str,
    description: str,
    children: Mapping[str, Unit],
    child_description: str,
    *,
    after: Sequence[Unit] = (),
) -> None:
    commands[root] = Command(aggregate(root, list(children.values()), after=after), description)
    for name, child in children.items():
        commands[f"{root}/{name}"] = Command(child, child_description.format(name))


def _lookup(kind: str, name: str, known: Mapping[str, object], owner: str) -> None:
    if name not in known:
        raise RegistryError(
            f"{owner} refers to unknown {kind} '{name}'",
            details={kind: name, "owner": owner},
        )


def build_commands(settings: CrustSettings) -> dict[str, Command]:
    """Build the command catalogue for *settings*.

    Raises:
        RegistryError: A config entry refers to an unknown repository,
            module or binary.
    """
    root = settings.project_root.resolve()
    commands: dict[str, Command] = {
        "setup": Command(ensure_all, "Check that every toolchain is available"),
        "setup/git": Command(ensure_git, "Check that git is available"),
        "setup/go": Command(ensure_go, "Check that the go toolchain is available"),
        "setup/golangci-lint": Command(ensure_golangci, "Check that golangci-lint is available"),
        "setup/docker": Command(ensure_docker, "Check that docker is available"),
    }

    # --- Git ---
    repositories = settings.git.repositories
    clones = {name: git.clone_repo(root, name, cfg) for name, cfg in repositories.items()}
    _group(
        commands,
        "git/clone",
        "Clone all configured repositories",
        clones,
        "Clone repository '{}' if missing",
    )
    checkouts = [root, *(git.repo_path(root, name, cfg) for name, cfg in repositories.items())]
    status = git.status_clean(checkouts, requires=list(clones.values()))
    commands["git/status-clean"] = Command(status, "Fail if any repository has uncommitted changes")

    # --- Go modules ---
    module_dirs: dict[str, Path] = {}
    module_requires: dict[str, list[Unit]] = {}
    for name, module in settings.go.modules.items():
        requires: list[Unit] = []
        if module.repository is not None:
            _lookup("repository", module.repository, clones, f"go module '{name}'")
            requires.append(clones[module.repository])
        module_dirs[name] = settings.resolve_path(module.path)
        module_requires[name] = requires

    tests = {
        name: golang.test_module(
            name, path, flags=settings.go.test_flags, requires=module_requires[name]
        )
        for name, path in module_dirs.items()
    }
    lints = {
        name: golang.lint_module(
            name, path, timeout=settings.go.lint_timeout, requires=module_requires[name]
        )
        for name, path in module_dirs.items()
    }
    tidies = {
        name: golang.tidy_module(name, path, requires=module_requires[name])
        for name, path in module_dirs.items()
    }

    # --- Go binaries ---
    binaries: dict[str, Unit] = {}
    for name, binary in settings.go.binaries.items():
        module_dir, requires = root, []
        if binary.module is not None:
            _lookup("module", binary.module, module_dirs, f"go binary '{name}'")
            module_dir, requires = module_dirs[binary.module], module_requires[binary.module]
        binaries[name] = golang.build_binary(
            name,
            binary,
            module_dir=module_dir,
            output=settings.resolve_path(binary.output),
            requires=requires,
        )

    # --- Docker images ---
    images: dict[str, Unit] = {}
    for name, image in settings.docker.images.items():
        for binary_name in image.binaries:
            _lookup("binary", binary_name, binaries, f"docker image '{name}'")
        images[name] = docker.build_image(
            name,
            image,
            context_dir=settings.resolve_path(image.context),
            requires=[binaries[b] for b in image.binaries],
        )

    _group(commands, "build", "Build all go binaries", binaries, "Build go binary '{}'")
    _group(commands, "test", "Run go tests in all modules", tests, "Run go tests in module '{}'")
    _group(
        commands,
        "lint",
        "Lint all modules",
        lints,
        "Lint module '{}'",
        # Tidy may rewrite go.mod, so it has to run before the clean check.
        after=[*tidies.values(), status] if settings.git.require_clean else (),
    )
    _group(commands, "tidy", "Run go mod tidy in all modules", tidies, "Run go mod tidy in '{}'")
    _group(commands, "images", "Build all docker images", images, "Build docker image '{}'")
    return commands
