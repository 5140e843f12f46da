"""Go tasks: build binaries, and test, lint and tidy modules."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from crust.domain.units import Unit
from crust.infrastructure import process
from crust.tasks.toolchain import ensure_go, ensure_golangci

if TYPE_CHECKING:
    from crust.config.models import GoBinaryConfig
    from crust.domain.context import Context
    from crust.domain.units import DepsFunc

# Toolchain variables from another Go installation break the build.
_CONFLICTING_ENV = ("GOROOT", "GOPATH")


def go_env(*, cgo: bool = False) -> dict[str, str]:
    """Environment for go invocations."""
    return process.environ(
        drop=_CONFLICTING_ENV,
        CGO_ENABLED="1" if cgo else "0",
        GOVCS="public:git|hg",
    )


def build_binary(
    name: str,
    config: GoBinaryConfig,
    *,
    module_dir: Path,
    output: Path,
    requires: Sequence[Unit] = (),
) -> Unit:
    """Unit running ``go build`` for one configured binary."""

    def build(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_go, *requires)
        args = ["go", "build", "-trimpath", "-o", str(output)]
        if config.tags:
            args += ["-tags", ",".join(config.tags)]
        if config.ldflags:
            args += ["-ldflags", " ".join(config.ldflags)]
        args.append(config.package)

        ctx.log.info("Building go binary", binary=name, package=config.package, output=str(output))
        output.parent.mkdir(parents=True, exist_ok=True)
        process.run(ctx, args, cwd=module_dir, env=go_env(cgo=config.cgo))

    return Unit(build, name=f"build/{name}")


def test_module(
    name: str,
    module_dir: Path,
    *,
    flags: Sequence[str] = (),
    requires: Sequence[Unit] = (),
) -> Unit:
    """Unit running ``go test ./...`` in a module."""

    def test(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_go, *requires)
        ctx.log.info("Running go tests", module=name, path=str(module_dir))
        process.run(ctx, ["go", "test", *flags, "./..."], cwd=module_dir, env=go_env(cgo=True))

    return Unit(test, name=f"test/{name}")


def lint_module(
    name: str,
    module_dir: Path,
    *,
    timeout: str,
    requires: Sequence[Unit] = (),
) -> Unit:
    """Unit running ``golangci-lint`` in a module."""

    def lint(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_go, ensure_golangci, *requires)
        ctx.log.info("Running go linter", module=name, path=str(module_dir))
        process.run(
            ctx,
            ["golangci-lint", "run", "--timeout", timeout, "./..."],
            cwd=module_dir,
            env=go_env(),
        )

    return Unit(lint, name=f"lint/{name}")


def tidy_module(name: str, module_dir: Path, *, requires: Sequence[Unit] = ()) -> Unit:
    """Unit running ``go mod tidy`` in a module."""

    def tidy(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_go, *requires)
        ctx.log.info("Running go mod tidy", module=name, path=str(module_dir))
        process.run(ctx, ["go", "mod", "tidy"], cwd=module_dir, env=go_env())

    return Unit(tidy, name=f"tidy/{name}")
