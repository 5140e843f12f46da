"""Toolchain presence checks shared by every task that shells out."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crust.domain.units import unit
from crust.infrastructure import process

if TYPE_CHECKING:
    from crust.domain.context import Context
    from crust.domain.units import DepsFunc


def _ensure(ctx: Context, binary: str) -> None:
    path = process.ensure_binary(binary)
    ctx.log.debug("Found binary", binary=binary, path=path)


@unit(name="setup/go")
def ensure_go(ctx: Context, deps: DepsFunc) -> None:
    _ensure(ctx, "go")


@unit(name="setup/golangci-lint")
def ensure_golangci(ctx: Context, deps: DepsFunc) -> None:
    _ensure(ctx, "golangci-lint")


@unit(name="setup/docker")
def ensure_docker(ctx: Context, deps: DepsFunc) -> None:
    _ensure(ctx, "docker")


@unit(name="setup/git")
def ensure_git(ctx: Context, deps: DepsFunc) -> None:
    _ensure(ctx, "git")


@unit(name="setup")
def ensure_all(ctx: Context, deps: DepsFunc) -> None:
    """Check every toolchain the catalogue can use."""
    deps(ensure_git, ensure_go, ensure_golangci, ensure_docker)
