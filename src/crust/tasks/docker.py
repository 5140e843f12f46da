"""Docker tasks: build configured images."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from crust.domain.units import Unit
from crust.infrastructure import process
from crust.tasks.toolchain import ensure_docker

if TYPE_CHECKING:
    from crust.config.models import DockerImageConfig
    from crust.domain.context import Context
    from crust.domain.units import DepsFunc


def image_tag(name: str, config: DockerImageConfig) -> str:
    return config.tag or f"{name}:local"


def build_args(name: str, config: DockerImageConfig, *, context_dir: Path) -> list[str]:
    """Arguments for ``docker build`` of image *name*."""
    dockerfile = Path(config.dockerfile)
    if not dockerfile.is_absolute():
        dockerfile = context_dir / dockerfile
    args = ["docker", "build", "--tag", image_tag(name, config), "--file", str(dockerfile)]
    for key, value in sorted(config.build_args.items()):
        args += ["--build-arg", f"{key}={value}"]
    args.append(str(context_dir))
    return args


def build_image(
    name: str,
    config: DockerImageConfig,
    *,
    context_dir: Path,
    requires: Sequence[Unit] = (),
) -> Unit:
    """Unit building one docker image after the binaries it packages."""

    def build(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_docker, *requires)
        ctx.log.info("Building docker image", image=name, tag=image_tag(name, config))
        process.run(ctx, build_args(name, config, context_dir=context_dir))

    return Unit(build, name=f"images/{name}")
