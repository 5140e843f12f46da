"""Git tasks: clone sibling repositories and verify clean working trees."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from crust.domain.errors import ExecutionError
from crust.domain.units import Unit
from crust.infrastructure import process
from crust.tasks.toolchain import ensure_git

if TYPE_CHECKING:
    from crust.config.models import GitRepoConfig
    from crust.domain.context import Context
    from crust.domain.units import DepsFunc


def repo_path(project_root: Path, name: str, config: GitRepoConfig) -> Path:
    """Where repository *name* lives: its configured path, else ``../<name>``."""
    path = Path(config.path) if config.path else Path("..") / name
    if not path.is_absolute():
        path = project_root / path
    return path.resolve()


def clone_repo(project_root: Path, name: str, config: GitRepoConfig) -> Unit:
    """Unit cloning *config.url* unless the checkout already exists."""
    dest = repo_path(project_root, name, config)

    def clone(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_git)
        if dest.exists():
            if not dest.is_dir():
                raise ExecutionError(
                    f"path '{dest}' is not a directory, while repository is expected",
                    details={"path": str(dest)},
                )
            ctx.log.debug("Repository already present", name=name, path=str(dest))
            return
        ctx.log.info("Cloning repository", name=name, url=config.url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        process.run(ctx, ["git", "clone", config.url, str(dest)])

    return Unit(clone, name=f"git/clone/{name}")


def status_clean(repositories: list[Path], *, requires: Sequence[Unit] = ()) -> Unit:
    """Unit failing when any of *repositories* has uncommitted changes.

    *requires* are the clone units of the sibling repositories.  They run
    first, so a missing checkout is cloned before its status is read.
    """

    def check(ctx: Context, deps: DepsFunc) -> None:
        deps(ensure_git, *requires)
        for repo in repositories:
            status = process.output(ctx, ["git", "status", "-s"], cwd=repo)
            if status.strip():
                ctx.log.warning("Repository has uncommitted changes", repository=str(repo))
                raise ExecutionError(
                    f"git status of repository '{repo.name}' is not empty",
                    details={"repository": str(repo), "status": status},
                )

    return Unit(check, name="git/status-clean")
