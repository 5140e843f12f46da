"""Project location: which crust.toml applies and which directory is the root.

Precedence for the config file is the ``--config`` flag, then the
``CRUST_CONFIG`` env var, then a walk up from the start directory, the way
git finds ``.git/``.  A flag or env var naming a missing file means "no
config" rather than falling through to the walk-up.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import NamedTuple

CONFIG_FILENAME = "crust.toml"
CONFIG_ENV_VAR = "CRUST_CONFIG"


class ProjectLocation(NamedTuple):
    """Project root plus the config file read for it, if any."""

    root: Path
    config: Path | None


def _walk_up(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _existing(path: str) -> Path | None:
    candidate = Path(path)
    return candidate if candidate.is_file() else None


def locate_project(*, config: str | None = None, start: Path | None = None) -> ProjectLocation:
    """Locate the project for a run started in *start* (default: cwd).

    The root is *start* when given explicitly, otherwise the directory of
    the config file, otherwise the cwd.  Go module paths, binary outputs
    and docker contexts in the config are all relative to it.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if config:
        found = _existing(config)
    elif env_path:
        found = _existing(env_path)
    else:
        found = _walk_up((start or Path.cwd()).resolve())

    if start is not None:
        root = start
    elif found is not None:
        root = found.parent
    else:
        root = Path.cwd()
    return ProjectLocation(root=root, config=found)
