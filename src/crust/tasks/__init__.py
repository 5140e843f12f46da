"""Command catalogue — the build, lint, test, tidy, image and git commands.

Task bodies shell out through :mod:`crust.infrastructure.process`; which
commands exist is driven by ``crust.toml`` (see :func:`build_commands`).
"""

from crust.tasks.index import build_commands

__all__ = ["build_commands"]
