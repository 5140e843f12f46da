"""Subcommand modules for crust.

Provides register_commands() which uses deferred imports to keep
``crust --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from crust.commands.list_cmd import list_cmd
    from crust.commands.run import run

    cli.add_command(run)
    cli.add_command(list_cmd)
