"""Command: list registered commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crust.commands._base import CrustCommand

if TYPE_CHECKING:
    from crust.commands._context import AppContext


@click.command(
    "list",
    cls=CrustCommand,
    examples="""\
  crust list
  crust list build
  crust -q list test""",
)
@click.argument("prefix", required=False)
@click.pass_obj
def list_cmd(app: AppContext, prefix: str | None) -> None:
    """List registered commands, optionally only those under PREFIX."""
    from crust.services.catalog import CatalogService

    app.emit(CatalogService(app.registry, warnings=app.warnings).list_commands(prefix))
