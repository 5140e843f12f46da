"""Command: run named commands with their dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crust.commands._base import CrustCommand

if TYPE_CHECKING:
    from crust.commands._context import AppContext


@click.command(
    cls=CrustCommand,
    examples="""\
  crust run build
  crust run build/cored test/cored
  crust run lint git/status-clean
  crust --json run images""",
)
@click.argument("names", nargs=-1, required=True)
@click.pass_obj
def run(app: AppContext, names: tuple[str, ...]) -> None:
    """Run NAMES in order, each dependency at most once.

    The run stops at the first failure.  SIGINT and SIGTERM cancel the
    run; commands observing the cancellation stop their processes.
    """
    from crust.domain.context import cancel_on_signals
    from crust.services.run import RunService

    svc = RunService(app.registry, warnings=app.warnings)
    with app.new_context() as ctx, cancel_on_signals(ctx):
        result = svc.run(ctx, names)
    app.emit(result)
