"""Executor — runs the lazily discovered dependency closure of named commands.

Dependencies are not declared up front: a command body calls ``deps(...)``
while it runs, and each dependency is invoked right there, depth-first.
Per run, every unit moves through the lifecycle in
:mod:`crust.domain.lifecycle`, keyed by its identity token:

* COMPLETED units are skipped, so each unit runs at most once.
* IN_PROGRESS units re-entered raise CycleError.
* The first failure is recorded and re-raised up the whole call chain;
  no unit is invoked after it, even if a body swallows the exception.

Exceptions from the crust taxonomy (including Cancelled) propagate as the
same object.  Any other exception escaping a body is converted into an
ExecutionError chained to the original.

INVARIANT: execution is strictly sequential on the calling thread.

Each dependency level costs about three Python frames (``invoke``, the
body, ``deps``), so a chain deeper than roughly 300 units exhausts the
interpreter's recursion limit; the RecursionError surfaces as an
ExecutionError like any other exception from a body.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from crust.domain.context import Context
from crust.domain.errors import CrustError, CycleError, ExecutionError
from crust.domain.lifecycle import UnitState, is_valid_transition
from crust.domain.registry import Registry
from crust.domain.units import Unit
from crust.services.telemetry import mark_unit, unit_span

logger = logging.getLogger(__name__)


class Executor:
    """Resolves command names and runs them with their dependencies."""

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def execute(self, ctx: Context, names: Sequence[str]) -> list[str]:
        """Run the commands registered under *names*, in order.

        Every name is resolved before anything runs, so an unknown name
        raises NotFoundError without side effects.

        Returns:
            Names of the units that completed, in completion order.

        Raises:
            NotFoundError: A requested or dependency name is not registered.
            CycleError: A unit depends on itself, directly or transitively.
            ExecutionError: A command body failed.
            Cancelled: A command body observed the cancelled context.
        """
        units = [self._registry.resolve(name) for name in names]
        run = _Run(self._registry, ctx)
        for target in units:
            run.invoke(target)
        return run.completed


class _Run:
    """Run state of a single ``execute`` call."""

    def __init__(self, registry: Registry, ctx: Context) -> None:
        self._registry = registry
        self._ctx = ctx
        self._states: dict[int, UnitState] = {}
        self._stack: list[Unit] = []
        self._failure: CrustError | None = None
        # Errors given command/chain by this run.  Error objects can outlive a
        # run (a cancelled Context hands out the same Cancelled every time).
        self._attributed: list[CrustError] = []
        self.completed: list[str] = []

    # ------------------------------------------------------------------
    # Dependency callback
    # ------------------------------------------------------------------

    def deps(self, *targets: Unit | str) -> None:
        """Invoke *targets* in order; the handle passed to command bodies."""
        self._raise_pending()
        for target in targets:
            try:
                resolved = self._lookup(target)
            except CrustError as err:
                self._record(err)
                raise
            self.invoke(resolved)

    def _lookup(self, target: Unit | str) -> Unit:
        if isinstance(target, Unit):
            return target
        if isinstance(target, str):
            return self._registry.resolve(target)
        raise ExecutionError(
            f"dependency must be a Unit or a command name, got {type(target).__name__}"
        )

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def invoke(self, target: Unit) -> None:
        self._raise_pending()

        state = self._states.get(target.token, UnitState.NOT_STARTED)
        if state is UnitState.COMPLETED:
            logger.debug("Command already completed: %s", target.name)
            mark_unit(target, UnitState.COMPLETED, reused=True)
            return
        if state is UnitState.IN_PROGRESS:
            raise self._cycle(target)

        self._transition(target, UnitState.IN_PROGRESS)
        self._stack.append(target)
        logger.debug("Running command: %s", target.name)
        try:
            with unit_span(target):
                target.fn(self._ctx, self.deps)
                # A body that swallowed a dependency failure still fails.
                self._raise_pending()
        except CrustError as err:
            self._fail(target, err)
            raise
        except Exception as exc:
            err = ExecutionError(
                str(exc) or type(exc).__name__,
                details={"exception": type(exc).__name__},
            )
            self._fail(target, err)
            raise err from exc
        finally:
            self._stack.pop()

        self._transition(target, UnitState.COMPLETED)
        self.completed.append(target.name)
        logger.debug("Command completed: %s", target.name)

    def _cycle(self, target: Unit) -> CycleError:
        start = next(i for i, running in enumerate(self._stack) if running.token == target.token)
        cycle = [running.name for running in self._stack[start:]] + [target.name]
        err = CycleError(target.name, cycle)
        self._attribute(err, target.name, [*self._stack, target])
        mark_unit(target, UnitState.IN_PROGRESS, error=type(err).__name__)
        self._record(err)
        return err

    def _fail(self, target: Unit, err: CrustError) -> None:
        self._transition(target, UnitState.FAILED)
        self._attribute(err, target.name, self._stack)
        self._record(err)
        logger.debug("Command failed: %s (%s)", target.name, err.message)

    def _attribute(self, err: CrustError, command: str, chain: Sequence[Unit]) -> None:
        """Name the innermost failing command, once per error per run."""
        if any(seen is err for seen in self._attributed):
            return
        self._attributed.append(err)
        err.command = command
        err.chain = [unit.name for unit in chain]

    def _record(self, err: CrustError) -> None:
        if self._failure is None:
            self._failure = err

    def _raise_pending(self) -> None:
        if self._failure is not None:
            raise self._failure

    def _transition(self, target: Unit, state: UnitState) -> None:
        current = self._states.get(target.token, UnitState.NOT_STARTED)
        if not is_valid_transition(current, state):
            msg = f"invalid state transition for '{target.name}': {current} -> {state}"
            raise RuntimeError(msg)
        self._states[target.token] = state
