"""Run telemetry: a span tree of unit invocations, shown with ``--verbose``.

``@traced`` opens the root span around a service call.  Below it the
executor opens one span per unit body it runs (:func:`unit_span`) and
records re-entries that ran nothing (:func:`mark_unit`): a COMPLETED unit
reused by a second dependant, or an IN_PROGRESS unit closing a cycle.

Unit spans carry the unit's identity token and the state the unit ended
in, so two units sharing a name stay distinguishable in the tree.

Disabled telemetry costs one ContextVar lookup per call.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import structlog

from crust.domain.lifecycle import UnitState
from crust.services.result import ServiceResult

if TYPE_CHECKING:
    from crust.domain.units import Unit

log = structlog.get_logger("crust.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """Timing span; unit spans also carry ``token`` and ``state``."""

    name: str
    parent: Span | None = None
    token: int | None = None
    state: UnitState | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def walk(self) -> Iterator[Span]:
        """This span and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.token is not None:
            result["token"] = self.token
        if self.state is not None:
            result["state"] = self.state.value
        if self.annotations:
            result["annotations"] = dict(self.annotations)
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


# ── Unit spans ───────────────────────────────────────────────────────


def _parent() -> Span | None:
    if not _enabled.get():
        return None
    return _current_span.get()


def _unit_child(parent: Span, unit: Unit, state: UnitState | None = None) -> Span:
    span = Span(name=unit.name, parent=parent, token=unit.token, state=state)
    parent.children.append(span)
    return span


@contextmanager
def unit_span(unit: Unit) -> Generator[Span | None]:
    """Span around one run of *unit*'s body.

    The span ends COMPLETED, or FAILED with the exception type annotated.
    Yields None when telemetry is disabled or no root span is active.
    """
    parent = _parent()
    if parent is None:
        yield None
        return

    span = _unit_child(parent, unit)
    reset = _current_span.set(span)
    try:
        yield span
    except BaseException as exc:
        span.state = UnitState.FAILED
        span.annotate("error", type(exc).__name__)
        raise
    else:
        span.state = UnitState.COMPLETED
    finally:
        span.end()
        _current_span.reset(reset)


def mark_unit(unit: Unit, state: UnitState, **annotations: Any) -> None:
    """Record a zero-length span for a re-entry of *unit* whose body did not run."""
    parent = _parent()
    if parent is None:
        return
    span = _unit_child(parent, unit, state)
    span.annotations.update(annotations)
    span.end_time = span.start_time


# ── @traced ──────────────────────────────────────────────────────────


def _log_tree(root: Span, *, ok: bool) -> None:
    units = [span for span in root.walk() if span.token is not None]
    log.debug(
        "span.complete",
        span_name=root.name,
        duration_ms=round(root.duration_ms, 2),
        ok=ok,
        units=sum(1 for span in units if "reused" not in span.annotations),
        reused=sum(1 for span in units if "reused" in span.annotations),
    )


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Decorator: root span around a service method, tree injected into meta.

    No-op when telemetry is disabled.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        reset = _current_span.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            root.end()
            _current_span.reset(reset)
            _log_tree(root, ok=ok)

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Enable verbose telemetry (called by AppContext at startup)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
