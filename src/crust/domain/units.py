"""Command units and registered commands.

A unit wraps a command body ``(ctx, deps) -> None``.  Its identity is an
explicit integer token handed out at construction, never the callable
itself: two units wrapping the same function are distinct, while one unit
reached through several names or dependency paths is the same unit.

INVARIANT: tokens are unique for the lifetime of the process.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, overload

if TYPE_CHECKING:
    from crust.domain.context import Context

DepsFunc = Callable[..., None]
CommandFunc = Callable[["Context", DepsFunc], None]

_tokens = itertools.count(1)


class Unit:
    """An executable command body with an opaque identity token."""

    __slots__ = ("fn", "name", "token")

    def __init__(self, fn: CommandFunc, *, name: str | None = None) -> None:
        if not callable(fn):
            msg = f"command body must be callable, got {type(fn).__name__}"
            raise TypeError(msg)
        self.fn = fn
        self.name = name or getattr(fn, "__qualname__", None) or repr(fn)
        self.token = next(_tokens)

    def __call__(self, ctx: Context, deps: DepsFunc) -> None:
        self.fn(ctx, deps)

    def __repr__(self) -> str:
        return f"Unit({self.name!r}, token={self.token})"


@overload
def unit(fn: CommandFunc, /) -> Unit: ...


@overload
def unit(*, name: str | None = None) -> Callable[[CommandFunc], Unit]: ...


def unit(fn: CommandFunc | None = None, /, *, name: str | None = None) -> Any:
    """Decorator turning a command body into a :class:`Unit`.

    Usage::

        @unit
        def ensure_go(ctx, deps): ...

        @unit(name="build/cored")
        def build_cored(ctx, deps):
            deps(ensure_go)
    """

    def wrap(func: CommandFunc) -> Unit:
        return Unit(func, name=name)

    if fn is not None:
        return wrap(fn)
    return wrap


@dataclass(frozen=True)
class Command:
    """A unit as exposed in the registry, with a human-readable description."""

    unit: Unit
    description: str = ""
