"""Run context — cooperative cancellation shared by every command in a run.

The executor threads one Context unchanged through every nested
invocation.  It never polls cancellation itself; command bodies (and the
process runner) observe ``ctx.done`` and raise ``ctx.err()``.

Derived contexts are cancelled together with their parent::

    with ctx.with_timeout(30) as tctx:
        process.run(tctx, ["go", "test", "./..."])
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Generator
from contextlib import contextmanager
from types import FrameType
from typing import Any

import structlog

from crust.domain.errors import Cancelled, DeadlineExceeded


class Context:
    """Cancellation signal plus the logger command bodies write to.

    Attributes:
        log: structlog logger for command bodies.
        parent: Context this one was derived from, if any.
    """

    def __init__(self, *, log: Any = None, parent: Context | None = None) -> None:
        self._done = threading.Event()
        self._err: Cancelled | None = None
        # Re-entrant: cancel() may run from a signal handler on the main thread.
        self._lock = threading.RLock()
        self._children: list[Context] = []
        self._timer: threading.Timer | None = None
        self.parent = parent
        if log is None:
            log = parent.log if parent is not None else structlog.get_logger("crust.run")
        self.log = log
        if parent is not None:
            parent._adopt(self)

    # ------------------------------------------------------------------
    # Signal
    # ------------------------------------------------------------------

    @property
    def done(self) -> threading.Event:
        """Event set once the context is cancelled."""
        return self._done

    @property
    def cancelled(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or *timeout* elapses. Returns True if cancelled."""
        return self._done.wait(timeout)

    def err(self) -> Cancelled | None:
        """The cancellation error, or None while the context is live.

        Always the same instance for a given context, so callers can compare
        by identity.
        """
        with self._lock:
            return self._err

    def raise_if_cancelled(self) -> None:
        err = self.err()
        if err is not None:
            raise err

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        self._cancel(Cancelled())

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def child(self) -> Context:
        """Derive a context cancelled whenever this one is."""
        return Context(parent=self)

    def with_timeout(self, seconds: float) -> Context:
        """Derive a context cancelled with DeadlineExceeded after *seconds*."""
        child = Context(parent=self)
        timer = threading.Timer(seconds, child._cancel, args=(DeadlineExceeded(),))
        timer.daemon = True
        with child._lock:
            if child._err is None:
                child._timer = timer
                timer.start()
        return child

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _adopt(self, child: Context) -> None:
        with self._lock:
            err = self._err
            if err is None:
                self._children.append(child)
                return
        child._cancel(err)

    def _cancel(self, err: Cancelled) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children, self._children = self._children, []
            timer, self._timer = self._timer, None
        self._done.set()
        if timer is not None:
            timer.cancel()
        for child in children:
            child._cancel(err)
        if self.parent is not None:
            self.parent._forget(self)

    def _forget(self, child: Context) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)


@contextmanager
def cancel_on_signals(
    ctx: Context,
    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
) -> Generator[Context]:
    """Cancel *ctx* when one of *signals* arrives; restore handlers on exit.

    Must be entered from the main thread.
    """

    def handler(signum: int, _frame: FrameType | None) -> None:
        ctx.log.warning("Received signal, cancelling run", signal=signal.Signals(signum).name)
        ctx.cancel()

    previous = {sig: signal.signal(sig, handler) for sig in signals}
    try:
        yield ctx
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)
