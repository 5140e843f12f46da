"""crust exception hierarchy.

All executor and task failures inherit from CrustError, so the CLI can
turn any of them into a failed ServiceResult with a stable error code.

Hierarchy::

    CrustError
    ├── NotFoundError      - name does not resolve to a registered command
    ├── RegistryError      - duplicate or late registration
    ├── CycleError         - command re-entered while still running
    ├── ExecutionError     - command body failed
    │   └── ProcessError   - subprocess exited with a non-zero code
    └── Cancelled          - run context was cancelled
        └── DeadlineExceeded
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar


class CrustError(Exception):
    """Base exception for all crust errors.

    Attributes:
        message: Human-readable description.
        details: Structured extras surfaced in ``ServiceError.detail``.
        command: Innermost command that failed, set by the executor.
        chain: Command names from the requested root down to the failure.
    """

    code: ClassVar[str] = "CRUST_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.command: str | None = None
        self.chain: list[str] = []


class NotFoundError(CrustError):
    """Raised when a command name is not registered."""

    code = "NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"command '{name}' does not exist", details={"name": name})
        self.name = name


class RegistryError(CrustError):
    """Raised on duplicate registration or registration into a sealed registry."""

    code = "REGISTRY"


class CycleError(CrustError):
    """Raised when a command is re-entered while it is still in progress."""

    code = "CYCLE"

    def __init__(self, name: str, cycle: Sequence[str]) -> None:
        path = " -> ".join(cycle)
        super().__init__(
            f"dependency cycle detected: {path}",
            details={"cycle": list(cycle)},
        )
        self.name = name
        self.cycle = list(cycle)


class ExecutionError(CrustError):
    """Raised when a command body fails."""

    code = "EXECUTION_FAILED"


class ProcessError(ExecutionError):
    """Raised when an external process exits with a non-zero code."""

    def __init__(self, args: Sequence[str], returncode: int, *, stderr: str = "") -> None:
        command = " ".join(args)
        super().__init__(
            f"'{command}' exited with code {returncode}",
            details={"args": list(args), "returncode": returncode, "stderr": stderr},
        )
        self.argv = list(args)
        self.returncode = returncode
        self.stderr = stderr


class Cancelled(CrustError):
    """Raised by command bodies that observe a cancelled context."""

    code = "CANCELLED"

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(Cancelled):
    """Cancellation caused by a context timeout."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)
