"""ServiceResult and ServiceError — what every crust operation hands the CLI.

The executor raises CrustError; services catch it at their boundary and
convert it with :meth:`ServiceResult.from_error`, so the CLI only ever
renders one type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from crust.domain.errors import CrustError


class ServiceError(BaseModel):
    """Error code, message and structured detail of a failed operation."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of a service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"run"``, ``"list_commands"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (e.g. plugins that failed to load).
        error: Set when ``ok`` is False.
        meta: Telemetry span tree in verbose mode.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def from_error(
        cls,
        op: str,
        err: CrustError,
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Build a failed result from a crust exception."""
        detail: dict[str, Any] = dict(err.details)
        message = err.message
        if err.command is not None:
            detail["command"] = err.command
            message = f"command '{err.command}' failed: {message}"
        if err.chain:
            detail["chain"] = list(err.chain)
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=err.code, message=message, detail=detail),
            warnings=warnings or [],
        )
