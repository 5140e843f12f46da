"""RunService — execute named commands and report the outcome.

Wraps :class:`~crust.services.executor.Executor` at the service boundary:
the executor raises, this layer converts to ServiceResult.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from crust.domain.errors import CrustError
from crust.services.executor import Executor
from crust.services.result import ServiceResult
from crust.services.telemetry import traced

if TYPE_CHECKING:
    from crust.domain.context import Context
    from crust.domain.registry import Registry

logger = logging.getLogger(__name__)


class RunService:
    """Run commands from a sealed registry."""

    def __init__(self, registry: Registry, *, warnings: list[str] | None = None) -> None:
        self._registry = registry
        self._warnings = list(warnings or [])

    @traced
    def run(self, ctx: Context, names: Sequence[str]) -> ServiceResult:
        """Execute *names* and their dependencies, each at most once."""
        requested = list(names)
        try:
            executed = Executor(self._registry).execute(ctx, requested)
        except CrustError as err:
            logger.debug("Run failed: %s", err.message, exc_info=True)
            return ServiceResult.from_error("run", err, warnings=self._warnings)
        return ServiceResult(
            ok=True,
            op="run",
            data={
                "requested": requested,
                "executed": executed,
                "count": len(executed),
            },
            warnings=self._warnings,
        )
