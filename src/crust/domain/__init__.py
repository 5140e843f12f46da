"""Domain layer — command units, registry, run lifecycle and errors.

This layer depends only on stdlib and structlog.
It must never import from services, infrastructure, commands, or config.
"""

from crust.domain.context import Context
from crust.domain.errors import (
    Cancelled,
    CrustError,
    CycleError,
    DeadlineExceeded,
    ExecutionError,
    NotFoundError,
    ProcessError,
    RegistryError,
)
from crust.domain.registry import Registry
from crust.domain.units import Command, CommandFunc, DepsFunc, Unit, unit

__all__ = [
    "Cancelled",
    "Command",
    "CommandFunc",
    "Context",
    "CrustError",
    "CycleError",
    "DeadlineExceeded",
    "DepsFunc",
    "ExecutionError",
    "NotFoundError",
    "ProcessError",
    "Registry",
    "RegistryError",
    "Unit",
    "unit",
]
