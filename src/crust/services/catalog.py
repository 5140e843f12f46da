"""CatalogService — describe what the registry offers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from crust.domain.errors import NotFoundError
from crust.domain.registry import normalize_name
from crust.services.result import ServiceResult

if TYPE_CHECKING:
    from crust.domain.registry import Registry


class CatalogService:
    """Read-only queries over registered commands."""

    def __init__(self, registry: Registry, *, warnings: list[str] | None = None) -> None:
        self._registry = registry
        self._warnings = list(warnings or [])

    def list_commands(self, prefix: str | None = None) -> ServiceResult:
        """List commands, optionally restricted to the subtree under *prefix*.

        An explicit prefix matching nothing is reported as NOT_FOUND.
        """
        entries = self._registry.commands(prefix)
        if prefix and not entries:
            return ServiceResult.from_error(
                "list_commands",
                NotFoundError(normalize_name(prefix)),
                warnings=self._warnings,
            )
        items: list[dict[str, Any]] = [
            {
                "name": name,
                "description": command.description,
                "children": len(self._registry.children(name)),
            }
            for name, command in entries
        ]
        return ServiceResult(
            ok=True,
            op="list_commands",
            data={"items": items, "count": len(items)},
            warnings=self._warnings,
        )
