"""Built-in plugin contributing the config-driven command catalogue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crust.plugins.hookspecs import hookimpl
from crust.tasks import build_commands

if TYPE_CHECKING:
    from crust.config.settings import CrustSettings
    from crust.domain.units import Command


class CataloguePlugin:
    """Registers build, lint, test, tidy, images, git and setup commands."""

    @hookimpl
    def register_commands(self, settings: CrustSettings) -> dict[str, Command]:
        return build_commands(settings)
