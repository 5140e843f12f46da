"""Pluggy hook specifications for crust."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from crust.config.settings import CrustSettings
    from crust.domain.units import Command

hookspec = pluggy.HookspecMarker("crust")
hookimpl = pluggy.HookimplMarker("crust")


class CrustHookSpec:
    """Hook specifications for the crust plugin system."""

    @hookspec
    def register_commands(self, settings: CrustSettings) -> dict[str, Command] | None:
        """Return command name -> Command mappings to add to the registry.

        Called once at startup, before the registry is sealed.
        """
