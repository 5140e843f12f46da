"""Plugin discovery, loading, and registry assembly.

Discovery: entry points (pip-installed) via pluggy setuptools entrypoints,
plus local single-file plugins from ``.crust/plugins/``.
Capability: contributing commands through ``register_commands``.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from crust.domain.errors import CrustError
from crust.domain.registry import Registry
from crust.domain.units import Command, Unit
from crust.plugins.hookspecs import CrustHookSpec

if TYPE_CHECKING:
    from crust.config.settings import CrustSettings

PROJECT_NAME = "crust"
ENTRY_POINT_GROUP = "crust.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery and turns contributions into a sealed registry.

    Attributes:
        warnings: Human-readable messages for every plugin that failed to
            load or contribute. Surfaced in ServiceResult.warnings.
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(CrustHookSpec)
        self.warnings: list[str] = []

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Returns a list of loaded plugin names.
        """
        try:
            self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception as exc:
            logger.warning("Failed to load entry-point plugins", exc_info=True)
            self.warnings.append(f"Failed to load entry-point plugins: {exc}")
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def list_plugin_names(self) -> list[str]:
        return [name for name, _plugin in self._pm.list_name_plugin()]

    # ------------------------------------------------------------------
    # Registry assembly
    # ------------------------------------------------------------------

    def build_registry(self, settings: CrustSettings) -> Registry:
        """Collect commands from every plugin into a sealed registry.

        Plugins are asked one at a time so a failing plugin only loses its
        own commands.  Names already taken are skipped with a warning; the
        first plugin registered wins.
        """
        registry = Registry()
        for plugin_name, plugin in self._pm.list_name_plugin():
            for name, command in self._collect_plugin_commands(plugin, plugin_name, settings):
                try:
                    registry.register(name, command)
                except CrustError as exc:
                    logger.warning("Skipping command %r from plugin %s: %s", name, plugin_name, exc)
                    self.warnings.append(f"Skipped command '{name}' from plugin {plugin_name}")
        registry.seal()
        logger.debug("Registry sealed with %d commands", len(registry))
        return registry

    def _collect_plugin_commands(
        self,
        plugin: object,
        plugin_name: str,
        settings: CrustSettings,
    ) -> list[tuple[str, Command]]:
        hook = getattr(plugin, "register_commands", None)
        if hook is None:
            return []

        try:
            command_map = hook(settings=settings)
        except Exception as exc:
            logger.warning(
                "Failed to collect commands from plugin %s",
                plugin_name,
                exc_info=True,
            )
            self.warnings.append(f"Plugin {plugin_name} failed to register commands: {exc}")
            return []

        if command_map is None:
            return []
        if not isinstance(command_map, dict):
            logger.warning("Plugin %s returned non-dict command registrations", plugin_name)
            self.warnings.append(f"Plugin {plugin_name} returned invalid command registrations")
            return []

        collected: list[tuple[str, Command]] = []
        for name, command in command_map.items():
            if isinstance(command, Unit):
                command = Command(unit=command)
            if not isinstance(name, str) or not isinstance(command, Command):
                logger.warning("Skipping invalid command %r from plugin %s", name, plugin_name)
                self.warnings.append(f"Skipped invalid command '{name}' from plugin {plugin_name}")
                continue
            collected.append((name, command))
        return collected

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"crust_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception as exc:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                self.warnings.append(f"Failed to load local plugin {py_file.name}: {exc}")
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self.register_plugin(instance, name=f"{module_name}.{obj.__name__}")
                except Exception as exc:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )
                    self.warnings.append(f"Failed to instantiate plugin {obj.__name__}: {exc}")

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly, which
        leaves ``self`` unbound at hook call time.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has a method decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("crust")`` sets a ``crust_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "crust_impl", None):
                return True
        return False
