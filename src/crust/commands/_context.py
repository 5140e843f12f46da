"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy registry assembly and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
import structlog

from crust.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from crust.config.settings import CrustSettings
    from crust.domain.context import Context
    from crust.domain.registry import Registry
    from crust.plugins.manager import PluginManager
    from crust.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Plugins are loaded and
    the registry is built on first use, so ``--help`` and ``--version``
    never import plugin code.
    """

    def __init__(self, settings: CrustSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        self._registry: Registry | None = None

        from crust.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        if settings.verbose:
            from crust.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager, with built-in and discovered plugins loaded."""
        if self._plugins is None:
            from crust.plugins.builtins.catalogue import CataloguePlugin
            from crust.plugins.manager import PluginManager

            manager = PluginManager()
            manager.register_plugin(CataloguePlugin(), name="builtin")
            local_dir = None
            if self.settings.plugins.enabled:
                local_dir = self.settings.resolve_path(self.settings.plugins.local_dir)
                manager.discover_and_load(local_dir=local_dir)
            self._plugins = manager
        return self._plugins

    @property
    def registry(self) -> Registry:
        """The sealed command registry (built lazily on first access)."""
        if self._registry is None:
            self._registry = self.plugins.build_registry(self.settings)
        return self._registry

    @property
    def warnings(self) -> list[str]:
        return list(self.plugins.warnings)

    def new_context(self) -> Context:
        """Root run context, logging through the ``crust.run`` logger."""
        from crust.domain.context import Context

        log = structlog.get_logger("crust.run").bind(project=self.settings.project.name)
        return Context(log=log)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
