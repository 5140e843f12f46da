"""Extension layer — command contributions via pluggy.

Discovery: the built-in catalogue, ``crust.plugins`` entry points, and
single-file plugins in the project's local plugin directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from crust.plugins.manager import PluginManager

__all__ = ["PluginManager"]
