"""Command registry — hierarchical, slash-delimited names to command units.

Populated once at startup, then sealed.  Lookups ignore trailing
separators, so ``"build/cored/"`` resolves like ``"build/cored"``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from crust.domain.errors import NotFoundError, RegistryError
from crust.domain.units import Command, Unit

SEPARATOR = "/"


def normalize_name(name: str) -> str:
    """Strip trailing separators from a command name.

    Examples:
        >>> normalize_name("a/aa/")
        'a/aa'
        >>> normalize_name("lint")
        'lint'
    """
    return name.rstrip(SEPARATOR)


class Registry:
    """Lookup table from command name to :class:`Command`."""

    def __init__(self, commands: Mapping[str, Command | Unit] | None = None) -> None:
        self._commands: dict[str, Command] = {}
        self._sealed = False
        for name, command in (commands or {}).items():
            self.register(name, command)

    def register(self, name: str, command: Command | Unit, description: str = "") -> None:
        """Register *command* under *name*.

        A bare :class:`Unit` is wrapped in a :class:`Command` with *description*.
        """
        if self._sealed:
            raise RegistryError(f"registry is sealed, cannot register '{name}'")
        key = normalize_name(name)
        if not key:
            raise RegistryError("command name must not be empty")
        if key in self._commands:
            raise RegistryError(f"command '{key}' is already registered")
        if isinstance(command, Unit):
            command = Command(unit=command, description=description)
        self._commands[key] = command

    def seal(self) -> None:
        """Make the registry read-only."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, name: str) -> Command:
        """Return the registered command for *name*, or raise NotFoundError."""
        key = normalize_name(name)
        try:
            return self._commands[key]
        except KeyError:
            raise NotFoundError(key or name) from None

    def resolve(self, name: str) -> Unit:
        """Return the unit registered under *name*, or raise NotFoundError."""
        return self.get(name).unit

    def names(self) -> list[str]:
        return sorted(self._commands)

    def commands(self, prefix: str | None = None) -> list[tuple[str, Command]]:
        """Registered commands sorted by name, optionally limited to a subtree."""
        root = normalize_name(prefix) if prefix else ""
        return [
            (name, self._commands[name])
            for name in self.names()
            if not root or name == root or name.startswith(root + SEPARATOR)
        ]

    def children(self, name: str) -> list[str]:
        """Names exactly one level below *name*."""
        root = normalize_name(name)
        if not root:
            return [child for child in self.names() if SEPARATOR not in child]
        depth = root.count(SEPARATOR) + 1
        return [
            child
            for child, _ in self.commands(root)
            if child != root and child.count(SEPARATOR) == depth
        ]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
