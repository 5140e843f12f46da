"""Tests for CatalogService.list_commands."""

from __future__ import annotations

from crust.domain.registry import Registry
from crust.domain.units import Command, Unit
from crust.services.catalog import CatalogService


def _registry() -> Registry:
    def noop(ctx: object, deps: object) -> None:
        pass

    return Registry(
        {
            "build": Command(Unit(noop), "Build all go binaries"),
            "build/cored": Command(Unit(noop), "Build go binary 'cored'"),
            "build/crust": Command(Unit(noop), "Build go binary 'crust'"),
            "lint": Command(Unit(noop), "Lint all modules"),
        }
    )


class TestListCommands:
    def test_all(self) -> None:
        result = CatalogService(_registry()).list_commands()
        assert result.ok
        assert result.op == "list_commands"
        assert result.data["count"] == 4
        assert [item["name"] for item in result.data["items"]] == [
            "build",
            "build/cored",
            "build/crust",
            "lint",
        ]

    def test_children_counted(self) -> None:
        items = CatalogService(_registry()).list_commands()
        by_name = {item["name"]: item for item in items.data["items"]}
        assert by_name["build"]["children"] == 2
        assert by_name["build/cored"]["children"] == 0
        assert by_name["build"]["description"] == "Build all go binaries"

    def test_prefix(self) -> None:
        result = CatalogService(_registry()).list_commands("build/")
        assert [item["name"] for item in result.data["items"]] == [
            "build",
            "build/cored",
            "build/crust",
        ]

    def test_unknown_prefix(self) -> None:
        result = CatalogService(_registry()).list_commands("images")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_empty_registry(self) -> None:
        result = CatalogService(Registry()).list_commands()
        assert result.ok
        assert result.data == {"items": [], "count": 0}

    def test_warnings(self) -> None:
        result = CatalogService(_registry(), warnings=["w"]).list_commands("nope")
        assert result.warnings == ["w"]
