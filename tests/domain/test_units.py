"""Tests for Unit identity and the unit decorator."""

from __future__ import annotations

from typing import Any

import pytest

from crust.domain.units import Command, Unit, unit


def _noop(ctx: Any, deps: Any) -> None:
    pass


class TestUnit:
    def test_name_defaults_to_qualname(self) -> None:
        assert Unit(_noop).name == "_noop"

    def test_explicit_name(self) -> None:
        assert Unit(_noop, name="build/cored").name == "build/cored"

    def test_same_function_distinct_tokens(self) -> None:
        """Identity is the token, not the wrapped callable."""
        first, second = Unit(_noop), Unit(_noop)
        assert first.token != second.token

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError, match="callable"):
            Unit("not a function")  # type: ignore[arg-type]

    def test_call_delegates_to_body(self) -> None:
        calls: list[tuple[Any, Any]] = []
        u = Unit(lambda ctx, deps: calls.append((ctx, deps)))
        u("ctx", "deps")  # type: ignore[arg-type]
        assert calls == [("ctx", "deps")]

    def test_repr_contains_name(self) -> None:
        assert "setup/go" in repr(Unit(_noop, name="setup/go"))


class TestUnitDecorator:
    def test_bare(self) -> None:
        @unit
        def compile_all(ctx: Any, deps: Any) -> None:
            pass

        assert isinstance(compile_all, Unit)
        assert compile_all.name.endswith("compile_all")

    def test_with_name(self) -> None:
        @unit(name="tidy")
        def tidy(ctx: Any, deps: Any) -> None:
            pass

        assert isinstance(tidy, Unit)
        assert tidy.name == "tidy"


class TestCommand:
    def test_frozen(self) -> None:
        command = Command(Unit(_noop), "Do nothing")
        with pytest.raises(Exception):
            command.description = "changed"  # type: ignore[misc]

    def test_description_defaults_empty(self) -> None:
        assert Command(Unit(_noop)).description == ""
