"""Tests for the per-run unit state machine."""

from __future__ import annotations

import pytest

from crust.domain.lifecycle import UNIT_TRANSITIONS, UnitState, is_valid_transition


class TestUnitTransitions:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (UnitState.NOT_STARTED, UnitState.IN_PROGRESS),
            (UnitState.IN_PROGRESS, UnitState.COMPLETED),
            (UnitState.IN_PROGRESS, UnitState.FAILED),
        ],
    )
    def test_valid(self, current: UnitState, target: UnitState) -> None:
        assert is_valid_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (UnitState.NOT_STARTED, UnitState.COMPLETED),
            (UnitState.COMPLETED, UnitState.IN_PROGRESS),
            (UnitState.FAILED, UnitState.IN_PROGRESS),
            (UnitState.IN_PROGRESS, UnitState.IN_PROGRESS),
        ],
    )
    def test_invalid(self, current: UnitState, target: UnitState) -> None:
        assert not is_valid_transition(current, target)

    def test_terminal_states_have_no_exits(self) -> None:
        assert UNIT_TRANSITIONS[UnitState.COMPLETED] == []
        assert UNIT_TRANSITIONS[UnitState.FAILED] == []

    def test_values_are_strings(self) -> None:
        assert UnitState.IN_PROGRESS == "in_progress"
