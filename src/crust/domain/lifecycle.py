"""Run state lifecycle for command units.

Each unit reached during a run moves through a small state machine:
NOT_STARTED -> IN_PROGRESS -> {COMPLETED | FAILED}.  COMPLETED and FAILED
are terminal within a run; IN_PROGRESS on re-entry means a cycle.
"""

from __future__ import annotations

from enum import StrEnum


class UnitState(StrEnum):
    """Per-run state of a command unit."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


UNIT_TRANSITIONS: dict[str, list[str]] = {
    "not_started": ["in_progress"],
    "in_progress": ["completed", "failed"],
    "completed": [],
    "failed": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = UNIT_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed

