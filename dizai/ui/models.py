"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from dizai.core.levels import Level, LevelCatalog, is_locked


@dataclass
class LevelState:
    """UI state for a single level: unlock status, completion, and the current frontier."""

    level: Level
    unlocked: bool
    completed: bool
    is_current: bool = False


def build_level_states(catalog: LevelCatalog, max_unlocked_level: int) -> list[LevelState]:
    """Derive lock/completion state for every level from the single progress value."""
    return [
        LevelState(
            level=level,
            unlocked=not is_locked(level, max_unlocked_level),
            completed=level.id < max_unlocked_level,
            is_current=level.id == max_unlocked_level,
        )
        for level in catalog.all()
    ]
