from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class InvariantViolation(RuntimeError):
    """Raised when progress would move backwards or stand still."""


def _parse_level(value: Any) -> int:
    """Return a positive level number, or 1 when ``value`` is not one."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value if value >= 1 else 1
    if isinstance(value, str):
        try:
            parsed = int(value.strip(), 10)
        except ValueError:
            return 1
        return parsed if parsed >= 1 else 1
    return 1


class ProgressStore:
    """Stores the highest unlocked level. Persists to disk across app restarts.
    File: ~/.dizai/progress.json. Cleared only when the user resets progress."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".dizai" / "progress.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._max_unlocked_level = self.load()

    @property
    def max_unlocked_level(self) -> int:
        return self._max_unlocked_level

    def is_unlocked(self, level_id: int) -> bool:
        return level_id <= self._max_unlocked_level

    def load(self) -> int:
        """Read the persisted value; defaults to 1 when missing or unparseable."""
        self._max_unlocked_level = self._load()
        return self._max_unlocked_level

    def advance_to(self, new_level: int) -> int:
        current = self._max_unlocked_level
        if new_level <= current:
            raise InvariantViolation(
                f"max unlocked level may only increase: {current} -> {new_level}"
            )
        self._max_unlocked_level = new_level
        self._save()
        return new_level

    def reset(self) -> int:
        """Back to level 1. Only called when the user confirms a progress reset."""
        self._max_unlocked_level = 1
        self._save()
        return 1

    def _load(self) -> int:
        if not self._file_path.exists():
            return 1
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return 1
        if isinstance(payload, dict):
            return _parse_level(payload.get("max_unlocked_level"))
        # bare scalar, as older builds wrote it
        return _parse_level(payload)

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"max_unlocked_level": self._max_unlocked_level}
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
