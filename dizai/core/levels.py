from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

QUESTIONS_PER_LEVEL = 7


@dataclass(frozen=True)
class Level:
    id: int
    title: str
    question_template: str
    subtitle: str = ""
    description: str = ""

    @property
    def order(self) -> int:
        return self.id


def is_locked(level: Level, max_unlocked_level: int) -> bool:
    """Lock state is derived from progress, never stored on the level."""
    return level.id > max_unlocked_level


class LevelCatalog:
    """Ordered, read-only set of levels loaded from ``data/levels/level<N>.yaml``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "levels"
        self._levels = self._load_levels()

    def all(self) -> List[Level]:
        return list(self._levels.values())

    def get(self, level_id: int) -> Level:
        return self._levels[level_id]

    def level_by_id(self, level_id: int) -> Optional[Level]:
        return self._levels.get(level_id)

    def count(self) -> int:
        return len(self._levels)

    def next(self, level_id: int) -> Optional[Level]:
        return self._levels.get(level_id + 1)

    def _load_levels(self) -> Dict[int, Level]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        found: Dict[int, Level] = {}
        for level_path in base_dir.glob("level*.yaml"):
            m = re.match(r"^level(\d+)$", level_path.stem)
            if not m:
                continue
            level_id = int(m.group(1))
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{level_path.name}: expected YAML with 'title' and 'prompt'")
            title = raw.get("title")
            prompt = raw.get("prompt")
            if not title or not isinstance(title, str):
                raise ValueError(f"{level_path.name}: missing or invalid 'title'")
            if not prompt or not str(prompt).strip():
                raise ValueError(f"{level_path.name}: missing 'prompt'")
            found[level_id] = Level(
                id=level_id,
                title=title.strip(),
                question_template=str(prompt).strip(),
                subtitle=str(raw.get("subtitle") or f"Nível {level_id}").strip(),
                description=str(raw.get("description") or "").strip(),
            )

        if not found:
            raise ValueError("No level files (level*.yaml) found in data/levels")
        # next() relies on ids being 1..n without gaps
        expected = list(range(1, len(found) + 1))
        if sorted(found) != expected:
            raise ValueError(f"Level ids must run 1..{len(found)} without gaps, got {sorted(found)}")
        return {level_id: found[level_id] for level_id in expected}
