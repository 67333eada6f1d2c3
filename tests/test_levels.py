"""Tests for dizai.core.levels – YAML-based level catalog."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from dizai.core.levels import QUESTIONS_PER_LEVEL, Level, LevelCatalog, is_locked


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def levels_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data" / "levels"
    d.mkdir(parents=True)
    return d


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8")


# ---------------------------------------------------------------------------
# Level dataclass
# ---------------------------------------------------------------------------

class TestLevelDataclass:
    def test_creation(self):
        lv = Level(id=1, title="Alfabeto", question_template="ATIVIDADE: letras")
        assert lv.id == 1
        assert lv.title == "Alfabeto"
        assert lv.subtitle == ""
        assert lv.order == 1

    def test_frozen(self):
        lv = Level(id=1, title="Alfabeto", question_template="t")
        with pytest.raises(AttributeError):
            lv.id = 2  # type: ignore[misc]

    def test_lock_is_derived(self):
        lv = Level(id=3, title="Fonemas", question_template="t")
        assert is_locked(lv, 2)
        assert not is_locked(lv, 3)
        assert not is_locked(lv, 8)


# ---------------------------------------------------------------------------
# Bundled catalog
# ---------------------------------------------------------------------------

class TestBundledCatalog:
    def test_eight_levels_in_order(self):
        catalog = LevelCatalog()
        assert catalog.count() == 8
        assert [lv.id for lv in catalog.all()] == list(range(1, 9))

    def test_titles(self):
        catalog = LevelCatalog()
        assert catalog.get(1).title == "Alfabeto"
        assert catalog.get(8).title == "Histórias"

    def test_templates_mention_activity(self):
        for level in LevelCatalog().all():
            assert level.question_template.startswith("ATIVIDADE")

    def test_questions_per_level(self):
        assert QUESTIONS_PER_LEVEL == 7


# ---------------------------------------------------------------------------
# LevelCatalog – lookups
# ---------------------------------------------------------------------------

class TestLookups:
    @pytest.fixture()
    def catalog(self, levels_dir: Path) -> LevelCatalog:
        _write_yaml(levels_dir / "level1.yaml", {"title": "Um", "prompt": "p1"})
        _write_yaml(levels_dir / "level2.yaml", {"title": "Dois", "prompt": "p2"})
        return LevelCatalog(levels_dir)

    def test_level_by_id(self, catalog: LevelCatalog):
        assert catalog.level_by_id(2).title == "Dois"

    def test_level_by_id_missing(self, catalog: LevelCatalog):
        assert catalog.level_by_id(9) is None

    def test_get_missing_raises(self, catalog: LevelCatalog):
        with pytest.raises(KeyError):
            catalog.get(9)

    def test_next(self, catalog: LevelCatalog):
        assert catalog.next(1).id == 2

    def test_next_after_last(self, catalog: LevelCatalog):
        assert catalog.next(2) is None

    def test_default_subtitle(self, catalog: LevelCatalog):
        assert catalog.get(1).subtitle == "Nível 1"


# ---------------------------------------------------------------------------
# LevelCatalog – loading
# ---------------------------------------------------------------------------

class TestLoading:
    def test_numeric_sort(self, levels_dir: Path):
        for i in (10, 2, 1, 3, 4, 5, 6, 7, 8, 9):
            _write_yaml(levels_dir / f"level{i}.yaml", {"title": f"L{i}", "prompt": "p"})
        catalog = LevelCatalog(levels_dir)
        assert [lv.id for lv in catalog.all()] == list(range(1, 11))

    def test_title_and_prompt_stripped(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "  Padded  ", "prompt": "  body \n"})
        lv = LevelCatalog(levels_dir).get(1)
        assert lv.title == "Padded"
        assert lv.question_template == "body"

    def test_ignores_unnumbered_files(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "Um", "prompt": "p"})
        _write_yaml(levels_dir / "levelextra.yaml", {"title": "X", "prompt": "p"})
        assert LevelCatalog(levels_dir).count() == 1


class TestLoadingErrors:
    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            LevelCatalog(tmp_path / "nope")

    def test_no_yaml_files(self, levels_dir: Path):
        with pytest.raises(ValueError, match="No level files"):
            LevelCatalog(levels_dir)

    def test_yaml_not_dict(self, levels_dir: Path):
        (levels_dir / "level1.yaml").write_text("- item\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected YAML"):
            LevelCatalog(levels_dir)

    def test_missing_title(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"prompt": "p"})
        with pytest.raises(ValueError, match="missing or invalid 'title'"):
            LevelCatalog(levels_dir)

    def test_missing_prompt(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T"})
        with pytest.raises(ValueError, match="missing 'prompt'"):
            LevelCatalog(levels_dir)

    def test_gap_in_ids(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "Um", "prompt": "p"})
        _write_yaml(levels_dir / "level3.yaml", {"title": "Três", "prompt": "p"})
        with pytest.raises(ValueError, match="without gaps"):
            LevelCatalog(levels_dir)

    def test_must_start_at_one(self, levels_dir: Path):
        _write_yaml(levels_dir / "level0.yaml", {"title": "Zero", "prompt": "p"})
        with pytest.raises(ValueError, match="without gaps"):
            LevelCatalog(levels_dir)
