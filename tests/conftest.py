"""Shared fakes and fixtures for the engine tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

import pytest
import yaml

from dizai.core.levels import LevelCatalog
from dizai.core.narration import NarrationQueue
from dizai.core.progress import ProgressStore
from dizai.core.questions import FallbackPool, GenerationFailure, Question
from dizai.core.session import GameSessionEngine


class RecordingSpeech:
    """Speech backend that remembers what it was asked to say."""

    def __init__(self) -> None:
        self.spoken: List[str] = []
        self.stops = 0

    def say(self, text: str) -> None:
        self.spoken.append(text)

    def stop(self) -> None:
        self.stops += 1


class ScriptedSource:
    """Question source whose outcome each test controls.

    ``hold`` parks every fetch on a future in ``pending``; otherwise the
    fetch fails when ``fail`` is set and returns ``question`` when not.
    """

    def __init__(self, question: Question) -> None:
        self.question = question
        self.calls: List[str] = []
        self.pending: List[asyncio.Future] = []
        self.hold = False
        self.fail = False

    async def fetch(self, prompt_context: str) -> Question:
        self.calls.append(prompt_context)
        if self.hold:
            future = asyncio.get_running_loop().create_future()
            self.pending.append(future)
            return await future
        if self.fail:
            raise GenerationFailure("generator unavailable")
        return self.question


def write_level(directory: Path, level_id: int, title: str, prompt: str = "ATIVIDADE") -> None:
    data = {"title": title, "subtitle": f"Nível {level_id}", "description": f"{title}.", "prompt": prompt}
    (directory / f"level{level_id}.yaml").write_text(
        yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8"
    )


@pytest.fixture()
def level_writer() -> Callable[..., None]:
    return write_level


@pytest.fixture()
def sample_question() -> Question:
    return Question(
        text="Qual é a primeira letra da palavra Bola?",
        options=("B", "P", "D"),
        correct_answer="B",
        explanation="Bola começa com B.",
    )


@pytest.fixture()
def other_question() -> Question:
    return Question(
        text="Qual vogal falta em: P _ T O?",
        options=("E", "A", "U"),
        correct_answer="A",
        explanation="Pato.",
    )


@pytest.fixture()
def catalog() -> LevelCatalog:
    return LevelCatalog()


@pytest.fixture()
def small_catalog(tmp_path: Path) -> LevelCatalog:
    """Two levels, so level 2 is the final one."""
    d = tmp_path / "levels"
    d.mkdir()
    write_level(d, 1, "Um")
    write_level(d, 2, "Dois")
    return LevelCatalog(d)


@pytest.fixture()
def progress(tmp_path: Path) -> ProgressStore:
    return ProgressStore(tmp_path / "home" / "progress.json")


@pytest.fixture()
def speech() -> RecordingSpeech:
    return RecordingSpeech()


@pytest.fixture()
def source(sample_question: Question) -> ScriptedSource:
    return ScriptedSource(sample_question)


@pytest.fixture()
def make_engine(
    catalog: LevelCatalog,
    progress: ProgressStore,
    source: ScriptedSource,
    speech: RecordingSpeech,
) -> Callable[..., GameSessionEngine]:
    def _make(
        max_unlocked: int = 1,
        catalog_override: Optional[LevelCatalog] = None,
        fetch_timeout: Optional[float] = None,
        questions_per_level: int = 7,
    ) -> GameSessionEngine:
        if max_unlocked > 1:
            progress.advance_to(max_unlocked)
        return GameSessionEngine(
            catalog=catalog_override or catalog,
            progress=progress,
            source=source,
            narration=NarrationQueue(speech),
            fallback=FallbackPool(),
            questions_per_level=questions_per_level,
            fetch_timeout=fetch_timeout,
        )

    return _make
