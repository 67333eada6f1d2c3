"""Questions, the question-source contract, and the offline fallback pool."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

OPTIONS_PER_QUESTION = 3


class GenerationFailure(Exception):
    """A question source could not produce a usable question."""


@dataclass(frozen=True)
class Question:
    """One exercise: prompt text, options in presentation order, the answer."""

    text: str
    options: Tuple[str, ...]
    correct_answer: str
    explanation: str = ""

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("question text is empty")
        if len(self.options) != OPTIONS_PER_QUESTION:
            raise ValueError(
                f"expected {OPTIONS_PER_QUESTION} options, got {len(self.options)}"
            )
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"duplicate options: {self.options!r}")
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer!r} is not an option")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Question":
        """Build from the generator's JSON shape (``question``, ``options``,
        ``correctAnswer``, ``explanation``). Raises ValueError if malformed."""
        if not isinstance(payload, Mapping):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        text = payload.get("question")
        options = payload.get("options")
        correct = payload.get("correctAnswer")
        if not isinstance(text, str) or not isinstance(correct, str):
            raise ValueError("'question' and 'correctAnswer' must be strings")
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ValueError("'options' must be a list of strings")
        explanation = payload.get("explanation") or ""
        return cls(
            text=text.strip(),
            options=tuple(o.strip() for o in options),
            correct_answer=correct.strip(),
            explanation=str(explanation).strip(),
        )


class QuestionSource(Protocol):
    async def fetch(self, prompt_context: str) -> Question:
        """Produce one question for ``prompt_context`` or raise GenerationFailure."""
        ...


FALLBACK_QUESTIONS: Tuple[Question, ...] = (
    Question(
        text="O que usamos para cortar papel?",
        options=("Tesoura", "Colher", "Pedra"),
        correct_answer="Tesoura",
        explanation="A tesoura corta.",
    ),
    Question(
        text="Qual destas é uma fruta?",
        options=("Mesa", "Banana", "Carro"),
        correct_answer="Banana",
        explanation="Banana é fruta.",
    ),
    Question(
        text="Qual letra vem depois do A?",
        options=("C", "B", "D"),
        correct_answer="B",
        explanation="A, B, C.",
    ),
)


class FallbackPool:
    """Fixed questions used whenever the real source fails."""

    def __init__(
        self,
        questions: Sequence[Question] = FALLBACK_QUESTIONS,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not questions:
            raise ValueError("fallback pool needs at least one question")
        self._questions = tuple(questions)
        self._rng = rng or random.Random()

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    def draw(self) -> Question:
        return self._rng.choice(self._questions)


class OfflineQuestionSource:
    """Used when no generator is configured: every fetch falls back."""

    async def fetch(self, prompt_context: str) -> Question:
        raise GenerationFailure("no question generator configured")
