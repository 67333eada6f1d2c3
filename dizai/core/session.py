"""Game session engine: one level's run of questions, from first fetch to completion.

Sessions move ``LOADING -> AWAITING_ANSWER -> CORRECT | INCORRECT``. A wrong
answer keeps the same question open, so ``INCORRECT`` takes another answer
exactly like ``AWAITING_ANSWER`` does; a right one either waits for
:meth:`GameSessionEngine.advance_question` or, on the last question, flags
the session as complete and settles progress.

Every fetch is tagged with the engine generation current when it started.
Ending the session or starting another one bumps the generation, so a
fetch that resolves late is dropped instead of landing on the wrong
session.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from dizai.core.levels import QUESTIONS_PER_LEVEL, Level, LevelCatalog
from dizai.core.narration import NarrationQueue, question_batch
from dizai.core.progress import ProgressStore
from dizai.core.questions import FallbackPool, GenerationFailure, Question, QuestionSource

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 20.0

MSG_LOCKED = "Bloqueado. Termine o nível anterior."
MSG_ENCOURAGE = "Muito bem! Vamos para a próxima."
MSG_RETRY = "Não foi dessa vez. Tente novamente!"
MSG_RETRY_SPOKEN = "Não foi dessa vez. Tente outra opção."
MSG_RETRY_HINT = "Tente selecionar a opção correta."
MSG_LEVEL_UNLOCKED = "Parabéns! Nível Concluído e Próximo Desbloqueado!"
MSG_LEVEL_DONE = "Parabéns! Você completou este nível!"
MSG_LEVEL_DONE_SPOKEN = "Parabéns! Você completou todas as atividades deste nível!"
MSG_PROGRESS_RESET = "Progresso reiniciado."


class SessionStatus(enum.Enum):
    LOADING = "loading"
    AWAITING_ANSWER = "awaiting_answer"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the active session, handed to the presentation layer."""

    level: Level
    question_index: int
    questions_per_level: int
    status: SessionStatus
    question: Optional[Question] = None
    feedback: str = ""
    level_complete: bool = False

    @property
    def accepts_answers(self) -> bool:
        # a wrong answer leaves the same options open for another try
        return self.status in (SessionStatus.AWAITING_ANSWER, SessionStatus.INCORRECT)

    @property
    def can_advance(self) -> bool:
        return self.status is SessionStatus.CORRECT and not self.level_complete


Listener = Callable[[Optional[SessionSnapshot]], None]


class GameSessionEngine:
    def __init__(
        self,
        catalog: LevelCatalog,
        progress: ProgressStore,
        source: QuestionSource,
        narration: NarrationQueue,
        fallback: Optional[FallbackPool] = None,
        questions_per_level: int = QUESTIONS_PER_LEVEL,
        fetch_timeout: Optional[float] = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        if questions_per_level < 1:
            raise ValueError("questions_per_level must be at least 1")
        self._catalog = catalog
        self._progress = progress
        self._source = source
        self._narration = narration
        self._fallback = fallback or FallbackPool()
        self._questions_per_level = questions_per_level
        self._fetch_timeout = fetch_timeout
        self._session: Optional[SessionSnapshot] = None
        self._generation = 0
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> Optional[SessionSnapshot]:
        return self._session

    @property
    def questions_per_level(self) -> int:
        return self._questions_per_level

    @property
    def max_unlocked_level(self) -> int:
        return self._progress.max_unlocked_level

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -- the four verbs ----------------------------------------------------

    async def start_level(self, level: Level) -> Optional[SessionSnapshot]:
        """Begin ``level`` at question 1; locked levels are refused with a spoken hint."""
        if not self._progress.is_unlocked(level.id):
            logger.info("Level %s is locked (max unlocked %s)", level.id, self._progress.max_unlocked_level)
            self._narration.speak(MSG_LOCKED)
            return self._session

        self._narration.speak(
            f"Iniciando {level.title}. Atividade 1 de {self._questions_per_level}."
        )
        self._set_session(
            SessionSnapshot(
                level=level,
                question_index=1,
                questions_per_level=self._questions_per_level,
                status=SessionStatus.LOADING,
            )
        )
        return await self._load_question()

    def submit_answer(self, option: str) -> Optional[SessionSnapshot]:
        session = self._session
        if session is None or not session.accepts_answers:
            logger.debug("Ignoring answer %r while not awaiting one", option)
            return session
        question = session.question
        if question is None:
            return session

        if option != question.correct_answer:
            self._narration.speak(MSG_RETRY_SPOKEN)
            return self._set_session(replace(session, status=SessionStatus.INCORRECT, feedback=MSG_RETRY))

        if session.question_index < self._questions_per_level:
            self._narration.speak("Correto! " + (question.explanation or "Muito bem!"))
            return self._set_session(
                replace(
                    session,
                    status=SessionStatus.CORRECT,
                    feedback=question.explanation or MSG_ENCOURAGE,
                )
            )
        return self._complete_level(session)

    async def advance_question(self) -> Optional[SessionSnapshot]:
        session = self._session
        if session is None:
            return None
        if session.status is SessionStatus.INCORRECT:
            self._narration.speak(MSG_RETRY_HINT)
            return session
        if not session.can_advance:
            return session

        next_index = session.question_index + 1
        self._narration.speak(f"Atividade {next_index}.")
        self._set_session(
            replace(
                session,
                question_index=next_index,
                status=SessionStatus.LOADING,
                question=None,
                feedback="",
            )
        )
        return await self._load_question()

    def end_session(self) -> None:
        """Drop the session and silence narration. Safe to call in any state."""
        self._generation += 1
        self._narration.cancel_all()
        if self._session is not None:
            logger.debug("Session for level %s ended", self._session.level.id)
            self._set_session(None)

    # -- extras ------------------------------------------------------------

    def repeat_question(self) -> None:
        session = self._session
        if session is not None and session.question is not None:
            self._narration.speak(session.question.text)

    def reset_progress(self) -> int:
        """Back to level 1; an active session carries on untouched."""
        value = self._progress.reset()
        self._narration.speak(MSG_PROGRESS_RESET)
        return value

    # -- internals ---------------------------------------------------------

    async def _load_question(self) -> Optional[SessionSnapshot]:
        self._generation += 1
        generation = self._generation
        session = self._session
        if session is None or session.status is not SessionStatus.LOADING:
            raise RuntimeError("question load requested outside a loading session")

        question = await self._fetch(session.level)

        if generation != self._generation or self._session is None:
            logger.debug("Discarding stale question for level %s", session.level.id)
            if self._session is None:
                self._narration.cancel_all()
            return self._session

        self._narration.enqueue_batch(question_batch(question.text, question.options))
        return self._set_session(
            replace(self._session, status=SessionStatus.AWAITING_ANSWER, question=question)
        )

    async def _fetch(self, level: Level) -> Question:
        try:
            if self._fetch_timeout is None:
                return await self._source.fetch(level.question_template)
            return await asyncio.wait_for(
                self._source.fetch(level.question_template), self._fetch_timeout
            )
        except GenerationFailure as e:
            logger.warning("Question generation failed for level %s: %s", level.id, e)
        except asyncio.TimeoutError:
            logger.warning("Question generation timed out for level %s after %ss", level.id, self._fetch_timeout)
        except Exception:
            logger.exception("Question source raised unexpectedly for level %s", level.id)
        return self._fallback.draw()

    def _complete_level(self, session: SessionSnapshot) -> SessionSnapshot:
        level = session.level
        next_level = self._catalog.next(level.id)
        if level.id == self._progress.max_unlocked_level and next_level is not None:
            self._progress.advance_to(level.id + 1)
            logger.info("Level %s complete, level %s unlocked", level.id, next_level.id)
            feedback = MSG_LEVEL_UNLOCKED
            self._narration.speak(
                f"Parabéns! Você completou as {self._questions_per_level} atividades. "
                f"Nível {next_level.id} desbloqueado!"
            )
        else:
            feedback = MSG_LEVEL_DONE
            self._narration.speak(MSG_LEVEL_DONE_SPOKEN)
        return self._set_session(
            replace(session, status=SessionStatus.CORRECT, feedback=feedback, level_complete=True)
        )

    def _set_session(self, session: Optional[SessionSnapshot]) -> Optional[SessionSnapshot]:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
        return session
