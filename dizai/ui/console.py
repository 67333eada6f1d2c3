"""Text front-end: renders engine snapshots and forwards the user's choices."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from dizai.core.levels import LevelCatalog
from dizai.core.session import MSG_LOCKED, GameSessionEngine, SessionSnapshot, SessionStatus
from dizai.ui.models import build_level_states

ReadLine = Callable[[str], Awaitable[Optional[str]]]
Write = Callable[[str], None]


async def stdin_read_line(prompt: str) -> Optional[str]:
    """Read one line without blocking the event loop; None on end of input."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, input, prompt)
    except EOFError:
        return None


class ConsoleGame:
    def __init__(
        self,
        engine: GameSessionEngine,
        catalog: LevelCatalog,
        read_line: ReadLine = stdin_read_line,
        write: Write = print,
    ) -> None:
        self._engine = engine
        self._catalog = catalog
        self._read_line = read_line
        self._write = write

    async def run(self) -> None:
        while True:
            self._show_levels()
            choice = await self._read("Escolha um nível (número), r = reiniciar progresso, s = sair: ")
            if choice is None or choice == "s":
                self._engine.end_session()
                return
            if choice == "r":
                confirm = await self._read("Tem certeza que deseja reiniciar todo o progresso dos níveis? (s/n) ")
                if confirm == "s":
                    self._engine.reset_progress()
                continue
            if not choice.isdigit():
                self._write("Opção inválida.")
                continue
            level = self._catalog.level_by_id(int(choice))
            if level is None:
                self._write("Nível inexistente.")
                continue
            snapshot = await self._engine.start_level(level)
            if snapshot is None or snapshot.level.id != level.id:
                self._write(MSG_LOCKED)
                continue
            if not await self._play():
                return

    async def _play(self) -> bool:
        """Drive one session; False when input ran out."""
        while True:
            snapshot = self._engine.snapshot
            if snapshot is None:
                return True
            self._show_session(snapshot)
            if snapshot.level_complete:
                line = await self._read("Enter para concluir o nível. ")
                self._engine.end_session()
                return line is not None

            line = await self._read(self._prompt_for(snapshot))
            if line is None:
                self._engine.end_session()
                return False
            if line == "v":
                self._engine.end_session()
                return True
            if line == "o":
                self._engine.repeat_question()
            elif line == "c":
                await self._engine.advance_question()
            elif line.isdigit() and snapshot.question is not None:
                index = int(line) - 1
                if 0 <= index < len(snapshot.question.options):
                    self._engine.submit_answer(snapshot.question.options[index])
                else:
                    self._write("Opção inválida.")
            else:
                self._write("Opção inválida.")

    async def _read(self, prompt: str) -> Optional[str]:
        line = await self._read_line(prompt)
        return None if line is None else line.strip().lower()

    def _prompt_for(self, snapshot: SessionSnapshot) -> str:
        if snapshot.status is SessionStatus.CORRECT:
            return "c = próximo desafio, o = ouvir novamente, v = voltar: "
        return "Número da resposta, o = ouvir novamente, v = voltar: "

    def _show_levels(self) -> None:
        max_unlocked = self._engine.max_unlocked_level
        self._write("")
        self._write(f"Atividades ({max_unlocked} de {self._catalog.count()} desbloqueados)")
        for state in build_level_states(self._catalog, max_unlocked):
            if not state.unlocked:
                mark = "[bloqueado]"
            elif state.is_current:
                mark = "[atual]"
            elif state.completed:
                mark = "[concluído]"
            else:
                mark = ""
            self._write(f"  {state.level.id}. {state.level.title} - {state.level.description} {mark}".rstrip())

    def _show_session(self, snapshot: SessionSnapshot) -> None:
        self._write("")
        self._write(
            f"{snapshot.level.subtitle} - {snapshot.level.title} "
            f"(atividade {snapshot.question_index} de {snapshot.questions_per_level})"
        )
        question = snapshot.question
        if question is None:
            self._write("Criando atividade...")
            return
        self._write(question.text)
        for i, option in enumerate(question.options, start=1):
            self._write(f"  {i}) {option}")
        if snapshot.status is SessionStatus.CORRECT:
            self._write(f"Acertou! {snapshot.feedback}")
        elif snapshot.status is SessionStatus.INCORRECT:
            self._write(f"Ops! {snapshot.feedback}")
