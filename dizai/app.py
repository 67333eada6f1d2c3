"""Application entry point and setup for the DizAí literacy trainer."""

import logging
import sys

from PySide6 import QtAsyncio
from PySide6.QtCore import QCoreApplication

from dizai.core.config import Settings, load_settings
from dizai.core.gemini import GeminiQuestionSource
from dizai.core.levels import LevelCatalog
from dizai.core.narration import NarrationQueue
from dizai.core.progress import ProgressStore
from dizai.core.questions import OfflineQuestionSource, QuestionSource
from dizai.core.session import GameSessionEngine
from dizai.ui.console import ConsoleGame
from dizai.ui.speech import QtSpeechBackend


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_question_source(settings: Settings) -> QuestionSource:
    if not settings.gemini_api_key:
        logging.warning("GEMINI_API_KEY is not set; every activity comes from the fallback pool")
        return OfflineQuestionSource()
    return GeminiQuestionSource(settings.gemini_api_key, settings.gemini_model)


def build_engine(settings: Settings, narration: NarrationQueue) -> tuple[GameSessionEngine, LevelCatalog]:
    catalog = LevelCatalog()
    engine = GameSessionEngine(
        catalog=catalog,
        progress=ProgressStore(settings.progress_path),
        source=build_question_source(settings),
        narration=narration,
        fetch_timeout=settings.fetch_timeout,
    )
    return engine, catalog


def run() -> None:
    """Load settings, wire the engine, and run the console game on the Qt event loop."""
    configure_logging()
    settings = load_settings()

    app = QCoreApplication(sys.argv)
    app.setApplicationName("DizAí")

    narration = NarrationQueue(QtSpeechBackend.create(settings))
    engine, catalog = build_engine(settings, narration)
    game = ConsoleGame(engine, catalog)

    # asyncio runs on top of Qt so speech and narration timers share one loop
    QtAsyncio.run(game.run(), keep_running=False)


if __name__ == "__main__":
    run()
