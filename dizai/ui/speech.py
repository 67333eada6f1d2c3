"""Qt text-to-speech backend for the narration queue."""

from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import QLocale
from PySide6.QtTextToSpeech import QTextToSpeech

from dizai.core.config import Settings

logger = logging.getLogger(__name__)


def qt_rate(speech_rate: float) -> float:
    """Map a 0.5-1.5 speaking speed (1.0 = normal) onto Qt's -1..1 rate."""
    return min(max(speech_rate - 1.0, -1.0), 1.0)


def _available_engines() -> List[str]:
    return list(QTextToSpeech.availableEngines())


class QtSpeechBackend:
    def __init__(self, tts: QTextToSpeech) -> None:
        self._tts = tts

    @classmethod
    def create(cls, settings: Settings) -> Optional["QtSpeechBackend"]:
        """Return a configured backend, or None when no speech engine is installed.

        Needs a QCoreApplication to exist already.
        """
        if not _available_engines():
            logger.warning("No text-to-speech engine available; narration disabled")
            return None
        tts = QTextToSpeech()
        tts.setLocale(QLocale(settings.locale))
        tts.setRate(qt_rate(settings.speech_rate))
        tts.setVolume(settings.speech_volume)
        if settings.voice_name:
            for voice in tts.availableVoices():
                if voice.name() == settings.voice_name:
                    tts.setVoice(voice)
                    break
            else:
                logger.warning("Voice %r not found, using the default", settings.voice_name)
        return cls(tts)

    def say(self, text: str) -> None:
        self._tts.say(text)

    def stop(self) -> None:
        self._tts.stop()
