"""Serialized spoken output.

Only one batch of utterances is ever live. Every entry of a batch is
scheduled relative to the moment the batch was enqueued, so options are
read at fixed intervals whatever the length of each utterance. A new
batch, a pre-empting ``speak`` or ``cancel_all`` retires the live batch;
its timers check the batch token when they fire and stay silent once it
has been retired.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)

# Option pacing: first option after OPTION_LEAD_IN, then one every OPTION_SPACING.
OPTION_LEAD_IN = 0.5
OPTION_SPACING = 1.0


class SpeechBackend(Protocol):
    def say(self, text: str) -> None:
        ...

    def stop(self) -> None:
        ...


@dataclass(frozen=True)
class Utterance:
    text: str
    # seconds after the batch is enqueued, not after the previous entry
    delay: float = 0.0


def question_batch(text: str, options: Iterable[str]) -> List[Utterance]:
    """Question text now, then each option at its fixed slot."""
    batch = [Utterance(text, 0.0)]
    for i, option in enumerate(options):
        batch.append(Utterance(option, OPTION_LEAD_IN + i * OPTION_SPACING))
    return batch


class _BatchToken:
    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False


class NarrationQueue:
    def __init__(self, backend: Optional[SpeechBackend] = None) -> None:
        self._backend = backend
        self._token: Optional[_BatchToken] = None
        self._timers: List[asyncio.TimerHandle] = []
        self._remaining = 0

    @property
    def available(self) -> bool:
        return self._backend is not None

    @property
    def pending(self) -> int:
        """Number of scheduled utterances that have not fired yet."""
        return self._remaining

    def speak(self, text: str) -> None:
        """Pre-empt everything and say ``text`` right away."""
        self.cancel_all()
        self._say(text)

    def enqueue_batch(self, utterances: Iterable[Utterance]) -> None:
        self.cancel_all()
        token = _BatchToken()
        self._token = token
        loop: Optional[asyncio.AbstractEventLoop]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for utterance in utterances:
            if utterance.delay <= 0:
                self._say(utterance.text)
                continue
            if loop is None:
                logger.warning("No running event loop; dropping delayed utterance %r", utterance.text)
                continue
            self._timers.append(loop.call_later(utterance.delay, self._fire, token, utterance.text))
            self._remaining += 1

    def cancel_all(self) -> None:
        if self._token is not None:
            self._token.cancelled = True
            self._token = None
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        self._remaining = 0
        if self._backend is not None:
            try:
                self._backend.stop()
            except Exception as e:
                logger.warning("Speech backend failed to stop: %s", e)

    def _fire(self, token: _BatchToken, text: str) -> None:
        if token.cancelled or token is not self._token:
            return
        self._remaining -= 1
        self._say(text)

    def _say(self, text: str) -> None:
        if self._backend is None or not text:
            return
        try:
            self._backend.say(text)
        except Exception as e:
            logger.warning("Speech backend failed to say %r: %s", text, e)

