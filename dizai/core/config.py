from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from dizai.core.gemini import DEFAULT_MODEL
from dizai.core.session import DEFAULT_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_MODEL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    speech_rate: float = 1.0
    speech_volume: float = 1.0
    voice_name: str = ""
    locale: str = "pt_BR"

    @property
    def progress_path(self) -> Path:
        return self.data_dir / "progress.json"


def _float(env: Mapping[str, str], key: str, default: float, low: float, high: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", key, raw)
        return default
    if math.isnan(value):
        logger.warning("Ignoring %s=%r: not a number", key, raw)
        return default
    return min(max(value, low), high)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``environ`` (the process environment plus ``.env`` by default)."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    data_dir = environ.get("DIZAI_HOME") or str(Path.home() / ".dizai")
    return Settings(
        data_dir=Path(data_dir).expanduser(),
        gemini_api_key=environ.get("GEMINI_API_KEY") or environ.get("API_KEY") or "",
        gemini_model=environ.get("DIZAI_GEMINI_MODEL") or DEFAULT_MODEL,
        fetch_timeout=_float(environ, "DIZAI_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, 1.0, 600.0),
        speech_rate=_float(environ, "DIZAI_SPEECH_RATE", 1.0, 0.5, 1.5),
        speech_volume=_float(environ, "DIZAI_SPEECH_VOLUME", 1.0, 0.0, 1.0),
        voice_name=environ.get("DIZAI_VOICE", "").strip(),
        locale=environ.get("DIZAI_LOCALE", "").strip() or "pt_BR",
    )
