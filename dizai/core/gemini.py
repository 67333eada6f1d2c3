from __future__ import annotations

import json
import logging

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from dizai.core.questions import GenerationFailure, Question

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_CONTEXT = "alfabetização"

_PROMPT_TEMPLATE = """
Gere um desafio de alfabetização: {context}
Retorne JSON EXCLUSIVAMENTE:
{{
  "question": "Pergunta curta e simples",
  "options": ["Certa", "Errada1", "Errada2"],
  "correctAnswer": "Certa",
  "explanation": "Feedback positivo muito curto"
}}
"""


def build_prompt(prompt_context: str) -> str:
    return _PROMPT_TEMPLATE.format(context=prompt_context.strip() or DEFAULT_CONTEXT)


class GeminiQuestionSource:
    """Generates literacy questions with Gemini, asking for a JSON-only reply."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        self.model_name = model_name
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(
            model_name,
            generation_config={"response_mime_type": "application/json"},
        )
        logger.info("Gemini question source ready with model '%s'", model_name)

    async def fetch(self, prompt_context: str) -> Question:
        prompt = build_prompt(prompt_context)
        try:
            response = await self._model.generate_content_async(prompt)
            # .text raises ValueError when the reply has no usable parts
            text = response.text
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise GenerationFailure(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise GenerationFailure(f"Gemini returned no content: {e}") from e

        if not text or not text.strip():
            raise GenerationFailure("Gemini returned an empty reply")
        try:
            return Question.from_payload(json.loads(text))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            raise GenerationFailure(f"Unusable question from Gemini: {e}") from e
