"""Collaborator that calls the Gemini API through google-genai."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from ..config.settings import settings
from .chat import ChatCollaborator

logger = logging.getLogger(__name__)


class GeminiCollaborator(ChatCollaborator):
    """Chat collaborator using a ``google.genai.Client``."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        client: genai.Client | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        api_key = api_key or settings.gemini_api_key
        if client is None and not api_key:
            raise ValueError("gemini_api_key required when collaborator_type=gemini")
        self._client = client or genai.Client(api_key=api_key)
        self._model = model or settings.gemini_model
        self._temperature = settings.llm_temperature if temperature is None else temperature

    def complete(self, prompt: str) -> str:
        response = self._client.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=self._temperature),
        )
        text = response.text or ""
        logger.debug("Gemini reply (%s): %d chars", self._model, len(text))
        return text
