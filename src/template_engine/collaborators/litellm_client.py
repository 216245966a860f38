"""Collaborator that talks to any model LiteLLM can route to."""

from __future__ import annotations

import logging

import litellm

from ..config.settings import settings
from .chat import ChatCollaborator

logger = logging.getLogger(__name__)


class LiteLlmCollaborator(ChatCollaborator):
    """Chat collaborator using ``litellm.completion``.

    The model name follows LiteLLM's ``provider/model`` convention
    (``gemini/gemini-2.5-flash``, ``openai/gpt-4o``, ...). A LiteLLM proxy is
    used when OPENAI_API_BASE / OPENAI_API_KEY are configured.
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._model = model or settings.litellm_model
        self._temperature = settings.llm_temperature if temperature is None else temperature

    def complete(self, prompt: str) -> str:
        response = litellm.completion(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
        )
        content = response.choices[0].message.content
        logger.debug("LiteLLM reply (%s): %d chars", self._model, len(content or ""))
        return content or ""
