"""Collaborators backed by a chat-completion model."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Sequence

from ..config.settings import settings
from ..errors import CollaboratorError
from ..prompt import (
    DOCUMENT_VALUES_PROMPT,
    FREE_TEXT_PROMPT,
    STRUCTURE_ANALYSIS_PROMPT,
    TABLE_VALUES_PROMPT,
)
from ..schema import SchemaNode, schema_to_json
from ..utils import parse_json_object
from .base import Collaborator

logger = logging.getLogger(__name__)


class ChatCollaborator(Collaborator):
    """Renders prompts, calls the model and parses its replies.

    Subclasses only implement :meth:`complete`. Transport failures are
    retried up to *max_retries* times; a reply that cannot be parsed is not.
    Every failure surfaces as :class:`CollaboratorError`.
    """

    def __init__(self, max_retries: int | None = None, context_chars: int | None = None):
        self._max_retries = settings.llm_max_retries if max_retries is None else max_retries
        self._context_chars = settings.document_context_chars if context_chars is None else context_chars

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Send *prompt* as a single user message and return the reply text."""

    def _ask(self, prompt: str) -> str:
        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self.complete(prompt)
            except Exception as e:
                if attempt == attempts:
                    logger.error("Model call failed after %d attempt(s): %s", attempts, e)
                    raise CollaboratorError(f"Model call failed: {e}") from e
                logger.warning("Model call failed (attempt %d/%d): %s", attempt, attempts, e)
        raise CollaboratorError("Model call was not attempted")

    def _ask_json(self, prompt: str) -> dict[str, str]:
        reply = self._ask(prompt)
        try:
            data: dict[str, Any] = parse_json_object(reply)
        except ValueError as e:
            raise CollaboratorError(f"Unexpected model reply: {e}") from e
        return {str(key): "" if value is None else str(value) for key, value in data.items()}

    def analyze_structure(self, schema: SchemaNode) -> dict[str, str]:
        prompt = STRUCTURE_ANALYSIS_PROMPT.format(schema_json=schema_to_json(schema))
        mapping = {pattern: tag for pattern, tag in self._ask_json(prompt).items() if pattern and tag}
        logger.info("Model proposed %d placeholder mapping(s)", len(mapping))
        return mapping

    def generate_free_text(self, original_text: str) -> str:
        logger.info("Generating content for %r", original_text[:80])
        return self._ask(FREE_TEXT_PROMPT.format(original_text=original_text)).strip()

    def generate_table_values(self, markdown: str, tags: Sequence[str]) -> dict[str, str]:
        logger.debug("Table context:\n%s", markdown)
        prompt = TABLE_VALUES_PROMPT.format(markdown=markdown, tags=", ".join(tags))
        values = self._ask_json(prompt)
        missing = [tag for tag in tags if tag not in values]
        if missing:
            logger.warning("Model returned no value for %s", ", ".join(missing))
        return {tag: values[tag] for tag in tags if tag in values}

    def generate_document_values(self, document_text: str, tags: Sequence[str]) -> dict[str, str]:
        prompt = DOCUMENT_VALUES_PROMPT.format(
            tags=", ".join(tags),
            document_text=document_text[:self._context_chars],
        )
        values = self._ask_json(prompt)
        return {tag: values[tag] for tag in tags if tag in values}
