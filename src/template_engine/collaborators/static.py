"""Deterministic collaborator for tests and offline runs."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from ..schema import SchemaNode
from ..utils import find_placeholders, to_pascal_case
from .base import Collaborator

logger = logging.getLogger(__name__)


class StaticCollaborator(Collaborator):
    """Answers every request locally, without any network call.

    Mapping: every bracketed literal found in paragraph text (``[CLIENT_NAME]``)
    maps to its PascalCase name (``ClientName``), unless an explicit
    *mapping* is given. Generated values are fixed strings derived from the
    request, or taken from *free_text* when the original text is listed there.
    """

    def __init__(
        self,
        mapping: Mapping[str, str] | None = None,
        free_text: Mapping[str, str] | None = None,
    ):
        self._mapping = dict(mapping) if mapping is not None else None
        self._free_text = dict(free_text or {})

    def analyze_structure(self, schema: SchemaNode) -> dict[str, str]:
        if self._mapping is not None:
            return dict(self._mapping)

        mapping: dict[str, str] = {}
        for node in schema.iter():
            if node.type != "Paragraph":
                continue
            for literal in find_placeholders(node.text):
                mapping.setdefault(literal, to_pascal_case(literal[1:-1]))
        logger.info("Derived %d placeholder mapping(s)", len(mapping))
        return mapping

    def generate_free_text(self, original_text: str) -> str:
        if original_text in self._free_text:
            return self._free_text[original_text]
        return f"[AI Generated Content for: {original_text}]"

    def generate_table_values(self, markdown: str, tags: Sequence[str]) -> dict[str, str]:
        return {tag: f"[AI_CALC: {tag}]" for tag in tags}

    def generate_document_values(self, document_text: str, tags: Sequence[str]) -> dict[str, str]:
        return {tag: f"[AI Generated Content for: {tag}]" for tag in tags}
