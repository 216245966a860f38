"""Interface of the external mapping / generation collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..schema import SchemaNode


class Collaborator(ABC):
    """Produces placeholder mappings and slot values for the pipeline.

    Calls are blocking from the pipeline's point of view. Implementations
    must be safe to share between documents processed concurrently, which in
    practice means keeping no per-document state.
    """

    @abstractmethod
    def analyze_structure(self, schema: SchemaNode) -> dict[str, str]:
        """Return literal pattern -> canonical tag pairs for the document."""

    @abstractmethod
    def generate_free_text(self, original_text: str) -> str:
        """Return the text for one free-floating highlighted slot."""

    @abstractmethod
    def generate_table_values(self, markdown: str, tags: Sequence[str]) -> dict[str, str]:
        """Return values for the table-bound slots named in *tags*."""

    @abstractmethod
    def generate_document_values(self, document_text: str, tags: Sequence[str]) -> dict[str, str]:
        """Return values for *tags* using the whole document as context."""
