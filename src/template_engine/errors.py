"""Exceptions raised by the template engine."""

from __future__ import annotations


class TemplateEngineError(Exception):
    """Base class for all engine errors."""


class DocumentDecodeError(TemplateEngineError):
    """The container could not be opened or its main part could not be parsed."""


class CollaboratorError(TemplateEngineError):
    """A mapping or generation collaborator call failed."""


class ProcessingError(TemplateEngineError):
    """A document could not be processed; no output was produced."""

    def __init__(self, stage: str, reason: str):
        super().__init__(f"Error processing document during {stage}: {reason}")
        self.stage = stage
        self.reason = reason
