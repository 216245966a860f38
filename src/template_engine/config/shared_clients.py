"""Shared infrastructure: the process-wide collaborator instance."""

from __future__ import annotations

import logging

from .settings import settings

logger = logging.getLogger(__name__)

# Global singleton instance
_collaborator = None


def get_collaborator():
    """Return shared Collaborator instance based on configuration.

    Collaborator type is determined by settings.collaborator_type:
    - static: Uses StaticCollaborator (deterministic, no network)
    - litellm: Uses LiteLlmCollaborator with settings.litellm_model
    - gemini: Uses GeminiCollaborator with settings.gemini_model

    Collaborators keep no per-document state, so one instance serves every
    pipeline invocation.

    Returns:
        Configured collaborator instance

    Raises:
        ValueError: If collaborator_type is unknown or required config is missing
    """
    global _collaborator
    if _collaborator is None:
        if settings.collaborator_type == "static":
            from ..collaborators.static import StaticCollaborator

            _collaborator = StaticCollaborator()
        elif settings.collaborator_type == "litellm":
            from ..collaborators.litellm_client import LiteLlmCollaborator

            _collaborator = LiteLlmCollaborator()
        elif settings.collaborator_type == "gemini":
            from ..collaborators.gemini import GeminiCollaborator

            _collaborator = GeminiCollaborator()
        else:
            raise ValueError(
                f"Unknown collaborator_type: {settings.collaborator_type}"
            )
        logger.info("Collaborator created: %s", type(_collaborator).__name__)
    return _collaborator


def reset_collaborator() -> None:
    """Drop the shared instance so the next call rebuilds it from settings."""
    global _collaborator
    _collaborator = None
