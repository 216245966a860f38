"""Mapping / generation collaborators."""

from .base import Collaborator
from .chat import ChatCollaborator
from .static import StaticCollaborator

__all__ = [
    "ChatCollaborator",
    "Collaborator",
    "StaticCollaborator",
]
