"""Pytest configuration and shared fixtures."""

import pytest

from template_engine.config import shared_clients
from template_engine.collaborators import StaticCollaborator


@pytest.fixture(autouse=True)
def _reset_shared_collaborator():
    shared_clients.reset_collaborator()
    yield
    shared_clients.reset_collaborator()


@pytest.fixture
def static_collaborator():
    return StaticCollaborator()
