"""Pytest configuration and fixtures."""

import os

# Must be set before gallery_layout.db.base builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from gallery_layout.api.dependencies import get_layout_handler
from gallery_layout.api.main import app
from gallery_layout.db.cache import OrderingCache
from gallery_layout.db.store import InMemorySubmissionStore
from gallery_layout.engine.data_models import Item
from gallery_layout.engine.handler import LayoutRequestHandler


@pytest.fixture
def sample_items() -> list[Item]:
    """A small issue: square, widescreen, square, portrait."""
    return [
        Item(id=1, aspect_ratio=1.0),
        Item(id=2, aspect_ratio=1.78),
        Item(id=3, aspect_ratio=1.0),
        Item(id=4, aspect_ratio=0.75),
    ]


@pytest.fixture
def store() -> InMemorySubmissionStore:
    """Empty in-memory submission store."""
    return InMemorySubmissionStore()


@pytest.fixture
def handler(store) -> LayoutRequestHandler:
    """Handler over the in-memory store with a private ordering cache."""
    return LayoutRequestHandler(store=store, cache=OrderingCache())


@pytest.fixture
def client(handler) -> TestClient:
    """Test client whose layout routes use the in-memory handler."""
    app.dependency_overrides[get_layout_handler] = lambda: handler
    yield TestClient(app)
    app.dependency_overrides.clear()
