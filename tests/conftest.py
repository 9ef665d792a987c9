import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid a MongoDB dependency
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_api.main import create_app  # noqa: E402
from todo_api.repositories import InMemoryTodoStore  # noqa: E402
from todo_api.settings import Settings  # noqa: E402


@pytest.fixture
def store():
    return InMemoryTodoStore()


@pytest.fixture
def client(store):
    app = create_app(Settings(persistence_backend="memory"), store=store)
    with TestClient(app) as test_client:
        yield test_client
