import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_api.db import SQLiteLabelRepository, SQLiteTodoRepository  # noqa: E402
from todo_api.main import create_app  # noqa: E402
from todo_api.repositories import InMemoryLabelRepository, InMemoryTodoRepository  # noqa: E402
from todo_api.settings import Settings  # noqa: E402


@pytest.fixture(params=["memory", "sqlite"])
def repositories(request, tmp_path):
    """A fresh (todo, label) repository pair for each backend."""
    if request.param == "sqlite":
        db_path = str(tmp_path / "todos.db")
        return SQLiteTodoRepository(db_path), SQLiteLabelRepository(db_path)
    return InMemoryTodoRepository(), InMemoryLabelRepository()


@pytest.fixture
def todo_repo(repositories):
    return repositories[0]


@pytest.fixture
def label_repo(repositories):
    return repositories[1]


@pytest.fixture
def client(repositories):
    """Test client for an app composed around fresh repositories."""
    todo_repo, label_repo = repositories
    app = create_app(todo_repo, label_repo, settings=Settings())
    return TestClient(app)
