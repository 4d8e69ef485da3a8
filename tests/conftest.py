# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from brrrr.adapters.memory_repo import InMemoryDealRepository
from brrrr.api.http import app, get_repo


@pytest.fixture
def memory_repo():
    return InMemoryDealRepository()


@pytest.fixture
def client(memory_repo):
    app.dependency_overrides[get_repo] = lambda: memory_repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
