import pytest
from fastapi.testclient import TestClient

from database import Database, get_db
from main import app


@pytest.fixture
def db():
    return Database.seeded()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
