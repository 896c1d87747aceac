import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from student_records.core.database import Database
from student_records.main import create_app


def make_database(url: str = "sqlite://", **options) -> Database:
    """In-memory SQLite shared by every thread of the test client."""
    options.setdefault("reconnect_delay", 0.01)
    return Database(
        url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        **options,
    )


@pytest.fixture
def database():
    database = make_database()
    assert database.try_connect()
    yield database
    database.engine.dispose()


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def add_student(client):
    def _add(name="Test Student", email="test@example.com", course="Testing"):
        response = client.post(
            "/api/students",
            json={"name": name, "email": email, "course": course},
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _add
