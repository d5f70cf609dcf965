import os

# Keep the module-level app off any real database
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from bus_tracker.config import Settings
from bus_tracker.database import build_engine, build_session_factory
from bus_tracker.main import create_app
from bus_tracker.models import Base
from bus_tracker.storage import DatabaseStorage, MemStorage


def make_database_storage():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return DatabaseStorage(build_session_factory(engine)), engine


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Every contract test runs against both backends."""
    if request.param == "memory":
        yield MemStorage()
        return
    db_storage, engine = make_database_storage()
    yield db_storage
    engine.dispose()


@pytest.fixture
def settings():
    return Settings(storage_backend="memory", strict_round_transitions=False)


@pytest.fixture(params=["memory", "database"])
def app_storage(request):
    """Backend behind the test client; API tests run against both."""
    if request.param == "memory":
        yield MemStorage()
        return
    db_storage, engine = make_database_storage()
    yield db_storage
    engine.dispose()


@pytest.fixture
def client(settings, app_storage):
    app = create_app(settings, storage=app_storage)
    with TestClient(app) as test_client:
        yield test_client


def login(client, username="admin", password="password"):
    response = client.post("/api/auth/login", data={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client)
