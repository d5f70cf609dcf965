from bus_tracker.config import Settings
from bus_tracker.database import build_engine, build_session_factory
from bus_tracker.core.security import verify_password
from bus_tracker.storage import DatabaseStorage, MemStorage

import create_users
from create_users import DEMO_USERS, create_initial_users


def test_seeds_admin_and_demo_accounts_once():
    storage = MemStorage()

    assert create_initial_users(storage)
    assert create_initial_users(storage)

    users = storage.get_users()
    assert [u.role for u in users] == ["admin", "parent", "driver"]
    driver = storage.get_user_by_username("driver1")
    assert verify_password(DEMO_USERS[1]["password"], driver.password)


def test_memory_backend_has_nothing_to_seed(monkeypatch):
    def unreachable(*args, **kwargs):
        raise AssertionError("no storage should be built")

    monkeypatch.setattr(create_users, "create_storage", unreachable)

    assert create_initial_users(app_settings=Settings(storage_backend="memory"))


def test_seeds_the_configured_database(tmp_path):
    app_settings = Settings(storage_backend="database", database_url=f"sqlite:///{tmp_path / 'seed.db'}")

    assert create_initial_users(app_settings=app_settings)

    engine = build_engine(app_settings.database_url)
    try:
        storage = DatabaseStorage(build_session_factory(engine))
        assert [u.username for u in storage.get_users()] == ["admin", "parent1", "driver1"]
    finally:
        engine.dispose()
