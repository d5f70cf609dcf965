from fastapi import Request

from .base import Storage, StorageError, IntegrityViolation
from .memory import MemStorage
from .database import DatabaseStorage

__all__ = [
    "Storage",
    "StorageError",
    "IntegrityViolation",
    "MemStorage",
    "DatabaseStorage",
    "create_storage",
    "ensure_bootstrap_admin",
    "get_storage",
]


def create_storage(settings, session_factory=None) -> Storage:
    """Build the storage backend named by `settings.storage_backend`.

    The database backend connects to `settings.database_url` unless a
    session factory is supplied.
    """
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return MemStorage()
    if backend == "database":
        if session_factory is None:
            from ..database import build_engine, build_session_factory
            session_factory = build_session_factory(build_engine(settings.database_url))
        return DatabaseStorage(session_factory)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")


def ensure_bootstrap_admin(storage: Storage, settings):
    """Create the configured admin account unless it already exists."""
    from ..core.security import get_password_hash
    from ..schemas import UserCreate

    existing = storage.get_user_by_username(settings.admin_username)
    if existing:
        return existing
    return storage.create_user(UserCreate(
        username=settings.admin_username,
        password=get_password_hash(settings.admin_password, settings),
        email=settings.admin_email,
        full_name=settings.admin_full_name,
        phone=settings.admin_phone,
        role="admin",
    ))


def get_storage(request: Request) -> Storage:
    """Dependency returning the storage built at startup."""
    return request.app.state.storage
