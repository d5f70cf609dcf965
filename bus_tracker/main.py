from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import Settings, settings as default_settings
from .storage import Storage, create_storage, ensure_bootstrap_admin
from .api import (
    auth, users, students, buses, bus_rounds, tracking,
    notifications, absences, activity_logs, dashboard
)
from .core.errors import register_exception_handlers
from .core.logger import setup_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Settings = default_settings, storage: Optional[Storage] = None) -> FastAPI:
    """Build the API around a storage backend (the configured one by default)."""
    setup_logging(settings.log_level)

    create_tables = False
    if storage is None:
        storage = create_storage(settings)
        create_tables = settings.storage_backend.lower() == "database"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            # Tables on the engine built from settings.database_url
            app.state.storage.create_tables()
        admin = ensure_bootstrap_admin(app.state.storage, settings)
        logger.info(f"{settings.app_name} ready ({type(app.state.storage).__name__}, admin: {admin.username})")
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Administration backend for school bus tracking",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.storage = storage

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(students.router)
    app.include_router(buses.router)
    app.include_router(bus_rounds.router)
    app.include_router(tracking.router)
    app.include_router(notifications.router)
    app.include_router(absences.router)
    app.include_router(activity_logs.router)
    app.include_router(dashboard.router)

    @app.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
