"""TeacherHub API — FastAPI application entry point and composition root.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TeacherHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Storage, persistence and store built once in lifespan and kept on app.state;
      the store is loaded before the first request is served

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app() factory so tests can build an app around their own store
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teacherhub.api.error_handlers import register_error_handlers
from teacherhub.api.routes import actions, data_transfer, health, queries
from teacherhub.config import Settings, get_settings
from teacherhub.core.mutations import MutationEnv
from teacherhub.infrastructure.database import DatabaseSessionManager
from teacherhub.infrastructure.observability import setup_logging
from teacherhub.infrastructure.slot_storage import SqlSlotStorage
from teacherhub.services.entity_store import EntityStore
from teacherhub.services.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


def build_store(storage, settings: Settings) -> EntityStore:
    """Wire persistence and mutation environment around a slot storage."""
    persistence = PersistenceAdapter(
        storage, settings.storage_key,
        filename_prefix=settings.export_filename_prefix,
    )
    return EntityStore(persistence, MutationEnv(cascade_mode=settings.cascade_mode))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_manager = DatabaseSessionManager(settings.database_url)
    await db_manager.create_tables()
    app.state.storage = SqlSlotStorage(db_manager)
    app.state.store = build_store(app.state.storage, settings)
    await app.state.store.load()
    logger.info("TeacherHub API started")
    yield
    logger.info("TeacherHub API shutting down")
    await db_manager.dispose()


def create_app(use_lifespan: bool = True) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="TeacherHub API", version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Routes, registered explicitly
    app.include_router(health.router)
    app.include_router(actions.router)
    app.include_router(queries.router)
    app.include_router(data_transfer.router)
    register_error_handlers(app)
    return app


app = create_app()
