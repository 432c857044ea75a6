"""FastAPI application for autobackup."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os
import sys

from autobackup.app_state import JsonFileAppState
from autobackup.config import AutoBackupConfig
from autobackup.service import build_backup_service
from .config import settings
from .routers import backup, health

# App-managed pattern: attach our own handler and don't propagate
autobackup_logger = logging.getLogger("autobackup")
autobackup_logger.setLevel(logging.INFO)
autobackup_logger.propagate = False
autobackup_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
autobackup_logger.addHandler(console_handler)

# Allow falling back to server-managed logging
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    autobackup_logger.handlers.clear()
    autobackup_logger.propagate = True

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage backup service lifecycle."""
    logger.info("Initializing backup service...")

    config = AutoBackupConfig.from_env()
    app_state = JsonFileAppState(settings.state_file)

    try:
        store, scheduler = await build_backup_service(config, app_state, app_state)
    except Exception as e:
        logger.error(f"Failed to initialize backup service: {e}")
        raise

    app.state.backup_store = store
    app.state.scheduler = scheduler
    if settings.scheduler_enabled:
        await scheduler.start()

    yield

    logger.info("Shutting down backup service...")
    await scheduler.stop()
    for kv in (getattr(store.storage, "kv", None), store.repository.kv):
        close = getattr(kv, "close", None)
        if close is not None:
            await close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
