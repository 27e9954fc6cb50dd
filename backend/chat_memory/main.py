"""
IslamicAI Chat Memory - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .api import chat_router, history_router
from .api.chat import registry
from .core.logging_config import setup_logging
from .core.session_store import init_session_store
from .storage import create_storage

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    storage = create_storage(settings.storage_type, settings.local_storage_path)
    init_session_store(storage)
    logger.info("Session store initialized")

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage: {settings.storage_type} ({settings.local_storage_path})")
    logger.info(f"Auto-save delay: {settings.autosave_delay_seconds}s, capacity: {settings.max_sessions}")
    yield
    # Shutdown
    await registry.close()
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Local chat history for the IslamicAI assistant",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(history_router)
app.include_router(chat_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chat_memory.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
