"""FastAPI application factory.

Main entry point for the Classroom Web API.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classroom import __version__
from classroom.config import load_app_config
from classroom.web.dependencies import configure_web_context, reset_web_context
from classroom.web.routes import (
    health_router,
    users_router,
    lessons_router,
    progress_router,
    sessions_router,
)
from classroom.web.sessions import get_session_manager, reset_session_manager

logger = structlog.get_logger(__name__)


def create_app(
    db_path: Path | None = None,
    feedback_seconds: float | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite file (default: from config / CLASSROOM_DB)
        feedback_seconds: Delay before a quiz moves on (default: from config)

    Returns:
        Configured FastAPI app instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        config = load_app_config()
        path = db_path or config.db_path
        delay = feedback_seconds if feedback_seconds is not None else config.quiz.feedback_seconds
        configure_web_context(path, delay)
        logger.info("api_startup", db_path=str(path), feedback_seconds=delay)
        yield
        await get_session_manager().close_all()
        reset_session_manager()
        reset_web_context()
        logger.info("api_shutdown")

    app = FastAPI(
        title="Classroom API",
        description="Web API for lessons, quizzes and student progress",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(lessons_router)
    app.include_router(progress_router)
    app.include_router(sessions_router)

    return app


# Default app instance for uvicorn
app = create_app()
