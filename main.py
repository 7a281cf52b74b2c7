"""Embedding Batch Backend - Main Application Entry Point
FastAPI application factory for the batch embedding service.
Architecture Overview:
    - Feature-based modular architecture (see features/ directory)
    - Queued row jobs are embedded through the OpenAI Batch API
    - Vectors are written back to Postgres (pgvector) and jobs removed from pgmq
Entry Points:
    - /health - Health check endpoint
    - /api/v1/embedding-jobs/batch - Process one batch of embedding jobs
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.utils.env import is_production
# Track startup time in non-production environments
start_time = time.time() if not is_production() else None

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from core.clients.ai import close_ai_clients
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from core.pydantic_schemas import error as api_error
from features.embedding_jobs.routes import router as embedding_jobs_router
from infrastructure.db import dispose_engine

setup_logging()

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events."""
    # Startup
    yield
    # Shutdown
    logger.info("Application shutting down...")
    await close_ai_clients()
    await dispose_engine()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Application factory returning a configured FastAPI instance."""

    app = FastAPI(
        title="Embedding Batch Backend",
        description="Batch embedding of queued database rows",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        """Return a structured API envelope for configuration errors."""

        payload = api_error(
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=str(exc),
            data={"key": exc.key} if getattr(exc, "key", None) else None,
        )
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": APP_VERSION}

    app.include_router(embedding_jobs_router)

    timing_info = ""
    if start_time is not None:
        elapsed = time.time() - start_time
        timing_info = f" (loaded in {elapsed:.2f}s)"

    logger.info(f"Application created with embedding-jobs router{timing_info}")
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
