"""FastAPI server for HayQC.

Main entry point for the API server.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from access import init_db
from api.errors import register_error_handlers
from api.routes import (
    health,
    access,
    grading,
    hierarchy,
    bales,
    assignments,
    notes,
    users,
)
from core.config import get_settings
from core.observability.logging import configure_logging, get_logger, with_correlation


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    init_db(settings.db_path)
    logger.info("HayQC API starting up", extra_fields={"db_path": str(settings.db_path)})

    yield

    logger.info("HayQC API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="HayQC API",
        description="Multi-tenant bale quality control with tenant-scoped access and server-side grading",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        """Bind a request ID to every log line and log the outcome."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start = time.perf_counter()

        with with_correlation(request_id=request_id):
            response = await call_next(request)
            logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra_fields={"duration_ms": round((time.perf_counter() - start) * 1000, 1)},
            )

        response.headers["X-Request-ID"] = request_id
        return response

    register_error_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(access.router, prefix="/access", tags=["Access"])
    app.include_router(grading.router, prefix="/grading", tags=["Grading"])
    app.include_router(hierarchy.router, tags=["Hierarchy"])
    app.include_router(bales.router, prefix="/bales", tags=["Bales"])
    app.include_router(assignments.router, prefix="/po-assignments", tags=["PO Assignments"])
    app.include_router(notes.router, prefix="/po-notes", tags=["PO Notes"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
