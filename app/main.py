"""Application factory for the Expense Tracker API.

This module builds the FastAPI application: it configures logging, owns the database lifecycle through
the lifespan handler, installs CORS and request logging middleware, wires the centralized error
responders, and exposes the Scalar API reference endpoint.
"""

import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference

from app.api.errors import register_exception_handlers
from app.api.routes import router, status_router
from app.core.db import Database
from app.core.settings import Settings, get_settings
from app.core.utils import LOG_FORMAT, LOGGER_NAME, ensure_dir, get_logger


# --- Logging Setup ---
def setup_logging(settings: Settings) -> logging.Logger:
    """Configure the project logger level and, when a log file is set, a persistent file handler."""
    logger = get_logger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())
    if settings.log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        ensure_dir(Path(settings.log_file).parent)
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setLevel(settings.log_level.upper())
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    return logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database at startup and close it at shutdown."""
    database: Database = app.state.database
    database.open()
    try:
        yield
    finally:
        database.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a configured FastAPI application."""
    settings = settings or get_settings()
    logger = setup_logging(settings)

    app = FastAPI(
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        title=settings.app_name,
        description="""
    The Expense Tracker API records office and personal income, expenses and transfers.

    **Endpoints:**
    - `GET /transactions`: List transactions with filters and pagination.
    - `POST /transactions`: Create a transaction.
    - `GET /transactions/{id}`: Fetch a transaction.
    - `PUT /transactions/{id}`: Edit a transaction within 12 hours of its creation.
    - `DELETE /transactions/{id}`: Delete a transaction.
    - `GET /transactions/summary/category`: Totals by type and category.
    - `GET /transactions/summary/monthly`: Totals by month and type.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
        version=settings.app_version,
    )
    app.state.started_at = time.monotonic()
    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.database_echo)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(status_router)

    @app.get("/scalar", include_in_schema=False)
    async def scalar_docs() -> HTMLResponse:
        """Return Scalar API reference."""
        return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)

    return app
