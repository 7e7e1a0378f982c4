"""
CourseHub Backend: FastAPI Application Factory
==============================================

What:  Builds the CourseHub ASGI app: routers, middleware, error envelope.
How:   create_app() wires everything; the module-level `app` is what
       `uvicorn coursehub.main:app --port 5000` serves and what the tests
       drive through httpx.ASGITransport.

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                    FastAPI App                        │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐    │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │    │
    │  └──────────────┘ └──────────┘ └─────────────────┘    │
    │                                                       │
    │  Routes:                                              │
    │  ┌────────────┐ ┌───────────┐ ┌────────────────────┐  │
    │  │ /api/forum │ │ /api/chat │ │ /api/notifications │  │
    │  └────────────┘ └───────────┘ └────────────────────┘  │
    │  ┌─────────────┐                                      │
    │  │ GET /health │                                      │
    │  └─────────────┘                                      │
    │                                                       │
    │  Exception Handlers:                                  │
    │  ┌─────────────────────────────────────────────────┐  │
    │  │ CourseHubError→its status │ SQLAlchemy→500 │ *→500│
    │  └─────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log loudly on insecure defaults)
    3. Create tables when running against SQLite (local development)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from coursehub import __version__
from coursehub.config import settings
from coursehub.database import create_all_tables, dispose_engine
from coursehub.exceptions import (
    AuthenticationError,
    CourseHubError,
    DatabaseError,
    RateLimitExceededError,
)
from coursehub.middleware.logging import RequestLoggingMiddleware
from coursehub.middleware.rate_limit import RateLimitMiddleware
from coursehub.middleware.request_id import RequestIDMiddleware, request_id_var
from coursehub.routes import chat, forum, health, notifications

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Request IDs are added to messages by the handlers/middleware themselves.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every statement/connection at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("CourseHub Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Insecure configuration: %s", str(e))

    if settings.is_sqlite:
        # No migrations for the local SQLite database; PostgreSQL uses Alembic
        await create_all_tables()
        logger.info("SQLite schema ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CourseHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the JSON error envelope.

    Handler hierarchy:
        CourseHubError subclasses → their own status_code / error_code
        SQLAlchemyError           → 500 server_error (wrapped as DatabaseError)
        Exception (fallback)      → 500 internal_server_error

    Responses never include stack traces or SQL; those are logged server-side.
    """

    @app.exception_handler(CourseHubError)
    async def handle_coursehub_error(request: Request, exc: CourseHubError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__,
                         exc.message, exc.context)
        elif exc.status_code in (400, 429):
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        headers = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_body(rid),
            headers=headers or None,
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s", rid, str(exc), exc_info=True)
        error = DatabaseError(context={"error_type": type(exc).__name__})
        return JSONResponse(status_code=error.status_code, content=error.to_body(rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CourseHub API",
        description=(
            "Course discussion forums, instructor announcements, course-scoped "
            "direct messages and the notification feed of the CourseHub LMS."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(forum.router)
    app.include_router(chat.router)
    app.include_router(notifications.router)
    app.include_router(health.router)

    return app


app = create_app()
