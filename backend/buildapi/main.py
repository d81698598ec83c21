"""
Build API — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping
       and store lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn buildapi.main:app` or the `build-api` script).

Application Architecture:
    Middleware:  RequestID → Logging → CORS
    Routes:      /api/aggregates (CRUD) │ / (landing) │ /health │ /api-docs
    Errors:      ValidationError→400 │ NotFoundError→404 │ DatabaseError→500

Lifecycle:
    Startup:
    1. Initialize logging
    2. Open the SQLite store and create the Aggregates table if absent
       (any failure here aborts startup; nothing is served)
    Shutdown:
    1. uvicorn stops accepting connections and finishes in-flight requests
    2. Dispose the engine (close the store connection)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from buildapi import __version__
from buildapi.config import settings
from buildapi.database import Database
from buildapi.exceptions import DatabaseError, NotFoundError, ValidationError
from buildapi.middleware.logging import RequestLoggingMiddleware
from buildapi.middleware.request_id import RequestIDMiddleware, request_id_var
from buildapi.routes import aggregates, health, home
from buildapi.validation import NAME_REQUIRED

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"
INVALID_BODY = "Invalid request body"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during startup, before the store is opened, so connection
    errors are already formatted.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Access lines come from RequestLoggingMiddleware instead
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the store before serving and close it on the way out.

    A Database already placed on `app.state.database` (tests, embedding)
    is used as-is; otherwise one is built from settings.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Build API %s starting up...", __version__)

    database: Optional[Database] = getattr(app.state, "database", None)
    if database is None:
        database = Database(settings.database_url)
        app.state.database = database

    # No try/except: a store that cannot be opened must stop startup
    await database.connect()

    logger.info("Server running at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://%s:%d/api-docs", settings.host, settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Build API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and `{"error": ...}` bodies.

    Handler hierarchy:
        ValidationError         → 400 (message as raised)
        RequestValidationError  → 400 "Invalid request body" (unparseable JSON)
                                  400 "Aggregate name is required" (any other body)
        NotFoundError           → 404 "Aggregate not found"
        DatabaseError           → 500 "Internal server error"
        Exception (fallback)    → 500 "Internal server error"

    Storage error text and stack traces are logged, never returned.

    The fallback runs in ServerErrorMiddleware, outside the request-id and
    access-log middleware: no access line is written for those requests, and
    the id is read back from request.state to tag the log and the response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """
        Unparseable JSON gets its own message. A body that parses but is not
        an object (`[]`, `"str"`, `5`) is a body without a name.
        """
        rid = request_id_var.get("")
        errors = exc.errors()
        logger.warning("[%s] Malformed request: %s", rid, errors)
        if any(error.get("type") == "json_invalid" for error in errors):
            return JSONResponse(status_code=400, content={"error": INVALID_BODY})
        return JSONResponse(status_code=400, content={"error": NAME_REQUIRED})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})
        if rid:
            response.headers["X-Request-ID"] = rid
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Store handle to use instead of one built from settings.
                  The lifespan still connects and disposes it.
    """
    app = FastAPI(
        title="Build API",
        description="API for managing construction aggregate materials",
        version=__version__,
        contact={"name": "API Support"},
        docs_url="/api-docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(aggregates.router)
    app.include_router(home.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Entry point of the `build-api` script."""
    import uvicorn

    uvicorn.run(
        "buildapi.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `buildapi.main:app` to be importable
app = create_app()
