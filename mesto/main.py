"""
Mesto Backend - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(config) builds the store engine, session factory and token
       codec once, stores them on app.state (injected dependencies), and
       wires middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn mesto.main:app`, or the `mesto-server` script);
       tests call create_app() with their own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware:  Request ID → Logging → GZip → CORS          │
    │                                                           │
    │  Public:      POST /signup  POST /signin  DELETE /signout │
    │               GET /health                                 │
    │  Session:     /users/...    /cards/...                    │
    │                                                           │
    │  Exception Handlers:                                      │
    │   Validation→400  Auth→401  Forbidden→403  NotFound→404   │
    │   Conflict→409    DB→500    StoreTimeout→503              │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mesto import __version__
from mesto.auth.tokens import TokenCodec
from mesto.config import Settings, settings
from mesto.database import build_engine, create_all, create_session_factory, dispose_engine
from mesto.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    MestoError,
    NotFoundError,
    StoreTimeoutError,
    ValidationError,
)
from mesto.middleware.logging import RequestLoggingMiddleware
from mesto.middleware.request_id import RequestIDMiddleware, request_id_var
from mesto.routes import auth, cards, health, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, optional table creation.
    Shutdown: dispose the engine (close pooled connections).
    """
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("Mesto backend starting up (env=%s)", config.environment)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        if config.environment == "production":
            raise

    if config.db_create_all:
        logger.warning("DB_CREATE_ALL is enabled: creating tables from ORM metadata")
        await create_all(app.state.engine)

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)

    yield

    logger.info("Mesto backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[object] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Security: handlers NEVER put exc.context, stack traces or SQL in the
    response. Those are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info(
            "Validation failed on %s %s: %s", request.method, request.url.path, exc.details
        )
        return _error_response(400, "validation_error", exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return await handle_validation_error(request, ValidationError.from_errors(exc.errors()))

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(AuthorizationError)
    async def handle_authorization(request: Request, exc: AuthorizationError):
        logger.warning("Forbidden %s %s: %s", request.method, request.url.path, exc.context)
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(StoreTimeoutError)
    async def handle_store_timeout(request: Request, exc: StoreTimeoutError):
        logger.error("Store timeout on %s %s: %s", request.method, request.url.path, exc.context)
        return _error_response(
            503,
            "service_unavailable",
            exc.message,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(MestoError)
    async def handle_mesto_error(request: Request, exc: MestoError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred.")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        codes = {404: "not_found", 405: "method_not_allowed"}
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404:
            message = "The requested resource was not found"
        return _error_response(
            exc.status_code,
            codes.get(exc.status_code, "http_error"),
            message,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error_response(
            500,
            "server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The store engine and token codec are constructed here, once, and passed
    to handlers through app.state. Nothing reaches for a global connection.
    """
    config = config or settings

    app = FastAPI(
        title="Mesto API",
        description="Photo sharing: user profiles, cards and likes with cookie sessions.",
        version=__version__,
        lifespan=lifespan,
    )

    engine = build_engine(config)
    app.state.settings = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine, config.store_timeout_seconds)
    app.state.token_codec = TokenCodec.from_settings(config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(cards.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Entry point for the `mesto-server` console script."""
    import uvicorn

    uvicorn.run(
        "mesto.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
