"""
DiveLog Backend: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌────────┐ ┌─────────────┐  │
    │  │ Rate Limit │→│ Security │→│ Req ID │→│   Logging   │  │
    │  └────────────┘ └──────────┘ └────────┘ └─────────────┘  │
    │                                                          │
    │  Routes (/api/v1):                                       │
    │  ┌──────────┐ ┌──────────────┐ ┌──────────┐ ┌─────────┐  │
    │  │  /dives  │ │ /dive-sites  │ │/settings │ │ /health │  │
    │  └──────────┘ └──────────────┘ └──────────┘ └─────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │ DB→500   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, wait for the database (tenacity retries)
    Shutdown: dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine, wait_for_database
from app.exceptions import (
    ConflictError,
    DiveLogError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import InMemoryRateLimitBackend, RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.routes import dive_sites, dives, health
from app.routes import settings as settings_routes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-03-01T10:15:00 [INFO] app.services.dive_service: Created dive 12 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
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
    logger.info("DiveLog Backend %s starting up (%s)...", __version__, settings.environment)

    # Fails startup if the database never answers within the retry budget
    await wait_for_database()

    if not settings.strict_datetime_parsing:
        logger.info("Lenient datetime parsing: unparseable dive dates fall back to now")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DiveLog Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Client errors whose message and context are returned as-is.
CLIENT_ERRORS: Dict[Type[DiveLogError], Tuple[int, str]] = {
    ValidationError: (400, "validation_error"),
    NotFoundError: (404, "not_found"),
    ConflictError: (409, "conflict"),
}


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Every error body has the shape {"error", "message", "details"?, "request_id"}."""
    content: Dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

        ValidationError, RequestValidationError → 400
        NotFoundError                           → 404
        ConflictError                           → 409
        StorageError                            → 500 (generic message)
        Exception (fallback)                    → 500

    429 responses are written by RateLimitMiddleware itself: middleware
    runs outside the exception handlers registered here.
    """

    def client_error_handler(status_code: int, error: str):
        async def handle(request: Request, exc: DiveLogError):
            logger.info(
                "[%s] %s %s -> %d %s %s",
                request_id_var.get(""), request.method, request.url.path,
                status_code, exc.message, exc.context,
            )
            return error_response(status_code, error, exc.message, exc.context)
        return handle

    for exc_class, (status_code, error) in CLIENT_ERRORS.items():
        app.add_exception_handler(exc_class, client_error_handler(status_code, error))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed bodies are 400 like every other client input error, not 422."""
        errors = [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return error_response(400, "validation_error", "Request validation failed", {"errors": errors})

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        """Generic message to the client; operation and driver error are logged only."""
        logger.error("[%s] Storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="DiveLog API",
        description=(
            "Dive log backend: dives with automatic dive-site matching by name and "
            "proximity, duplicate-dive protection, and per-user display settings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in reverse order of addition; the last added
    # (rate limit) sees the request first.
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
    app.add_middleware(SecurityHeadersMiddleware, max_request_size=settings.max_request_size)
    app.add_middleware(
        RateLimitMiddleware,
        backend=InMemoryRateLimitBackend(
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window,
        ),
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(dives.router)
    app.include_router(dive_sites.router)
    app.include_router(settings_routes.router)
    app.include_router(health.router)

    return app


app = create_app()
