"""
Memos Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers and
       returns the app; uvicorn serves the module-level `app`
       (uvicorn memos.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌────────────┐ ┌────────┐ ┌─────────┐ ┌──────┐ ┌────┐│
    │  │   Req ID   │→│ R.Lim. │→│ Logging │→│ GZip │→│CORS││
    │  └────────────┘ └────────┘ └─────────┘ └──────┘ └────┘│
    │                                                       │
    │  Routes:                                              │
    │  /api/memos  /api/tags  /api/auth  /  /health         │
    │                                                       │
    │  Exception Handlers:                                  │
    │  MemosError subclasses → status_code + {error, code}  │
    │  RequestValidationError → 400, anything else → 500    │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, warn about insecure settings, create the
              schema when DB_AUTO_CREATE is on.
    Shutdown: dispose the database engine.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from memos import __version__
from memos.config import settings
from memos.database import create_schema, dispose_engine
from memos.exceptions import AuthenticationError, MemosError
from memos.middleware.logging import RequestLoggingMiddleware
from memos.middleware.preflight import PreflightMiddleware
from memos.middleware.rate_limit import RateLimitMiddleware
from memos.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from memos.routes import auth, client, health, memos, tags

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    The request id comes from RequestIDLogFilter, attached to the handler so
    records from every logger (ours and third-party) carry it.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
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
    logger.info("Memos %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The server still runs; single-user deployments on a trusted
        # network may keep the default.
        logger.warning("Configuration warning: %s", str(e))

    if settings.db_auto_create:
        await create_schema()
        logger.info("Database schema ready")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Memos shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def current_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def error_body(request: Request, message: str, code: str, details: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": current_request_id(request),
    }
    if details:
        body["details"] = details
    return body


def describe_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """
    Turn FastAPI's request validation errors into one human message.

    Body-level failures become "Invalid JSON body" or "Request body must be
    an object"; a missing field becomes "<field> is required"; messages from
    our own validators are passed through without pydantic's prefix.
    """
    if not errors:
        return "Invalid request"

    first = errors[0]
    err_type = first.get("type", "")
    loc = tuple(first.get("loc", ()))
    msg = str(first.get("msg", "Invalid request"))

    if err_type == "json_invalid":
        return "Invalid JSON body"
    if loc == ("body",):
        if err_type == "missing":
            return "Invalid JSON body"
        return "Request body must be an object"

    field = str(loc[-1]) if len(loc) > 1 else ""
    if err_type == "missing":
        return f"{field} is required"
    if err_type == "value_error":
        return msg.removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        MemosError (and subclasses) → exc.status_code, body {error, code, request_id}
        RequestValidationError      → 400 validation_error
        StarletteHTTPException      → its status (404 for unknown paths, 405, ...)
        Exception (fallback)        → 500 with a generic message

    5xx responses never carry internal details; those are logged server-side.
    """

    @app.exception_handler(MemosError)
    async def handle_memos_error(request: Request, exc: MemosError):
        if exc.status_code >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        elif exc.status_code != 404:
            logger.warning("%s: %s", type(exc).__name__, exc.message)

        details = exc.context if exc.status_code == 400 else None
        body = error_body(request, exc.message, exc.code, details)
        if isinstance(exc, AuthenticationError):
            body["success"] = False
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = describe_validation_errors(exc.errors())
        logger.warning("Request validation failed: %s", message)
        return JSONResponse(status_code=400, content=error_body(request, message, "validation_error"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, str(exc.detail), "http_error"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = current_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = JSONResponse(
            status_code=500,
            content=error_body(request, "An unexpected error occurred. Please try again later.", "server_error"),
        )
        # ServerErrorMiddleware sits outside RequestIDMiddleware
        if rid:
            response.headers[REQUEST_ID_HEADER] = rid
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Memos API",
        description="Single-user note taking: memos, tags, trash and search.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS → Preflight → route
    app.add_middleware(PreflightMiddleware, origins=settings.cors_origins_list)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(memos.router)
    app.include_router(tags.router)
    app.include_router(auth.router)
    app.include_router(health.router)
    app.include_router(client.router)

    return app


app = create_app()
