"""
PlaceBook Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, the static image
       mount and the routers, and attaches the database and geocoder that
       the request dependencies read from ``app.state``.
Who:   uvicorn (``uvicorn placebook.main:app``) and the test suite
       (``create_app(database=..., geocoder=...)``).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                        FastAPI App                        │
    │                                                           │
    │  Middleware (outermost first):                            │
    │  CORS → RateLimit → RequestID → Logging → GZip            │
    │                                                           │
    │  Routes:                                                  │
    │  /api/places/...   /api/users/...   /health               │
    │  /uploads/images/<file>  (StaticFiles)                    │
    │                                                           │
    │  Exception Handlers:                                      │
    │  PlaceBookError → its status_code, {"message": ...}       │
    │  RequestValidationError → 422                             │
    │  HTTPException (unknown route, 405) → {"message": ...}    │
    │  OPTIONS on a known route → 200 with Allow                │
    │  Exception → 500 "An unknown error occurred."             │
    │  (caught in RequestLoggingMiddleware, so CORS applies)    │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → upload directory
    Shutdown: close the geocoder's HTTP client → dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from placebook import __version__
from placebook.config import settings
from placebook.database import Database
from placebook.exceptions import (
    INVALID_INPUT_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    PlaceBookError,
)
from placebook.middleware.logging import RequestLoggingMiddleware
from placebook.middleware.rate_limit import RateLimitMiddleware
from placebook.middleware.request_id import RequestIDMiddleware, request_id_var
from placebook.routes import health, places, users
from placebook.services.file_service import PUBLIC_PREFIX, file_service
from placebook.services.geocoding import Geocoder
from placebook.services.google_geocoder import GoogleGeocoder

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE_MESSAGE = "Could not find this route."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] placebook.services.place_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that log every operation
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
    logger.info("PlaceBook Backend %s starting up...", __version__)

    # Misconfiguration is reported, not fatal: reads and /health still work
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    file_service.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", file_service.upload_dir)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("PlaceBook Backend shutting down...")
    await app.state.geocoder.aclose()
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every failure as ``{"message": ...}``.

    Messages of 5xx errors are generic; the exception context goes to the
    server log only.
    """

    @app.exception_handler(PlaceBookError)
    async def handle_placebook_error(request: Request, exc: PlaceBookError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        headers = None
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            headers = {"Retry-After": str(retry_after)}

        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON bodies and wrongly typed parameters."""
        rid = request_id_var.get("")
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.info("[%s] Request validation failed: %s", rid, fields)
        return JSONResponse(status_code=422, content={"message": INVALID_INPUT_MESSAGE})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown routes, missing static files, wrong methods."""
        if exc.status_code == 405 and request.method == "OPTIONS":
            # Non-preflight OPTIONS on an existing path: list its methods
            return Response(status_code=200, headers=getattr(exc, "headers", None))

        if exc.status_code == 404:
            message = UNKNOWN_ROUTE_MESSAGE
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Errors raised by the middleware themselves; route errors never get here."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": UNKNOWN_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    geocoder: Optional[Geocoder] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database:  Database handle (default: one built from settings)
        geocoder:  Address lookup (default: GoogleGeocoder from settings)
    """
    app = FastAPI(
        title="PlaceBook API",
        description=(
            "Share places with photos. Users sign up, log in and publish places "
            "whose addresses are geocoded to coordinates."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.database = database or Database()
    app.state.geocoder = geocoder or GoogleGeocoder()

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RateLimit → RequestID → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # Outermost, so 429s and 500s carry the CORS headers too. Preflight
    # OPTIONS is answered here, before routing and the auth gate.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=[
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            "Authorization",
        ],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(places.router)
    app.include_router(users.router)
    app.include_router(health.router)

    # StaticFiles requires the directory at construction time
    file_service.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        f"/{PUBLIC_PREFIX}",
        StaticFiles(directory=str(file_service.upload_dir)),
        name="images",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
