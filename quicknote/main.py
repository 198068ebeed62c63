"""
QuickNote - FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       wired to one Storage backend.
Who:   uvicorn (quicknote.main:app), the `quicknote` console script and the
       Lambda gateway (quicknote.gateway.handler).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Request ID  │→│ Logging  │→│  CORS headers   │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ GET /health  │ │ /favicon.ico │ │ /{path}     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Storage→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, validate configuration, log the backend
    Shutdown:  log shutdown (storage backends hold no open resources)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from quicknote import __version__
from quicknote.config import settings
from quicknote.exceptions import QuickNoteError, StorageError
from quicknote.middleware.cors import CORS_METHODS, CORSHeadersMiddleware, cors_headers
from quicknote.middleware.logging import RequestLoggingMiddleware
from quicknote.middleware.request_id import RequestIDMiddleware, request_id_var
from quicknote.routes import health, notes
from quicknote.schemas.note import NoteResponse
from quicknote.services.request_normalizer import is_terminal_client
from quicknote.storage import Storage, build_storage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Once at startup (app lifespan, or Lambda cold start), before
             anything else logs.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # containers and Lambda capture stdout
        ],
        force=True,
    )

    # Third-party libraries log every call at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
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
    logger.info("QuickNote %s starting up...", __version__)

    try:
        settings.validate_required()
    except ValueError as e:
        # The injected backend may not come from settings (tests, embedding),
        # so a bad config is reported but does not stop the app.
        logger.error("Configuration error: %s", str(e))

    logger.info("Storage backend: %s", app.state.storage.name)
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("QuickNote shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(request: Request, status_code: int, message: str) -> Response:
    """
    Error reply in the caller's encoding.

    POST/OPTIONS errors are always {"success": false, "error": message}
    with the CORS headers, whoever the caller is. Other methods give
    terminal clients the bare message as text (a failed curl read) and
    everyone else the same JSON body.
    """
    is_write = request.method in CORS_METHODS
    headers = cors_headers(settings.cors_allow_origin) if is_write else None
    if not is_write and is_terminal_client(request.headers):
        return PlainTextResponse(message, status_code=status_code, headers=headers)
    payload = NoteResponse(success=False, error=message)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        StorageError            → 500 (generic message, context logged)
        QuickNoteError (base)   → exc.status_code (400 / 404 / 405 / 500)
        Exception (fallback)    → 500 (traceback logged)

    Security: handlers NEVER put exception context (paths, bucket names,
    backend error codes) in the response. Details are logged server-side.
    """

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(request, exc.status_code, exc.message)

    @app.exception_handler(QuickNoteError)
    async def handle_quicknote_error(request: Request, exc: QuickNoteError):
        rid = request_id_var.get("")
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(level, "[%s] %s (%d) | Context: %s", rid, exc.message, exc.status_code, exc.context)
        return error_response(request, exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(request, 500, "Internal server error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(storage: Optional[Storage] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        storage: Backend to serve notes from. Defaults to the one selected by
                 the settings (build_storage), created once here.

    Returns:
        Fully configured FastAPI instance.
    """
    if storage is None:
        storage = build_storage(settings)

    app = FastAPI(
        title="QuickNote",
        description="Minimal note-sharing service: create a note, share its short id.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.storage = storage

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS headers → route
    app.add_middleware(CORSHeadersMiddleware, allow_origin=settings.cors_allow_origin)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(notes.router)  # ends in the catch-all, keep last

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    setup_logging()
    uvicorn.run(
        "quicknote.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `quicknote.main:app` to be importable
app = create_app()
