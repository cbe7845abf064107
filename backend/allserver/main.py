"""
All-Server Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the engine, session factory and
       upload service for one application, registers middleware, exception
       handlers, routers, and the /uploads static mount.
Who:   Called by uvicorn (uvicorn allserver.main:app) or `all-server`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────┬───────┘  │
    │                   ┌──────────────────────▼───────┐  │
    │                   │  Upload size limit (POST     │  │
    │                   │  /api/navigation/upload)     │  │
    │                   └──────────────────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────────┐ ┌───────────┐  │
    │  │ /api/users   │ │ /api/navigation│ │ / /health │  │
    │  └──────────────┘ └────────────────┘ └───────────┘  │
    │  Static: /uploads → UPLOAD_ROOT    Docs: /api-docs  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ DB/File→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, optionally create tables, create the
               upload directory, log startup
    Shutdown:  dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from allserver import __version__
from allserver.config import Settings, settings
from allserver.database import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
)
from allserver.exceptions import AllServerError
from allserver.middleware.logging import RequestLoggingMiddleware
from allserver.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from allserver.middleware.upload_limit import UploadSizeLimitMiddleware
from allserver.routes import health, navigation, users
from allserver.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s
    The request ID comes from RequestIDLogFilter, attached to the handler so
    records from every logger get it.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("All-Server Backend starting up...")

    if app_settings.db_create_tables:
        await create_tables(app.state.engine)

    app.state.upload_service.ensure_directories()
    logger.info(
        "Server ready at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )
    logger.info(
        "API docs: http://%s:%d/api-docs",
        app_settings.backend_host,
        app_settings.backend_port,
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("All-Server Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses with the {"message": ...} body.

    Handler hierarchy:
        AllServerError subclasses → their status_code (400, 404, 500)
        RequestValidationError    → 400 (bad body or field types)
        HTTPException             → its own status (unknown route, 405, ...)
        Exception (fallback)      → 500

    500 responses never include driver errors, SQL, or file paths; those
    are logged server-side with the request ID.
    """

    @app.exception_handler(AllServerError)
    async def handle_app_error(request: Request, exc: AllServerError):
        if exc.status_code >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        elif exc.status_code == 400:
            logger.warning("Validation error: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("Request validation failed: %s", exc.errors())
        return JSONResponse(status_code=400, content={"message": "请求参数无效"})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Something went wrong!"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build against; defaults to the module-level
                      settings loaded from the environment. Tests pass their own.

    Returns:
        Configured FastAPI instance. Its pooled engine, session factory, and
        UploadService live on app.state and reach handlers through
        dependencies.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="All-Server API",
        description="用户与导航站点管理 API，支持SVG图标上传",
        version=__version__,
        docs_url="/api-docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared Resources ──────────────────────────────────────────────────
    engine = build_engine(app_settings)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.upload_service = UploadService(
        upload_root=app_settings.upload_root,
        max_size=app_settings.max_upload_size,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS → UploadSizeLimit
    app.add_middleware(
        UploadSizeLimitMiddleware,
        upload_paths={f"{navigation.router.prefix}/upload"},
    )
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(navigation.router)
    app.include_router(health.router)

    # Uploaded logos: /uploads/svg/<filename>. The directory is created by
    # the lifespan, so it may not exist yet when the app is built.
    app.mount(
        "/uploads",
        StaticFiles(directory=str(app.state.upload_service.upload_root), check_dir=False),
        name="uploads",
    )

    return app


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "allserver.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
    )


# uvicorn expects `allserver.main:app` to be importable
app = create_app()
