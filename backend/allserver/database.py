"""
All-Server Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine factory, declarative base, and the FastAPI
       session dependency.
How:   create_app() builds one pooled engine per application and keeps it on
       app.state; get_db_session() opens a session from that engine for each
       request and rolls back if the handler raises.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created once per application; sessions are created per-request.

Connection Pooling:
    pool_size / max_overflow come from settings (SQLite uses the driver
    default pool and ignores both).
    pool_pre_ping validates a connection before handing it out.
    pool_recycle=3600 drops connections older than one hour.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from allserver.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def build_engine(app_settings: Settings) -> AsyncEngine:
    """
    Create the process-wide async engine for the configured database URL.

    Creating the engine does not open a connection; the first checkout does.
    """
    options = {
        "pool_pre_ping": app_settings.db_pool_pre_ping,
        "echo": app_settings.log_level == "DEBUG",
    }
    if not app_settings.is_sqlite:
        options.update(
            pool_size=app_settings.db_pool_size,
            max_overflow=app_settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(app_settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows stay readable after commit for the response
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application's session factory
        2. Yields it to the route handler (services commit their own writes)
        3. On error: rolls back anything left uncommitted
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/users")
        async def list_users(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables registered on Base.metadata."""
    # Registers the models on Base.metadata
    from allserver.models import navigation, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def check_connection(engine: AsyncEngine) -> bool:
    """Run SELECT 1 against the pool; returns False instead of raising."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Database unreachable: %s", str(e))
        return False


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections (application shutdown)."""
    await engine.dispose()
