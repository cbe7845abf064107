"""
All-Server Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── upload_dir:      Temporary upload root
    ├── app_settings:    Settings pointing at a temp SQLite DB and upload root
    ├── app:             Application built from app_settings, tables created
    ├── test_client:     HTTPX AsyncClient for API endpoint testing
    └── svg_bytes:       A minimal valid SVG document
"""

import os
import tempfile

# Override settings for testing BEFORE any allserver imports: the module-level
# app in allserver.main is built from the environment on import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="allserver_test_db_"), "module.db"
)
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="allserver_test_uploads_")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from allserver.config import Settings  # noqa: E402
from allserver.database import create_tables, dispose_engine  # noqa: E402
from allserver.main import create_app  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_user(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
            result = await user_service.get_user(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def upload_dir(tmp_path):
    """Fresh upload root per test (pytest cleans tmp_path up)."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def app_settings(tmp_path, upload_dir):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        upload_root=str(upload_dir),
        db_create_tables=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(app_settings):
    """
    Application wired to a throwaway SQLite database.

    ASGITransport does not run the lifespan, so its startup steps run here.
    """
    application = create_app(app_settings)
    await create_tables(application.state.engine)
    application.state.upload_service.ensure_directories()
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app (no server needed).

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/users")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def svg_bytes():
    """Smallest document that passes the SVG signature check."""
    return (
        b'<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16">'
        b'<circle cx="8" cy="8" r="8"/></svg>\n'
    )
