"""
All-Server Backend — Configuration & Wiring Tests
===================================================

What:  Settings parsing and the engine/app wiring built from it.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from allserver.config import Settings
from allserver.database import build_engine
from allserver.main import create_app, lifespan


class TestSettings:

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        s = Settings(cors_origins="http://a.com, http://b.com,,")
        assert s.cors_origins_list == ["http://a.com", "http://b.com"]

    def test_port_range(self):
        with pytest.raises(PydanticValidationError):
            Settings(backend_port=70000)

    def test_sqlite_detection(self):
        assert Settings(database_url="sqlite+aiosqlite:///./x.db").is_sqlite
        assert not Settings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_SIZE", "2048")
        monkeypatch.setenv("DB_CREATE_TABLES", "true")
        s = Settings()
        assert s.max_upload_size == 2048
        assert s.db_create_tables is True


class TestWiring:

    def test_sqlite_engine_has_no_pool_sizing(self, app_settings):
        engine = build_engine(app_settings)
        assert engine.url.drivername == "sqlite+aiosqlite"

    def test_create_app_exposes_shared_resources(self, app_settings, upload_dir):
        application = create_app(app_settings)
        assert application.state.settings is app_settings
        assert application.state.upload_service.upload_root == upload_dir.resolve()
        assert application.state.upload_service.max_size == app_settings.max_upload_size
        assert application.docs_url == "/api-docs"

    def test_create_app_does_not_touch_disk(self, app_settings, tmp_path):
        later = tmp_path / "created-on-startup"
        create_app(app_settings.model_copy(update={"upload_root": str(later)}))
        assert not later.exists()

    @pytest.mark.asyncio
    async def test_startup_creates_upload_directory(self, app_settings, tmp_path):
        later = tmp_path / "created-on-startup"
        application = create_app(app_settings.model_copy(update={"upload_root": str(later)}))

        async with lifespan(application):
            assert application.state.upload_service.svg_dir.is_dir()
