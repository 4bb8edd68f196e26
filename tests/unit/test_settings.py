"""
Unit tests for Pydantic Settings configuration.

Tests settings loading, defaults and URL resolution.
"""

import pytest

from app.config.settings import Settings
from app.infrastructure.db.database import build_database_url
from app.infrastructure.exceptions import ConfigurationError


def _settings(**overrides) -> Settings:
    values = {
        "supabase_url": "https://abcdefgh.supabase.co",
        "supabase_service_role_key": "service-key",
        "database_url": None,
        "supabase_password": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_loads_from_env(self):
        from app.config.settings import settings

        assert settings.supabase_url is not None
        assert settings.supabase_service_role_key is not None

    def test_settings_has_defaults(self):
        settings = _settings()

        assert settings.environment == "development"
        assert settings.azure_region == "eastus"
        assert settings.b2_bucket_name == "voco-audio-library"
        assert settings.audio_fetch_timeout > 0

    def test_is_production_property(self):
        assert _settings().is_production is False
        assert _settings().is_development is True
        assert _settings(environment="Production").is_production is True

    def test_allowed_origins_includes_localhost(self):
        assert "http://localhost:3000" in _settings().allowed_origins

    def test_app_url_trailing_slash_stripped(self):
        settings = _settings(app_url="https://vocoapp.com/", b2_public_base_url="https://f002.example/file/x/")
        assert settings.app_url == "https://vocoapp.com"
        assert settings.b2_public_base_url == "https://f002.example/file/x"

    def test_provider_flags(self):
        assert _settings().b2_configured is False
        assert _settings(b2_application_key_id="id", b2_application_key="key").b2_configured is True
        assert _settings().azure_configured is False
        assert _settings(azure_speech_key="key").azure_configured is True


class TestDatabaseUrl:

    def test_explicit_postgresql_url_rewritten(self):
        url = build_database_url(_settings(database_url="postgresql://u:p@host:5432/db"))
        assert url == "postgresql+asyncpg://u:p@host:5432/db"

    def test_postgres_scheme_rewritten(self):
        url = build_database_url(_settings(database_url="postgres://u:p@host/db"))
        assert url.startswith("postgresql+asyncpg://")

    def test_asyncpg_url_kept(self):
        url = "postgresql+asyncpg://u:p@host/db"
        assert build_database_url(_settings(database_url=url)) == url

    def test_derived_from_supabase(self):
        url = build_database_url(_settings(supabase_password="p@ss word"))
        assert url.startswith("postgresql+asyncpg://postgres")
        assert "abcdefgh" in url
        assert "p%40ss+word" in url

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            build_database_url(_settings())

    def test_invalid_supabase_url(self):
        with pytest.raises(ConfigurationError):
            build_database_url(_settings(supabase_url="https://example.com", supabase_password="x"))
