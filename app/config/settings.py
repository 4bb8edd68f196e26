"""
Application Settings for VocabWorld

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Audio providers are optional: each audio route reports 503 when the
    credentials or files it needs are not configured.
    """

    # Supabase Configuration
    supabase_url: str
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: str
    supabase_jwt_secret: Optional[str] = None

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Public site URL used for Stripe and OAuth redirects
    app_url: str = "http://localhost:3000"
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "capacitor://localhost",
    ]

    # Stripe Configuration
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_monthly_price_id: Optional[str] = None
    stripe_yearly_price_id: Optional[str] = None

    # Admin dashboard
    admin_api_key: Optional[str] = None

    # Backblaze B2 (private bucket access)
    b2_application_key_id: Optional[str] = None
    b2_application_key: Optional[str] = None
    b2_bucket_id: str = "aa1d47dd5cca310593920d1c"
    b2_bucket_name: str = "voco-audio-library"
    b2_public_base_url: str = "https://f002.backblazeb2.com/file/voco-audio-library"

    # Local data files
    audio_url_index_path: str = "data/backblaze-urls.csv"
    alnilam_library_path: str = "public/alnilam-audio-library"
    umbriel_audio_path: str = "public/audio"
    topics_data_path: str = "public/data/topics.json"

    # Azure Speech (on-demand TTS for languages outside the Alnilam library)
    azure_speech_key: Optional[str] = None
    azure_region: str = "eastus"

    # HTTP client timeouts (seconds)
    audio_fetch_timeout: float = 30.0

    # Database Configuration (SQLModel/SQLAlchemy)
    supabase_password: Optional[str] = None
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def normalize_urls(self) -> "Settings":
        """Strip trailing slashes so redirect URLs can be joined safely."""
        self.app_url = self.app_url.rstrip("/")
        self.b2_public_base_url = self.b2_public_base_url.rstrip("/")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    @property
    def b2_configured(self) -> bool:
        return bool(self.b2_application_key_id and self.b2_application_key)

    @property
    def azure_configured(self) -> bool:
        return bool(self.azure_speech_key and self.azure_region)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
