"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./reelshelf.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Redis (empty disables caching and rate limiting)
    REDIS_URL: str = ""

    # Security
    SECRET_KEY: str = "change-me"
    JWT_SECRET_KEY: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    LINK_STATE_EXPIRE_MINUTES: int = 10

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # API
    API_BASE_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = "http://localhost:3000"

    # Application
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60

    # Content catalogs
    OMDB_API_KEY: str = ""
    TWITCH_CLIENT_ID: str = ""
    TWITCH_CLIENT_SECRET: str = ""
    RAWG_API_KEY: str = ""
    CATALOG_CACHE_TTL_SECONDS: int = 600
    TRENDING_CACHE_TTL_SECONDS: int = 2 * 24 * 60 * 60
    HTTP_TIMEOUT_SECONDS: int = 10

    # Gaming platforms
    STEAM_API_KEY: str = ""
    XBOX_API_KEY: str = ""

    # Uploads
    UPLOAD_DIR: str = "uploads"
    PROFILE_PICTURE_MAX_BYTES: int = 1024 * 1024  # 1MB
    AVATAR_MAX_BYTES: int = 500 * 1024  # 500KB

    # Error tracking
    SENTRY_DSN: str = ""
    APP_VERSION: str = "1.0.0"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS comma-separated string into list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Global settings instance
settings = Settings()
