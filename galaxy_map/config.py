from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional
import logging
import re
from pathlib import Path
from dotenv import load_dotenv

# Explicitly load .env file to ensure environment variables are available
load_dotenv()

logger = logging.getLogger(__name__)

_RATE_LIMIT_PATTERN = re.compile(r"\d+\s*/\s*(second|minute|hour|day)s?", re.IGNORECASE)


class Settings(BaseSettings):
    APP_ENV: Literal["production", "development"] = Field(
        default="development",
        description="Deployment environment; production fails fast on startup errors"
    )

    # Row store
    DATABASE_URL: str = Field(default="sqlite:///./galaxy_map.db", description="SQLAlchemy database URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements to the log")

    # Sector map images, stored as MAP_ASSET_DIR/<sector name>/<hex label><extension>
    MAP_ASSET_DIR: str = Field(default="./maps", description="Root directory of sector map images")
    MAP_ASSET_EXTENSION: str = Field(default=".png", description="File extension of sector map images")

    # Server settings
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(
        default=8001,
        description="Port for the Uvicorn server. Injected by Railway's $PORT in production."
    )
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173", description="Comma-separated list of allowed CORS origins")

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    LOG_FORMAT: Literal["json", "development"] = Field(default="development")
    LOG_FILE: Optional[str] = Field(default=None, description="Also write logs to this file when set")

    # Rate limiting and worker threads
    RATE_LIMIT: str = Field(default="120/minute", description="slowapi limit applied to query endpoints")
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    CPU_WORKERS: Optional[int] = Field(default=None, description="Threads for bounding box decomposition and filter construction")
    IO_WORKERS: Optional[int] = Field(default=None, description="Threads for blocking store and filesystem calls")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra="ignore"
    )

    @field_validator('DATABASE_ECHO', 'RATE_LIMIT_ENABLED', mode='before')
    @classmethod
    def parse_boolean(cls, v):
        """Handle string boolean values from environment variables."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ('true', '1', 'yes', 'on', 't', 'y')
        return bool(v)

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalise_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def cors_origin_list(self) -> list:
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return origins or ["*"]

    @property
    def map_asset_path(self) -> Path:
        return Path(self.MAP_ASSET_DIR)


def validate_environment_configuration(settings: Settings) -> None:
    """
    Validate configuration for the current environment mode.

    Critical errors prevent startup, warnings are logged but allow continuation.

    Raises:
        ConfigurationError: for the first critical configuration error found
    """
    from .exceptions import ConfigurationError

    if not settings.DATABASE_URL.strip():
        raise ConfigurationError("DATABASE_URL", "a database URL is required")

    if not settings.MAP_ASSET_EXTENSION.startswith("."):
        raise ConfigurationError("MAP_ASSET_EXTENSION", "extension must start with '.'")

    if not _RATE_LIMIT_PATTERN.fullmatch(settings.RATE_LIMIT.strip()):
        raise ConfigurationError("RATE_LIMIT", f"unrecognised rate limit '{settings.RATE_LIMIT}'")

    if settings.CPU_WORKERS is not None and settings.CPU_WORKERS < 1:
        raise ConfigurationError("CPU_WORKERS", "at least one worker is required")

    if settings.IO_WORKERS is not None and settings.IO_WORKERS < 1:
        raise ConfigurationError("IO_WORKERS", "at least one worker is required")

    if not settings.map_asset_path.is_dir():
        logger.warning(f"Map asset directory does not exist: {settings.map_asset_path.resolve()}")

    if settings.APP_ENV == "production" and settings.DATABASE_URL.startswith("sqlite"):
        logger.warning("Production environment is using a SQLite database")


def get_settings() -> Settings:
    """Dependency for getting settings with validation."""
    settings = Settings()
    validate_environment_configuration(settings)
    return settings
