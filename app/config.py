"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="Protein Tracker", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, ge=1, le=65535, description="Server port")
    base_url: Optional[str] = Field(
        default=None, description="Public base URL used to build upload links"
    )

    # Database settings - PostgreSQL
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/protein_tracker",
        description="SQLAlchemy database URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Authentication
    jwt_secret: str = Field(
        default="change-me-access-secret", description="Access token signing secret"
    )
    jwt_refresh_secret: str = Field(
        default="change-me-refresh-secret", description="Refresh token signing secret"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expires_days: int = Field(default=7, ge=1, description="Access token lifetime")
    jwt_refresh_expires_days: int = Field(
        default=30, ge=1, description="Refresh token lifetime"
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=16, description="bcrypt cost factor")

    # Uploads
    upload_dir: str = Field(default="./uploads", description="Upload root directory")
    max_file_size: int = Field(
        default=5 * 1024 * 1024, ge=1, description="Maximum image upload size in bytes"
    )

    # Food recognition
    openai_api_key: Optional[str] = Field(
        default=None, description="Vision API key; fallback detection when unset"
    )
    openai_model: str = Field(default="gpt-4o", description="Vision model name")
    openai_timeout_sec: float = Field(default=60.0, gt=0, description="Vision API timeout")

    # Nutrition defaults
    default_daily_protein_goal: float = Field(
        default=100.0, gt=0, description="Protein goal used when the user has none"
    )
    default_progress_target: float = Field(
        default=126.0, gt=0, description="Target reported for days without progress"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8081"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="/api", description="API route prefix")
    api_title: str = Field(
        default="Protein Tracker API", description="API documentation title"
    )
    api_description: str = Field(
        default="Protein intake logging, progress tracking and analytics",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING

    def public_base_url(self) -> str:
        """Base URL used when exposing uploaded files"""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://localhost:{self.port}"


# Global settings instance
settings = Settings()
