"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded URLs, ports, or credentials.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

# Archetype reference records shipped with the package
DEFAULT_ARCHETYPE_DIR = Path(__file__).resolve().parent.parent / "data" / "archetypes"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Normal AI")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    frontend_url: str | None = Field(
        default=None,
        description="Allowed CORS origin for the browser client (all origins if unset)",
    )

    # Database
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string",
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Max overflow connections")
    db_pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    db_slow_query_threshold_ms: int = Field(
        default=100, description="Threshold for slow query warnings (ms)"
    )
    db_connect_timeout: int = Field(
        default=60, description="Connection timeout in seconds"
    )
    db_command_timeout: int = Field(
        default=60, description="Command timeout in seconds"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # OpenAI (text completion + image generation)
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key for completions and image generation",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com",
        description="Base URL of the OpenAI-compatible API",
    )
    openai_timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds (image generation is slow)",
    )
    completion_model: str = Field(
        default="gpt-4-turbo-preview",
        description="Chat completion model used for every text stage",
    )
    completion_temperature: float = Field(
        default=0.7, description="Sampling temperature for completions"
    )
    image_model: str = Field(default="dall-e-3", description="Image generation model")
    image_quality: str = Field(default="hd", description="Image quality parameter")
    image_style: str = Field(default="natural", description="Image style parameter")

    # Object storage (S3-compatible)
    s3_bucket: str | None = Field(
        default="brand-assets",
        description="Bucket holding generated brand assets",
    )
    s3_endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL (LocalStack / S3-compatible providers)",
    )
    s3_access_key: str | None = Field(default=None, description="S3 access key")
    s3_secret_key: str | None = Field(default=None, description="S3 secret key")
    s3_region: str = Field(default="us-east-1", description="S3 region")
    s3_timeout: float = Field(default=30.0, description="S3 operation timeout in seconds")
    s3_public_base_url: str | None = Field(
        default=None,
        description="Public URL prefix for stored objects (e.g. a CDN domain)",
    )

    # Brand pipeline
    archetype_data_dir: Path = Field(
        default=DEFAULT_ARCHETYPE_DIR,
        description="Directory holding archetype reference JSON files",
    )
    identity_match_archetypes: bool = Field(
        default=False,
        description="Pick the archetype pair from the catalog before generating identity",
    )
    identity_generate_name: bool = Field(
        default=False,
        description="Ask the model for a brand name instead of deriving it from the input",
    )
    asset_download_timeout: float = Field(
        default=60.0,
        description="Timeout for downloading generated images from the provider",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
