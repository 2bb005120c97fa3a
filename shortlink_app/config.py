from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import string


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Application
    app_name: str = "URL Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: List[str] = ["*"]

    # Database
    database_url: str = "sqlite+aiosqlite:///./url_shortener.db"

    # Short links
    base_url: Optional[str] = None  # When unset, short_url is the bare code
    code_length: int = 7
    code_alphabet: str = string.ascii_uppercase + string.ascii_lowercase + string.digits
    code_max_attempts: Optional[int] = None  # None = retry until a free code is found
    max_insert_retries: int = 5

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600  # Cache TTL in seconds (1 hour)
    cache_connect_timeout: float = 2.0
    cache_socket_timeout: float = 2.0

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("code_length")
    @classmethod
    def _positive_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("code_length must be a positive integer")
        return value

    @field_validator("code_alphabet")
    @classmethod
    def _distinct_alphabet(cls, value: str) -> str:
        if not value:
            raise ValueError("code_alphabet must not be empty")
        if len(set(value)) != len(value):
            raise ValueError("code_alphabet must not contain repeated characters")
        return value

    @field_validator("max_insert_retries")
    @classmethod
    def _positive_retries(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_insert_retries must be at least 1")
        return value


# Create settings instance
settings = Settings()
