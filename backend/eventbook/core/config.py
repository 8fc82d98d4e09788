"""
Application configuration using pydantic-settings.
All config is loaded from environment variables; DATABASE_URL has no default
and must be a parseable SQLAlchemy URL before the process starts serving.
"""

from functools import lru_cache

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from eventbook.core.errors import ConfigurationError


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Eventbook"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = Field(..., min_length=1)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }

    @field_validator("DATABASE_URL")
    @classmethod
    def database_url_parses(cls, value: str) -> str:
        try:
            make_url(value)
        except ArgumentError as e:
            raise ValueError(f"not a valid database URL: {e}") from e
        return value


def load_settings() -> Settings:
    """Read settings from the environment, raising ConfigurationError if DATABASE_URL is missing or invalid."""
    try:
        return Settings()
    except PydanticValidationError as e:
        errors = e.errors()
        fields = sorted({str(err["loc"][0]) for err in errors if err.get("loc")})
        if any(err["type"] == "missing" for err in errors):
            message = "Please define the DATABASE_URL environment variable (or add it to .env)"
        else:
            message = "Invalid configuration: " + "; ".join(
                f"{err['loc'][0]}: {err['msg']}" for err in errors if err.get("loc")
            )
        raise ConfigurationError(message, fields=fields) from e


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
