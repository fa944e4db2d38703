"""Configuration management for courier."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="COURIER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Router Configuration
    max_steps: Optional[int] = Field(
        default=None,
        gt=0,
        description="Upper bound on resolution steps per dispatched message (unbounded when unset)",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "console"] = Field(default="default", description="Log output profile")
    trace: bool = Field(default=False, description="Log every dispatch at INFO instead of DEBUG")


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Explicit values taking precedence over environment and .env

    Returns:
        Settings instance
    """
    return Settings(**overrides)  # type: ignore[arg-type]
