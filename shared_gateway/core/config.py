"""
Common Configuration
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def blank_to_none(value):
    """Unset shell exports arrive as empty strings."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BaseAppConfig(BaseSettings):
    """
    Common application settings.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: Optional[str] = Field(
        default=None, description="Path to a YAML logging dictConfig"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @field_validator("LOG_CONFIG_PATH", mode="before")
    @classmethod
    def normalize_log_config_path(cls, value):
        return blank_to_none(value)
