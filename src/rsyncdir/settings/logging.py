from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import RsyncDirBaseSettings


_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


class LoggingSettings(RsyncDirBaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
    )

    level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="'json' for one structured record per line, 'text' for human readable output"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate that the level is a standard logging level name."""
        level = v.strip().upper()
        if level not in _VALID_LEVELS:
            raise ValueError(f"Unknown log level: {v}. Use DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level
