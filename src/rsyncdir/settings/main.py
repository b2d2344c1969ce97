from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import RsyncDirBaseSettings
from .logging import LoggingSettings
from .rsync import RsyncSettings


class _Settings(RsyncDirBaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    rsync: RsyncSettings = Field(
        default_factory=RsyncSettings,
        description="rsync output directory layout and revision lifecycle"
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Log level and output format"
    )


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    The settings are loaded from environment variables (and an optional
    ``.env`` file) on first access. A publication cycle runs in a single
    process, so one instance is shared by every component.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance

    Raises:
        pydantic.ValidationError: If required settings such as
            ``RSYNC_BASE_DIR`` are missing or invalid.

    Example:
        ```python
        settings = get_settings()
        settings.rsync.current_path   # <base_dir>/current
        settings.rsync.swap_strategy  # SwapStrategy.SYMLINK
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
