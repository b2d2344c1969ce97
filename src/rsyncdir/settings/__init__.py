"""Settings module providing configuration management for rsyncdir.

Built on Pydantic Settings. Each concern lives in its own file:

    1. Base Layer (base.py):
       - RsyncDirBaseSettings: shared ``.env`` handling and ``app_env``

    2. Domain Settings:
       - rsync.py: output directory, swap strategy, retention
       - logging.py: log level and format

    3. Main Aggregator (main.py):
       - _Settings: aggregates all domain settings
       - get_settings(): Singleton factory function
       - _reload_settings(): Force reload from environment

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Minimal Required Configuration:
    - RSYNC_BASE_DIR: directory rsyncd reads from (serve ``<dir>/current``)

Quick Start:
    >>> from rsyncdir.settings import get_settings
    >>> settings = get_settings()
    >>> settings.rsync.swap_strategy
    <SwapStrategy.SYMLINK: 'symlink'>
"""

from .main import _Settings, get_settings, _reload_settings
from .base import RsyncDirBaseSettings
from .rsync import RsyncSettings
from .logging import LoggingSettings, LogFormat

__all__ = [
    "get_settings",
    "RsyncSettings",
    "LoggingSettings",
    "LogFormat",
]
