"""Logging infrastructure for rsyncdir.

This module provides structured logging with JSON output, publication cycle
context and OpenTelemetry trace correlation.
"""

from rsyncdir.logging.filters import ContextFilter
from rsyncdir.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
]
