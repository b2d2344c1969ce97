"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
so every line written during a publication cycle can be correlated with the
revision being published.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional
from rsyncdir.__version__ import __version__

cycle_id_var: ContextVar[Optional[str]] = ContextVar("cycle_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)
serial_var: ContextVar[Optional[int]] = ContextVar("serial", default=None)

_static_environment: Optional[str] = None
_static_extra: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    Static fields (environment, extra) are set once at startup via
    ``set_logging_context``; cycle fields are set per publication cycle via
    ``set_cycle_context``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        if _static_environment is not None:
            setattr(record, "environment", _static_environment)
        for key, value in _static_extra.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        setattr(record, "cycle_id", cycle_id_var.get())
        setattr(record, "session_id", session_id_var.get())
        setattr(record, "serial", serial_var.get())
        setattr(record, "sdk_name", "rsyncdir")
        setattr(record, "rsyncdir_version", __version__)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Set process-wide fields attached to every record.

    Passing ``None`` clears the corresponding field.
    """
    global _static_environment, _static_extra
    _static_environment = environment
    _static_extra = dict(extra) if extra else {}


def set_cycle_context(
    cycle_id: Optional[str] = None,
    session_id: Optional[str] = None,
    serial: Optional[int] = None,
) -> None:
    """Set publication cycle context variables."""
    if cycle_id is not None:
        cycle_id_var.set(cycle_id)
    if session_id is not None:
        session_id_var.set(session_id)
    if serial is not None:
        serial_var.set(serial)


def clear_cycle_context() -> None:
    """Clear all cycle context variables."""
    cycle_id_var.set(None)
    session_id_var.set(None)
    serial_var.set(None)
