"""Core logging setup and configuration.

This module wires structured JSON logging with context propagation and
OpenTelemetry correlation while keeping configuration declarative via
``logging.config.dictConfig``.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Set

from opentelemetry import trace

from rsyncdir.constants import REVISION_DIR_PREFIX, REVISION_DIR_SERIAL_MARKER


def _build_reserved_keys() -> Set[str]:
    """Collect standard ``LogRecord`` attributes to avoid duplicating them."""
    blank = logging.LogRecord(
        name="rsyncdir.reserved",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    )
    reserved = set(blank.__dict__.keys())
    reserved.update({"asctime", "message"})
    return reserved


_RESERVED_LOG_RECORD_KEYS = _build_reserved_keys()

# Set by ContextFilter for the duration of a publication cycle
_CYCLE_KEYS = ("cycle_id", "session_id", "serial")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """JSON formatter that enriches log entries with cycle and trace data.

    Records logged inside a publication cycle carry ``cycle_id``,
    ``session_id``, ``serial`` and the ``revision`` directory name.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {}

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        cycle_id = getattr(record, "cycle_id", None)
        session_id = getattr(record, "session_id", None)
        serial = getattr(record, "serial", None)
        if cycle_id is not None:
            log_record["cycle_id"] = cycle_id
        if session_id is not None:
            log_record["session_id"] = session_id
        if serial is not None:
            log_record["serial"] = serial
        if session_id is not None and serial is not None:
            log_record["revision"] = f"{REVISION_DIR_PREFIX}{session_id}{REVISION_DIR_SERIAL_MARKER}{serial}"

        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_KEYS or key in _CYCLE_KEYS or value is None:
                continue
            log_record.setdefault(key, value)

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_record["trace_id"] = format(span_context.trace_id, "032x")
            log_record["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Configure logging backed by ``logging.config.dictConfig``.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Emit one JSON object per line when True, plain text otherwise.
    """
    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "rsyncdir_json": {
                "()": "rsyncdir.logging.logger.CustomJsonFormatter",
            },
            "rsyncdir_text": {
                "format": "%(asctime)s %(levelname)s %(name)s [%(session_id)s/%(serial)s] %(message)s",
            },
        },
        "filters": {
            "rsyncdir_context": {
                "()": "rsyncdir.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level.upper(),
                "formatter": "rsyncdir_json" if json_output else "rsyncdir_text",
                "filters": ["rsyncdir_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "root": {
            "level": level.upper(),
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(config_dict)
