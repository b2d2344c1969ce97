"""Utility functions and helpers for rsyncdir."""

from rsyncdir.utils.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_current_timestamp,
)
from rsyncdir.utils.decorators import traced
from rsyncdir.utils.file_ops import (
    path_with_extension,
    read_file,
    write_buf,
)

__all__ = [
    # Time
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_current_timestamp",
    # Decorators
    "traced",
    # File primitives
    "path_with_extension",
    "read_file",
    "write_buf",
]
