"""Constants module for rsyncdir.

This module contains all constant values and enumerations used throughout
the package. It has no dependencies on other rsyncdir modules.
"""

from rsyncdir.constants.core import (
    SwapStrategy,
    CycleOutcome,
    CURRENT_DIR_NAME,
    STATE_FILE_NAME,
    TMP_FILE_EXT,
    REVISION_DIR_PREFIX,
    REVISION_DIR_SERIAL_MARKER,
    RSYNC_URI_SCHEME,
)

__all__ = [
    "SwapStrategy",
    "CycleOutcome",
    "CURRENT_DIR_NAME",
    "STATE_FILE_NAME",
    "TMP_FILE_EXT",
    "REVISION_DIR_PREFIX",
    "REVISION_DIR_SERIAL_MARKER",
    "RSYNC_URI_SCHEME",
]
