"""Core constants for the rsync directory layout."""

from enum import Enum


class SwapStrategy(str, Enum):
    """How a freshly written revision is made visible at the stable path.

    Values:
        SYMLINK: ``current`` is a symbolic link to the revision directory.
            - Updated by renaming a temporary link over it (atomic)
            - Revision directories are never moved
            - Recommended where rsyncd follows symlinks

        RENAME: ``current`` is a real directory.
            - The previous ``current`` is renamed back to its revision name,
              then the new revision is renamed onto ``current``
            - Readers may see ``current`` missing between the two renames
            - Use when consumer tooling cannot follow symlinks
    """
    SYMLINK = "symlink"
    RENAME = "rename"


class CycleOutcome(str, Enum):
    """Result of one publication cycle.

    Values:
        NO_OP: Content was unchanged; nothing was written or switched
        PUBLISHED: A new revision was written and made current
    """
    NO_OP = "no-op"
    PUBLISHED = "published"


# Stable entry point read by rsyncd, relative to the rsync dir
CURRENT_DIR_NAME = "current"

# Ledger file, relative to the rsync dir
STATE_FILE_NAME = ".rsync_state.json"

# Extension for temporary files and links
TMP_FILE_EXT = "tmp"

REVISION_DIR_PREFIX = "session_"
REVISION_DIR_SERIAL_MARKER = "_serial_"

RSYNC_URI_SCHEME = "rsync"
