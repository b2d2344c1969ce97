"""rsyncdir - publish RRDP snapshots as rsync directory trees.

Each snapshot is written to ``<base_dir>/session_<id>_serial_<n>/`` and made
live at ``<base_dir>/current``, either by swapping a symlink or by renaming
directories. A ledger at ``<base_dir>/.rsync_state.json`` records the current
and deprecated revisions so that old directories are removed once their
retention has passed, across restarts.
"""

from rsyncdir.__version__ import __version__

from rsyncdir.api import configure_logging, publish_snapshot
from rsyncdir.common.exceptions import ErrorCode, RsyncDirError
from rsyncdir.constants import CycleOutcome, SwapStrategy
from rsyncdir.rsync import (
    RepositoryObject,
    RrdpSnapshot,
    RsyncDirState,
    RsyncRevision,
    update_from_rrdp_state,
)

__all__ = [
    "__version__",

    "publish_snapshot",
    "configure_logging",
    "update_from_rrdp_state",

    "RrdpSnapshot",
    "RepositoryObject",
    "RsyncRevision",
    "RsyncDirState",

    "CycleOutcome",
    "SwapStrategy",

    # Exceptions (public API)
    "RsyncDirError",
    "ErrorCode",
]
