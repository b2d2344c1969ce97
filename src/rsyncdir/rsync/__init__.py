"""Revision lifecycle of the rsync directory.

Components, leaves first:

    - revision: ``RsyncRevision`` / ``DeprecatedRsyncRevision`` identities
    - content: writes a snapshot's objects into a revision directory
    - publish: symlink and rename switches that make a revision live
    - state: ``RsyncDirState``, the persisted ledger
    - orchestrator: ``update_from_rrdp_state``, one full cycle
"""

from rsyncdir.rsync.content import make_rsync_repo_path, write_rsync_content
from rsyncdir.rsync.orchestrator import remove_orphaned_revisions, update_from_rrdp_state
from rsyncdir.rsync.publish import (
    PublicationSwitch,
    RenameSwitch,
    SymlinkSwitch,
    create_publication_switch,
)
from rsyncdir.rsync.revision import DeprecatedRsyncRevision, RsyncRevision
from rsyncdir.rsync.snapshot import RepositoryObject, RrdpSnapshot, RrdpSource
from rsyncdir.rsync.state import RsyncDirState

__all__ = [
    "DeprecatedRsyncRevision",
    "PublicationSwitch",
    "RenameSwitch",
    "RepositoryObject",
    "RrdpSnapshot",
    "RrdpSource",
    "RsyncDirState",
    "RsyncRevision",
    "SymlinkSwitch",
    "create_publication_switch",
    "make_rsync_repo_path",
    "remove_orphaned_revisions",
    "update_from_rrdp_state",
    "write_rsync_content",
]
