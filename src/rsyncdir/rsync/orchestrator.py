"""One publication cycle.

Order of steps, which a crash at any point must leave recoverable:

    1. recover the ledger
    2. if the snapshot changed: record a live revision the ledger
       missed, write the revision directory, switch ``current`` to it,
       record it as current in the ledger
    3. remove deprecated revisions past their retention
       (and, if enabled, unreferenced revision directories)
    4. persist the ledger

Step 3 and 4 run on every cycle, also when nothing changed.
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional

from rsyncdir.common.exceptions import ErrorCode, filesystem_error, validation_error
from rsyncdir.constants import CycleOutcome
from rsyncdir.logging import get_logger
from rsyncdir.observability import CycleContext, cycle_scope
from rsyncdir.rsync.content import write_rsync_content
from rsyncdir.rsync.publish import PublicationSwitch, create_publication_switch
from rsyncdir.rsync.revision import RsyncRevision
from rsyncdir.rsync.snapshot import RrdpSource
from rsyncdir.rsync.state import RsyncDirState
from rsyncdir.settings import RsyncSettings, get_settings
from rsyncdir.utils.clock import Clock, SystemClock

logger = get_logger(__name__)


def update_from_rrdp_state(
    rrdp_state: RrdpSource,
    changed: bool,
    settings: Optional[RsyncSettings] = None,
    clock: Optional[Clock] = None,
    switch: Optional[PublicationSwitch] = None,
) -> CycleOutcome:
    """Run one publication cycle for an RRDP snapshot.

    Args:
        rrdp_state: Session id, serial and objects of the snapshot
        changed: Whether the content differs from the last cycle. When
            False nothing is written or switched.
        settings: rsync settings, defaults to ``get_settings().rsync``
        clock: Time source for deprecation stamps and pruning
        switch: Publication switch, defaults to the configured strategy

    Returns:
        CycleOutcome.PUBLISHED if a new revision went live, NO_OP otherwise

    Raises:
        RsyncDirError: On any failure. The cycle stops at the failing step
            and the ledger is not persisted.
    """
    settings = settings or get_settings().rsync
    clock = clock or SystemClock()
    switch = switch or create_publication_switch(settings)

    new_revision = RsyncRevision(session_id=rrdp_state.session_id, serial=rrdp_state.serial)
    ctx = CycleContext(
        session_id=str(new_revision.session_id),
        serial=new_revision.serial,
        changed=changed,
    )

    with cycle_scope(ctx, operation="rsyncdir.cycle"):
        rsync_state = RsyncDirState.recover(settings.state_path)
        outcome = CycleOutcome.NO_OP

        if changed:
            _adopt_live_revision(new_revision, rsync_state, settings, clock)
            _prepare_revision_dir(new_revision, rsync_state, settings)
            write_rsync_content(new_revision.path(settings.base_dir), rrdp_state.elements())
            switch.publish(new_revision, rsync_state)
            rsync_state.update_current(new_revision, clock)
            outcome = CycleOutcome.PUBLISHED
        else:
            logger.info("No changes for rsync dir, current revision remains %s", rsync_state.current)

        rsync_state.clean_old(settings.base_dir, settings.retention, clock.now())

        if settings.remove_orphans:
            remove_orphaned_revisions(settings, rsync_state)

        rsync_state.persist(settings.state_path)

        logger.info(
            "Rsync dir cycle finished: %s, current revision %s, %d deprecated",
            outcome.value,
            rsync_state.current,
            len(rsync_state.old),
        )
        return outcome


def _adopt_live_revision(
    new_revision: RsyncRevision,
    rsync_state: RsyncDirState,
    settings: RsyncSettings,
    clock: Clock,
) -> None:
    """Record a revision that went live without reaching the ledger.

    A crash between the symlink swap and persisting the ledger leaves
    ``current`` pointing at a revision the ledger does not know. It is
    recorded as current here so that replacing it deprecates it with a full
    retention window instead of leaving it unreferenced.
    """
    live_name = _current_link_name(settings)
    if live_name is None:
        return

    live_revision = RsyncRevision.from_dir_name(live_name)
    if (
        live_revision is None
        or live_revision == new_revision
        or live_revision == rsync_state.current
        or live_name in rsync_state.referenced_dir_names()
    ):
        return

    logger.warning(
        "Rsync dir %s is live but not recorded in the rsync state, recording it as current",
        live_revision,
    )
    rsync_state.update_current(live_revision, clock)


def _prepare_revision_dir(
    new_revision: RsyncRevision,
    rsync_state: RsyncDirState,
    settings: RsyncSettings,
) -> None:
    """Make sure the new revision can be written into a directory of its own.

    Raises:
        RsyncDirError: If the revision is already known to the ledger
    """
    if new_revision.dir_name in rsync_state.referenced_dir_names():
        raise validation_error(
            f"Revision {new_revision} is already recorded in the rsync state, "
            f"refusing to overwrite it",
            field="serial",
            value=new_revision.serial,
            error_code=ErrorCode.VALIDATION_ERROR,
        )

    path = new_revision.path(settings.base_dir)
    if not path.exists():
        return

    # Live but unrecorded: the switch succeeded and persisting the ledger did not
    if _current_link_name(settings) == new_revision.dir_name:
        logger.warning(
            "Rsync dir %s is already live but not recorded in the rsync state, rewriting it in place",
            path,
        )
        return

    # Left behind by a cycle that failed before its switch
    logger.warning("Removing incomplete rsync dir from an earlier attempt: %s", path)
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise filesystem_error("remove incomplete rsync dir", path, exc) from exc


def _current_link_name(settings: RsyncSettings) -> Optional[str]:
    """Name of the directory the 'current' symlink points at, if it is one."""
    current_path = settings.current_path
    if not current_path.is_symlink():
        return None
    try:
        return Path(os.readlink(current_path)).name
    except OSError as exc:
        raise filesystem_error("read symlink", current_path, exc) from exc


def remove_orphaned_revisions(settings: RsyncSettings, rsync_state: RsyncDirState) -> List[Path]:
    """Remove revision directories the ledger does not reference.

    A directory is kept if its name is current or deprecated in the ledger,
    or if ``current`` is a symlink pointing at it. Entries that do not look
    like revision directories are never touched.

    Returns:
        The removed directories

    Raises:
        RsyncDirError: CLEANUP_ERROR if a directory cannot be removed
    """
    base_dir = settings.base_dir
    keep = rsync_state.referenced_dir_names()

    live_name = _current_link_name(settings)
    if live_name is not None:
        keep.add(live_name)

    removed: List[Path] = []
    if not base_dir.is_dir():
        return removed

    for entry in sorted(base_dir.iterdir()):
        if entry.name in keep or entry.is_symlink() or not entry.is_dir():
            continue
        if RsyncRevision.from_dir_name(entry.name) is None:
            continue

        logger.info("Removing orphaned rsync directory: %s", entry)
        try:
            shutil.rmtree(entry)
        except OSError as exc:
            raise filesystem_error(
                "remove orphaned rsync dir",
                entry,
                exc,
                error_code=ErrorCode.CLEANUP_ERROR,
            ) from exc
        removed.append(entry)

    return removed
