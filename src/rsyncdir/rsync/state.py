"""The revision ledger.

``RsyncDirState`` records which revision is current and which revisions were
deprecated, and when. It is the only durable state of the publisher, kept as
pretty-printed JSON next to the revision directories::

    {
      "current": {"session_id": "...", "serial": 42},
      "old": [
        {"since": "2024-01-15T10:00:00Z",
         "revision": {"session_id": "...", "serial": 41}}
      ]
    }

The ledger must be persisted after every cycle that changed it, and it is
never silently reset: a file that exists but cannot be parsed stops the
cycle.
"""

import json
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Set, Union

from pydantic import Field, ValidationError

from rsyncdir.common.exceptions import ErrorCode, filesystem_error, state_corrupted_error
from rsyncdir.logging import get_logger
from rsyncdir.rsync.revision import DeprecatedRsyncRevision, RsyncRevision
from rsyncdir.types.base import RsyncDirBaseModel
from rsyncdir.utils.clock import Clock, SystemClock
from rsyncdir.utils.decorators import traced
from rsyncdir.utils.file_ops import read_file, write_buf

logger = get_logger(__name__)


class RsyncDirState(RsyncDirBaseModel):
    """Current and deprecated revisions of an rsync directory.

    Invariants:
        - a revision appears in ``old`` at most once
        - ``current`` never appears in ``old``

    Attributes:
        current: The published revision, or None before the first publish
        old: Deprecated revisions awaiting removal
    """

    current: Optional[RsyncRevision] = None
    old: List[DeprecatedRsyncRevision] = Field(default_factory=list)

    @classmethod
    def recover(cls, state_path: Union[str, Path]) -> "RsyncDirState":
        """Load the ledger from disk.

        Args:
            state_path: Location of the ledger file

        Returns:
            The stored ledger, or an empty one if no file exists yet

        Raises:
            RsyncDirError: FILESYSTEM_ERROR if the file cannot be read,
                STATE_CORRUPTED if it cannot be deserialized
        """
        state_path = Path(state_path)
        if not state_path.exists():
            logger.info("No rsync state found at '%s', starting with empty state", state_path)
            return cls()

        json_bytes = read_file(state_path)
        try:
            state = cls.model_validate_json(json_bytes)
        except ValidationError as exc:
            raise state_corrupted_error(state_path, exc) from exc

        logger.debug(
            "Recovered rsync state from '%s': current=%s, %d deprecated",
            state_path,
            state.current,
            len(state.old),
        )
        return state

    def persist(self, state_path: Union[str, Path]) -> None:
        """Write the ledger to disk, replacing any previous content.

        Raises:
            RsyncDirError: If the file cannot be written
        """
        json_text = json.dumps(self.to_dict(), indent=2)
        write_buf(state_path, json_text.encode("utf-8"))
        logger.debug("Persisted rsync state to '%s'", state_path)

    def update_current(self, current: RsyncRevision, clock: Optional[Clock] = None) -> None:
        """Make ``current`` the current revision.

        A previous current revision is moved to ``old``, stamped with the
        moment of replacement, so its directory can be removed once the
        retention has passed.

        Args:
            current: The newly published revision
            clock: Time source for the deprecation stamp
        """
        if self.current == current:
            return

        self.old = [deprecated for deprecated in self.old if deprecated.revision != current]

        existing = self.current
        self.current = current
        if existing is not None:
            self.old = [*self.old, existing.deprecate(clock)]

    @traced("rsyncdir.state.clean_old")
    def clean_old(
        self,
        base_dir: Union[str, Path],
        retention: timedelta,
        now: Optional[datetime] = None,
    ) -> List[RsyncRevision]:
        """Remove deprecated revisions whose retention has passed.

        Directories that no longer exist are treated as removed; a prior run
        may have deleted them before crashing. The ledger is only changed
        after every expired directory is gone, so a failure leaves all
        entries in place for the next cycle.

        Args:
            base_dir: rsync dir holding the revision directories
            retention: How long a deprecated revision is kept
            now: Reference time, defaults to the current UTC time

        Returns:
            The revisions that were forgotten

        Raises:
            RsyncDirError: CLEANUP_ERROR if a directory cannot be removed
        """
        now = now or SystemClock().now()
        clean_before = now - retention

        expired = [deprecated for deprecated in self.old if deprecated.is_expired(clean_before)]

        for deprecated in expired:
            path = deprecated.revision.path(base_dir)
            if not path.exists():
                logger.debug("Rsync directory for old revision already removed: %s", path)
                continue

            logger.info(
                "Removing rsync directory: %s, deprecated since: %s",
                path,
                deprecated.since.isoformat(),
            )
            try:
                shutil.rmtree(path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise filesystem_error(
                    "remove rsync dir for old revision",
                    path,
                    exc,
                    error_code=ErrorCode.CLEANUP_ERROR,
                ) from exc

        if expired:
            self.old = [deprecated for deprecated in self.old if not deprecated.is_expired(clean_before)]

        return [deprecated.revision for deprecated in expired]

    def referenced_dir_names(self) -> Set[str]:
        """Directory names of every revision the ledger knows about."""
        names = {deprecated.revision.dir_name for deprecated in self.old}
        if self.current is not None:
            names.add(self.current.dir_name)
        return names
