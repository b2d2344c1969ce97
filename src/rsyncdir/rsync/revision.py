"""Revision identities.

A revision is one materialized snapshot, named by the RRDP session id and
serial it was written from. The directory name derived here is persisted
indirectly through the ledger and looked up again when the revision is
pruned, so it must never change for a given identity.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from rsyncdir.constants import REVISION_DIR_PREFIX, REVISION_DIR_SERIAL_MARKER
from rsyncdir.types.base import RsyncDirBaseModel
from rsyncdir.utils.clock import Clock, SystemClock

_DIR_NAME_PATTERN = re.compile(
    rf"^{REVISION_DIR_PREFIX}"
    r"(?P<session_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})"
    rf"{REVISION_DIR_SERIAL_MARKER}"
    r"(?P<serial>\d+)$"
)


class RsyncRevision(RsyncDirBaseModel):
    """Identity of one materialized snapshot.

    Equality is by value. The session id is an opaque token: the model
    defines no ordering, and two revisions of different sessions are simply
    different.

    Attributes:
        session_id: RRDP session id of the snapshot
        serial: RRDP serial, increasing within a session
    """

    model_config = ConfigDict(frozen=True)

    session_id: UUID
    serial: int = Field(..., ge=0)

    @property
    def dir_name(self) -> str:
        """Directory name, e.g. ``session_<uuid>_serial_42``."""
        return f"{REVISION_DIR_PREFIX}{self.session_id}{REVISION_DIR_SERIAL_MARKER}{self.serial}"

    def path(self, base_dir: Union[str, Path]) -> Path:
        return Path(base_dir) / self.dir_name

    def deprecate(self, clock: Optional[Clock] = None) -> "DeprecatedRsyncRevision":
        """Wrap this revision with the moment it stopped being current."""
        clock = clock or SystemClock()
        return DeprecatedRsyncRevision(since=clock.now(), revision=self)

    @classmethod
    def from_dir_name(cls, name: str) -> Optional["RsyncRevision"]:
        """Parse a directory name produced by ``dir_name``.

        Returns:
            The revision, or None if ``name`` is not a revision directory name
        """
        match = _DIR_NAME_PATTERN.match(name)
        if match is None:
            return None
        return cls(session_id=UUID(match.group("session_id")), serial=int(match.group("serial")))

    def __str__(self) -> str:
        return self.dir_name


class DeprecatedRsyncRevision(RsyncDirBaseModel):
    """A revision that is no longer current, kept until its retention expires.

    Attributes:
        since: When the revision stopped being current (UTC)
        revision: The revision itself
    """

    model_config = ConfigDict(frozen=True)

    since: datetime
    revision: RsyncRevision

    @field_validator("since")
    @classmethod
    def validate_since(cls, v: datetime) -> datetime:
        """Normalize to an aware UTC datetime; naive values are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def is_expired(self, clean_before: datetime) -> bool:
        return self.since < clean_before
