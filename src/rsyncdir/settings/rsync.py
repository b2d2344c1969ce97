from datetime import timedelta
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from rsyncdir.constants import (
    CURRENT_DIR_NAME,
    STATE_FILE_NAME,
    TMP_FILE_EXT,
    SwapStrategy,
)
from rsyncdir.utils.file_ops import path_with_extension
from .base import RsyncDirBaseSettings


class RsyncSettings(RsyncDirBaseSettings):
    """Layout and lifecycle of the rsync output directory.

    Environment variables use the ``RSYNC_`` prefix, e.g. ``RSYNC_BASE_DIR``,
    ``RSYNC_SWAP_STRATEGY``, ``RSYNC_CLEANUP_AFTER``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RSYNC_",
    )

    base_dir: Path = Field(
        ...,
        description="Directory that holds the revision directories, the 'current' entry point "
                    "and the ledger file. rsyncd should serve '<base_dir>/current'."
    )

    swap_strategy: SwapStrategy = Field(
        default=SwapStrategy.SYMLINK,
        description="How a new revision is made live: 'symlink' swaps a symbolic link atomically, "
                    "'rename' moves real directories and has a short window where 'current' is missing."
    )

    cleanup_after: int = Field(
        default=600,
        ge=0,
        description="Seconds a deprecated revision directory is kept after it stopped being current. "
                    "Must exceed the longest expected rsync transfer."
    )

    remove_orphans: bool = Field(
        default=False,
        description="Remove revision directories that are not referenced by the ledger, "
                    "e.g. left behind by a cycle that crashed before its ledger update."
    )

    @field_validator("base_dir")
    @classmethod
    def validate_base_dir(cls, v: Path) -> Path:
        """Expand a leading ~ so the path can be used as-is."""
        return v.expanduser()

    @property
    def current_path(self) -> Path:
        """Stable path rsyncd serves."""
        return self.base_dir / CURRENT_DIR_NAME

    @property
    def tmp_current_path(self) -> Path:
        """Scratch name used to build a new 'current' symlink before swapping it in."""
        return path_with_extension(self.current_path, TMP_FILE_EXT)

    @property
    def state_path(self) -> Path:
        return self.base_dir / STATE_FILE_NAME

    @property
    def retention(self) -> timedelta:
        return timedelta(seconds=self.cleanup_after)
