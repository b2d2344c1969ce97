"""Publication switches.

A switch makes a freshly written revision directory the one rsyncd serves at
``<base_dir>/current``. Two strategies exist, selected once through
``RSYNC_SWAP_STRATEGY``:

Symlink (default):
    ``current`` is a symbolic link to the revision directory name. A new link
    is created under a temporary name and renamed over ``current``; the
    rename is atomic, so a reader resolving ``current`` sees either the old
    or the new revision. Revision directories are never moved.

Rename:
    ``current`` is a real directory. The previous ``current`` is first
    renamed back to its own revision name, then the new revision directory
    is renamed onto ``current``. Between the two renames ``current`` does
    not exist and readers may see it missing. Prefer the symlink strategy
    unless rsyncd or other consumers cannot follow symlinks.

Neither strategy rolls back a half-completed switch. The ledger still names
the revision that was current before the failed cycle.
"""

import os
from typing import TYPE_CHECKING, Dict, Protocol, Type, runtime_checkable

from rsyncdir.common.exceptions import configuration_error, publish_error
from rsyncdir.constants import SwapStrategy
from rsyncdir.logging import get_logger
from rsyncdir.rsync.revision import RsyncRevision
from rsyncdir.utils.decorators import traced

if TYPE_CHECKING:
    from rsyncdir.rsync.state import RsyncDirState
    from rsyncdir.settings import RsyncSettings


logger = get_logger(__name__)


def _revision_attributes(self, new_revision, state) -> Dict[str, str]:
    return {
        "rsyncdir.revision": new_revision.dir_name,
        "rsyncdir.swap_strategy": self.strategy.value,
    }


@runtime_checkable
class PublicationSwitch(Protocol):
    """Protocol for making a revision directory the live one."""

    strategy: SwapStrategy

    def publish(self, new_revision: RsyncRevision, state: "RsyncDirState") -> None:
        """Make ``new_revision`` visible at the stable ``current`` path.

        Args:
            new_revision: Revision whose directory has been fully written
            state: Ledger as it was before this cycle; ``state.current`` is
                the revision being replaced

        Raises:
            RsyncDirError: If any filesystem step fails
        """
        ...


class SymlinkSwitch:
    """Swap a ``current`` symlink to the new revision directory."""

    strategy = SwapStrategy.SYMLINK

    def __init__(self, settings: "RsyncSettings"):
        self.settings = settings

    @traced("rsyncdir.publish.symlink", attribute_getter=_revision_attributes)
    def publish(self, new_revision: RsyncRevision, state: "RsyncDirState") -> None:
        current_path = self.settings.current_path
        tmp_path = self.settings.tmp_current_path

        logger.info(
            "Updating symlink '%s' to '%s' under rsync dir '%s'",
            current_path.name,
            new_revision.dir_name,
            self.settings.base_dir,
        )

        # lexists: a dangling link left by a crash still has to go
        if os.path.lexists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as exc:
                raise publish_error(
                    "remove lingering temporary symlink", tmp_path, tmp_path, exc
                ) from exc

        # Relative target, resolved against base_dir
        try:
            os.symlink(new_revision.dir_name, tmp_path)
        except OSError as exc:
            raise publish_error(
                "create temporary symlink", new_revision.dir_name, tmp_path, exc
            ) from exc

        try:
            os.replace(tmp_path, current_path)
        except OSError as exc:
            raise publish_error("rename symlink", tmp_path, current_path, exc) from exc


class RenameSwitch:
    """Move the new revision directory onto ``current``."""

    strategy = SwapStrategy.RENAME

    def __init__(self, settings: "RsyncSettings"):
        self.settings = settings

    @traced("rsyncdir.publish.rename", attribute_getter=_revision_attributes)
    def publish(self, new_revision: RsyncRevision, state: "RsyncDirState") -> None:
        base_dir = self.settings.base_dir
        current_path = self.settings.current_path

        logger.info("Renaming rsync folders for close to atomic update of the rsync module dir")

        # Must complete before the new revision takes the 'current' name
        if state.current is not None and current_path.exists():
            preserve_path = state.current.path(base_dir)
            logger.info("Backing up rsync directory for previous revision to: %s", preserve_path)
            try:
                os.rename(current_path, preserve_path)
            except OSError as exc:
                raise publish_error("rename current rsync dir", current_path, preserve_path, exc) from exc

        new_path = new_revision.path(base_dir)
        logger.info("Rename rsync dir for new revision to '%s'", current_path)
        try:
            os.rename(new_path, current_path)
        except OSError as exc:
            raise publish_error("rename new rsync dir", new_path, current_path, exc) from exc


class _PublicationSwitchFactory:
    """Internal implementation detail. Do not use directly.

    Registry of switch implementations keyed by ``SwapStrategy``.
    """

    _switches: Dict[SwapStrategy, Type[PublicationSwitch]] = {
        SwapStrategy.SYMLINK: SymlinkSwitch,
        SwapStrategy.RENAME: RenameSwitch,
    }

    @classmethod
    def create(cls, settings: "RsyncSettings") -> PublicationSwitch:
        """Create the switch configured by ``settings.swap_strategy``.

        Raises:
            RsyncDirError: If the strategy is unknown or has no registered switch
        """
        available = ", ".join(sorted(s.value for s in cls._switches))
        try:
            strategy = SwapStrategy(settings.swap_strategy)
        except ValueError as exc:
            raise configuration_error(
                f"Unknown swap strategy '{settings.swap_strategy}'. Available: {available}",
                config_key="RSYNC_SWAP_STRATEGY",
            ) from exc

        switch_class = cls._switches.get(strategy)
        if switch_class is None:
            raise configuration_error(
                f"Unsupported swap strategy '{strategy.value}'. Available: {available}",
                config_key="RSYNC_SWAP_STRATEGY",
            )

        logger.debug("Using %s publication switch", strategy.value)
        return switch_class(settings)


def create_publication_switch(settings: "RsyncSettings") -> PublicationSwitch:
    """Create the publication switch selected by configuration."""
    return _PublicationSwitchFactory.create(settings)
