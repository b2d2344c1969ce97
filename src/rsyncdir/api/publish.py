from typing import Iterable, Optional, Tuple, Union
from uuid import UUID

from rsyncdir.constants import CycleOutcome
from rsyncdir.logging import setup_logging
from rsyncdir.logging.filters import set_logging_context
from rsyncdir.rsync import RepositoryObject, RrdpSnapshot, update_from_rrdp_state
from rsyncdir.settings import LogFormat, get_settings
from rsyncdir.utils.clock import Clock


def configure_logging() -> None:
    """Apply the configured log level and format to the root logger."""
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == LogFormat.JSON,
    )
    set_logging_context(environment=settings.app_env)


def publish_snapshot(
    session_id: Union[UUID, str],
    serial: int,
    objects: Iterable[Tuple[str, bytes]],
    changed: bool = True,
    *,
    clock: Optional[Clock] = None,
) -> CycleOutcome:
    """Publish an RRDP snapshot to the configured rsync directory.

    Args:
        session_id: RRDP session id
        serial: RRDP serial
        objects: ``(rsync URI, bytes)`` for every object in the snapshot
        changed: False if the snapshot is identical to the last one published
        clock: Optional time source

    Returns:
        The outcome of the cycle
    """
    snapshot = RrdpSnapshot(
        session_id=session_id,
        serial=serial,
        objects=[RepositoryObject(uri=uri, data=data) for uri, data in objects],
    )
    settings = get_settings()
    return update_from_rrdp_state(snapshot, changed, settings=settings.rsync, clock=clock)
