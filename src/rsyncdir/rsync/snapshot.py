"""Input of a publication cycle as handed over by the RRDP client."""

from typing import Iterator, List, Protocol, runtime_checkable
from uuid import UUID

from pydantic import Field

from rsyncdir.types.base import RsyncDirBaseModel


class RepositoryObject(RsyncDirBaseModel):
    """One published object: its rsync URI and its bytes."""

    uri: str
    data: bytes


@runtime_checkable
class RrdpSource(Protocol):
    """What the orchestrator needs from the RRDP side.

    Anything exposing a session id, a serial and the full object set
    qualifies; ``RrdpSnapshot`` is the in-memory implementation.
    """

    session_id: UUID
    serial: int

    def elements(self) -> Iterator[RepositoryObject]:
        """Iterate over every object of the snapshot."""
        ...


class RrdpSnapshot(RsyncDirBaseModel):
    """A complete RRDP snapshot held in memory.

    Attributes:
        session_id: RRDP session id
        serial: RRDP serial
        objects: Every object currently published in the repository
    """

    session_id: UUID
    serial: int = Field(..., ge=0)
    objects: List[RepositoryObject] = Field(default_factory=list)

    def elements(self) -> Iterator[RepositoryObject]:
        return iter(self.objects)
