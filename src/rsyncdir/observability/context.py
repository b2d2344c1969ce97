"""Observability scope for a publication cycle."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from opentelemetry.trace import Status, StatusCode
from pydantic import Field

from rsyncdir.logging import get_logger
from rsyncdir.logging.filters import clear_cycle_context, set_cycle_context
from rsyncdir.telemetry import get_tracer
from rsyncdir.types.base import RsyncDirBaseModel


class CycleContext(RsyncDirBaseModel):
    """Identifiers propagated to logs and spans during one cycle."""

    cycle_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: Optional[str] = None
    serial: Optional[int] = None
    changed: Optional[bool] = None

    def to_telemetry_dict(self) -> Dict[str, str]:
        payload: Dict[str, str] = {"cycle_id": self.cycle_id}
        if self.session_id is not None:
            payload["session_id"] = self.session_id
        if self.serial is not None:
            payload["serial"] = str(self.serial)
        if self.changed is not None:
            payload["changed"] = str(self.changed).lower()
        return payload


@contextmanager
def cycle_scope(
    ctx: CycleContext,
    *,
    operation: Optional[str] = None,
) -> Iterator[CycleContext]:
    """Apply logging + tracing scope for a publication cycle.

    Failures are recorded on the span, logged once with the cycle context
    and re-raised unchanged.
    """
    set_cycle_context(
        cycle_id=ctx.cycle_id,
        session_id=ctx.session_id,
        serial=ctx.serial,
    )

    telemetry = ctx.to_telemetry_dict()
    tracer = get_tracer("rsyncdir")
    span_name = operation or "rsyncdir.cycle"

    with tracer.start_as_current_span(span_name) as span:
        for key, value in telemetry.items():
            span.set_attribute(f"rsyncdir.{key}", value)

        try:
            yield ctx
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
            get_logger(__name__).error(
                "Publication cycle failed",
                extra={"operation.name": span_name},
                exc_info=True,
            )
            raise
        finally:
            clear_cycle_context()
