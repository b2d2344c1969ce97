"""Observability utilities for rsyncdir."""

from .context import CycleContext, cycle_scope

__all__ = [
    "CycleContext",
    "cycle_scope",
]
