"""Refresh-cycle correlation ids for structured logging.

Each refresh cycle runs in its own asyncio task; the id set here at the start
of the cycle is visible to every adapter call the cycle awaits, so backend
log records can be tied back to the chart refresh that issued them.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar

_cycle_id_var: ContextVar[str] = ContextVar("cycle_id", default="")


def new_cycle_id() -> str:
    """Generate and set a fresh cycle id, returning it."""
    cycle_id = uuid.uuid4().hex[:12]
    _cycle_id_var.set(cycle_id)
    return cycle_id


def get_cycle_id() -> str:
    """Return the current refresh-cycle id, or empty string."""

    return _cycle_id_var.get()
