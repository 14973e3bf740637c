# shorts_guard/models/session.py
"""Session accounting state."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SessionState(BaseModel):
    """
    Accounting for one bounded window of short-form consumption.

    ``start_time_ms`` is set exactly when ``active`` is true; ``swipe_count`` is
    reset to zero whenever a session starts or resets.
    """

    active: bool = False
    start_time_ms: int | None = None
    swipe_count: int = Field(default=0, ge=0)


class SessionStatus(BaseModel):
    """Read-only view of a session evaluated against the current configuration."""

    active: bool = False
    swipe_count: int = 0
    elapsed_ms: int = 0
    limit_reached: bool = False
