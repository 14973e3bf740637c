# shorts_guard/exceptions.py
"""Error types raised by the programmatic API.

Runtime entry points never raise; these only signal caller mistakes.
"""

from __future__ import annotations


class ShortsGuardError(Exception):
    """Base class for shorts_guard errors."""


class UnknownSettingError(ShortsGuardError, KeyError):
    """Raised when a setting name is not part of the settings schema."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown setting: {key}")


class SchedulerUnavailableError(ShortsGuardError, RuntimeError):
    """Raised when reset timers cannot be bound to an event loop."""
