# shorts_guard/models/enums.py
"""Enums shared across the guard components."""

from enum import Enum


class BlockingMode(str, Enum):
    """What part of the short-form feed is blocked."""

    ONLY_SWIPING = "ONLY_SWIPING"  # Entering is allowed, swiping is budgeted
    ALL_SHORTS = "ALL_SHORTS"  # Every short is closed


class LimitType(str, Enum):
    """Which budget is enforced in ONLY_SWIPING mode."""

    SWIPE_COUNT = "SWIPE_COUNT"
    TIME_LIMIT = "TIME_LIMIT"


class ResetPeriodType(str, Enum):
    """When session accounting is cleared."""

    AFTER_SESSION_END = "AFTER_SESSION_END"  # Idle timeout after the last swipe
    PER_DAY = "PER_DAY"  # Local midnight


class TransitionKind(str, Enum):
    """High-level transitions emitted by the content watcher."""

    ENTERED = "entered"
    SWIPED = "swiped"
    CLEARED = "cleared"


class VerdictAction(str, Enum):
    ALLOW = "allow"
    CLOSE = "close"


class CloseReason(str, Enum):
    """Why content is closed. Values double as short log-friendly rationales."""

    FEED_BLOCKED = "feed blocked"
    ALL_SHORTS_BLOCKED = "all shorts blocked"
    ZERO_SWIPE_FEED = "feed disallowed at zero swipe budget"
    LIMIT_ALREADY_REACHED = "limit already reached"
    LIMIT_REACHED = "limit reached"
    SHORTS_BLOCKED = "shorts blocked"  # Generic fallback on faults


class UiEventType(str, Enum):
    """Platform UI-change notification types the guard distinguishes."""

    WINDOW_CONTENT_CHANGED = "window_content_changed"
    WINDOW_STATE_CHANGED = "window_state_changed"
    WINDOWS_CHANGED = "windows_changed"  # Active window changed
    OTHER = "other"
