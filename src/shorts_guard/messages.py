# shorts_guard/messages.py
"""User-facing notification text."""

from __future__ import annotations

from shorts_guard.models.enums import CloseReason

SHORTS_BLOCKED = "Shorts blocked"
SHORTS_FEED_BLOCKED = "The Shorts feed is blocked"
ALL_SHORTS_BLOCKED = "All Shorts are blocked"
NO_SHORTS_FEED_ZERO_SWIPE = "The Shorts feed is unavailable while swiping is disabled"
SHORTS_SWIPE_LIMIT_REACHED = "Shorts limit reached"

SWIPING_DISABLED = "Swiping through Shorts is disabled"
SWIPE_LIMIT_REACHED = "Shorts swipe limit reached ({count}/{limit} swipes)"
TIME_LIMIT_REACHED = "Shorts time limit reached ({spent}/{limit} minutes)"

CLOSE_MESSAGES: dict[CloseReason, str] = {
    CloseReason.FEED_BLOCKED: SHORTS_FEED_BLOCKED,
    CloseReason.ALL_SHORTS_BLOCKED: ALL_SHORTS_BLOCKED,
    CloseReason.ZERO_SWIPE_FEED: NO_SHORTS_FEED_ZERO_SWIPE,
    CloseReason.LIMIT_ALREADY_REACHED: SHORTS_SWIPE_LIMIT_REACHED,
    CloseReason.LIMIT_REACHED: SHORTS_SWIPE_LIMIT_REACHED,
    CloseReason.SHORTS_BLOCKED: SHORTS_BLOCKED,
}


def close_message(reason: CloseReason | None) -> str:
    if reason is None:
        return SHORTS_BLOCKED
    return CLOSE_MESSAGES.get(reason, SHORTS_BLOCKED)
