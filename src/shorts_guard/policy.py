# shorts_guard/policy.py
"""
Blocking policy: a pure decision over content, session status and configuration.

ENTERED is evaluated in order:

1. No exit affordance (feed entry point) and the feed is blocked -> close.
2. ALL_SHORTS mode -> close.
3. ONLY_SWIPING with a zero swipe budget and no exit affordance -> close.
4. ONLY_SWIPING with the limit already reached (zero swipe budget excepted) -> close.
5. Otherwise allow.

SWIPED closes in ALL_SHORTS mode, and in ONLY_SWIPING mode once the swipe that
was just accounted took the session over its limit.

An allowlisted account turns any close into an allow. Accounting is never
affected by the verdict.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from shorts_guard.models.config import RateLimitConfig
from shorts_guard.models.content import ContentSnapshot
from shorts_guard.models.enums import BlockingMode, CloseReason, LimitType, TransitionKind
from shorts_guard.models.session import SessionStatus
from shorts_guard.models.verdict import Verdict

logger = logging.getLogger(__name__)


def normalize_channel(name: str) -> str:
    """Canonical form of a channel handle: trimmed, no leading ``@``, lowercase."""
    return name.strip().removeprefix("@").strip().lower()


def is_channel_allowed(account: str, config: RateLimitConfig) -> bool:
    if not config.allowlist_enabled:
        return False
    return _matches_any(account, config.allowed_channels)


def _matches_any(account: str, channels: Iterable[str]) -> bool:
    normalized = normalize_channel(account)
    return any(normalize_channel(channel) == normalized for channel in channels)


def _zero_swipe_budget(config: RateLimitConfig) -> bool:
    return config.limit_type == LimitType.SWIPE_COUNT and config.swipe_limit_count == 0


class BlockingPolicy:
    """Decides whether recognized content is allowed or closed."""

    def decide(
        self,
        snapshot: ContentSnapshot,
        session: SessionStatus,
        config: RateLimitConfig,
        event: TransitionKind,
    ) -> Verdict:
        if event == TransitionKind.ENTERED:
            reason = self._entered_reason(snapshot, session, config)
        elif event == TransitionKind.SWIPED:
            reason = self._swiped_reason(session, config)
        else:
            return Verdict.allow()

        if reason is None:
            return Verdict.allow()
        if is_channel_allowed(snapshot.account, config):
            logger.debug(f"Channel {snapshot.account} is in allowlist, not closing ({reason.value})")
            return Verdict.allow(allowlisted=True)
        return Verdict.close(reason)

    @staticmethod
    def _entered_reason(
        snapshot: ContentSnapshot,
        session: SessionStatus,
        config: RateLimitConfig,
    ) -> CloseReason | None:
        is_feed_entry = not snapshot.has_exit_affordance

        if is_feed_entry and config.block_shorts_feed:
            return CloseReason.FEED_BLOCKED
        if config.blocking_mode == BlockingMode.ALL_SHORTS:
            return CloseReason.ALL_SHORTS_BLOCKED
        if config.blocking_mode == BlockingMode.ONLY_SWIPING:
            if _zero_swipe_budget(config):
                # Without an exit back to a single short, a zero budget blocks at once
                return CloseReason.ZERO_SWIPE_FEED if is_feed_entry else None
            if session.limit_reached:
                return CloseReason.LIMIT_ALREADY_REACHED
        return None

    @staticmethod
    def _swiped_reason(session: SessionStatus, config: RateLimitConfig) -> CloseReason | None:
        if config.blocking_mode == BlockingMode.ALL_SHORTS:
            return CloseReason.ALL_SHORTS_BLOCKED
        if session.limit_reached:
            return CloseReason.LIMIT_REACHED
        return None
