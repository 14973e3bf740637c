# src/shorts_guard/session_manager.py
"""
SessionManager - swipe/time accounting and reset scheduling.

A session starts when the watched screen is entered and ends only when a reset
fires (or is forced). Two reset policies are supported:

- AFTER_SESSION_END: the reset fires a fixed delay after the last accounted
  swipe; every swipe pushes the deadline forward (idle timeout).
- PER_DAY: the reset fires at the next local midnight and then reschedules
  itself for the following day, independent of session activity.

At most one reset timer is pending at any time: scheduling always cancels the
previous one first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta

from shorts_guard import messages
from shorts_guard.models.config import RateLimitConfig
from shorts_guard.models.enums import LimitType, ResetPeriodType
from shorts_guard.models.session import SessionState, SessionStatus
from shorts_guard.scheduling import (
    AsyncioScheduler,
    Clock,
    ScheduledTask,
    Scheduler,
    SystemClock,
    millis_until_next_midnight,
)

logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], RateLimitConfig]

# Fallback delays for unusable configured values
DEFAULT_SESSION_TIMEOUT_MS = 60 * 60 * 1000  # 1 hour
FULL_DAY_MS = 24 * 60 * 60 * 1000


class SessionManager:
    """
    Owns the session lifecycle and the single pending reset.

    Examples:
        ```python
        manager = SessionManager(store.rate_limit_config, on_limit_reached=notify)
        manager.start_session()
        if manager.add_swipe_and_update_time():
            ...  # over budget
        ```
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        on_session_reset: Callable[[], None] | None = None,
        on_limit_reached: Callable[[], None] | None = None,
    ):
        """
        Initialize a SessionManager.

        Args:
            config_provider: Returns the current rate-limit configuration snapshot.
            scheduler: Timer source for resets. Defaults to the asyncio loop running
                at construction time.
            clock: Wall-clock source. Defaults to the system clock.
            on_session_reset: Called after a reset has cleared the session.
            on_limit_reached: Called once when a swipe takes the session over budget.

        Raises:
            SchedulerUnavailableError: No scheduler was given and no event loop is running.
        """
        self._config_provider = config_provider
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._clock: Clock = clock or SystemClock()
        self._state = SessionState()
        self._reset_task: ScheduledTask | None = None
        self._reset_token: object | None = None
        self._limit_notified = False
        self._closed = False

        self.on_session_reset = on_session_reset
        self.on_limit_reached = on_limit_reached

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Copy of the current session state."""
        return self._state.model_copy()

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def swipe_count(self) -> int:
        return self._state.swipe_count

    @property
    def has_pending_reset(self) -> bool:
        return self._reset_task is not None

    def register_callbacks(
        self,
        on_session_reset: Callable[[], None] | None = None,
        on_limit_reached: Callable[[], None] | None = None,
    ) -> None:
        """Replace the reset and limit-reached hooks."""
        self.on_session_reset = on_session_reset
        self.on_limit_reached = on_limit_reached

    def elapsed_ms(self) -> int:
        if not self._state.active or self._state.start_time_ms is None:
            return 0
        return max(0, self._clock.now_ms() - self._state.start_time_ms)

    def get_current_time_spent(self) -> timedelta:
        return timedelta(milliseconds=self.elapsed_ms())

    def is_limit_reached(self, config: RateLimitConfig | None = None) -> bool:
        config = config or self._config()
        if config.limit_type == LimitType.SWIPE_COUNT:
            return self._state.swipe_count >= config.swipe_limit_count
        return self.elapsed_ms() >= config.time_limit_ms

    def status(self, config: RateLimitConfig | None = None) -> SessionStatus:
        """Evaluate the session against ``config`` (or the current configuration)."""
        config = config or self._config()
        return SessionStatus(
            active=self._state.active,
            swipe_count=self._state.swipe_count,
            elapsed_ms=self.elapsed_ms(),
            limit_reached=self.is_limit_reached(config),
        )

    def get_limit_reached_message(self) -> str:
        """User-facing message describing which limit was hit."""
        config = self._config()
        if config.limit_type == LimitType.SWIPE_COUNT:
            if config.swipe_limit_count == 0:
                return messages.SWIPING_DISABLED
            return messages.SWIPE_LIMIT_REACHED.format(
                count=self._state.swipe_count,
                limit=config.swipe_limit_count,
            )
        spent_minutes = self.elapsed_ms() // 60000
        return messages.TIME_LIMIT_REACHED.format(spent=spent_minutes, limit=config.time_limit_minutes)

    # ------------------------------------------------------------------
    # Accounting
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Start a session if none is active; an active session is left untouched."""
        if self._state.active:
            return
        self._state = SessionState(active=True, start_time_ms=self._clock.now_ms(), swipe_count=0)
        self._limit_notified = False
        logger.info("Session started")
        self.schedule_reset()

    def add_swipe_and_update_time(self) -> bool:
        """
        Account one swipe.

        Starts a session first when a reset cleared it while the screen stayed
        open. Returns whether the limit is reached after this swipe.
        """
        if not self._state.active:
            self.start_session()

        self._state.swipe_count += 1
        config = self._config()

        if config.reset_period_type == ResetPeriodType.AFTER_SESSION_END:
            # Stopping swiping for the configured delay ends the session
            self.schedule_reset()

        reached = self.is_limit_reached(config)
        logger.debug(f"Swipe {self._state.swipe_count} accounted, limit reached: {reached}")
        if reached and not self._limit_notified:
            self._limit_notified = True
            self._invoke(self.on_limit_reached, "limit reached")
        elif not reached:
            self._limit_notified = False
        return reached

    # ------------------------------------------------------------------
    # Reset scheduling
    # ------------------------------------------------------------------

    def reset_delay_ms(self, config: RateLimitConfig | None = None) -> int:
        """Delay until the next reset under the configured policy; always positive."""
        config = config or self._config()
        if config.reset_period_type == ResetPeriodType.PER_DAY:
            delay = millis_until_next_midnight(self._clock.now())
            return delay if delay > 0 else FULL_DAY_MS

        delay = config.reset_period_minutes * 60 * 1000
        return delay if delay > 0 else DEFAULT_SESSION_TIMEOUT_MS

    def schedule_reset(self, delay_ms: int | None = None) -> None:
        """Cancel any pending reset and schedule a new one."""
        self.cancel_reset()
        if self._closed:
            logger.debug("Session manager cleaned up, not scheduling reset")
            return

        if delay_ms is None or delay_ms <= 0:
            if delay_ms is not None:
                logger.warning(f"Non-positive reset delay {delay_ms}ms, using configured delay")
            delay_ms = self.reset_delay_ms()

        token = object()
        try:
            task = self._scheduler.call_later(delay_ms, lambda: self._on_reset_due(token))
        except Exception:
            logger.exception("Failed to schedule session reset")
            return

        self._reset_token = token
        self._reset_task = task
        logger.debug(f"Session reset scheduled in {delay_ms}ms")

    def update_reset_schedule(self) -> None:
        """
        Apply a configuration change to the running session.

        A pending reset is rescheduled with the current configuration, and the
        limit-reached callback is re-armed when a raised limit is no longer met.
        """
        if self._limit_notified and not self.is_limit_reached():
            logger.debug("Limit raised above current usage, re-arming limit callback")
            self._limit_notified = False
        if self._reset_task is not None:
            self.schedule_reset()

    def cancel_reset(self) -> None:
        task = self._reset_task
        self._reset_task = None
        self._reset_token = None
        if task is not None:
            try:
                task.cancel()
            except Exception:
                logger.warning("Failed to cancel pending reset", exc_info=True)

    def reset_session(self) -> None:
        """Clear accounting immediately."""
        self._state = SessionState()
        self._limit_notified = False

    def cleanup(self) -> None:
        """Cancel timers and drop callbacks. Safe to call repeatedly."""
        self._closed = True
        self.cancel_reset()
        self.on_session_reset = None
        self.on_limit_reached = None

    def _on_reset_due(self, token: object) -> None:
        if self._closed or token is not self._reset_token:
            return
        self._reset_task = None
        self._reset_token = None
        try:
            self.reset_session()
            logger.info("Session reset")
            self._invoke(self.on_session_reset, "session reset")

            # Per-day resets keep a daily clock running
            if self._config().reset_period_type == ResetPeriodType.PER_DAY:
                self.schedule_reset()
        except Exception:
            logger.exception("Error while resetting session")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _config(self) -> RateLimitConfig:
        try:
            return self._config_provider()
        except Exception:
            logger.exception("Failed to read rate limit configuration, using defaults")
            return RateLimitConfig()

    @staticmethod
    def _invoke(callback: Callable[[], None] | None, name: str) -> None:
        if callback is None:
            return
        try:
            callback()
        except Exception:
            logger.exception(f"Error in {name} callback")
