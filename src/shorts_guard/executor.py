# shorts_guard/executor.py
"""
Executes close verdicts against the watched screen.

Preferred path is clicking the in-content exit affordance; otherwise a generic
back action is issued, collapsed by a short cooldown so bursts of
notifications do not navigate back several times.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from shorts_guard.config import BACK_ACTION_COOLDOWN_MS
from shorts_guard.models.content import ContentSnapshot
from shorts_guard.models.ui_node import ActionableRef
from shorts_guard.scheduling import Clock, SystemClock

logger = logging.getLogger(__name__)


@runtime_checkable
class PlatformActions(Protocol):
    """Actions dispatched to the target application."""

    def click(self, ref: ActionableRef) -> bool: ...

    def global_back(self) -> bool: ...


@runtime_checkable
class Notifier(Protocol):
    """Best-effort, non-blocking user notification (toast)."""

    def show(self, message: str) -> None: ...


class ActionExecutor:
    """Closes content with a click on the exit affordance or a generic back action."""

    def __init__(
        self,
        actions: PlatformActions,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        cooldown_ms: int = BACK_ACTION_COOLDOWN_MS,
    ) -> None:
        self._actions = actions
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self.cooldown_ms = cooldown_ms
        self._last_closed_ms: int | None = None

    @property
    def last_closed_ms(self) -> int | None:
        return self._last_closed_ms

    def close(self, snapshot: ContentSnapshot, reason: str) -> bool:
        """
        Surface ``reason`` and close the screen showing ``snapshot``.

        Returns True when a click or back action was dispatched. Never raises.
        """
        logger.info(f"Closing shorts: {reason}")
        self._notify(reason)

        now = self._clock.now_ms()
        try:
            ref = snapshot.exit_affordance
            if ref is not None and self._click(ref):
                logger.debug("Closed shorts using back button")
                self._last_closed_ms = now
                return True

            if self._in_cooldown(now):
                logger.debug("Back action cooldown active, skipping global back")
                return False

            if self._actions.global_back():
                logger.debug("Performed global back action")
            else:
                logger.warning("Failed to perform global back action")
            self._last_closed_ms = now
            return True
        except Exception:
            logger.exception("Error closing shorts")
            return self._emergency_back(now)

    def _click(self, ref: ActionableRef) -> bool:
        if not ref.clickable:
            logger.warning("Back button is not clickable")
            return False
        if not self._actions.click(ref):
            logger.warning("Back button click was rejected")
            return False
        return True

    def _in_cooldown(self, now: int) -> bool:
        return self._last_closed_ms is not None and now - self._last_closed_ms < self.cooldown_ms

    def _emergency_back(self, now: int) -> bool:
        try:
            dispatched = self._actions.global_back()
        except Exception:
            logger.exception("Emergency fallback failed")
            return False
        self._last_closed_ms = now
        return bool(dispatched)

    def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.show(message)
        except Exception:
            logger.warning(f"Error showing notification: {message}", exc_info=True)
