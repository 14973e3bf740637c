# src/shorts_guard/service.py
"""
GuardService - wires matcher, watcher, session accounting, policy and executor.

Every platform notification goes through ``process_notification``, which is
total: faults are logged and the notification sequence always continues.

Examples:
    ```python
    store = SettingsStore({"app_enabled": True, "blocking_mode": "ONLY_SWIPING"})
    service = GuardService(actions=platform_actions, settings=store, notifier=toaster)
    service.process_notification(UiEvent(package_name=..., event_type=..., root=tree))
    ```
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Callable, Mapping
from datetime import timedelta
from typing import Any

from shorts_guard.config import ENABLED_CACHE_MS, TARGET_PACKAGE
from shorts_guard.executor import ActionExecutor, Notifier, PlatformActions
from shorts_guard.matcher import StructureMatcher
from shorts_guard.messages import close_message
from shorts_guard.models.content import ContentSnapshot
from shorts_guard.models.enums import CloseReason, TransitionKind, UiEventType
from shorts_guard.models.events import UiEvent
from shorts_guard.models.ui_node import UiNode
from shorts_guard.models.verdict import Verdict
from shorts_guard.policy import BlockingPolicy, is_channel_allowed
from shorts_guard.scheduling import AsyncioScheduler, Clock, Scheduler, SystemClock
from shorts_guard.session_manager import SessionManager
from shorts_guard.settings import ACTIVATION_KEYS, RESET_SCHEDULE_KEYS, SettingKey, SettingsStore
from shorts_guard.watcher import ContentWatcher

logger = logging.getLogger(__name__)

_LIMIT_REASONS = frozenset({CloseReason.LIMIT_REACHED, CloseReason.LIMIT_ALREADY_REACHED})


class GuardService:
    """Entry point for platform UI-change notifications."""

    def __init__(
        self,
        actions: PlatformActions,
        settings: SettingsStore | None = None,
        notifier: Notifier | None = None,
        matcher: StructureMatcher | None = None,
        scheduler: Scheduler | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Clock | None = None,
        root_provider: Callable[[], UiNode | None] | None = None,
        enabled_cache_ms: int = ENABLED_CACHE_MS,
        on_session_reset: Callable[[], None] | None = None,
        on_limit_reached: Callable[[], None] | None = None,
    ):
        """
        Initialize a GuardService.

        Args:
            actions: Click and generic-back actions on the target application.
            settings: Settings store. A store with default values is created if omitted.
            notifier: Toast-style notifier for close reasons.
            matcher: Structure matcher; defaults to one for the configured target package.
            scheduler: Timer source for session resets. Defaults to an asyncio scheduler on ``loop``.
            loop: Event loop for the default scheduler; the running loop if omitted.
            clock: Wall-clock source shared by all components.
            root_provider: Fetches the active window hierarchy when an event carries none.
            enabled_cache_ms: How long the enabled/schedule check is reused.
            on_session_reset: Hook invoked after a session reset.
            on_limit_reached: Hook invoked when a swipe takes the session over budget.

        Raises:
            SchedulerUnavailableError: Neither a scheduler nor a loop was given and no
                event loop is running.
        """
        self.settings = settings or SettingsStore()
        self._clock: Clock = clock or SystemClock()
        self.matcher = matcher or StructureMatcher(TARGET_PACKAGE)
        self.watcher = ContentWatcher(self.matcher)
        self.policy = BlockingPolicy()
        self.executor = ActionExecutor(actions, notifier, clock=self._clock)
        self.session_manager = SessionManager(
            self.settings.rate_limit_config,
            scheduler=scheduler or AsyncioScheduler(loop),
            clock=self._clock,
            on_session_reset=self._handle_session_reset,
            on_limit_reached=self._handle_limit_reached,
        )

        self._root_provider = root_provider
        self._enabled_cache_ms = enabled_cache_ms
        self._enabled_checked_ms: int | None = None
        self._cached_enabled = False
        self._user_on_session_reset = on_session_reset
        self._user_on_limit_reached = on_limit_reached
        self._shut_down = False

        self.settings.add_listener(self._on_setting_changed)
        logger.debug("Guard service initialized")

    @property
    def target_package(self) -> str:
        return self.matcher.target_package

    # ------------------------------------------------------------------
    # Notification processing
    # ------------------------------------------------------------------

    def process_notification(self, event: UiEvent | Mapping[str, Any]) -> Verdict | None:
        """
        Process one platform notification.

        Returns the verdict for ENTERED/SWIPED transitions, None otherwise.
        """
        try:
            if self._shut_down or not self._is_enabled():
                return None

            if not isinstance(event, UiEvent):
                event = UiEvent.model_validate(event)

            if event.package_name != self.target_package:
                logger.debug(f"Ignoring event from package: {event.package_name}")
                return None

            root = event.root
            if root is None and event.event_type == UiEventType.WINDOW_CONTENT_CHANGED and self._root_provider:
                root = self._root_provider()

            transition = self.watcher.handle(event, root)
            if transition is None or transition.snapshot is None:
                return None

            if transition.kind == TransitionKind.ENTERED:
                return self._handle_entered(transition.snapshot)
            if transition.kind == TransitionKind.SWIPED:
                return self._handle_swiped(transition.snapshot)
            return None
        except Exception:
            logger.exception("Error processing UI event")
            return None

    async def consume(self, events: AsyncIterable[UiEvent | Mapping[str, Any]]) -> None:
        """Process notifications one at a time until ``events`` is exhausted."""
        async for event in events:
            self.process_notification(event)

    def _handle_entered(self, snapshot: ContentSnapshot) -> Verdict:
        logger.info(f"Entered shorts: {snapshot.title} by {snapshot.account}")
        try:
            # Entering always starts accounting, whatever the verdict
            self.session_manager.start_session()
            config = self.settings.rate_limit_config()
            verdict = self.policy.decide(
                snapshot,
                self.session_manager.status(config),
                config,
                TransitionKind.ENTERED,
            )
        except Exception:
            logger.exception("Error handling shorts entered")
            verdict = self._fallback_verdict(snapshot)

        self._apply(snapshot, verdict)
        return verdict

    def _handle_swiped(self, snapshot: ContentSnapshot) -> Verdict:
        logger.info(f"Swiped to: {snapshot.title} by {snapshot.account}")
        config = self.settings.rate_limit_config()
        self.session_manager.add_swipe_and_update_time()
        verdict = self.policy.decide(
            snapshot,
            self.session_manager.status(config),
            config,
            TransitionKind.SWIPED,
        )
        self._apply(snapshot, verdict)
        return verdict

    def _fallback_verdict(self, snapshot: ContentSnapshot) -> Verdict:
        """Treat content that could not be evaluated as blockable."""
        try:
            if is_channel_allowed(snapshot.account, self.settings.rate_limit_config()):
                return Verdict.allow(allowlisted=True)
        except Exception:
            logger.exception(f"Error checking if channel is allowed: {snapshot.account}")
        return Verdict.close(CloseReason.SHORTS_BLOCKED)

    def _apply(self, snapshot: ContentSnapshot, verdict: Verdict) -> None:
        if not verdict.should_close:
            return
        if verdict.reason in _LIMIT_REASONS:
            message = self.session_manager.get_limit_reached_message()
        else:
            message = close_message(verdict.reason)
        self.executor.close(snapshot, message)

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def _is_enabled(self) -> bool:
        now_ms = self._clock.now_ms()
        if self._enabled_checked_ms is not None and now_ms - self._enabled_checked_ms < self._enabled_cache_ms:
            return self._cached_enabled
        try:
            self._cached_enabled = self.settings.is_active(self._clock.now())
        except Exception:
            logger.exception("Error checking if guard is enabled")
            self._cached_enabled = False
        self._enabled_checked_ms = now_ms
        return self._cached_enabled

    def _on_setting_changed(self, key: SettingKey) -> None:
        if key in ACTIVATION_KEYS:
            # Force a re-check on the next event
            self._enabled_checked_ms = None
        if key in RESET_SCHEDULE_KEYS:
            self.session_manager.update_reset_schedule()
            logger.debug(f"Updated reset schedule for setting: {key.value}")

    # ------------------------------------------------------------------
    # Session hooks and accessors
    # ------------------------------------------------------------------

    def _handle_session_reset(self) -> None:
        logger.debug("Session reset callback")
        if self._user_on_session_reset is not None:
            self._user_on_session_reset()

    def _handle_limit_reached(self) -> None:
        logger.info(f"Limit reached: {self.session_manager.get_limit_reached_message()}")
        if self._user_on_limit_reached is not None:
            self._user_on_limit_reached()

    def is_limit_reached(self) -> bool:
        return self.session_manager.is_limit_reached()

    def get_current_time_spent(self) -> timedelta:
        return self.session_manager.get_current_time_spent()

    def get_limit_reached_message(self) -> str:
        return self.session_manager.get_limit_reached_message()

    def shutdown(self) -> None:
        """Stop processing, detach from settings and cancel timers. Idempotent."""
        if self._shut_down:
            return
        self._shut_down = True
        self.settings.remove_listener(self._on_setting_changed)
        self.session_manager.cleanup()
        self.watcher.clear()
        logger.debug("Guard service shut down")
