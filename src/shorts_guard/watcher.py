# shorts_guard/watcher.py
"""
Dedup state machine over raw UI notifications.

States are Idle (nothing remembered) and Watching (last snapshot remembered):

- content changed, no match          -> no-op
- content changed, first match       -> ENTERED, Watching
- content changed, same content      -> no-op (dedup)
- content changed, different content -> SWIPED, Watching
- window state / active window change -> CLEARED, Idle
- anything else                      -> no-op
"""

from __future__ import annotations

import logging

from shorts_guard.matcher import StructureMatcher
from shorts_guard.models.content import ContentSnapshot, Transition
from shorts_guard.models.enums import TransitionKind, UiEventType
from shorts_guard.models.events import UiEvent
from shorts_guard.models.ui_node import UiNode

logger = logging.getLogger(__name__)

_CLEARING_EVENTS = frozenset({UiEventType.WINDOW_STATE_CHANGED, UiEventType.WINDOWS_CHANGED})


class ContentWatcher:
    """Turns notifications into ENTERED / SWIPED / CLEARED transitions."""

    def __init__(self, matcher: StructureMatcher | None = None) -> None:
        self.matcher = matcher or StructureMatcher()
        self._last_snapshot: ContentSnapshot | None = None

    @property
    def last_snapshot(self) -> ContentSnapshot | None:
        return self._last_snapshot

    @property
    def is_watching(self) -> bool:
        return self._last_snapshot is not None

    def handle(self, event: UiEvent, root: UiNode | None = None) -> Transition | None:
        """
        Classify one notification.

        Args:
            event: The platform notification.
            root: Hierarchy to match; defaults to ``event.root``.
        """
        if event.event_type == UiEventType.WINDOW_CONTENT_CHANGED:
            tree = root if root is not None else event.root
            if tree is None:
                logger.debug("Root node is missing, skipping content change")
                return None
            return self.observe(self.matcher.match(tree))

        if event.event_type in _CLEARING_EVENTS:
            self.clear()
            logger.debug("Window changed, reset last watched short")
            return Transition(kind=TransitionKind.CLEARED)

        logger.debug(f"Unhandled event type: {event.event_type.value}")
        return None

    def observe(self, snapshot: ContentSnapshot | None) -> Transition | None:
        """Apply a match result to the state machine."""
        if snapshot is None:
            return None

        previous = self._last_snapshot
        if previous == snapshot:
            return None

        self._last_snapshot = snapshot
        if previous is None:
            return Transition(kind=TransitionKind.ENTERED, snapshot=snapshot)
        return Transition(kind=TransitionKind.SWIPED, snapshot=snapshot)

    def clear(self) -> None:
        self._last_snapshot = None
