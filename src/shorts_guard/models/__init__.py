# shorts_guard/models/__init__.py
"""
Core models for the shorts guard.
"""

from shorts_guard.models.config import RateLimitConfig, ScheduleConfig
from shorts_guard.models.content import ContentSnapshot, Transition
from shorts_guard.models.enums import (
    BlockingMode,
    CloseReason,
    LimitType,
    ResetPeriodType,
    TransitionKind,
    UiEventType,
    VerdictAction,
)
from shorts_guard.models.events import UiEvent
from shorts_guard.models.session import SessionState, SessionStatus
from shorts_guard.models.ui_node import ActionableRef, UiNode, dump_tree
from shorts_guard.models.verdict import Verdict

__all__ = [
    # Enums
    "BlockingMode",
    "CloseReason",
    "LimitType",
    "ResetPeriodType",
    "TransitionKind",
    "UiEventType",
    "VerdictAction",
    # UI tree
    "ActionableRef",
    "UiNode",
    "dump_tree",
    # Content
    "ContentSnapshot",
    "Transition",
    "UiEvent",
    # Configuration
    "RateLimitConfig",
    "ScheduleConfig",
    # Session
    "SessionState",
    "SessionStatus",
    "Verdict",
]
