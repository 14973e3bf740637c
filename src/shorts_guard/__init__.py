# shorts_guard/__init__.py
"""
Shorts guard - detects short-form video screens in a host application and
enforces blocking and rate-limit policies on them.
"""

from shorts_guard.exceptions import SchedulerUnavailableError, ShortsGuardError, UnknownSettingError
from shorts_guard.executor import ActionExecutor, Notifier, PlatformActions
from shorts_guard.matcher import LayoutSignature, StructureMatcher
from shorts_guard.models import (
    ActionableRef,
    BlockingMode,
    CloseReason,
    ContentSnapshot,
    LimitType,
    RateLimitConfig,
    ResetPeriodType,
    ScheduleConfig,
    SessionState,
    SessionStatus,
    Transition,
    TransitionKind,
    UiEvent,
    UiEventType,
    UiNode,
    Verdict,
    VerdictAction,
)
from shorts_guard.policy import BlockingPolicy, is_channel_allowed, normalize_channel
from shorts_guard.scheduling import AsyncioScheduler, Clock, ScheduledTask, Scheduler, SystemClock
from shorts_guard.service import GuardService
from shorts_guard.session_manager import SessionManager
from shorts_guard.settings import SettingKey, SettingsStore
from shorts_guard.watcher import ContentWatcher

__version__ = "0.1.0"

__all__ = [
    # Service
    "GuardService",
    # Components
    "StructureMatcher",
    "LayoutSignature",
    "ContentWatcher",
    "SessionManager",
    "BlockingPolicy",
    "ActionExecutor",
    "SettingsStore",
    "SettingKey",
    # Platform seams
    "PlatformActions",
    "Notifier",
    "Clock",
    "Scheduler",
    "ScheduledTask",
    "SystemClock",
    "AsyncioScheduler",
    # Models
    "ActionableRef",
    "BlockingMode",
    "CloseReason",
    "ContentSnapshot",
    "LimitType",
    "RateLimitConfig",
    "ResetPeriodType",
    "ScheduleConfig",
    "SessionState",
    "SessionStatus",
    "Transition",
    "TransitionKind",
    "UiEvent",
    "UiEventType",
    "UiNode",
    "Verdict",
    "VerdictAction",
    # Helpers
    "is_channel_allowed",
    "normalize_channel",
    # Errors
    "ShortsGuardError",
    "SchedulerUnavailableError",
    "UnknownSettingError",
]
