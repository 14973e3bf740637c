# shorts_guard/settings.py
"""
In-memory settings store.

Holds named settings with defaults and notifies listeners when a value
changes. Values are stored as given (strings from a preferences UI are fine)
and coerced only when a configuration snapshot is built, so an invalid value
never reaches the guard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from shorts_guard.exceptions import UnknownSettingError
from shorts_guard.models.config import (
    DEFAULT_END_TIME,
    DEFAULT_RESET_PERIOD,
    DEFAULT_START_TIME,
    DEFAULT_SWIPE_LIMIT,
    DEFAULT_TIME_LIMIT,
    RateLimitConfig,
    ScheduleConfig,
    coerce_bool,
)
from shorts_guard.models.enums import BlockingMode, LimitType, ResetPeriodType

logger = logging.getLogger(__name__)


class SettingKey(str, Enum):
    """Names of every stored setting."""

    APP_ENABLED = "app_enabled"
    BLOCK_FEED = "block_shorts_feed"
    BLOCKING_MODE = "blocking_mode"
    LIMIT_TYPE = "limit_type"
    SWIPE_LIMIT_COUNT = "swipe_limit_count"
    TIME_LIMIT_MINUTES = "time_limit_minutes"
    RESET_PERIOD_TYPE = "reset_period_type"
    RESET_PERIOD_MINUTES = "reset_period_minutes"
    SCHEDULE_ENABLED = "schedule_enabled"
    SCHEDULE_START_TIME = "schedule_start_time"
    SCHEDULE_END_TIME = "schedule_end_time"
    SCHEDULE_DAYS = "schedule_days"
    ALLOWLIST_ENABLED = "allowlist_enabled"
    ALLOWED_CHANNELS = "allowed_channels"  # JSON array string or list of handles


# Settings whose change requires the pending reset to be recomputed
RESET_SCHEDULE_KEYS = frozenset(
    {
        SettingKey.RESET_PERIOD_TYPE,
        SettingKey.RESET_PERIOD_MINUTES,
        SettingKey.LIMIT_TYPE,
        SettingKey.SWIPE_LIMIT_COUNT,
        SettingKey.TIME_LIMIT_MINUTES,
    }
)

# Settings that decide whether the guard is active at all
ACTIVATION_KEYS = frozenset(
    {
        SettingKey.APP_ENABLED,
        SettingKey.SCHEDULE_ENABLED,
        SettingKey.SCHEDULE_START_TIME,
        SettingKey.SCHEDULE_END_TIME,
        SettingKey.SCHEDULE_DAYS,
    }
)

DEFAULTS: dict[SettingKey, Any] = {
    SettingKey.APP_ENABLED: False,
    SettingKey.BLOCK_FEED: True,
    SettingKey.BLOCKING_MODE: BlockingMode.ALL_SHORTS.value,
    SettingKey.LIMIT_TYPE: LimitType.SWIPE_COUNT.value,
    SettingKey.SWIPE_LIMIT_COUNT: str(DEFAULT_SWIPE_LIMIT),
    SettingKey.TIME_LIMIT_MINUTES: str(DEFAULT_TIME_LIMIT),
    SettingKey.RESET_PERIOD_TYPE: ResetPeriodType.PER_DAY.value,
    SettingKey.RESET_PERIOD_MINUTES: str(DEFAULT_RESET_PERIOD),
    SettingKey.SCHEDULE_ENABLED: False,
    SettingKey.SCHEDULE_START_TIME: DEFAULT_START_TIME,
    SettingKey.SCHEDULE_END_TIME: DEFAULT_END_TIME,
    SettingKey.SCHEDULE_DAYS: None,
    SettingKey.ALLOWLIST_ENABLED: False,
    SettingKey.ALLOWED_CHANNELS: None,
}

SettingsListener = Callable[[SettingKey], None]


class SettingsStore:
    """Named settings with defaults and change notifications."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[SettingKey, Any] = dict(DEFAULTS)
        self._listeners: list[SettingsListener] = []
        for key, value in (values or {}).items():
            self._values[self._resolve(key)] = value

    @staticmethod
    def _resolve(key: str | SettingKey) -> SettingKey:
        try:
            return SettingKey(key)
        except ValueError:
            raise UnknownSettingError(str(key)) from None

    def get(self, key: str | SettingKey) -> Any:
        return self._values[self._resolve(key)]

    def set(self, key: str | SettingKey, value: Any) -> None:
        """Store ``value`` and notify listeners if it changed."""
        setting = self._resolve(key)
        if setting in self._values and self._values[setting] == value:
            return
        self._values[setting] = value
        self._notify(setting)

    def update(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        for key, value in {**(values or {}), **kwargs}.items():
            self.set(key, value)

    def reset(self, key: str | SettingKey) -> None:
        """Restore the default value of ``key``."""
        setting = self._resolve(key)
        self.set(setting, DEFAULTS[setting])

    def as_dict(self) -> dict[str, Any]:
        return {key.value: value for key, value in self._values.items()}

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SettingsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SettingsListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("Listener was not registered")

    def _notify(self, key: SettingKey) -> None:
        for listener in list(self._listeners):
            try:
                listener(key)
            except Exception:
                logger.exception(f"Error handling change of setting {key.value}")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def app_enabled(self) -> bool:
        return coerce_bool(self._values[SettingKey.APP_ENABLED], False, SettingKey.APP_ENABLED.value)

    def rate_limit_config(self) -> RateLimitConfig:
        values = self._values
        return RateLimitConfig.model_validate(
            {
                "limit_type": values[SettingKey.LIMIT_TYPE],
                "swipe_limit_count": values[SettingKey.SWIPE_LIMIT_COUNT],
                "time_limit_minutes": values[SettingKey.TIME_LIMIT_MINUTES],
                "reset_period_type": values[SettingKey.RESET_PERIOD_TYPE],
                "reset_period_minutes": values[SettingKey.RESET_PERIOD_MINUTES],
                "blocking_mode": values[SettingKey.BLOCKING_MODE],
                "block_shorts_feed": values[SettingKey.BLOCK_FEED],
                "allowlist_enabled": values[SettingKey.ALLOWLIST_ENABLED],
                "allowed_channels": values[SettingKey.ALLOWED_CHANNELS],
            }
        )

    def schedule_config(self) -> ScheduleConfig:
        values = self._values
        return ScheduleConfig.model_validate(
            {
                "enabled": values[SettingKey.SCHEDULE_ENABLED],
                "start_time": values[SettingKey.SCHEDULE_START_TIME],
                "end_time": values[SettingKey.SCHEDULE_END_TIME],
                "days": values[SettingKey.SCHEDULE_DAYS],
            }
        )

    def is_active(self, now: datetime | None = None) -> bool:
        """Whether the guard should act: enabled and inside the active-hours window."""
        if not self.app_enabled:
            return False
        return self.schedule_config().contains(now or datetime.now())
