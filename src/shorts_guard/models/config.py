# shorts_guard/models/config.py
"""
Configuration snapshots consumed by the guard.

Values arrive from an external settings store and may be missing, out of range
or unparseable. Every field is coerced at this boundary: unparseable values fall
back to their default, out-of-range values are clamped, and the raw value
is discarded after a warning is logged. Downstream code can therefore trust the
ranges below.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import BlockingMode, LimitType, ResetPeriodType

logger = logging.getLogger(__name__)

# =============================================================================
# Validation constants
# =============================================================================

MIN_SWIPE_LIMIT = 0
MAX_SWIPE_LIMIT = 10000
MIN_TIME_LIMIT = 1
MAX_TIME_LIMIT = 1440  # 24 hours
MIN_RESET_PERIOD = 1
MAX_RESET_PERIOD = 10080  # 1 week in minutes

DEFAULT_SWIPE_LIMIT = 0
DEFAULT_TIME_LIMIT = 30
DEFAULT_RESET_PERIOD = 60
DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "22:00"

MAX_CHANNEL_NAME_LENGTH = 100

ALL_DAYS = frozenset({"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"})
_WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


# =============================================================================
# Coercion helpers
# =============================================================================


def coerce_int(value: Any, minimum: int, maximum: int, default: int, name: str = "value") -> int:
    """Parse ``value`` as an int clamped to ``[minimum, maximum]``, or return ``default``."""
    if isinstance(value, bool):
        logger.warning(f"Invalid integer for {name}: {value!r}, using default: {default}")
        return default
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = int(value.strip())
        except ValueError:
            logger.warning(f"Invalid integer for {name}: {value!r}, using default: {default}")
            return default
    else:
        logger.warning(f"Empty or unsupported value for {name}: {value!r}, using default: {default}")
        return default

    if parsed < minimum:
        logger.warning(f"{name} {parsed} below minimum {minimum}, coercing to {minimum}")
        return minimum
    if parsed > maximum:
        logger.warning(f"{name} {parsed} above maximum {maximum}, coercing to {maximum}")
        return maximum
    return parsed


def coerce_enum(value: Any, enum_type: type[Enum], default: Enum, name: str = "value") -> Any:
    """Resolve ``value`` to a member of ``enum_type`` by value or name, else ``default``."""
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        for member in enum_type:
            if candidate.upper() in (member.name, str(member.value).upper()):
                return member
    logger.warning(f"Invalid value for {name}: {value!r}, using default: {default.name}")
    return default


def coerce_bool(value: Any, default: bool, name: str = "value") -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    if isinstance(value, int):
        return bool(value)
    logger.warning(f"Invalid boolean for {name}: {value!r}, using default: {default}")
    return default


def _string_collection(value: Any, name: str) -> list[str]:
    """Accept a JSON array string or any iterable of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON for {name}, ignoring: {value!r}")
            return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [item for item in value if isinstance(item, str)]
    logger.warning(f"Invalid collection for {name}: {value!r}")
    return []


def normalize_time_string(value: Any, default: str = DEFAULT_START_TIME) -> str:
    """Normalize ``H:M`` to ``HH:MM`` with hour clamped to 0..23 and minute to 0..59."""
    if not isinstance(value, str) or not value.strip():
        logger.warning(f"Empty time string, using default {default}")
        return default
    parts = value.strip().split(":")
    if len(parts) != 2:
        logger.warning(f"Invalid time format: {value!r}, using default {default}")
        return default
    try:
        hour = min(max(int(parts[0]), 0), 23)
        minute = min(max(int(parts[1]), 0), 59)
    except ValueError:
        logger.warning(f"Invalid time format: {value!r}, using default {default}")
        return default
    return f"{hour:02d}:{minute:02d}"


# =============================================================================
# Models
# =============================================================================


class RateLimitConfig(BaseModel):
    """Immutable snapshot of every setting that affects blocking and accounting."""

    model_config = ConfigDict(frozen=True)

    limit_type: LimitType = LimitType.SWIPE_COUNT
    swipe_limit_count: int = Field(default=DEFAULT_SWIPE_LIMIT, ge=MIN_SWIPE_LIMIT, le=MAX_SWIPE_LIMIT)
    time_limit_minutes: int = Field(default=DEFAULT_TIME_LIMIT, ge=MIN_TIME_LIMIT, le=MAX_TIME_LIMIT)
    reset_period_type: ResetPeriodType = ResetPeriodType.PER_DAY
    reset_period_minutes: int = Field(default=DEFAULT_RESET_PERIOD, ge=MIN_RESET_PERIOD, le=MAX_RESET_PERIOD)
    blocking_mode: BlockingMode = BlockingMode.ALL_SHORTS
    block_shorts_feed: bool = True
    allowlist_enabled: bool = False
    allowed_channels: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("limit_type", mode="before")
    @classmethod
    def _coerce_limit_type(cls, value: Any) -> Any:
        return coerce_enum(value, LimitType, LimitType.SWIPE_COUNT, "limit_type")

    @field_validator("reset_period_type", mode="before")
    @classmethod
    def _coerce_reset_period_type(cls, value: Any) -> Any:
        return coerce_enum(value, ResetPeriodType, ResetPeriodType.PER_DAY, "reset_period_type")

    @field_validator("blocking_mode", mode="before")
    @classmethod
    def _coerce_blocking_mode(cls, value: Any) -> Any:
        return coerce_enum(value, BlockingMode, BlockingMode.ALL_SHORTS, "blocking_mode")

    @field_validator("swipe_limit_count", mode="before")
    @classmethod
    def _coerce_swipe_limit(cls, value: Any) -> int:
        return coerce_int(value, MIN_SWIPE_LIMIT, MAX_SWIPE_LIMIT, DEFAULT_SWIPE_LIMIT, "swipe_limit_count")

    @field_validator("time_limit_minutes", mode="before")
    @classmethod
    def _coerce_time_limit(cls, value: Any) -> int:
        return coerce_int(value, MIN_TIME_LIMIT, MAX_TIME_LIMIT, DEFAULT_TIME_LIMIT, "time_limit_minutes")

    @field_validator("reset_period_minutes", mode="before")
    @classmethod
    def _coerce_reset_period(cls, value: Any) -> int:
        return coerce_int(value, MIN_RESET_PERIOD, MAX_RESET_PERIOD, DEFAULT_RESET_PERIOD, "reset_period_minutes")

    @field_validator("block_shorts_feed", mode="before")
    @classmethod
    def _coerce_block_feed(cls, value: Any) -> bool:
        return coerce_bool(value, True, "block_shorts_feed")

    @field_validator("allowlist_enabled", mode="before")
    @classmethod
    def _coerce_allowlist_enabled(cls, value: Any) -> bool:
        return coerce_bool(value, False, "allowlist_enabled")

    @field_validator("allowed_channels", mode="before")
    @classmethod
    def _coerce_channels(cls, value: Any) -> frozenset[str]:
        channels: list[str] = []
        for channel in _string_collection(value, "allowed_channels"):
            if not channel.strip() or len(channel) > MAX_CHANNEL_NAME_LENGTH:
                logger.warning(f"Invalid channel name: {channel!r}, filtering out")
                continue
            channels.append(channel)
        return frozenset(channels)

    @property
    def time_limit_ms(self) -> int:
        return self.time_limit_minutes * 60 * 1000

    @property
    def reset_period_ms(self) -> int:
        return self.reset_period_minutes * 60 * 1000


class ScheduleConfig(BaseModel):
    """Active-hours window outside of which the guard stays idle."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    days: frozenset[str] = ALL_DAYS

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, value: Any) -> bool:
        return coerce_bool(value, False, "schedule_enabled")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_time(cls, value: Any) -> str:
        return normalize_time_string(value)

    @field_validator("days", mode="before")
    @classmethod
    def _coerce_days(cls, value: Any) -> frozenset[str]:
        valid: set[str] = set()
        for day in _string_collection(value, "schedule_days"):
            if day.strip().lower() in ALL_DAYS:
                valid.add(day.strip().lower())
            else:
                logger.warning(f"Invalid day of week: {day!r}, filtering out")
        if not valid:
            return ALL_DAYS
        return frozenset(valid)

    def is_enabled_on(self, moment: datetime) -> bool:
        return _WEEKDAY_NAMES[moment.weekday()] in self.days

    def contains(self, moment: datetime) -> bool:
        """Whether ``moment`` (local time) falls inside the active window."""
        if not self.enabled:
            return True
        if not self.is_enabled_on(moment):
            return False

        start = _parse_time(self.start_time)
        end = _parse_time(self.end_time)
        current = moment.time()
        if end > start:
            return start <= current <= end
        # Overnight window, e.g. 22:00 to 06:00
        return current >= start or current <= end


def _parse_time(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))
