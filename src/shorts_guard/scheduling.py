# shorts_guard/scheduling.py
"""
Time sources and cancellable timers.

``SessionManager`` never talks to a clock or an event loop directly; it is
given a ``Clock`` and a ``Scheduler``. The asyncio scheduler runs callbacks on
the same loop that processes UI notifications, so a firing reset never races
an in-flight notification.

Usage::

    loop = asyncio.get_running_loop()
    manager = SessionManager(store.rate_limit_config, scheduler=AsyncioScheduler(loop))
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import datetime, timedelta
from datetime import time as dt_time
from typing import Protocol, runtime_checkable

from shorts_guard.exceptions import SchedulerUnavailableError


@runtime_checkable
class Clock(Protocol):
    """Source of wall-clock time."""

    def now_ms(self) -> int: ...

    def now(self) -> datetime: ...


@runtime_checkable
class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs a callback once after a delay on the processing context."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask: ...


class SystemClock:
    """Clock backed by the host's local time."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def now(self) -> datetime:
        return datetime.now()


class AsyncioScheduler:
    """
    Scheduler on an asyncio event loop.

    The loop is bound at construction: either the one given or the loop
    running at that time. Callbacks must be scheduled from the loop's thread.

    Raises:
        SchedulerUnavailableError: No loop was given and none is running.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise SchedulerUnavailableError(
                    "No running event loop; pass a loop or a scheduler explicitly"
                ) from None
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay_ms / 1000.0, callback)


def millis_until_next_midnight(now: datetime) -> int:
    """
    Milliseconds from ``now`` until the following local midnight.

    Naive values are local wall-clock time. Both instants are compared as
    absolute timestamps, so days with a daylight-saving shift are 23 or 25
    hours long.
    """
    next_midnight = datetime.combine(now.date() + timedelta(days=1), dt_time.min, tzinfo=now.tzinfo)
    return round((next_midnight.timestamp() - now.timestamp()) * 1000)
