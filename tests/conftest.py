# tests/conftest.py
"""
Shared pytest fixtures for shorts_guard tests.

Time never comes from the host: ``FakeClock`` is advanced explicitly and
``ManualScheduler`` fires reset timers only when a test advances it.
"""

import logging
from datetime import datetime, timedelta

import pytest

from shorts_guard.config import TARGET_PACKAGE
from shorts_guard.models.ui_node import ActionableRef, UiNode
from shorts_guard.settings import SettingsStore

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logging.getLogger("shorts_guard").setLevel(logging.DEBUG)

FRAME = "android.widget.FrameLayout"
DRAWER = "androidx.drawerlayout.widget.DrawerLayout"
SCROLL = "android.widget.ScrollView"
RECYCLER = "android.support.v7.widget.RecyclerView"
VIEW_GROUP = "android.view.ViewGroup"
IMAGE_BUTTON = "android.widget.ImageButton"

# Monday
START = datetime(2026, 3, 2, 12, 0, 0)
START_MS = 1_772_452_800_000


# ============================================================================
# Clock and scheduler
# ============================================================================


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START, start_ms: int = START_MS):
        self._start = start
        self._start_ms = start_ms
        self._offset_ms = 0

    def now_ms(self) -> int:
        return self._start_ms + self._offset_ms

    def now(self) -> datetime:
        return self._start + timedelta(milliseconds=self._offset_ms)

    def advance(self, ms: int) -> None:
        self._offset_ms += ms

    def set(self, moment: datetime) -> None:
        self._offset_ms = int((moment - self._start).total_seconds() * 1000)


class ManualTask:
    def __init__(self, due_ms: int, delay_ms: int, callback):
        self.due_ms = due_ms
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers fire in due order while the clock is advanced."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.tasks: list[ManualTask] = []

    def call_later(self, delay_ms: int, callback) -> ManualTask:
        task = ManualTask(self.clock.now_ms() + delay_ms, delay_ms, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> list[ManualTask]:
        return [task for task in self.tasks if not task.cancelled and not task.fired]

    def advance(self, ms: int) -> None:
        target = self.clock.now_ms() + ms
        while True:
            due = [task for task in self.pending if task.due_ms <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due_ms)
            self.clock.advance(task.due_ms - self.clock.now_ms())
            task.fired = True
            task.callback()
        self.clock.advance(target - self.clock.now_ms())


class BrokenScheduler:
    def call_later(self, delay_ms, callback):
        raise RuntimeError("no timers available")


# ============================================================================
# Platform fakes
# ============================================================================


class RecordingActions:
    """PlatformActions fake that records what was dispatched."""

    def __init__(self, click_result: bool = True, back_result: bool = True):
        self.click_result = click_result
        self.back_result = back_result
        self.clicks: list[ActionableRef] = []
        self.backs = 0
        self.fail_click = False
        self.fail_back = False

    def click(self, ref: ActionableRef) -> bool:
        if self.fail_click:
            raise RuntimeError("click failed")
        self.clicks.append(ref)
        return self.click_result

    def global_back(self) -> bool:
        if self.fail_back:
            raise RuntimeError("back failed")
        self.backs += 1
        return self.back_result

    @property
    def dispatched(self) -> int:
        return len(self.clicks) + self.backs


class RecordingNotifier:
    def __init__(self):
        self.messages: list[str] = []

    def show(self, message: str) -> None:
        self.messages.append(message)


# ============================================================================
# UI tree builders
# ============================================================================


def node(class_name: str, *children, text=None, clickable=False, package=None) -> UiNode:
    return UiNode(
        package_name=package,
        class_name=class_name,
        text=text,
        clickable=clickable,
        children=list(children),
    )


def info_group(title: str | None = None, account: str | None = None) -> UiNode:
    """Info group holding a title slot and, optionally, an account slot."""
    title_group = node(VIEW_GROUP, node(VIEW_GROUP, text=title))
    slots = [title_group]
    if account is not None:
        slots.append(node(VIEW_GROUP, node(VIEW_GROUP, text=account)))
    return node(VIEW_GROUP, node(VIEW_GROUP, *slots))


def shorts_tree(
    title: str | None = "Funny cat",
    account: str | None = "@cats",
    back_button: bool = True,
    back_clickable: bool = True,
    package: str | None = TARGET_PACKAGE,
    info_groups: list[UiNode] | None = None,
) -> UiNode:
    """Build a hierarchy shaped like the short-form video screen."""
    groups = info_groups if info_groups is not None else [info_group(title, account)]
    content_carrier = node(RECYCLER, node(FRAME, node(VIEW_GROUP, *groups)))

    scroll_children = [content_carrier]
    if back_button:
        scroll_children.append(node(VIEW_GROUP, node(IMAGE_BUTTON, clickable=back_clickable)))

    scroll = node(SCROLL, *scroll_children)
    return node(FRAME, node(DRAWER, node(FRAME, node(FRAME, scroll))), package=package)


def scroll_of(root: UiNode) -> UiNode:
    return root.children[0].children[0].children[0].children[0]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def actions():
    return RecordingActions()


@pytest.fixture
def notifier():
    return RecordingNotifier()


class UiTrees:
    """Builders and type tags for UI hierarchies, exposed through the ``ui`` fixture."""

    FRAME = FRAME
    DRAWER = DRAWER
    SCROLL = SCROLL
    RECYCLER = RECYCLER
    VIEW_GROUP = VIEW_GROUP
    IMAGE_BUTTON = IMAGE_BUTTON

    node = staticmethod(node)
    info_group = staticmethod(info_group)
    shorts_tree = staticmethod(shorts_tree)
    scroll_of = staticmethod(scroll_of)


@pytest.fixture
def ui():
    return UiTrees


@pytest.fixture
def tree():
    """Factory for target-screen hierarchies."""
    return shorts_tree


@pytest.fixture
def make_actions():
    """Factory for RecordingActions with custom click/back results."""
    return RecordingActions


@pytest.fixture
def broken_scheduler():
    return BrokenScheduler()


@pytest.fixture
def settings():
    """Enabled settings store with defaults otherwise."""
    return SettingsStore({"app_enabled": True})
