# tests/test_executor.py
"""Tests for ActionExecutor close paths and back-action cooldown."""

import pytest

from shorts_guard.executor import ActionExecutor, Notifier, PlatformActions
from shorts_guard.models import ActionableRef, ContentSnapshot, UiNode


def snapshot(clickable=True, back=True) -> ContentSnapshot:
    ref = ActionableRef(node=UiNode(class_name="android.widget.ImageButton", clickable=clickable)) if back else None
    return ContentSnapshot(title="T", account="a", exit_affordance=ref)


@pytest.fixture
def executor(actions, notifier, clock):
    return ActionExecutor(actions, notifier, clock=clock, cooldown_ms=100)


class TestProtocols:
    def test_fakes_satisfy_protocols(self, actions, notifier):
        assert isinstance(actions, PlatformActions)
        assert isinstance(notifier, Notifier)


class TestClosePaths:
    def test_clicks_exit_affordance(self, executor, actions, notifier):
        target = snapshot()
        assert executor.close(target, "All Shorts are blocked")
        assert actions.clicks == [target.exit_affordance]
        assert actions.backs == 0
        assert notifier.messages == ["All Shorts are blocked"]

    def test_global_back_without_affordance(self, executor, actions):
        assert executor.close(snapshot(back=False), "blocked")
        assert actions.clicks == []
        assert actions.backs == 1

    def test_not_clickable_falls_back(self, executor, actions):
        assert executor.close(snapshot(clickable=False), "blocked")
        assert actions.clicks == []
        assert actions.backs == 1

    def test_rejected_click_falls_back(self, make_actions, notifier, clock):
        actions = make_actions(click_result=False)
        executor = ActionExecutor(actions, notifier, clock=clock)
        assert executor.close(snapshot(), "blocked")
        assert len(actions.clicks) == 1
        assert actions.backs == 1

    def test_failed_back_still_counts_as_dispatched(self, make_actions, notifier, clock):
        actions = make_actions(back_result=False)
        executor = ActionExecutor(actions, notifier, clock=clock)
        assert executor.close(snapshot(back=False), "blocked")
        assert executor.last_closed_ms == clock.now_ms()

    def test_works_without_notifier(self, actions, clock):
        executor = ActionExecutor(actions, clock=clock)
        assert executor.close(snapshot(), "blocked")

    def test_notifier_errors_are_contained(self, actions, clock):
        class BrokenNotifier:
            def show(self, message):
                raise RuntimeError("toast failed")

        executor = ActionExecutor(actions, BrokenNotifier(), clock=clock)
        assert executor.close(snapshot(back=False), "blocked")
        assert actions.backs == 1


class TestCooldown:
    def test_burst_collapses_to_one_back(self, executor, actions, notifier, clock):
        assert executor.close(snapshot(back=False), "blocked")
        clock.advance(50)
        assert not executor.close(snapshot(back=False), "blocked")
        clock.advance(49)
        assert not executor.close(snapshot(back=False), "blocked")
        assert actions.backs == 1
        # Every close still surfaces its message
        assert len(notifier.messages) == 3

    def test_back_allowed_after_cooldown(self, executor, actions, clock):
        executor.close(snapshot(back=False), "blocked")
        clock.advance(100)
        assert executor.close(snapshot(back=False), "blocked")
        assert actions.backs == 2

    def test_click_not_subject_to_cooldown(self, executor, actions, clock):
        executor.close(snapshot(back=False), "blocked")
        clock.advance(10)
        assert executor.close(snapshot(), "blocked")
        assert len(actions.clicks) == 1

    def test_click_starts_cooldown(self, executor, actions, clock):
        executor.close(snapshot(), "blocked")
        clock.advance(10)
        assert not executor.close(snapshot(back=False), "blocked")
        assert actions.backs == 0

    def test_skipped_back_does_not_extend_cooldown(self, executor, actions, clock):
        executor.close(snapshot(back=False), "blocked")
        clock.advance(60)
        executor.close(snapshot(back=False), "blocked")
        clock.advance(40)
        assert executor.close(snapshot(back=False), "blocked")
        assert actions.backs == 2


class TestEmergencyBack:
    def test_click_failure_uses_emergency_back(self, executor, actions):
        actions.fail_click = True
        assert executor.close(snapshot(), "blocked")
        assert actions.backs == 1

    def test_emergency_back_ignores_cooldown(self, executor, actions, clock):
        executor.close(snapshot(back=False), "blocked")
        actions.fail_click = True
        clock.advance(10)
        assert executor.close(snapshot(), "blocked")
        assert actions.backs == 2

    def test_total_failure_returns_false(self, executor, actions):
        actions.fail_click = True
        actions.fail_back = True
        assert executor.close(snapshot(), "blocked") is False
