# tests/test_policy.py
"""Tests for the blocking policy decision table."""

import pytest

from shorts_guard.models import (
    ActionableRef,
    CloseReason,
    ContentSnapshot,
    RateLimitConfig,
    SessionStatus,
    TransitionKind,
    UiNode,
    Verdict,
)
from shorts_guard.policy import BlockingPolicy, is_channel_allowed, normalize_channel

BACK = ActionableRef(node=UiNode(class_name="android.widget.ImageButton", clickable=True))

ENTERED = TransitionKind.ENTERED
SWIPED = TransitionKind.SWIPED


def snapshot(title="T1", account="acct1", back=True) -> ContentSnapshot:
    return ContentSnapshot(title=title, account=account, exit_affordance=BACK if back else None)


def status(limit_reached=False, swipe_count=0) -> SessionStatus:
    return SessionStatus(active=True, swipe_count=swipe_count, limit_reached=limit_reached)


@pytest.fixture
def policy():
    return BlockingPolicy()


# ============================================================================
# Channel allowlist
# ============================================================================


class TestNormalizeChannel:
    @pytest.mark.parametrize(
        "raw,expected",
        [("@Creator", "creator"), ("  creator ", "creator"), (" @ Creator", "creator"), ("CREATOR", "creator")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_channel(raw) == expected

    def test_only_one_prefix_removed(self):
        assert normalize_channel("@@x") == "@x"


class TestIsChannelAllowed:
    def test_disabled(self):
        config = RateLimitConfig(allowlist_enabled=False, allowed_channels=["@creator"])
        assert not is_channel_allowed("creator", config)

    def test_case_and_prefix_insensitive(self):
        config = RateLimitConfig(allowlist_enabled=True, allowed_channels=["@creator"])
        assert is_channel_allowed("Creator", config)
        assert is_channel_allowed("@CREATOR ", config)
        assert not is_channel_allowed("creator2", config)

    def test_empty_list(self):
        assert not is_channel_allowed("creator", RateLimitConfig(allowlist_enabled=True))


# ============================================================================
# ENTERED
# ============================================================================


class TestEntered:
    def test_all_shorts_blocks_entry(self, policy):
        # Entering closes in ALL_SHORTS mode
        verdict = policy.decide(snapshot(), status(), RateLimitConfig(blocking_mode="ALL_SHORTS"), ENTERED)
        assert verdict == Verdict.close(CloseReason.ALL_SHORTS_BLOCKED)

    def test_feed_entry_blocked(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=5)
        verdict = policy.decide(snapshot(back=False), status(), config, ENTERED)
        assert verdict.reason == CloseReason.FEED_BLOCKED

    def test_feed_check_precedes_mode(self, policy):
        verdict = policy.decide(snapshot(back=False), status(), RateLimitConfig(blocking_mode="ALL_SHORTS"), ENTERED)
        assert verdict.reason == CloseReason.FEED_BLOCKED

    def test_feed_entry_allowed_when_not_blocked(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=5, block_shorts_feed=False)
        assert not policy.decide(snapshot(back=False), status(), config, ENTERED).should_close

    def test_zero_budget_feed_entry(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=0, block_shorts_feed=False)
        verdict = policy.decide(snapshot(back=False), status(limit_reached=True), config, ENTERED)
        assert verdict.reason == CloseReason.ZERO_SWIPE_FEED

    def test_zero_budget_single_short_allowed(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=0)
        verdict = policy.decide(snapshot(back=True), status(limit_reached=True), config, ENTERED)
        assert verdict == Verdict.allow()

    def test_limit_already_reached(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=3)
        verdict = policy.decide(snapshot(), status(limit_reached=True, swipe_count=3), config, ENTERED)
        assert verdict.reason == CloseReason.LIMIT_ALREADY_REACHED

    def test_time_limit_already_reached(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", limit_type="TIME_LIMIT", swipe_limit_count=0)
        verdict = policy.decide(snapshot(), status(limit_reached=True), config, ENTERED)
        assert verdict.reason == CloseReason.LIMIT_ALREADY_REACHED

    def test_within_budget_allowed(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=3)
        assert policy.decide(snapshot(), status(), config, ENTERED) == Verdict.allow()


# ============================================================================
# SWIPED
# ============================================================================


class TestSwiped:
    def test_all_shorts_blocks_swipe(self, policy):
        config = RateLimitConfig(blocking_mode="ALL_SHORTS")
        verdict = policy.decide(snapshot("T2", "acct2"), status(), config, SWIPED)
        assert verdict.reason == CloseReason.ALL_SHORTS_BLOCKED

    def test_limit_reached_on_swipe(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=3)
        assert not policy.decide(snapshot(), status(swipe_count=2), config, SWIPED).should_close
        verdict = policy.decide(snapshot(), status(limit_reached=True, swipe_count=3), config, SWIPED)
        assert verdict.reason == CloseReason.LIMIT_REACHED

    def test_feed_setting_ignored_on_swipe(self, policy):
        config = RateLimitConfig(blocking_mode="ONLY_SWIPING", swipe_limit_count=3)
        assert not policy.decide(snapshot(back=False), status(), config, SWIPED).should_close

    def test_cleared_is_allowed(self, policy):
        assert policy.decide(snapshot(), status(), RateLimitConfig(), TransitionKind.CLEARED) == Verdict.allow()


# ============================================================================
# Allowlist override
# ============================================================================


class TestAllowlistOverride:
    @pytest.mark.parametrize("mode", ["ALL_SHORTS", "ONLY_SWIPING"])
    @pytest.mark.parametrize("event", [ENTERED, SWIPED])
    def test_allowlisted_account_never_closed(self, policy, mode, event):
        config = RateLimitConfig(
            blocking_mode=mode,
            allowlist_enabled=True,
            allowed_channels=["@creator"],
        )
        verdict = policy.decide(snapshot("X", "Creator", back=False), status(limit_reached=True), config, event)
        assert verdict == Verdict.allow(allowlisted=True)

    def test_allow_without_close_is_not_marked(self, policy):
        config = RateLimitConfig(
            blocking_mode="ONLY_SWIPING",
            swipe_limit_count=5,
            allowlist_enabled=True,
            allowed_channels=["creator"],
        )
        verdict = policy.decide(snapshot("X", "creator"), status(), config, ENTERED)
        assert verdict == Verdict.allow()
