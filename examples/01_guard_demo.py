#!/usr/bin/env python3
"""
01_guard_demo.py - Shorts guard walkthrough

Demonstrates:
1. StructureMatcher - recognizing the short-form screen in a UI tree
2. GuardService in ALL_SHORTS mode - every short is closed
3. ONLY_SWIPING with a swipe budget - closing once the budget is spent
4. Allowlisted channels - never closed, still accounted
5. Idle-timeout resets driven by the asyncio event loop

No device required: UI trees are built in memory and actions are printed.
"""

import asyncio
import logging

from shorts_guard import (
    ActionableRef,
    AsyncioScheduler,
    GuardService,
    SettingsStore,
    StructureMatcher,
    UiEvent,
    UiEventType,
    UiNode,
)
from shorts_guard.config import TARGET_PACKAGE
from shorts_guard.models import dump_tree

logging.basicConfig(level=logging.WARNING)


def section(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"{title}")
    print("=" * 60)


def node(class_name: str, *children: UiNode, text: str | None = None, clickable: bool = False) -> UiNode:
    return UiNode(class_name=class_name, text=text, clickable=clickable, children=list(children))


def shorts_screen(title: str, account: str) -> UiNode:
    """A hierarchy shaped like the short-form video screen."""
    group = "android.view.ViewGroup"
    header = node(group, node(group, node(group, text=title)), node(group, node(group, text=account)))
    content = node("android.support.v7.widget.RecyclerView", node("android.widget.FrameLayout", node(group, node(group, header))))
    back = node(group, node("android.widget.ImageButton", clickable=True))
    scroll = node("android.widget.ScrollView", content, back)
    root = node(
        "android.widget.FrameLayout",
        node(
            "androidx.drawerlayout.widget.DrawerLayout",
            node("android.widget.FrameLayout", node("android.widget.FrameLayout", scroll)),
        ),
    )
    root.package_name = TARGET_PACKAGE
    return root


def content_changed(title: str, account: str = "@creator") -> UiEvent:
    return UiEvent(
        package_name=TARGET_PACKAGE,
        event_type=UiEventType.WINDOW_CONTENT_CHANGED,
        root=shorts_screen(title, account),
    )


class PrintingActions:
    def click(self, ref: ActionableRef) -> bool:
        print(f"    -> click {ref.node.class_name}")
        return True

    def global_back(self) -> bool:
        print("    -> global back")
        return True


class PrintingNotifier:
    def show(self, message: str) -> None:
        print(f"    [toast] {message}")


async def main() -> None:
    print("Shorts Guard Demo")

    # ------------------------------------------------------------------ #
    section("1. Matching a UI tree")
    # ------------------------------------------------------------------ #

    screen = shorts_screen("Funny cat", "@cats")
    print(dump_tree(screen))
    snapshot = StructureMatcher().match(screen)
    print(f"\nMatched: {snapshot.title!r} by {snapshot.account!r}, back button: {snapshot.has_exit_affordance}")

    scheduler = AsyncioScheduler(asyncio.get_running_loop())

    # ------------------------------------------------------------------ #
    section("2. ALL_SHORTS mode")
    # ------------------------------------------------------------------ #

    store = SettingsStore({"app_enabled": True, "blocking_mode": "ALL_SHORTS"})
    service = GuardService(PrintingActions(), store, PrintingNotifier(), scheduler=scheduler)
    for title in ("First", "Second"):
        print(f"  event: {title}")
        verdict = service.process_notification(content_changed(title))
        print(f"  verdict: {verdict.action.value} ({verdict.reason.value if verdict.reason else '-'})")
    service.shutdown()

    # ------------------------------------------------------------------ #
    section("3. ONLY_SWIPING with a budget of 3 swipes")
    # ------------------------------------------------------------------ #

    store = SettingsStore(
        {
            "app_enabled": True,
            "blocking_mode": "ONLY_SWIPING",
            "limit_type": "SWIPE_COUNT",
            "swipe_limit_count": "3",
        }
    )
    service = GuardService(
        PrintingActions(),
        store,
        PrintingNotifier(),
        scheduler=scheduler,
        on_limit_reached=lambda: print("    (limit reached hook)"),
    )
    for title in ("T1", "T2", "T3", "T4"):
        verdict = service.process_notification(content_changed(title))
        print(f"  {title}: {verdict.action.value}, swipes={service.session_manager.swipe_count}")
    print(f"  Message: {service.get_limit_reached_message()}")
    service.shutdown()

    # ------------------------------------------------------------------ #
    section("4. Allowlisted channel")
    # ------------------------------------------------------------------ #

    store = SettingsStore(
        {
            "app_enabled": True,
            "blocking_mode": "ALL_SHORTS",
            "allowlist_enabled": True,
            "allowed_channels": '["@Creator"]',
        }
    )
    service = GuardService(PrintingActions(), store, PrintingNotifier(), scheduler=scheduler)
    for title in ("A", "B"):
        verdict = service.process_notification(content_changed(title, account="creator"))
        print(f"  {title}: {verdict.action.value}, allowlisted={verdict.allowlisted}")
    print(f"  Swipes still accounted: {service.session_manager.swipe_count}")
    service.shutdown()

    # ------------------------------------------------------------------ #
    section("5. Idle-timeout reset on the event loop")
    # ------------------------------------------------------------------ #

    store = SettingsStore(
        {
            "app_enabled": True,
            "blocking_mode": "ONLY_SWIPING",
            "swipe_limit_count": "10",
            "reset_period_type": "AFTER_SESSION_END",
        }
    )
    reset = asyncio.Event()
    service = GuardService(PrintingActions(), store, PrintingNotifier(), scheduler=scheduler, on_session_reset=reset.set)
    service.process_notification(content_changed("One"))
    service.process_notification(content_changed("Two"))
    print(f"  Active: {service.session_manager.is_active}, swipes={service.session_manager.swipe_count}")

    # Shorten the pending reset for the demo
    service.session_manager.schedule_reset(200)
    await asyncio.wait_for(reset.wait(), timeout=5)
    print(f"  After reset: active={service.session_manager.is_active}, swipes={service.session_manager.swipe_count}")
    service.shutdown()

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
