# shorts_guard/matcher.py
"""
Structural matcher for the short-form video screen.

The watched screen's layout is owned by a third-party application and shifts
between releases, so the matcher only relies on generic structural cues:

- A fixed prefix of type-tagged containers (outer frame, drawer, two nested
  frames, the scroll container). Any mismatch here rejects the tree; there is
  no backtracking.
- Below the scroll container, every child is classified by type tag into the
  content carrier and the back-affordance carrier, since their positions are
  not stable.
- Inside the content carrier, title and account sit at varying nesting
  positions, so every sibling branch is searched and the first non-empty value
  for each field wins.

Usage::

    matcher = StructureMatcher()
    snapshot = matcher.match(root)  # ContentSnapshot or None
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from shorts_guard.config import TARGET_PACKAGE
from shorts_guard.models.content import ContentSnapshot
from shorts_guard.models.ui_node import ActionableRef, UiNode, dump_tree

logger = logging.getLogger(__name__)


class LayoutSignature(BaseModel):
    """Type tags the matcher expects at each structural position."""

    model_config = ConfigDict(frozen=True)

    outer_container: str = "android.widget.FrameLayout"
    drawer_container: str = "androidx.drawerlayout.widget.DrawerLayout"
    generic_container: str = "android.widget.FrameLayout"
    scroll_container: str = "android.widget.ScrollView"
    content_carrier: str = "android.support.v7.widget.RecyclerView"
    back_carrier: str = "android.view.ViewGroup"
    info_group: str = "android.view.ViewGroup"
    text_leaf: str = "android.view.ViewGroup"
    back_button: str = "android.widget.ImageButton"


class StructureMatcher:
    """Extracts a ContentSnapshot from a UI tree, or decides it is not the target screen."""

    def __init__(
        self,
        target_package: str = TARGET_PACKAGE,
        signature: LayoutSignature | None = None,
    ) -> None:
        self.target_package = target_package
        self.signature = signature or LayoutSignature()

    def match(self, root: UiNode | None) -> ContentSnapshot | None:
        """Return the snapshot shown in ``root``, or None. Never raises."""
        if root is None:
            return None
        try:
            if root.package_name != self.target_package:
                logger.debug(f"Not the target app, package: {root.package_name}")
                return None
            return self._match_structure(root)
        except Exception:
            logger.exception("Unexpected error while matching UI tree")
            try:
                logger.debug("Tree at time of failure:\n%s", dump_tree(root))
            except Exception:
                logger.debug("Tree dump failed", exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Fixed prefix
    # ------------------------------------------------------------------

    def _match_structure(self, root: UiNode) -> ContentSnapshot | None:
        sig = self.signature
        if not root.is_a(sig.outer_container):
            logger.debug(f"Root is not {sig.outer_container}: {root.class_name}")
            return None

        scroll = root
        for expected in (sig.drawer_container, sig.generic_container, sig.generic_container, sig.scroll_container):
            scroll = scroll.child(0)
            if scroll is None:
                logger.debug(f"Missing {expected} in fixed path")
                return None
            if not scroll.is_a(expected):
                logger.debug(f"{expected} not found: {scroll.class_name}")
                return None

        content_carrier, back_carrier = self._classify_scroll_children(scroll)
        title, account = self._extract_title_and_account(content_carrier)
        exit_affordance = self._extract_back_button(back_carrier)

        if not title or not account:
            return None
        return ContentSnapshot(title=title, account=account, exit_affordance=exit_affordance)

    def _classify_scroll_children(self, scroll: UiNode) -> tuple[UiNode | None, UiNode | None]:
        content_carrier: UiNode | None = None
        back_carrier: UiNode | None = None
        for child in scroll.iter_children():
            if child.is_a(self.signature.content_carrier):
                content_carrier = child
            elif child.is_a(self.signature.back_carrier):
                back_carrier = child
        return content_carrier, back_carrier

    # ------------------------------------------------------------------
    # Fan-out search
    # ------------------------------------------------------------------

    def _extract_title_and_account(self, content_carrier: UiNode | None) -> tuple[str, str]:
        if content_carrier is None:
            logger.debug("Content carrier not found")
            return "", ""

        frame = content_carrier.child(0)
        if frame is None or not frame.is_a(self.signature.generic_container):
            return "", ""

        title = ""
        account = ""
        for info_group in self._iter_info_groups(frame):
            if not account:
                account = self._extract_account(info_group)
            if not title:
                title = self._extract_title(info_group)
            if title and account:
                break
        return title, account

    def _iter_info_groups(self, frame: UiNode):
        group_tag = self.signature.info_group
        for branch in frame.iter_children():
            if not branch.is_a(group_tag) or not branch.child_count:
                continue
            for info_group in branch.iter_children():
                if info_group.is_a(group_tag) and info_group.child_count:
                    yield info_group

    def _extract_account(self, info_group: UiNode) -> str:
        sig = self.signature
        header = info_group.child(0)
        if header is None or not header.is_a(sig.info_group) or (header.child_count or 0) <= 1:
            return ""
        account_group = header.child(1)
        if account_group is None or not account_group.is_a(sig.info_group):
            return ""
        return _leaf_text(account_group.child(0), sig.text_leaf)

    def _extract_title(self, info_group: UiNode) -> str:
        sig = self.signature
        header = info_group.child(0)
        if header is None or not header.is_a(sig.info_group):
            return ""
        title_group = header.child(0)
        if title_group is None or not title_group.is_a(sig.info_group):
            return ""
        return _leaf_text(title_group.child(0), sig.text_leaf)

    def _extract_back_button(self, back_carrier: UiNode | None) -> ActionableRef | None:
        if back_carrier is None:
            return None
        button = back_carrier.child(0)
        if button is None or not button.is_a(self.signature.back_button):
            return None
        return ActionableRef(node=button)


def _leaf_text(node: UiNode | None, leaf_tag: str) -> str:
    if node is None or not node.is_a(leaf_tag):
        return ""
    return node.text or ""
