# shorts_guard/models/ui_node.py
"""
Read-only view of the platform's UI hierarchy.

The host platform owns the real node objects; adapters convert them into
``UiNode`` values (or build them from dumps) before handing them to the guard.
All traversal is index based and total: a missing child is ``None``, never an
exception.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UiNode(BaseModel):
    """A single element of a UI hierarchy snapshot."""

    package_name: str | None = None
    class_name: str = ""
    text: str | None = None
    clickable: bool = False
    children: list[UiNode | None] = Field(default_factory=list)

    # Reported child count; platforms can report more children than they hand out
    child_count: int | None = None

    # Opaque platform object so adapters can map actions back to the real element
    handle: Any = Field(default=None, exclude=True, repr=False)

    @model_validator(mode="after")
    def _default_child_count(self) -> UiNode:
        if self.child_count is None:
            self.child_count = len(self.children)
        return self

    def child(self, index: int) -> UiNode | None:
        """Return the child at ``index`` or None when it is out of range or absent."""
        if index < 0 or index >= (self.child_count or 0) or index >= len(self.children):
            return None
        return self.children[index]

    def iter_children(self) -> Iterator[UiNode]:
        """Yield every present child within the reported child count."""
        for index in range(self.child_count or 0):
            node = self.child(index)
            if node is not None:
                yield node

    def is_a(self, class_name: str) -> bool:
        return self.class_name == class_name


class ActionableRef(BaseModel):
    """Reference to a clickable element that can be asked to perform a click."""

    model_config = ConfigDict(frozen=True)

    node: UiNode = Field(repr=False)

    @property
    def clickable(self) -> bool:
        return self.node.clickable


def dump_tree(node: UiNode | None, max_depth: int = 64) -> str:
    """Render an indented outline of ``node`` for diagnostics."""
    lines: list[str] = []

    def _walk(current: UiNode | None, depth: int) -> None:
        indent = "  " * depth
        if current is None:
            lines.append(f"{indent}<missing>")
            return
        text = f" text={current.text!r}" if current.text else ""
        flags = " clickable" if current.clickable else ""
        lines.append(f"{indent}{current.class_name or '<untyped>'}{text}{flags} children={current.child_count}")
        if depth >= max_depth:
            if current.children:
                lines.append(f"{indent}  ...")
            return
        for child in current.children:
            _walk(child, depth + 1)

    _walk(node, 0)
    return "\n".join(lines)
