# shorts_guard/models/content.py
"""Content identity extracted from the watched screen."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .enums import TransitionKind
from .ui_node import ActionableRef


class ContentSnapshot(BaseModel):
    """
    One identifiable short currently on screen.

    Identity is ``(title, account)`` only; whether an exit affordance was found
    does not take part in equality, so dedup is content-identity based.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    account: str = Field(..., min_length=1)
    exit_affordance: ActionableRef | None = Field(default=None, repr=False)

    @property
    def has_exit_affordance(self) -> bool:
        return self.exit_affordance is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentSnapshot):
            return NotImplemented
        return self.title == other.title and self.account == other.account

    def __hash__(self) -> int:
        return hash((self.title, self.account))


class Transition(BaseModel):
    """A state change produced by the content watcher."""

    kind: TransitionKind
    snapshot: ContentSnapshot | None = None
