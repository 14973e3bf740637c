# shorts_guard/models/events.py
"""Raw UI-change notifications delivered by the host platform."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

from .enums import UiEventType
from .ui_node import UiNode


class UiEvent(BaseModel):
    """
    One platform notification.

    ``root`` is the hierarchy of the active window when the platform delivers
    it with the event; otherwise the service asks its root provider.
    """

    package_name: str | None = None
    event_type: UiEventType = UiEventType.OTHER
    root: UiNode | None = None

    @field_validator("event_type", mode="before")
    @classmethod
    def _unknown_types_are_other(cls, value: Any) -> Any:
        if isinstance(value, UiEventType):
            return value
        try:
            return UiEventType(value)
        except ValueError:
            return UiEventType.OTHER
