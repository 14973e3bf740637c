# shorts_guard/models/verdict.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .enums import CloseReason, VerdictAction


class Verdict(BaseModel):
    """Outcome of a blocking decision."""

    model_config = ConfigDict(frozen=True)

    action: VerdictAction
    reason: CloseReason | None = None

    # True when an allowlisted channel overrode a close
    allowlisted: bool = False

    @classmethod
    def allow(cls, allowlisted: bool = False) -> Verdict:
        return cls(action=VerdictAction.ALLOW, allowlisted=allowlisted)

    @classmethod
    def close(cls, reason: CloseReason) -> Verdict:
        return cls(action=VerdictAction.CLOSE, reason=reason)

    @property
    def should_close(self) -> bool:
        return self.action == VerdictAction.CLOSE
