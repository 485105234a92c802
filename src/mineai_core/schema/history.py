from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from mineai_core.schema.action import Action, ActionResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryEntry(BaseModel):
    """One executed instruction."""

    model_config = ConfigDict(frozen=True)

    input: str
    actions: tuple[Action, ...] = ()
    results: tuple[ActionResult, ...] = ()
    success_count: int = 0
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def total(self) -> int:
        return len(self.actions)


class ExecutorStatus(BaseModel):
    """Derived view of the pipeline; never stored."""

    is_executing: bool
    queue_length: int = 0
    history_count: int = 0
