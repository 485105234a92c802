"""Reporter Protocol: interface for reporting plan and action outcomes."""

from typing import Protocol, runtime_checkable

from mineai_core.schema.action import Action, ActionResult
from mineai_core.schema.history import HistoryEntry
from mineai_core.schema.plan import ActionPlan


@runtime_checkable
class Reporter(Protocol):
    """
    Standard interface for status reporting.
    Implementations can be a console logger, a web UI, or a chat relay.
    """

    def plan_started(self, instruction: str, plan: ActionPlan) -> None:
        ...

    def action_finished(self, index: int, total: int, action: Action, result: ActionResult) -> None:
        ...

    def command_finished(self, entry: HistoryEntry) -> None:
        ...
