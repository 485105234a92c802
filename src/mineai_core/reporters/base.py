# src/mineai_core/reporters/base.py
from abc import ABC, abstractmethod

from mineai_core.schema.action import Action, ActionResult
from mineai_core.schema.history import HistoryEntry
from mineai_core.schema.plan import ActionPlan


class BaseReporter(ABC):
    """
    Base class for reporters.
    Console, web and chat-relay reporters all derive from it.
    """

    @abstractmethod
    def action_finished(self, index: int, total: int, action: Action, result: ActionResult) -> None:
        """Called once per dispatched action, in plan order."""
        pass

    def plan_started(self, instruction: str, plan: ActionPlan) -> None:
        pass

    def command_finished(self, entry: HistoryEntry) -> None:
        pass
