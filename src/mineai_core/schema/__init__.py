"""Pydantic models shared by the parser, the pipeline and the world agent."""

from mineai_core.schema.action import Action, ActionKind, ActionResult
from mineai_core.schema.history import ExecutorStatus, HistoryEntry
from mineai_core.schema.plan import ActionPlan, IntermediateTask
from mineai_core.schema.state import BlockRef, EntityRef, GameState, ItemStack, Vec3

__all__ = [
    "Action",
    "ActionKind",
    "ActionPlan",
    "ActionResult",
    "BlockRef",
    "EntityRef",
    "ExecutorStatus",
    "GameState",
    "HistoryEntry",
    "IntermediateTask",
    "ItemStack",
    "Vec3",
]
