from loguru import logger

from mineai_core.reporters.base import BaseReporter
from mineai_core.schema.action import Action, ActionResult
from mineai_core.schema.history import HistoryEntry
from mineai_core.schema.plan import ActionPlan


class ConsoleReporter(BaseReporter):
    """Writes the plan and a per-action success/failure breakdown to the terminal."""

    def plan_started(self, instruction: str, plan: ActionPlan) -> None:
        logger.info("📋 Plan: {}", plan.summary or "(no summary)")
        if plan.source == "fallback":
            logger.warning("Language model unavailable ({}); using keyword fallback", plan.error or "no reply")
        logger.info("📝 Actions: {}", len(plan.actions))

    def action_finished(self, index: int, total: int, action: Action, result: ActionResult) -> None:
        if result.success:
            logger.info("[{}/{}] ✅ {} ({}ms)", index, total, action.label(), result.duration_ms)
        else:
            logger.warning(
                "[{}/{}] ❌ {} ({}ms) error={}",
                index,
                total,
                action.label(),
                result.duration_ms,
                result.error,
            )

    def command_finished(self, entry: HistoryEntry) -> None:
        logger.info("Done: {}/{} actions succeeded", entry.success_count, entry.total)
