# src/mineai_core/engine.py
from __future__ import annotations

import asyncio
from typing import List, Literal, Sequence

from loguru import logger

from mineai_core.dispatch import ActionDispatcher
from mineai_core.gate import AdmissionGate
from mineai_core.logging_utils import log_event
from mineai_core.memory.history import ExecutionHistory
from mineai_core.protocols.memory import BaseMemory
from mineai_core.protocols.parser import CommandParser
from mineai_core.protocols.reporter import Reporter
from mineai_core.protocols.world import WorldAgent
from mineai_core.schema.action import ActionResult
from mineai_core.schema.history import ExecutorStatus, HistoryEntry

SuccessPolicy = Literal["any", "all"]


class TaskPipeline:
    """
    Runs one natural-language instruction end to end:
    state → parse → dispatch each action in order → record → aggregate.

    Only one instruction runs at a time. A call that arrives while another is
    in flight is rejected, not queued.
    """

    def __init__(
        self,
        world: WorldAgent,
        parser: CommandParser,
        *,
        dispatcher: ActionDispatcher | None = None,
        memory: BaseMemory | None = None,
        reporters: Sequence[Reporter] = (),
        action_gap: float = 1.0,
        success_policy: SuccessPolicy = "any",
    ) -> None:
        self._world = world
        self._parser = parser
        self._dispatcher = dispatcher or ActionDispatcher(world)
        self._memory = memory if memory is not None else ExecutionHistory()
        self._reporters = list(reporters)
        self._action_gap = action_gap
        self._success_policy = success_policy
        self._gate = AdmissionGate()

    @property
    def is_executing(self) -> bool:
        return self._gate.is_taken

    async def execute_command(self, user_input: str) -> bool:
        """Execute one instruction. Never raises; returns the aggregate outcome."""
        with self._gate.admit() as ticket:
            if ticket is None:
                logger.warning(log_event("command.rejected_busy", input=user_input))
                return False

            logger.info(log_event("command.start", input=user_input))
            try:
                return await self._run(user_input, ticket)
            except Exception as exc:
                logger.exception(log_event("command.failed", input=user_input, error=repr(exc)))
                return False

    async def _run(self, user_input: str, ticket: int) -> bool:
        state = await self._world.current_state()
        if state is None:
            logger.error(log_event("command.no_state", reason="bot_not_connected"))
            return False

        plan = await self._parser.parse(user_input, state)
        if plan is None or plan.is_empty:
            reason = plan.reasoning if plan is not None else "parser returned nothing"
            logger.info(log_event("command.nothing_to_do", reason=reason))
            return False

        for reporter in self._reporters:
            reporter.plan_started(user_input, plan)

        total = len(plan.actions)
        results: List[ActionResult] = []
        for index, action in enumerate(plan.actions, start=1):
            if not self._gate.holds(ticket):
                logger.warning(log_event("command.stopped", done=len(results), total=total))
                break

            result = await self._dispatcher.dispatch(action)
            results.append(result)
            for reporter in self._reporters:
                reporter.action_finished(index, total, action, result)

            if index < total:
                await self._pause(self._action_gap)

        success_count = sum(1 for result in results if result.success)
        entry = HistoryEntry(
            input=user_input,
            actions=plan.actions,
            results=tuple(results),
            success_count=success_count,
        )
        self._memory.store(entry)
        for reporter in self._reporters:
            reporter.command_finished(entry)

        logger.info(log_event("command.done", succeeded=success_count, total=total))
        return self._is_success(success_count, total)

    def _is_success(self, success_count: int, total: int) -> bool:
        if self._success_policy == "all":
            return total > 0 and success_count == total
        return success_count > 0

    async def _pause(self, seconds: float) -> None:
        # Lets block breaks and item pickups settle before the next action reads the world.
        await asyncio.sleep(seconds)

    async def emergency_stop(self) -> None:
        """Drop the execution slot and clear any movement goal. Safe to repeat."""
        logger.warning(log_event("command.emergency_stop", executing=self.is_executing))
        self._gate.release()
        try:
            await self._world.clear_goal()
        except Exception as exc:
            logger.warning(log_event("command.emergency_stop.clear_goal_failed", error=repr(exc)))

    async def consult_next_action(self, goal: str) -> str | None:
        """Ask the parser what to do next toward ``goal``. Executes nothing."""
        state = await self._world.current_state()
        if state is None:
            return None
        return await self._parser.suggest_next_action(state.summary(), goal)

    def get_history(self, limit: int = 10) -> List[HistoryEntry]:
        return self._memory.recent(limit)

    def clear_history(self) -> None:
        self._memory.clear()

    def get_status(self) -> ExecutorStatus:
        return ExecutorStatus(
            is_executing=self.is_executing,
            queue_length=self._gate.queue_length,
            history_count=self._memory.count,
        )
