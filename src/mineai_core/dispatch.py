"""
Action dispatch: one Action in, one ActionResult out.

Each ActionKind maps to exactly one WorldAgent capability. Failures are never
raised to the caller; they come back as ActionResult error codes:

- invalid_params     parameters missing or of the wrong type
- agent_unavailable  bot not connected, dead, or position unknown
- unreachable        movement goal not reached
- block_not_found    no matching block, or the break failed
- insufficient_items nothing was collected
- not_implemented    place / craft
- timeout            the bounded wait elapsed; the goal was cleared
- execution_exception the agent raised
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Awaitable, Mapping, TypeVar

from loguru import logger

from mineai_core.brain.validator import is_number
from mineai_core.logging_utils import log_event
from mineai_core.protocols.world import WorldAgent
from mineai_core.schema.action import Action, ActionKind, ActionResult

T = TypeVar("T")

_TIMED_OUT = object()


@dataclass
class ActionTimeouts:
    """Upper bounds, in seconds, for each kind of world call."""

    move: float = 30.0
    mine: float = 15.0
    collect: float = 60.0
    chat: float = 5.0
    # Extra time granted on top of the agent's own timeout before we give up on it.
    grace: float = 2.0


class ActionDispatcher:
    def __init__(self, world: WorldAgent, timeouts: ActionTimeouts | None = None) -> None:
        self._world = world
        self._timeouts = timeouts or ActionTimeouts()

    @property
    def timeouts(self) -> ActionTimeouts:
        return self._timeouts

    async def dispatch(self, action: Action) -> ActionResult:
        started = perf_counter()
        result = await self._dispatch(action)
        result.duration_ms = int((perf_counter() - started) * 1000)
        logger.debug(
            log_event(
                "dispatch.done",
                kind=action.kind.value,
                success=result.success,
                error=result.error,
                ms=result.duration_ms,
            )
        )
        return result

    async def _dispatch(self, action: Action) -> ActionResult:
        kind = action.kind
        params = action.parameters

        try:
            if not await self._world.is_alive():
                return ActionResult.fail("agent_unavailable", reason="bot_not_alive")

            if kind is ActionKind.MOVE:
                return await self._move(params)
            if kind is ActionKind.MOVE_RELATIVE:
                return await self._move_relative(params)
            if kind is ActionKind.MINE:
                return await self._mine(params)
            if kind is ActionKind.COLLECT:
                return await self._collect(params)
            if kind is ActionKind.CHAT:
                return await self._chat(params)
            if kind in (ActionKind.PLACE, ActionKind.CRAFT):
                logger.info(log_event("dispatch.not_implemented", kind=kind.value))
                return ActionResult.fail("not_implemented", kind=kind.value)
            return ActionResult.fail("unknown_action", kind=str(kind))
        except Exception as exc:
            logger.exception(log_event("dispatch.exception", kind=kind.value))
            return ActionResult.fail("execution_exception", kind=kind.value, exception=repr(exc))

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _move(self, params: Mapping[str, Any]) -> ActionResult:
        coords = [params.get(axis) for axis in ("x", "y", "z")]
        if not all(is_number(value) for value in coords):
            logger.warning(log_event("dispatch.move.invalid", params=dict(params)))
            return ActionResult.fail("invalid_params", reason="missing_or_non_numeric_xyz", params=dict(params))
        x, y, z = coords
        return await self._go(x, y, z)

    async def _move_relative(self, params: Mapping[str, Any]) -> ActionResult:
        deltas = [params.get(axis, 0) for axis in ("x", "y", "z")]
        if not all(is_number(value) for value in deltas):
            logger.warning(log_event("dispatch.move_relative.invalid", params=dict(params)))
            return ActionResult.fail("invalid_params", reason="non_numeric_delta", params=dict(params))

        state = await self._world.current_state()
        if state is None:
            return ActionResult.fail("agent_unavailable", reason="position_unknown")
        target = state.position.offset(*deltas)
        return await self._go(target.x, target.y, target.z)

    async def _go(self, x: float, y: float, z: float) -> ActionResult:
        timeout = self._timeouts.move
        outcome = await self._bounded(self._world.move_to(x, y, z, timeout=timeout), timeout)
        target = {"x": x, "y": y, "z": z}
        if outcome is _TIMED_OUT:
            return ActionResult.fail("timeout", target=target, timeout_s=timeout)
        if not outcome:
            return ActionResult.fail("unreachable", target=target)
        return ActionResult.ok(target=target)

    async def _mine(self, params: Mapping[str, Any]) -> ActionResult:
        block_type = params.get("block_type")
        if not isinstance(block_type, str) or not block_type.strip():
            logger.warning(log_event("dispatch.mine.invalid", params=dict(params)))
            return ActionResult.fail("invalid_params", reason="missing_block_type")

        timeout = self._timeouts.mine
        outcome = await self._bounded(self._world.break_block(block_type, timeout=timeout), timeout)
        if outcome is _TIMED_OUT:
            return ActionResult.fail("timeout", block_type=block_type, timeout_s=timeout)
        if not outcome:
            return ActionResult.fail("block_not_found", block_type=block_type)
        return ActionResult.ok(block_type=block_type)

    async def _collect(self, params: Mapping[str, Any]) -> ActionResult:
        item_type = params.get("item_type") or None
        amount = params.get("amount", 1)
        if not is_number(amount) or amount <= 0:
            amount = 1
        amount = int(amount)

        timeout = self._timeouts.collect
        outcome = await self._bounded(self._world.gather_item(item_type, amount, timeout=timeout), timeout)
        if outcome is _TIMED_OUT:
            return ActionResult.fail("timeout", item_type=item_type, requested=amount, timeout_s=timeout)

        collected = int(outcome or 0)
        details = {"item_type": item_type, "requested": amount, "collected": collected}
        if collected < 1:
            return ActionResult.fail("insufficient_items", **details)
        return ActionResult(success=True, details={**details, "partial": collected < amount})

    async def _chat(self, params: Mapping[str, Any]) -> ActionResult:
        message = params.get("message")
        if not isinstance(message, str) or not message.strip():
            logger.warning(log_event("dispatch.chat.invalid"))
            return ActionResult.fail("invalid_params", reason="empty_message")

        timeout = self._timeouts.chat
        outcome = await self._bounded(self._world.send_chat(message), timeout, clear_goal=False)
        if outcome is _TIMED_OUT:
            return ActionResult.fail("timeout", timeout_s=timeout)
        return ActionResult.ok(message=message)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _bounded(self, call: Awaitable[T], timeout: float, *, clear_goal: bool = True) -> T | object:
        """Await ``call`` for at most ``timeout`` + grace; abandon it afterwards."""
        try:
            return await asyncio.wait_for(call, timeout=timeout + self._timeouts.grace)
        except asyncio.TimeoutError:
            logger.warning(log_event("dispatch.timeout", timeout_s=timeout))
            if clear_goal:
                await self._world.clear_goal()
            return _TIMED_OUT

