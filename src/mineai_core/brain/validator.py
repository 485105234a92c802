# src/mineai_core/brain/validator.py
from __future__ import annotations

from typing import Any, Callable, Iterable, Literal

from loguru import logger
from pydantic import ValidationError

from mineai_core.brain.directions import direction_delta, match_direction
from mineai_core.logging_utils import log_event
from mineai_core.schema.action import Action, ActionKind
from mineai_core.schema.plan import ActionPlan, IntermediateTask

DEFAULT_SURFACE_HEIGHT = 64
_DISTANCE_KEYS = ("distance", "blocks", "steps")


def coerce_number(value: Any) -> int | float | Any:
    """Turn numeric strings into numbers; anything else is returned untouched."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            pass
        try:
            return float(stripped)
        except ValueError:
            return value
    return value


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first(details: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = details.get(key)
        if value is not None and value != "":
            return value
    return None


def _positive_int(value: Any, default: int = 1) -> int:
    value = coerce_number(value)
    if is_number(value) and int(value) > 0:
        return int(value)
    return default


def _xyz_from(source: Any) -> dict[str, Any]:
    if isinstance(source, dict):
        return {axis: source.get(axis) for axis in ("x", "y", "z") if axis in source}
    if isinstance(source, (list, tuple)) and len(source) == 3:
        return dict(zip(("x", "y", "z"), source))
    return {}


class PlanValidator:
    """
    Normalizes raw parser output into a well-formed ActionPlan.

    Each intermediate task maps to exactly one Action. Tasks of an unknown
    type are dropped with a warning and the rest of the plan proceeds.
    """

    def __init__(self, surface_height: int = DEFAULT_SURFACE_HEIGHT) -> None:
        self._surface_height = surface_height
        self._builders: dict[str, Callable[[IntermediateTask], Action]] = {}
        for names, builder in (
            (("move", "move_to", "goto", "go_to"), self._build_move),
            (("move_relative", "relative_move", "walk", "step"), self._build_move_relative),
            (("mine", "dig", "break", "break_block"), self._build_mine),
            (("collect", "gather", "pickup", "gather_item"), self._build_collect),
            (("chat", "say", "send_chat"), self._build_chat),
            (("place", "place_block", "build"), self._build_place),
            (("craft",), self._build_craft),
        ):
            for name in names:
                self._builders[name] = builder

    def validate(
        self,
        raw: Any,
        *,
        source: Literal["llm", "fallback"] = "llm",
        error: str | None = None,
    ) -> ActionPlan:
        if isinstance(raw, dict):
            raw_tasks = raw.get("tasks")
            summary = str(raw.get("summary") or "")
            reasoning = str(raw.get("reasoning") or "")
        else:
            raw_tasks = raw
            summary = ""
            reasoning = ""

        actions = tuple(self.to_actions(raw_tasks if isinstance(raw_tasks, list) else []))
        if not summary and actions:
            summary = "; ".join(action.label() for action in actions)
        return ActionPlan(
            actions=actions,
            summary=summary,
            reasoning=reasoning,
            source=source,
            error=error,
        )

    def to_actions(self, raw_tasks: Iterable[Any]) -> list[Action]:
        actions: list[Action] = []
        for position, raw_task in enumerate(raw_tasks):
            try:
                task = IntermediateTask.model_validate(raw_task)
            except ValidationError as exc:
                logger.warning(log_event("plan.task_invalid", index=position, error=exc.errors()[0]["msg"]))
                continue

            builder = self._builders.get(task.type)
            if builder is None:
                logger.warning(log_event("plan.task_dropped", index=position, type=task.type or "<missing>"))
                continue
            actions.append(builder(task))
        return actions

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _build_move(self, task: IntermediateTask) -> Action:
        details = task.details
        coords = _xyz_from(task.target)
        coords.update(_xyz_from(details.get("position")))
        coords.update(_xyz_from(details))

        # "go forward 5" arrives as a move with a direction and no coordinates
        if details.get("relative") or (
            not {"x", "z"} & set(coords)
            and (
                "direction" in details
                or match_direction(task.target) is not None
                or _first(details, *_DISTANCE_KEYS) is not None
            )
        ):
            return self._build_move_relative(task)

        params = {axis: coerce_number(coords.get(axis)) for axis in ("x", "y", "z")}
        if params["y"] is None:
            params["y"] = self._surface_height
        return Action(kind=ActionKind.MOVE, parameters=params, description=task.description)

    def _build_move_relative(self, task: IntermediateTask) -> Action:
        details = task.details
        deltas = _xyz_from(details)
        direction = _first(details, "direction")
        # a direction wins over all-zero axis keys such as {"direction": "left", "y": 0}
        if deltas and (direction is None or any(coerce_number(value) not in (0, None) for value in deltas.values())):
            params = {axis: coerce_number(deltas.get(axis, 0)) for axis in ("x", "y", "z")}
            return Action(kind=ActionKind.MOVE_RELATIVE, parameters=params, description=task.description)

        if direction is None and isinstance(task.target, str):
            direction = task.target
        distance_raw = _first(details, *_DISTANCE_KEYS, "amount")
        if distance_raw is None and is_number(coerce_number(task.target)):
            distance_raw = task.target
        distance = _positive_int(distance_raw)
        return Action(
            kind=ActionKind.MOVE_RELATIVE,
            parameters=direction_delta(direction or "forward", distance),
            description=task.description,
        )

    def _build_mine(self, task: IntermediateTask) -> Action:
        block = _first(task.details, "blockType", "block_type", "block")
        if block is None and isinstance(task.target, str):
            block = task.target
        return Action(
            kind=ActionKind.MINE,
            parameters={"block_type": str(block or "").strip()},
            description=task.description,
        )

    def _build_collect(self, task: IntermediateTask) -> Action:
        item = _first(task.details, "itemType", "item_type", "item")
        if item is None and isinstance(task.target, str):
            item = task.target
        return Action(
            kind=ActionKind.COLLECT,
            parameters={
                "item_type": str(item or "").strip(),
                "amount": _positive_int(_first(task.details, "amount", "count")),
            },
            description=task.description,
        )

    def _build_chat(self, task: IntermediateTask) -> Action:
        message = _first(task.details, "message", "text")
        if message is None and isinstance(task.target, str):
            message = task.target
        return Action(
            kind=ActionKind.CHAT,
            parameters={"message": str(message or "")},
            description=task.description,
        )

    def _build_place(self, task: IntermediateTask) -> Action:
        block = _first(task.details, "blockType", "block_type", "block")
        if block is None and isinstance(task.target, str):
            block = task.target
        params: dict[str, Any] = {"block_type": str(block or "")}
        position = _xyz_from(task.details.get("position"))
        if position:
            params["position"] = position
        return Action(kind=ActionKind.PLACE, parameters=params, description=task.description)

    def _build_craft(self, task: IntermediateTask) -> Action:
        item = _first(task.details, "item", "itemType", "item_type")
        if item is None and isinstance(task.target, str):
            item = task.target
        return Action(
            kind=ActionKind.CRAFT,
            parameters={
                "item": str(item or ""),
                "amount": _positive_int(_first(task.details, "amount", "count")),
            },
            description=task.description,
        )
