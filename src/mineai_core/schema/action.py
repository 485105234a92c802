"""Action model: one atomic instruction for the WorldAgent, and its outcome."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class ActionKind(str, Enum):
    MOVE = "move"
    MOVE_RELATIVE = "move_relative"
    MINE = "mine"
    COLLECT = "collect"
    CHAT = "chat"
    PLACE = "place"
    CRAFT = "craft"


class Action(BaseModel):
    """
    Standard contract for actions.
    Frozen, parameters included: the plan, dispatcher, reporters and history
    all share the same instance.
    """

    model_config = ConfigDict(frozen=True)

    kind: ActionKind = Field(..., description="Which WorldAgent capability to drive.")

    parameters: Mapping[str, Any] = Field(
        default_factory=lambda: MappingProxyType({}),
        description="Kind-specific parameters, e.g. x/y/z for a move.",
    )

    description: str = Field(default="", description="Human-readable label for reports.")

    @field_validator("parameters", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("parameters")
    def _plain_parameters(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return _thaw(value)

    def label(self) -> str:
        return self.description or f"{self.kind.value} {_thaw(self.parameters)}"


class ActionResult(BaseModel):
    """Outcome of dispatching one Action."""

    success: bool
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    duration_ms: int = 0

    @classmethod
    def ok(cls, **details: Any) -> ActionResult:
        return cls(success=True, details=details)

    @classmethod
    def fail(cls, error: str, **details: Any) -> ActionResult:
        return cls(success=False, error=error, details=details)
