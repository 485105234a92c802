"""Plan models: what the parser produces for one user instruction."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mineai_core.schema.action import Action


class IntermediateTask(BaseModel):
    """
    One loosely-typed task as emitted by the language model.

    The model is asked for ``{"type", "target", "details"}`` but older prompts
    produced ``{"action", "parameters"}``; both shapes are accepted.
    """

    model_config = ConfigDict(extra="ignore")

    type: str = ""
    target: Any = None
    details: dict[str, Any] = Field(default_factory=dict)
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("type") and data.get("action"):
            data["type"] = data["action"]
        if "details" not in data and isinstance(data.get("parameters"), dict):
            data["details"] = data["parameters"]
        if not isinstance(data.get("details"), dict):
            data["details"] = {}
        data["type"] = str(data.get("type") or "").strip().lower()
        data["description"] = str(data.get("description") or "")
        return data


class ActionPlan(BaseModel):
    """
    Ordered actions plus explanatory metadata.
    Built once per instruction and consumed linearly by the pipeline.
    """

    model_config = ConfigDict(frozen=True)

    actions: tuple[Action, ...] = ()
    summary: str = ""
    reasoning: str = ""
    source: Literal["llm", "fallback"] = "llm"
    error: str | None = Field(default=None, description="Set when the LLM call failed.")

    @property
    def is_empty(self) -> bool:
        return not self.actions

    def __len__(self) -> int:
        return len(self.actions)
