"""CommandParser protocol: natural language in, ActionPlan out."""

from typing import Protocol, runtime_checkable

from mineai_core.schema.plan import ActionPlan
from mineai_core.schema.state import GameState


@runtime_checkable
class CommandParser(Protocol):
    """
    Interface for the decision layer.

    Implementations typically call an LLM. Expected failures (network,
    timeout, malformed output) must not escape: they become ``None`` or a
    fallback plan carrying an ``error`` marker.
    """

    async def parse(self, instruction: str, state: GameState) -> ActionPlan | None:
        ...

    async def suggest_next_action(self, situation: str, goal: str) -> str | None:
        """Free-text advice for the next step. Purely informational."""
        ...
