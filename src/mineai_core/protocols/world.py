"""WorldAgent protocol: the connected game session the pipeline drives."""

from typing import Protocol, runtime_checkable

from mineai_core.schema.state import GameState


@runtime_checkable
class WorldAgent(Protocol):
    """
    Interface for the bot body.

    Pathfinding, world representation and the game protocol live behind this
    boundary. Every call is awaited; long-running calls (movement, mining,
    collecting) honour their own ``timeout`` and report failure instead of
    raising once it elapses.
    """

    async def connect(self) -> None:
        """Join the world. Raises WorldConnectionError on failure."""
        ...

    async def disconnect(self) -> None:
        ...

    async def current_state(self) -> GameState | None:
        """Fresh snapshot, or None when the bot is not connected."""
        ...

    async def move_to(self, x: float, y: float, z: float, *, timeout: float) -> bool:
        """True when the goal was reached within ``timeout`` seconds."""
        ...

    async def break_block(self, block_type: str, *, timeout: float) -> bool:
        ...

    async def gather_item(self, item_type: str | None, amount: int, *, timeout: float) -> int:
        """Number of items actually collected."""
        ...

    async def send_chat(self, message: str) -> None:
        ...

    async def clear_goal(self) -> None:
        """Drop any pending movement goal."""
        ...

    async def is_alive(self) -> bool:
        ...
