"""Domain exceptions shared across the agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class MineAIError(Exception):
    """Base class for errors raised by mineai_core."""


class ConfigurationError(MineAIError):
    """Required configuration is missing or invalid."""


class WorldConnectionError(MineAIError):
    """The game world could not be reached, rejected the bot, or kicked it."""


@dataclass
class BridgeAPIError(MineAIError):
    status_code: int
    message: str
    payload: Any

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


class BridgeOfflineError(MineAIError):
    def __init__(self, url: str = "") -> None:
        super().__init__(url)
        self.url = url

    def __str__(self) -> str:
        where = f" at {self.url}" if self.url else ""
        return f"Minecraft bridge is offline{where}, please ensure the bot sidecar is running."
