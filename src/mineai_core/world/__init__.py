"""Game-world access through the mineflayer sidecar."""

from mineai_core.world.bridge_agent import BridgeWorldAgent
from mineai_core.world.bridge_client import DEFAULT_BRIDGE_URL, BridgeClient

__all__ = ["DEFAULT_BRIDGE_URL", "BridgeClient", "BridgeWorldAgent"]
