"""Read-only snapshot of the bot and its surroundings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Vec3(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    def offset(self, dx: float, dy: float, dz: float) -> Vec3:
        return Vec3(x=self.x + dx, y=self.y + dy, z=self.z + dz)

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g}, {self.z:g})"


class ItemStack(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    display_name: str = Field(default="", alias="displayName")
    count: int = Field(default=1, ge=0)
    slot: int | None = None


class BlockRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    position: Vec3


class EntityRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    name: str = ""
    position: Vec3 | None = None
    distance: float | None = None


class GameState(BaseModel):
    """
    Snapshot captured fresh before each parse.

    The bridge reports camelCase keys (mineflayer naming); both spellings are
    accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position: Vec3
    health: float = Field(default=20, ge=0, le=20)
    food: float = Field(default=20, ge=0, le=20)
    inventory: list[ItemStack] = Field(default_factory=list)
    nearby_blocks: list[BlockRef] = Field(default_factory=list, alias="nearbyBlocks")
    nearby_entities: list[EntityRef] = Field(default_factory=list, alias="nearbyEntities")
    time: int = 0
    weather: str = "clear"

    def summary(self) -> str:
        """Multi-line situation text used in prompts and the status command."""
        return "\n".join(
            [
                f"Position: {self.position}",
                f"Health: {self.health:g}/20",
                f"Food: {self.food:g}/20",
                f"Inventory items: {len(self.inventory)}",
                f"Nearby blocks: {len(self.nearby_blocks)}",
                f"Nearby entities: {len(self.nearby_entities)}",
                f"Time: {self.time}",
                f"Weather: {self.weather}",
            ]
        )

    def inventory_payload(self) -> list[dict[str, Any]]:
        return [{"name": item.name, "count": item.count} for item in self.inventory]
