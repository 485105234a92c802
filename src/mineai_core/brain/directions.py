"""Keyword table mapping free-form direction words to unit vectors."""

from __future__ import annotations

from typing import NamedTuple


class Direction(NamedTuple):
    name: str
    keywords: tuple[str, ...]
    vector: tuple[int, int, int]


# Evaluated top to bottom, first match wins.
DIRECTIONS: tuple[Direction, ...] = (
    Direction("back", ("backward", "back", "behind", "後ろ", "後方", "うしろ", "戻"), (-1, 0, 0)),
    Direction("forward", ("forward", "ahead", "front", "前", "まえ", "まっすぐ"), (1, 0, 0)),
    Direction("left", ("left", "左", "ひだり"), (0, 0, -1)),
    Direction("right", ("right", "右", "みぎ"), (0, 0, 1)),
    Direction("up", ("upward", "up", "上", "うえ", "登"), (0, 1, 0)),
    Direction("down", ("downward", "down", "下", "した", "降"), (0, -1, 0)),
)

DEFAULT_DIRECTION = DIRECTIONS[1]


def match_direction(text: object) -> Direction | None:
    """Case-insensitive substring match against the table; None when nothing matches."""
    if not isinstance(text, str) or not text:
        return None
    lowered = text.lower()
    for direction in DIRECTIONS:
        if any(keyword in lowered for keyword in direction.keywords):
            return direction
    return None


def resolve_direction(text: object) -> Direction:
    return match_direction(text) or DEFAULT_DIRECTION


def direction_delta(text: object, distance: float) -> dict[str, float]:
    """Relative offset for ``distance`` blocks in the direction named by ``text``."""
    dx, dy, dz = resolve_direction(text).vector
    return {"x": dx * distance, "y": dy * distance, "z": dz * distance}
