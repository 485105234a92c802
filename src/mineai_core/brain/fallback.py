# src/mineai_core/brain/fallback.py
"""
Heuristic parser used when the language model is unavailable.

Rules are an ordered table of (keywords, builder) pairs evaluated top to
bottom; the first rule whose keyword appears in the instruction produces a
one-action plan. No match yields an empty plan that explains itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from mineai_core.brain.directions import direction_delta, resolve_direction
from mineai_core.logging_utils import log_event
from mineai_core.schema.action import Action, ActionKind
from mineai_core.schema.plan import ActionPlan

GREETING = "こんにちは！ / Hello!"
ANY_BLOCK = "any"

_NUMBER = re.compile(r"\d+")


def extract_distance(text: str, default: int = 1) -> int:
    """First integer in the text, or ``default``."""
    match = _NUMBER.search(text)
    if not match:
        return default
    try:
        value = int(match.group(0))
    except ValueError:
        return default
    return value if value > 0 else default


def _build_move(text: str) -> Action:
    distance = extract_distance(text)
    direction = resolve_direction(text)
    return Action(
        kind=ActionKind.MOVE_RELATIVE,
        parameters=direction_delta(text, distance),
        description=f"Move {direction.name} {distance} block(s)",
    )


def _build_chat(text: str) -> Action:
    return Action(kind=ActionKind.CHAT, parameters={"message": GREETING}, description="Greet")


def _build_mine(text: str) -> Action:
    return Action(
        kind=ActionKind.MINE,
        parameters={"block_type": ANY_BLOCK},
        description="Mine the nearest block",
    )


def _contains_keyword(lowered: str, keyword: str) -> bool:
    """Substring match; latin keywords must also start a word, so "remove" is not "move"."""
    if not keyword.isascii():
        return keyword in lowered
    return re.search(r"(?<![a-z])" + re.escape(keyword), lowered) is not None


@dataclass(frozen=True)
class FallbackRule:
    name: str
    keywords: tuple[str, ...]
    build: Callable[[str], Action]

    def matches(self, lowered: str) -> bool:
        return any(_contains_keyword(lowered, keyword) for keyword in self.keywords)


DEFAULT_RULES: tuple[FallbackRule, ...] = (
    FallbackRule("move", ("walk", "move", "step", "歩", "進", "移動"), _build_move),
    FallbackRule("chat", ("hello", "greet", "say hi", "chat", "挨拶", "こんにちは", "話"), _build_chat),
    FallbackRule("mine", ("mine", "dig", "break", "remove", "掘", "採掘", "壊"), _build_mine),
)


class FallbackParser:
    """Deterministic substitute for the LLM. ``parse`` never raises."""

    def __init__(self, rules: tuple[FallbackRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def parse(self, instruction: object, *, error: str | None = None) -> ActionPlan:
        text = instruction if isinstance(instruction, str) else ""
        lowered = text.lower()
        try:
            for rule in self._rules:
                if rule.matches(lowered):
                    action = rule.build(text)
                    logger.info(log_event("fallback.matched", rule=rule.name, kind=action.kind.value))
                    return ActionPlan(
                        actions=(action,),
                        summary=action.description,
                        reasoning=f"Fallback parser matched the '{rule.name}' keywords.",
                        source="fallback",
                        error=error,
                    )
        except Exception as exc:
            logger.warning(log_event("fallback.rule_failed", error=repr(exc)))

        logger.info(log_event("fallback.no_match", chars=len(text)))
        return ActionPlan(
            summary="Instruction not understood",
            reasoning=(
                "Could not understand the instruction without the language model. "
                "Try phrasing it as a movement, a greeting, or a mining request."
            ),
            source="fallback",
            error=error,
        )
