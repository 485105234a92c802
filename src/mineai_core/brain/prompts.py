"""Prompt builders for the Gemini command parser."""

from __future__ import annotations

import json

from mineai_core.schema.state import GameState

SYSTEM_PROMPT = (
    "You are a Minecraft AI agent. Translate the player's instruction into a short, "
    "realistic list of tasks the bot can execute right now. "
    "Always answer with strict JSON only."
)

TASK_SCHEMA = """{
  "tasks": [
    {"type": "<task type>", "target": <main target or null>, "details": {}, "description": "<short label>"}
  ],
  "summary": "<one-line plan summary>",
  "reasoning": "<why these tasks>"
}"""

TASK_TYPES = """Available task types:
- move: go to absolute coordinates (details: {x, y, z}; y may be omitted)
- move_relative: walk relative to the current position (details: {direction, distance} or {x, y, z} deltas)
- mine: break a block (details: {block_type})
- collect: pick up dropped items (details: {item_type, amount})
- chat: send a chat message (details: {message})
- place: place a block (details: {block_type, position})
- craft: craft an item (details: {item, amount})"""


def build_command_prompt(instruction: str, state: GameState) -> str:
    return f"""Current state:
- Position: {json.dumps(state.position.model_dump())}
- Health: {state.health:g}/20
- Food: {state.food:g}/20
- Inventory: {json.dumps(state.inventory_payload(), ensure_ascii=False)}
- Nearby blocks: {len(state.nearby_blocks)}
- Nearby entities: {len(state.nearby_entities)}

Player instruction: "{instruction}"

Return JSON in this shape:
{TASK_SCHEMA}

{TASK_TYPES}

Notes:
- Directions for move_relative: forward, back, left, right, up, down.
- Use English block and item ids (e.g. oak_log, stone, dirt).
- Only produce tasks that are realistic to execute."""


def build_next_action_prompt(situation: str, goal: str) -> str:
    return f"""Current situation:
{situation}

Goal: {goal}

Suggest ONE concrete next action that is achievable in the Minecraft world right now.
Answer in the language the goal was written in, in at most three sentences."""


def build_error_prompt(description: str, state: GameState | None) -> str:
    situation = state.summary() if state is not None else "unknown (bot not connected)"
    return f"""The Minecraft bot hit an error.
Error: {description}
Current state:
{situation}

Briefly explain the likely cause and a fix."""
