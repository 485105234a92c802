# src/mineai_core/factory.py
from __future__ import annotations

from dataclasses import dataclass

from mineai_core.brain.fallback import FallbackParser
from mineai_core.brain.gemini import GeminiCommandParser
from mineai_core.brain.validator import PlanValidator
from mineai_core.config import Settings
from mineai_core.dispatch import ActionDispatcher, ActionTimeouts
from mineai_core.engine import TaskPipeline
from mineai_core.memory.history import ExecutionHistory
from mineai_core.reporters.console import ConsoleReporter
from mineai_core.world.bridge_agent import BridgeWorldAgent
from mineai_core.world.bridge_client import BridgeClient


@dataclass
class AgentComponents:
    world: BridgeWorldAgent
    parser: GeminiCommandParser
    pipeline: TaskPipeline


def create_world_agent(config: Settings) -> BridgeWorldAgent:
    client = BridgeClient(config.MINEAI_BRIDGE_URL, timeout=config.BRIDGE_REQUEST_TIMEOUT)
    return BridgeWorldAgent(
        client,
        host=config.MC_HOST,
        port=config.MC_PORT,
        username=config.MC_USERNAME,
        version=config.MC_VERSION or None,
        auth=config.MC_AUTH,
    )


def create_parser(config: Settings) -> GeminiCommandParser:
    return GeminiCommandParser(
        api_key=config.GEMINI_API_KEY,
        model_name=config.GEMINI_MODEL,
        max_tokens=config.LLM_MAX_TOKENS,
        temperature=config.LLM_TEMPERATURE,
        timeout=config.LLM_TIMEOUT,
        validator=PlanValidator(surface_height=config.SURFACE_HEIGHT),
        fallback=FallbackParser(),
    )


def create_engine(config: Settings) -> AgentComponents:
    """Wire every collaborator from explicit settings; nothing reads the environment here."""
    world = create_world_agent(config)
    parser = create_parser(config)
    dispatcher = ActionDispatcher(
        world,
        ActionTimeouts(
            move=config.MOVE_TIMEOUT,
            mine=config.MINE_TIMEOUT,
            collect=config.COLLECT_TIMEOUT,
            chat=config.CHAT_TIMEOUT,
        ),
    )
    pipeline = TaskPipeline(
        world,
        parser,
        dispatcher=dispatcher,
        memory=ExecutionHistory(max_entries=config.HISTORY_LIMIT),
        reporters=[ConsoleReporter()],
        action_gap=config.ACTION_GAP_SECONDS,
        success_policy="all" if config.SUCCESS_POLICY == "all" else "any",
    )
    return AgentComponents(world=world, parser=parser, pipeline=pipeline)
