"""Tests for TaskPipeline: ordering, single-flight admission, history and aggregation."""

import asyncio

import pytest
from fakes import FakeGenaiClient, FakeWorldAgent, ScriptedParser

from mineai_core.brain.gemini import GeminiCommandParser
from mineai_core.engine import TaskPipeline
from mineai_core.schema.action import Action, ActionKind
from mineai_core.schema.plan import ActionPlan


def _plan(*actions: Action) -> ActionPlan:
    return ActionPlan(actions=actions, summary="test plan")


def _chat(message: str) -> Action:
    return Action(kind=ActionKind.CHAT, parameters={"message": message})


def _pipeline(world, parser, **kwargs) -> tuple[TaskPipeline, list[float]]:
    pipeline = TaskPipeline(world, parser, **kwargs)
    pauses: list[float] = []

    async def fake_pause(seconds: float) -> None:
        pauses.append(seconds)

    pipeline._pause = fake_pause  # type: ignore[method-assign]
    return pipeline, pauses


@pytest.mark.anyio
async def test_actions_run_in_order_with_gap_between_them() -> None:
    world = FakeWorldAgent()
    plan = _plan(_chat("one"), _chat("two"), _chat("three"))
    pipeline, pauses = _pipeline(world, ScriptedParser(plan), action_gap=1.5)

    assert await pipeline.execute_command("say things") is True

    assert world.calls == [("send_chat", "one"), ("send_chat", "two"), ("send_chat", "three")]
    assert pauses == [1.5, 1.5]
    assert not pipeline.is_executing


@pytest.mark.anyio
async def test_history_records_each_command() -> None:
    world = FakeWorldAgent(dig=False)
    plan = _plan(_chat("hi"), Action(kind=ActionKind.MINE, parameters={"block_type": "stone"}))
    pipeline, _ = _pipeline(world, ScriptedParser(plan))

    await pipeline.execute_command("greet and dig")

    [entry] = pipeline.get_history()
    assert entry.input == "greet and dig"
    assert entry.total == 2
    assert entry.success_count == 1
    assert [result.error for result in entry.results] == [None, "block_not_found"]
    assert pipeline.get_status().history_count == 1

    pipeline.clear_history()
    assert pipeline.get_history() == []


@pytest.mark.anyio
async def test_partial_success_counts_as_success_by_default() -> None:
    world = FakeWorldAgent(reach=False)
    plan = _plan(Action(kind=ActionKind.MOVE, parameters={"x": 1, "y": 64, "z": 1}), _chat("arrived?"))
    pipeline, _ = _pipeline(world, ScriptedParser(plan))

    assert await pipeline.execute_command("go and report") is True


@pytest.mark.anyio
async def test_all_policy_requires_every_action() -> None:
    world = FakeWorldAgent(reach=False)
    plan = _plan(Action(kind=ActionKind.MOVE, parameters={"x": 1, "y": 64, "z": 1}), _chat("arrived?"))
    pipeline, _ = _pipeline(world, ScriptedParser(plan), success_policy="all")

    assert await pipeline.execute_command("go and report") is False


@pytest.mark.anyio
async def test_all_actions_failing_is_failure() -> None:
    world = FakeWorldAgent(alive=False)
    pipeline, _ = _pipeline(world, ScriptedParser(_plan(_chat("hi"))))

    assert await pipeline.execute_command("hi") is False
    assert pipeline.get_history()[0].results[0].error == "agent_unavailable"


@pytest.mark.anyio
async def test_no_state_fails_without_parsing() -> None:
    world = FakeWorldAgent()
    world.state = None
    parser = ScriptedParser(_plan(_chat("hi")))
    pipeline, _ = _pipeline(world, parser)

    assert await pipeline.execute_command("hi") is False
    assert parser.instructions == []
    assert pipeline.get_history() == []


@pytest.mark.anyio
async def test_empty_plan_fails_without_dispatch() -> None:
    world = FakeWorldAgent()
    pipeline, _ = _pipeline(world, ScriptedParser(ActionPlan(reasoning="nothing matched")))

    assert await pipeline.execute_command("何か叫んで") is False
    assert world.calls == []
    assert pipeline.get_history() == []


@pytest.mark.anyio
async def test_second_command_is_rejected_while_first_runs() -> None:
    world = FakeWorldAgent()
    release = asyncio.Event()
    parser = ScriptedParser(_plan(_chat("first")), gate=release)
    pipeline, _ = _pipeline(world, parser)

    first = asyncio.create_task(pipeline.execute_command("first"))
    await parser.entered.wait()

    assert pipeline.is_executing
    assert pipeline.get_status().queue_length == 0
    assert await pipeline.execute_command("second") is False
    assert parser.instructions == ["first"]

    release.set()
    assert await first is True
    assert world.calls == [("send_chat", "first")]
    assert not pipeline.is_executing


@pytest.mark.anyio
async def test_parser_exception_releases_slot() -> None:
    class ExplodingParser(ScriptedParser):
        async def parse(self, instruction, state):
            raise RuntimeError("boom")

    pipeline, _ = _pipeline(FakeWorldAgent(), ExplodingParser(None))

    assert await pipeline.execute_command("anything") is False
    assert not pipeline.is_executing


@pytest.mark.anyio
async def test_emergency_stop_skips_remaining_actions() -> None:
    world = FakeWorldAgent()
    plan = _plan(_chat("one"), _chat("two"), _chat("three"))
    pipeline = TaskPipeline(world, ScriptedParser(plan))

    async def stop_during_gap(seconds: float) -> None:
        await pipeline.emergency_stop()

    pipeline._pause = stop_during_gap  # type: ignore[method-assign]

    assert await pipeline.execute_command("chatter") is True
    assert world.calls == [("send_chat", "one")]
    assert world.goal_clears == 1
    assert not pipeline.is_executing
    assert pipeline.get_history()[0].success_count == 1


@pytest.mark.anyio
async def test_emergency_stop_is_idempotent() -> None:
    world = FakeWorldAgent()
    pipeline, _ = _pipeline(world, ScriptedParser(_plan(_chat("hi"))))

    await pipeline.emergency_stop()
    await pipeline.emergency_stop()

    assert world.goal_clears == 2
    assert not pipeline.is_executing
    assert await pipeline.execute_command("hi") is True


@pytest.mark.anyio
async def test_llm_failure_falls_back_to_keywords_end_to_end() -> None:
    world = FakeWorldAgent()
    parser = GeminiCommandParser(api_key=None, client=FakeGenaiClient(error=RuntimeError("quota exceeded")))
    pipeline, _ = _pipeline(world, parser)

    assert await pipeline.execute_command("前に3歩歩いて") is True
    assert world.calls == [("move_to", 13, 64, 20)]


@pytest.mark.anyio
async def test_consult_next_action_passes_state_summary() -> None:
    parser = ScriptedParser(None)
    pipeline, _ = _pipeline(FakeWorldAgent(), parser)

    suggestion = await pipeline.consult_next_action("build a house")

    assert suggestion == "Chop the nearest tree."
    assert "Position" in parser.last_situation


@pytest.mark.anyio
async def test_consult_next_action_without_state() -> None:
    world = FakeWorldAgent()
    world.state = None
    pipeline, _ = _pipeline(world, ScriptedParser(None))

    assert await pipeline.consult_next_action("anything") is None
