"""Tests for the interactive console and CLI entry point."""

import asyncio
import threading

import pytest
from fakes import FakeWorldAgent, ScriptedParser

from mineai_core.console import HELP_TEXT, AgentConsole, main
from mineai_core.engine import TaskPipeline
from mineai_core.logging_utils import clear_recent_log_lines, setup_logging
from mineai_core.schema.action import Action, ActionKind
from mineai_core.schema.plan import ActionPlan


def _console(plan: ActionPlan | None = None, *, reader=input) -> tuple[AgentConsole, list[str], FakeWorldAgent]:
    world = FakeWorldAgent()
    if plan is None:
        plan = ActionPlan(actions=(Action(kind=ActionKind.CHAT, parameters={"message": "hi"}),))
    pipeline = TaskPipeline(world, ScriptedParser(plan), action_gap=0)
    output: list[str] = []
    return AgentConsole(pipeline, world, output=output.append, reader=reader), output, world


@pytest.mark.anyio
async def test_free_text_runs_instruction() -> None:
    console, output, world = _console()

    assert await console.handle_input("say hi") is True

    assert world.calls == [("send_chat", "hi")]
    assert output[-1] == "✅ Instruction completed"


@pytest.mark.anyio
async def test_failed_instruction_is_reported() -> None:
    console, output, world = _console(ActionPlan())

    await console.handle_input("何か叫んで")

    assert output[-1] == "❌ Instruction failed"
    assert world.calls == []


@pytest.mark.anyio
async def test_reserved_words_are_case_insensitive_and_not_sent_to_parser() -> None:
    console, output, world = _console()

    await console.handle_input("  HELP ")
    await console.handle_input("Status")

    assert output[0] == HELP_TEXT
    assert "📊 Status:" in output[1]
    assert "Position: (10, 64, 20)" in output[1]
    assert world.calls == []


@pytest.mark.anyio
async def test_history_lists_recent_instructions() -> None:
    console, output, _ = _console()

    await console.handle_input("history")
    assert "(no history yet)" in output[-1]

    await console.handle_input("say hi")
    await console.handle_input("history")
    assert '"say hi"' in output[-1]
    assert "1/1 actions succeeded" in output[-1]


@pytest.mark.anyio
async def test_stop_triggers_emergency_stop() -> None:
    console, output, world = _console()

    await console.handle_input("stop")

    assert world.goal_clears == 1
    assert output[-1] == "🛑 Emergency stop complete"


@pytest.mark.anyio
async def test_empty_line_is_ignored() -> None:
    console, output, _ = _console()
    assert await console.handle_input("   ") is True
    assert output == []


@pytest.mark.anyio
@pytest.mark.parametrize("word", ["exit", "quit", "EXIT"])
async def test_exit_words_stop_the_console(word: str) -> None:
    console, _, _ = _console()
    assert await console.handle_input(word) is False
    assert not console.running


@pytest.mark.anyio
async def test_run_reads_until_exit() -> None:
    lines = iter(["say hi", "exit", "never read"])
    console, _, world = _console(reader=lambda prompt: next(lines))

    await console.run()

    assert world.calls == [("send_chat", "hi")]
    assert next(lines) == "never read"


@pytest.mark.anyio
async def test_run_stops_on_end_of_input() -> None:
    def reader(prompt: str) -> str:
        raise EOFError

    console, _, _ = _console(reader=reader)
    await console.run()
    assert console.running


def test_main_without_api_key_exits_with_error(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("MC_AUTH=offline\n", encoding="utf-8")

    assert main(["--env-file", str(env_file), "--log-level", "ERROR"]) == 1


@pytest.mark.anyio
async def test_logs_command_shows_recent_lines() -> None:
    setup_logging("INFO")
    clear_recent_log_lines()
    console, output, _ = _console()

    await console.handle_input("say hi")
    await console.handle_input("LOGS")

    assert "🧾 Recent log lines:" in output[-1]
    assert "evt=command.start" in output[-1]


@pytest.mark.anyio
async def test_input_is_read_on_a_daemon_thread() -> None:
    daemon_flags: list[bool] = []

    def reader(prompt: str) -> str:
        daemon_flags.append(threading.current_thread().daemon)
        return "exit"

    console, _, _ = _console(reader=reader)
    await console.run()

    assert daemon_flags == [True]


@pytest.mark.anyio
async def test_cancelling_run_does_not_wait_for_pending_input() -> None:
    never_answered = threading.Event()

    def reader(prompt: str) -> str:
        never_answered.wait(5)
        raise EOFError

    console, _, _ = _console(reader=reader)
    task = asyncio.create_task(console.run())
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=1)
    never_answered.set()
