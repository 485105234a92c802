"""Interactive console: reads instructions and forwards them to the pipeline."""

from __future__ import annotations

import argparse
import asyncio
import threading
from typing import Callable, Sequence

from dotenv import find_dotenv, load_dotenv
from loguru import logger

from mineai_core.config import Settings, settings, validate_settings
from mineai_core.engine import TaskPipeline
from mineai_core.errors import ConfigurationError, WorldConnectionError
from mineai_core.factory import create_engine, create_world_agent
from mineai_core.logging_utils import log_event, recent_log_lines, setup_logging
from mineai_core.protocols.world import WorldAgent

PROMPT = "🎮 instruction> "
CLEAR_SCREEN = "\033[2J\033[H"

# Newest first; None asks the sidecar to auto-detect.
VERSION_CANDIDATES: tuple[str | None, ...] = ("1.21.3", "1.21.1", "1.21", "1.20.6", "1.20.4", "1.20.1", None)

HELP_TEXT = """
📚 Commands:
   🎮 free text   - natural-language instruction, e.g. "collect 5 logs", "前に3歩歩いて"
   📊 status      - show bot and executor state
   📋 history     - show recent instructions
   🧾 logs        - show the latest log lines
   🛑 stop        - emergency stop
   🧹 clear       - clear the screen
   ❓ help        - show this help
   🚪 exit / quit - leave the program"""

EXAMPLES_TEXT = """
🎯 Examples:
   - "collect 5 oak logs"
   - "walk forward 10 blocks"
   - "前に3歩歩いて"
   - "status" / "help" / "exit"
"""

CONNECTION_HELP = """
📋 Connecting to a local world:
   1. Open a world in Minecraft
   2. ESC → "Open to LAN"
   3. Put the shown port into MC_PORT in .env
   4. Start the bot sidecar and restart this program
"""


class AgentConsole:
    """Maps console lines to administrative commands or pipeline instructions."""

    def __init__(
        self,
        pipeline: TaskPipeline,
        world: WorldAgent,
        *,
        output: Callable[[str], None] = print,
        reader: Callable[[str], str] = input,
    ) -> None:
        self._pipeline = pipeline
        self._world = world
        self._out = output
        self._read = reader
        self._running = True
        self._commands = {
            "status": self.show_status,
            "history": self.show_history,
            "logs": self.show_logs,
            "stop": self.stop,
            "help": self.show_help,
            "clear": self.clear,
            "exit": self.exit,
            "quit": self.exit,
        }

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        self._out(EXAMPLES_TEXT)
        while self._running:
            try:
                line = await self._read_line()
            except (EOFError, KeyboardInterrupt):
                break
            await self.handle_input(line)

    async def _read_line(self) -> str:
        """Read one line on a daemon thread; an unanswered prompt never blocks interpreter exit."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def deliver(line: str | None, exc: BaseException | None) -> None:
            if future.done():
                return
            if isinstance(exc, StopIteration):
                future.set_exception(EOFError())
            elif exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(line or "")

        def worker() -> None:
            try:
                line, exc = self._read(PROMPT), None
            except BaseException as error:
                line, exc = None, error
            try:
                loop.call_soon_threadsafe(deliver, line, exc)
            except RuntimeError:
                # loop already closed after an interrupt
                pass

        threading.Thread(target=worker, name="mineai-stdin", daemon=True).start()
        return await future

    async def handle_input(self, line: str) -> bool:
        """Process one line; returns False once the console should stop."""
        command = (line or "").strip()
        if not command:
            return self._running

        try:
            handler = self._commands.get(command.lower())
            if handler is not None:
                await handler()
            else:
                self._out(f"\n🧠 Parsing instruction: \"{command}\"")
                if await self._pipeline.execute_command(command):
                    self._out("✅ Instruction completed")
                else:
                    self._out("❌ Instruction failed")
        except Exception as exc:
            logger.exception(log_event("console.command_failed", command=command))
            self._out(f"❌ Command error: {exc}")
        return self._running

    async def show_status(self) -> None:
        lines = ["", "📊 Status:"]
        state = await self._world.current_state()
        if state is None:
            lines.append("   ❌ Bot state unavailable")
        else:
            lines.extend(f"   {row}" for row in state.summary().splitlines())
        status = self._pipeline.get_status()
        lines.append(f"   ⚙️  Executor: {'running' if status.is_executing else 'idle'}")
        lines.append(f"   📋 History: {status.history_count} entries")
        self._out("\n".join(lines))

    async def show_history(self, limit: int = 5) -> None:
        entries = self._pipeline.get_history(limit)
        lines = ["", "📜 Recent instructions:"]
        if not entries:
            lines.append("   (no history yet)")
        for number, entry in enumerate(entries, start=1):
            stamp = entry.timestamp.astimezone().strftime("%H:%M:%S")
            lines.append(f"   {number}. [{stamp}] \"{entry.input}\"")
            lines.append(f"      → {entry.success_count}/{entry.total} actions succeeded")
        self._out("\n".join(lines))

    async def show_logs(self, limit: int = 20) -> None:
        lines = recent_log_lines(limit)
        self._out("\n".join(["", "🧾 Recent log lines:", *(f"   {line}" for line in lines or ["(nothing logged yet)"])]))

    async def stop(self) -> None:
        await self._pipeline.emergency_stop()
        self._out("🛑 Emergency stop complete")

    async def show_help(self) -> None:
        self._out(HELP_TEXT)

    async def clear(self) -> None:
        self._out(CLEAR_SCREEN + "🤖 MineAI agent - screen cleared\n")

    async def exit(self) -> None:
        self._out("👋 Shutting down...")
        self._running = False


async def _probe(config: Settings) -> int:
    world = create_world_agent(config)
    try:
        version = await world.probe_versions(VERSION_CANDIDATES)
    except WorldConnectionError as exc:
        logger.error(str(exc))
        return 1
    if version is None:
        print("❌ No compatible protocol version found")
        return 1
    print(f"✅ Compatible version: {version}  (set MC_VERSION={version if version != 'auto' else ''})")
    return 0


async def _serve(config: Settings) -> int:
    components = create_engine(config)
    world, pipeline = components.world, components.pipeline
    logger.info(log_event("startup", model=components.parser.model_name, host=config.MC_HOST, port=config.MC_PORT))

    try:
        await world.connect()
    except WorldConnectionError as exc:
        logger.error(log_event("startup.connect_failed", error=str(exc)))
        print(CONNECTION_HELP)
        return 1

    console = AgentConsole(pipeline, world)
    await console.show_status()
    try:
        await console.run()
    finally:
        await pipeline.emergency_stop()
        await world.disconnect()
        logger.info(log_event("shutdown.done"))
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mineai", description="Natural-language Minecraft bot console.")
    parser.add_argument("--env-file", default=None, help="Read settings from this .env file instead of ./.env")
    parser.add_argument("--log-level", default=None, help="Override MINEAI_LOG_LEVEL (DEBUG, INFO, ...)")
    parser.add_argument(
        "--probe-versions",
        action="store_true",
        help="Try known protocol versions against the server and exit",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    # logging_utils reads its overrides straight from os.environ
    load_dotenv(args.env_file or find_dotenv(usecwd=True))
    config = Settings(_env_file=args.env_file) if args.env_file else settings
    setup_logging(args.log_level or config.MINEAI_LOG_LEVEL)

    if args.probe_versions:
        return asyncio.run(_probe(config))

    try:
        validate_settings(config)
    except ConfigurationError as exc:
        logger.error(str(exc))
        return 1

    try:
        return asyncio.run(_serve(config))
    except KeyboardInterrupt:
        print("\n🛑 Interrupted")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
