# src/mineai_core/world/bridge_agent.py
"""
WorldAgent backed by a mineflayer sidecar.

The sidecar owns the game connection, pathfinder and world model; this class
only forwards capability calls as JSON requests and normalizes the replies.
"""

from __future__ import annotations

from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from mineai_core.errors import MineAIError, WorldConnectionError
from mineai_core.logging_utils import log_event
from mineai_core.schema.state import GameState
from mineai_core.world.bridge_client import BridgeClient

# Extra HTTP allowance on top of the in-game timeout the sidecar enforces.
_HTTP_SLACK_S = 5.0
MINE_SEARCH_RADIUS = 32


class BridgeWorldAgent:
    def __init__(
        self,
        client: BridgeClient,
        *,
        host: str,
        port: int,
        username: str,
        version: str | None = None,
        auth: str = "offline",
        connect_timeout: float = 30.0,
    ) -> None:
        self._client = client
        self._host = host
        self._port = port
        self._username = username
        self._version = version
        self._auth = auth
        self._connect_timeout = connect_timeout
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def _connection_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "host": self._host,
            "port": self._port,
            "username": self._username,
            "auth": self._auth,
        }
        if self._version:
            options["version"] = self._version
        # Local servers (LAN worlds) skip session validation.
        if self._host in {"localhost", "127.0.0.1"}:
            options["skipValidation"] = True
        return options

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if self._connected:
            return
        logger.info(log_event("world.connect.start", host=self._host, port=self._port, user=self._username))
        try:
            payload = await self._client.request_json(
                "POST",
                "/connect",
                json=self._connection_options(),
                timeout=self._connect_timeout + _HTTP_SLACK_S,
            )
        except MineAIError as exc:
            raise WorldConnectionError(f"Could not reach {self._host}:{self._port}: {exc}") from exc

        if not isinstance(payload, dict) or not payload.get("connected"):
            reason = payload.get("reason") if isinstance(payload, dict) else None
            raise WorldConnectionError(f"Server refused the bot: {reason or 'unknown reason'}")

        self._connected = True
        logger.success(log_event("world.connect.spawned", user=self._username, version=payload.get("version")))

    async def disconnect(self) -> None:
        if not self._connected:
            return
        try:
            await self._client.request_json("POST", "/disconnect")
        except MineAIError as exc:
            logger.warning(log_event("world.disconnect.failed", error=str(exc)))
        finally:
            self._connected = False
        logger.info(log_event("world.disconnect.done"))

    async def probe_versions(self, candidates: Sequence[str | None]) -> str | None:
        """
        Ask the sidecar to try each protocol version in turn.

        Returns the first version the server accepted; ``"auto"`` when only
        auto-detection (a ``None`` candidate) worked; None when nothing did.
        """
        versions = [candidate or "auto" for candidate in candidates]
        try:
            payload = await self._client.request_json(
                "POST",
                "/probe",
                json={"host": self._host, "port": self._port, "versions": versions},
                timeout=self._connect_timeout * max(1, len(versions)) + _HTTP_SLACK_S,
            )
        except MineAIError as exc:
            raise WorldConnectionError(f"Version probe failed: {exc}") from exc

        results = payload.get("results", {}) if isinstance(payload, dict) else {}
        for version in versions:
            if results.get(version):
                logger.info(log_event("world.probe.compatible", version=version))
                return version
        logger.warning(log_event("world.probe.none_compatible", tried=",".join(versions)))
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def current_state(self) -> GameState | None:
        if not self._connected:
            return None
        try:
            payload = await self._client.request_json("GET", "/state")
        except MineAIError as exc:
            logger.warning(log_event("world.state.unavailable", error=str(exc)))
            return None

        if not isinstance(payload, dict) or payload.get("connected") is False:
            # kicked or the connection ended since the last call
            self._connected = False
            return None
        try:
            return GameState.model_validate(payload)
        except ValidationError as exc:
            logger.warning(log_event("world.state.invalid", error=exc.errors()[0]["msg"]))
            return None

    async def is_alive(self) -> bool:
        if not self._connected:
            return False
        try:
            payload = await self._client.request_json("GET", "/alive")
        except MineAIError:
            return False
        return bool(isinstance(payload, dict) and payload.get("alive"))

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def move_to(self, x: float, y: float, z: float, *, timeout: float) -> bool:
        logger.info(log_event("world.move.start", x=x, y=y, z=z))
        payload = await self._client.request_json(
            "POST",
            "/move",
            json={"x": x, "y": y, "z": z, "timeout_ms": int(timeout * 1000)},
            timeout=timeout + _HTTP_SLACK_S,
        )
        return bool(isinstance(payload, dict) and payload.get("reached"))

    async def break_block(self, block_type: str, *, timeout: float) -> bool:
        logger.info(log_event("world.dig.start", block=block_type))
        payload = await self._client.request_json(
            "POST",
            "/dig",
            json={
                "block_type": block_type,
                "max_distance": MINE_SEARCH_RADIUS,
                "timeout_ms": int(timeout * 1000),
            },
            timeout=timeout + _HTTP_SLACK_S,
        )
        return bool(isinstance(payload, dict) and payload.get("success"))

    async def gather_item(self, item_type: str | None, amount: int, *, timeout: float) -> int:
        logger.info(log_event("world.collect.start", item=item_type or "any", amount=amount))
        payload = await self._client.request_json(
            "POST",
            "/collect",
            json={"item_type": item_type or None, "amount": amount, "timeout_ms": int(timeout * 1000)},
            timeout=timeout + _HTTP_SLACK_S,
        )
        if not isinstance(payload, dict):
            return 0
        try:
            return max(0, int(payload.get("collected", 0)))
        except (TypeError, ValueError):
            return 0

    async def send_chat(self, message: str) -> None:
        await self._client.request_json("POST", "/chat", json={"message": message})

    async def clear_goal(self) -> None:
        if not self._connected:
            return
        try:
            await self._client.request_json("POST", "/stop")
        except MineAIError as exc:
            logger.warning(log_event("world.stop.failed", error=str(exc)))
