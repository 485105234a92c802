"""Tests for the HTTP bridge client and BridgeWorldAgent using httpx.MockTransport."""

import json

import httpx
import pytest

from mineai_core.errors import BridgeAPIError, BridgeOfflineError, WorldConnectionError
from mineai_core.world.bridge_agent import BridgeWorldAgent
from mineai_core.world.bridge_client import BridgeClient

STATE_PAYLOAD = {
    "connected": True,
    "position": {"x": 10, "y": 64, "z": 20},
    "health": 20,
    "food": 18,
    "inventory": [{"name": "dirt", "displayName": "Dirt", "count": 3}],
    "nearbyBlocks": [],
    "nearbyEntities": [],
    "time": 1000,
    "weather": "clear",
}


class Sidecar:
    """Records requests and answers from a path -> payload table."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.requests: list[tuple[str, str, dict]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.method, request.url.path, body))
        reply = self.routes.get(request.url.path)
        if reply is None:
            return httpx.Response(404, json={"error": "no route"})
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


def _agent(routes: dict, **kwargs) -> tuple[BridgeWorldAgent, Sidecar]:
    sidecar = Sidecar(routes)
    client = BridgeClient("http://bridge.test/", transport=httpx.MockTransport(sidecar))
    agent = BridgeWorldAgent(client, host="localhost", port=25565, username="MineAI_Bot", **kwargs)
    return agent, sidecar


def test_endpoint_joins_paths() -> None:
    client = BridgeClient("http://bridge.test/")
    assert client.endpoint("state") == "http://bridge.test/state"
    assert client.endpoint("/move") == "http://bridge.test/move"


@pytest.mark.anyio
async def test_error_status_raises_bridge_api_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "pathfinder crashed"}))
    client = BridgeClient("http://bridge.test", transport=transport)

    with pytest.raises(BridgeAPIError) as excinfo:
        await client.request_json("GET", "/state")
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "pathfinder crashed"


@pytest.mark.anyio
async def test_unreachable_sidecar_raises_offline_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = BridgeClient("http://bridge.test", transport=httpx.MockTransport(refuse))
    with pytest.raises(BridgeOfflineError):
        await client.request_json("GET", "/alive")


@pytest.mark.anyio
async def test_connect_sends_options_and_marks_connected() -> None:
    agent, sidecar = _agent({"/connect": {"connected": True, "version": "1.21.3"}}, version="1.21.3")

    await agent.connect()

    assert agent.connected
    method, path, body = sidecar.requests[0]
    assert (method, path) == ("POST", "/connect")
    assert body["username"] == "MineAI_Bot"
    assert body["version"] == "1.21.3"
    assert body["skipValidation"] is True


@pytest.mark.anyio
async def test_connect_refused_by_server() -> None:
    agent, _ = _agent({"/connect": {"connected": False, "reason": "outdated client"}})

    with pytest.raises(WorldConnectionError, match="outdated client"):
        await agent.connect()
    assert not agent.connected


@pytest.mark.anyio
async def test_connect_with_sidecar_offline() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = BridgeClient("http://bridge.test", transport=httpx.MockTransport(refuse))
    agent = BridgeWorldAgent(client, host="example.org", port=25565, username="bot")

    with pytest.raises(WorldConnectionError):
        await agent.connect()


@pytest.mark.anyio
async def test_state_is_none_before_connect() -> None:
    agent, sidecar = _agent({"/state": STATE_PAYLOAD})
    assert await agent.current_state() is None
    assert await agent.is_alive() is False
    assert sidecar.requests == []


@pytest.mark.anyio
async def test_state_parses_camel_case_payload() -> None:
    agent, _ = _agent({"/connect": {"connected": True}, "/state": STATE_PAYLOAD, "/alive": {"alive": True}})
    await agent.connect()

    state = await agent.current_state()

    assert state.position.x == 10
    assert state.inventory[0].display_name == "Dirt"
    assert await agent.is_alive() is True


@pytest.mark.anyio
async def test_state_reports_disconnect_after_kick() -> None:
    agent, _ = _agent({"/connect": {"connected": True}, "/state": {"connected": False}})
    await agent.connect()

    assert await agent.current_state() is None
    assert not agent.connected


@pytest.mark.anyio
async def test_capability_calls_forward_payloads() -> None:
    agent, sidecar = _agent(
        {
            "/connect": {"connected": True},
            "/move": {"reached": True},
            "/dig": {"success": False},
            "/collect": {"collected": 2},
            "/chat": {"sent": True},
            "/stop": {},
        }
    )
    await agent.connect()

    assert await agent.move_to(1, 64, 2, timeout=30) is True
    assert await agent.break_block("stone", timeout=15) is False
    assert await agent.gather_item(None, 5, timeout=60) == 2
    await agent.send_chat("hello")
    await agent.clear_goal()

    paths = [path for _, path, _ in sidecar.requests]
    assert paths == ["/connect", "/move", "/dig", "/collect", "/chat", "/stop"]
    assert sidecar.requests[1][2] == {"x": 1, "y": 64, "z": 2, "timeout_ms": 30000}
    assert sidecar.requests[3][2]["item_type"] is None
    assert sidecar.requests[4][2] == {"message": "hello"}


@pytest.mark.anyio
async def test_probe_returns_first_compatible_version() -> None:
    agent, sidecar = _agent({"/probe": {"results": {"1.21.4": False, "1.21.3": True, "auto": True}}})

    assert await agent.probe_versions(["1.21.4", "1.21.3", None]) == "1.21.3"
    assert sidecar.requests[0][2]["versions"] == ["1.21.4", "1.21.3", "auto"]


@pytest.mark.anyio
async def test_probe_falls_back_to_auto_or_none() -> None:
    agent, _ = _agent({"/probe": {"results": {"1.21.4": False, "auto": True}}})
    assert await agent.probe_versions(["1.21.4", None]) == "auto"

    agent, _ = _agent({"/probe": {"results": {}}})
    assert await agent.probe_versions(["1.21.4"]) is None
