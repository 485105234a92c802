from __future__ import annotations

from typing import Any, Mapping

import httpx

from mineai_core.errors import BridgeAPIError, BridgeOfflineError

DEFAULT_BRIDGE_URL = "http://127.0.0.1:8765"


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    """The sidecar answers errors as {"error": ..., "reason": ...}; fall back to the status text."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase, response.text

    if isinstance(payload, dict):
        for key in ("error", "reason", "message"):
            if payload.get(key):
                return str(payload[key]), payload
    return response.reason_phrase, payload


class BridgeClient:
    """JSON-over-HTTP client for the mineflayer sidecar."""

    def __init__(
        self,
        base_url: str = DEFAULT_BRIDGE_URL,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or DEFAULT_BRIDGE_URL).strip().rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def endpoint(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{normalized}"

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        endpoint = self.endpoint(path)
        effective_timeout = self._timeout if timeout is None else timeout

        try:
            async with httpx.AsyncClient(
                timeout=effective_timeout,
                trust_env=False,
                transport=self._transport,
            ) as client:
                response = await client.request(method.upper(), endpoint, params=params, json=json)
        except httpx.ConnectError as exc:
            raise BridgeOfflineError(self._base_url) from exc
        except httpx.TimeoutException as exc:
            raise BridgeAPIError(status_code=0, message="timeout", payload={"error": str(exc)}) from exc
        except httpx.RequestError as exc:
            raise BridgeAPIError(status_code=0, message=str(exc), payload={"error": str(exc)}) from exc

        if response.status_code >= 400:
            message, payload = _error_message(response)
            raise BridgeAPIError(status_code=response.status_code, message=message, payload=payload)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BridgeAPIError(
                status_code=response.status_code,
                message="Invalid JSON response",
                payload=response.text,
            ) from exc
