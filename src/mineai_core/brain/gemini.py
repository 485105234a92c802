# src/mineai_core/brain/gemini.py
from __future__ import annotations

import asyncio
from typing import Any

from google import genai
from google.genai import types
from loguru import logger

from mineai_core.brain.fallback import FallbackParser
from mineai_core.brain.prompts import (
    SYSTEM_PROMPT,
    build_command_prompt,
    build_error_prompt,
    build_next_action_prompt,
)
from mineai_core.brain.response import ResponseParser
from mineai_core.brain.validator import PlanValidator
from mineai_core.logging_utils import log_event
from mineai_core.schema.plan import ActionPlan
from mineai_core.schema.state import GameState


class GeminiCommandParser:
    """
    CommandParser backed by Gemini.

    Every model call runs under ``timeout``. Errors, timeouts and malformed
    replies never propagate: ``parse`` degrades to the fallback parser and the
    free-text helpers return None.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        model_name: str = "gemini-2.0-flash",
        max_tokens: int = 1000,
        temperature: float = 0.7,
        timeout: float = 30.0,
        validator: PlanValidator | None = None,
        fallback: FallbackParser | None = None,
        client: Any = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("A Gemini API key is required")
            client = genai.Client(api_key=api_key)
        self._client = client
        self._model_name = model_name
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._validator = validator or PlanValidator()
        self._fallback = fallback or FallbackParser()

    @property
    def model_name(self) -> str:
        return self._model_name

    async def parse(self, instruction: str, state: GameState) -> ActionPlan | None:
        prompt = build_command_prompt(instruction, state)
        logger.info(log_event("llm.parse.start", model=self._model_name, chars=len(instruction)))

        try:
            raw_text = await self._generate(prompt, max_tokens=self._max_tokens, json_mode=True)
        except asyncio.TimeoutError:
            logger.warning(log_event("llm.parse.timeout", timeout_s=self._timeout))
            return self._fallback.parse(instruction, error="llm_timeout")
        except Exception as exc:
            logger.warning(log_event("llm.parse.failed", error=repr(exc)))
            return self._fallback.parse(instruction, error=f"llm_error: {exc}")

        data = ResponseParser.extract(raw_text)
        if data is None:
            logger.warning(log_event("llm.parse.malformed", preview=(raw_text or "")[:120]))
            return self._fallback.parse(instruction, error="malformed_response")

        plan = self._validator.validate(data, source="llm")
        logger.info(log_event("llm.parse.done", actions=len(plan.actions), summary=plan.summary))
        return plan

    async def suggest_next_action(self, situation: str, goal: str) -> str | None:
        return await self._ask(build_next_action_prompt(situation, goal), max_tokens=500, event="llm.next_action")

    async def analyze_error(self, description: str, state: GameState | None) -> str | None:
        return await self._ask(build_error_prompt(description, state), max_tokens=300, event="llm.analyze_error")

    async def _ask(self, prompt: str, *, max_tokens: int, event: str) -> str | None:
        try:
            text = await self._generate(prompt, max_tokens=max_tokens, json_mode=False)
        except asyncio.TimeoutError:
            logger.warning(log_event(f"{event}.timeout", timeout_s=self._timeout))
            return None
        except Exception as exc:
            logger.warning(log_event(f"{event}.failed", error=repr(exc)))
            return None
        text = (text or "").strip()
        return text or None

    async def _generate(self, prompt: str, *, max_tokens: int, json_mode: bool) -> str:
        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT if json_mode else None,
            max_output_tokens=max_tokens,
            temperature=self._temperature,
            response_mime_type="application/json" if json_mode else None,
        )
        response = await asyncio.wait_for(
            self._client.aio.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config=config,
            ),
            timeout=self._timeout,
        )

        # Safety filters can leave the candidate list empty.
        if not getattr(response, "candidates", None):
            raise RuntimeError("Gemini returned no candidates")
        return response.text or ""
