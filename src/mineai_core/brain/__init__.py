"""Instruction parsing: Gemini integration, plan validation and the keyword fallback."""

from mineai_core.brain.fallback import FallbackParser
from mineai_core.brain.gemini import GeminiCommandParser
from mineai_core.brain.response import ResponseParser
from mineai_core.brain.validator import PlanValidator

__all__ = ["FallbackParser", "GeminiCommandParser", "PlanValidator", "ResponseParser"]
