"""
mineai-core: natural-language control for a Minecraft bot.

Instruction → Gemini (with keyword fallback) → validated ActionPlan →
sequential dispatch to the world agent → execution history.
"""

from mineai_core.brain import FallbackParser, GeminiCommandParser, PlanValidator
from mineai_core.engine import TaskPipeline

__version__ = "0.1.0"
__all__ = ["FallbackParser", "GeminiCommandParser", "PlanValidator", "TaskPipeline"]
