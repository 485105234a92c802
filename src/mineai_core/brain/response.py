# src/mineai_core/brain/response.py
import re
from typing import Any, Dict, Optional

import json_repair
from loguru import logger

from mineai_core.logging_utils import log_event

_FENCE = re.compile(r"```(?:json)?\s*|\s*```")
_OBJECT = re.compile(r"(\{.*\})", re.DOTALL)


class ResponseParser:
    """
    Extracts the task JSON from an LLM reply.
    Handles markdown fences, surrounding prose and slightly broken JSON.
    """

    @classmethod
    def extract(cls, raw_text: Any) -> Optional[Dict[str, Any]]:
        """Return the reply as a dict with a ``tasks`` list, or None."""
        if not isinstance(raw_text, str) or not raw_text.strip():
            return None

        clean_text = _FENCE.sub("", raw_text).strip()
        candidate = clean_text
        if not clean_text.startswith("["):
            match = _OBJECT.search(clean_text)
            if match:
                candidate = match.group(1)

        try:
            data = json_repair.loads(candidate)
        except Exception as exc:
            logger.warning(log_event("llm.reply.unparseable", error=repr(exc)))
            return None

        if isinstance(data, list):
            data = {"tasks": data}
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            logger.warning(log_event("llm.reply.no_tasks", preview=clean_text[:120]))
            return None
        return data
