# src/mineai_core/memory/history.py
from collections import deque
from typing import Deque, List

from mineai_core.protocols.memory import BaseMemory
from mineai_core.schema.history import HistoryEntry


class ExecutionHistory(BaseMemory):
    """
    In-memory execution log.
    Keeps the newest ``max_entries`` instructions; nothing survives a restart.
    """

    def __init__(self, max_entries: int = 100):
        self._entries: Deque[HistoryEntry] = deque(maxlen=max(1, max_entries))

    def store(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def recent(self, limit: int = 10) -> List[HistoryEntry]:
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]

    @property
    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
