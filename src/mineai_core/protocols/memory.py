# src/mineai_core/protocols/memory.py
from abc import ABC, abstractmethod
from typing import List

from mineai_core.schema.history import HistoryEntry


class BaseMemory(ABC):
    """
    Execution memory.
    Records one entry per executed instruction and serves the most recent ones.
    """

    @abstractmethod
    def store(self, entry: HistoryEntry) -> None:
        """Append one finished instruction."""
        pass

    @abstractmethod
    def recent(self, limit: int = 10) -> List[HistoryEntry]:
        """Most recent entries, oldest first."""
        pass

    @property
    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
