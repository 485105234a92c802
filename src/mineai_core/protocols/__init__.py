"""Interfaces between the pipeline and its collaborators."""

from mineai_core.protocols.memory import BaseMemory
from mineai_core.protocols.parser import CommandParser
from mineai_core.protocols.reporter import Reporter
from mineai_core.protocols.world import WorldAgent

__all__ = ["BaseMemory", "CommandParser", "Reporter", "WorldAgent"]
