from mineai_core.memory.history import ExecutionHistory

__all__ = ["ExecutionHistory"]
