from mineai_core.reporters.base import BaseReporter
from mineai_core.reporters.console import ConsoleReporter

__all__ = ["BaseReporter", "ConsoleReporter"]
