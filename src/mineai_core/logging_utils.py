from __future__ import annotations

import logging
import os
import sys
from collections import deque
from threading import Lock
from typing import Any

from loguru import logger

_VALID_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
_SRC_WIDTH = 28

# stdlib loggers of the HTTP and LLM clients; INFO there is one line per request.
_TRANSPORT_LOGGERS = ("httpx", "httpcore", "google_genai", "google.genai")

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[src]: <" + str(_SRC_WIDTH) + "}</cyan> | "
    "<level>{message}</level>"
)


class _RecentLines:
    """Thread-safe tail of rendered log lines, read by the console ``logs`` command."""

    def __init__(self, maxlen: int) -> None:
        self._lines: deque[str] = deque(maxlen=maxlen)
        self._lock = Lock()

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def tail(self, limit: int) -> list[str]:
        with self._lock:
            lines = list(self._lines)
        return lines[-limit:] if limit > 0 else []

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()


_RECENT = _RecentLines(maxlen=max(50, int(os.getenv("MINEAI_LOG_BUFFER_SIZE", "300"))))


def _normalize_level(value: str | None) -> str | None:
    candidate = (value or "").strip().upper()
    return candidate if candidate in _VALID_LEVELS else None


def _stdlib_level(level_name: str) -> int:
    # loguru-only levels have no stdlib counterpart
    return {"TRACE": logging.DEBUG, "SUCCESS": logging.INFO}.get(level_name, getattr(logging, level_name))


def _add_source(record: dict[str, Any]) -> None:
    extra = record["extra"]
    module = str(extra.get("py_name") or record.get("name") or "-").rsplit(".", 1)[-1]
    function = str(extra.get("py_func") or record.get("function") or "-")
    line = extra.get("py_line") or record.get("line")
    extra["src"] = f"{module}.{function}:{line}"[:_SRC_WIDTH]


def _recent_sink(message: Any) -> None:
    record = message.record
    _RECENT.append(
        f"{record['time']:%H:%M:%S} {record['level'].name:<8} {record['extra'].get('src', '-')} | {record['message']}"
    )


class InterceptHandler(logging.Handler):
    """Forwards stdlib records (httpx, google-genai) to loguru, keeping their call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(py_name=record.name, py_func=record.funcName, py_line=record.lineno).opt(
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(level: str | None = None) -> str:
    """
    Install loguru as the only sink and route stdlib logging through it.

    The app level is taken from ``level`` (the ``--log-level`` flag), then
    ``MINEAI_LOG_LEVEL``, then INFO. ``MINEAI_HTTPX_LOG_LEVEL`` sets the level of
    the HTTP and Gemini client loggers (WARNING by default). When
    ``MINEAI_LOG_FILE`` is set, a rotating file sink is added as well.

    Returns the effective app level.
    """
    app_level = _normalize_level(level) or _normalize_level(os.getenv("MINEAI_LOG_LEVEL")) or "INFO"
    transport_level = _normalize_level(os.getenv("MINEAI_HTTPX_LOG_LEVEL")) or "WARNING"

    logger.remove()
    logger.configure(patcher=_add_source)
    logger.add(sys.stderr, level=app_level, colorize=True, backtrace=False, diagnose=False, format=_CONSOLE_FORMAT)
    logger.add(_recent_sink, level="DEBUG", colorize=False, catch=False)

    log_file = os.getenv("MINEAI_LOG_FILE")
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="5 MB", retention=3, encoding="utf-8", enqueue=True)

    root = logging.getLogger()
    root.handlers = [InterceptHandler()]
    root.setLevel(_stdlib_level(app_level))

    for name in _TRANSPORT_LOGGERS:
        transport_logger = logging.getLogger(name)
        transport_logger.handlers = [InterceptHandler()]
        transport_logger.propagate = False
        transport_logger.setLevel(_stdlib_level(transport_level))

    return app_level


def recent_log_lines(limit: int = 20) -> list[str]:
    """Last ``limit`` log lines emitted since ``setup_logging``."""
    return _RECENT.tail(limit)


def clear_recent_log_lines() -> None:
    _RECENT.clear()


def _format_value(value: Any) -> str:
    if value is None:
        return "None"
    if not isinstance(value, str):
        return str(value)
    text = value.replace("\n", "\\n")
    if not text or any(ch in text for ch in " |'"):
        return "'" + text.replace("'", "\\'") + "'"
    return text


def log_event(event: str, **fields: Any) -> str:
    """Build a consistent `evt=... | key=value` log message."""
    return " | ".join([f"evt={event}", *(f"{key}={_format_value(value)}" for key, value in fields.items())])
