"""
Logging setup for shepimport.

Two formats:
- Console: brief, human-readable, coloured unless NO_COLOR is set
- JSONL: one JSON object per line, for the optional ``--log-file``

Records produced through an `ImportContext` logger carry a ``run_id``
attribute; both formatters include it when present.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

ROOT_LOGGER_NAME = "shepimport"

# =============================================================================
# ANSI styling, disabled by NO_COLOR or a non-terminal stderr
# =============================================================================

_NO_COLOR = bool(os.environ.get("NO_COLOR")) or not sys.stderr.isatty()


def _ansi(code: str) -> str:
    return "" if _NO_COLOR else f"\033[{code}m"


RESET = _ansi("0")
DIM = _ansi("2")

LEVEL_COLORS = {
    logging.DEBUG: _ansi("36"),
    logging.WARNING: _ansi("33"),
    logging.ERROR: _ansi("31"),
    logging.CRITICAL: _ansi("35"),
}


# =============================================================================
# Formatters
# =============================================================================


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Example output:
    {"timestamp":"2026-01-15T10:30:45.123+00:00","level":"WARNING",
     "logger":"shepimport.pipeline","run_id":"3f2a9c1e","message":"Skipped app/page.tsx"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = getattr(record, "run_id", None)
        if run_id:
            entry["run_id"] = run_id

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.levelno >= logging.WARNING:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """``HH:MM:SS [component] (run) LEVEL: message``; the level is omitted for INFO."""

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{DIM}{clock}{RESET}", f"[{record.name.removeprefix(ROOT_LOGGER_NAME + '.')}]"]

        run_id = getattr(record, "run_id", None)
        if run_id:
            parts.append(f"({run_id})")
        if record.levelno != logging.INFO:
            parts.append(f"{LEVEL_COLORS.get(record.levelno, '')}{record.levelname}{RESET}:")

        parts.append(record.getMessage())
        return " ".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(level: int = logging.WARNING, log_file: Path | None = None) -> None:
    """
    Configure the ``shepimport`` logger hierarchy.

    Console output goes to stderr so command output on stdout stays clean.

    Args:
        level: Minimum log level
        log_file: Optional path for a JSONL log file
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(min(level, logging.DEBUG) if log_file else level)
    root_logger.handlers.clear()
    root_logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONLFormatter())
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        root_logger.debug("JSONL logging to %s", log_file)
