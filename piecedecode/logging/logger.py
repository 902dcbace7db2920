# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for piecedecode.

Every diagnostic is a single JSON line: timestamped, leveled, and tagged
with the source module. Decoded text is the only thing that goes to the
output sink, and since that sink defaults to stdout, the logger writes to
stderr. Mixing the two would corrupt the decoded stream.

How this works:
  - configure_logging() attaches a JsonFormatter handler (stderr, plus an
    optional file) to the "piecedecode" package logger. The CLI calls it
    once per run with the user's level.
  - get_logger() is the only way to create loggers. Every logger lives under
    the "piecedecode." namespace and propagates to that package logger.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "piecedecode.cli.decode", "msg": "Decode started", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry carries four mandatory fields:
      ts     — ISO 8601 UTC timestamp
      level  — log level name
      module — the logger name
      msg    — the formatted message string

    Anything passed through `extra` gets merged in as additional fields,
    which is how the runner attaches file names, unit counts and so on.
    """

    _STANDARD_ATTRS = frozenset(
        {
            "name",
            "msg",
            "args",
            "created",
            "relativeCreated",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "pathname",
            "filename",
            "module",
            "levelno",
            "levelname",
            "processName",
            "process",
            "threadName",
            "thread",
            "message",
            "msecs",
            "taskName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


ROOT_LOGGER_NAME = "piecedecode"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach JSON handlers to the package root logger.

    Every module logger lives under the `piecedecode.` namespace and
    propagates here, so this one call decides the level and destination of
    every diagnostic in a run. Calling it again replaces the handlers, which
    is what the CLI does at the start of each invocation.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  the stream and the file.
        stream: Console destination. Defaults to the current sys.stderr.

    Returns:
        The configured package root logger.
    """
    level = _resolve_log_level(log_level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter()

    console_handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Don't propagate to the Python root logger, we handle all output ourselves.
    root.propagate = False

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the package namespace.

    This is the only sanctioned way to get a logger in piecedecode. If
    nothing has configured logging yet (library use, tests), the package
    root gets INFO-level JSON output on stderr.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        raise ValueError(f"Logger name must live under '{ROOT_LOGGER_NAME}', got '{name}'")

    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        configure_logging()

    return logging.getLogger(name)
