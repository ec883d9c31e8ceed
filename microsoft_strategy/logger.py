# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured logging for the Microsoft strategy.

Loggers take a message plus arbitrary keyword fields. The stdout logger
prints one JSON object per line and mirrors each record to the stdlib
``logging`` module so test harnesses (``caplog``) can capture it. The
silent logger keeps records in memory for assertions.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Logger(ABC):
    """Abstract base class for loggers.

    Subclasses implement ``_log``; the level helpers are shared.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        self.level = level.upper()
        self.name = name or "microsoft_strategy"

        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(LEVELS.keys())}")

    @abstractmethod
    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        """Record a message at the given level.

        Args:
            level: One of DEBUG, INFO, WARNING, ERROR
            message: The log message
            **kwargs: Additional structured data to log
        """
        pass

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message with the active exception attached."""
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)


class StdoutLogger(Logger):
    """Logger that outputs structured JSON logs to stdout."""

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)
        self._stdlib_logger = logging.getLogger(self.name)
        # Filtering happens in _log; the stdlib logger inherits the root level
        self._stdlib_logger.setLevel(logging.NOTSET)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        if LEVELS[level] < LEVELS[self.level]:
            return

        exc_info = kwargs.pop("exc_info", None)
        # The same "extra" key goes into the JSON line and onto the stdlib record
        extra = {"extra": kwargs} if kwargs else {}
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
            **extra,
        }
        print(json.dumps(entry, default=str), flush=True)
        self._stdlib_logger.log(LEVELS[level], message, exc_info=exc_info, extra=extra or None)


class SilentLogger(Logger):
    """Logger that stores records in memory without output.

    Records are kept regardless of level so tests can assert on them.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)
        self.logs: list[dict[str, Any]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        entry: dict[str, Any] = {"level": level, "message": message}
        if kwargs:
            entry["extra"] = kwargs
        self.logs.append(entry)

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Return stored records, optionally filtered by level."""
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Check whether any stored record contains ``message``."""
        return any(message in log["message"] for log in self.get_logs(level))

    def clear_logs(self) -> None:
        self.logs.clear()


def _default(value: str | None, env_var: str, fallback: str) -> str:
    """Pick an explicit value, then env var, then fallback."""
    return value or os.getenv(env_var) or fallback


def create_logger(
    logger_type: str | None = None,
    level: str | None = None,
    name: str | None = None,
) -> Logger:
    """Create a logger instance.

    Args:
        logger_type: "stdout" or "silent". Defaults to LOG_TYPE env or "stdout".
        level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env or "INFO".
        name: Logger name. Defaults to LOG_NAME env or "microsoft_strategy".

    Returns:
        Logger instance

    Raises:
        ValueError: If logger_type or level is not recognized

    Example:
        >>> logger = create_logger(logger_type="silent")
        >>> logger.info("Profile fetched", user_id="99")
    """
    logger_type = _default(logger_type, "LOG_TYPE", "stdout").lower()
    level = _default(level, "LOG_LEVEL", "INFO").upper()
    name = _default(name, "LOG_NAME", "microsoft_strategy")

    if logger_type == "stdout":
        return StdoutLogger(level=level, name=name)
    elif logger_type == "silent":
        return SilentLogger(level=level, name=name)
    else:
        raise ValueError(
            f"Unknown logger_type: {logger_type}. "
            f"Must be one of: stdout, silent"
        )
