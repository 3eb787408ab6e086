# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Structured Logger for onnx_eval

Provides structured logging with text or JSON output. The interpreter reports
graph start/finish and per-node execution at DEBUG and failures at ERROR.

Example:
    from onnx_eval.observability import EvalLogger, Verbosity

    logger = EvalLogger.get()
    logger.set_verbosity(Verbosity.DEBUG)
    logger.debug("Node executed", op_type="Conv", node_name="conv_0")
"""

import json
import os
import sys
from dataclasses import dataclass, asdict, field
from datetime import datetime
from enum import IntEnum
from typing import Callable, List, Optional, TextIO

VERBOSITY_ENV = "ONNX_EVAL_VERBOSITY"


class Verbosity(IntEnum):
    """
    Logging verbosity levels.

    Uses IntEnum for numeric comparison (e.g., if verbosity >= INFO).
    """

    SILENT = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4


@dataclass
class LogEntry:
    """
    Structured log entry.

    Attributes:
        level: Log level (ERROR, WARNING, INFO, DEBUG)
        message: Log message
        timestamp: ISO format timestamp
        component: Source component (interpreter, adapter, ...)
        graph_name: Optional graph being evaluated
        op_type: Optional operator type
        node_name: Optional node name
        duration_ms: Optional duration in milliseconds
        extra: Additional context fields
    """

    level: str
    message: str
    timestamp: str
    component: str = "onnx_eval"
    graph_name: Optional[str] = None
    op_type: Optional[str] = None
    node_name: Optional[str] = None
    duration_ms: Optional[float] = None
    extra: dict = field(default_factory=dict)

    def to_json(self) -> str:
        """Convert to JSON string."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if not data.get("extra"):
            data.pop("extra", None)
        return json.dumps(data, default=str)

    def to_text(self) -> str:
        """Convert to human-readable text format."""
        parts = [
            f"[{self.level}]",
            f"[{self.component}]",
            self.message,
        ]
        if self.op_type is not None:
            parts.append(f"<{self.op_type}:{self.node_name}>")
        if self.duration_ms is not None:
            parts.append(f"({self.duration_ms:.2f}ms)")
        return " ".join(parts)


def _verbosity_from_env() -> Optional[Verbosity]:
    value = os.environ.get(VERBOSITY_ENV)
    if value is None:
        return None
    try:
        return Verbosity(int(value))
    except ValueError:
        return None


class EvalLogger:
    """
    Structured logger for onnx_eval.

    Singleton pattern keeps one logging configuration for the whole package.

    Example:
        logger = EvalLogger.get()
        logger.set_verbosity(Verbosity.DEBUG)
        logger.info("Evaluation started", component="interpreter")
    """

    _instance: Optional["EvalLogger"] = None

    def __init__(self):
        """Initialize logger with default settings."""
        env_verbosity = _verbosity_from_env()
        self._verbosity = (
            Verbosity.WARNING if env_verbosity is None else env_verbosity
        )
        self._output: TextIO = sys.stderr
        self._json_format = False
        self._handlers: List[Callable[[LogEntry], None]] = []

    @classmethod
    def get(cls) -> "EvalLogger":
        """Get the singleton logger instance."""
        if cls._instance is None:
            cls._instance = EvalLogger()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    def set_verbosity(self, level: int) -> None:
        """
        Set verbosity level.

        Args:
            level: Verbosity level (0-4 or Verbosity enum)
        """
        if isinstance(level, Verbosity):
            self._verbosity = level
        else:
            self._verbosity = Verbosity(max(0, min(4, int(level))))

    def get_verbosity(self) -> Verbosity:
        """Get current verbosity level."""
        return self._verbosity

    def is_enabled(self, level: Verbosity) -> bool:
        return self._verbosity >= level

    def set_json_format(self, enabled: bool) -> None:
        """Enable or disable JSON output format."""
        self._json_format = enabled

    def set_output(self, output: TextIO) -> None:
        """Set output stream."""
        self._output = output

    def add_handler(self, handler: Callable[[LogEntry], None]) -> None:
        """Add a custom log handler."""
        self._handlers.append(handler)

    def _emit(self, entry: LogEntry) -> None:
        if self._json_format:
            line = entry.to_json()
        else:
            line = entry.to_text()

        self._output.write(line + "\n")
        self._output.flush()

        for handler in self._handlers:
            handler(entry)

    def _log(self, level: Verbosity, message: str, context: dict) -> None:
        if self._verbosity < level:
            return
        self._emit(
            LogEntry(
                level=level.name,
                message=message,
                timestamp=datetime.now().isoformat(),
                component=context.pop("component", "onnx_eval"),
                graph_name=context.pop("graph_name", None),
                op_type=context.pop("op_type", None),
                node_name=context.pop("node_name", None),
                duration_ms=context.pop("duration_ms", None),
                extra=context,
            )
        )

    def debug(self, message: str, **context) -> None:
        """Log debug message."""
        self._log(Verbosity.DEBUG, message, context)

    def info(self, message: str, **context) -> None:
        """Log info message."""
        self._log(Verbosity.INFO, message, context)

    def warning(self, message: str, **context) -> None:
        """Log warning message."""
        self._log(Verbosity.WARNING, message, context)

    def error(self, message: str, **context) -> None:
        """Log error message."""
        self._log(Verbosity.ERROR, message, context)


def get_logger() -> EvalLogger:
    """Get the global onnx_eval logger."""
    return EvalLogger.get()


def set_verbosity(level: int) -> None:
    """
    Set global verbosity level.

    Args:
        level: Verbosity level (0=SILENT, 1=ERROR, 2=WARNING, 3=INFO, 4=DEBUG)
    """
    EvalLogger.get().set_verbosity(level)
