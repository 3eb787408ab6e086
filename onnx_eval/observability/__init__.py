# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval Observability Module

Components:
- EvalLogger: Structured logging with text or JSON output
"""

from .logger import (
    VERBOSITY_ENV,
    Verbosity,
    LogEntry,
    EvalLogger,
    get_logger,
    set_verbosity,
)

__all__ = [
    "VERBOSITY_ENV",
    "Verbosity",
    "LogEntry",
    "EvalLogger",
    "get_logger",
    "set_verbosity",
]
