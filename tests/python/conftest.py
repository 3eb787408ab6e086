# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for onnx_eval Python tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import onnx_eval
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Skip test modules that require optional dependencies not installed
collect_ignore = []

# Check for onnx
try:
    import onnx  # noqa: F401
except ImportError:
    collect_ignore.append("test_onnx_adapter.py")


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Give every test a fresh, silent logger."""
    from onnx_eval.observability import EvalLogger, Verbosity

    monkeypatch.delenv("ONNX_EVAL_VERBOSITY", raising=False)
    EvalLogger.reset()
    EvalLogger.get().set_verbosity(Verbosity.SILENT)
    yield
    EvalLogger.reset()
