# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for onnx_eval Observability Module

Validates:
- Verbosity enum
- LogEntry serialization
- EvalLogger singleton, env configuration and handlers
- Interpreter log output
"""

import io
import json

import numpy as np

from onnx_eval.core import GraphDescriptor, ValueInfo, make_node
from onnx_eval.execution import ONNXInterpreter
from onnx_eval.observability import (
    Verbosity,
    LogEntry,
    EvalLogger,
    get_logger,
    set_verbosity,
)


class TestVerbosity:
    """Tests for Verbosity enum."""

    def test_verbosity_values(self):
        assert Verbosity.SILENT == 0
        assert Verbosity.ERROR == 1
        assert Verbosity.WARNING == 2
        assert Verbosity.INFO == 3
        assert Verbosity.DEBUG == 4


class TestLogEntry:
    """Tests for LogEntry dataclass."""

    def test_log_entry_to_json(self):
        entry = LogEntry(
            level="DEBUG",
            message="Node executed",
            timestamp="2025-01-01T00:00:00",
            component="interpreter",
            op_type="Relu",
            node_name="relu_0",
            duration_ms=1.5,
        )
        data = json.loads(entry.to_json())

        assert data["level"] == "DEBUG"
        assert data["op_type"] == "Relu"
        assert data["node_name"] == "relu_0"
        assert data["duration_ms"] == 1.5
        assert "graph_name" not in data
        assert "extra" not in data

    def test_log_entry_to_text(self):
        entry = LogEntry(
            level="ERROR",
            message="failed",
            timestamp="2025-01-01T00:00:00",
            component="interpreter",
            op_type="Conv",
            node_name="conv_0",
            duration_ms=2.0,
        )
        text = entry.to_text()

        assert "[ERROR]" in text
        assert "[interpreter]" in text
        assert "<Conv:conv_0>" in text
        assert "2.00ms" in text


class TestEvalLogger:
    """Tests for EvalLogger class."""

    def setup_method(self):
        EvalLogger.reset()

    def test_singleton_pattern(self):
        assert EvalLogger.get() is EvalLogger.get()
        assert get_logger() is EvalLogger.get()

    def test_default_verbosity(self):
        assert EvalLogger.get().get_verbosity() == Verbosity.WARNING

    def test_env_verbosity(self, monkeypatch):
        monkeypatch.setenv("ONNX_EVAL_VERBOSITY", "4")
        assert EvalLogger.get().get_verbosity() == Verbosity.DEBUG

    def test_env_verbosity_silent(self, monkeypatch):
        monkeypatch.setenv("ONNX_EVAL_VERBOSITY", "0")
        assert EvalLogger.get().get_verbosity() == Verbosity.SILENT

    def test_invalid_env_verbosity_ignored(self, monkeypatch):
        monkeypatch.setenv("ONNX_EVAL_VERBOSITY", "loud")
        assert EvalLogger.get().get_verbosity() == Verbosity.WARNING

    def test_set_verbosity_clamps(self):
        set_verbosity(10)
        assert get_logger().get_verbosity() == Verbosity.DEBUG
        set_verbosity(-3)
        assert get_logger().get_verbosity() == Verbosity.SILENT

    def test_debug_suppressed_at_info(self):
        logger = EvalLogger.get()
        output = io.StringIO()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.INFO)

        logger.debug("Should be suppressed")

        assert output.getvalue() == ""

    def test_json_format_with_extra(self):
        logger = EvalLogger.get()
        output = io.StringIO()
        logger.set_output(output)
        logger.set_json_format(True)
        logger.set_verbosity(Verbosity.INFO)

        logger.info("Graph loaded", component="adapter", nodes=3)

        data = json.loads(output.getvalue().strip())
        assert data["component"] == "adapter"
        assert data["extra"] == {"nodes": 3}

    def test_custom_handler(self):
        logger = EvalLogger.get()
        logger.set_output(io.StringIO())
        logger.set_verbosity(Verbosity.ERROR)
        received = []
        logger.add_handler(received.append)

        logger.error("boom", op_type="Add", node_name="add_0")

        assert len(received) == 1
        assert received[0].op_type == "Add"


class TestInterpreterLogging:
    """The interpreter reports nodes at DEBUG."""

    def test_node_execution_logged(self):
        logger = get_logger()
        output = io.StringIO()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.DEBUG)

        graph = GraphDescriptor(
            name="relu_graph",
            inputs=[ValueInfo("x")],
            nodes=[make_node("Relu", ["x"], ["y"], name="relu_0")],
            outputs=[ValueInfo("y")],
        )
        ONNXInterpreter(graph).run({"x": np.array([-1.0, 1.0])})

        content = output.getvalue()
        assert "Evaluation started" in content
        assert "<Relu:relu_0>" in content
        assert "Evaluation finished" in content
