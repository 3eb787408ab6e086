# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for EvalConfig.
"""

import pytest

from onnx_eval import EvalConfig


class TestEvalConfig:
    """Tests for EvalConfig defaults and environment loading."""

    def test_defaults(self):
        config = EvalConfig()
        assert config.validate_inputs is True
        assert config.check_graph_order is True
        assert config.release_intermediates is False
        assert config.verbose is None

    def test_from_empty_env(self):
        assert EvalConfig.from_env({}) == EvalConfig()

    def test_from_env(self):
        config = EvalConfig.from_env(
            {
                "ONNX_EVAL_VALIDATE_INPUTS": "false",
                "ONNX_EVAL_CHECK_ORDER": "0",
                "ONNX_EVAL_RELEASE_INTERMEDIATES": "1",
                "ONNX_EVAL_VERBOSITY": "4",
            }
        )
        assert config.validate_inputs is False
        assert config.check_graph_order is False
        assert config.release_intermediates is True
        assert config.verbose == 4

    def test_blank_values_keep_defaults(self):
        config = EvalConfig.from_env(
            {"ONNX_EVAL_CHECK_ORDER": " ", "ONNX_EVAL_VERBOSITY": ""}
        )
        assert config.check_graph_order is True
        assert config.verbose is None

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("ONNX_EVAL_RELEASE_INTERMEDIATES", "yes")
        assert EvalConfig.from_env().release_intermediates is True

    def test_invalid_verbosity(self):
        with pytest.raises(ValueError):
            EvalConfig.from_env({"ONNX_EVAL_VERBOSITY": "loud"})
