# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Integration tests for ONNXInterpreter.

Tests complete graph execution: input seeding and validation, node order,
output extraction and failure behaviour.
"""

import numpy as np
import pytest

from onnx_eval import EvalConfig, simple_eval
from onnx_eval.core import (
    DataType,
    GraphDescriptor,
    ModelDescriptor,
    TensorDescriptor,
    ValueInfo,
    make_node,
)
from onnx_eval.errors import (
    GraphOrderError,
    InputContractError,
    InvalidGraphError,
    KernelError,
    MissingValueError,
    UnsupportedOperatorError,
)
from onnx_eval.execution import ONNXInterpreter
from onnx_eval.execution.context import ExecutionContext


def linear_relu_graph():
    """y = Relu(x @ W + b) with W and b as initializers."""
    weight = np.arange(12, dtype=np.float32).reshape(4, 3) / 10
    return GraphDescriptor(
        name="linear_relu",
        initializers=[
            TensorDescriptor(
                name="W", dims=[4, 3], data_type=DataType.FLOAT,
                float_data=weight.reshape(-1).tolist(),
            ),
            TensorDescriptor(
                name="b", dims=[3], data_type=DataType.FLOAT,
                raw_data=np.array([-1.0, 0.0, 1.0], dtype="<f4").tobytes(),
            ),
        ],
        inputs=[ValueInfo("x", elem_type=DataType.FLOAT, shape=["batch", 4])],
        nodes=[
            make_node("MatMul", ["x", "W"], ["xw"], name="matmul"),
            make_node("Add", ["xw", "b"], ["pre"], name="add"),
            make_node("Relu", ["pre"], ["y"], name="relu"),
        ],
        outputs=[ValueInfo("y", elem_type=DataType.FLOAT)],
    ), weight


class TestSimpleEval:
    """Tests for one-shot evaluation."""

    def test_linear_relu(self):
        graph, weight = linear_relu_graph()
        x = np.random.randn(2, 4).astype(np.float32)
        outputs = simple_eval(graph, {"x": x})

        expected = np.maximum(x @ weight + np.array([-1.0, 0.0, 1.0]), 0)
        assert list(outputs) == ["y"]
        np.testing.assert_allclose(outputs["y"], expected, rtol=1e-5, atol=1e-6)

    def test_broadcast_add(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("a"), ValueInfo("b")],
            nodes=[make_node("Add", ["a", "b"], ["y"])],
            outputs=[ValueInfo("y")],
        )
        a = np.arange(3, dtype=np.float32).reshape(3, 1)
        b = np.arange(4, dtype=np.float32).reshape(1, 4)
        outputs = simple_eval(graph, {"a": a, "b": b})

        assert outputs["y"].shape == (3, 4)
        np.testing.assert_array_equal(outputs["y"], a + b)

    def test_graph_names_exposed(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("a"), ValueInfo("b")],
            nodes=[make_node("Add", ["a", "b"], ["y"])],
            outputs=[ValueInfo("y")],
        )
        interpreter = ONNXInterpreter(graph)

        assert interpreter.input_names == ["a", "b"]
        assert interpreter.output_names == ["y"]

    def test_model_descriptor(self):
        graph, _ = linear_relu_graph()
        model = ModelDescriptor(graph=graph, ir_version=8, opset_version=17)
        outputs = simple_eval(model, {"x": np.ones((1, 4), dtype=np.float32)})
        assert outputs["y"].shape == (1, 3)

    def test_model_without_graph(self):
        with pytest.raises(InvalidGraphError):
            simple_eval(ModelDescriptor(), {})

    def test_multiple_outputs_in_declared_order(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Neg", ["x"], ["n"]),
                make_node("Abs", ["x"], ["a"]),
            ],
            outputs=[ValueInfo("a"), ValueInfo("n")],
        )
        outputs = simple_eval(graph, {"x": np.array([-2.0, 3.0])})

        assert list(outputs) == ["a", "n"]
        np.testing.assert_array_equal(outputs["a"], [2.0, 3.0])
        np.testing.assert_array_equal(outputs["n"], [2.0, -3.0])

    def test_constant_reshape_chain(self):
        shape = TensorDescriptor(dims=[3], data_type=DataType.INT64, int64_data=[-1, 3, 4])
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Constant", [], ["shape"], value=shape),
                make_node("Reshape", ["x", "shape"], ["y"]),
            ],
            outputs=[ValueInfo("y")],
        )
        outputs = simple_eval(graph, {"x": np.arange(24, dtype=np.float32)})
        assert outputs["y"].shape == (2, 3, 4)

    def test_caller_input_overrides_initializer(self):
        graph = GraphDescriptor(
            initializers=[TensorDescriptor(name="k", dims=[1], float_data=[1.0])],
            inputs=[ValueInfo("x"), ValueInfo("k")],
            nodes=[make_node("Mul", ["x", "k"], ["y"])],
            outputs=[ValueInfo("y")],
        )
        x = np.array([2.0], dtype=np.float32)

        default = simple_eval(graph, {"x": x})
        overridden = simple_eval(graph, {"x": x, "k": np.array([5.0], dtype=np.float32)})

        np.testing.assert_array_equal(default["y"], [2.0])
        np.testing.assert_array_equal(overridden["y"], [10.0])


class TestInputValidation:
    """Declared inputs are checked before any node runs."""

    def test_missing_input(self):
        graph, _ = linear_relu_graph()
        with pytest.raises(MissingValueError) as exc_info:
            simple_eval(graph, {})
        assert "cannot find input x" in str(exc_info.value)

    def test_dtype_mismatch(self):
        graph, _ = linear_relu_graph()
        with pytest.raises(InputContractError) as exc_info:
            simple_eval(graph, {"x": np.ones((2, 4), dtype=np.float64)})
        assert "unexpected dtype for x" in str(exc_info.value)

    def test_shape_mismatch(self):
        graph, _ = linear_relu_graph()
        with pytest.raises(InputContractError) as exc_info:
            simple_eval(graph, {"x": np.ones((2, 5), dtype=np.float32)})
        assert "unexpected shape for x" in str(exc_info.value)

    def test_rank_mismatch(self):
        graph, _ = linear_relu_graph()
        with pytest.raises(InputContractError):
            simple_eval(graph, {"x": np.ones(4, dtype=np.float32)})

    def test_symbolic_dims_accept_any_size(self):
        graph, _ = linear_relu_graph()
        for batch in (1, 7):
            outputs = simple_eval(graph, {"x": np.ones((batch, 4), dtype=np.float32)})
            assert outputs["y"].shape == (batch, 3)

    def test_validation_can_be_disabled(self):
        graph, _ = linear_relu_graph()
        config = EvalConfig(validate_inputs=False)
        outputs = simple_eval(graph, {"x": np.ones((1, 4))}, config=config)
        assert outputs["y"].shape == (1, 3)


class TestFailures:
    """Evaluation failures are fatal and diagnosable."""

    def test_unsupported_operator_fails_before_evaluation(self, monkeypatch):
        created = []
        original_init = ExecutionContext.__init__

        def tracking_init(self, *args, **kwargs):
            created.append(self)
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(ExecutionContext, "__init__", tracking_init)

        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Relu", ["x"], ["r"], name="relu"),
                make_node("Loop", ["r"], ["y"], name="loop_0"),
            ],
            outputs=[ValueInfo("y")],
        )
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            simple_eval(graph, {"x": np.ones(2)})

        assert exc_info.value.op_type == "Loop"
        assert exc_info.value.node_name == "loop_0"
        assert created == []

    def test_out_of_order_graph(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Relu", ["t"], ["y"], name="relu"),
                make_node("Abs", ["x"], ["t"], name="abs"),
            ],
            outputs=[ValueInfo("y")],
        )
        with pytest.raises(GraphOrderError) as exc_info:
            ONNXInterpreter(graph)
        assert exc_info.value.node_name == "relu"

    def test_order_check_disabled_reports_missing_value(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Relu", ["t"], ["y"], name="relu"),
                make_node("Abs", ["x"], ["t"], name="abs"),
            ],
            outputs=[ValueInfo("y")],
        )
        interpreter = ONNXInterpreter(graph, EvalConfig(check_graph_order=False))
        with pytest.raises(MissingValueError) as exc_info:
            interpreter.run({"x": np.ones(2)})
        assert exc_info.value.node_name == "relu"

    def test_missing_output(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[make_node("Relu", ["x"], ["y"])],
            outputs=[ValueInfo("z")],
        )
        with pytest.raises(MissingValueError) as exc_info:
            simple_eval(graph, {"x": np.ones(2)})
        assert "cannot find output z" in str(exc_info.value)

    def test_kernel_error_wraps_numpy(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("a"), ValueInfo("b")],
            nodes=[make_node("Add", ["a", "b"], ["y"], name="add_0")],
            outputs=[ValueInfo("y")],
        )
        with pytest.raises(KernelError) as exc_info:
            simple_eval(graph, {"a": np.ones((2, 3)), "b": np.ones((4,))})

        error = exc_info.value
        assert error.op_type == "Add"
        assert error.node_name == "add_0"
        assert "(2, 3)" in error.context["input_shapes"]
        assert isinstance(error.__cause__, ValueError)


class TestInterpreter:
    """Tests for the reusable interpreter object."""

    def test_idempotent(self):
        graph, _ = linear_relu_graph()
        interpreter = ONNXInterpreter(graph)
        x = np.random.randn(3, 4).astype(np.float32)

        first = interpreter.run({"x": x})
        second = interpreter(x=x)

        np.testing.assert_array_equal(first["y"], second["y"])
        assert first["y"].tobytes() == second["y"].tobytes()

    def test_release_intermediates(self):
        graph, weight = linear_relu_graph()
        x = np.ones((1, 4), dtype=np.float32)
        released = ONNXInterpreter(
            graph, EvalConfig(release_intermediates=True)
        ).run({"x": x})
        kept = ONNXInterpreter(graph).run({"x": x})

        np.testing.assert_array_equal(released["y"], kept["y"])

    def test_release_keeps_graph_outputs(self):
        graph = GraphDescriptor(
            inputs=[ValueInfo("x")],
            nodes=[
                make_node("Neg", ["x"], ["n"]),
                make_node("Abs", ["n"], ["a"]),
            ],
            outputs=[ValueInfo("n"), ValueInfo("a")],
        )
        config = EvalConfig(release_intermediates=True)
        outputs = simple_eval(graph, {"x": np.array([1.0])}, config=config)
        assert set(outputs) == {"n", "a"}

    def test_execute_with_timing(self):
        graph, _ = linear_relu_graph()
        interpreter = ONNXInterpreter(graph)
        outputs, timings = interpreter.execute_with_timing(
            {"x": np.ones((1, 4), dtype=np.float32)}
        )

        assert "y" in outputs
        assert list(timings) == ["matmul", "add", "relu"]
        assert all(t >= 0 for t in timings.values())

    def test_summary_and_repr(self):
        graph, _ = linear_relu_graph()
        interpreter = ONNXInterpreter(graph)

        assert interpreter.input_names == ["x"]
        assert interpreter.output_names == ["y"]
        assert interpreter.node_count == 3
        assert "linear_relu" in interpreter.summary()
        assert repr(interpreter) == "ONNXInterpreter(graph='linear_relu', nodes=3)"

    def test_config_verbose_applied(self):
        from onnx_eval.observability import Verbosity, get_logger

        graph, _ = linear_relu_graph()
        ONNXInterpreter(graph, EvalConfig(verbose=1))
        assert get_logger().get_verbosity() == Verbosity.ERROR
