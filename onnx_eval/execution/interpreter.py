# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ONNX Graph Interpreter

Eager, single-pass interpreter that walks an already topologically sorted
ONNX graph and executes each node with the registered numpy kernels.
"""

from __future__ import annotations

import time
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..config import EvalConfig
from ..core.graph_ir import GraphDescriptor, ModelDescriptor
from ..core.node import NodeDescriptor, OpKind
from ..core.tensor import ValueInfo
from ..core.types import DataType, data_type_name, to_numpy_dtype
from ..errors import (
    EvalError,
    GraphOrderError,
    InvalidGraphError,
    KernelError,
    MissingValueError,
    UnsupportedDataTypeError,
    format_dtype_mismatch,
    format_shape_mismatch,
)
from ..observability.logger import Verbosity, get_logger
from .attributes import NodeAttributes
from .context import ExecutionContext
from .materialize import materialize_tensor
from .registry import OperatorRegistry

GraphLike = Union[GraphDescriptor, ModelDescriptor]


def _resolve_graph(graph_or_model: GraphLike) -> GraphDescriptor:
    if isinstance(graph_or_model, ModelDescriptor):
        if graph_or_model.graph is None:
            raise InvalidGraphError("model has no graph")
        return graph_or_model.graph
    if isinstance(graph_or_model, GraphDescriptor):
        return graph_or_model
    raise InvalidGraphError(
        f"expected a GraphDescriptor or ModelDescriptor, "
        f"got {type(graph_or_model).__name__}"
    )


class ONNXInterpreter:
    """
    Executes ONNX graphs node by node with numpy kernels.

    Every node's operator kind is resolved when the interpreter is built, so
    an unsupported operator fails before any evaluation starts. Each call to
    ``run`` owns a fresh ExecutionContext: caller inputs and initializers
    seed it, nodes run in the given order, and the declared outputs are
    drained from it.

    Example:
        from onnx_eval import ONNXInterpreter

        interpreter = ONNXInterpreter(model)
        outputs = interpreter(input=np.random.randn(1, 3, 224, 224))
    """

    def __init__(
        self,
        graph_or_model: GraphLike,
        config: Optional[EvalConfig] = None,
    ):
        """
        Initialize the ONNX interpreter.

        Args:
            graph_or_model: GraphDescriptor, or ModelDescriptor holding one.
            config: Evaluation options. Defaults to EvalConfig().

        Raises:
            InvalidGraphError: If no graph can be resolved.
            UnsupportedOperatorError: If any node's op_type is unknown.
            GraphOrderError: If a node consumes a value produced later
                (only with config.check_graph_order).
        """
        # Import operators to populate registry
        from . import operators  # noqa: F401

        self.config = config or EvalConfig()
        self._logger = get_logger()
        if self.config.verbose is not None:
            self._logger.set_verbosity(self.config.verbose)

        self.graph = _resolve_graph(graph_or_model)
        self._input_names: List[str] = self.graph.input_names
        self._output_names: List[str] = self.graph.output_names
        self._initializer_names = {t.name for t in self.graph.initializers}

        self._plan: List[Tuple[NodeDescriptor, OpKind]] = [
            (node, OpKind.parse(node)) for node in self.graph.nodes
        ]

        if self.config.check_graph_order:
            self._check_graph_order()

        self._release_after: Dict[int, List[str]] = {}
        if self.config.release_intermediates:
            self._release_after = self._compute_release_points()

    def _check_graph_order(self) -> None:
        """Fail when a node reads a value that only a later node writes."""
        producers: Dict[str, NodeDescriptor] = {}
        for node in self.graph.nodes:
            for name in node.outputs:
                if name:
                    producers.setdefault(name, node)

        seeded = set(self._input_names) | self._initializer_names
        available = set(seeded)
        for node in self.graph.nodes:
            for name in node.inputs:
                if not name or name in available:
                    continue
                producer = producers.get(name)
                if producer is not None:
                    raise GraphOrderError(name, consumer=node, producer=producer)
            available.update(name for name in node.outputs if name)

    def _compute_release_points(self) -> Dict[int, List[str]]:
        """Map node index -> values whose last consumer is that node."""
        last_use: Dict[str, int] = {}
        for idx, node in enumerate(self.graph.nodes):
            for name in node.inputs:
                if name:
                    last_use[name] = idx

        keep = set(self._output_names)
        release: Dict[int, List[str]] = {}
        for name, idx in last_use.items():
            if name not in keep:
                release.setdefault(idx, []).append(name)
        return release

    @property
    def input_names(self) -> List[str]:
        return list(self._input_names)

    @property
    def output_names(self) -> List[str]:
        return list(self._output_names)

    @property
    def node_count(self) -> int:
        return len(self._plan)

    def _seed(
        self, ctx: ExecutionContext, inputs: Mapping[str, np.ndarray]
    ) -> None:
        # Caller-supplied values take precedence over same-named initializers.
        for tensor in self.graph.initializers:
            if tensor.name not in inputs:
                ctx.set_tensor(tensor.name, materialize_tensor(tensor))

        for name, value in inputs.items():
            ctx.set_tensor(name, np.asarray(value))

    def _validate_inputs(
        self, ctx: ExecutionContext, inputs: Mapping[str, np.ndarray]
    ) -> None:
        for info in self.graph.inputs:
            if info.name not in ctx:
                raise MissingValueError(info.name, role="input")
            if info.name in inputs and self.config.validate_inputs:
                self._check_input(info, ctx.get_tensor(info.name))

    @staticmethod
    def _check_input(info: ValueInfo, value: np.ndarray) -> None:
        """Validate a caller tensor against its declared type and shape."""
        if info.elem_type is not None and info.elem_type != DataType.UNDEFINED:
            expected = to_numpy_dtype(info.elem_type)
            if expected is None:
                raise UnsupportedDataTypeError(
                    info.elem_type, what=f"input {info.name}"
                )
            if value.dtype != expected:
                raise format_dtype_mismatch(
                    data_type_name(info.elem_type), str(value.dtype), info.name
                )

        if info.shape is None:
            return
        actual = tuple(value.shape)
        if len(actual) != len(info.shape):
            raise format_shape_mismatch(tuple(info.shape), actual, info.name)
        for declared, size in zip(info.shape, actual):
            # Symbolic dims (str or None) accept any size.
            if isinstance(declared, int) and declared != size:
                raise format_shape_mismatch(tuple(info.shape), actual, info.name)

    def _execute_node(
        self, ctx: ExecutionContext, node: NodeDescriptor, kind: OpKind
    ) -> None:
        """
        Execute a single node using the registered kernel.

        Numpy rejections of the operands surface as KernelError.
        """
        kernel = OperatorRegistry.get_kernel(kind)
        try:
            kernel(ctx, node, NodeAttributes(node))
        except EvalError as exc:
            self._logger.error(
                str(exc.message),
                component="interpreter",
                op_type=node.op_type,
                node_name=node.name,
            )
            raise
        except (ValueError, TypeError) as exc:
            shapes = [
                tuple(ctx.get_tensor(name).shape)
                for name in node.inputs
                if name and name in ctx
            ]
            self._logger.error(
                str(exc),
                component="interpreter",
                op_type=node.op_type,
                node_name=node.name,
            )
            raise KernelError(str(exc), node=node, input_shapes=shapes) from exc

    def _run(
        self,
        inputs: Mapping[str, np.ndarray],
        timings: Optional[Dict[str, float]] = None,
    ) -> Dict[str, np.ndarray]:
        ctx = ExecutionContext()
        self._seed(ctx, inputs)
        self._validate_inputs(ctx, inputs)

        debug = self._logger.is_enabled(Verbosity.DEBUG)
        if debug:
            self._logger.debug(
                "Evaluation started",
                component="interpreter",
                graph_name=self.graph.name,
                nodes=len(self._plan),
            )

        graph_start = time.perf_counter()
        for idx, (node, kind) in enumerate(self._plan):
            start = time.perf_counter()
            self._execute_node(ctx, node, kind)
            elapsed_ms = (time.perf_counter() - start) * 1000

            if timings is not None:
                timings[node.name] = elapsed_ms
            if debug:
                self._logger.debug(
                    "Node executed",
                    component="interpreter",
                    op_type=node.op_type,
                    node_name=node.name,
                    duration_ms=elapsed_ms,
                )

            for name in self._release_after.get(idx, ()):
                ctx.release(name)

        outputs = dict(ctx.drain(self._output_names))

        if debug:
            self._logger.debug(
                "Evaluation finished",
                component="interpreter",
                graph_name=self.graph.name,
                duration_ms=(time.perf_counter() - graph_start) * 1000,
            )
        return outputs

    def run(self, inputs: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """
        Evaluate the graph once.

        Args:
            inputs: Mapping from graph input names to tensors.

        Returns:
            Mapping from every declared output name to its tensor.
        """
        return self._run(inputs)

    def __call__(self, **inputs: np.ndarray) -> Dict[str, np.ndarray]:
        """
        Execute the graph with given inputs.

        Example:
            outputs = interpreter(input=np.random.randn(1, 3, 224, 224))
        """
        return self._run(inputs)

    def execute_with_timing(
        self,
        inputs: Mapping[str, np.ndarray],
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, float]]:
        """
        Execute graph with per-node timing.

        Returns:
            Tuple of (outputs, timing_dict) with milliseconds per node name.
        """
        timings: Dict[str, float] = {}
        outputs = self._run(inputs, timings)
        return outputs, timings

    def summary(self) -> str:
        """Get a summary of the interpreter state."""
        lines = [
            "ONNXInterpreter Summary",
            f"  Graph: {self.graph.name}",
            f"  Nodes: {len(self._plan)}",
            f"  Initializers: {len(self.graph.initializers)}",
            f"  Inputs: {self._input_names}",
            f"  Outputs: {self._output_names}",
            f"  Release Intermediates: {self.config.release_intermediates}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ONNXInterpreter(graph='{self.graph.name}', "
            f"nodes={len(self._plan)})"
        )


def simple_eval(
    model: GraphLike,
    inputs: Mapping[str, np.ndarray],
    config: Optional[EvalConfig] = None,
) -> Dict[str, np.ndarray]:
    """
    Evaluate a model once against the given inputs.

    Example:
        outputs = simple_eval(model, {"x": np.ones((1, 3), dtype=np.float32)})
    """
    return ONNXInterpreter(model, config).run(inputs)
