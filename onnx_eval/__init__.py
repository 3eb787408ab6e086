# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval: Eager ONNX Graph Interpreter

Evaluates an already-parsed ONNX computation graph once, node by node, with
numpy/scipy kernels.

Example:
    import numpy as np
    import onnx_eval
    from onnx_eval.core import GraphDescriptor, ValueInfo, make_node

    graph = GraphDescriptor(
        name="add",
        inputs=[ValueInfo("a"), ValueInfo("b")],
        nodes=[make_node("Add", ["a", "b"], ["y"])],
        outputs=[ValueInfo("y")],
    )
    outputs = onnx_eval.simple_eval(graph, {"a": np.ones(3), "b": np.ones(3)})
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .config import EvalConfig
from .core import (
    DataType,
    AttributeType,
    TensorDescriptor,
    ValueInfo,
    AttributeDescriptor,
    NodeDescriptor,
    OpKind,
    GraphDescriptor,
    ModelDescriptor,
    make_attribute,
    make_node,
)
from .errors import (
    EvalError,
    MissingAttributeError,
    AttributeTypeMismatchError,
    MissingValueError,
    UnsupportedDataTypeError,
    UnsupportedOperatorError,
    UnsupportedAttributeError,
    InputContractError,
    InvalidGraphError,
    InvalidNodeError,
    GraphOrderError,
    MalformedTensorError,
    KernelError,
)
from .execution import ExecutionContext, ONNXInterpreter, OperatorRegistry, simple_eval
from .adapters import ONNXAdapter
from .observability import Verbosity, get_logger, set_verbosity

__all__ = [
    "__version__",
    "EvalConfig",
    "DataType",
    "AttributeType",
    "TensorDescriptor",
    "ValueInfo",
    "AttributeDescriptor",
    "NodeDescriptor",
    "OpKind",
    "GraphDescriptor",
    "ModelDescriptor",
    "make_attribute",
    "make_node",
    "EvalError",
    "MissingAttributeError",
    "AttributeTypeMismatchError",
    "MissingValueError",
    "UnsupportedDataTypeError",
    "UnsupportedOperatorError",
    "UnsupportedAttributeError",
    "InputContractError",
    "InvalidGraphError",
    "InvalidNodeError",
    "GraphOrderError",
    "MalformedTensorError",
    "KernelError",
    "ExecutionContext",
    "ONNXInterpreter",
    "OperatorRegistry",
    "simple_eval",
    "ONNXAdapter",
    "Verbosity",
    "get_logger",
    "set_verbosity",
]
