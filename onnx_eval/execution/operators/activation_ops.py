# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Activation Operators

Implements ONNX activation operators:
- Relu: Rectified Linear Unit
- Sigmoid: Sigmoid activation
- Tanh: Hyperbolic tangent
- Gelu: Gaussian Error Linear Unit (erf form)
- Softmax / LogSoftmax: Normalization along one axis
- Clip: Clamp values to range
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .. import backend
from ...core.node import NodeDescriptor, OpKind
from ...errors import UnsupportedAttributeError
from ..registry import OperatorRegistry
from .shape_ops import normalize_axis

if TYPE_CHECKING:
    from ..attributes import NodeAttributes
    from ..context import ExecutionContext


_ACTIVATIONS = {
    OpKind.RELU: backend.relu,
    OpKind.SIGMOID: backend.sigmoid,
    OpKind.TANH: backend.tanh,
}


@OperatorRegistry.register(*_ACTIVATIONS)
def execute_activation(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Pointwise activation.

    ONNX Spec: Y = Relu(X) = max(0, X)
               Y = Sigmoid(X) = 1 / (1 + exp(-X))
               Y = Tanh(X)
    """
    x = ctx.get_input(node, 0)
    kernel = _ACTIVATIONS[OpKind(node.op_type)]
    ctx.set_output(node, kernel(x))


@OperatorRegistry.register(OpKind.GELU)
def execute_gelu(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    GELU activation operator.

    ONNX Spec: Y = 0.5 * X * (1 + erf(X / sqrt(2)))
    approximate="tanh" selects the tanh approximation.
    """
    x = ctx.get_input(node, 0)
    approximate = attrs.get_string("approximate", "none")

    if approximate == "none":
        result = backend.gelu_erf(x)
    elif approximate == "tanh":
        result = backend.gelu_tanh(x)
    else:
        raise UnsupportedAttributeError(
            f"unsupported approximate {approximate} for Gelu {node.name}",
            node=node,
            attr_name="approximate",
            value=approximate,
        )

    ctx.set_output(node, result)


@OperatorRegistry.register(OpKind.SOFTMAX, OpKind.LOG_SOFTMAX)
def execute_softmax(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Softmax and LogSoftmax operators.

    ONNX Spec: Y = Softmax(X, axis)
    Without an axis attribute, the last axis is used.
    """
    x = ctx.get_input(node, 0)
    axis = attrs.get_int("axis", None)

    if axis is None:
        axis = backend.rank(x) - 1
    else:
        axis = normalize_axis(axis, backend.rank(x), node)

    if node.op_type == OpKind.LOG_SOFTMAX.value:
        result = backend.log_softmax(x, axis)
    else:
        result = backend.softmax(x, axis)

    ctx.set_output(node, result)


@OperatorRegistry.register(OpKind.CLIP)
def execute_clip(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Clip operator.

    ONNX Spec: Y = Clip(X, min, max)
    min and max are optional inputs; pre-opset-11 graphs carry them as
    float attributes instead.
    """
    x = ctx.get_input(node, 0)
    low = ctx.get_optional_input(node, 1)
    high = ctx.get_optional_input(node, 2)

    if low is None and len(node.inputs) < 2:
        low_attr = attrs.get_float("min", None)
        if low_attr is not None:
            low = np.asarray(low_attr, dtype=x.dtype)
    if high is None and len(node.inputs) < 3:
        high_attr = attrs.get_float("max", None)
        if high_attr is not None:
            high = np.asarray(high_attr, dtype=x.dtype)

    result = x
    if low is not None:
        result = backend.broadcast_maximum(result, low)
    if high is not None:
        result = backend.broadcast_minimum(result, high)

    ctx.set_output(node, result)
