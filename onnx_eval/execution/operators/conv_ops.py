# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Convolution and Normalization Operators

Implements ONNX conv/norm operators:
- Conv: 1D and 2D Convolution
- BatchNormalization: Inference-mode batch normalization
- MaxPool: 2D max pooling
- AveragePool: 2D average pooling
- Dropout: Inference-mode pass through
"""

from __future__ import annotations

from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from .. import backend
from ...core.node import NodeDescriptor, OpKind
from ...errors import KernelError, UnsupportedAttributeError
from ..registry import OperatorRegistry

if TYPE_CHECKING:
    from ..attributes import NodeAttributes
    from ..context import ExecutionContext


def _check_auto_pad(node: NodeDescriptor, attrs: "NodeAttributes") -> None:
    auto_pad = attrs.get_string("auto_pad", "NOTSET")
    if auto_pad != "NOTSET":
        raise UnsupportedAttributeError(
            f"unsupported auto_pad {auto_pad} for {node.op_type} {node.name}",
            node=node,
            attr_name="auto_pad",
            value=auto_pad,
        )


def _channel_shape(rank: int, channels: int) -> List[int]:
    """Shape [1, C, 1, ...] used to broadcast per-channel parameters."""
    shape = [1] * rank
    shape[1] = channels
    return shape


def _uniform(
    values: Optional[List[int]], spatial: int, name: str, node: NodeDescriptor
) -> int:
    """Collapse a per-axis stride/dilation list that must hold one value."""
    if values is None:
        return 1
    if len(values) == 1:
        return values[0]
    if len(values) != spatial:
        raise UnsupportedAttributeError(
            f"more {name} than expected in conv{spatial}d {values} {node.name}",
            node=node,
            attr_name=name,
            value=values,
        )
    if any(v != values[0] for v in values):
        raise UnsupportedAttributeError(
            f"{name} have to be the same on all axes {values} {node.name}",
            node=node,
            attr_name=name,
            value=values,
        )
    return values[0]


def _conv_padding(
    pads: Optional[List[int]], spatial: int, node: NodeDescriptor
) -> Tuple[int, List[Tuple[int, int, int]]]:
    """
    Split ONNX pads into a symmetric scalar pad and explicit per-axis pads.

    ONNX lays pads out as [x1_begin, x2_begin, ..., x1_end, x2_end, ...].
    Returns (scalar_pad, [(axis, before, after), ...]); exactly one of the
    two is non-trivial.
    """
    if pads is None:
        return 0, []
    if any(p < 0 for p in pads):
        raise UnsupportedAttributeError(
            f"negative pads {pads} in conv {node.name}",
            node=node,
            attr_name="pads",
            value=pads,
        )
    if len(pads) == 1:
        return pads[0], []
    if len(pads) != 2 * spatial:
        raise UnsupportedAttributeError(
            f"more pads than expected in conv{spatial}d {pads} {node.name}",
            node=node,
            attr_name="pads",
            value=pads,
        )
    if all(p == pads[0] for p in pads):
        return pads[0], []

    explicit = [
        (2 + idx, pads[idx], pads[idx + spatial]) for idx in range(spatial)
    ]
    return 0, explicit


@OperatorRegistry.register(OpKind.CONV)
def execute_conv(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Convolution operator.

    ONNX Spec: Y = Conv(X, W, B)
    The weight rank selects conv1d (3) or conv2d (4). Asymmetric pads are
    applied to the input explicitly since the kernel pads symmetrically.
    """
    dilations = attrs.get_ints("dilations", None)
    group = attrs.get_int("group", 1)
    kernel_shape = attrs.get_ints("kernel_shape", None)
    pads = attrs.get_ints("pads", None)
    strides = attrs.get_ints("strides", None)
    _check_auto_pad(node, attrs)

    xs = ctx.get_input(node, 0)
    ws = ctx.get_input(node, 1)

    weight_rank = backend.rank(ws)
    if weight_rank == 3:
        kernel, spatial = backend.conv1d, 1
    elif weight_rank == 4:
        kernel, spatial = backend.conv2d, 2
    else:
        raise UnsupportedAttributeError(
            f"unsupported rank for weight matrix {weight_rank} in conv {node.name}",
            node=node,
        )
    if kernel_shape is not None and list(kernel_shape) != list(backend.dims(ws)[2:]):
        raise UnsupportedAttributeError(
            f"kernel_shape {kernel_shape} does not match weight shape "
            f"{list(backend.dims(ws))} in conv {node.name}",
            node=node,
            attr_name="kernel_shape",
            value=kernel_shape,
        )

    padding, explicit = _conv_padding(pads, spatial, node)
    stride = _uniform(strides, spatial, "strides", node)
    dilation = _uniform(dilations, spatial, "dilations", node)

    for axis, before, after in explicit:
        xs = backend.pad_with_zeros(xs, axis, before, after)

    ys = kernel(xs, ws, padding, stride, dilation, group)

    bias = ctx.get_optional_input(node, 2)
    if bias is not None:
        shape = _channel_shape(backend.rank(ys), backend.elem_count(bias))
        ys = backend.broadcast_add(ys, backend.reshape(bias, shape))

    ctx.set_output(node, ys)


def _pool_window(
    node: NodeDescriptor, attrs: "NodeAttributes"
) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """Validate pooling attributes and return (kernel, stride)."""
    dilations = attrs.get_ints("dilations", None)
    kernel_shape = attrs.get_ints("kernel_shape")
    pads = attrs.get_ints("pads", None)
    strides = attrs.get_ints("strides", None)
    ceil_mode = attrs.get_int("ceil_mode", 0)
    _check_auto_pad(node, attrs)

    if dilations is not None and any(d != 1 for d in dilations):
        raise UnsupportedAttributeError(
            f"{node.op_type} with dilation != 1, {dilations}",
            node=node,
            attr_name="dilations",
            value=dilations,
        )
    if pads is not None and any(p != 0 for p in pads):
        raise UnsupportedAttributeError(
            f"{node.op_type} with pads != 0, {pads}",
            node=node,
            attr_name="pads",
            value=pads,
        )
    if ceil_mode != 0:
        raise UnsupportedAttributeError(
            f"{node.op_type} with ceil_mode != 0",
            node=node,
            attr_name="ceil_mode",
            value=ceil_mode,
        )
    if len(kernel_shape) != 2:
        raise UnsupportedAttributeError(
            f"only 2d {node.op_type} is supported, kernel shape {kernel_shape}",
            node=node,
            attr_name="kernel_shape",
            value=kernel_shape,
        )
    if strides is None:
        strides = [1, 1]
    elif len(strides) != 2:
        raise UnsupportedAttributeError(
            f"only 2d {node.op_type} is supported, strides {strides}",
            node=node,
            attr_name="strides",
            value=strides,
        )

    return (kernel_shape[0], kernel_shape[1]), (strides[0], strides[1])


@OperatorRegistry.register(OpKind.MAX_POOL)
def execute_maxpool(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Max Pooling operator.

    ONNX Spec: Y = MaxPool(X, kernel_shape, strides)
    """
    kernel, stride = _pool_window(node, attrs)
    xs = ctx.get_input(node, 0)
    ctx.set_output(node, backend.max_pool2d_with_stride(xs, kernel, stride))


@OperatorRegistry.register(OpKind.AVG_POOL)
def execute_avgpool(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """Average Pooling operator."""
    kernel, stride = _pool_window(node, attrs)
    xs = ctx.get_input(node, 0)
    ctx.set_output(node, backend.avg_pool2d_with_stride(xs, kernel, stride))


@OperatorRegistry.register(OpKind.BATCH_NORM)
def execute_batch_norm(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Batch Normalization operator (inference mode).

    ONNX Spec: Y = (X - mean) / sqrt(var + epsilon) * scale + B
    """
    training_mode = attrs.get_int("training_mode", 0)
    if training_mode != 0:
        raise UnsupportedAttributeError(
            f"training mode is not supported for BatchNorm {node.name}",
            node=node,
            attr_name="training_mode",
            value=training_mode,
        )
    epsilon = attrs.get_float("epsilon", 1e-5)

    xs = ctx.get_input(node, 0)
    scale = ctx.get_input(node, 1)
    bias = ctx.get_input(node, 2)
    mean = ctx.get_input(node, 3)
    var = ctx.get_input(node, 4)

    if backend.rank(xs) < 2:
        raise KernelError(
            f"BatchNorm {node.name} expects an input of rank >= 2, "
            f"got shape {list(backend.dims(xs))}",
            node=node,
            input_shapes=[backend.dims(xs)],
        )

    # Reshape parameters for broadcasting [1, C, 1, 1]
    shape = _channel_shape(backend.rank(xs), backend.dims(xs)[1])
    mean = backend.reshape(mean, shape)
    var = backend.reshape(var, shape)
    scale = backend.reshape(scale, shape)
    bias = backend.reshape(bias, shape)

    eps = np.asarray(epsilon, dtype=var.dtype)
    normalized = backend.broadcast_div(
        backend.broadcast_sub(xs, mean),
        backend.sqrt(backend.broadcast_add(var, eps)),
    )
    result = backend.broadcast_add(backend.broadcast_mul(normalized, scale), bias)
    ctx.set_output(node, result)


@OperatorRegistry.register(OpKind.DROPOUT)
def execute_dropout(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Dropout operator (inference mode - pass through).

    In inference mode, dropout is a no-op.
    """
    ctx.set_output(node, ctx.get_input(node, 0))
