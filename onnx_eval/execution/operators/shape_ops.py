# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shape Manipulation Operators

Implements ONNX shape operators:
- Reshape: Reshape tensor (-1 infers, 0 copies the input dim)
- Transpose: Permute dimensions
- Squeeze: Remove dimensions of size 1
- Concat: Concatenate tensors
"""

from __future__ import annotations

from typing import List, TYPE_CHECKING

import numpy as np

from .. import backend
from ...core.node import NodeDescriptor, OpKind
from ...errors import InvalidNodeError, KernelError, UnsupportedAttributeError
from ..registry import OperatorRegistry

if TYPE_CHECKING:
    from ..attributes import NodeAttributes
    from ..context import ExecutionContext


def normalize_axis(
    axis: int, rank: int, node: NodeDescriptor, attr_name: str = "axis"
) -> int:
    """
    Resolve a possibly negative axis against a rank as ``rank + axis``.

    Raises:
        UnsupportedAttributeError: If the axis is outside [-rank, rank).
    """
    if axis < -rank or axis >= rank:
        raise UnsupportedAttributeError(
            f"wrong axis {axis} in {node.op_type} for rank {rank} ({node.name})",
            node=node,
            attr_name=attr_name,
            value=axis,
        )
    return axis + rank if axis < 0 else axis


def _as_int_list(values: np.ndarray) -> List[int]:
    return [int(v) for v in np.asarray(values).reshape(-1).tolist()]


def infer_reshape_dims(
    input_shape: tuple, target: List[int], node: NodeDescriptor
) -> List[int]:
    """
    Resolve a Reshape target: ``-1`` is inferred from the element count,
    ``0`` copies the matching input dimension.
    """
    if sum(1 for v in target if v == -1) > 1:
        raise UnsupportedAttributeError(
            f"reshape target {target} has more than one -1 ({node.name})",
            node=node,
            attr_name="shape",
            value=target,
        )
    if any(v < -1 for v in target):
        raise UnsupportedAttributeError(
            f"reshape target {target} has negative sizes ({node.name})",
            node=node,
            attr_name="shape",
            value=target,
        )

    elem_count = int(np.prod(input_shape, dtype=np.int64))

    # Resolve 0 entries before inferring -1.
    dims = []
    for idx, v in enumerate(target):
        if v == 0:
            if idx >= len(input_shape):
                raise KernelError(
                    f"reshape target {target} copies dim {idx} of a rank "
                    f"{len(input_shape)} input",
                    node=node,
                    input_shapes=[input_shape],
                )
            dims.append(int(input_shape[idx]))
        else:
            dims.append(v)

    if -1 in dims:
        known = 1
        for v in dims:
            if v != -1:
                known *= v
        if known == 0:
            raise KernelError(
                f"cannot infer -1 in reshape target {target} for "
                f"{list(input_shape)}, the other dims multiply to 0",
                node=node,
                input_shapes=[input_shape],
            )
        dims[dims.index(-1)] = elem_count // known

    if int(np.prod(dims, dtype=np.int64)) != elem_count:
        raise KernelError(
            f"cannot reshape {list(input_shape)} into {dims}",
            node=node,
            input_shapes=[input_shape],
        )
    return dims


@OperatorRegistry.register(OpKind.RESHAPE)
def execute_reshape(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Reshape operator.

    ONNX Spec: Y = Reshape(data, shape)
    """
    data = ctx.get_input(node, 0)
    target = _as_int_list(ctx.get_input(node, 1))
    dims = infer_reshape_dims(backend.dims(data), target, node)
    ctx.set_output(node, backend.reshape(data, dims))


@OperatorRegistry.register(OpKind.TRANSPOSE)
def execute_transpose(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Transpose operator.

    ONNX Spec: Y = Transpose(data, perm)
    Without perm, the axes are reversed.
    """
    data = ctx.get_input(node, 0)
    perm = attrs.get_ints("perm", None)

    if perm is None:
        perm = list(reversed(range(backend.rank(data))))
    elif sorted(perm) != list(range(backend.rank(data))):
        raise UnsupportedAttributeError(
            f"perm {perm} is not a permutation of rank {backend.rank(data)} "
            f"({node.name})",
            node=node,
            attr_name="perm",
            value=perm,
        )

    ctx.set_output(node, backend.permute(data, perm))


@OperatorRegistry.register(OpKind.SQUEEZE)
def execute_squeeze(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Squeeze operator - remove dimensions of size 1.

    ONNX Spec: Y = Squeeze(data, axes)
    Without axes, every size-1 dimension except the batch axis is removed.
    """
    data = ctx.get_input(node, 0)
    rank = backend.rank(data)

    axes_tensor = ctx.get_optional_input(node, 1)
    if axes_tensor is not None:
        axes = _as_int_list(axes_tensor)
    else:
        axes = attrs.get_ints("axes", None)

    if axes is None:
        axes = [
            idx for idx, size in enumerate(backend.dims(data)) if size == 1 and idx > 0
        ]
    else:
        axes = [normalize_axis(a, rank, node, "axes") for a in axes]

    result = data
    for axis in sorted(set(axes), reverse=True):
        result = backend.squeeze(result, axis)

    ctx.set_output(node, result)


@OperatorRegistry.register(OpKind.CONCAT)
def execute_concat(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Concatenate operator.

    ONNX Spec: Y = Concat(inputs, axis)
    """
    tensors = [ctx.get_input(node, idx) for idx in range(len(node.inputs))]
    axis = attrs.get_int("axis")

    if not tensors:
        raise InvalidNodeError(f"empty concat in {node.name}", node=node)

    axis = normalize_axis(axis, backend.rank(tensors[0]), node)
    ctx.set_output(node, backend.cat(tensors, axis))
