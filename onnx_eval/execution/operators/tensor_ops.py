# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tensor Operators

Implements ONNX tensor construction operators:
- Constant: Embedded tensor value
- Cast: Element type conversion
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import backend
from ...core.node import NodeDescriptor, OpKind
from ...core.types import require_numpy_dtype
from ...errors import UnsupportedAttributeError
from ..materialize import materialize_tensor
from ..registry import OperatorRegistry

if TYPE_CHECKING:
    from ..attributes import NodeAttributes
    from ..context import ExecutionContext


# Constant encodings other than a dense 'value' tensor.
_UNSUPPORTED_CONSTANT_ATTRS = (
    "sparse_value",
    "value_float",
    "value_floats",
    "value_int",
    "value_ints",
    "value_string",
    "value_strings",
)


@OperatorRegistry.register(OpKind.CONSTANT)
def execute_constant(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """Constant operator - output is the 'value' tensor attribute."""
    if not attrs.has("value"):
        for name in _UNSUPPORTED_CONSTANT_ATTRS:
            if attrs.has(name):
                raise UnsupportedAttributeError(
                    f"unsupported '{name}' for Constant {node.name}",
                    node=node,
                    attr_name=name,
                )

    value = attrs.get_tensor("value")
    ctx.set_output(node, materialize_tensor(value, owner=node.name))


@OperatorRegistry.register(OpKind.CAST)
def execute_cast(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """Cast operator - convert tensor to the 'to' element type."""
    data = ctx.get_input(node, 0)
    to_type = attrs.get_int("to")
    dtype = require_numpy_dtype(to_type, what=f"cast {node.name}", node=node)
    ctx.set_output(node, backend.to_dtype(data, dtype))
