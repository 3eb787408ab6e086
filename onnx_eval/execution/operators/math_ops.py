# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Mathematical Operators

Implements ONNX math operators:
- Add, Sub, Mul, Div: Broadcasting element-wise arithmetic
- Equal: Broadcasting comparison (bool output)
- MatMul: Broadcasting matrix multiplication
- Abs, Cos, Sin, Neg, Erf: Unary element-wise functions
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import backend
from ...core.node import NodeDescriptor, OpKind
from ..registry import OperatorRegistry

if TYPE_CHECKING:
    from ..attributes import NodeAttributes
    from ..context import ExecutionContext


_BINARY_KERNELS = {
    OpKind.ADD: backend.broadcast_add,
    OpKind.SUB: backend.broadcast_sub,
    OpKind.MUL: backend.broadcast_mul,
    OpKind.DIV: backend.broadcast_div,
    OpKind.EQUAL: backend.broadcast_eq,
    OpKind.MATMUL: backend.broadcast_matmul,
}

_UNARY_KERNELS = {
    OpKind.ABS: backend.absolute,
    OpKind.COS: backend.cos,
    OpKind.SIN: backend.sin,
    OpKind.NEG: backend.neg,
    OpKind.ERF: backend.erf,
}


@OperatorRegistry.register(*_BINARY_KERNELS)
def execute_binary(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """
    Broadcasting binary operator.

    ONNX Spec: C = Op(A, B)
    Shapes align on trailing dimensions; size-1 dimensions stretch.
    """
    a = ctx.get_input(node, 0)
    b = ctx.get_input(node, 1)
    kernel = _BINARY_KERNELS[OpKind(node.op_type)]
    ctx.set_output(node, kernel(a, b))


@OperatorRegistry.register(*_UNARY_KERNELS)
def execute_unary(
    ctx: "ExecutionContext",
    node: NodeDescriptor,
    attrs: "NodeAttributes",
) -> None:
    """Single-input element-wise math function."""
    x = ctx.get_input(node, 0)
    kernel = _UNARY_KERNELS[OpKind(node.op_type)]
    ctx.set_output(node, kernel(x))
