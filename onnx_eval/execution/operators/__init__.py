# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ONNX Operator Implementations

Operators are organized by category:
- math_ops: Add, Sub, Mul, Div, Equal, MatMul, Abs, Cos, Sin, Neg, Erf
- activation_ops: Relu, Sigmoid, Tanh, Gelu, Softmax, LogSoftmax, Clip
- shape_ops: Reshape, Transpose, Squeeze, Concat
- conv_ops: Conv, MaxPool, AveragePool, BatchNormalization, Dropout
- tensor_ops: Constant, Cast
"""

# Import all operator modules to register them
from . import math_ops
from . import activation_ops
from . import conv_ops
from . import shape_ops
from . import tensor_ops
from ..registry import OperatorRegistry

OperatorRegistry.verify_complete()

__all__ = [
    "math_ops",
    "activation_ops",
    "conv_ops",
    "shape_ops",
    "tensor_ops",
]
