# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval Execution Engine

Components:
- ExecutionContext: Value environment of one evaluation
- NodeAttributes / require_attr / optional_attr: Typed attribute access
- materialize_tensor: Embedded tensor descriptor -> numpy array
- OperatorRegistry: Maps OpKind to kernel functions
- ONNXInterpreter / simple_eval: Graph execution engine
"""

from .attributes import (
    AttributeKind,
    FLOAT,
    INT,
    INTS,
    STRING,
    TENSOR,
    NodeAttributes,
    optional_attr,
    require_attr,
)
from .context import ExecutionContext
from .materialize import materialize_tensor
from .registry import OperatorRegistry
from . import operators  # noqa: F401
from .interpreter import ONNXInterpreter, simple_eval

__all__ = [
    "AttributeKind",
    "FLOAT",
    "INT",
    "INTS",
    "STRING",
    "TENSOR",
    "NodeAttributes",
    "optional_attr",
    "require_attr",
    "ExecutionContext",
    "materialize_tensor",
    "OperatorRegistry",
    "ONNXInterpreter",
    "simple_eval",
]
