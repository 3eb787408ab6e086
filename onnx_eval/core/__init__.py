# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""onnx_eval Core Module"""

from .types import (
    DataType,
    AttributeType,
    data_type_name,
    to_numpy_dtype,
    require_numpy_dtype,
    from_numpy_dtype,
    supported_data_types,
)
from .tensor import TensorDescriptor, ValueInfo
from .node import (
    AttributeDescriptor,
    NodeDescriptor,
    OpKind,
    make_attribute,
    make_node,
)
from .graph_ir import GraphDescriptor, ModelDescriptor

__all__ = [
    "DataType",
    "AttributeType",
    "data_type_name",
    "to_numpy_dtype",
    "require_numpy_dtype",
    "from_numpy_dtype",
    "supported_data_types",
    "TensorDescriptor",
    "ValueInfo",
    "AttributeDescriptor",
    "NodeDescriptor",
    "OpKind",
    "make_attribute",
    "make_node",
    "GraphDescriptor",
    "ModelDescriptor",
]
