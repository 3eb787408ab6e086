# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Node Descriptors

Represents a single operator invocation in the computation graph, its
attributes, and the closed set of operator kinds the interpreter evaluates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from .tensor import TensorDescriptor
from .types import AttributeType


@dataclass
class AttributeDescriptor:
    """
    A named, typed node attribute.

    Only the field matching ``type`` is meaningful.
    """

    name: str = ""
    type: int = AttributeType.UNDEFINED
    f: float = 0.0
    i: int = 0
    s: bytes = b""
    t: Optional[TensorDescriptor] = None
    floats: list[float] = field(default_factory=list)
    ints: list[int] = field(default_factory=list)
    strings: list[bytes] = field(default_factory=list)


def make_attribute(name: str, value: Any) -> AttributeDescriptor:
    """
    Build an attribute, inferring its declared type from the Python value.

    Example:
        make_attribute("perm", [0, 2, 1])  # INTS
        make_attribute("epsilon", 1e-3)    # FLOAT
    """
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return AttributeDescriptor(name=name, type=AttributeType.INT, i=value)
    if isinstance(value, float):
        return AttributeDescriptor(name=name, type=AttributeType.FLOAT, f=value)
    if isinstance(value, str):
        return AttributeDescriptor(
            name=name, type=AttributeType.STRING, s=value.encode("utf-8")
        )
    if isinstance(value, bytes):
        return AttributeDescriptor(name=name, type=AttributeType.STRING, s=value)
    if isinstance(value, TensorDescriptor):
        return AttributeDescriptor(name=name, type=AttributeType.TENSOR, t=value)
    if isinstance(value, (list, tuple)):
        items = list(value)
        if all(isinstance(v, int) for v in items):
            return AttributeDescriptor(name=name, type=AttributeType.INTS, ints=items)
        if all(isinstance(v, (int, float)) for v in items):
            return AttributeDescriptor(
                name=name, type=AttributeType.FLOATS, floats=[float(v) for v in items]
            )
        if all(isinstance(v, (str, bytes)) for v in items):
            return AttributeDescriptor(
                name=name,
                type=AttributeType.STRINGS,
                strings=[v.encode("utf-8") if isinstance(v, str) else v for v in items],
            )
    raise TypeError(f"Cannot infer attribute type for '{name}': {value!r}")


@dataclass
class NodeDescriptor:
    """
    Represents a single operation (node) in the computation graph.

    Input and output entries are value names; an empty input name marks an
    omitted optional input.
    """

    op_type: str = ""
    name: str = ""
    inputs: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    attributes: list[AttributeDescriptor] = field(default_factory=list)

    def find_attribute(self, name: str) -> Optional[AttributeDescriptor]:
        """Return the first attribute with this name, if any."""
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def has_attr(self, name: str) -> bool:
        """Check if attribute exists."""
        return self.find_attribute(name) is not None


def make_node(
    op_type: str,
    inputs: Sequence[str],
    outputs: Sequence[str],
    name: Optional[str] = None,
    **attrs: Any,
) -> NodeDescriptor:
    """Build a node, converting keyword arguments into attributes."""
    return NodeDescriptor(
        op_type=op_type,
        name=name if name is not None else f"{op_type}_{outputs[0] if outputs else ''}",
        inputs=list(inputs),
        outputs=list(outputs),
        attributes=[make_attribute(key, value) for key, value in attrs.items()],
    )


class OpKind(str, Enum):
    """Operator types the interpreter can evaluate (matching ONNX names)."""

    # Elementwise binary
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"
    EQUAL = "Equal"
    MATMUL = "MatMul"

    # Unary elementwise
    ABS = "Abs"
    COS = "Cos"
    SIN = "Sin"
    NEG = "Neg"
    ERF = "Erf"
    TANH = "Tanh"
    SIGMOID = "Sigmoid"
    GELU = "Gelu"
    RELU = "Relu"

    # Activations with attributes
    SOFTMAX = "Softmax"
    LOG_SOFTMAX = "LogSoftmax"
    CLIP = "Clip"

    # Shape operations
    RESHAPE = "Reshape"
    TRANSPOSE = "Transpose"
    SQUEEZE = "Squeeze"
    CONCAT = "Concat"

    # Convolution, pooling and normalization
    CONV = "Conv"
    MAX_POOL = "MaxPool"
    AVG_POOL = "AveragePool"
    BATCH_NORM = "BatchNormalization"
    DROPOUT = "Dropout"

    # Tensor construction
    CONSTANT = "Constant"
    CAST = "Cast"

    @classmethod
    def lookup(cls, op_type: str) -> Optional["OpKind"]:
        """Return the kind for an op_type string, or None."""
        try:
            return cls(op_type)
        except ValueError:
            return None

    @classmethod
    def parse(cls, node: NodeDescriptor) -> "OpKind":
        """
        Resolve the kind of a node.

        Raises:
            UnsupportedOperatorError: If the op_type is not a known kind.
        """
        kind = cls.lookup(node.op_type)
        if kind is None:
            from ..errors import UnsupportedOperatorError

            raise UnsupportedOperatorError(
                node.op_type, node=node, supported_ops=[k.value for k in cls]
            )
        return kind
