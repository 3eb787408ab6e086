# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval Error Hierarchy

Every failure during graph evaluation is fatal to the current call and is
reported through one of the error types below. Node-scoped errors carry the
operator type and node name so a failure can be diagnosed without re-running.

Error Categories:
- EvalError: Base class for all onnx_eval errors
- MissingAttributeError: Required attribute absent from a node
- AttributeTypeMismatchError: Attribute present with the wrong declared type
- MissingValueError: Value name not found in the execution context
- UnsupportedDataTypeError: Element type has no runtime dtype
- UnsupportedOperatorError: Operator type not recognized
- UnsupportedAttributeError: Attribute combination outside the supported subset
- InputContractError: Caller input disagrees with the declared graph input
- InvalidGraphError / InvalidNodeError: Structurally unusable graph or node
- GraphOrderError: Node consumes a value produced by a later node
- MalformedTensorError: Embedded tensor data does not match its dims
- KernelError: Backend kernel rejected its operands
"""

from typing import Any, Optional


class EvalError(Exception):
    """
    Base class for all onnx_eval errors.

    Provides consistent error formatting and context tracking.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)

    @property
    def op_type(self) -> Optional[str]:
        return self.context.get("op_type")

    @property
    def node_name(self) -> Optional[str]:
        return self.context.get("node_name")


def _node_context(node: Any = None, **extra: Any) -> dict:
    """Build the context dict shared by node-scoped errors."""
    context = {}
    if node is not None:
        context["op_type"] = node.op_type
        context["node_name"] = node.name
    for key, value in extra.items():
        if value is not None:
            context[key] = value
    return context


class MissingAttributeError(EvalError):
    """Required attribute is absent from the node."""

    def __init__(self, attr_name: str, node: Any = None):
        self.attr_name = attr_name
        where = f" in '{node.op_type}' for {node.name}" if node is not None else ""
        super().__init__(
            message=f"cannot find the '{attr_name}' attribute{where}",
            suggestions=[f"Add the '{attr_name}' attribute to the node"],
            context=_node_context(node, attribute=attr_name),
        )


class AttributeTypeMismatchError(EvalError):
    """
    Attribute is present but stored under a different declared type.

    Also raised when a STRING attribute is not valid UTF-8.
    """

    def __init__(
        self,
        attr_name: str,
        expected: str,
        received: str,
        node: Any = None,
    ):
        self.attr_name = attr_name
        self.expected = expected
        self.received = received
        where = f" in '{node.op_type}' for {node.name}" if node is not None else ""
        super().__init__(
            message=(
                f"unsupported type {received} for '{attr_name}' attribute{where}, "
                f"expected {expected}"
            ),
            context=_node_context(
                node, attribute=attr_name, expected=expected, received=received
            ),
        )


class MissingValueError(EvalError):
    """A referenced value name is not present in the execution context."""

    def __init__(self, value_name: str, node: Any = None, role: str = "value"):
        self.value_name = value_name
        if node is not None:
            message = f"cannot find {value_name} for op {node.name}"
        else:
            message = f"cannot find {role} {value_name}"
        super().__init__(
            message=message,
            suggestions=[
                "Check that the value is a graph input, an initializer "
                "or the output of an earlier node",
            ],
            context=_node_context(node, value=value_name),
        )


class UnsupportedDataTypeError(EvalError):
    """Element type has no runtime dtype mapping."""

    def __init__(self, data_type: Any, what: Optional[str] = None, node: Any = None):
        self.data_type = data_type
        target = f" for {what}" if what else ""
        super().__init__(
            message=f"unsupported data-type {data_type}{target}",
            suggestions=[
                "Supported element types: float, double, float16, bool, "
                "int8/16/32/64 and uint8/16/32/64",
            ],
            context=_node_context(node, data_type=data_type),
        )


class UnsupportedOperatorError(EvalError):
    """Operator type is not recognized by the interpreter."""

    def __init__(
        self,
        op_type: str,
        node: Any = None,
        supported_ops: Optional[list[str]] = None,
    ):
        self.supported_ops = supported_ops or []
        suffix = f" for op {node!r}" if node is not None else ""
        suggestions = ["Consider decomposing the operation into supported primitives"]
        if supported_ops:
            similar = self._find_similar_ops(op_type, supported_ops)
            if similar:
                suggestions.insert(0, f"Try using: {', '.join(similar)}")
        context = _node_context(node)
        context.setdefault("op_type", op_type)
        super().__init__(
            message=f"unsupported op_type {op_type}{suffix}",
            suggestions=suggestions,
            context=context,
        )

    @staticmethod
    def _find_similar_ops(op_type: str, supported_ops: list[str]) -> list[str]:
        """Find similar supported operations."""
        op_lower = op_type.lower()
        similar = []
        for op in supported_ops:
            if op_lower in op.lower() or op.lower() in op_lower:
                similar.append(op)
        return similar[:3]


class UnsupportedAttributeError(EvalError):
    """
    Recognized operator with an attribute combination outside the supported
    subset (non-uniform strides, dilated pooling, auto_pad modes, ...).
    """

    def __init__(
        self,
        message: str,
        node: Any = None,
        attr_name: Optional[str] = None,
        value: Any = None,
    ):
        self.attr_name = attr_name
        super().__init__(
            message=message,
            context=_node_context(
                node,
                attribute=attr_name,
                value=None if value is None else str(value),
            ),
        )


class InputContractError(EvalError):
    """Caller-supplied input disagrees with the declared graph input type."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
    ):
        context = {}
        if parameter:
            context["input"] = parameter
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received

        super().__init__(
            message=message,
            suggestions=["Check the dtype and shape of the supplied input"],
            context=context,
        )


class InvalidGraphError(EvalError):
    """The model or graph cannot be evaluated at all."""

    def __init__(self, message: str, graph_name: Optional[str] = None):
        context = {"graph": graph_name} if graph_name else {}
        super().__init__(message=message, context=context)


class InvalidNodeError(EvalError):
    """The node's inputs or outputs do not fit its operator."""

    def __init__(self, message: str, node: Any = None):
        super().__init__(message=message, context=_node_context(node))


class GraphOrderError(EvalError):
    """A node consumes a value that is only produced by a later node."""

    def __init__(self, value_name: str, consumer: Any, producer: Any):
        self.value_name = value_name
        super().__init__(
            message=(
                f"cyclic or out-of-order graph: {consumer.name} consumes "
                f"{value_name} before {producer.name} produces it"
            ),
            suggestions=["Topologically sort the graph nodes before evaluation"],
            context=_node_context(
                consumer, value=value_name, producer=producer.name
            ),
        )


class MalformedTensorError(EvalError):
    """Embedded tensor payload does not match the declared dims."""

    def __init__(self, message: str, tensor_name: Optional[str] = None):
        context = {"tensor": tensor_name} if tensor_name else {}
        super().__init__(message=message, context=context)


class KernelError(EvalError):
    """
    Error during kernel execution.

    Raised when:
    - Operand shapes are not broadcastable
    - A reshape target does not preserve the element count
    - Any other backend rejection of its operands
    """

    def __init__(
        self,
        message: str,
        node: Any = None,
        input_shapes: Optional[list] = None,
    ):
        context = _node_context(
            node, input_shapes=None if input_shapes is None else str(input_shapes)
        )

        super().__init__(
            message=f"Kernel execution failed: {message}",
            suggestions=["Check that input shapes are valid for this operator"],
            context=context,
        )


def format_shape_mismatch(
    expected_shape: tuple,
    actual_shape: tuple,
    tensor_name: Optional[str] = None,
) -> InputContractError:
    """Create an InputContractError for shape mismatch."""
    name = tensor_name or "tensor"
    msg = f"unexpected shape for {name}, got {actual_shape}, expected {expected_shape}"
    return InputContractError(
        message=msg,
        parameter=name,
        expected=str(expected_shape),
        received=str(actual_shape),
    )


def format_dtype_mismatch(
    expected_dtype: str,
    actual_dtype: str,
    tensor_name: Optional[str] = None,
) -> InputContractError:
    """Create an InputContractError for dtype mismatch."""
    name = tensor_name or "tensor"
    msg = f"unexpected dtype for {name}, got {actual_dtype}, expected {expected_dtype}"
    return InputContractError(
        message=msg,
        parameter=name,
        expected=expected_dtype,
        received=actual_dtype,
    )
