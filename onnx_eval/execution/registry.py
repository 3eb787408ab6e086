# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Operator Registry

Maps operator kinds to their kernel implementations.
Uses a decorator-based registration pattern; the set of kinds is closed, so
a missing handler is detected when the operators package is imported.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from ..core.node import NodeDescriptor, OpKind

if TYPE_CHECKING:
    from .attributes import NodeAttributes
    from .context import ExecutionContext


# Signature: (context: ExecutionContext, node: NodeDescriptor,
#             attrs: NodeAttributes) -> None
OperatorFunc = Callable[["ExecutionContext", NodeDescriptor, "NodeAttributes"], None]


class OperatorRegistry:
    """
    Registry for operator implementations.

    Example:
        @OperatorRegistry.register(OpKind.MATMUL)
        def execute_matmul(ctx, node, attrs):
            a = ctx.get_input(node, 0)
            b = ctx.get_input(node, 1)
            ctx.set_output(node, backend.matmul(a, b))

        # Later, execute the operator
        kernel = OperatorRegistry.get_kernel(OpKind.MATMUL)
        kernel(ctx, node, NodeAttributes(node))
    """

    _registry: Dict[OpKind, OperatorFunc] = {}

    @classmethod
    def register(cls, *kinds: OpKind) -> Callable[[OperatorFunc], OperatorFunc]:
        """
        Decorator to register an operator implementation for one or more
        kinds.

        Example:
            @OperatorRegistry.register(OpKind.SOFTMAX, OpKind.LOG_SOFTMAX)
            def execute_softmax(ctx, node, attrs):
                ...
        """

        def decorator(func: OperatorFunc) -> OperatorFunc:
            for kind in kinds:
                cls._registry[OpKind(kind)] = func
            return func

        return decorator

    @classmethod
    def get_kernel(cls, kind: OpKind) -> OperatorFunc:
        """
        Get the kernel function for an operator kind.

        Raises:
            KeyError: If no handler is registered.
        """
        if kind not in cls._registry:
            raise KeyError(
                f"Operator '{kind.value}' not registered. "
                f"Supported operators: {cls.list_operators()}"
            )
        return cls._registry[kind]

    @classmethod
    def is_supported(cls, op_type: str) -> bool:
        """Check if an op_type string has a handler."""
        kind = OpKind.lookup(op_type)
        return kind is not None and kind in cls._registry

    @classmethod
    def list_operators(cls) -> List[str]:
        """List all registered operators."""
        return sorted(kind.value for kind in cls._registry)

    @classmethod
    def missing_kinds(cls) -> List[OpKind]:
        """Kinds that have no registered handler."""
        return [kind for kind in OpKind if kind not in cls._registry]

    @classmethod
    def verify_complete(cls) -> None:
        """
        Check that every operator kind has a handler.

        Raises:
            RuntimeError: Listing the kinds without a handler.
        """
        missing = cls.missing_kinds()
        if missing:
            raise RuntimeError(
                "Operator kinds without a handler: "
                + ", ".join(kind.value for kind in missing)
            )

    @classmethod
    def get_unsupported_ops(cls, op_types: List[str]) -> List[str]:
        """
        Get list of operators that are not supported.

        Args:
            op_types: List of op_type strings to check.

        Returns:
            List of unsupported operator types.
        """
        return [op for op in op_types if not cls.is_supported(op)]

    @classmethod
    def count(cls) -> int:
        """Get number of registered operators."""
        return len(cls._registry)

    @classmethod
    def describe(cls, kind: OpKind) -> Optional[str]:
        """Name of the handler function registered for a kind."""
        func = cls._registry.get(kind)
        return func.__name__ if func is not None else None
