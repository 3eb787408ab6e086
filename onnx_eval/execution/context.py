# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Execution Context

The value environment of one graph evaluation: a mutable mapping from value
names to tensors, seeded from inputs and initializers, grown as nodes run and
drained into the final outputs.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..core.node import NodeDescriptor
from ..errors import InvalidNodeError, MissingValueError


class ExecutionContext:
    """
    Manages tensor values during graph evaluation.

    Writing an existing name overwrites it silently (last write wins); no
    single-writer check is made. A context belongs to exactly one evaluation
    call and is discarded afterwards.

    Example:
        ctx = ExecutionContext()
        ctx.set_tensor("input", input_array)

        # During execution
        x = ctx.get_input(node, 0)
        ctx.set_output(node, np.abs(x))

        # After execution
        outputs = dict(ctx.drain(["output"]))
    """

    def __init__(self, values: Optional[Dict[str, np.ndarray]] = None):
        self._tensors: Dict[str, np.ndarray] = dict(values or {})

    def set_tensor(self, name: str, value: np.ndarray) -> None:
        """
        Store a tensor value.

        Args:
            name: Value name (from the graph).
            value: Tensor value.
        """
        self._tensors[name] = value

    def get_tensor(self, name: str) -> np.ndarray:
        """
        Retrieve a tensor value.

        Raises:
            MissingValueError: If the name is not bound.
        """
        try:
            return self._tensors[name]
        except KeyError:
            raise MissingValueError(name) from None

    def has_tensor(self, name: str) -> bool:
        """Check if tensor exists in context."""
        return name in self._tensors

    def get_input(self, node: NodeDescriptor, index: int) -> np.ndarray:
        """
        Retrieve the tensor bound to the node's ``index``-th input.

        Raises:
            InvalidNodeError: If the node has no such input slot.
            MissingValueError: If the input name is not bound.
        """
        if index >= len(node.inputs) or not node.inputs[index]:
            raise InvalidNodeError(
                f"{node.op_type} node {node.name} expects input #{index}", node=node
            )
        name = node.inputs[index]
        try:
            return self._tensors[name]
        except KeyError:
            raise MissingValueError(name, node=node) from None

    def get_optional_input(
        self, node: NodeDescriptor, index: int
    ) -> Optional[np.ndarray]:
        """Like get_input, but an absent or empty slot yields None."""
        if index >= len(node.inputs) or not node.inputs[index]:
            return None
        return self.get_input(node, index)

    def set_output(self, node: NodeDescriptor, value: np.ndarray, index: int = 0) -> None:
        """Bind the node's ``index``-th output name to ``value``."""
        if index >= len(node.outputs) or not node.outputs[index]:
            raise InvalidNodeError(
                f"{node.op_type} node {node.name} declares no output #{index}",
                node=node,
            )
        self._tensors[node.outputs[index]] = value

    def release(self, name: str) -> None:
        """Drop a value that no later node needs."""
        self._tensors.pop(name, None)

    def drain(self, names: Iterable[str]) -> List[Tuple[str, np.ndarray]]:
        """
        Remove and return the named values, in order.

        Raises:
            MissingValueError: If any name is not bound.
        """
        result = []
        for name in names:
            if name not in self._tensors:
                raise MissingValueError(name, role="output")
            result.append((name, self._tensors.pop(name)))
        return result

    def get_tensor_names(self) -> list:
        """Get all tensor names in context."""
        return list(self._tensors.keys())

    def __len__(self) -> int:
        return len(self._tensors)

    def __contains__(self, name: str) -> bool:
        return name in self._tensors

    def __repr__(self) -> str:
        return f"ExecutionContext(tensors={len(self._tensors)})"
