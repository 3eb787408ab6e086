# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Graph Descriptors

The flat, already topologically sorted graph handed to the interpreter.
"""

from dataclasses import dataclass, field
from typing import Optional

from .node import NodeDescriptor
from .tensor import TensorDescriptor, ValueInfo


@dataclass
class GraphDescriptor:
    """
    A computation graph: initializers, declared inputs, nodes and declared
    outputs, each in wire order.
    """

    name: str = ""
    initializers: list[TensorDescriptor] = field(default_factory=list)
    inputs: list[ValueInfo] = field(default_factory=list)
    nodes: list[NodeDescriptor] = field(default_factory=list)
    outputs: list[ValueInfo] = field(default_factory=list)

    def add_node(self, node: NodeDescriptor) -> NodeDescriptor:
        """Append a node to the graph."""
        self.nodes.append(node)
        return node

    def add_initializer(self, tensor: TensorDescriptor) -> None:
        """Add constant tensor data (weights, biases, etc.)."""
        self.initializers.append(tensor)

    def add_input(self, value: ValueInfo) -> None:
        """Add a graph input."""
        self.inputs.append(value)

    def add_output(self, value: ValueInfo) -> None:
        """Add a graph output."""
        self.outputs.append(value)

    @property
    def input_names(self) -> list[str]:
        return [v.name for v in self.inputs]

    @property
    def output_names(self) -> list[str]:
        return [v.name for v in self.outputs]

    def find_nodes_by_op(self, op_type: str) -> list[NodeDescriptor]:
        """Find all nodes of a specific operation type."""
        return [n for n in self.nodes if n.op_type == op_type]

    def count_ops(self) -> dict[str, int]:
        """Count nodes by operation type."""
        counts: dict[str, int] = {}
        for node in self.nodes:
            counts[node.op_type] = counts.get(node.op_type, 0) + 1
        return counts

    def summary(self) -> str:
        """Print graph summary."""
        lines = [
            f"Graph: {self.name}",
            f"  Inputs: {len(self.inputs)}",
            f"  Outputs: {len(self.outputs)}",
            f"  Nodes: {len(self.nodes)}",
            f"  Initializers: {len(self.initializers)}",
            "  Operations:",
        ]

        for op, count in self.count_ops().items():
            lines.append(f"    {op}: {count}")

        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"GraphDescriptor(name='{self.name}', nodes={len(self.nodes)})"


@dataclass
class ModelDescriptor:
    """Top-level model record; only ``graph`` is used for evaluation."""

    graph: Optional[GraphDescriptor] = None
    ir_version: int = 0
    opset_version: Optional[int] = None
    producer_name: str = ""
