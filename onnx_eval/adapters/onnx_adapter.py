# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ONNX Adapter

Converts ONNX protobuf records (ModelProto, GraphProto, NodeProto, ...) into
the plain descriptors the interpreter consumes. Requires the optional
``onnx`` package; the rest of onnx_eval works without it.
"""

from pathlib import Path
from typing import Any, Optional, Union

from ..core import (
    AttributeDescriptor,
    AttributeType,
    GraphDescriptor,
    ModelDescriptor,
    NodeDescriptor,
    TensorDescriptor,
    ValueInfo,
)
from ..errors import InvalidGraphError
from ..observability.logger import get_logger


class ONNXAdapter:
    """
    Adapter for ONNX models.

    The adapter only reads models; it never writes them.

    Example:
        adapter = ONNXAdapter()
        model = adapter.from_file("model.onnx")
        outputs = simple_eval(model, {"input": x})
    """

    def __init__(self, check_model: bool = False):
        """
        Args:
            check_model: Run onnx.checker on every model before conversion.
                Checker failures propagate to the caller.
        """
        self._onnx = None
        self.check_model = check_model

    @property
    def name(self) -> str:
        return "onnx"

    @property
    def is_available(self) -> bool:
        try:
            import onnx  # noqa: F401

            return True
        except ImportError:
            return False

    def _get_onnx(self):
        """Lazy import onnx."""
        if self._onnx is None:
            try:
                import onnx

                self._onnx = onnx
            except ImportError as err:
                raise ImportError(
                    "ONNX is required for ONNXAdapter. "
                    "Install it with: pip install onnx-eval[onnx]"
                ) from err
        return self._onnx

    def from_model(self, model: Union[Any, bytes, str, Path]) -> ModelDescriptor:
        """
        Convert an ONNX model to a ModelDescriptor.

        Args:
            model: ONNX ModelProto, file path, or serialized bytes.
        """
        if isinstance(model, bytes):
            return self.from_bytes(model)
        elif isinstance(model, (str, Path)):
            return self.from_file(model)
        elif hasattr(model, "SerializeToString"):
            return self._convert_model_proto(model)
        else:
            raise ValueError(
                f"Unsupported model type: {type(model)}. "
                "Expected ONNX ModelProto, file path, or bytes."
            )

    def from_file(self, path: Union[str, Path]) -> ModelDescriptor:
        """Load ONNX model from file and convert it."""
        onnx = self._get_onnx()
        model = onnx.load(str(path))
        return self._convert_model_proto(model)

    def from_bytes(self, data: bytes) -> ModelDescriptor:
        """Load ONNX model from bytes and convert it."""
        onnx = self._get_onnx()
        model = onnx.load_model_from_string(data)
        return self._convert_model_proto(model)

    def _convert_model_proto(self, model) -> ModelDescriptor:
        onnx = self._get_onnx()

        if self.check_model:
            onnx.checker.check_model(model)

        opset_version: Optional[int] = None
        for opset in model.opset_import:
            if opset.domain in ("", "ai.onnx"):
                opset_version = opset.version

        graph = None
        if model.HasField("graph"):
            graph = self.convert_graph(model.graph)

        get_logger().debug(
            "Converted ONNX model",
            component="adapter",
            graph_name=None if graph is None else graph.name,
            ir_version=model.ir_version,
            opset_version=opset_version,
        )

        return ModelDescriptor(
            graph=graph,
            ir_version=model.ir_version,
            opset_version=opset_version,
            producer_name=model.producer_name,
        )

    def convert_graph(self, onnx_graph) -> GraphDescriptor:
        """Convert an ONNX GraphProto to a GraphDescriptor."""
        if onnx_graph.sparse_initializer:
            raise InvalidGraphError(
                "sparse initializers are not supported",
                graph_name=onnx_graph.name,
            )

        return GraphDescriptor(
            name=onnx_graph.name or "onnx_model",
            initializers=[self.convert_tensor(t) for t in onnx_graph.initializer],
            inputs=[self.convert_value_info(v) for v in onnx_graph.input],
            nodes=[self.convert_node(n) for n in onnx_graph.node],
            outputs=[self.convert_value_info(v) for v in onnx_graph.output],
        )

    @staticmethod
    def convert_tensor(tensor) -> TensorDescriptor:
        """Convert an ONNX TensorProto, keeping its wire representation."""
        return TensorDescriptor(
            name=tensor.name,
            dims=list(tensor.dims),
            data_type=tensor.data_type,
            float_data=list(tensor.float_data),
            double_data=list(tensor.double_data),
            int64_data=list(tensor.int64_data),
            int32_data=list(tensor.int32_data),
            uint64_data=list(tensor.uint64_data),
            raw_data=bytes(tensor.raw_data),
        )

    @staticmethod
    def convert_value_info(value_info) -> ValueInfo:
        """Convert ONNX ValueInfoProto; symbolic dims become str or None."""
        if not value_info.type.HasField("tensor_type"):
            return ValueInfo(name=value_info.name)

        tensor_type = value_info.type.tensor_type
        elem_type = tensor_type.elem_type or None

        shape = None
        if tensor_type.HasField("shape"):
            shape = []
            for dim in tensor_type.shape.dim:
                if dim.HasField("dim_value"):
                    shape.append(dim.dim_value)
                elif dim.HasField("dim_param"):
                    shape.append(dim.dim_param)
                else:
                    shape.append(None)

        return ValueInfo(name=value_info.name, elem_type=elem_type, shape=shape)

    def convert_node(self, onnx_node) -> NodeDescriptor:
        """Convert ONNX NodeProto; empty input names are kept as placeholders."""
        first_output = onnx_node.output[0] if onnx_node.output else ""
        return NodeDescriptor(
            op_type=onnx_node.op_type,
            name=onnx_node.name or f"{onnx_node.op_type}_{first_output}",
            inputs=list(onnx_node.input),
            outputs=list(onnx_node.output),
            attributes=[self.convert_attribute(a) for a in onnx_node.attribute],
        )

    def convert_attribute(self, attr) -> AttributeDescriptor:
        """Convert ONNX AttributeProto, copying every value field."""
        return AttributeDescriptor(
            name=attr.name,
            type=AttributeType(attr.type),
            f=attr.f,
            i=attr.i,
            s=bytes(attr.s),
            t=self.convert_tensor(attr.t) if attr.HasField("t") else None,
            floats=list(attr.floats),
            ints=list(attr.ints),
            strings=[bytes(s) for s in attr.strings],
        )
