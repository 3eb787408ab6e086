# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval Model Adapters

- ONNXAdapter: onnx.ModelProto -> ModelDescriptor (requires ``onnx``)
"""

from .onnx_adapter import ONNXAdapter

__all__ = ["ONNXAdapter"]
