# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tensor Descriptors

Embedded constant tensors and declared graph values, as parsed from the
wire format.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .types import DataType, data_type_name

# A concrete dimension is an int; a symbolic one is its parameter name or None.
Dim = Union[int, str, None]


@dataclass
class TensorDescriptor:
    """
    An embedded tensor (initializer or Constant value).

    Element data lives in exactly one representation: one of the typed
    arrays or the little-endian raw byte buffer.
    """

    name: str = ""
    dims: list[int] = field(default_factory=list)
    data_type: int = DataType.FLOAT
    float_data: list[float] = field(default_factory=list)
    double_data: list[float] = field(default_factory=list)
    int64_data: list[int] = field(default_factory=list)
    int32_data: list[int] = field(default_factory=list)
    uint64_data: list[int] = field(default_factory=list)
    raw_data: bytes = b""

    def numel(self) -> int:
        """Get total number of elements."""
        result = 1
        for d in self.dims:
            result *= d
        return result

    def __repr__(self) -> str:
        return (
            f"TensorDescriptor(name='{self.name}', dims={self.dims}, "
            f"data_type={data_type_name(self.data_type)})"
        )


@dataclass
class ValueInfo:
    """
    A declared graph input or output.

    ``elem_type`` is None when the value carries no tensor type, and
    ``shape`` is None when no shape is declared.
    """

    name: str = ""
    elem_type: Optional[int] = None
    shape: Optional[list[Dim]] = None

    def is_dynamic(self) -> bool:
        """Check if the declared shape has symbolic dimensions."""
        return self.shape is not None and any(
            not isinstance(d, int) for d in self.shape
        )
