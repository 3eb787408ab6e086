# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
onnx_eval Core Types

Wire-format enumerations (matching ONNX numbering) and the mapping from
element types to numpy runtime dtypes.
"""

from enum import IntEnum
from typing import Optional, Union

import numpy as np


class DataType(IntEnum):
    """Tensor element types, numbered as ONNX TensorProto.DataType."""

    UNDEFINED = 0
    FLOAT = 1
    UINT8 = 2
    INT8 = 3
    UINT16 = 4
    INT16 = 5
    INT32 = 6
    INT64 = 7
    STRING = 8
    BOOL = 9
    FLOAT16 = 10
    DOUBLE = 11
    UINT32 = 12
    UINT64 = 13
    COMPLEX64 = 14
    COMPLEX128 = 15
    BFLOAT16 = 16
    FLOAT8E4M3FN = 17
    FLOAT8E4M3FNUZ = 18
    FLOAT8E5M2 = 19
    FLOAT8E5M2FNUZ = 20
    UINT4 = 21
    INT4 = 22


class AttributeType(IntEnum):
    """Attribute value kinds, numbered as ONNX AttributeProto.AttributeType."""

    UNDEFINED = 0
    FLOAT = 1
    INT = 2
    STRING = 3
    TENSOR = 4
    GRAPH = 5
    FLOATS = 6
    INTS = 7
    STRINGS = 8
    TENSORS = 9
    GRAPHS = 10
    SPARSE_TENSOR = 11
    SPARSE_TENSORS = 12
    TYPE_PROTO = 13
    TYPE_PROTOS = 14


_NUMPY_DTYPES = {
    DataType.FLOAT: np.dtype(np.float32),
    DataType.UINT8: np.dtype(np.uint8),
    DataType.INT8: np.dtype(np.int8),
    DataType.UINT16: np.dtype(np.uint16),
    DataType.INT16: np.dtype(np.int16),
    DataType.INT32: np.dtype(np.int32),
    DataType.INT64: np.dtype(np.int64),
    DataType.BOOL: np.dtype(np.bool_),
    DataType.FLOAT16: np.dtype(np.float16),
    DataType.DOUBLE: np.dtype(np.float64),
    DataType.UINT32: np.dtype(np.uint32),
    DataType.UINT64: np.dtype(np.uint64),
}

_DATA_TYPES = {dtype: data_type for data_type, dtype in _NUMPY_DTYPES.items()}


def data_type_name(data_type: Union[int, DataType]) -> str:
    """Readable name for a wire element type, tolerating unknown values."""
    try:
        return DataType(data_type).name
    except ValueError:
        return str(int(data_type))


def to_numpy_dtype(data_type: Union[int, DataType]) -> Optional[np.dtype]:
    """Map a wire element type to a numpy dtype, or None if unsupported."""
    try:
        return _NUMPY_DTYPES.get(DataType(data_type))
    except ValueError:
        return None


def require_numpy_dtype(
    data_type: Union[int, DataType],
    what: Optional[str] = None,
    node=None,
) -> np.dtype:
    """
    Map a wire element type to a numpy dtype.

    Raises:
        UnsupportedDataTypeError: If the element type has no runtime dtype.
    """
    dtype = to_numpy_dtype(data_type)
    if dtype is None:
        from ..errors import UnsupportedDataTypeError

        raise UnsupportedDataTypeError(data_type_name(data_type), what=what, node=node)
    return dtype


def from_numpy_dtype(dtype) -> Optional[DataType]:
    """Map a numpy dtype back to its wire element type."""
    return _DATA_TYPES.get(np.dtype(dtype))


def supported_data_types() -> list[DataType]:
    """List the element types that have a runtime dtype."""
    return list(_NUMPY_DTYPES)
