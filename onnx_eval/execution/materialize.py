# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tensor Materialization

Turns embedded tensor descriptors (initializers, Constant values) into
read-only numpy arrays.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core.tensor import TensorDescriptor
from ..core.types import require_numpy_dtype
from ..errors import MalformedTensorError

# Element types ONNX packs into int32_data when raw_data is not used.
_INT32_PACKED = {
    np.dtype(np.int8),
    np.dtype(np.int16),
    np.dtype(np.int32),
    np.dtype(np.uint8),
    np.dtype(np.uint16),
    np.dtype(np.bool_),
    np.dtype(np.float16),
}
_UINT64_PACKED = {np.dtype(np.uint32), np.dtype(np.uint64)}


def _from_typed(values, dtype: np.dtype) -> np.ndarray:
    return np.asarray(values, dtype=dtype)


def _from_int32_data(values, dtype: np.dtype) -> np.ndarray:
    if dtype == np.float16:
        # float16 values travel as their bit patterns
        return np.asarray(values, dtype=np.uint16).view(np.float16)
    return np.asarray(values, dtype=np.int64).astype(dtype)


def _from_raw(raw: bytes, dtype: np.dtype) -> np.ndarray:
    return np.frombuffer(raw, dtype=dtype.newbyteorder("<")).astype(dtype, copy=False)


def materialize_tensor(
    desc: TensorDescriptor, owner: Optional[str] = None
) -> np.ndarray:
    """
    Convert a tensor descriptor into a numpy array.

    Data source priority: float_data for float32, double_data for float64,
    int64_data for int64, then raw_data reinterpreted per dtype and dims.
    With no raw bytes, the packed int32_data / uint64_data arrays are used.

    Args:
        desc: The embedded tensor.
        owner: Name used in error messages (defaults to the tensor name).

    Returns:
        Read-only array with shape ``desc.dims``.

    Raises:
        UnsupportedDataTypeError: If the element type has no runtime dtype.
        MalformedTensorError: If the payload size disagrees with the dims.
    """
    name = owner or desc.name
    dtype = require_numpy_dtype(desc.data_type, what=name)
    dims = tuple(int(d) for d in desc.dims)

    if dtype == np.float32 and len(desc.float_data) > 0:
        flat = _from_typed(desc.float_data, dtype)
    elif dtype == np.float64 and len(desc.double_data) > 0:
        flat = _from_typed(desc.double_data, dtype)
    elif dtype == np.int64 and len(desc.int64_data) > 0:
        flat = _from_typed(desc.int64_data, dtype)
    elif len(desc.raw_data) == 0 and dtype in _INT32_PACKED and desc.int32_data:
        flat = _from_int32_data(desc.int32_data, dtype)
    elif len(desc.raw_data) == 0 and dtype in _UINT64_PACKED and desc.uint64_data:
        flat = _from_typed(desc.uint64_data, dtype)
    else:
        raw = bytes(desc.raw_data)
        if len(raw) % dtype.itemsize != 0:
            raise MalformedTensorError(
                f"raw data of {len(raw)} bytes is not a multiple of "
                f"{dtype.itemsize} for {name}",
                tensor_name=name,
            )
        flat = _from_raw(raw, dtype)

    expected = int(np.prod(dims, dtype=np.int64)) if dims else 1
    if flat.size != expected:
        raise MalformedTensorError(
            f"tensor {name} holds {flat.size} elements, dims {list(dims)} "
            f"require {expected}",
            tensor_name=name,
        )

    result = flat.reshape(dims)
    result.flags.writeable = False
    return result
