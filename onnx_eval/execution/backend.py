# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tensor Backend

numpy/scipy kernels used by the operator handlers. Every kernel returns a new
array (or a view) and never writes into its operands. Shape errors surface as
numpy ``ValueError``s, which the interpreter reports as ``KernelError``.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import special


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


def rank(x: np.ndarray) -> int:
    return x.ndim


def dims(x: np.ndarray) -> Tuple[int, ...]:
    return tuple(x.shape)


def elem_count(x: np.ndarray) -> int:
    return int(x.size)


# ---------------------------------------------------------------------------
# Broadcasting binary ops
# ---------------------------------------------------------------------------


def broadcast_add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.add(a, b)


def broadcast_sub(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.subtract(a, b)


def broadcast_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.multiply(a, b)


def broadcast_div(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Elementwise division; integer operands divide with truncation."""
    if np.issubdtype(a.dtype, np.integer) and np.issubdtype(b.dtype, np.integer):
        dtype = np.result_type(a, b)
        return np.trunc(np.true_divide(a, b)).astype(dtype)
    return np.true_divide(a, b)


def broadcast_eq(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.equal(a, b)


def broadcast_maximum(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.maximum(a, b).astype(a.dtype, copy=False)


def broadcast_minimum(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.minimum(a, b).astype(a.dtype, copy=False)


def broadcast_matmul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.matmul(a, b)


# ---------------------------------------------------------------------------
# Unary ops
# ---------------------------------------------------------------------------


def _keep_float(result: np.ndarray, like: np.ndarray) -> np.ndarray:
    if np.issubdtype(like.dtype, np.floating):
        return result.astype(like.dtype, copy=False)
    return result


def absolute(x: np.ndarray) -> np.ndarray:
    return np.abs(x)


def cos(x: np.ndarray) -> np.ndarray:
    return np.cos(x)


def sin(x: np.ndarray) -> np.ndarray:
    return np.sin(x)


def neg(x: np.ndarray) -> np.ndarray:
    return np.negative(x)


def tanh(x: np.ndarray) -> np.ndarray:
    return np.tanh(x)


def erf(x: np.ndarray) -> np.ndarray:
    return _keep_float(special.erf(x), x)


def sigmoid(x: np.ndarray) -> np.ndarray:
    return _keep_float(special.expit(x), x)


def relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, np.zeros((), dtype=x.dtype))


def gelu_erf(x: np.ndarray) -> np.ndarray:
    """GELU(x) = 0.5 * x * (1 + erf(x / sqrt(2)))"""
    return _keep_float(0.5 * x * (1.0 + special.erf(x / math.sqrt(2.0))), x)


def gelu_tanh(x: np.ndarray) -> np.ndarray:
    """Tanh approximation of GELU."""
    inner = math.sqrt(2.0 / math.pi) * (x + 0.044715 * np.power(x, 3))
    return _keep_float(0.5 * x * (1.0 + np.tanh(inner)), x)


def softmax(x: np.ndarray, axis: int) -> np.ndarray:
    shifted = x - np.max(x, axis=axis, keepdims=True)
    exp = np.exp(shifted)
    return exp / np.sum(exp, axis=axis, keepdims=True)


def log_softmax(x: np.ndarray, axis: int) -> np.ndarray:
    shifted = x - np.max(x, axis=axis, keepdims=True)
    return shifted - np.log(np.sum(np.exp(shifted), axis=axis, keepdims=True))


def sqrt(x: np.ndarray) -> np.ndarray:
    return np.sqrt(x)


def to_dtype(x: np.ndarray, dtype: np.dtype) -> np.ndarray:
    return np.asarray(x).astype(dtype)


# ---------------------------------------------------------------------------
# Shape ops
# ---------------------------------------------------------------------------


def reshape(x: np.ndarray, shape: Sequence[int]) -> np.ndarray:
    return np.reshape(x, tuple(shape))


def permute(x: np.ndarray, perm: Sequence[int]) -> np.ndarray:
    return np.transpose(x, tuple(perm))


def squeeze(x: np.ndarray, axis: int) -> np.ndarray:
    return np.squeeze(x, axis=axis)


def cat(tensors: List[np.ndarray], axis: int) -> np.ndarray:
    return np.concatenate(tensors, axis=axis)


def pad_with_zeros(x: np.ndarray, axis: int, before: int, after: int) -> np.ndarray:
    """Zero-pad a single axis."""
    pad_width = [(0, 0)] * x.ndim
    pad_width[axis] = (before, after)
    return np.pad(x, pad_width, mode="constant")


# ---------------------------------------------------------------------------
# Convolution
# ---------------------------------------------------------------------------


def _check_groups(c_in: int, c_out: int, c_in_group: int, groups: int) -> None:
    if groups < 1 or c_out % groups != 0 or c_in != c_in_group * groups:
        raise ValueError(
            f"invalid conv groups {groups}: input channels {c_in}, "
            f"weight channels {c_in_group}, output channels {c_out}"
        )


def conv1d(
    x: np.ndarray,
    w: np.ndarray,
    padding: int = 0,
    stride: int = 1,
    dilation: int = 1,
    groups: int = 1,
) -> np.ndarray:
    """
    1D convolution with symmetric zero padding.

    Args:
        x: Input of shape (N, C_in, L).
        w: Weight of shape (C_out, C_in / groups, K).
    """
    if x.ndim != 3:
        raise ValueError(f"conv1d expects a rank-3 input, got shape {x.shape}")
    if padding:
        x = pad_with_zeros(x, 2, padding, padding)

    n, c_in, _ = x.shape
    c_out, c_in_group, k = w.shape
    _check_groups(c_in, c_out, c_in_group, groups)

    span = dilation * (k - 1) + 1
    windows = sliding_window_view(x, span, axis=2)[:, :, ::stride, ::dilation]
    l_out = windows.shape[2]

    windows = windows.reshape(n, groups, c_in_group, l_out, k)
    w_grouped = w.reshape(groups, c_out // groups, c_in_group, k)
    out = np.einsum("ngclk,gock->ngol", windows, w_grouped)
    return out.reshape(n, c_out, l_out)


def conv2d(
    x: np.ndarray,
    w: np.ndarray,
    padding: int = 0,
    stride: int = 1,
    dilation: int = 1,
    groups: int = 1,
) -> np.ndarray:
    """
    2D convolution with symmetric zero padding.

    Args:
        x: Input of shape (N, C_in, H, W).
        w: Weight of shape (C_out, C_in / groups, Kh, Kw).
    """
    if x.ndim != 4:
        raise ValueError(f"conv2d expects a rank-4 input, got shape {x.shape}")
    if padding:
        x = np.pad(
            x,
            ((0, 0), (0, 0), (padding, padding), (padding, padding)),
            mode="constant",
        )

    n, c_in, _, _ = x.shape
    c_out, c_in_group, kh, kw = w.shape
    _check_groups(c_in, c_out, c_in_group, groups)

    span_h = dilation * (kh - 1) + 1
    span_w = dilation * (kw - 1) + 1
    windows = sliding_window_view(x, (span_h, span_w), axis=(2, 3))
    windows = windows[:, :, ::stride, ::stride, ::dilation, ::dilation]
    h_out, w_out = windows.shape[2], windows.shape[3]

    windows = windows.reshape(n, groups, c_in_group, h_out, w_out, kh, kw)
    w_grouped = w.reshape(groups, c_out // groups, c_in_group, kh, kw)
    out = np.einsum("ngcyxij,gocij->ngoyx", windows, w_grouped)
    return out.reshape(n, c_out, h_out, w_out)


# ---------------------------------------------------------------------------
# Pooling
# ---------------------------------------------------------------------------


def _pool_windows(
    x: np.ndarray, kernel: Tuple[int, int], stride: Tuple[int, int]
) -> np.ndarray:
    if x.ndim != 4:
        raise ValueError(f"2d pooling expects a rank-4 input, got shape {x.shape}")
    windows = sliding_window_view(x, kernel, axis=(2, 3))
    return windows[:, :, :: stride[0], :: stride[1]]


def max_pool2d_with_stride(
    x: np.ndarray, kernel: Tuple[int, int], stride: Tuple[int, int]
) -> np.ndarray:
    return _pool_windows(x, kernel, stride).max(axis=(-2, -1))


def avg_pool2d_with_stride(
    x: np.ndarray, kernel: Tuple[int, int], stride: Tuple[int, int]
) -> np.ndarray:
    return _keep_float(_pool_windows(x, kernel, stride).mean(axis=(-2, -1)), x)
