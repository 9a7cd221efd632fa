from __future__ import annotations

from typing import Optional

import numpy as np

from .exceptions import ShapeError
from .tensor import Tensor, ensure_tensor


def _like(tensor: Tensor, data: np.ndarray, *, name: Optional[str] = None) -> Tensor:
    return Tensor(
        name=name or tensor.name,
        indices=tuple(tensor.indices),
        shape=tuple(tensor.shape),
        data=np.asarray(data, dtype=np.float64).reshape(-1),
    )


def threshold(tensor: Tensor, cutoff: float = 0.0) -> Tensor:
    ensure_tensor(tensor)
    return _like(tensor, (tensor.data > cutoff).astype(np.float64))


def step(tensor: Tensor) -> Tensor:
    return threshold(tensor, 0.0)


def sigmoid(tensor: Tensor, temperature: float = 1.0, *, zero_tol: float = 1e-9) -> Tensor:
    """Logistic squashing of ``x / temperature``; temperature 0 is a hard threshold."""
    ensure_tensor(tensor)
    temp = float(temperature)
    if abs(temp) <= zero_tol:
        return threshold(tensor, 0.0)
    return _like(tensor, 1.0 / (1.0 + np.exp(-tensor.data / temp)))


def relu(tensor: Tensor) -> Tensor:
    ensure_tensor(tensor)
    return _like(tensor, np.maximum(0.0, tensor.data))


def softmax(tensor: Tensor, axis: int = -1) -> Tensor:
    ensure_tensor(tensor)
    if tensor.rank not in (1, 2):
        raise ShapeError(f"softmax supports rank 1 and rank 2 tensors, got rank {tensor.rank}")
    if tensor.rank == 1:
        arr = tensor.data
        arr = arr - np.max(arr) if arr.size else arr
        e = np.exp(arr)
        return _like(tensor, e / np.sum(e))
    if axis not in (-1, 0, 1):
        raise ValueError(f"softmax axis must be 0, 1 or -1 for a matrix, got {axis}")
    if tensor.data.size == 0:
        return _like(tensor, tensor.data)
    arr = tensor.to_numpy()
    reduce_axis = 1 if axis == -1 else axis
    arr = arr - np.max(arr, axis=reduce_axis, keepdims=True)
    e = np.exp(arr)
    return _like(tensor, e / np.sum(e, axis=reduce_axis, keepdims=True))


def _check_same_shape(op: str, tensors) -> None:
    if not tensors:
        raise ValueError(f"{op} needs at least one tensor")
    first = ensure_tensor(tensors[0])
    for position, other in enumerate(tensors[1:], start=1):
        ensure_tensor(other)
        if tuple(other.shape) != tuple(first.shape):
            raise ShapeError(
                f"{op} expects matching shapes, got {first.shape} and {other.shape}",
                operand=position,
            )


def add(*tensors: Tensor) -> Tensor:
    _check_same_shape("add", tensors)
    data = tensors[0].data.copy()
    for other in tensors[1:]:
        data = data + other.data
    return _like(tensors[0], data)


def multiply(*tensors: Tensor) -> Tensor:
    _check_same_shape("multiply", tensors)
    data = tensors[0].data.copy()
    for other in tensors[1:]:
        data = data * other.data
    return _like(tensors[0], data)


def scale(tensor: Tensor, scalar: float) -> Tensor:
    ensure_tensor(tensor)
    return _like(tensor, tensor.data * float(scalar))


def transpose(tensor: Tensor) -> Tensor:
    ensure_tensor(tensor)
    if tensor.rank != 2:
        raise ShapeError(f"transpose requires a rank 2 tensor, got rank {tensor.rank}")
    rows, cols = tensor.shape
    return Tensor(
        name=tensor.name,
        indices=(tensor.indices[1], tensor.indices[0]),
        shape=(cols, rows),
        data=tensor.to_numpy().T.reshape(-1),
    )


def _broadcast_view(tensor: Tensor, vector: Tensor, axis: int, op: str) -> np.ndarray:
    ensure_tensor(tensor)
    ensure_tensor(vector)
    if vector.rank != 1:
        raise ShapeError(f"{op} expects a rank 1 operand to broadcast, got rank {vector.rank}")
    if tensor.rank == 0:
        raise ShapeError(f"{op} cannot broadcast onto a scalar tensor")
    axis = axis if axis >= 0 else tensor.rank + axis
    if not 0 <= axis < tensor.rank:
        raise ValueError(f"axis {axis} out of range for rank {tensor.rank}")
    if tensor.shape[axis] != vector.shape[0]:
        raise ShapeError(
            f"{op} length {vector.shape[0]} does not match axis {axis} of size {tensor.shape[axis]}",
            operand=1,
        )
    view_shape = [1] * tensor.rank
    view_shape[axis] = vector.shape[0]
    return vector.data.reshape(view_shape)


def broadcast_add(tensor: Tensor, bias: Tensor, axis: int = -1) -> Tensor:
    """Add a vector along ``axis`` (e.g. a bias over the last dimension)."""
    view = _broadcast_view(tensor, bias, axis, "broadcast_add")
    return _like(tensor, tensor.to_numpy() + view)


def broadcast_multiply(tensor: Tensor, weights: Tensor, axis: int = -1) -> Tensor:
    view = _broadcast_view(tensor, weights, axis, "broadcast_multiply")
    return _like(tensor, tensor.to_numpy() * view)


def extract_slice(tensor: Tensor, axis: int, index: int) -> Tensor:
    """Fix ``axis`` at ``index`` and drop that dimension and its index name."""
    ensure_tensor(tensor)
    if not 0 <= axis < tensor.rank:
        raise ValueError(f"axis {axis} out of range for rank {tensor.rank}")
    if not 0 <= index < tensor.shape[axis]:
        raise IndexError(f"index {index} out of range for axis {axis} with size {tensor.shape[axis]}")
    data = np.take(tensor.to_numpy(), index, axis=axis)
    indices = tensor.indices[:axis] + tensor.indices[axis + 1:]
    shape = tensor.shape[:axis] + tensor.shape[axis + 1:]
    return Tensor(name=tensor.name, indices=indices, shape=shape, data=np.asarray(data).reshape(-1))
