from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .exceptions import ShapeError
from .shape_checker import flat_offset

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[int]]
Initializer = Union[str, ArrayLike]
RngLike = Union[None, int, np.random.Generator]


@dataclass
class Tensor:
    """
    Dense named-index tensor stored as a flat row-major ``float64`` buffer.

    ``indices`` names each dimension for contraction purposes; ``name`` is a
    label only. The last dimension varies fastest in ``data``.
    """

    name: str
    indices: Tuple[str, ...]
    shape: Tuple[int, ...]
    data: np.ndarray

    def __post_init__(self) -> None:
        self.indices = tuple(str(idx) for idx in self.indices)
        self.shape = _normalize_shape(self.shape)
        if len(self.indices) != len(self.shape):
            raise ShapeError(
                f"Tensor '{self.name}' has {len(self.indices)} index name(s) for rank {len(self.shape)}"
            )
        data = np.array(self.data, dtype=np.float64)
        if data.ndim != 1:
            data = data.reshape(-1)
        expected = _size(self.shape)
        if data.size != expected:
            raise ShapeError(
                f"Tensor '{self.name}' with shape {self.shape} needs {expected} element(s), got {data.size}"
            )
        self.data = data

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return int(self.data.size)

    def to_numpy(self) -> np.ndarray:
        return self.data.reshape(self.shape).copy()

    def __repr__(self) -> str:  # pragma: no cover - repr only used for debugging
        return f"Tensor(name={self.name!r}, indices={list(self.indices)}, shape={list(self.shape)})"


def _normalize_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    normalized = tuple(int(dim) for dim in shape)
    for dim in normalized:
        if dim < 0:
            raise ShapeError(f"Tensor dimensions must be non-negative, got {normalized}")
    return normalized


def _size(shape: Sequence[int]) -> int:
    result = 1
    for dim in shape:
        result *= int(dim)
    return result


def _resolve_rng(rng: RngLike) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def create_tensor(
    name: str,
    indices: Sequence[str],
    shape: Sequence[int],
    initializer: Initializer = "zeros",
    *,
    rng: RngLike = None,
) -> Tensor:
    """
    Build a tensor filled by ``initializer``.

    ``initializer`` is ``"zeros"``, ``"ones"``, ``"random"`` (uniform on
    [-1, 1]) or a flat buffer whose length must equal the product of
    ``shape``.
    """

    shape = _normalize_shape(shape)
    size = _size(shape)
    if isinstance(initializer, str):
        kind = initializer.lower()
        if kind == "zeros":
            data = np.zeros(size, dtype=np.float64)
        elif kind == "ones":
            data = np.ones(size, dtype=np.float64)
        elif kind == "random":
            data = _resolve_rng(rng).uniform(-1.0, 1.0, size=size)
        else:
            raise ValueError(f"Unknown tensor initializer: {initializer}")
    else:
        data = np.array(initializer, dtype=np.float64).reshape(-1)
    return Tensor(name=name, indices=tuple(indices), shape=shape, data=data)


def from_matrix(name: str, indices: Sequence[str], matrix: Sequence[Sequence[float]]) -> Tensor:
    if len(indices) != 2:
        raise ShapeError(f"from_matrix expects two index names, got {len(indices)}")
    rows = len(matrix)
    cols = len(matrix[0]) if rows else 0
    for row_idx, row in enumerate(matrix):
        if len(row) != cols:
            raise ShapeError(f"Matrix row {row_idx} has {len(row)} column(s), expected {cols}")
    data = np.array(matrix, dtype=np.float64).reshape(-1) if rows else np.zeros(0)
    return Tensor(name=name, indices=tuple(indices), shape=(rows, cols), data=data)


def from_vector(name: str, index: str, values: Sequence[float]) -> Tensor:
    data = np.array(values, dtype=np.float64).reshape(-1)
    return Tensor(name=name, indices=(index,), shape=(data.size,), data=data)


def identity(name: str, indices: Sequence[str], size: int) -> Tensor:
    return Tensor(
        name=name,
        indices=tuple(indices),
        shape=(size, size),
        data=np.eye(size, dtype=np.float64).reshape(-1),
    )


def clone(tensor: Tensor) -> Tensor:
    return Tensor(
        name=tensor.name,
        indices=tuple(tensor.indices),
        shape=tuple(tensor.shape),
        data=tensor.data.copy(),
    )


def get_element(tensor: Tensor, *coords: int) -> float:
    return float(tensor.data[flat_offset(tensor.shape, coords)])


def set_element(tensor: Tensor, value: float, *coords: int) -> None:
    tensor.data[flat_offset(tensor.shape, coords)] = float(value)


def tensor_to_string(tensor: Tensor, precision: int = 3) -> str:
    fmt = f"{{:.{precision}f}}"
    values = [fmt.format(float(v)) for v in tensor.data]
    rank = tensor.rank
    if rank == 1:
        return f"[{', '.join(values)}]"
    if rank == 2:
        rows, cols = tensor.shape
        lines = [f"  [{', '.join(values[r * cols:(r + 1) * cols])}]" for r in range(rows)]
        return "[\n" + ",\n".join(lines) + "\n]"
    if rank == 3:
        dim0, dim1, dim2 = tensor.shape
        slices = []
        for i in range(dim0):
            rows = []
            for j in range(dim1):
                start = i * dim1 * dim2 + j * dim2
                rows.append(f"    [{', '.join(values[start:start + dim2])}]")
            slices.append(f"  {tensor.indices[0]}={i}:\n" + ",\n".join(rows))
        return "[\n" + "\n\n".join(slices) + "\n]"
    header = f"Tensor(shape=[{', '.join(map(str, tensor.shape))}], indices=[{', '.join(tensor.indices)}])"
    if rank == 0:
        return f"{header} value={values[0]}"
    sample = values[:20]
    remaining = len(values) - len(sample)
    more = f" ... ({remaining} more)" if remaining > 0 else ""
    return f"{header}\nFirst {len(sample)} values: [{', '.join(sample)}]{more}"


def ensure_tensor(value: Tensor, *, what: str = "operand") -> Tensor:
    if not isinstance(value, Tensor):
        raise TypeError(f"Expected a Tensor {what}, got {type(value).__name__}")
    return value
