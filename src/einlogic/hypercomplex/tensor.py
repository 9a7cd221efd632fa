from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.contraction import (
    Backend,
    ContractionConfig,
    NotationLike,
    contract,
    prepare_plan,
    resolve_config,
)
from ..core.exceptions import AlgebraError, ShapeError
from ..core.shape_checker import ContractionPlan, flat_offset
from ..core.tensor import Tensor, ensure_tensor
from .numbers import COMPLEX, QUATERNION, AlgebraType, CayleyDickson, make_hypercomplex

RngLike = Union[None, int, np.random.Generator]
HypercomplexInitializer = Union[str, Sequence[CayleyDickson]]


@dataclass
class HypercomplexTensor:
    """
    Dense named-index tensor whose elements are Cayley-Dickson values.

    Every element carries ``algebra_type``; mixing algebras inside one
    tensor is rejected at construction.
    """

    name: str
    indices: Tuple[str, ...]
    shape: Tuple[int, ...]
    data: List[CayleyDickson]
    algebra_type: AlgebraType

    def __post_init__(self) -> None:
        self.indices = tuple(str(idx) for idx in self.indices)
        self.shape = tuple(int(dim) for dim in self.shape)
        if len(self.indices) != len(self.shape):
            raise ShapeError(
                f"Tensor '{self.name}' has {len(self.indices)} index name(s) for rank {len(self.shape)}"
            )
        if any(dim < 0 for dim in self.shape):
            raise ShapeError(f"Tensor dimensions must be non-negative, got {self.shape}")
        self.data = list(self.data)
        expected = _size(self.shape)
        if len(self.data) != expected:
            raise ShapeError(
                f"Tensor '{self.name}' with shape {self.shape} needs {expected} element(s), got {len(self.data)}"
            )
        for position, value in enumerate(self.data):
            _check_element(value, self.algebra_type, position)

    @property
    def rank(self) -> int:
        return len(self.shape)


def _size(shape: Sequence[int]) -> int:
    result = 1
    for dim in shape:
        result *= int(dim)
    return result


def _check_element(value: CayleyDickson, algebra: AlgebraType, position: Optional[int] = None) -> None:
    where = f" at flat offset {position}" if position is not None else ""
    if not isinstance(value, CayleyDickson):
        raise AlgebraError(f"Expected a hypercomplex value{where}, got {type(value).__name__}")
    if value.algebra_type != algebra:
        raise AlgebraError(
            f"Element{where} is {value.algebra_type.name} but the tensor holds {algebra.name}"
        )


def _unit(algebra: AlgebraType, real_part: float) -> CayleyDickson:
    components = np.zeros(algebra.dimension, dtype=np.float64)
    components[0] = real_part
    return make_hypercomplex(components, algebra)


def create_hypercomplex_tensor(
    name: str,
    indices: Sequence[str],
    shape: Sequence[int],
    algebra_type: AlgebraType,
    initializer: HypercomplexInitializer = "zeros",
    *,
    rng: RngLike = None,
) -> HypercomplexTensor:
    """
    ``"zeros"``, ``"ones"`` (real part 1), ``"random"`` (every component
    uniform on [-1, 1]) or an explicit sequence of values.
    """

    size = _size(shape)
    if isinstance(initializer, str):
        kind = initializer.lower()
        if kind == "zeros":
            zero = _unit(algebra_type, 0.0)
            data = [zero] * size
        elif kind == "ones":
            one = _unit(algebra_type, 1.0)
            data = [one] * size
        elif kind == "random":
            gen = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
            draws = gen.uniform(-1.0, 1.0, size=(size, algebra_type.dimension))
            data = [make_hypercomplex(row, algebra_type) for row in draws]
        else:
            raise ValueError(f"Unknown tensor initializer: {initializer}")
    else:
        data = list(initializer)
    return HypercomplexTensor(
        name=name,
        indices=tuple(indices),
        shape=tuple(shape),
        data=data,
        algebra_type=algebra_type,
    )


def create_complex_tensor(
    name: str,
    indices: Sequence[str],
    shape: Sequence[int],
    initializer: HypercomplexInitializer = "zeros",
    *,
    rng: RngLike = None,
) -> HypercomplexTensor:
    return create_hypercomplex_tensor(name, indices, shape, COMPLEX, initializer, rng=rng)


def create_quaternion_tensor(
    name: str,
    indices: Sequence[str],
    shape: Sequence[int],
    initializer: HypercomplexInitializer = "zeros",
    *,
    rng: RngLike = None,
) -> HypercomplexTensor:
    return create_hypercomplex_tensor(name, indices, shape, QUATERNION, initializer, rng=rng)


def get_hypercomplex_element(tensor: HypercomplexTensor, *coords: int) -> CayleyDickson:
    return tensor.data[flat_offset(tensor.shape, coords)]


def set_hypercomplex_element(tensor: HypercomplexTensor, value: CayleyDickson, *coords: int) -> None:
    _check_element(value, tensor.algebra_type)
    tensor.data[flat_offset(tensor.shape, coords)] = value


def map_hypercomplex_tensor(
    tensor: HypercomplexTensor,
    fn: Callable[[CayleyDickson], CayleyDickson],
) -> HypercomplexTensor:
    return HypercomplexTensor(
        name=tensor.name,
        indices=tensor.indices,
        shape=tensor.shape,
        data=[fn(value) for value in tensor.data],
        algebra_type=tensor.algebra_type,
    )


def split_activation(tensor: HypercomplexTensor, fn: Callable[[float], float]) -> HypercomplexTensor:
    """Apply a scalar real activation to every component independently."""
    algebra = tensor.algebra_type

    def _apply(value: CayleyDickson) -> CayleyDickson:
        return make_hypercomplex([float(fn(float(c))) for c in value.components], algebra)

    return map_hypercomplex_tensor(tensor, _apply)


def modulus_activation(tensor: HypercomplexTensor, fn: Callable[[float], float]) -> HypercomplexTensor:
    """Rescale each value so its norm becomes ``fn(norm)``; the direction is kept."""

    def _rescale(value: CayleyDickson) -> CayleyDickson:
        norm = value.norm()
        factor = fn(norm) / norm if norm > 0 else 0.0
        return value.scale(factor)

    return map_hypercomplex_tensor(tensor, _rescale)


def _relu(x: float) -> float:
    return max(0.0, x)


def complex_relu(tensor: HypercomplexTensor) -> HypercomplexTensor:
    if tensor.algebra_type != COMPLEX:
        raise AlgebraError(f"complex_relu needs a Complex tensor, got {tensor.algebra_type.name}")
    return split_activation(tensor, _relu)


def quaternion_relu(tensor: HypercomplexTensor) -> HypercomplexTensor:
    if tensor.algebra_type != QUATERNION:
        raise AlgebraError(f"quaternion_relu needs a Quaternion tensor, got {tensor.algebra_type.name}")
    return split_activation(tensor, _relu)


def extract_real_parts(tensor: HypercomplexTensor) -> Tensor:
    return Tensor(
        name=tensor.name,
        indices=tensor.indices,
        shape=tensor.shape,
        data=np.array([value.real for value in tensor.data], dtype=np.float64),
    )


def extract_norms(tensor: HypercomplexTensor) -> Tensor:
    return Tensor(
        name=tensor.name,
        indices=tensor.indices,
        shape=tensor.shape,
        data=np.array([value.norm() for value in tensor.data], dtype=np.float64),
    )


def real_to_hypercomplex(tensor: Tensor, algebra_type: AlgebraType) -> HypercomplexTensor:
    """Embed a real tensor as the real parts of ``algebra_type`` values."""
    ensure_tensor(tensor)
    return HypercomplexTensor(
        name=tensor.name,
        indices=tensor.indices,
        shape=tensor.shape,
        data=[_unit(algebra_type, float(x)) for x in tensor.data],
        algebra_type=algebra_type,
    )


def _format_value(value: CayleyDickson, precision: int, max_components: int) -> str:
    if value.dimension <= max_components:
        return "(" + ",".join(f"{c:.{precision}f}" for c in value.components) + ")"
    return f"({value.components[0]:.{precision}f},...)"


def hypercomplex_tensor_to_string(tensor: HypercomplexTensor, precision: int = 3) -> str:
    if tensor.rank == 1:
        return "[" + ", ".join(_format_value(v, precision, 4) for v in tensor.data) + "]"
    if tensor.rank == 2:
        rows, cols = tensor.shape
        lines = []
        for i in range(rows):
            row = tensor.data[i * cols:(i + 1) * cols]
            lines.append("  [" + ", ".join(_format_value(v, precision, 2) for v in row) + "]")
        return "[\n" + ",\n".join(lines) + "\n]"
    return f"HypercomplexTensor({tensor.algebra_type.name}, shape=[{', '.join(map(str, tensor.shape))}])"


class HypercomplexBackend(Backend):
    """
    Algebra-specific multiply/add.

    The product is seeded with operand 0's element and extended left to
    right, so the operand order of the notation is the multiplication order.
    """

    def __init__(self, algebra: AlgebraType):
        self.algebra = algebra
        self.name = f"hypercomplex:{algebra.name}"

    def allocate(self, size: int) -> List[CayleyDickson]:
        return [_unit(self.algebra, 0.0)] * size

    def combine(self, values: Sequence[CayleyDickson]) -> CayleyDickson:
        product = values[0]
        for value in values[1:]:
            product = product.multiply(value)
        return product

    def accumulate(self, current: CayleyDickson, product: CayleyDickson) -> CayleyDickson:
        return current.add(product)


def check_hypercomplex_operands(tensors: Sequence[HypercomplexTensor]) -> AlgebraType:
    """Return the shared algebra of ``tensors`` or raise."""
    if not tensors:
        raise ShapeError("hypercomplex_einsum needs at least one operand")
    for t in tensors:
        if not isinstance(t, HypercomplexTensor):
            raise TypeError(f"Expected a HypercomplexTensor operand, got {type(t).__name__}")
    algebra = tensors[0].algebra_type
    for position, t in enumerate(tensors[1:], start=1):
        if t.algebra_type != algebra:
            raise AlgebraError(
                f"operand {position}: {t.algebra_type.name} tensor cannot be contracted "
                f"with {algebra.name} tensors"
            )
    return algebra


def run_hypercomplex_plan(
    plan: ContractionPlan,
    tensors: Sequence[HypercomplexTensor],
    algebra: AlgebraType,
    name: Optional[str] = None,
) -> HypercomplexTensor:
    backend = HypercomplexBackend(algebra)
    data = contract(plan, [t.data for t in tensors], backend)
    return HypercomplexTensor(
        name=name or "result",
        indices=tuple(plan.notation.output),
        shape=plan.output_shape,
        data=list(data),
        algebra_type=algebra,
    )


def hypercomplex_einsum(
    notation: NotationLike,
    *tensors: HypercomplexTensor,
    config: Optional[ContractionConfig] = None,
    name: Optional[str] = None,
) -> HypercomplexTensor:
    algebra = check_hypercomplex_operands(tensors)
    cfg = resolve_config(config)
    plan = prepare_plan(notation, [t.shape for t in tensors], cfg)
    return run_hypercomplex_plan(plan, tensors, algebra, name)
