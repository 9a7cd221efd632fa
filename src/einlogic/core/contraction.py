from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterator, List, MutableSequence, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import BackendError, ResourceLimitError
from .parser import Notation, parse_notation
from .semiring import Semiring
from .shape_checker import ContractionPlan, resolve
from .tensor import Tensor, ensure_tensor

logger = logging.getLogger(__name__)

NotationLike = Union[str, Notation]


@dataclass(frozen=True)
class ContractionConfig:
    """
    Switches shared by every contraction entry point.

    * ``strategy`` is ``"loop"`` (the odometer iterator, the reference
      semantics) or ``"numpy"``, which lets the real backend hand the resolved
      plan to :func:`numpy.einsum`. Semiring and hypercomplex contractions
      always run the loop.
    * ``repeated_indices`` controls a symbol repeated inside one operand:
      ``"diagonal"`` walks that operand's diagonal, ``"reject"`` raises.
    * ``max_joint_size`` caps the number of joint index assignments.
    * ``max_iters``/``tol`` drive the fixpoint helpers in :mod:`einlogic.logic`.
    """

    strategy: str = "loop"  # "loop" | "numpy"
    repeated_indices: str = "diagonal"  # "diagonal" | "reject"
    max_joint_size: Optional[int] = None
    explain_timings: bool = True
    max_iters: int = 32
    tol: float = 1e-6

    def normalized(self) -> "ContractionConfig":
        strategy = (self.strategy or "loop").lower()
        if strategy not in {"loop", "numpy"}:
            raise ValueError(f"Unsupported contraction strategy: {self.strategy}")
        repeated = (self.repeated_indices or "diagonal").lower()
        if repeated not in {"diagonal", "reject"}:
            raise ValueError(f"Unsupported repeated index policy: {self.repeated_indices}")
        limit = self.max_joint_size
        if limit is not None:
            limit = int(limit)
            if limit <= 0:
                raise ValueError("max_joint_size must be positive when provided")
        max_iters = int(self.max_iters)
        if max_iters <= 0:
            raise ValueError("max_iters must be positive")
        tol = float(self.tol)
        if tol < 0:
            raise ValueError("tol must be non-negative")
        return replace(
            self,
            strategy=strategy,
            repeated_indices=repeated,
            max_joint_size=limit,
            explain_timings=bool(self.explain_timings),
            max_iters=max_iters,
            tol=tol,
        )


def resolve_config(config: Optional[ContractionConfig]) -> ContractionConfig:
    return (config or ContractionConfig()).normalized()


# Backends --------------------------------------------------------------------


class Backend:
    """Combine/accumulate strategy plugged into :func:`contract`."""

    name = "backend"

    def prepare(self, data: Any) -> Sequence[Any]:
        return data

    def allocate(self, size: int) -> MutableSequence[Any]:
        raise NotImplementedError

    def combine(self, values: Sequence[Any]) -> Any:
        raise NotImplementedError

    def accumulate(self, current: Any, product: Any) -> Any:
        raise NotImplementedError


class RealBackend(Backend):
    name = "real"

    def prepare(self, data: np.ndarray) -> List[float]:
        return np.asarray(data, dtype=np.float64).tolist()

    def allocate(self, size: int) -> List[float]:
        return [0.0] * size

    def combine(self, values: Sequence[float]) -> float:
        product = 1.0
        for value in values:
            product *= value
        return product

    def accumulate(self, current: float, product: float) -> float:
        return current + product


class SemiringBackend(Backend):
    """
    Runs the contraction in ``semiring``.

    Inputs are lifted with ``from_number`` on every read and the output cell
    is converted back with ``to_number`` after every accumulation, so the
    stored buffer only ever holds plain floats.
    """

    def __init__(self, semiring: Semiring):
        self.semiring = semiring
        self.name = f"semiring:{semiring.name}"

    def prepare(self, data: np.ndarray) -> List[float]:
        return np.asarray(data, dtype=np.float64).tolist()

    def allocate(self, size: int) -> List[float]:
        return [float(self.semiring.to_number(self.semiring.zero))] * size

    def combine(self, values: Sequence[float]) -> Any:
        sr = self.semiring
        product = sr.one
        for value in values:
            product = sr.mul(product, sr.from_number(value))
        return product

    def accumulate(self, current: float, product: Any) -> float:
        sr = self.semiring
        return float(sr.to_number(sr.add(sr.from_number(current), product)))


# Iteration -------------------------------------------------------------------


def iter_offsets(plan: ContractionPlan) -> Iterator[Tuple[Tuple[int, ...], int]]:
    """
    Yield ``(operand_offsets, output_offset)`` for every joint assignment.

    The assignment is an odometer over ``plan.index_order`` with the last
    position varying fastest. Offsets are carried incrementally: advancing
    position ``p`` adds that position's stride, and a wrap subtracts
    ``stride * (size - 1)``.
    """

    sizes = plan.sizes
    if any(size == 0 for size in sizes):
        return
    strides = plan.operand_strides
    out_strides = plan.output_strides
    n_positions = len(sizes)
    n_operands = len(strides)

    counters = [0] * n_positions
    offsets = [0] * n_operands
    out_offset = 0
    while True:
        yield tuple(offsets), out_offset
        position = n_positions - 1
        while position >= 0:
            counters[position] += 1
            if counters[position] < sizes[position]:
                for t in range(n_operands):
                    offsets[t] += strides[t][position]
                out_offset += out_strides[position]
                break
            span = sizes[position] - 1
            counters[position] = 0
            for t in range(n_operands):
                offsets[t] -= strides[t][position] * span
            out_offset -= out_strides[position] * span
            position -= 1
        else:
            return


def contract(
    plan: ContractionPlan,
    buffers: Sequence[Sequence[Any]],
    backend: Backend,
) -> MutableSequence[Any]:
    """Run the sum-of-products loop for ``plan`` and return the flat output."""

    out = backend.allocate(plan.output_size)
    for offsets, out_offset in iter_offsets(plan):
        values = [buf[offset] for buf, offset in zip(buffers, offsets)]
        out[out_offset] = backend.accumulate(out[out_offset], backend.combine(values))
    return out


def prepare_plan(
    notation: NotationLike,
    shapes: Sequence[Sequence[int]],
    config: ContractionConfig,
) -> ContractionPlan:
    parsed = notation if isinstance(notation, Notation) else parse_notation(notation)
    plan = resolve(parsed, shapes, repeated_indices=config.repeated_indices)
    limit = config.max_joint_size
    if limit is not None and plan.joint_size > limit:
        raise ResourceLimitError(
            f"Contraction '{parsed}' visits {plan.joint_size} joint assignments, "
            f"exceeding max_joint_size={limit}"
        )
    logger.debug(
        "plan %s order=%s sizes=%s joint=%d",
        parsed,
        "".join(plan.index_order),
        plan.sizes,
        plan.joint_size,
    )
    return plan


def _numpy_contract(plan: ContractionPlan, tensors: Sequence[Tensor]) -> np.ndarray:
    arrays = [t.data.reshape(t.shape) for t in tensors]
    try:
        result = np.einsum(str(plan.notation), *arrays)
    except ValueError as exc:  # pragma: no cover - plan validation runs first
        raise BackendError(f"numpy.einsum rejected '{plan.notation}': {exc}") from exc
    return np.array(result, dtype=np.float64).reshape(-1)


def run_plan(
    plan: ContractionPlan,
    tensors: Sequence[Tensor],
    config: ContractionConfig,
    name: Optional[str] = None,
) -> Tensor:
    """Execute an already resolved real-valued plan."""
    if config.strategy == "numpy":
        data = _numpy_contract(plan, tensors)
    else:
        backend = RealBackend()
        data = np.asarray(
            contract(plan, [backend.prepare(t.data) for t in tensors], backend),
            dtype=np.float64,
        )
    return Tensor(
        name=name or "result",
        indices=tuple(plan.notation.output),
        shape=plan.output_shape,
        data=data,
    )


def run_semiring_plan(
    semiring: Semiring,
    plan: ContractionPlan,
    tensors: Sequence[Tensor],
    name: Optional[str] = None,
) -> Tensor:
    backend = SemiringBackend(semiring)
    data = contract(plan, [backend.prepare(t.data) for t in tensors], backend)
    return Tensor(
        name=name or "result",
        indices=tuple(plan.notation.output),
        shape=plan.output_shape,
        data=np.asarray(data, dtype=np.float64),
    )


def check_semiring(semiring: Semiring) -> Semiring:
    if not isinstance(semiring, Semiring):
        raise TypeError(f"Expected a Semiring, got {type(semiring).__name__}")
    return semiring


def einsum(
    notation: NotationLike,
    *tensors: Tensor,
    config: Optional[ContractionConfig] = None,
    name: Optional[str] = None,
) -> Tensor:
    """
    Generalised Einstein summation over real-valued tensors.

    ``notation`` names one index segment per operand plus the output
    segment, e.g. ``"ij,jk->ik"``. Every symbol missing from the output is
    summed over.
    """

    cfg = resolve_config(config)
    for t in tensors:
        ensure_tensor(t)
    plan = prepare_plan(notation, [t.shape for t in tensors], cfg)
    return run_plan(plan, tensors, cfg, name)


def semiring_einsum(
    semiring: Semiring,
    notation: NotationLike,
    *tensors: Tensor,
    config: Optional[ContractionConfig] = None,
    name: Optional[str] = None,
) -> Tensor:
    check_semiring(semiring)
    cfg = resolve_config(config)
    for t in tensors:
        ensure_tensor(t)
    plan = prepare_plan(notation, [t.shape for t in tensors], cfg)
    return run_semiring_plan(semiring, plan, tensors, name)
