"""
Datalog-style reasoning on top of the contraction engine.

A recursive rule such as ``Ancestor(x, z) <- Ancestor(x, y), Parent(y, z)``
becomes a tensor equation iterated to a fixpoint: the join is an einsum over
the shared variable and the projection back to truth values is a threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..core.builtins import add, threshold
from ..core.contraction import ContractionConfig, einsum, resolve_config, semiring_einsum
from ..core.exceptions import ShapeError
from ..core.semiring import Semiring
from ..core.tensor import Tensor, clone, ensure_tensor

__all__ = [
    "FixpointResult",
    "fixpoint",
    "transitive_closure",
    "semiring_closure",
]


@dataclass
class FixpointResult:
    tensor: Tensor
    iterations: int
    converged: bool


def _max_change(previous: Tensor, current: Tensor) -> float:
    if tuple(previous.shape) != tuple(current.shape):
        raise ShapeError(
            f"fixpoint update changed the shape from {previous.shape} to {current.shape}"
        )
    if previous.data.size == 0:
        return 0.0
    with np.errstate(invalid="ignore"):
        delta = np.abs(current.data - previous.data)
    delta = np.where(current.data == previous.data, 0.0, delta)
    return float(np.max(delta))


def fixpoint(
    update: Callable[[Tensor], Tensor],
    initial: Tensor,
    *,
    max_iters: int = 32,
    tol: float = 1e-6,
) -> FixpointResult:
    """
    Apply ``update`` until no element moves by more than ``tol``.

    ``iterations`` counts update applications, including the final one that
    observed no change. When ``max_iters`` runs out the last tensor is
    returned with ``converged=False``.
    """

    current = ensure_tensor(initial, what="initial value")
    for iteration in range(1, int(max_iters) + 1):
        nxt = ensure_tensor(update(current), what="fixpoint update result")
        change = _max_change(current, nxt)
        current = nxt
        if change <= tol:
            return FixpointResult(tensor=current, iterations=iteration, converged=True)
    return FixpointResult(tensor=current, iterations=int(max_iters), converged=False)


def _check_square(relation: Tensor, op: str) -> None:
    ensure_tensor(relation)
    if relation.rank != 2 or relation.shape[0] != relation.shape[1]:
        raise ShapeError(f"{op} expects a square relation matrix, got shape {relation.shape}")


def transitive_closure(
    relation: Tensor,
    *,
    config: Optional[ContractionConfig] = None,
) -> FixpointResult:
    """
    Least fixpoint of ``A = step(A + step(A . R))`` starting from ``A = R``.

    With ``R`` a Boolean parent relation the result is the ancestor relation.
    """

    _check_square(relation, "transitive_closure")
    cfg = resolve_config(config)

    def _step(current: Tensor) -> Tensor:
        joined = einsum("xy,yz->xz", current, relation, config=cfg)
        return threshold(add(current, threshold(joined)))

    return fixpoint(_step, clone(relation), max_iters=cfg.max_iters, tol=cfg.tol)


def _semiring_sum(semiring: Semiring, left: Tensor, right: Tensor) -> Tensor:
    lift, lower = semiring.from_number, semiring.to_number
    data = np.array(
        [lower(semiring.add(lift(a), lift(b))) for a, b in zip(left.data.tolist(), right.data.tolist())],
        dtype=np.float64,
    )
    return Tensor(name=left.name, indices=left.indices, shape=left.shape, data=data)


def semiring_closure(
    semiring: Semiring,
    relation: Tensor,
    *,
    max_iters: Optional[int] = None,
    tol: Optional[float] = None,
    config: Optional[ContractionConfig] = None,
) -> FixpointResult:
    """
    Closure of ``relation`` over paths of one or more steps in ``semiring``.

    Iterates ``A = A (+) A (x) R`` from ``A = R``: Boolean gives reachability,
    ``MIN_PLUS`` shortest path lengths, ``VITERBI`` best path probabilities.
    """

    _check_square(relation, "semiring_closure")
    cfg = resolve_config(config)

    def _step(current: Tensor) -> Tensor:
        extended = semiring_einsum(semiring, "xy,yz->xz", current, relation, config=cfg)
        return _semiring_sum(semiring, current, extended)

    return fixpoint(
        _step,
        clone(relation),
        max_iters=cfg.max_iters if max_iters is None else max_iters,
        tol=cfg.tol if tol is None else tol,
    )
