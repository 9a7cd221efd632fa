"""
Probabilistic Logic Networks truth values.

A truth value pairs a ``strength`` (how likely the statement is) with a
``confidence`` (how much evidence backs that estimate). Both live in [0, 1];
every constructor clamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .builtins import multiply
from .exceptions import ShapeError
from .tensor import Tensor, clone, ensure_tensor

__all__ = [
    "TruthValue",
    "create_truth_value",
    "pln_conjunction",
    "pln_disjunction",
    "pln_negation",
    "pln_deduction",
    "pln_revision",
    "PLNTensor",
    "create_pln_tensor",
    "pln_tensor_conjunction",
]

# Lower bound on 1 - s(B) in deduction.
_DEDUCTION_EPS = 1e-3
_MAX_REVISED_CONFIDENCE = 0.99


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class TruthValue:
    strength: float
    confidence: float


def create_truth_value(strength: float, confidence: float) -> TruthValue:
    return TruthValue(strength=_clamp_unit(strength), confidence=_clamp_unit(confidence))


def pln_conjunction(a: TruthValue, b: TruthValue) -> TruthValue:
    """Independence-based AND: strengths and confidences multiply."""
    return create_truth_value(a.strength * b.strength, a.confidence * b.confidence)


def pln_disjunction(a: TruthValue, b: TruthValue) -> TruthValue:
    strength = a.strength + b.strength - a.strength * b.strength
    return create_truth_value(strength, min(a.confidence, b.confidence))


def pln_negation(a: TruthValue) -> TruthValue:
    return create_truth_value(1.0 - a.strength, a.confidence)


def pln_deduction(
    ab: TruthValue,
    bc: TruthValue,
    a: TruthValue,
    b: TruthValue,
    c: TruthValue,
) -> TruthValue:
    """
    Chain ``A -> B`` and ``B -> C`` into ``A -> C``.

    Uses the simplified independence formula
    ``s(AB) s(BC) + (1 - s(AB)) (s(C) - s(B) s(BC)) / (1 - s(B))``. The
    confidence is the fifth root of the product of all five confidences.
    ``a`` contributes only through its confidence.
    """

    strength = ab.strength * bc.strength + (1.0 - ab.strength) * (
        c.strength - b.strength * bc.strength
    ) / max(_DEDUCTION_EPS, 1.0 - b.strength)
    evidence = ab.confidence * bc.confidence * a.confidence * b.confidence * c.confidence
    return create_truth_value(strength, evidence ** 0.2)


def pln_revision(a: TruthValue, b: TruthValue) -> TruthValue:
    """Merge two estimates of the same statement, weighted by confidence."""
    total = a.confidence + b.confidence
    if total == 0:
        return create_truth_value(0.5, 0.0)
    strength = (a.strength * a.confidence + b.strength * b.confidence) / total
    return create_truth_value(strength, min(_MAX_REVISED_CONFIDENCE, total / (total + 1.0)))


@dataclass
class PLNTensor:
    """A real tensor with one truth value per element, in row-major order."""

    tensor: Tensor
    truth_values: List[TruthValue]

    def __post_init__(self) -> None:
        ensure_tensor(self.tensor)
        self.truth_values = list(self.truth_values)
        if len(self.truth_values) != self.tensor.size:
            raise ShapeError(
                f"PLN tensor '{self.tensor.name}' has {self.tensor.size} element(s) "
                f"but {len(self.truth_values)} truth value(s)"
            )

    @property
    def strengths(self) -> List[float]:
        return [tv.strength for tv in self.truth_values]

    @property
    def confidences(self) -> List[float]:
        return [tv.confidence for tv in self.truth_values]


def create_pln_tensor(tensor: Tensor, confidence: float = 0.9) -> PLNTensor:
    """Read each element as a strength and attach a uniform ``confidence``."""
    ensure_tensor(tensor)
    truth_values = [create_truth_value(float(value), confidence) for value in tensor.data]
    return PLNTensor(tensor=clone(tensor), truth_values=truth_values)


def pln_tensor_conjunction(a: PLNTensor, b: PLNTensor) -> PLNTensor:
    product = multiply(a.tensor, b.tensor)
    return PLNTensor(
        tensor=product,
        truth_values=[pln_conjunction(x, y) for x, y in zip(a.truth_values, b.truth_values)],
    )
