"""
Semiring descriptors for generalised sum-of-products contraction.

A semiring swaps the ``+``/``*`` pair used by the contraction iterator for
another pair of monoids: Boolean reachability, path counting, best-path
scores, clamped probabilities or shortest paths. Tensors always store plain
floats; ``from_number``/``to_number`` map between that storage and the
semiring's own carrier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

__all__ = [
    "Semiring",
    "BOOLEAN",
    "COUNTING",
    "VITERBI",
    "PROBABILISTIC",
    "MIN_PLUS",
    "TROPICAL",
    "SEMIRINGS",
    "get_semiring",
]


@dataclass(frozen=True)
class Semiring:
    name: str
    zero: Any
    one: Any
    add: Callable[[Any, Any], Any]
    mul: Callable[[Any, Any], Any]
    from_number: Callable[[float], Any]
    to_number: Callable[[Any], float]

    def __repr__(self) -> str:  # pragma: no cover - repr only used for debugging
        return f"Semiring({self.name!r})"


def _log_or_neg_inf(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


def _exp_or_zero(value: float) -> float:
    return 0.0 if value == -math.inf else math.exp(value)


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


BOOLEAN = Semiring(
    name="boolean",
    zero=False,
    one=True,
    add=lambda a, b: a or b,
    mul=lambda a, b: a and b,
    from_number=lambda n: n > 0,
    to_number=lambda b: 1.0 if b else 0.0,
)

COUNTING = Semiring(
    name="counting",
    zero=0.0,
    one=1.0,
    add=lambda a, b: a + b,
    mul=lambda a, b: a * b,
    from_number=float,
    to_number=float,
)

# Log domain: mul is +, add is max. Stored values are probabilities.
VITERBI = Semiring(
    name="viterbi",
    zero=-math.inf,
    one=0.0,
    add=max,
    mul=lambda a, b: a + b,
    from_number=_log_or_neg_inf,
    to_number=_exp_or_zero,
)

PROBABILISTIC = Semiring(
    name="probabilistic",
    zero=0.0,
    one=1.0,
    add=lambda a, b: _clamp_unit(a + b),
    mul=lambda a, b: _clamp_unit(a * b),
    from_number=_clamp_unit,
    to_number=float,
)

MIN_PLUS = Semiring(
    name="min_plus",
    zero=math.inf,
    one=0.0,
    add=min,
    mul=lambda a, b: a + b,
    from_number=float,
    to_number=float,
)

TROPICAL = MIN_PLUS

SEMIRINGS: Mapping[str, Semiring] = MappingProxyType(
    {
        "boolean": BOOLEAN,
        "counting": COUNTING,
        "viterbi": VITERBI,
        "probabilistic": PROBABILISTIC,
        "min_plus": MIN_PLUS,
        "tropical": TROPICAL,
    }
)


def get_semiring(name: str) -> Semiring:
    key = str(name).strip().lower().replace("-", "_")
    try:
        return SEMIRINGS[key]
    except KeyError:
        available = ", ".join(sorted(SEMIRINGS))
        raise KeyError(f"Unknown semiring '{name}'. Available: {available}") from None
