"""
Cayley-Dickson number tower.

Every algebra from the reals up to any power-of-two dimension shares one
recursive product::

    (a, b)(c, d) = (ac - conj(d) b, da + b conj(c))

Each doubling gives up a property: quaternions are not commutative and
sedenions have zero divisors. The specialised classes (:class:`Complex`,
:class:`Quaternion`, :class:`Octonion`, :class:`Sedenion`) are views over
the same kernel with convenient constructors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Type, Union

import numpy as np

from ..core.exceptions import AlgebraError

Scalar = Union[float, int, np.number]

__all__ = [
    "AlgebraType",
    "REAL",
    "COMPLEX",
    "QUATERNION",
    "OCTONION",
    "SEDENION",
    "TRIGINTADUONION",
    "SEXAGINTAQUATRONION",
    "algebra_dimension",
    "cayley_dickson_product",
    "cayley_dickson_conjugate",
    "CayleyDickson",
    "Complex",
    "Quaternion",
    "Octonion",
    "Sedenion",
    "make_hypercomplex",
    "real",
    "complex",
    "quaternion",
    "octonion",
    "sedenion",
    "hypercomplex_equal",
    "commutator",
    "associator",
]


@dataclass(frozen=True)
class AlgebraType:
    """Tag naming an algebra of the tower together with its component count."""

    name: str
    dimension: int

    @classmethod
    def for_dimension(cls, dimension: int) -> "AlgebraType":
        dimension = int(dimension)
        named = _NAMED_BY_DIMENSION.get(dimension)
        if named is not None:
            return named
        if not _is_power_of_two(dimension):
            raise AlgebraError(f"Cayley-Dickson dimension must be a power of two, got {dimension}")
        return cls(name=f"CayleyDickson{dimension}", dimension=dimension)

    def __str__(self) -> str:
        return self.name


REAL = AlgebraType("Real", 1)
COMPLEX = AlgebraType("Complex", 2)
QUATERNION = AlgebraType("Quaternion", 4)
OCTONION = AlgebraType("Octonion", 8)
SEDENION = AlgebraType("Sedenion", 16)
TRIGINTADUONION = AlgebraType("Trigintaduonion", 32)
SEXAGINTAQUATRONION = AlgebraType("Sexagintaquatronion", 64)

_NAMED_BY_DIMENSION: Dict[int, AlgebraType] = {
    t.dimension: t
    for t in (REAL, COMPLEX, QUATERNION, OCTONION, SEDENION, TRIGINTADUONION, SEXAGINTAQUATRONION)
}
_NAMED_BY_NAME: Dict[str, AlgebraType] = {t.name.lower(): t for t in _NAMED_BY_DIMENSION.values()}


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def algebra_dimension(algebra: Union[AlgebraType, str]) -> int:
    if isinstance(algebra, AlgebraType):
        return algebra.dimension
    key = str(algebra).lower()
    if key in _NAMED_BY_NAME:
        return _NAMED_BY_NAME[key].dimension
    if key.startswith("cayleydickson"):
        suffix = key[len("cayleydickson"):]
        if suffix.isdigit() and _is_power_of_two(int(suffix)):
            return int(suffix)
    raise AlgebraError(f"Unknown algebra type: {algebra}")


# Kernel ----------------------------------------------------------------------


def cayley_dickson_conjugate(x: np.ndarray) -> np.ndarray:
    out = -np.asarray(x, dtype=np.float64)
    out[0] = x[0]
    return out


def cayley_dickson_product(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Product of two component arrays of the same power-of-two length."""
    n = x.shape[0]
    if n == 1:
        return x * y
    h = n // 2
    a, b = x[:h], x[h:]
    c, d = y[:h], y[h:]
    out = np.empty(n, dtype=np.float64)
    out[:h] = cayley_dickson_product(a, c) - cayley_dickson_product(cayley_dickson_conjugate(d), b)
    out[h:] = cayley_dickson_product(d, a) + cayley_dickson_product(b, cayley_dickson_conjugate(c))
    return out


# Values ----------------------------------------------------------------------


class CayleyDickson:
    """Immutable element of a Cayley-Dickson algebra."""

    __slots__ = ("_components", "_algebra")

    def __init__(self, components: Sequence[float], algebra: Optional[AlgebraType] = None) -> None:
        arr = np.array(components, dtype=np.float64).reshape(-1)
        if not _is_power_of_two(arr.size):
            raise AlgebraError(f"Cayley-Dickson dimension must be a power of two, got {arr.size}")
        algebra = algebra or AlgebraType.for_dimension(arr.size)
        if algebra.dimension != arr.size:
            raise AlgebraError(
                f"{algebra.name} expects {algebra.dimension} components, got {arr.size}"
            )
        arr.setflags(write=False)
        self._components = arr
        self._algebra = algebra

    @classmethod
    def _from_components(cls, components: np.ndarray, algebra: AlgebraType) -> "CayleyDickson":
        obj = object.__new__(cls)
        arr = np.asarray(components, dtype=np.float64)
        arr.setflags(write=False)
        obj._components = arr
        obj._algebra = algebra
        return obj

    @property
    def components(self) -> np.ndarray:
        return self._components

    @property
    def dimension(self) -> int:
        return int(self._components.shape[0])

    @property
    def algebra_type(self) -> AlgebraType:
        return self._algebra

    @property
    def real(self) -> float:
        return float(self._components[0])

    def to_numpy(self) -> np.ndarray:
        return self._components.copy()

    def _wrap(self, components: np.ndarray) -> "CayleyDickson":
        return type(self)._from_components(components, self._algebra)

    def _check_same_algebra(self, other: "CayleyDickson", op: str) -> None:
        if not isinstance(other, CayleyDickson):
            raise AlgebraError(f"Cannot {op} {self._algebra.name} and {type(other).__name__}")
        if other._algebra != self._algebra:
            raise AlgebraError(
                f"Cannot {op} {self._algebra.name} and {other._algebra.name} values"
            )

    def add(self, other: "CayleyDickson") -> "CayleyDickson":
        self._check_same_algebra(other, "add")
        return self._wrap(self._components + other._components)

    def subtract(self, other: "CayleyDickson") -> "CayleyDickson":
        self._check_same_algebra(other, "subtract")
        return self._wrap(self._components - other._components)

    def multiply(self, other: "CayleyDickson") -> "CayleyDickson":
        self._check_same_algebra(other, "multiply")
        return self._wrap(cayley_dickson_product(self._components, other._components))

    def conjugate(self) -> "CayleyDickson":
        return self._wrap(cayley_dickson_conjugate(self._components))

    def norm_squared(self) -> float:
        return float(np.dot(self._components, self._components))

    def norm(self) -> float:
        return math.sqrt(self.norm_squared())

    def scale(self, scalar: Scalar) -> "CayleyDickson":
        return self._wrap(self._components * float(scalar))

    def negate(self) -> "CayleyDickson":
        return self._wrap(-self._components)

    def inverse(self) -> "CayleyDickson":
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._wrap(cayley_dickson_conjugate(self._components) / self.norm_squared())

    def divide(self, other: "CayleyDickson") -> "CayleyDickson":
        """
        ``self * conj(other) / |other|^2``.

        Nothing is checked: a zero divisor norm yields ``inf``/``nan`` and, from
        the sedenions on, a zero divisor with non-zero norm gives a value that
        is not a true quotient.
        """
        self._check_same_algebra(other, "divide")
        numerator = cayley_dickson_product(
            self._components, cayley_dickson_conjugate(other._components)
        )
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._wrap(numerator / other.norm_squared())

    def halves(self) -> Tuple["CayleyDickson", "CayleyDickson"]:
        if self.dimension == 1:
            raise AlgebraError("Real values cannot be split into halves")
        h = self.dimension // 2
        algebra = AlgebraType.for_dimension(h)
        return (
            make_hypercomplex(self._components[:h], algebra),
            make_hypercomplex(self._components[h:], algebra),
        )

    @classmethod
    def from_halves(cls, a: "CayleyDickson", b: "CayleyDickson") -> "CayleyDickson":
        """Double ``(a, b)`` into one value of twice the dimension."""
        if a.dimension != b.dimension:
            raise AlgebraError(
                f"Halves must share a dimension, got {a.dimension} and {b.dimension}"
            )
        components = np.concatenate([a.components, b.components])
        return make_hypercomplex(components, AlgebraType.for_dimension(components.size))

    # Operators -------------------------------------------------------------
    def __add__(self, other: "CayleyDickson") -> "CayleyDickson":
        if not isinstance(other, CayleyDickson):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "CayleyDickson") -> "CayleyDickson":
        if not isinstance(other, CayleyDickson):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other: Union[Scalar, "CayleyDickson"]) -> "CayleyDickson":
        if isinstance(other, (float, int, np.number)):
            return self.scale(other)
        if not isinstance(other, CayleyDickson):
            return NotImplemented
        return self.multiply(other)

    def __rmul__(self, other: Scalar) -> "CayleyDickson":
        if isinstance(other, (float, int, np.number)):
            return self.scale(other)
        return NotImplemented

    def __truediv__(self, other: Union[Scalar, "CayleyDickson"]) -> "CayleyDickson":
        if isinstance(other, (float, int, np.number)):
            with np.errstate(divide="ignore", invalid="ignore"):
                return self._wrap(self._components / float(other))
        if not isinstance(other, CayleyDickson):
            return NotImplemented
        return self.divide(other)

    def __neg__(self) -> "CayleyDickson":
        return self.negate()

    def __abs__(self) -> float:
        return self.norm()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CayleyDickson):
            return NotImplemented
        return self._algebra == other._algebra and bool(
            np.array_equal(self._components, other._components)
        )

    def __hash__(self) -> int:
        return hash((self._algebra, tuple(self._components.tolist())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format()})"

    def format(self, precision: int = 3) -> str:
        fmt = f"{{:.{precision}f}}"
        if self.dimension <= 8:
            return ", ".join(fmt.format(c) for c in self._components)
        return f"{fmt.format(self._components[0])}, ... [{self.dimension} components]"


class Complex(CayleyDickson):
    __slots__ = ()

    def __init__(self, real: float = 0.0, imag: float = 0.0) -> None:
        super().__init__([real, imag], COMPLEX)

    @property
    def imag(self) -> float:
        return float(self._components[1])

    def format(self, precision: int = 3) -> str:
        sign = "-" if self.imag < 0 else "+"
        return f"{self.real:.{precision}f} {sign} {abs(self.imag):.{precision}f}i"


class Quaternion(CayleyDickson):
    __slots__ = ()

    def __init__(self, w: float = 0.0, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        super().__init__([w, x, y, z], QUATERNION)

    @property
    def w(self) -> float:
        return float(self._components[0])

    @property
    def x(self) -> float:
        return float(self._components[1])

    @property
    def y(self) -> float:
        return float(self._components[2])

    @property
    def z(self) -> float:
        return float(self._components[3])

    def to_rotation_matrix(self) -> np.ndarray:
        """3x3 rotation matrix of this quaternion, assumed to be unit length."""
        w, x, y, z = self._components
        return np.array(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
                [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
                [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
            ],
            dtype=np.float64,
        )

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> "Quaternion":
        ax = np.asarray(axis, dtype=np.float64).reshape(-1)
        if ax.size != 3:
            raise ValueError(f"Rotation axis must have 3 components, got {ax.size}")
        norm = float(np.linalg.norm(ax))
        if norm == 0.0:
            raise ValueError("Rotation axis must be non-zero")
        half = float(angle) / 2.0
        s = math.sin(half) / norm
        return cls(math.cos(half), s * ax[0], s * ax[1], s * ax[2])

    def format(self, precision: int = 3) -> str:
        w, x, y, z = (f"{c:.{precision}f}" for c in self._components)
        return f"{w} + {x}i + {y}j + {z}k"


class Octonion(CayleyDickson):
    __slots__ = ()

    def __init__(self, components: Sequence[float]) -> None:
        arr = np.array(components, dtype=np.float64).reshape(-1)
        if arr.size != 8:
            raise AlgebraError(f"Octonion requires exactly 8 components, got {arr.size}")
        super().__init__(arr, OCTONION)


class Sedenion(CayleyDickson):
    """Sixteen components; not a division algebra (zero divisors exist)."""

    __slots__ = ()

    def __init__(self, components: Sequence[float]) -> None:
        arr = np.array(components, dtype=np.float64).reshape(-1)
        if arr.size != 16:
            raise AlgebraError(f"Sedenion requires exactly 16 components, got {arr.size}")
        super().__init__(arr, SEDENION)


_CLASS_BY_DIMENSION: Dict[int, Type[CayleyDickson]] = {
    2: Complex,
    4: Quaternion,
    8: Octonion,
    16: Sedenion,
}


def make_hypercomplex(
    components: Sequence[float],
    algebra: Optional[AlgebraType] = None,
) -> CayleyDickson:
    """Build the most specific class for ``algebra`` (inferred from the length)."""
    arr = np.array(components, dtype=np.float64).reshape(-1)
    algebra = algebra or AlgebraType.for_dimension(arr.size)
    if algebra.dimension != arr.size:
        raise AlgebraError(f"{algebra.name} expects {algebra.dimension} components, got {arr.size}")
    cls = _CLASS_BY_DIMENSION.get(algebra.dimension, CayleyDickson)
    if cls is not CayleyDickson and algebra != _NAMED_BY_DIMENSION[algebra.dimension]:
        cls = CayleyDickson
    return cls._from_components(arr, algebra)


# Constructors ------------------------------------------------------------------


def _flatten_components(components) -> np.ndarray:
    if len(components) == 1 and not isinstance(components[0], (float, int, np.number)):
        return np.array(components[0], dtype=np.float64).reshape(-1)
    return np.array(components, dtype=np.float64).reshape(-1)


def real(value: float) -> CayleyDickson:
    return CayleyDickson([value], REAL)


def complex(real: float, imag: float) -> Complex:  # noqa: A001 - mirrors the algebra name
    return Complex(real, imag)


def quaternion(w: float, x: float, y: float, z: float) -> Quaternion:
    return Quaternion(w, x, y, z)


def octonion(*components: float) -> Octonion:
    return Octonion(_flatten_components(components))


def sedenion(*components: float) -> Sedenion:
    return Sedenion(_flatten_components(components))


def hypercomplex_equal(a: CayleyDickson, b: CayleyDickson, epsilon: float = 1e-10) -> bool:
    if a.dimension != b.dimension:
        return False
    return bool(np.all(np.abs(a.components - b.components) <= epsilon))


def commutator(a: CayleyDickson, b: CayleyDickson) -> CayleyDickson:
    """``ab - ba``; zero exactly when ``a`` and ``b`` commute."""
    return a.multiply(b).subtract(b.multiply(a))


def associator(a: CayleyDickson, b: CayleyDickson, c: CayleyDickson) -> CayleyDickson:
    """``(ab)c - a(bc)``; zero for every triple in an associative algebra."""
    return a.multiply(b).multiply(c).subtract(a.multiply(b.multiply(c)))
