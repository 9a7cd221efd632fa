import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from einlogic import AlgebraError
from einlogic.hypercomplex import (
    COMPLEX,
    OCTONION,
    QUATERNION,
    SEDENION,
    TRIGINTADUONION,
    AlgebraType,
    CayleyDickson,
    Complex,
    Octonion,
    Quaternion,
    Sedenion,
    algebra_dimension,
    associator,
    commutator,
    complex as make_complex,
    hypercomplex_equal,
    make_hypercomplex,
    octonion,
    quaternion,
    real,
    sedenion,
)


def _basis(dimension, index):
    components = np.zeros(dimension)
    components[index] = 1.0
    return make_hypercomplex(components)


def test_complex_multiplication():
    product = make_complex(1, 2) * make_complex(3, 4)
    assert isinstance(product, Complex)
    assert (product.real, product.imag) == (-5.0, 10.0)


def test_real_algebra_is_plain_multiplication():
    assert real(3.0).multiply(real(-2.0)).components.tolist() == [-6.0]


def test_quaternion_units_anticommute():
    i, j, k = quaternion(0, 1, 0, 0), quaternion(0, 0, 1, 0), quaternion(0, 0, 0, 1)
    assert hypercomplex_equal(i * j, k)
    assert hypercomplex_equal(j * i, -k)
    assert hypercomplex_equal(i * i, quaternion(-1, 0, 0, 0))
    assert hypercomplex_equal(commutator(i, j), k.scale(2))


def test_octonions_are_not_associative():
    e1, e2, e4 = _basis(8, 1), _basis(8, 2), _basis(8, 4)
    left = (e1 * e2) * e4
    right = e1 * (e2 * e4)
    assert (left - right).norm() == pytest.approx(2.0)
    assert associator(e1, e2, e4).norm() > 0


def test_quaternions_are_associative():
    rng = np.random.default_rng(11)
    a, b, c = (make_hypercomplex(rng.normal(size=4)) for _ in range(3))
    assert associator(a, b, c).norm() == pytest.approx(0.0, abs=1e-12)


def test_sedenion_zero_divisor():
    x = _basis(16, 1) + _basis(16, 11)
    y = _basis(16, 4) + _basis(16, 14)
    assert x.norm() == pytest.approx(math.sqrt(2))
    assert y.norm() == pytest.approx(math.sqrt(2))
    assert (x * y).norm() == pytest.approx(0.0, abs=1e-12)


@settings(max_examples=80, deadline=None)
@given(
    st.integers(min_value=1, max_value=6).flatmap(
        lambda power: st.lists(
            st.floats(min_value=-10, max_value=10, allow_nan=False),
            min_size=2**power,
            max_size=2**power,
        )
    )
)
def test_doubling_conjugate_and_norm(components):
    x = CayleyDickson(components)
    conj = x.conjugate()
    assert conj.components[0] == x.components[0]
    np.testing.assert_array_equal(conj.components[1:], -x.components[1:])
    a, b = x.halves()
    assert x.norm_squared() == pytest.approx(a.norm_squared() + b.norm_squared())
    assert CayleyDickson.from_halves(a, b) == make_hypercomplex(components)


@settings(max_examples=60, deadline=None)
@given(
    st.sampled_from([2, 4, 8]),
    st.integers(min_value=0, max_value=2**16),
)
def test_division_algebras_have_multiplicative_norm(dimension, seed):
    rng = np.random.default_rng(seed)
    a = make_hypercomplex(rng.normal(size=dimension))
    b = make_hypercomplex(rng.normal(size=dimension))
    assert (a * b).norm() == pytest.approx(a.norm() * b.norm(), rel=1e-9)


def test_inverse_and_division():
    q = quaternion(1, 2, -1, 0.5)
    assert hypercomplex_equal(q * q.inverse(), quaternion(1, 0, 0, 0))
    assert hypercomplex_equal(q / q, quaternion(1, 0, 0, 0))
    assert hypercomplex_equal((q * 4) / 2, q.scale(2))


def test_division_by_zero_is_not_guarded():
    q = quaternion(1, 1, 0, 0)
    zero = quaternion(0, 0, 0, 0)
    quotient = q / zero
    assert not np.all(np.isfinite(quotient.components))
    assert not np.all(np.isfinite(zero.inverse().components))


def test_values_are_immutable():
    q = quaternion(1, 2, 3, 4)
    assert q.components.flags.writeable is False
    with pytest.raises(ValueError):
        q.components[0] = 5.0
    assert q.w == 1.0


def test_wrong_component_counts():
    with pytest.raises(AlgebraError, match="exactly 8"):
        Octonion([1, 2, 3])
    with pytest.raises(AlgebraError, match="exactly 16"):
        sedenion(*range(8))
    with pytest.raises(AlgebraError, match="power of two"):
        CayleyDickson([1, 2, 3])
    with pytest.raises(AlgebraError):
        CayleyDickson([1, 2], QUATERNION)


def test_mixed_algebras_refuse_to_combine():
    with pytest.raises(AlgebraError, match="Complex and Quaternion"):
        make_complex(1, 0).multiply(quaternion(1, 0, 0, 0))
    with pytest.raises(AlgebraError):
        make_complex(1, 0).add(real(1.0))


def test_make_hypercomplex_picks_specialised_class():
    assert isinstance(make_hypercomplex([1, 0]), Complex)
    assert isinstance(make_hypercomplex([1, 0, 0, 0]), Quaternion)
    assert isinstance(make_hypercomplex(np.zeros(8)), Octonion)
    assert isinstance(make_hypercomplex(np.zeros(16)), Sedenion)
    big = make_hypercomplex(np.zeros(32))
    assert type(big) is CayleyDickson
    assert big.algebra_type == TRIGINTADUONION
    huge = make_hypercomplex(np.zeros(128))
    assert huge.algebra_type.name == "CayleyDickson128"


def test_arithmetic_keeps_class():
    o = octonion(*range(8))
    assert isinstance(o * o, Octonion)
    assert isinstance(o.conjugate(), Octonion)
    assert (o * o).algebra_type == OCTONION


def test_octonion_accepts_a_sequence():
    assert octonion(list(range(8))) == octonion(*range(8))


def test_halves_of_octonion_are_quaternions():
    a, b = octonion(*range(8)).halves()
    assert isinstance(a, Quaternion) and isinstance(b, Quaternion)
    assert b.components.tolist() == [4.0, 5.0, 6.0, 7.0]


def test_algebra_types():
    assert AlgebraType.for_dimension(2) is COMPLEX
    assert AlgebraType.for_dimension(16) is SEDENION
    assert algebra_dimension("Sedenion") == 16
    assert algebra_dimension(QUATERNION) == 4
    assert algebra_dimension("CayleyDickson256") == 256
    with pytest.raises(AlgebraError):
        AlgebraType.for_dimension(12)
    with pytest.raises(AlgebraError):
        algebra_dimension("Bicomplex")


def test_rotation_from_axis_angle():
    q = Quaternion.from_axis_angle([0, 0, 2], math.pi / 2)
    assert q.norm() == pytest.approx(1.0)
    rotated = q.to_rotation_matrix() @ np.array([1.0, 0.0, 0.0])
    np.testing.assert_allclose(rotated, [0.0, 1.0, 0.0], atol=1e-12)


def test_operators():
    q = quaternion(1, 2, 3, 4)
    assert 2 * q == q * 2 == q.scale(2)
    assert -q == q.negate()
    assert abs(q) == pytest.approx(math.sqrt(30))
    assert hash(q) == hash(quaternion(1, 2, 3, 4))
    assert "Quaternion" in repr(q)
