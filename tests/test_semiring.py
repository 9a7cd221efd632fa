import dataclasses
import itertools
import math

import numpy as np
import pytest

from einlogic import (
    BOOLEAN,
    COUNTING,
    MIN_PLUS,
    PROBABILISTIC,
    SEMIRINGS,
    TROPICAL,
    VITERBI,
    create_tensor,
    einsum,
    from_matrix,
    from_vector,
    get_semiring,
    semiring_einsum,
)

CHAIN = [
    [0, 1, 0, 0],
    [0, 0, 1, 0],
    [0, 0, 0, 1],
    [0, 0, 0, 0],
]


def _two_hop_reachable(adj):
    n = len(adj)
    return {
        (x, z)
        for x, y, z in itertools.product(range(n), repeat=3)
        if adj[x][y] and adj[y][z]
    }


def test_boolean_semiring_is_two_hop_reachability():
    a = from_matrix("Edge", ["x", "y"], CHAIN)
    b = from_matrix("Edge", ["y", "z"], CHAIN)
    out = semiring_einsum(BOOLEAN, "xy,yz->xz", a, b)
    reachable = {tuple(map(int, c)) for c in np.argwhere(out.to_numpy() > 0)}
    assert reachable == _two_hop_reachable(CHAIN) == {(0, 2), (1, 3)}
    assert set(np.unique(out.data)) <= {0.0, 1.0}


def test_boolean_semiring_on_branching_graph():
    adj = [
        [0, 1, 1, 0, 0],
        [0, 0, 0, 1, 0],
        [0, 0, 0, 1, 1],
        [1, 0, 0, 0, 0],
        [0, 0, 0, 0, 0],
    ]
    a = from_matrix("E", ["x", "y"], adj)
    out = semiring_einsum(BOOLEAN, "xy,yz->xz", a, a)
    reachable = {tuple(map(int, c)) for c in np.argwhere(out.to_numpy() > 0)}
    assert reachable == _two_hop_reachable(adj)


def test_counting_semiring_counts_paths():
    adj = [[0, 1, 1], [0, 0, 1], [0, 0, 0]]
    a = from_matrix("E", ["x", "y"], adj)
    counted = semiring_einsum(COUNTING, "xy,yz->xz", a, a)
    real = einsum("xy,yz->xz", a, a)
    np.testing.assert_array_equal(counted.data, real.data)
    assert counted.to_numpy()[0, 2] == 1.0


def test_viterbi_semiring_keeps_best_path_probability():
    probs = [
        [0.0, 0.5, 0.4],
        [0.0, 0.0, 0.9],
        [0.2, 0.0, 0.0],
    ]
    p = from_matrix("P", ["x", "y"], probs)
    out = semiring_einsum(VITERBI, "xy,yz->xz", p, p).to_numpy()
    arr = np.array(probs)
    expected = np.max(arr[:, :, None] * arr[None, :, :], axis=1)
    np.testing.assert_allclose(out, expected, atol=1e-12)
    assert out[0, 2] == pytest.approx(0.45)
    assert out[1, 1] == 0.0


def test_viterbi_conversions():
    assert VITERBI.from_number(0.0) == -math.inf
    assert VITERBI.from_number(-1.0) == -math.inf
    assert VITERBI.to_number(-math.inf) == 0.0
    assert VITERBI.to_number(VITERBI.from_number(0.25)) == pytest.approx(0.25)


def test_probabilistic_semiring_clamps():
    v = from_vector("v", "i", [0.9, 0.8])
    out = semiring_einsum(PROBABILISTIC, "i,i->", v, v)
    assert out.data.tolist() == [1.0]
    assert PROBABILISTIC.from_number(1.5) == 1.0
    assert PROBABILISTIC.from_number(-0.5) == 0.0


def test_min_plus_semiring_finds_shortest_two_hop_paths():
    inf = math.inf
    weights = [
        [inf, 1.0, 4.0],
        [inf, inf, 2.0],
        [inf, inf, inf],
    ]
    w = from_matrix("W", ["x", "y"], weights)
    out = semiring_einsum(MIN_PLUS, "xy,yz->xz", w, w).to_numpy()
    assert out[0, 2] == 3.0
    assert out[1, 2] == inf
    assert TROPICAL is MIN_PLUS


def test_zero_sized_contraction_yields_semiring_zero():
    a = create_tensor("A", ["x", "y"], [2, 0])
    b = create_tensor("B", ["y", "z"], [0, 2])
    out = semiring_einsum(MIN_PLUS, "xy,yz->xz", a, b)
    assert out.shape == (2, 2)
    assert np.all(np.isinf(out.data))


@pytest.mark.parametrize(
    "name, expected",
    [
        ("boolean", BOOLEAN),
        ("Boolean", BOOLEAN),
        ("COUNTING", COUNTING),
        ("viterbi", VITERBI),
        ("probabilistic", PROBABILISTIC),
        ("min_plus", MIN_PLUS),
        ("min-plus", MIN_PLUS),
        ("Tropical", MIN_PLUS),
    ],
)
def test_get_semiring_is_case_insensitive(name, expected):
    assert get_semiring(name) is expected


def test_unknown_semiring_lists_available():
    with pytest.raises(KeyError, match="Available"):
        get_semiring("fuzzy")


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        SEMIRINGS["custom"] = BOOLEAN
    with pytest.raises(dataclasses.FrozenInstanceError):
        BOOLEAN.zero = True


@pytest.mark.parametrize("semiring", [BOOLEAN, COUNTING, VITERBI, PROBABILISTIC, MIN_PLUS])
def test_identities(semiring):
    for raw in (0.0, 0.3, 1.0):
        value = semiring.from_number(raw)
        assert semiring.add(semiring.zero, value) == value
        assert semiring.mul(semiring.one, value) == value


def test_semiring_einsum_rejects_non_semiring():
    v = from_vector("v", "i", [1.0])
    with pytest.raises(TypeError, match="Expected a Semiring"):
        semiring_einsum("boolean", "i->i", v)
