import numpy as np
import pytest

from einlogic import ContractionConfig, ParseError, ResourceLimitError, create_tensor, einsum
from einlogic.core.contraction import resolve_config


def test_normalized_lowercases_choices():
    cfg = ContractionConfig(strategy="NumPy", repeated_indices="Reject", max_joint_size="10").normalized()
    assert cfg.strategy == "numpy"
    assert cfg.repeated_indices == "reject"
    assert cfg.max_joint_size == 10


def test_defaults():
    cfg = resolve_config(None)
    assert cfg == ContractionConfig()
    assert cfg.max_iters == 32
    assert cfg.tol == pytest.approx(1e-6)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"strategy": "gpu"},
        {"repeated_indices": "sum"},
        {"max_joint_size": 0},
        {"max_iters": 0},
        {"tol": -1.0},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        ContractionConfig(**kwargs).normalized()


@pytest.mark.parametrize(
    "notation, shapes",
    [
        ("ij,jk->ik", [(2, 3), (3, 4)]),
        ("ii->i", [(3, 3)]),
        ("ij->", [(2, 5)]),
        ("i,j->ij", [(3,), (2,)]),
        ("bij,bjk->bik", [(2, 2, 3), (2, 3, 2)]),
    ],
)
def test_numpy_strategy_matches_loop(notation, shapes):
    rng = np.random.default_rng(7)
    letters = notation.split("->")[0].split(",")
    tensors = [
        create_tensor(f"T{n}", list(seg), shape, "random", rng=rng)
        for n, (seg, shape) in enumerate(zip(letters, shapes))
    ]
    loop = einsum(notation, *tensors)
    fast = einsum(notation, *tensors, config=ContractionConfig(strategy="numpy"))
    assert loop.shape == fast.shape
    np.testing.assert_allclose(loop.data, fast.data, rtol=1e-12, atol=1e-12)


def test_reject_policy_refuses_diagonals():
    t = create_tensor("T", ["i", "j"], [3, 3], "ones")
    assert einsum("ii->", t).data.tolist() == [3.0]
    with pytest.raises(ParseError, match="repeats an index symbol"):
        einsum("ii->", t, config=ContractionConfig(repeated_indices="reject"))


def test_joint_size_limit():
    a = create_tensor("A", ["i", "j"], [4, 5])
    b = create_tensor("B", ["j", "k"], [5, 6])
    with pytest.raises(ResourceLimitError, match="max_joint_size=100"):
        einsum("ij,jk->ik", a, b, config=ContractionConfig(max_joint_size=100))
    einsum("ij,jk->ik", a, b, config=ContractionConfig(max_joint_size=120))
