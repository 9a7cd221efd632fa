import pytest

from einlogic import (
    ResourceProfile,
    combine_resources_parallel,
    combine_resources_sequential,
    compute_einsum_stats,
    create_tensor,
    estimate_einsum_resources,
    estimate_tensor_resources,
    from_matrix,
    parse_notation,
    resolve,
)


def test_einsum_stats_for_matmul():
    plan = resolve(parse_notation("ij,jk->ik"), [(2, 3), (3, 4)])
    stats = compute_einsum_stats(plan)
    assert stats["flops"] == 48.0
    assert stats["reductions"] == 16
    assert stats["bytes_in"] == 144
    assert stats["bytes_out"] == 64
    assert stats["bytes_total"] == 208
    assert stats["contracted"] == ["j"]
    assert stats["output_indices"] == ["i", "k"]
    assert stats["joint_size"] == 24


def test_einsum_stats_without_reduction():
    plan = resolve(parse_notation("i,j->ij"), [(2,), (5,)])
    stats = compute_einsum_stats(plan, itemsize=4)
    assert stats["flops"] == 10.0
    assert stats["reductions"] == 0
    assert stats["bytes_out"] == 40


def test_tensor_resources():
    t = from_matrix("T", ["i", "j"], [[1.0, 0.0], [0.0, 2.0]])
    profile = estimate_tensor_resources(t)
    assert profile.hbm_bytes == 32.0
    assert profile.nnz == 2
    assert profile.density == pytest.approx(0.5)
    assert profile.registers == 8
    assert profile.flops == 0.0
    assert profile.rank == 2


def test_large_tensor_caps_cache_estimates():
    t = create_tensor("Big", ["i", "j"], [1024, 1024], "ones")
    profile = estimate_tensor_resources(t)
    assert profile.hbm_bytes == 8 * 1024 * 1024
    assert profile.l2_bytes == 6 * 1024 * 1024
    assert profile.shared_mem_bytes == 48 * 1024


def test_einsum_resources():
    a = create_tensor("A", ["i", "j"], [2, 3])
    b = create_tensor("B", ["j", "k"], [3, 4])
    profile = estimate_einsum_resources("ij,jk->ik", a, b)
    assert profile.flops == 24 * 2 * 2
    assert profile.registers == 3 * 4 + 16
    assert profile.hbm_bytes == 208.0
    assert profile.shared_mem_bytes == 144.0
    assert profile.nnz == 8
    assert profile.rank == 2


def test_combining_profiles():
    first = ResourceProfile(hbm_bytes=100.0, flops=10.0, registers=4, density=1.0, rank=1)
    second = ResourceProfile(hbm_bytes=50.0, flops=30.0, registers=8, density=0.5, rank=2)
    seq = combine_resources_sequential(first, second)
    assert seq.hbm_bytes == 100.0
    assert seq.flops == 40.0
    par = combine_resources_parallel(first, second)
    assert par.hbm_bytes == 150.0
    assert par.flops == 30.0
    assert par.registers == 8 == seq.registers
    assert seq.density == pytest.approx(0.75)
    assert combine_resources_sequential() == ResourceProfile()
    assert set(seq.as_dict()) >= {"hbm_bytes", "flops", "density"}
