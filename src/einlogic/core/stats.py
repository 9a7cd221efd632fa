from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Union

import numpy as np

from .parser import Notation, parse_notation
from .shape_checker import ContractionPlan, resolve

BYTES_PER_ELEMENT = 8
L2_BYTES = 6 * 1024 * 1024
SHARED_MEM_BYTES = 48 * 1024
MAX_REGISTERS = 255


def _prod(values: Iterable[int]) -> int:
    result = 1
    for value in values:
        result *= int(value)
    return int(result)


def compute_einsum_stats(plan: ContractionPlan, itemsize: int = BYTES_PER_ELEMENT) -> Dict[str, Any]:
    output_labels = list(plan.notation.output)
    contracted_labels = list(plan.contracted)
    output_size = plan.output_size
    contract_size = _prod(plan.index_sizes[label] for label in contracted_labels)

    if contracted_labels:
        flops = float(2 * output_size * contract_size)
        reductions = int(max(contract_size - 1, 0) * output_size)
    else:
        flops = float(output_size)
        reductions = 0

    bytes_in = sum(_prod(shape) * int(itemsize) for shape in plan.operand_shapes)
    bytes_out = output_size * int(itemsize)

    return {
        "flops": flops,
        "bytes_in": int(bytes_in),
        "bytes_out": int(bytes_out),
        "bytes_total": int(bytes_in + bytes_out),
        "contracted": contracted_labels,
        "output_indices": output_labels,
        "reductions": reductions,
        "joint_size": plan.joint_size,
    }


@dataclass(frozen=True)
class ResourceProfile:
    """Rough hardware footprint of a tensor or a contraction."""

    hbm_bytes: float = 0.0
    l2_bytes: float = 0.0
    shared_mem_bytes: float = 0.0
    registers: int = 0
    flops: float = 0.0
    bandwidth: float = 0.0
    nnz: int = 0
    density: float = 1.0
    rank: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def estimate_tensor_resources(tensor) -> ResourceProfile:
    total = _prod(tensor.shape)
    nbytes = total * BYTES_PER_ELEMENT
    nnz = int(np.count_nonzero(tensor.data))
    return ResourceProfile(
        hbm_bytes=float(nbytes),
        l2_bytes=float(min(nbytes, L2_BYTES)),
        shared_mem_bytes=float(min(nbytes, SHARED_MEM_BYTES)),
        registers=min(len(tensor.shape) * 4, MAX_REGISTERS),
        flops=0.0,
        bandwidth=float(nbytes),
        nnz=nnz,
        density=nnz / max(1, total),
        rank=len(tensor.shape),
    )


def estimate_einsum_resources(notation: Union[str, Notation], *tensors) -> ResourceProfile:
    """
    Estimate the footprint of ``einsum(notation, *tensors)`` without running it.

    Counts one multiply-add per operand for every joint assignment.
    """

    parsed = notation if isinstance(notation, Notation) else parse_notation(notation)
    plan = resolve(parsed, [t.shape for t in tensors])
    input_bytes = sum(_prod(t.shape) for t in tensors) * BYTES_PER_ELEMENT
    output_bytes = plan.output_size * BYTES_PER_ELEMENT
    return ResourceProfile(
        hbm_bytes=float(input_bytes + output_bytes),
        l2_bytes=float(min(input_bytes + output_bytes, L2_BYTES)),
        shared_mem_bytes=float(min(input_bytes, SHARED_MEM_BYTES)),
        registers=len(plan.index_order) * 4 + 16,
        flops=float(plan.joint_size * len(tensors) * 2),
        bandwidth=float(input_bytes + output_bytes),
        nnz=plan.output_size,
        density=1.0,
        rank=len(plan.output_shape),
    )


def _mean_density(profiles) -> float:
    if not profiles:
        return 1.0
    return sum(p.density for p in profiles) / len(profiles)


def combine_resources_sequential(*profiles: ResourceProfile) -> ResourceProfile:
    """Steps run one after another: memory peaks, work adds up."""
    return ResourceProfile(
        hbm_bytes=max((p.hbm_bytes for p in profiles), default=0.0),
        l2_bytes=max((p.l2_bytes for p in profiles), default=0.0),
        shared_mem_bytes=max((p.shared_mem_bytes for p in profiles), default=0.0),
        registers=max((p.registers for p in profiles), default=0),
        flops=sum(p.flops for p in profiles),
        bandwidth=sum(p.bandwidth for p in profiles),
        nnz=sum(p.nnz for p in profiles),
        density=_mean_density(profiles),
        rank=max((p.rank for p in profiles), default=0),
    )


def combine_resources_parallel(*profiles: ResourceProfile) -> ResourceProfile:
    """Steps run side by side: memory adds up, work peaks."""
    return ResourceProfile(
        hbm_bytes=sum(p.hbm_bytes for p in profiles),
        l2_bytes=sum(p.l2_bytes for p in profiles),
        shared_mem_bytes=sum(p.shared_mem_bytes for p in profiles),
        registers=max((p.registers for p in profiles), default=0),
        flops=max((p.flops for p in profiles), default=0.0),
        bandwidth=max((p.bandwidth for p in profiles), default=0.0),
        nnz=sum(p.nnz for p in profiles),
        density=_mean_density(profiles),
        rank=max((p.rank for p in profiles), default=0),
    )
