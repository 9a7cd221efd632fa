from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .contraction import (
    ContractionConfig,
    NotationLike,
    check_semiring,
    prepare_plan,
    resolve_config,
    run_plan,
    run_semiring_plan,
)
from .semiring import Semiring
from .shape_checker import ContractionPlan
from .stats import compute_einsum_stats
from .tensor import ensure_tensor

logger = logging.getLogger(__name__)


def _json_ready(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (np.integer, np.floating)):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, dict):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_ready(v) for v in value]
    return str(value)


def _format_metric(value: Optional[float], unit: str) -> Optional[str]:
    if value is None:
        return None
    magnitude = float(value)
    if magnitude == 0:
        return f"{unit}=0"
    suffixes = [
        (1e12, "T"),
        (1e9, "G"),
        (1e6, "M"),
        (1e3, "K"),
    ]
    for threshold, label in suffixes:
        if magnitude >= threshold:
            return f"{unit}={magnitude / threshold:.2f}{label}"
    return f"{unit}={magnitude:.2f}"


class ContractionEngine:
    """
    Runs contractions under one :class:`ContractionConfig` and keeps a trace.

    Every call appends a structured entry to ``logs`` (notation, backend,
    operand shapes, timing and cost estimates); :meth:`explain` renders the
    trace as text or a JSON-ready payload.
    """

    def __init__(self, config: Optional[ContractionConfig] = None):
        self.config = resolve_config(config)
        self.logs: List[Dict[str, Any]] = []

    # Entry points ------------------------------------------------------------
    def einsum(self, notation: NotationLike, *tensors, name: Optional[str] = None):
        backend = "numpy" if self.config.strategy == "numpy" else "real"
        return self._run(
            backend,
            notation,
            tensors,
            name,
            lambda: [ensure_tensor(t) for t in tensors],
            lambda plan: run_plan(plan, tensors, self.config, name),
        )

    def semiring_einsum(
        self,
        semiring: Semiring,
        notation: NotationLike,
        *tensors,
        name: Optional[str] = None,
    ):
        def _validate() -> None:
            check_semiring(semiring)
            for t in tensors:
                ensure_tensor(t)

        return self._run(
            f"semiring:{getattr(semiring, 'name', '?')}",
            notation,
            tensors,
            name,
            _validate,
            lambda plan: run_semiring_plan(semiring, plan, tensors, name),
        )

    def hypercomplex_einsum(self, notation: NotationLike, *tensors, name: Optional[str] = None):
        from ..hypercomplex.tensor import check_hypercomplex_operands, run_hypercomplex_plan

        algebra = getattr(tensors[0], "algebra_type", None) if tensors else None
        return self._run(
            f"hypercomplex:{algebra.name if algebra is not None else '?'}",
            notation,
            tensors,
            name,
            lambda: check_hypercomplex_operands(tensors),
            lambda plan: run_hypercomplex_plan(plan, tensors, algebra, name),
        )

    def reset(self) -> None:
        self.logs.clear()

    # Tracing -----------------------------------------------------------------
    def _run(
        self,
        backend: str,
        notation: NotationLike,
        tensors: Sequence[Any],
        name: Optional[str],
        validate: Callable[[], Any],
        execute: Callable[[ContractionPlan], Any],
    ):
        iteration = sum(1 for entry in self.logs if entry.get("kind") == "contraction")
        record: Dict[str, Any] = {
            "name": name or "result",
            "iteration": iteration,
            "notation": str(notation),
            "backend": backend,
            "shapes": [list(getattr(t, "shape", ())) for t in tensors],
        }
        capture_timing = self.config.explain_timings
        start = time.perf_counter() if capture_timing else None
        try:
            validate()
            plan = prepare_plan(notation, [t.shape for t in tensors], self.config)
            result = execute(plan)
        except Exception as exc:
            record["status"] = "failed"
            record["error"] = f"{type(exc).__name__}: {exc}"
            self.logs.append({"kind": "contraction", "contraction": record})
            raise
        if start is not None:
            record["duration_ms"] = (time.perf_counter() - start) * 1000.0
        stats = compute_einsum_stats(plan)
        record.update(
            {
                "status": "ok",
                "einsum": str(plan.notation),
                "flops": stats["flops"],
                "bytes_total": stats["bytes_total"],
                "joint_size": stats["joint_size"],
                "contracted": stats["contracted"],
            }
        )
        self.logs.append({"kind": "contraction", "contraction": record})
        logger.debug("%s %s via %s", record["name"], record["einsum"], backend)
        return result

    def explain(self, *, json: bool = False):
        metrics: List[Dict[str, Any]] = []
        total_time_ms = 0.0
        total_flops = 0.0
        total_bytes = 0.0

        lines: List[str] = []
        for entry in self.logs:
            if entry.get("kind") != "contraction":
                continue
            rec = entry["contraction"]
            details: List[str] = []
            details.append(f"einsum={rec.get('einsum') or rec['notation']}")
            details.append(f"backend={rec['backend']}")
            contracted = rec.get("contracted") or []
            if contracted:
                details.append(f"sum={','.join(contracted)}")
            flops = rec.get("flops")
            bytes_total = rec.get("bytes_total")
            flops_str = _format_metric(flops, "flops")
            bytes_str = _format_metric(bytes_total, "bytes")
            if flops_str:
                details.append(flops_str)
            if bytes_str:
                details.append(bytes_str)
            if rec.get("error"):
                details.append(f"error={rec['error']}")
            duration = rec.get("duration_ms")
            if duration is not None:
                total_time_ms += float(duration)
            if flops is not None:
                total_flops += float(flops)
            if bytes_total is not None:
                total_bytes += float(bytes_total)
            metrics.append(
                {
                    "name": rec.get("name"),
                    "iteration": rec["iteration"],
                    "status": rec["status"],
                    "duration_ms": duration,
                    "flops": flops,
                    "bytes_total": bytes_total,
                }
            )
            timing = f" {duration:.3f}ms" if duration is not None else ""
            note = f" {' '.join(details)}" if details else ""
            lines.append(f"[iter {rec['iteration']:02d}] {rec['name']} {rec['status']}{timing}{note}")

        perf_summary: Optional[Dict[str, Any]] = None
        if metrics:
            max_entry = max(
                metrics,
                key=lambda item: item["duration_ms"] if item["duration_ms"] is not None else -1.0,
            )
            perf_summary = {
                "contractions": len(metrics),
                "total_ms": total_time_ms,
                "total_flops": total_flops or None,
                "total_bytes": total_bytes or None,
                "max_contraction": {
                    "name": max_entry.get("name"),
                    "duration_ms": max_entry.get("duration_ms"),
                    "iteration": max_entry.get("iteration"),
                },
            }
            summary_parts: List[str] = [
                f"total={total_time_ms:.3f}ms",
                f"contractions={len(metrics)}",
            ]
            flops_summary = _format_metric(total_flops if total_flops else None, "flops")
            bytes_summary = _format_metric(total_bytes if total_bytes else None, "bytes")
            if flops_summary:
                summary_parts.append(flops_summary)
            if bytes_summary:
                summary_parts.append(bytes_summary)
            max_duration = max_entry.get("duration_ms")
            if max_duration is not None:
                summary_parts.append(f"max={max_entry.get('name')}({float(max_duration):.3f}ms)")
            lines.append(f"[perf] {' '.join(filter(None, summary_parts))}")

        if json:
            payload: Dict[str, Any] = {"logs": [_json_ready(entry) for entry in self.logs]}
            if perf_summary is not None:
                payload["summary"] = perf_summary
            return payload

        return "\n".join(lines)
