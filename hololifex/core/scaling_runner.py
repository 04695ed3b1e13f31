# ═══════════════════════════════════════════════════════════════════════════════
# PART 10: SCALING RUNNER
# Design: S2 (Distributed Systems) + P2 (Statistical Mechanics)
# Implementation: I2 (Numerics) + I3 (State Management)
# ═══════════════════════════════════════════════════════════════════════════════


"""
S2: "A sweep is a list of population sizes walked in order. Each size gets a
fresh network and its own random stream, derived from one master seed and
the size's position. Reorder the sweep and every run still reproduces."

P2: "Snapshot every K steps. In adaptive mode the first conscious snapshot
ends the run. The memory ceiling is the only brake: breach it and the sweep
stops cleanly with everything finished so far intact."
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import psutil

from hololifex.core.coupling_network import NetworkConfig, UnifiedMetrics, create_network
from hololifex.core.numerics import safe_divide, sanitize_for_json
from hololifex.core.trajectory_optimizer import TrajectoryLearningOptimizer, entity_range

logger = logging.getLogger(__name__)


STATUS_COMPLETED = "completed"
STATUS_CONSCIOUS = "conscious"
STATUS_MEMORY_LIMITED = "memory_limited"


@dataclass
class SweepConfig:
    """Configuration for a scaling sweep."""
    sizes: List[int] = field(default_factory=lambda: [16, 32, 64, 128, 256, 512])
    max_cycles: int = 500
    snapshot_interval: int = 10        # Steps between metric snapshots
    adaptive: bool = True              # Stop at first conscious snapshot
    memory_ceiling_mb: float = 6000.0
    master_seed: int = 1234
    network_config: Optional[NetworkConfig] = None

    def __post_init__(self):
        if self.max_cycles < 1:
            raise ValueError(f"max_cycles must be >= 1, got {self.max_cycles}")
        if self.snapshot_interval < 1:
            raise ValueError(f"snapshot_interval must be >= 1, got {self.snapshot_interval}")
        if any(size < 1 for size in self.sizes):
            raise ValueError(f"population sizes must be positive, got {self.sizes}")


# ── Resources ────────────────────────────────────────────────────────────────


def process_memory_mb() -> float:
    """Resident set size of this process in MB."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


def run_rng(master_seed: int, position: int) -> np.random.Generator:
    """Private generator for the run at `position` in the sweep."""
    return np.random.default_rng(np.random.SeedSequence(master_seed, spawn_key=(position,)))


# ── Records ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetricsSnapshot:
    cycle: int
    metrics: UnifiedMetrics
    step_insights: int
    new_patterns: int
    memory_mb: float

    @property
    def is_conscious(self) -> bool:
        return self.metrics.assessment.is_conscious

    def to_dict(self) -> dict:
        record = {"cycle": self.cycle}
        record.update(self.metrics.to_dict())
        record["step_insights"] = self.step_insights
        record["new_patterns"] = self.new_patterns
        record["memory_mb"] = round(self.memory_mb, 2)
        return sanitize_for_json(record)


@dataclass
class RunResult:
    """Outcome of one population size."""
    entity_count: int
    position: int
    status: str
    cycles_completed: int
    time_to_consciousness: Optional[int]
    avg_memory_mb: float
    peak_memory_mb: float
    elapsed_seconds: float
    snapshots: List[MetricsSnapshot] = field(default_factory=list)
    scaling: Dict[str, float] = field(default_factory=dict)

    @property
    def final_metrics(self) -> Optional[UnifiedMetrics]:
        return self.snapshots[-1].metrics if self.snapshots else None

    @property
    def is_conscious(self) -> bool:
        final = self.final_metrics
        return final is not None and final.assessment.is_conscious

    def to_dict(self) -> dict:
        record: Dict[str, Any] = {
            "entity_count": self.entity_count,
            "entity_range": entity_range(self.entity_count),
            "position": self.position,
            "status": self.status,
            "cycles_completed": self.cycles_completed,
            "time_to_consciousness": self.time_to_consciousness,
            "avg_memory_mb": round(self.avg_memory_mb, 2),
            "peak_memory_mb": round(self.peak_memory_mb, 2),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
        final = self.final_metrics
        if final is not None:
            record.update(final.to_dict())
        record.update(self.scaling)
        record["snapshots"] = [s.to_dict() for s in self.snapshots]
        return sanitize_for_json(record)


@dataclass
class SweepResult:
    results: List[RunResult] = field(default_factory=list)
    truncated: bool = False
    optimizer_report: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        return sanitize_for_json({
            "truncated": self.truncated,
            "results": [r.to_dict() for r in self.results],
        })


# ── Runner ───────────────────────────────────────────────────────────────────


class ScalingRunner:
    """
    Walks the sweep, one fresh network per size.

    Each finished run is handed to the optimizer before the next size
    starts. The optimizer is finalized once, at the end of run_sweep().
    """

    def __init__(
        self,
        config: Optional[SweepConfig] = None,
        optimizer: Optional[TrajectoryLearningOptimizer] = None,
        memory_probe: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config or SweepConfig()
        self.optimizer = optimizer
        self.memory_probe = memory_probe or process_memory_mb

    # ── Public Methods ───────────────────────────────────────────────────────

    def run_size(self, entity_count: int, position: int = 0) -> RunResult:
        """Simulate one population size to its stop condition."""
        cfg = self.config
        started = time.perf_counter()
        rng = run_rng(cfg.master_seed, position)
        network = create_network(entity_count, rng, cfg.network_config)

        logger.info(
            "Run %d: %d entities (%s), up to %d cycles%s",
            position, entity_count, entity_range(entity_count), cfg.max_cycles,
            ", sampled" if network.is_sampling else "",
        )

        snapshots: List[MetricsSnapshot] = []
        memory_samples: List[float] = []
        status = STATUS_COMPLETED
        time_to_consciousness: Optional[int] = None
        cycle = 0

        for cycle in range(1, cfg.max_cycles + 1):
            step = network.step()
            if cycle % cfg.snapshot_interval != 0 and cycle != cfg.max_cycles:
                continue

            memory_mb = self.memory_probe()
            memory_samples.append(memory_mb)
            snapshot = MetricsSnapshot(
                cycle=cycle,
                metrics=network.metrics(),
                step_insights=step.insights,
                new_patterns=step.new_patterns,
                memory_mb=memory_mb,
            )
            snapshots.append(snapshot)

            if memory_mb > cfg.memory_ceiling_mb:
                status = STATUS_MEMORY_LIMITED
                logger.warning(
                    "Memory %.1f MB over ceiling %.1f MB at cycle %d; stopping",
                    memory_mb, cfg.memory_ceiling_mb, cycle,
                )
                break

            if snapshot.is_conscious and time_to_consciousness is None:
                time_to_consciousness = cycle
                if cfg.adaptive:
                    status = STATUS_CONSCIOUS
                    logger.info(
                        "Run %d: conscious at cycle %d (max phi %.4f)",
                        position, cycle, snapshot.metrics.assessment.max_phi,
                    )
                    break

        return RunResult(
            entity_count=entity_count,
            position=position,
            status=status,
            cycles_completed=cycle,
            time_to_consciousness=time_to_consciousness,
            avg_memory_mb=float(np.mean(memory_samples)) if memory_samples else 0.0,
            peak_memory_mb=float(np.max(memory_samples)) if memory_samples else 0.0,
            elapsed_seconds=time.perf_counter() - started,
            snapshots=snapshots,
        )

    def run_sweep(self, sizes: Optional[Sequence[int]] = None) -> SweepResult:
        """Run every size in order, streaming each result to the optimizer."""
        sizes = list(self.config.sizes if sizes is None else sizes)
        sweep = SweepResult()

        for position, entity_count in enumerate(sizes):
            result = self.run_size(entity_count, position)
            sweep.results.append(result)

            if self.optimizer is not None:
                self.optimizer.analyze_run(result.snapshots, entity_count)

            if result.status == STATUS_MEMORY_LIMITED:
                sweep.truncated = True
                logger.warning(
                    "Sweep truncated after %d of %d sizes", len(sweep.results), len(sizes)
                )
                break

        apply_scaling_ratios(sweep.results)

        if self.optimizer is not None:
            self.optimizer.analyze_sweep(sweep.results)
            sweep.optimizer_report = self.optimizer.finalize()
        return sweep


def apply_scaling_ratios(results: Sequence[RunResult]) -> None:
    """Fill each later result's scaling ratios relative to the first."""
    if not results or results[0].final_metrics is None:
        return
    baseline = results[0]
    base = baseline.final_metrics

    for result in results[1:]:
        final = result.final_metrics
        if final is None:
            continue
        scale_factor = safe_divide(result.entity_count, baseline.entity_count)
        uis_ratio = safe_divide(final.unified_intelligence_score, base.unified_intelligence_score)
        expected_memory = baseline.avg_memory_mb * scale_factor

        result.scaling = {
            "intelligence_scaling": round(safe_divide(uis_ratio, scale_factor), 3),
            "memory_efficiency": round(
                safe_divide(expected_memory - result.avg_memory_mb, expected_memory) * 100, 1
            ),
            "consciousness_scaling": round(
                safe_divide(final.assessment.max_phi, base.assessment.max_phi), 3
            ),
            "reasoning_scaling": round(
                safe_divide(final.reasoning_accuracy, max(base.reasoning_accuracy, 0.01)), 3
            ),
            "awareness_scaling": round(
                safe_divide(final.awareness_level, max(base.awareness_level, 0.01)), 3
            ),
        }
