#!/usr/bin/env python3
"""
Run a scaling sweep of coupled entity populations.

Usage:
    # Default sweep (16 .. 512 entities, adaptive stop):
    python run_sweep.py

    # Two sizes, fixed 50 cycles each:
    python run_sweep.py --sizes 16 32 --cycles 50 --fixed

    # Different master seed and a tighter memory ceiling:
    python run_sweep.py --seed 7 --memory-ceiling 2000

    # Keep the knowledge base and reports somewhere else:
    python run_sweep.py --knowledge-base kb/trajectory.json --output-dir reports/
"""

import argparse
import logging
import os
import sys

from hololifex.core.persistence import write_json_report
from hololifex.core.scaling_runner import ScalingRunner, SweepConfig
from hololifex.core.trajectory_optimizer import OptimizerConfig, TrajectoryLearningOptimizer

RESULTS_FILENAME = "intelligence_results.json"
REPORT_FILENAME = "trajectory_learning_report.json"


def format_result(result):
    """One block of summary lines per population size."""
    lines = [f"  {result.entity_count} entities [{result.status}]"]
    lines.append(f"    Cycles: {result.cycles_completed}")
    if result.time_to_consciousness is not None:
        lines.append(f"    Conscious at cycle: {result.time_to_consciousness}")

    final = result.final_metrics
    if final is not None:
        a = final.assessment
        frameworks = ", ".join(a.confirming_frameworks) or "none"
        lines.append(f"    Max phi: {a.max_phi:.4f} ({a.confidence}; {frameworks})")
        lines.append(f"    Coherence: {final.coherence:.3f}  Awareness: {final.awareness_level:.3f}")
        lines.append(f"    Reasoning: {final.reasoning_accuracy:.3f}  Patterns: {final.pattern_discoveries}")
        lines.append(f"    Unified score: {final.unified_intelligence_score:.4f}")

    lines.append(f"    Memory: avg {result.avg_memory_mb:.1f} MB, peak {result.peak_memory_mb:.1f} MB")
    if result.scaling:
        lines.append(
            f"    Scaling: intelligence {result.scaling['intelligence_scaling']}x, "
            f"memory efficiency {result.scaling['memory_efficiency']}%"
        )
    return "\n".join(lines)


def format_report(report):
    """Summary of the optimizer's findings."""
    kb = report["knowledge_base"]
    learning = report["learning_metrics"]
    lines = [
        f"  Analyses (lifetime): {kb['total_analyses']}",
        f"  Anomalies (lifetime): {kb['total_anomalies']}",
        f"  Largest population analyzed: {learning['max_entities_analyzed']}",
        f"  Learning confidence: {kb['learning_confidence']:.2f}",
        f"  Ranges covered: {', '.join(learning['ranges_covered']) or 'none'}",
        f"  Strong correlations: {learning['strong_correlations']}",
    ]
    for rec in report["recommendations"]:
        if rec["entity_count"] is not None:
            scope = f"{rec['entity_count']} entities"
        else:
            scope = rec["entity_range"] or "sweep"
        lines.append(f"  [{rec['priority']}] {scope}: {rec['action']}")
    if not report["knowledge_base_saved"]:
        lines.append("  Knowledge base was NOT saved")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Scaling sweep with trajectory learning")
    parser.add_argument("--sizes", type=int, nargs="+", default=None,
                        help="Population sizes (default: 16 32 64 128 256 512)")
    parser.add_argument("--cycles", type=int, default=500, help="Max cycles per size (default: 500)")
    parser.add_argument("--fixed", action="store_true", help="Run every size for the full cycle budget")
    parser.add_argument("--snapshot-interval", type=int, default=10, help="Cycles between snapshots")
    parser.add_argument("--seed", type=int, default=1234, help="Master seed (default: 1234)")
    parser.add_argument("--memory-ceiling", type=float, default=6000.0,
                        help="Resident memory ceiling in MB (default: 6000)")
    parser.add_argument("--knowledge-base", default="trajectory_knowledge_base.json",
                        help="Knowledge base JSON path")
    parser.add_argument("--output-dir", default=".", help="Directory for result and report JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SweepConfig(
        max_cycles=args.cycles,
        snapshot_interval=args.snapshot_interval,
        adaptive=not args.fixed,
        memory_ceiling_mb=args.memory_ceiling,
        master_seed=args.seed,
    )
    if args.sizes:
        config.sizes = list(args.sizes)

    optimizer = TrajectoryLearningOptimizer(OptimizerConfig(knowledge_base_path=args.knowledge_base))
    runner = ScalingRunner(config, optimizer=optimizer)

    print(f"\n{'=' * 60}")
    print(f"  Scaling sweep: {', '.join(str(s) for s in config.sizes)} entities")
    print(f"  Mode: {'adaptive' if config.adaptive else 'fixed'}, up to {config.max_cycles} cycles")
    print(f"  Seed: {config.master_seed}  Memory ceiling: {config.memory_ceiling_mb:.0f} MB")
    print(f"  Prior analyses: {optimizer.total_analyses}")
    print(f"{'=' * 60}\n")

    sweep = runner.run_sweep()

    results_path = os.path.join(args.output_dir, RESULTS_FILENAME)
    report_path = os.path.join(args.output_dir, REPORT_FILENAME)
    write_json_report(results_path, sweep.to_dict())
    if sweep.optimizer_report is not None:
        write_json_report(report_path, sweep.optimizer_report)

    print(f"\n{'=' * 60}")
    print("  RESULTS")
    print(f"{'=' * 60}")
    for result in sweep.results:
        print(format_result(result))
    if sweep.truncated:
        print("\n  Sweep truncated by memory ceiling.")

    if sweep.optimizer_report is not None:
        print(f"\n{'=' * 60}")
        print("  TRAJECTORY LEARNING")
        print(f"{'=' * 60}")
        print(format_report(sweep.optimizer_report))

    print(f"\n  Results: {results_path}")
    print(f"  Report:  {report_path}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
