# ═══════════════════════════════════════════════════════════════════════════════
# PART 9: TRAJECTORY LEARNING OPTIMIZER
# Design: A5 (Continual Learning) + P2 (Statistical Mechanics)
# Implementation: I3 (State Management)
# ═══════════════════════════════════════════════════════════════════════════════


"""
A5: "One run is an anecdote. The knowledge base turns runs into a record:
how often each anomaly shows up, at which population sizes, and how sure we
are about any of it."

P2: "Three detectors. Collapse: Phi peaks then drops. Instability: the
meta-cognitive score will not settle. Persistent decline: falling slopes
outnumber rising ones. Every threshold lives in the knowledge base."

A5: "Once the sweep is done, look across sizes: which metrics move together,
which results contradict each other, and which ranges hold Phi."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from hololifex.core.numerics import (
    finite_or_zero,
    safe_correlation,
    safe_derivative,
    safe_divide,
    sanitize_for_json,
)
from hololifex.core.persistence import (
    ANOMALY_COLLAPSE,
    ANOMALY_INSTABILITY,
    ANOMALY_PERSISTENT_DECLINE,
    KnowledgeBase,
    KnowledgeBaseStore,
)

logger = logging.getLogger(__name__)


class OptimizerState(Enum):
    IDLE = "idle"
    LOADED = "loaded"
    ANALYZING = "analyzing"
    UPDATED = "updated"
    SAVED = "saved"


ENTITY_RANGES = (
    ("micro", 1, 64),
    ("small", 65, 512),
    ("medium", 513, 4096),
    ("large", 4097, 32768),
    ("xlarge", 32769, 262144),
    ("mega", 262145, 2097152),
    ("giga", 2097153, 8388608),
)


def entity_range(entity_count: int) -> str:
    """Named scaling range for a population size."""
    for name, low, high in ENTITY_RANGES:
        if low <= entity_count <= high:
            return name
    return "unknown"


# Cross-result anomaly types. Not counted in the knowledge base.
LOW_PHI_CONSCIOUSNESS = "low_phi_consciousness"
HIGH_PERFORMANCE_NO_CONSCIOUSNESS = "high_performance_no_consciousness"
SUSPICIOUS_MEMORY_EFFICIENCY = "suspicious_memory_efficiency"
POOR_INTELLIGENCE_SCALING = "poor_intelligence_scaling"

CORRELATED_METRICS = (
    "consciousness",
    "intelligence",
    "reasoning",
    "awareness",
    "insight_quality",
    "cross_domain",
    "memory_efficiency",
)


@dataclass
class OptimizerConfig:
    """Knobs that are not learned thresholds."""
    knowledge_base_path: str = "trajectory_knowledge_base.json"
    max_history_per_size: int = 20
    frequency_threshold: float = 0.5      # lifetime count / analyses
    min_analyses_for_pattern: int = 3

    # Sweep analysis
    min_results_for_correlation: int = 3
    strong_correlation: float = 0.7       # |r| above this is reported
    low_phi: float = 0.1                  # conscious with Phi below this is suspect
    saturated_awareness: float = 0.99
    large_population: int = 1000
    min_plausible_memory_mb: float = 10.0
    poor_scaling: float = 0.1             # intelligence_scaling below this
    optimal_range_phi: float = 0.15
    min_patterns_per_range: int = 2


@dataclass(frozen=True)
class Anomaly:
    anomaly_type: str
    entity_count: int
    evidence: Dict[str, float]
    confidence: str = "medium"
    description: str = ""

    def to_dict(self) -> dict:
        record = {
            "type": self.anomaly_type,
            "entity_count": self.entity_count,
            "entity_range": entity_range(self.entity_count),
            "confidence": self.confidence,
            "evidence": dict(self.evidence),
        }
        if self.description:
            record["description"] = self.description
        return record


@dataclass(frozen=True)
class Recommendation:
    """
    One suggested action.

    entity_count is None for recommendations about the whole sweep;
    range_name overrides the range derived from entity_count.
    """
    recommendation_type: str
    priority: str
    action: str
    evidence: Dict[str, float]
    entity_count: Optional[int]
    source: str = "trajectory_analysis"
    range_name: Optional[str] = None

    @property
    def entity_range(self) -> Optional[str]:
        if self.range_name is not None:
            return self.range_name
        if self.entity_count is None:
            return None
        return entity_range(self.entity_count)

    def to_dict(self) -> dict:
        return {
            "type": self.recommendation_type,
            "priority": self.priority,
            "source": self.source,
            "action": self.action,
            "evidence": dict(self.evidence),
            "entity_count": self.entity_count,
            "entity_range": self.entity_range,
        }


@dataclass
class RunAnalysis:
    """Everything learned from one run's snapshots."""
    entity_count: int
    snapshot_count: int
    peak_phi: float
    final_phi: float
    mean_intelligence: float
    phi_derivative: List[float]
    intelligence_derivative: List[float]
    meta_volatility: Optional[float]
    anomalies: List[Anomaly] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "entity_count": self.entity_count,
            "entity_range": entity_range(self.entity_count),
            "snapshot_count": self.snapshot_count,
            "peak_phi": self.peak_phi,
            "final_phi": self.final_phi,
            "mean_intelligence": self.mean_intelligence,
            "phi_derivative": list(self.phi_derivative),
            "intelligence_derivative": list(self.intelligence_derivative),
            "meta_volatility": self.meta_volatility,
            "anomalies": [a.to_dict() for a in self.anomalies],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class SweepAnalysis:
    """Cross-result findings for one batch of run results."""
    result_count: int
    scaling_patterns: Dict[str, List[Dict[str, Any]]]
    correlations: Dict[str, float]
    anomalies: List[Anomaly] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    range_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "result_count": self.result_count,
            "scaling_patterns": {k: list(v) for k, v in self.scaling_patterns.items()},
            "correlations": dict(self.correlations),
            "anomalies": [a.to_dict() for a in self.anomalies],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "range_counts": dict(self.range_counts),
        }


_MITIGATIONS = {
    ANOMALY_COLLAPSE: "Phi collapsed after peaking; lengthen the run or lower coupling jitter to hold synchrony",
    ANOMALY_INSTABILITY: "Meta-cognitive score is volatile; widen the snapshot interval or stabilize awareness",
    ANOMALY_PERSISTENT_DECLINE: "Phi slopes mostly negative; check insight quality and cross-domain mix at this size",
    LOW_PHI_CONSCIOUSNESS: "Monitor consciousness thresholds",
    HIGH_PERFORMANCE_NO_CONSCIOUSNESS: "Check consciousness detection thresholds",
    SUSPICIOUS_MEMORY_EFFICIENCY: "Verify memory reporting accuracy",
    POOR_INTELLIGENCE_SCALING: "Investigate scaling bottlenecks",
}

SnapshotLike = Union[Mapping[str, Any], Any]


class TrajectoryLearningOptimizer:
    """
    Streaming cross-run analyzer.

    Construction loads the knowledge base (Idle -> Loaded). Each
    analyze_run() call moves through Analyzing to Updated, as does
    analyze_sweep() over a batch of finished results. finalize() saves the
    knowledge base (-> Saved) and returns the aggregated report.
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        store: Optional[KnowledgeBaseStore] = None,
    ) -> None:
        self.config = config or OptimizerConfig()
        self.state = OptimizerState.IDLE
        self.store = store or KnowledgeBaseStore(self.config.knowledge_base_path)

        self.knowledge_base: KnowledgeBase = self.store.load()
        self.state = OptimizerState.LOADED

        self.analyses: List[RunAnalysis] = []
        self.sweep_analyses: List[SweepAnalysis] = []
        self.scaling_patterns: Dict[str, List[Dict[str, Any]]] = {}
        self.performance_correlations: Dict[str, float] = {}

    # ── Properties ───────────────────────────────────────────────────────────

    @property
    def total_analyses(self) -> int:
        return self.knowledge_base.total_analyses

    @property
    def learning_confidence(self) -> float:
        return self.knowledge_base.learning_confidence

    @property
    def anomalies(self) -> List[Anomaly]:
        """Per-run anomalies first, then cross-result ones."""
        found = [a for analysis in self.analyses for a in analysis.anomalies]
        found.extend(a for sweep in self.sweep_analyses for a in sweep.anomalies)
        return found

    @property
    def recommendations(self) -> List[Recommendation]:
        recs = [r for analysis in self.analyses for r in analysis.recommendations]
        recs.extend(r for sweep in self.sweep_analyses for r in sweep.recommendations)
        return recs

    @property
    def strong_correlations(self) -> Dict[str, float]:
        threshold = self.config.strong_correlation
        return {k: r for k, r in self.performance_correlations.items() if abs(r) > threshold}

    # ── Public Methods ───────────────────────────────────────────────────────

    def analyze_run(self, snapshots: Sequence[SnapshotLike], entity_count: int) -> RunAnalysis:
        """Detect anomalies in one completed run and fold it into the knowledge base."""
        self.state = OptimizerState.ANALYZING
        kb = self.knowledge_base

        records = [_as_record(s) for s in snapshots]
        cycles = np.array([float(r.get("cycle", i)) for i, r in enumerate(records)])
        phi = np.array([finite_or_zero(_max_phi(r)) for r in records])
        intelligence = np.array(
            [finite_or_zero(r.get("unified_intelligence_score", 0.0)) for r in records]
        )
        meta: Optional[np.ndarray] = None
        if records and all("meta_cognitive_score" in r for r in records):
            meta = np.array([finite_or_zero(r["meta_cognitive_score"]) for r in records])

        phi_derivative = safe_derivative(cycles, phi)
        intelligence_derivative = safe_derivative(cycles, intelligence)

        anomalies: List[Anomaly] = []
        for detected in (
            self._detect_collapse(phi, entity_count),
            self._detect_instability(meta, entity_count),
            self._detect_persistent_decline(phi_derivative, entity_count),
        ):
            if detected is not None:
                anomalies.append(detected)

        # Knowledge base update
        kb.total_analyses += 1
        kb.record_population(entity_count, entity_range(entity_count))
        for anomaly in anomalies:
            kb.record_detection(anomaly.anomaly_type)
            logger.info(
                "Anomaly %s at %d entities: %s", anomaly.anomaly_type, entity_count, anomaly.evidence
            )

        recommendations = [self._recommend(a) for a in anomalies]
        recommendations.extend(self._historical_recommendations(anomalies, entity_count))

        analysis = RunAnalysis(
            entity_count=entity_count,
            snapshot_count=len(records),
            peak_phi=float(phi.max()) if phi.size else 0.0,
            final_phi=float(phi[-1]) if phi.size else 0.0,
            mean_intelligence=float(intelligence.mean()) if intelligence.size else 0.0,
            phi_derivative=phi_derivative.tolist(),
            intelligence_derivative=intelligence_derivative.tolist(),
            meta_volatility=float(np.std(meta)) if meta is not None and meta.size else None,
            anomalies=anomalies,
            recommendations=recommendations,
        )

        kb.append_history(
            entity_count,
            {
                "timestamp": datetime.now().isoformat(),
                "entity_range": entity_range(entity_count),
                "snapshots": analysis.snapshot_count,
                "peak_phi": analysis.peak_phi,
                "final_phi": analysis.final_phi,
                "mean_intelligence": analysis.mean_intelligence,
                "anomalies": [a.anomaly_type for a in anomalies],
            },
            self.config.max_history_per_size,
        )

        self.analyses.append(analysis)
        self.state = OptimizerState.UPDATED
        return analysis

    def analyze_sweep(self, results: Sequence[SnapshotLike]) -> SweepAnalysis:
        """
        Look across finished run results (RunResult objects or their dicts).

        Adds one scaling pattern per population size to its range, correlates
        every pair of performance metrics once there are enough results, and
        checks each result for contradictions between dimensions. Nothing
        here touches the knowledge base's anomaly counters.
        """
        self.state = OptimizerState.ANALYZING
        records = [_as_record(r) for r in results]
        metrics = [_result_metrics(r) for r in records]

        patterns = self._learn_scaling_patterns(records, metrics)
        correlations = self._learn_correlations(metrics)

        anomalies: List[Anomaly] = []
        for record, values in zip(records, metrics):
            anomalies.extend(self._detect_cross_dimension(record, values))
        for anomaly in anomalies:
            logger.info(
                "Sweep anomaly %s at %d entities (%s)",
                anomaly.anomaly_type, anomaly.entity_count, anomaly.confidence,
            )

        recommendations = [self._recommend_cross_dimension(a) for a in anomalies]
        recommendations.extend(self._scaling_recommendations())
        recommendations.extend(self._correlation_recommendations())

        counts = [int(r.get("entity_count", 0)) for r in records]
        if counts:
            kb = self.knowledge_base
            kb.max_entities_analyzed = max(kb.max_entities_analyzed, max(counts))

        analysis = SweepAnalysis(
            result_count=len(records),
            scaling_patterns=patterns,
            correlations=correlations,
            anomalies=anomalies,
            recommendations=recommendations,
            range_counts=_range_counts(counts),
        )
        self.sweep_analyses.append(analysis)
        self.state = OptimizerState.UPDATED
        return analysis

    def finalize(self) -> Dict[str, Any]:
        """Persist the knowledge base and return the aggregated report."""
        saved = self.store.save(self.knowledge_base)
        if saved is not None:
            self.state = OptimizerState.SAVED

        kb = self.knowledge_base
        report = {
            "timestamp": datetime.now().isoformat(),
            "knowledge_base_saved": saved is not None,
            "learning_metrics": {
                "total_analyses": kb.total_analyses,
                "max_entities_analyzed": kb.max_entities_analyzed,
                "learning_confidence": round(kb.learning_confidence, 3),
                "ranges_covered": sorted(self.scaling_patterns),
                "strong_correlations": len(self.strong_correlations),
            },
            "analyses": [a.to_dict() for a in self.analyses],
            "scaling_analysis": {k: list(v) for k, v in self.scaling_patterns.items()},
            "performance_correlations": dict(self.performance_correlations),
            "anomalies_detected": [a.to_dict() for a in self.anomalies],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "entity_range_analysis": _range_counts(a.entity_count for a in self.analyses),
            "knowledge_base": kb.to_dict(),
        }
        return sanitize_for_json(report)

    # ── Detectors ────────────────────────────────────────────────────────────

    def _detect_collapse(self, phi: np.ndarray, entity_count: int) -> Optional[Anomaly]:
        if phi.size == 0:
            return None
        t = self.knowledge_base.thresholds(ANOMALY_COLLAPSE)
        peak = float(phi.max())
        final = float(phi[-1])
        if peak > t["peak_threshold"] and final < peak * t["drop_ratio"]:
            return Anomaly(
                ANOMALY_COLLAPSE,
                entity_count,
                {"peak_phi": peak, "final_phi": final, "retained": safe_divide(final, peak)},
            )
        return None

    def _detect_instability(
        self, meta: Optional[np.ndarray], entity_count: int
    ) -> Optional[Anomaly]:
        t = self.knowledge_base.thresholds(ANOMALY_INSTABILITY)
        if meta is None or meta.size < max(int(t.get("min_points", 3)), 3):
            return None
        volatility = float(np.std(meta))
        if volatility > t["volatility_threshold"]:
            return Anomaly(
                ANOMALY_INSTABILITY,
                entity_count,
                {"volatility": volatility, "mean": float(np.mean(meta))},
            )
        return None

    def _detect_persistent_decline(
        self, derivative: np.ndarray, entity_count: int
    ) -> Optional[Anomaly]:
        t = self.knowledge_base.thresholds(ANOMALY_PERSISTENT_DECLINE)
        threshold = t["derivative_threshold"]
        falling = int(np.sum(derivative < -threshold))
        rising = int(np.sum(derivative > threshold))
        if rising == 0:
            return None
        ratio = falling / rising
        if ratio > t["ratio_threshold"]:
            return Anomaly(
                ANOMALY_PERSISTENT_DECLINE,
                entity_count,
                {"falling": float(falling), "rising": float(rising), "ratio": ratio},
            )
        return None

    def _detect_cross_dimension(
        self, record: Mapping[str, Any], values: Dict[str, float]
    ) -> List[Anomaly]:
        cfg = self.config
        entity_count = int(record.get("entity_count", 0))
        conscious = _is_conscious(record)
        phi = values["consciousness"]
        reasoning = values["reasoning"]
        awareness = values["awareness"]
        memory_mb = finite_or_zero(record.get("avg_memory_mb", 0.0))

        found = []
        if conscious and phi < cfg.low_phi:
            found.append(Anomaly(
                LOW_PHI_CONSCIOUSNESS, entity_count, {"max_phi": phi},
                confidence="medium",
                description="Reported conscious with very low Phi",
            ))
        if reasoning == 1.0 and awareness > cfg.saturated_awareness and not conscious:
            found.append(Anomaly(
                HIGH_PERFORMANCE_NO_CONSCIOUSNESS, entity_count,
                {"reasoning": reasoning, "awareness": awareness},
                confidence="high",
                description="Perfect reasoning and near-full awareness but not conscious",
            ))
        if entity_count > cfg.large_population and memory_mb < cfg.min_plausible_memory_mb:
            found.append(Anomaly(
                SUSPICIOUS_MEMORY_EFFICIENCY, entity_count, {"memory_mb": memory_mb},
                confidence="low",
                description="Implausibly small memory for a large population",
            ))
        if "intelligence_scaling" in record:
            scaling = finite_or_zero(record["intelligence_scaling"])
            if scaling < cfg.poor_scaling:
                found.append(Anomaly(
                    POOR_INTELLIGENCE_SCALING, entity_count, {"scaling_factor": scaling},
                    confidence="medium",
                    description="Intelligence scaling below a tenth of the baseline",
                ))
        return found

    # ── Sweep learning ───────────────────────────────────────────────────────

    def _learn_scaling_patterns(
        self, records: List[Mapping[str, Any]], metrics: List[Dict[str, float]]
    ) -> Dict[str, List[Dict[str, Any]]]:
        by_size: Dict[int, List[Tuple[Mapping[str, Any], Dict[str, float]]]] = {}
        for record, values in zip(records, metrics):
            by_size.setdefault(int(record.get("entity_count", 0)), []).append((record, values))

        learned: Dict[str, List[Dict[str, Any]]] = {}
        timestamp = datetime.now().isoformat()
        for entity_count in sorted(by_size):
            group = by_size[entity_count]
            pattern = {
                "entity_count": entity_count,
                "avg_consciousness": float(np.mean([v["consciousness"] for _, v in group])),
                "avg_intelligence": float(np.mean([v["intelligence"] for _, v in group])),
                "avg_memory_mb": float(np.mean(
                    [finite_or_zero(r.get("avg_memory_mb", 0.0)) for r, _ in group]
                )),
                "avg_reasoning": float(np.mean([v["reasoning"] for _, v in group])),
                "avg_awareness": float(np.mean([v["awareness"] for _, v in group])),
                "timestamp": timestamp,
            }
            range_name = entity_range(entity_count)
            learned.setdefault(range_name, []).append(pattern)
            self.scaling_patterns.setdefault(range_name, []).append(pattern)
        return learned

    def _learn_correlations(self, metrics: List[Dict[str, float]]) -> Dict[str, float]:
        if len(metrics) < self.config.min_results_for_correlation:
            return {}
        correlations = {}
        for i, first in enumerate(CORRELATED_METRICS):
            for second in CORRELATED_METRICS[i + 1:]:
                r = safe_correlation(
                    [m[first] for m in metrics], [m[second] for m in metrics]
                )
                correlations[f"{first}-{second}"] = r
        self.performance_correlations.update(correlations)
        return correlations

    # ── Recommendations ──────────────────────────────────────────────────────

    def _recommend(self, anomaly: Anomaly) -> Recommendation:
        return Recommendation(
            recommendation_type=anomaly.anomaly_type,
            priority="medium",
            action=_MITIGATIONS[anomaly.anomaly_type],
            evidence=anomaly.evidence,
            entity_count=anomaly.entity_count,
        )

    def _historical_recommendations(
        self, anomalies: List[Anomaly], entity_count: int
    ) -> List[Recommendation]:
        """Escalate anomaly types that keep coming back across runs."""
        kb = self.knowledge_base
        cfg = self.config
        if kb.total_analyses < cfg.min_analyses_for_pattern:
            return []

        recs = []
        for anomaly_type in sorted({a.anomaly_type for a in anomalies}):
            count = kb.anomaly_types[anomaly_type].detection_count
            frequency = safe_divide(count, kb.total_analyses)
            if frequency >= cfg.frequency_threshold:
                recs.append(
                    Recommendation(
                        recommendation_type="historical_pattern",
                        priority="high",
                        action=(
                            f"Recurring {anomaly_type} in {frequency:.0%} of "
                            f"{kb.total_analyses} runs: {_MITIGATIONS[anomaly_type]}"
                        ),
                        evidence={
                            "detection_count": float(count),
                            "frequency": frequency,
                            "learning_confidence": kb.learning_confidence,
                        },
                        entity_count=entity_count,
                        source="knowledge_base",
                    )
                )
        return recs

    def _recommend_cross_dimension(self, anomaly: Anomaly) -> Recommendation:
        return Recommendation(
            recommendation_type=anomaly.anomaly_type,
            priority="high" if anomaly.confidence == "high" else "medium",
            action=_MITIGATIONS[anomaly.anomaly_type],
            evidence=anomaly.evidence,
            entity_count=anomaly.entity_count,
            source="multi_dimensional_analysis",
        )

    def _scaling_recommendations(self) -> List[Recommendation]:
        """Ranges that keep reaching Phi across several population sizes."""
        cfg = self.config
        recs = []
        for range_name in sorted(self.scaling_patterns):
            patterns = self.scaling_patterns[range_name]
            if len(patterns) < cfg.min_patterns_per_range:
                continue
            mean_phi = float(np.mean([p["avg_consciousness"] for p in patterns]))
            if mean_phi > cfg.optimal_range_phi:
                recs.append(Recommendation(
                    recommendation_type="optimal_scaling_range",
                    priority="info",
                    action=f"Consider expanding testing in the {range_name} range",
                    evidence={"avg_consciousness": mean_phi, "patterns": float(len(patterns))},
                    entity_count=None,
                    source="scaling_analysis",
                    range_name=range_name,
                ))
        return recs

    def _correlation_recommendations(self) -> List[Recommendation]:
        return [
            Recommendation(
                recommendation_type="strong_performance_correlation",
                priority="info",
                action=f"Leverage the {pair} correlation for system optimization",
                evidence={"correlation": r},
                entity_count=None,
                source="correlation_analysis",
            )
            for pair, r in sorted(self.strong_correlations.items())
        ]


def _as_record(snapshot: SnapshotLike) -> Mapping[str, Any]:
    if isinstance(snapshot, Mapping):
        return snapshot
    return snapshot.to_dict()


def _max_phi(record: Mapping[str, Any]) -> float:
    consciousness = record.get("consciousness")
    if isinstance(consciousness, Mapping):
        return float(consciousness.get("max_phi", 0.0))
    return float(record.get("max_phi", 0.0))


def _is_conscious(record: Mapping[str, Any]) -> bool:
    consciousness = record.get("consciousness")
    if isinstance(consciousness, Mapping):
        return bool(consciousness.get("is_conscious", False))
    return bool(record.get("is_conscious", False))


def _result_metrics(record: Mapping[str, Any]) -> Dict[str, float]:
    """The correlated performance dimensions of one run result."""
    entity_count = finite_or_zero(record.get("entity_count", 0))
    memory_mb = finite_or_zero(record.get("avg_memory_mb", 0.0))
    return {
        "consciousness": finite_or_zero(_max_phi(record)),
        "intelligence": finite_or_zero(record.get("unified_intelligence_score", 0.0)),
        "reasoning": finite_or_zero(record.get("reasoning_accuracy", 0.0)),
        "awareness": finite_or_zero(record.get("awareness_level", 0.0)),
        "insight_quality": finite_or_zero(record.get("insight_quality", 0.0)),
        "cross_domain": finite_or_zero(record.get("cross_domain_ratio", 0.0)),
        "memory_efficiency": safe_divide(entity_count, memory_mb) * 1000,
    }


def _range_counts(entity_counts: Iterable[int]) -> Dict[str, int]:
    counts = {name: 0 for name, _, _ in ENTITY_RANGES}
    for entity_count in entity_counts:
        name = entity_range(entity_count)
        if name in counts:
            counts[name] += 1
    return counts
