# ═══════════════════════════════════════════════════════════════════════════════
# PART 2: COUPLING NETWORK
# Design: P1 (Dynamical Systems) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
P1: "Kuramoto coupling on a domain graph. Same-domain pairs pull twice as
hard as cross-domain pairs. Phases are fractions of a turn, so every sine
carries a 2pi."

I2: "Coupling is O(n^2). Past the sampling threshold each step works on a
fixed-size uniform sample; everyone else keeps last step's state. All
updates in a step read the same phase vector, then metrics read the result."
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

import numpy as np

from hololifex.core.awareness import AwarenessMonitor
from hololifex.core.consciousness import AssessorConfig, ConsciousnessAssessment, ConsciousnessAssessor
from hololifex.core.entity import DOMAIN_INDEX, DOMAIN_ORDER, Domain, EntityConfig, OscillatorEntity, create_entity
from hololifex.core.insight import InsightConfig, InsightGenerator, InsightRecord
from hololifex.core.numerics import (
    finite_or_zero,
    normalized_entropy,
    phase_coherence,
    safe_divide,
    wrap_phase,
)
from hololifex.core.pattern_learner import PatternLearner
from hololifex.core.reasoning import GeometricReasoningEngine, ReasoningConfig

logger = logging.getLogger(__name__)


CROSS_DOMAIN_TERMS = ("coordinate", "sync", "balance", "integrate", "synthesize")


@dataclass
class NetworkConfig:
    """Configuration for a coupled entity population."""
    same_domain_strength: float = 0.08
    cross_domain_strength: float = 0.04

    # Large-population subsampling
    sampling_threshold: int = 1000     # Above this many entities, sample
    sample_size: int = 256             # Entities touched per sampled step

    # Bounded histories
    history_length: int = 1000         # coherence / effective information
    insight_history_length: int = 1000
    max_patterns: int = 10_000

    # Auxiliary reasoning probe
    reasoning_interval: int = 8        # Steps between reasoning tests
    reasoning_trials: int = 12
    reasoning_rate: float = 0.3        # EMA rate toward reasoning score
    awareness_rate: float = 0.2        # EMA rate toward awareness level

    # Unified metrics windows
    recent_insight_window: int = 10

    entity_config: EntityConfig = field(default_factory=EntityConfig)
    assessor_config: Optional[AssessorConfig] = None
    insight_config: Optional[InsightConfig] = None
    reasoning_config: Optional[ReasoningConfig] = None


# ── Coupling matrix ─────────────────────────────────────────────────────────


class CouplingMatrix:
    """
    Symmetric, append-only coupling strengths keyed by entity id.

    Strength between two entities is fixed when the later of the two is
    added: same_strength if their domains match, cross_strength otherwise.
    The diagonal is zero. Adding an entity never changes an existing pair.
    """

    def __init__(self, same_strength: float = 0.08, cross_strength: float = 0.04) -> None:
        if same_strength < 0 or cross_strength < 0:
            raise ValueError("coupling strengths must be non-negative")
        self.same_strength = same_strength
        self.cross_strength = cross_strength
        self._index: Dict[int, int] = {}
        self._domain_codes: List[int] = []
        self._codes_cache: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._domain_codes)

    def __contains__(self, entity_id: int) -> bool:
        return entity_id in self._index

    def add(self, entity_id: int, domain: Domain) -> None:
        if entity_id in self._index:
            raise ValueError(f"entity {entity_id} already in coupling matrix")
        self._index[entity_id] = len(self._domain_codes)
        self._domain_codes.append(DOMAIN_INDEX[domain])
        self._codes_cache = None

    def strength(self, i: int, j: int) -> float:
        """Coupling between entity ids i and j."""
        if i == j:
            return 0.0
        ci = self._domain_codes[self._index[i]]
        cj = self._domain_codes[self._index[j]]
        return self.same_strength if ci == cj else self.cross_strength

    def block(self, rows: np.ndarray) -> np.ndarray:
        """Dense sub-matrix among the given row positions (insertion order)."""
        codes = self._codes()[rows]
        weights = np.where(
            codes[:, np.newaxis] == codes[np.newaxis, :],
            self.same_strength,
            self.cross_strength,
        )
        np.fill_diagonal(weights, 0.0)
        return weights

    def dense(self) -> np.ndarray:
        return self.block(np.arange(len(self)))

    def _codes(self) -> np.ndarray:
        if self._codes_cache is None:
            self._codes_cache = np.asarray(self._domain_codes, dtype=int)
        return self._codes_cache


# ── Step / metrics records ──────────────────────────────────────────────────


@dataclass(frozen=True)
class StepResult:
    """What one step produced."""
    insights: int
    new_patterns: int
    coherence: float
    awareness: float
    reasoning_accuracy: float
    effective_information: float
    sampled: int


@dataclass(frozen=True)
class UnifiedMetrics:
    """Aggregate metrics for the current network state."""
    entity_count: int
    coherence: float
    total_insights: int
    assessment: ConsciousnessAssessment
    reasoning_accuracy: float
    reasoning_integration: float
    awareness_level: float
    awareness_stability: float
    awareness_integration: float
    pattern_score: float
    insight_quality: float
    insight_diversity: float
    cross_domain_ratio: float
    learning_velocity: float
    effective_information: float
    unified_intelligence_score: float
    meta_cognitive_score: float
    pattern_discoveries: int

    def to_dict(self) -> dict:
        return {
            "entity_count": self.entity_count,
            "coherence": round(self.coherence, 4),
            "total_insights": self.total_insights,
            "consciousness": self.assessment.to_dict(),
            "reasoning_accuracy": round(self.reasoning_accuracy, 4),
            "reasoning_integration": round(self.reasoning_integration, 4),
            "awareness_level": round(self.awareness_level, 4),
            "awareness_stability": round(self.awareness_stability, 4),
            "awareness_integration": round(self.awareness_integration, 4),
            "pattern_score": round(self.pattern_score, 4),
            "insight_quality": round(self.insight_quality, 4),
            "insight_diversity": round(self.insight_diversity, 4),
            "cross_domain_ratio": round(self.cross_domain_ratio, 4),
            "learning_velocity": round(self.learning_velocity, 4),
            "effective_information": round(self.effective_information, 4),
            "unified_intelligence_score": round(self.unified_intelligence_score, 4),
            "meta_cognitive_score": round(self.meta_cognitive_score, 4),
            "pattern_discoveries": self.pattern_discoveries,
        }


# ── Network ─────────────────────────────────────────────────────────────────


class CouplingNetwork:
    """
    Owns the entities, their coupling matrix and all per-run learners.

    Every stochastic call draws from self.rng, the run's private generator.
    """

    def __init__(self, rng: np.random.Generator, config: Optional[NetworkConfig] = None) -> None:
        self.rng = rng
        self.config = config or NetworkConfig()
        cfg = self.config

        self.entities: List[OscillatorEntity] = []
        self.coupling = CouplingMatrix(cfg.same_domain_strength, cfg.cross_domain_strength)

        self.assessor = ConsciousnessAssessor(cfg.assessor_config)
        self.insight_generator = InsightGenerator(rng, cfg.insight_config)
        self.pattern_learner = PatternLearner(cfg.max_patterns)
        self.reasoning_engine = GeometricReasoningEngine(rng, cfg.reasoning_config)
        self.awareness_monitor = AwarenessMonitor()

        self.coherence_history: Deque[float] = deque(maxlen=cfg.history_length)
        self.effective_information: Deque[float] = deque(maxlen=cfg.history_length)
        self.insight_history: Deque[InsightRecord] = deque(maxlen=cfg.insight_history_length)
        self.total_insights: int = 0

        self._step_count: int = 0

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def n(self) -> int:
        return len(self.entities)

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def phases(self) -> np.ndarray:
        return np.fromiter((e.phase for e in self.entities), dtype=float, count=self.n)

    @property
    def coherence(self) -> float:
        """Most recent recorded coherence (0 before the first step)."""
        return self.coherence_history[-1] if self.coherence_history else 0.0

    @property
    def is_sampling(self) -> bool:
        return self.n > self.config.sampling_threshold

    # ── Methods ─────────────────────────────────────────────────────────────

    def add_entity(self, entity: OscillatorEntity) -> None:
        self.coupling.add(entity.entity_id, entity.domain)
        self.entities.append(entity)

    def step(self) -> StepResult:
        """
        Advance one synchronous step.

        Order:
        1. Pick participants (everyone, or a uniform sample)
        2. Phase evolution at natural frequency
        3. Kuramoto coupling against the evolved phases
        4. Coherence of participants
        5. Reasoning probe (periodic) and awareness update
        6. Insights and pattern recognition
        7. Bounded history bookkeeping
        """
        self._step_count += 1
        cfg = self.config

        if self.n == 0:
            self.coherence_history.append(0.0)
            self.effective_information.append(0.0)
            return StepResult(0, 0, 0.0, self.awareness_monitor.level, 0.0, 0.0, 0)

        rows = self._select_participants()
        members = [self.entities[i] for i in rows]

        phases = np.fromiter((e.phase for e in members), dtype=float, count=len(members))
        frequencies = np.fromiter((e.natural_frequency for e in members), dtype=float, count=len(members))
        strengths = np.fromiter((e.coupling_strength for e in members), dtype=float, count=len(members))

        # 2. Free evolution
        phases = wrap_phase(phases + frequencies)

        # 3. Coupling: sum_j w_ij sin(2pi(p_j - p_i)) / sum_j w_ij
        phases = self._couple(phases, strengths, self.coupling.block(rows))

        for entity, phase in zip(members, phases):
            entity.phase = float(phase)

        # 4. Coherence
        coherence = phase_coherence(phases)

        # 5. Reasoning probe and awareness
        if (self._step_count - 1) % cfg.reasoning_interval == 0:
            score = self.reasoning_engine.test(cfg.reasoning_trials)
            for entity in members:
                entity.learn_reasoning(score, cfg.reasoning_rate)

        self.awareness_monitor.update(phases)
        awareness = self.awareness_monitor.level
        for entity in members:
            entity.absorb_awareness(awareness, cfg.awareness_rate)

        # 6. Insights
        insights = self.insight_generator.generate_batch(members, phases)
        self.insight_history.extend(insights)
        self.total_insights += len(insights)
        new_patterns = self.pattern_learner.recognize(insights)

        # 7. Bookkeeping
        ei = self._effective_information(insights, len(members))
        self.coherence_history.append(coherence)
        self.effective_information.append(ei)

        last_reasoning = (
            self.reasoning_engine.reasoning_history[-1]
            if self.reasoning_engine.reasoning_history
            else 0.0
        )

        return StepResult(
            insights=len(insights),
            new_patterns=new_patterns,
            coherence=coherence,
            awareness=awareness,
            reasoning_accuracy=last_reasoning,
            effective_information=ei,
            sampled=len(members),
        )

    def metrics(self) -> UnifiedMetrics:
        """Unified metrics over the current state and the recent insight window."""
        cfg = self.config
        coherence = self.coherence
        effective_info = self.effective_information[-1] if self.effective_information else 0.0

        recent = list(self.insight_history)[-cfg.recent_insight_window:]
        n_recent = len(recent)

        insight_quality = safe_divide(sum(1 for i in recent if i.complexity >= 2), n_recent)
        insight_diversity = safe_divide(len({i.action for i in recent}), n_recent)
        cross_domain_ratio = safe_divide(
            sum(1 for i in recent if any(t in i.verb for t in CROSS_DOMAIN_TERMS)), n_recent
        )
        reasoning_integration = safe_divide(sum(1 for i in recent if i.reasoning_enhanced), n_recent)
        awareness_integration = safe_divide(sum(1 for i in recent if i.awareness_enhanced), n_recent)

        assessment = self.assessor.assess(
            self.n,
            coherence,
            self.total_insights,
            insight_quality,
            cross_domain_ratio,
            effective_info,
        )

        reasoning_accuracy = self.reasoning_engine.recent_accuracy()
        awareness_level = self.awareness_monitor.level
        awareness_stability = self.awareness_monitor.stability
        pattern_score = self.pattern_learner.score()

        learning_velocity = 0.0
        if len(self.coherence_history) >= 10:
            history = list(self.coherence_history)
            learning_velocity = float(np.mean(history[-5:]) - np.mean(history[-10:-5]))

        unified = finite_or_zero(
            assessment.max_phi * 0.25
            + reasoning_accuracy * 0.25
            + awareness_level * 0.20
            + pattern_score * 0.15
            + insight_quality * 0.15
        )
        meta_cognitive = finite_or_zero(
            (awareness_stability + reasoning_accuracy + pattern_score) / 3.0
        )

        return UnifiedMetrics(
            entity_count=self.n,
            coherence=coherence,
            total_insights=self.total_insights,
            assessment=assessment,
            reasoning_accuracy=reasoning_accuracy,
            reasoning_integration=reasoning_integration,
            awareness_level=awareness_level,
            awareness_stability=awareness_stability,
            awareness_integration=awareness_integration,
            pattern_score=pattern_score,
            insight_quality=insight_quality,
            insight_diversity=insight_diversity,
            cross_domain_ratio=cross_domain_ratio,
            learning_velocity=learning_velocity,
            effective_information=effective_info,
            unified_intelligence_score=unified,
            meta_cognitive_score=meta_cognitive,
            pattern_discoveries=self.pattern_learner.discovery_count,
        )

    # ── Internal ────────────────────────────────────────────────────────────

    def _select_participants(self) -> np.ndarray:
        cfg = self.config
        if not self.is_sampling:
            return np.arange(self.n)
        size = min(cfg.sample_size, self.n)
        return np.sort(self.rng.choice(self.n, size=size, replace=False))

    @staticmethod
    def _couple(phases: np.ndarray, strengths: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """One Kuramoto correction; rows with zero weight sum are left alone."""
        diff = phases[np.newaxis, :] - phases[:, np.newaxis]
        pull = np.sum(weights * np.sin(2 * np.pi * diff), axis=1)
        weight_sum = np.sum(weights, axis=1)

        active = weight_sum > 0
        if not np.any(active):
            return phases

        updated = phases.copy()
        updated[active] += strengths[active] * (pull[active] / weight_sum[active])
        updated = np.where(np.isfinite(updated), updated, phases)
        return wrap_phase(updated)

    @staticmethod
    def _effective_information(insights: List[InsightRecord], participants: int) -> float:
        """Insight yield weighted by how evenly the insights spread over domains."""
        if not insights or participants == 0:
            return 0.0
        codes = np.array([DOMAIN_INDEX[Domain(i.domain)] for i in insights], dtype=int)
        spread = normalized_entropy(codes, len(DOMAIN_ORDER))
        return finite_or_zero(len(insights) / participants * spread)


def create_network(
    entity_count: int,
    rng: np.random.Generator,
    config: Optional[NetworkConfig] = None,
) -> CouplingNetwork:
    """Factory: a network populated with entity_count round-robin entities."""
    network = CouplingNetwork(rng, config)
    for entity_id in range(entity_count):
        network.add_entity(create_entity(entity_id, rng, config=network.config.entity_config))
    logger.debug("Built network with %d entities", entity_count)
    return network
