# ═══════════════════════════════════════════════════════════════════════════════
# PART 3: INSIGHT GENERATION
# Design: H3 (Enactivism) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════


"""
H3: "An insight is what an entity does when the network around it is in
phase. The more synchronized the population and the further along its own
cycle, the more likely it acts."

I2: "Every draw comes from the run's own generator. Hand the same seed in and
you get byte-identical insight streams back out."
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from hololifex.core.entity import Domain, OscillatorEntity
from hololifex.core.numerics import phase_coherence


DOMAIN_VERBS: Dict[Domain, List[str]] = {
    Domain.PHYSICAL: ["analyze", "optimize", "stabilize", "energize"],
    Domain.TEMPORAL: ["synchronize", "predict", "sequence", "pace"],
    Domain.SEMANTIC: ["interpret", "relate", "abstract", "contextualize"],
    Domain.NETWORK: ["connect", "route", "balance", "distribute"],
    Domain.SPATIAL: ["map", "navigate", "cluster", "transform"],
    Domain.EMOTIONAL: ["empathize", "harmonize", "motivate", "balance"],
    Domain.SOCIAL: ["coordinate", "mediate", "share", "unify"],
    Domain.CREATIVE: ["generate", "innovate", "combine", "discover"],
}

TARGETS = ["patterns", "systems", "flows", "structures", "dynamics"]
MODIFIERS = ["adaptively", "recursively", "holistically", "emergently", "optimally"]

# Scanned in order, first substring match wins. The order is part of the
# contract: highest tier first.
COMPLEXITY_KEYWORDS: Tuple[Tuple[str, int], ...] = (
    ("generate", 3),
    ("innovate", 3),
    ("coordinate", 3),
    ("integrate", 3),
    ("synthesize", 3),
    ("optimize", 2),
    ("balance", 2),
    ("sync", 2),
    ("predict", 2),
    ("extract", 2),
    ("validate", 1),
    ("check", 1),
    ("monitor", 1),
    ("analyze", 1),
    ("assess", 1),
)


def action_complexity(verb: str) -> int:
    """Complexity tier (1-3) for an action verb. Unknown verbs are tier 1."""
    verb = verb.lower()
    for keyword, tier in COMPLEXITY_KEYWORDS:
        if keyword in verb:
            return tier
    return 1


@dataclass(frozen=True)
class InsightRecord:
    """One entity's insight for one step."""
    entity_id: int
    domain: str
    action: str
    confidence: float
    complexity: int
    phase: float = 0.0
    phase_coherence: float = 0.0
    reasoning_enhanced: bool = False
    awareness_enhanced: bool = False
    network_synchronized: bool = False

    def __post_init__(self) -> None:
        if self.complexity not in (1, 2, 3):
            raise ValueError(f"complexity must be 1, 2 or 3, got {self.complexity}")
        if not math.isfinite(self.confidence):
            raise ValueError("confidence must be finite")
        if not self.action:
            raise ValueError("action must be non-empty")

    @property
    def verb(self) -> str:
        return self.action.split("_", 1)[0]

    @property
    def signature(self) -> str:
        """Pattern key used by the learner."""
        return f"{self.domain}:{self.action}"

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "domain": self.domain,
            "action": self.action,
            "confidence": self.confidence,
            "complexity": self.complexity,
            "phase": self.phase,
            "phase_coherence": self.phase_coherence,
            "reasoning_enhanced": self.reasoning_enhanced,
            "awareness_enhanced": self.awareness_enhanced,
            "network_synchronized": self.network_synchronized,
        }


@dataclass
class InsightConfig:
    """Probability and confidence blend for insight generation."""
    base_probability: float = 0.3
    phase_slope: float = 0.7

    # Confidence = weighted blend of these four
    phase_weight: float = 0.3
    coherence_weight: float = 0.3
    reasoning_weight: float = 0.2
    awareness_weight: float = 0.2

    enhanced_threshold: float = 0.7       # reasoning/awareness flags
    synchronized_threshold: float = 0.8   # network_synchronized flag

    verbs: Dict[Domain, List[str]] = field(default_factory=lambda: dict(DOMAIN_VERBS))


class InsightGenerator:
    """
    Stochastic insight production bound to one private generator.

    Never touches numpy's global random state.
    """

    def __init__(self, rng: np.random.Generator, config: Optional[InsightConfig] = None) -> None:
        self.rng = rng
        self.config = config or InsightConfig()

    def generate(
        self, entity: OscillatorEntity, phases: Sequence[float]
    ) -> Optional[InsightRecord]:
        """Try to produce one insight for entity given the population's phases."""
        return self._generate_with_coherence(entity, phase_coherence(phases))

    def generate_batch(
        self, entities: Sequence[OscillatorEntity], phases: Sequence[float]
    ) -> List[InsightRecord]:
        """One attempt per entity. Coherence is computed once for the batch."""
        coherence = phase_coherence(phases)
        insights = []
        for entity in entities:
            insight = self._generate_with_coherence(entity, coherence)
            if insight is not None:
                insights.append(insight)
        return insights

    # ── Internal ────────────────────────────────────────────────────────────

    def _generate_with_coherence(
        self, entity: OscillatorEntity, coherence: float
    ) -> Optional[InsightRecord]:
        cfg = self.config
        probability = coherence * (cfg.base_probability + cfg.phase_slope * entity.phase)

        if self.rng.random() >= probability:
            return None

        verbs = cfg.verbs.get(entity.domain, ["analyze"])
        verb = verbs[int(self.rng.integers(len(verbs)))]
        target = TARGETS[int(self.rng.integers(len(TARGETS)))]
        modifier = MODIFIERS[int(self.rng.integers(len(MODIFIERS)))]
        action = f"{verb}_{target}_{modifier}"

        confidence = (
            cfg.phase_weight * entity.phase
            + cfg.coherence_weight * coherence
            + cfg.reasoning_weight * entity.reasoning_capacity
            + cfg.awareness_weight * entity.awareness_level
        )

        return InsightRecord(
            entity_id=entity.entity_id,
            domain=entity.domain.value,
            action=action,
            confidence=round(confidence, 4),
            complexity=action_complexity(verb),
            phase=entity.phase,
            phase_coherence=round(coherence, 4),
            reasoning_enhanced=entity.reasoning_capacity > cfg.enhanced_threshold,
            awareness_enhanced=entity.awareness_level > cfg.enhanced_threshold,
            network_synchronized=coherence > cfg.synchronized_threshold,
        )
