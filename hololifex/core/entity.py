# ═══════════════════════════════════════════════════════════════════════════════
# PART 1: OSCILLATOR ENTITY
# Design: P1 (Dynamical Systems) | Implementation: I1 (Systems Architect)
# ═══════════════════════════════════════════════════════════════════════════════


"""
P1: "Each entity is one oscillator with a domain. Phase lives on the unit
circle, written as a fraction of a turn in [0, 1)."

I1: "Entities are born once per population and mutated every step. Their
natural frequency is fixed at birth - that jitter is what coupling has to
overcome."
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class Domain(Enum):
    """Domain tags. Coupling is stronger between entities sharing a tag."""
    PHYSICAL = "physical"
    TEMPORAL = "temporal"
    SEMANTIC = "semantic"
    NETWORK = "network"
    SPATIAL = "spatial"
    EMOTIONAL = "emotional"
    SOCIAL = "social"
    CREATIVE = "creative"


# Round-robin assignment order when building populations
DOMAIN_ORDER = list(Domain)
DOMAIN_INDEX = {d: i for i, d in enumerate(DOMAIN_ORDER)}


@dataclass
class EntityConfig:
    """Per-entity construction parameters."""
    base_frequency: float = 0.01       # Turns per step
    frequency_jitter: float = 0.03     # Uniform(0, jitter) added per entity
    coupling_strength: float = 0.05    # Scales the Kuramoto correction
    initial_reasoning: float = 0.5
    initial_awareness: float = 0.5


@dataclass
class OscillatorEntity:
    """
    A single oscillating agent.

    reasoning_capacity and awareness_level move by exponential moving average
    and are always clamped to [0, 1].
    """
    entity_id: int
    domain: Domain
    phase: float
    natural_frequency: float
    reasoning_capacity: float = 0.5
    awareness_level: float = 0.5
    coupling_strength: float = 0.05

    def __post_init__(self) -> None:
        if self.entity_id < 0:
            raise ValueError(f"entity_id must be non-negative, got {self.entity_id}")
        if not isinstance(self.domain, Domain):
            self.domain = Domain(self.domain)
        if not math.isfinite(self.phase):
            raise ValueError(f"phase must be finite, got {self.phase}")
        if not (math.isfinite(self.natural_frequency) and self.natural_frequency > 0):
            raise ValueError(
                f"natural_frequency must be a positive number, got {self.natural_frequency}"
            )
        if self.coupling_strength < 0:
            raise ValueError("coupling_strength must be non-negative")
        self.phase = self.phase % 1.0
        self.reasoning_capacity = _clamp01(self.reasoning_capacity)
        self.awareness_level = _clamp01(self.awareness_level)

    # ── Capability updates ───────────────────────────────────────────────────

    def learn_reasoning(self, score: float, rate: float = 0.3) -> None:
        """EMA toward a reasoning test score. Non-positive scores are ignored."""
        if score > 0.0:
            self.reasoning_capacity = _clamp01(
                (1 - rate) * self.reasoning_capacity + rate * score
            )

    def absorb_awareness(self, level: float, rate: float = 0.2) -> None:
        """EMA toward the network awareness level."""
        self.awareness_level = _clamp01((1 - rate) * self.awareness_level + rate * level)

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "domain": self.domain.value,
            "phase": self.phase,
            "natural_frequency": self.natural_frequency,
            "reasoning_capacity": self.reasoning_capacity,
            "awareness_level": self.awareness_level,
            "coupling_strength": self.coupling_strength,
        }


def _clamp01(x: float) -> float:
    if not math.isfinite(x):
        return 0.0
    return min(max(float(x), 0.0), 1.0)


def create_entity(
    entity_id: int,
    rng: np.random.Generator,
    domain: Optional[Domain] = None,
    config: Optional[EntityConfig] = None,
) -> OscillatorEntity:
    """
    Factory: build an entity from the run's private generator.

    The domain defaults to round-robin by id.
    """
    cfg = config or EntityConfig()
    if domain is None:
        domain = DOMAIN_ORDER[entity_id % len(DOMAIN_ORDER)]

    phase = float(rng.random())
    natural_frequency = cfg.base_frequency + float(rng.uniform(0.0, cfg.frequency_jitter))

    return OscillatorEntity(
        entity_id=entity_id,
        domain=domain,
        phase=phase,
        natural_frequency=natural_frequency,
        reasoning_capacity=cfg.initial_reasoning,
        awareness_level=cfg.initial_awareness,
        coupling_strength=cfg.coupling_strength,
    )
