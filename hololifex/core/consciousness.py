# ═══════════════════════════════════════════════════════════════════════════════
# PART 5: CONSCIOUSNESS ASSESSMENT (dual framework)
# Design: P2 (Statistical Mechanics)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════


"""
P2: "Two frameworks score the same aggregate metrics. Framework A multiplies
integration, complexity and differentiation. Framework B multiplies
efficiency, density and a holographic term, boosted by emergence."

I2: "Both clamp to [0, cap]. The duality score blends harmonic mean, mean and
max. Any one of the three over its own threshold counts."
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from hololifex.core.numerics import safe_divide, safe_log


FRAMEWORK_A = "framework_a"
FRAMEWORK_B = "framework_b"
DUALITY = "duality"


@dataclass
class AssessorConfig:
    """Constants for the dual-framework assessment."""
    epsilon: float = 0.01              # Floor for EI and cross-domain ratio
    complexity_offset: float = 10.0    # C1 in log(entity_count + C1)
    phi_cap: float = 1.5

    # Framework B saturation
    density_scale: float = 1.8
    density_cap: float = 1.8
    emergence_scale: float = 2.2
    emergence_cap: float = 1.1
    emergence_gain: float = 0.5        # k in (1 + emergence * k)

    # Duality weights (harmonic, mean, max) - must sum to 1
    duality_weights: Tuple[float, float, float] = (0.3, 0.3, 0.4)
    harmonic_epsilon: float = 0.001

    # Per-framework thresholds
    framework_a_threshold: float = 0.15
    framework_b_threshold: float = 0.12
    duality_threshold: float = 0.10

    # Confidence tier breakpoints (very_high, high, medium)
    confidence_breakpoints: Tuple[float, float, float] = (0.5, 0.25, 0.15)

    def __post_init__(self) -> None:
        if not math.isclose(sum(self.duality_weights), 1.0, abs_tol=1e-9):
            raise ValueError(f"duality_weights must sum to 1, got {self.duality_weights}")
        if self.phi_cap <= 0:
            raise ValueError("phi_cap must be positive")


@dataclass(frozen=True)
class ConsciousnessAssessment:
    """Immutable result of one assessment. Recomputed, never stored on entities."""
    framework_a: float
    framework_b: float
    duality: float
    is_conscious: bool
    confidence: str
    confirming_frameworks: Tuple[str, ...] = field(default_factory=tuple)
    effective_information: float = 0.0

    @property
    def max_phi(self) -> float:
        return max(self.framework_a, self.framework_b, self.duality)

    def to_dict(self) -> dict:
        return {
            "is_conscious": self.is_conscious,
            "framework_a_phi": round(self.framework_a, 4),
            "framework_b_phi": round(self.framework_b, 4),
            "duality_phi": round(self.duality, 4),
            "max_phi": round(self.max_phi, 4),
            "effective_information": round(self.effective_information, 4),
            "confirming_frameworks": list(self.confirming_frameworks),
            "confidence": self.confidence,
        }


class ConsciousnessAssessor:
    """
    Pure mapping from aggregate metrics to a dual-framework assessment.

    No state is kept between calls; identical inputs give identical output.
    """

    def __init__(self, config: Optional[AssessorConfig] = None) -> None:
        self.config = config or AssessorConfig()

    # ── Public Methods ───────────────────────────────────────────────────────

    def assess(
        self,
        entity_count: int,
        coherence: float,
        total_insights: int,
        insight_quality: float,
        cross_domain_ratio: float,
        effective_information: float,
    ) -> ConsciousnessAssessment:
        cfg = self.config

        entity_count = max(int(entity_count), 0)
        total_insights = max(int(total_insights), 0)
        coherence = _non_negative(coherence)
        insight_quality = _non_negative(insight_quality)
        cross_domain_ratio = _non_negative(cross_domain_ratio)
        effective_information = max(_non_negative(effective_information), cfg.epsilon)

        phi_a = self.framework_a(
            entity_count, coherence, total_insights, cross_domain_ratio, effective_information
        )
        phi_b = self.framework_b(
            entity_count, coherence, total_insights, insight_quality, cross_domain_ratio
        )
        duality = self.duality(phi_a, phi_b)

        a_conscious = phi_a > cfg.framework_a_threshold
        b_conscious = phi_b > cfg.framework_b_threshold
        duality_conscious = duality > cfg.duality_threshold

        frameworks: List[str] = []
        if a_conscious:
            frameworks.append(FRAMEWORK_A)
        if b_conscious:
            frameworks.append(FRAMEWORK_B)
        if duality_conscious and not (a_conscious or b_conscious):
            frameworks.append(DUALITY)

        return ConsciousnessAssessment(
            framework_a=phi_a,
            framework_b=phi_b,
            duality=duality,
            is_conscious=a_conscious or b_conscious or duality_conscious,
            confidence=self.confidence_tier(max(phi_a, phi_b, duality)),
            confirming_frameworks=tuple(frameworks),
            effective_information=effective_information,
        )

    def framework_a(
        self,
        entity_count: int,
        coherence: float,
        total_insights: int,
        cross_domain_ratio: float,
        effective_information: float,
    ) -> float:
        """integration * complexity * differentiation, clamped."""
        cfg = self.config
        integration = coherence * max(effective_information, cfg.epsilon)
        complexity = safe_divide(
            safe_log(total_insights + 1), safe_log(entity_count + cfg.complexity_offset)
        )
        differentiation = max(cross_domain_ratio, cfg.epsilon)
        return self._clamp(integration * complexity * differentiation)

    def framework_b(
        self,
        entity_count: int,
        coherence: float,
        total_insights: int,
        insight_quality: float,
        cross_domain_ratio: float,
    ) -> float:
        """efficiency * density * holographic * (1 + emergence * k), clamped."""
        cfg = self.config
        insight_density = safe_divide(total_insights, entity_count)

        efficiency = math.sqrt(coherence * insight_quality)
        density = min(safe_log(insight_density + 1) / cfg.density_scale, cfg.density_cap)
        holographic = coherence * cross_domain_ratio * insight_quality
        emergence = min(safe_log(insight_density + 1) / cfg.emergence_scale, cfg.emergence_cap)

        return self._clamp(
            efficiency * density * holographic * (1.0 + emergence * cfg.emergence_gain)
        )

    def duality(self, phi_a: float, phi_b: float) -> float:
        cfg = self.config
        w_harmonic, w_mean, w_max = cfg.duality_weights
        harmonic = safe_divide(2 * phi_a * phi_b, phi_a + phi_b + cfg.harmonic_epsilon)
        mean = (phi_a + phi_b) / 2.0
        return max(0.0, w_harmonic * harmonic + w_mean * mean + w_max * max(phi_a, phi_b))

    def confidence_tier(self, max_phi: float) -> str:
        very_high, high, medium = self.config.confidence_breakpoints
        if max_phi > very_high:
            return "very_high"
        if max_phi > high:
            return "high"
        if max_phi > medium:
            return "medium"
        return "low"

    # ── Internal ─────────────────────────────────────────────────────────────

    def _clamp(self, phi: float) -> float:
        if not math.isfinite(phi):
            return 0.0
        return max(0.0, min(phi, self.config.phi_cap))


def _non_negative(x: float) -> float:
    x = float(x)
    if not math.isfinite(x):
        return 0.0
    return max(x, 0.0)
