# ═══════════════════════════════════════════════════════════════════════════════
# PART 6: GEOMETRIC REASONING PROBE
# Design: N5 (Embodied Cognition) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════


"""
N5: "Reasoning capacity needs an outside measurement. Scatter points in 4D,
ask which one sits closest to the origin, score the answer."

I2: "The solver is a small fixed projection network. When its numbers blow
up we fall back, and the fallback is returned, not thrown, so it shows up in
the outcome and in the tests."
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass
class ReasoningConfig:
    """Problem generation and network shape for the reasoning probe."""
    dimensions: int = 4
    hidden_units: int = 8
    num_points: int = 8
    n_clusters: int = 3
    cluster_spread: float = 1.5
    point_spread: float = 0.8
    min_noise: float = 1.0
    max_noise: float = 1.5
    min_gap: float = 0.3               # Nearest two distances must differ by this
    max_regenerations: int = 20
    weight_scale: float = 0.05
    activation_clip: float = 10.0
    history_length: int = 100


@dataclass(frozen=True)
class SolveOutcome:
    """Prediction plus the reason a fallback was taken, if one was."""
    prediction: int
    fallback_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fallback_reason is None


class GeometricReasoningEngine:
    """
    Auxiliary reasoning-accuracy test.

    Weights are drawn once from the run's generator and never trained, so
    accuracy reflects how well a fixed random projection ranks distances.
    """

    def __init__(self, rng: np.random.Generator, config: Optional[ReasoningConfig] = None) -> None:
        self.rng = rng
        self.config = config or ReasoningConfig()
        cfg = self.config

        self.entity_weights = rng.standard_normal((cfg.dimensions, cfg.hidden_units)) * cfg.weight_scale
        self.interaction_weights = (
            rng.standard_normal((cfg.hidden_units, cfg.hidden_units)) * cfg.weight_scale
        )
        self.decision_weights = rng.standard_normal((cfg.hidden_units, 1)) * cfg.weight_scale

        self.reasoning_history: List[float] = []
        self.fallback_count: int = 0

    # ── Public Methods ───────────────────────────────────────────────────────

    def generate_problem(self) -> Tuple[np.ndarray, int]:
        """Clustered points plus noise; returns (points, index nearest origin)."""
        cfg = self.config
        X = self._sample_points()
        for _ in range(cfg.max_regenerations):
            if not self._is_degenerate(X):
                break
            X = self._sample_points()

        distances = np.linalg.norm(X, axis=1)
        return X, int(np.argmin(distances))

    def solve(self, X: np.ndarray) -> SolveOutcome:
        """Rank points through the projection network."""
        cfg = self.config
        n_points = X.shape[0] if X.ndim == 2 else 0
        if n_points == 0 or X.shape[1] != cfg.dimensions:
            return SolveOutcome(prediction=0, fallback_reason="malformed_problem")

        with np.errstate(all="ignore"):
            hidden = np.clip(X @ self.entity_weights, -cfg.activation_clip, cfg.activation_clip)
            hidden = np.maximum(hidden, 0.0)
            interacted = np.clip(
                hidden @ self.interaction_weights, -cfg.activation_clip, cfg.activation_clip
            )
            interacted = np.maximum(interacted, 0.0)
            estimates = (interacted @ self.decision_weights).ravel()

        if not np.all(np.isfinite(estimates)):
            return SolveOutcome(
                prediction=int(self.rng.integers(n_points)),
                fallback_reason="non_finite_estimates",
            )
        if np.ptp(estimates) == 0.0:
            # All estimates tied: fall back to the raw geometry
            return SolveOutcome(
                prediction=int(np.argmin(np.sum(X * X, axis=1))),
                fallback_reason="tied_estimates",
            )
        return SolveOutcome(prediction=int(np.argmin(estimates)))

    def test(self, num_trials: int = 12) -> float:
        """Run num_trials problems; record and return accuracy."""
        correct = 0
        for _ in range(num_trials):
            X, answer = self.generate_problem()
            outcome = self.solve(X)
            if not outcome.ok:
                self.fallback_count += 1
            if outcome.prediction == answer:
                correct += 1

        accuracy = correct / num_trials if num_trials > 0 else 0.0
        self.reasoning_history.append(accuracy)
        if len(self.reasoning_history) > self.config.history_length:
            self.reasoning_history = self.reasoning_history[-self.config.history_length:]
        return accuracy

    def recent_accuracy(self, window: int = 5) -> float:
        if not self.reasoning_history:
            return 0.0
        return float(np.mean(self.reasoning_history[-window:]))

    # ── Internal ─────────────────────────────────────────────────────────────

    def _sample_points(self) -> np.ndarray:
        cfg = self.config
        centers = self.rng.standard_normal((cfg.n_clusters, cfg.dimensions)) * cfg.cluster_spread
        assignment = self.rng.integers(cfg.n_clusters, size=cfg.num_points)
        X = centers[assignment] + self.rng.standard_normal((cfg.num_points, cfg.dimensions)) * cfg.point_spread
        noise_level = self.rng.uniform(cfg.min_noise, cfg.max_noise)
        return X + self.rng.standard_normal((cfg.num_points, cfg.dimensions)) * noise_level

    def _is_degenerate(self, X: np.ndarray) -> bool:
        if not np.all(np.isfinite(X)):
            return True
        distances = np.sort(np.linalg.norm(X, axis=1))
        return distances.size > 1 and (distances[1] - distances[0]) < self.config.min_gap
