# ═══════════════════════════════════════════════════════════════════════════════
# PART 0: GUARDED NUMERICS
# Design: P2 (Statistical Mechanics) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
P2: "Division by zero and log of nothing are not errors in this system. They
are zero. Every formula downstream routes through these helpers."

I2: "The order parameter lives here too, so the network, the insight
generator and the awareness monitor all measure synchrony the same way."
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np


def safe_divide(a: float, b: float) -> float:
    """a / b, or 0.0 when b is zero."""
    if b == 0:
        return 0.0
    return a / b


def safe_log(x: float) -> float:
    """Natural log, or 0.0 for non-positive arguments."""
    if x <= 0:
        return 0.0
    return math.log(x)


def finite_or_zero(x: float) -> float:
    x = float(x)
    return x if math.isfinite(x) else 0.0


def wrap_phase(phases: np.ndarray) -> np.ndarray:
    """Wrap phases into the canonical range [0, 1)."""
    wrapped = np.mod(phases, 1.0)
    # np.mod can return exactly 1.0 for tiny negative inputs
    wrapped[wrapped >= 1.0] = 0.0
    return wrapped


def phase_coherence(phases: Sequence[float]) -> float:
    """
    Kuramoto order parameter r = |<e^{i 2pi p}>| for phases in [0, 1).

    0 for an empty population, 1 for perfect synchrony.
    """
    arr = np.asarray(phases, dtype=float)
    if arr.size == 0:
        return 0.0
    r = float(np.abs(np.mean(np.exp(2j * np.pi * arr))))
    if not math.isfinite(r):
        return 0.0
    return min(max(r, 0.0), 1.0)


def normalized_entropy(labels: np.ndarray, n_categories: int) -> float:
    """Shannon entropy of a categorical sample, normalized by log(n_categories)."""
    labels = np.asarray(labels, dtype=int)
    if labels.size == 0 or n_categories < 2:
        return 0.0
    counts = np.bincount(labels, minlength=n_categories).astype(float)
    probs = counts[counts > 0] / labels.size
    entropy = float(-np.sum(probs * np.log(probs)))
    return safe_divide(entropy, math.log(n_categories))


def safe_derivative(x: Sequence[float], y: Sequence[float]) -> np.ndarray:
    """
    Derivative of y with respect to x at every sample.

    Interior points take the mean of the backward and forward slopes. Boundary
    points, points with non-positive spacing on either side, and any series
    shorter than three samples get 0.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = min(xs.size, ys.size)
    deriv = np.zeros(n)
    if n < 3:
        return deriv

    for i in range(1, n - 1):
        dx_back = xs[i] - xs[i - 1]
        dx_fwd = xs[i + 1] - xs[i]
        if dx_back <= 0 or dx_fwd <= 0:
            continue
        back = (ys[i] - ys[i - 1]) / dx_back
        fwd = (ys[i + 1] - ys[i]) / dx_fwd
        slope = 0.5 * (back + fwd)
        deriv[i] = slope if math.isfinite(slope) else 0.0

    return deriv


def safe_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0.0 for mismatched, short, constant or non-finite series."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size != ys.size or xs.size < 2:
        return 0.0
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        return 0.0

    dx = xs - xs.mean()
    dy = ys - ys.mean()
    denominator = math.sqrt(float(np.sum(dx * dx))) * math.sqrt(float(np.sum(dy * dy)))
    if denominator == 0.0:
        return 0.0
    r = float(np.sum(dx * dy)) / denominator
    return min(max(r, -1.0), 1.0) if math.isfinite(r) else 0.0


def sanitize_for_json(data: Any) -> Any:
    """Recursively replace NaN and infinities with 0.0, converting numpy types."""
    if isinstance(data, dict):
        return {str(k): sanitize_for_json(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [sanitize_for_json(v) for v in data]
    if isinstance(data, np.ndarray):
        return [sanitize_for_json(v) for v in data.tolist()]
    if isinstance(data, (bool, np.bool_)):
        return bool(data)
    if isinstance(data, (int, np.integer)):
        return int(data)
    if isinstance(data, (float, np.floating)):
        return finite_or_zero(data)
    return data
