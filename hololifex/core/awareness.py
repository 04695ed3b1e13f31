# ═══════════════════════════════════════════════════════════════════════════════
# PART 7: AWARENESS MONITOR
# Design: N5 (Embodied Cognition) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════


"""
N5: "Awareness is the population noticing its own synchrony. Read the order
parameter every step and keep only the last few readings."

I2: "Level is the window mean. Stability is one minus the window spread, and
it stays at zero until the window has filled."
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Sequence

import numpy as np

from hololifex.core.numerics import phase_coherence


class AwarenessMonitor:
    """
    Tracks recent coherence as an awareness signal.

    Level is the mean of the last `window` scores (0.5 before any update).
    Stability is 1 - std of that window once it is full.
    """

    def __init__(self, window: int = 5, history_length: int = 100) -> None:
        self.window = window
        self.scores: Deque[float] = deque(maxlen=history_length)

    def update(self, phases: Sequence[float]) -> float:
        if len(phases) == 0:
            score = 0.5
        else:
            score = phase_coherence(phases)
        self.scores.append(score)
        return score

    @property
    def level(self) -> float:
        if not self.scores:
            return 0.5
        recent = list(self.scores)[-self.window:]
        return float(np.mean(recent))

    @property
    def stability(self) -> float:
        if len(self.scores) < self.window:
            return 0.0
        recent = list(self.scores)[-self.window:]
        return float(1.0 - np.std(recent))
