# ═══════════════════════════════════════════════════════════════════════════════
# PART 4: PATTERN LEARNER
# Design: A5 (Continual Learning) | Implementation: I3 (State Management)
# ═══════════════════════════════════════════════════════════════════════════════


"""
A5: "Diversity says the population explores. Repetition says it learned
something worth doing twice. The score needs both."
"""

from __future__ import annotations

from typing import Dict, Iterable

from hololifex.core.insight import InsightRecord
from hololifex.core.numerics import safe_divide


class PatternLearner:
    """
    Bounded frequency table over insight signatures.

    Once max_patterns distinct signatures are stored, novel ones are ignored.
    Known signatures keep counting.
    """

    def __init__(self, max_patterns: int = 10_000) -> None:
        if max_patterns < 0:
            raise ValueError("max_patterns must be non-negative")
        self.max_patterns = max_patterns
        self.pattern_memory: Dict[str, int] = {}
        self.discovery_count: int = 0

    @property
    def unique_patterns(self) -> int:
        return len(self.pattern_memory)

    @property
    def total_observations(self) -> int:
        return sum(self.pattern_memory.values())

    @property
    def is_full(self) -> bool:
        return len(self.pattern_memory) >= self.max_patterns

    def observe(self, signature: str) -> bool:
        """Record one observation. Returns True if it was a first-time signature."""
        if signature in self.pattern_memory:
            self.pattern_memory[signature] += 1
            return False
        if self.is_full:
            return False
        self.pattern_memory[signature] = 1
        self.discovery_count += 1
        return True

    def recognize(self, insights: Iterable[InsightRecord]) -> int:
        """Observe a step's insight batch. Returns the number of new signatures."""
        return sum(1 for insight in insights if self.observe(insight.signature))

    def score(self) -> float:
        if not self.pattern_memory:
            return 0.0

        unique = len(self.pattern_memory)
        diversity = safe_divide(unique, self.total_observations)
        repeated = sum(1 for count in self.pattern_memory.values() if count > 1)
        repetition = safe_divide(repeated, unique)

        score = (0.6 * diversity + 0.4 * repetition) * min(unique / 10, 1.0)
        return min(score, 1.0)
