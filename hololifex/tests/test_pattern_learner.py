"""Tests for PatternLearner."""

import pytest

from hololifex.core.insight import InsightRecord
from hololifex.core.pattern_learner import PatternLearner


def test_first_observation_is_discovery():
    learner = PatternLearner()
    assert learner.observe("physical:analyze_flows_optimally")
    assert not learner.observe("physical:analyze_flows_optimally")
    assert learner.discovery_count == 1
    assert learner.pattern_memory["physical:analyze_flows_optimally"] == 2


def test_cap_ignores_novel_signatures():
    learner = PatternLearner(max_patterns=3)
    for i in range(5):
        learner.observe(f"sig{i}")
    assert learner.unique_patterns == 3
    assert learner.discovery_count == 3
    assert learner.is_full
    assert "sig4" not in learner.pattern_memory

    # Known signatures still count
    learner.observe("sig0")
    assert learner.pattern_memory["sig0"] == 2


def test_recognize_counts_new():
    learner = PatternLearner()
    insights = [
        InsightRecord(0, "social", "share_flows_adaptively", 0.5, 1),
        InsightRecord(1, "social", "share_flows_adaptively", 0.5, 1),
        InsightRecord(2, "creative", "generate_systems_emergently", 0.5, 3),
    ]
    assert learner.recognize(insights) == 2
    assert learner.recognize(insights) == 0
    assert learner.total_observations == 6


def test_score_empty():
    assert PatternLearner().score() == 0.0


def test_score_all_unique():
    learner = PatternLearner()
    for i in range(10):
        learner.observe(f"sig{i}")
    assert learner.score() == pytest.approx(0.6)


def test_score_bounded():
    learner = PatternLearner()
    for i in range(40):
        learner.observe(f"sig{i % 13}")
    assert 0.0 <= learner.score() <= 1.0


def test_negative_cap_rejected():
    with pytest.raises(ValueError):
        PatternLearner(max_patterns=-1)
