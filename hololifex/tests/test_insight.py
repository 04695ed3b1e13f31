"""Tests for InsightRecord and InsightGenerator."""

import numpy as np
import pytest

from hololifex.core.entity import Domain, OscillatorEntity
from hololifex.core.insight import (
    DOMAIN_VERBS,
    InsightConfig,
    InsightGenerator,
    InsightRecord,
    action_complexity,
)


def _entity(entity_id=0, domain=Domain.CREATIVE, phase=0.5, reasoning=0.5, awareness=0.5):
    return OscillatorEntity(
        entity_id, domain, phase=phase, natural_frequency=0.02,
        reasoning_capacity=reasoning, awareness_level=awareness,
    )


ALWAYS = InsightConfig(base_probability=1.0, phase_slope=0.0)


# ── Complexity ──────────────────────────────────────────────────────────────


@pytest.mark.parametrize("verb,tier", [
    ("generate", 3),
    ("coordinate", 3),
    ("optimize", 2),
    ("synchronize", 2),
    ("balance", 2),
    ("analyze", 1),
    ("validate", 1),
    ("wander", 1),
])
def test_action_complexity(verb, tier):
    assert action_complexity(verb) == tier


def test_complexity_priority_order():
    # Highest tier keyword wins regardless of position in the label
    assert action_complexity("optimize_then_integrate") == 3
    assert action_complexity("monitor_sync") == 2


# ── Record ──────────────────────────────────────────────────────────────────


def test_record_validation():
    with pytest.raises(ValueError):
        InsightRecord(0, "physical", "analyze_flows_optimally", 0.5, complexity=4)
    with pytest.raises(ValueError):
        InsightRecord(0, "physical", "", 0.5, complexity=1)
    with pytest.raises(ValueError):
        InsightRecord(0, "physical", "analyze", float("nan"), complexity=1)


def test_record_signature_and_verb():
    record = InsightRecord(3, "social", "coordinate_systems_holistically", 0.6, complexity=3)
    assert record.verb == "coordinate"
    assert record.signature == "social:coordinate_systems_holistically"


# ── Generator ───────────────────────────────────────────────────────────────


def test_no_insights_without_coherence():
    gen = InsightGenerator(np.random.default_rng(0))
    phases = np.arange(8) / 8.0
    for _ in range(50):
        assert gen.generate(_entity(), phases) is None


def test_generated_fields():
    gen = InsightGenerator(np.random.default_rng(0), ALWAYS)
    entity = _entity(domain=Domain.SOCIAL, reasoning=0.9, awareness=0.6)
    insight = gen.generate(entity, [0.5, 0.5, 0.5])

    assert insight is not None
    assert insight.entity_id == entity.entity_id
    assert insight.domain == "social"
    assert insight.verb in DOMAIN_VERBS[Domain.SOCIAL]
    assert insight.complexity == action_complexity(insight.verb)
    assert insight.reasoning_enhanced
    assert not insight.awareness_enhanced
    assert insight.network_synchronized
    assert insight.phase_coherence == pytest.approx(1.0)


def test_confidence_blend():
    gen = InsightGenerator(np.random.default_rng(0), ALWAYS)
    insight = gen.generate(_entity(phase=0.5, reasoning=0.5, awareness=0.5), [0.5, 0.5])
    expected = 0.3 * 0.5 + 0.3 * 1.0 + 0.2 * 0.5 + 0.2 * 0.5
    assert insight.confidence == pytest.approx(expected, abs=1e-4)


def test_batch_one_attempt_per_entity():
    gen = InsightGenerator(np.random.default_rng(0), ALWAYS)
    entities = [_entity(i) for i in range(6)]
    insights = gen.generate_batch(entities, [0.2] * 6)
    assert [i.entity_id for i in insights] == list(range(6))


def test_same_seed_same_stream():
    entities = [_entity(i, domain=list(Domain)[i % 8], phase=0.1 * i) for i in range(8)]
    phases = [0.1, 0.12, 0.15, 0.11, 0.13, 0.1, 0.14, 0.12]

    def run(seed):
        gen = InsightGenerator(np.random.default_rng(seed))
        out = []
        for _ in range(20):
            out.extend(i.to_dict() for i in gen.generate_batch(entities, phases))
        return out

    assert run(5) == run(5)
    assert len(run(5)) > 0
