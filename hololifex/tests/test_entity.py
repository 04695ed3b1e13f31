"""Tests for OscillatorEntity and create_entity."""

import numpy as np
import pytest

from hololifex.core.entity import (
    DOMAIN_ORDER,
    Domain,
    EntityConfig,
    OscillatorEntity,
    create_entity,
)


def test_round_robin_domains():
    rng = np.random.default_rng(1)
    entities = [create_entity(i, rng) for i in range(16)]
    assert [e.domain for e in entities] == [DOMAIN_ORDER[i % 8] for i in range(16)]


def test_natural_frequency_range():
    rng = np.random.default_rng(2)
    for i in range(50):
        e = create_entity(i, rng)
        assert 0.01 <= e.natural_frequency <= 0.04


def test_initial_state_defaults():
    e = create_entity(0, np.random.default_rng(3))
    assert 0.0 <= e.phase < 1.0
    assert e.reasoning_capacity == 0.5
    assert e.awareness_level == 0.5
    assert e.coupling_strength == 0.05


def test_explicit_domain_and_config():
    cfg = EntityConfig(coupling_strength=0.1, initial_awareness=0.9)
    e = create_entity(5, np.random.default_rng(4), domain=Domain.SOCIAL, config=cfg)
    assert e.domain == Domain.SOCIAL
    assert e.coupling_strength == 0.1
    assert e.awareness_level == 0.9


def test_same_seed_same_entity():
    a = create_entity(3, np.random.default_rng(42))
    b = create_entity(3, np.random.default_rng(42))
    assert a.to_dict() == b.to_dict()


# ── Validation ──────────────────────────────────────────────────────────────


def test_phase_wrapped_on_construction():
    e = OscillatorEntity(0, Domain.PHYSICAL, phase=1.25, natural_frequency=0.02)
    assert e.phase == pytest.approx(0.25)


def test_capacities_clamped():
    e = OscillatorEntity(
        0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02,
        reasoning_capacity=1.7, awareness_level=-0.3,
    )
    assert e.reasoning_capacity == 1.0
    assert e.awareness_level == 0.0


def test_domain_string_coerced():
    e = OscillatorEntity(0, "creative", phase=0.1, natural_frequency=0.02)
    assert e.domain == Domain.CREATIVE


def test_invalid_fields_raise():
    with pytest.raises(ValueError):
        OscillatorEntity(-1, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02)
    with pytest.raises(ValueError):
        OscillatorEntity(0, Domain.PHYSICAL, phase=float("nan"), natural_frequency=0.02)
    with pytest.raises(ValueError):
        OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.0)
    with pytest.raises(ValueError):
        OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02, coupling_strength=-1)


# ── Capability updates ──────────────────────────────────────────────────────


def test_learn_reasoning_ema():
    e = OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02)
    e.learn_reasoning(1.0)
    assert e.reasoning_capacity == pytest.approx(0.65)


def test_learn_reasoning_ignores_zero_score():
    e = OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02)
    e.learn_reasoning(0.0)
    assert e.reasoning_capacity == 0.5


def test_absorb_awareness_ema():
    e = OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02)
    e.absorb_awareness(1.0)
    assert e.awareness_level == pytest.approx(0.6)


def test_capacities_stay_clamped():
    e = OscillatorEntity(0, Domain.PHYSICAL, phase=0.1, natural_frequency=0.02)
    for _ in range(100):
        e.learn_reasoning(5.0)
        e.absorb_awareness(5.0)
    assert e.reasoning_capacity <= 1.0
    assert e.awareness_level <= 1.0
