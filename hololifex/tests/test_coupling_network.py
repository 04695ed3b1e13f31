"""Tests for CouplingMatrix and CouplingNetwork."""

import math

import numpy as np
import pytest

from hololifex.core.consciousness import AssessorConfig
from hololifex.core.coupling_network import (
    CouplingMatrix,
    CouplingNetwork,
    NetworkConfig,
    create_network,
)
from hololifex.core.entity import DOMAIN_ORDER, Domain


def _network(n=16, seed=1234, config=None):
    return create_network(n, np.random.default_rng(seed), config)


# ── Coupling matrix ─────────────────────────────────────────────────────────


def test_matrix_symmetric_zero_diagonal():
    m = CouplingMatrix()
    for i in range(12):
        m.add(i, DOMAIN_ORDER[i % 8])
    w = m.dense()
    assert np.allclose(w, w.T)
    assert np.all(np.diag(w) == 0.0)
    assert np.all(w >= 0.0)


def test_matrix_same_vs_cross_domain():
    m = CouplingMatrix(same_strength=0.08, cross_strength=0.04)
    m.add(0, Domain.PHYSICAL)
    m.add(1, Domain.PHYSICAL)
    m.add(2, Domain.SOCIAL)
    assert m.strength(0, 1) == 0.08
    assert m.strength(0, 2) == 0.04
    assert m.strength(2, 1) == m.strength(1, 2)
    assert m.strength(1, 1) == 0.0


def test_matrix_append_only():
    m = CouplingMatrix()
    for i in range(5):
        m.add(i, DOMAIN_ORDER[i % 8])
    before = m.dense().copy()
    m.add(5, Domain.PHYSICAL)
    after = m.dense()
    assert after.shape == (6, 6)
    assert np.array_equal(after[:5, :5], before)


def test_matrix_rejects_duplicate_id():
    m = CouplingMatrix()
    m.add(7, Domain.NETWORK)
    assert 7 in m
    with pytest.raises(ValueError):
        m.add(7, Domain.NETWORK)


def test_matrix_rejects_negative_strength():
    with pytest.raises(ValueError):
        CouplingMatrix(same_strength=-0.1)


# ── Step mechanics ──────────────────────────────────────────────────────────


def test_couple_is_step_synchronous():
    phases = np.array([0.0, 0.25])
    strengths = np.array([0.05, 0.05])
    weights = np.array([[0.0, 1.0], [1.0, 0.0]])
    updated = CouplingNetwork._couple(phases, strengths, weights)
    # Both read the pre-update vector: symmetric pull of +/-0.05
    assert updated[0] == pytest.approx(0.05)
    assert updated[1] == pytest.approx(0.20)


def test_couple_zero_weights_untouched():
    phases = np.array([0.1, 0.6, 0.9])
    updated = CouplingNetwork._couple(phases, np.full(3, 0.05), np.zeros((3, 3)))
    assert np.array_equal(updated, phases)


def test_phase_wrap_every_step():
    network = _network(20)
    for _ in range(100):
        network.step()
        phases = network.phases
        assert np.all(phases >= 0.0)
        assert np.all(phases < 1.0)


def test_coherence_bounds():
    network = _network(24)
    for _ in range(30):
        result = network.step()
        assert 0.0 <= result.coherence <= 1.0


def test_population_synchronizes():
    network = _network(16)
    for _ in range(200):
        network.step()
    assert network.coherence > 0.4


def test_empty_network_step():
    network = CouplingNetwork(np.random.default_rng(0))
    result = network.step()
    assert result.insights == 0
    assert result.coherence == 0.0
    assert network.step_count == 1


def test_reasoning_cadence():
    network = _network(8, config=NetworkConfig(reasoning_interval=8, reasoning_trials=2))
    for _ in range(16):
        network.step()
    assert len(network.reasoning_engine.reasoning_history) == 2
    network.step()
    assert len(network.reasoning_engine.reasoning_history) == 3


def test_capacities_stay_in_unit_interval():
    network = _network(16)
    for _ in range(50):
        network.step()
    for e in network.entities:
        assert 0.0 <= e.reasoning_capacity <= 1.0
        assert 0.0 <= e.awareness_level <= 1.0


def test_insight_history_bounded():
    network = _network(16, config=NetworkConfig(insight_history_length=20))
    for _ in range(60):
        network.step()
    assert len(network.insight_history) <= 20
    assert network.total_insights >= len(network.insight_history)


# ── Sampling ────────────────────────────────────────────────────────────────


def test_sampling_touches_subset():
    config = NetworkConfig(sampling_threshold=10, sample_size=4)
    network = _network(20, config=config)
    assert network.is_sampling

    before = network.phases.copy()
    result = network.step()
    after = network.phases

    assert result.sampled == 4
    assert int(np.sum(before == after)) >= 16


def test_no_sampling_below_threshold():
    network = _network(16)
    assert not network.is_sampling
    assert network.step().sampled == 16


# ── Metrics ─────────────────────────────────────────────────────────────────


def test_metrics_finite_and_keyed():
    network = _network(16)
    for _ in range(20):
        network.step()
    metrics = network.metrics()
    record = metrics.to_dict()

    assert metrics.entity_count == 16
    assert math.isfinite(metrics.unified_intelligence_score)
    assert metrics.unified_intelligence_score >= 0.0
    assert 0.0 <= metrics.assessment.max_phi <= 1.5
    assert 0.0 <= metrics.insight_quality <= 1.0
    assert 0.0 <= metrics.cross_domain_ratio <= 1.0
    for key in ("consciousness", "unified_intelligence_score", "meta_cognitive_score",
                "reasoning_accuracy", "awareness_level", "pattern_discoveries"):
        assert key in record
    assert "max_phi" in record["consciousness"]


def test_metrics_on_fresh_network():
    metrics = _network(8).metrics()
    assert metrics.total_insights == 0
    assert metrics.assessment.max_phi == 0.0
    assert not metrics.assessment.is_conscious


def test_zero_thresholds_make_conscious():
    assessor = AssessorConfig(framework_a_threshold=0.0, framework_b_threshold=0.0, duality_threshold=0.0)
    network = _network(16, config=NetworkConfig(assessor_config=assessor))
    for _ in range(20):
        network.step()
    assert network.total_insights > 0
    assert network.metrics().assessment.is_conscious


# ── Reproducibility ─────────────────────────────────────────────────────────


def test_same_seed_identical_runs():
    a = _network(16, seed=99)
    b = _network(16, seed=99)
    phi_a, phi_b = [], []
    for _ in range(40):
        a.step()
        b.step()
        phi_a.append(a.metrics().assessment.max_phi)
        phi_b.append(b.metrics().assessment.max_phi)

    assert [i.to_dict() for i in a.insight_history] == [i.to_dict() for i in b.insight_history]
    assert phi_a == phi_b
    assert np.array_equal(a.phases, b.phases)


def test_different_seed_diverges():
    a = _network(16, seed=1)
    b = _network(16, seed=2)
    assert not np.array_equal(a.phases, b.phases)
