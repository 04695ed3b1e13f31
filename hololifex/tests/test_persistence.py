"""Tests for the knowledge base model, its store and the report writer."""

import json
import os
import shutil
import tempfile

import numpy as np
import pytest

from hololifex.core.persistence import (
    ANOMALY_COLLAPSE,
    ANOMALY_INSTABILITY,
    DEFAULT_ANOMALY_THRESHOLDS,
    KnowledgeBase,
    KnowledgeBaseStore,
    StateCorruptionError,
    state_hash,
    write_json_report,
)


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory, cleaned up after test."""
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


# ── Load fallbacks ──────────────────────────────────────────────────────────


def test_absent_file_gives_defaults(tmp_dir):
    kb = KnowledgeBaseStore(os.path.join(tmp_dir, "missing.json")).load()
    assert kb.total_analyses == 0
    assert kb.learning_confidence == 0.0
    assert kb.thresholds(ANOMALY_COLLAPSE) == DEFAULT_ANOMALY_THRESHOLDS[ANOMALY_COLLAPSE]


def test_corrupt_json_gives_defaults(tmp_dir):
    path = os.path.join(tmp_dir, "kb.json")
    with open(path, "w") as f:
        f.write("{not json")
    kb = KnowledgeBaseStore(path).load()
    assert kb.total_analyses == 0


def test_non_utf8_file_gives_defaults(tmp_dir):
    path = os.path.join(tmp_dir, "kb.json")
    with open(path, "wb") as f:
        f.write(b"\xff\xfe\x00garbage\x80")
    kb = KnowledgeBaseStore(path).load()
    assert kb.total_analyses == 0
    assert kb.thresholds(ANOMALY_COLLAPSE) == DEFAULT_ANOMALY_THRESHOLDS[ANOMALY_COLLAPSE]


def _thresholds_doc(name, key, value):
    return {"version": "1.0", "anomaly_types": {name: {"thresholds": {key: value}}}}


@pytest.mark.parametrize("document", [
    [1, 2, 3],
    {"version": "9.0"},
    {"version": "1.0", "total_analyses": -4},
    {"version": "1.0", "max_entities_analyzed": -1},
    {"version": "1.0", "entity_range_counts": {"micro": -2}},
    {"version": "1.0", "anomaly_types": {"collapse": {"detection_count": -3}}},
    {"version": "1.0", "anomaly_types": {"collapse": {"thresholds": {"peak_threshold": "high"}}}},
    _thresholds_doc("instability", "min_points", float("nan")),
    _thresholds_doc("collapse", "drop_ratio", float("inf")),
    _thresholds_doc("persistent_decline", "ratio_threshold", -2.0),
])
def test_schema_violations_give_defaults(tmp_dir, document):
    path = os.path.join(tmp_dir, "kb.json")
    with open(path, "w") as f:
        json.dump(document, f)
    kb = KnowledgeBaseStore(path).load()
    assert kb.total_analyses == 0
    assert kb.thresholds(ANOMALY_COLLAPSE)["peak_threshold"] == 0.1


# ── Schema ──────────────────────────────────────────────────────────────────


def test_from_dict_fills_missing_thresholds():
    kb = KnowledgeBase.from_dict({
        "version": "1.0",
        "anomaly_types": {"collapse": {"thresholds": {"peak_threshold": 0.2}, "detection_count": 4}},
    })
    assert kb.thresholds(ANOMALY_COLLAPSE) == {"peak_threshold": 0.2, "drop_ratio": 0.7}
    assert kb.anomaly_types[ANOMALY_COLLAPSE].detection_count == 4
    assert ANOMALY_INSTABILITY in kb.anomaly_types


def test_from_dict_rejects_non_object():
    with pytest.raises(StateCorruptionError):
        KnowledgeBase.from_dict("nope")


@pytest.mark.parametrize("value", [float("nan"), float("-inf"), -0.5])
def test_from_dict_rejects_unusable_thresholds(value):
    with pytest.raises(StateCorruptionError):
        KnowledgeBase.from_dict(_thresholds_doc("instability", "min_points", value))


def test_from_dict_rejects_infinite_counter():
    with pytest.raises(StateCorruptionError):
        KnowledgeBase.from_dict({"version": "1.0", "total_analyses": float("inf")})


def test_record_population():
    kb = KnowledgeBase()
    kb.record_population(32, "micro")
    kb.record_population(256, "small")
    kb.record_population(16, "micro")
    assert kb.max_entities_analyzed == 256
    assert kb.entity_range_counts == {"micro": 2, "small": 1}

    restored = KnowledgeBase.from_dict(kb.to_dict())
    assert restored.max_entities_analyzed == 256
    assert restored.entity_range_counts == {"micro": 2, "small": 1}


def test_learning_confidence_saturates():
    kb = KnowledgeBase(total_analyses=4)
    assert kb.learning_confidence == pytest.approx(0.4)
    kb.total_analyses = 15
    assert kb.learning_confidence == 1.0


def test_record_detection_counts():
    kb = KnowledgeBase()
    kb.record_detection(ANOMALY_COLLAPSE)
    kb.record_detection(ANOMALY_COLLAPSE)
    assert kb.anomaly_types[ANOMALY_COLLAPSE].detection_count == 2
    assert kb.total_anomalies == 2


def test_history_bounded_per_size():
    kb = KnowledgeBase()
    for i in range(7):
        kb.append_history(32, {"run": i}, max_entries=5)
    kb.append_history(64, {"run": 0}, max_entries=5)
    assert [e["run"] for e in kb.history["32"]] == [2, 3, 4, 5, 6]
    assert len(kb.history["64"]) == 1


# ── Save ────────────────────────────────────────────────────────────────────


def test_save_and_reload(tmp_dir):
    store = KnowledgeBaseStore(os.path.join(tmp_dir, "kb.json"))
    kb = KnowledgeBase(total_analyses=3)
    kb.record_detection(ANOMALY_COLLAPSE)
    kb.append_history(16, {"peak_phi": 0.4}, max_entries=20)

    result = store.save(kb)
    assert result is not None
    assert result.size_bytes > 0
    assert len(result.state_hash) == 64
    assert kb.last_updated == result.timestamp

    loaded = store.load()
    assert loaded.total_analyses == 3
    assert loaded.total_anomalies == 1
    assert loaded.anomaly_types[ANOMALY_COLLAPSE].detection_count == 1
    assert loaded.history == {"16": [{"peak_phi": 0.4}]}
    assert loaded.to_dict() == kb.to_dict()


def test_saved_document_has_schema_fields(tmp_dir):
    path = os.path.join(tmp_dir, "kb.json")
    KnowledgeBaseStore(path).save(KnowledgeBase())
    with open(path) as f:
        data = json.load(f)
    for key in ("version", "anomaly_types", "history", "total_analyses",
                "total_anomalies", "learning_confidence"):
        assert key in data


def test_save_numpy_history_without_encoder(tmp_dir):
    kb = KnowledgeBase()
    kb.append_history(16, {"peak_phi": np.float64(0.3), "final_phi": float("nan"),
                           "snapshots": np.int64(5)}, max_entries=5)
    path = os.path.join(tmp_dir, "kb.json")
    result = KnowledgeBaseStore(path).save(kb)
    assert result is not None

    with open(path) as f:
        saved = json.load(f)
    assert saved["history"]["16"] == [{"peak_phi": 0.3, "final_phi": 0.0, "snapshots": 5}]
    assert result.state_hash == state_hash(saved)


def test_save_failure_is_not_fatal(tmp_dir):
    # The target path is a directory, so the write fails
    store = KnowledgeBaseStore(tmp_dir)
    assert store.save(KnowledgeBase()) is None


# ── Reports ─────────────────────────────────────────────────────────────────


def test_write_json_report_sanitizes(tmp_dir):
    path = os.path.join(tmp_dir, "out", "report.json")
    assert write_json_report(path, {"x": float("nan"), "y": [float("inf"), 1.0]})
    with open(path) as f:
        assert json.load(f) == {"x": 0.0, "y": [0.0, 1.0]}


def test_write_json_report_failure(tmp_dir):
    assert write_json_report(tmp_dir, {"x": 1}) is False
