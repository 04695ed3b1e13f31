# ═══════════════════════════════════════════════════════════════════════════════
# PART 8: PERSISTENCE
# Design: I3 (State Management) + S2 (Distributed Systems)
# Implementation: I3 (State Management)
# ═══════════════════════════════════════════════════════════════════════════════


"""
I3: "Only the knowledge base survives the process. One JSON document, read
at optimizer start, rewritten once at sweep end. The schema is the contract;
where it is stored is not."

S2: "A missing or mangled file is not a crash. Fall back to compiled-in
defaults and say so in the log. A failed write loses durability, never the
in-memory results."
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from hololifex.core.numerics import sanitize_for_json

logger = logging.getLogger(__name__)


KNOWLEDGE_BASE_VERSION = "1.0"

ANOMALY_COLLAPSE = "collapse"
ANOMALY_INSTABILITY = "instability"
ANOMALY_PERSISTENT_DECLINE = "persistent_decline"

DEFAULT_ANOMALY_THRESHOLDS: Dict[str, Dict[str, float]] = {
    ANOMALY_COLLAPSE: {"peak_threshold": 0.1, "drop_ratio": 0.7},
    ANOMALY_INSTABILITY: {"volatility_threshold": 0.15, "min_points": 3},
    ANOMALY_PERSISTENT_DECLINE: {"derivative_threshold": 0.005, "ratio_threshold": 2.0},
}

ANOMALY_DESCRIPTIONS: Dict[str, str] = {
    ANOMALY_COLLAPSE: "Phi peaks and then falls well below its peak by run end",
    ANOMALY_INSTABILITY: "Meta-cognitive score is volatile across snapshots",
    ANOMALY_PERSISTENT_DECLINE: "Falling Phi slopes outnumber rising ones",
}


# ── Exceptions ───────────────────────────────────────────────────────────────


class PersistenceError(Exception):
    """Base class for persistence errors."""
    pass


class StateCorruptionError(PersistenceError):
    """Raised when saved state is corrupted or invalid."""
    pass


# ── Knowledge base ───────────────────────────────────────────────────────────


@dataclass
class AnomalyParameters:
    """Detection thresholds and lifetime count for one anomaly type."""
    thresholds: Dict[str, float]
    detection_count: int = 0
    description: str = ""


def _default_anomaly_types() -> Dict[str, AnomalyParameters]:
    return {
        name: AnomalyParameters(
            thresholds=dict(thresholds),
            description=ANOMALY_DESCRIPTIONS[name],
        )
        for name, thresholds in DEFAULT_ANOMALY_THRESHOLDS.items()
    }


@dataclass
class KnowledgeBase:
    """
    Cross-run learning state of the trajectory optimizer.

    history maps a population size (as a string key) to its most recent
    per-run entries, oldest first.
    """
    version: str = KNOWLEDGE_BASE_VERSION
    anomaly_types: Dict[str, AnomalyParameters] = field(default_factory=_default_anomaly_types)
    history: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    total_analyses: int = 0
    total_anomalies: int = 0
    max_entities_analyzed: int = 0
    entity_range_counts: Dict[str, int] = field(default_factory=dict)
    created: str = field(default_factory=lambda: datetime.now().isoformat())
    last_updated: Optional[str] = None

    @property
    def learning_confidence(self) -> float:
        return min(1.0, self.total_analyses / 10.0)

    def thresholds(self, anomaly_type: str) -> Dict[str, float]:
        return self.anomaly_types[anomaly_type].thresholds

    def record_detection(self, anomaly_type: str) -> None:
        self.anomaly_types[anomaly_type].detection_count += 1
        self.total_anomalies += 1

    def record_population(self, entity_count: int, range_name: str) -> None:
        """Track the largest population seen and how often each range was run."""
        self.max_entities_analyzed = max(self.max_entities_analyzed, int(entity_count))
        self.entity_range_counts[range_name] = self.entity_range_counts.get(range_name, 0) + 1

    def append_history(self, entity_count: int, entry: Dict[str, Any], max_entries: int) -> None:
        series = self.history.setdefault(str(entity_count), [])
        series.append(entry)
        if len(series) > max_entries:
            del series[: len(series) - max_entries]

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "created": self.created,
            "last_updated": self.last_updated,
            "anomaly_types": {
                name: {
                    "description": params.description,
                    "thresholds": dict(params.thresholds),
                    "detection_count": params.detection_count,
                }
                for name, params in self.anomaly_types.items()
            },
            "history": copy.deepcopy(self.history),
            "total_analyses": self.total_analyses,
            "total_anomalies": self.total_anomalies,
            "max_entities_analyzed": self.max_entities_analyzed,
            "entity_range_counts": dict(self.entity_range_counts),
            "learning_confidence": self.learning_confidence,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "KnowledgeBase":
        """
        Rebuild from a decoded JSON document.

        Unknown anomaly types are kept; missing ones get defaults. Missing
        thresholds inside a known type are filled from the defaults. Every
        threshold must be finite and non-negative.

        Raises:
            StateCorruptionError: If the document does not match the schema.
        """
        if not isinstance(data, dict):
            raise StateCorruptionError("knowledge base must be a JSON object")

        version = str(data.get("version", ""))
        if version.split(".")[0] != KNOWLEDGE_BASE_VERSION.split(".")[0]:
            raise StateCorruptionError(f"Unsupported knowledge base version: {version!r}")

        try:
            total_analyses = int(data.get("total_analyses", 0))
            total_anomalies = int(data.get("total_anomalies", 0))

            max_entities_analyzed = int(data.get("max_entities_analyzed", 0))
            entity_range_counts = {
                str(k): int(v) for k, v in dict(data.get("entity_range_counts", {})).items()
            }

            anomaly_types = _default_anomaly_types()
            for name, raw in dict(data.get("anomaly_types", {})).items():
                thresholds = dict(DEFAULT_ANOMALY_THRESHOLDS.get(name, {}))
                for key, value in dict(raw.get("thresholds", {})).items():
                    value = float(value)
                    if not math.isfinite(value) or value < 0:
                        raise StateCorruptionError(
                            f"threshold {name}.{key} must be finite and non-negative, got {value}"
                        )
                    thresholds[key] = value
                anomaly_types[name] = AnomalyParameters(
                    thresholds=thresholds,
                    detection_count=int(raw.get("detection_count", 0)),
                    description=str(raw.get("description", ANOMALY_DESCRIPTIONS.get(name, ""))),
                )

            history = {
                str(size): [dict(entry) for entry in entries]
                for size, entries in dict(data.get("history", {})).items()
            }
        except (TypeError, ValueError, AttributeError, OverflowError) as e:
            raise StateCorruptionError(f"Malformed knowledge base: {e}") from e

        if total_analyses < 0 or total_anomalies < 0 or max_entities_analyzed < 0:
            raise StateCorruptionError("lifetime counters must be non-negative")
        if any(p.detection_count < 0 for p in anomaly_types.values()):
            raise StateCorruptionError("detection counts must be non-negative")
        if any(count < 0 for count in entity_range_counts.values()):
            raise StateCorruptionError("entity range counts must be non-negative")

        return cls(
            version=version,
            anomaly_types=anomaly_types,
            history=history,
            total_analyses=total_analyses,
            total_anomalies=total_anomalies,
            max_entities_analyzed=max_entities_analyzed,
            entity_range_counts=entity_range_counts,
            created=str(data.get("created", datetime.now().isoformat())),
            last_updated=data.get("last_updated"),
        )


# ── Result dataclass ─────────────────────────────────────────────────────────


@dataclass
class SaveResult:
    path: str
    state_hash: str
    timestamp: str
    size_bytes: int


# ── Store ────────────────────────────────────────────────────────────────────


def state_hash(data: dict) -> str:
    """SHA-256 over the canonical JSON form."""
    payload = json.dumps(data, sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()


class KnowledgeBaseStore:
    """Single-document JSON store for the knowledge base."""

    def __init__(self, path: str = "trajectory_knowledge_base.json") -> None:
        self.path = Path(path)

    def load(self) -> KnowledgeBase:
        """Load the knowledge base, or defaults if absent or unreadable."""
        if not self.path.exists():
            logger.info("No knowledge base at %s; starting from defaults", self.path)
            return KnowledgeBase()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return KnowledgeBase.from_dict(data)
        except (OSError, ValueError, StateCorruptionError) as e:
            logger.warning("Knowledge base %s unusable (%s); starting from defaults", self.path, e)
            return KnowledgeBase()

    def save(self, knowledge_base: KnowledgeBase) -> Optional[SaveResult]:
        """Write the knowledge base. Returns None if the write failed."""
        saved_at = datetime.now().isoformat()
        knowledge_base.last_updated = saved_at
        data = sanitize_for_json(knowledge_base.to_dict())

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            size = self.path.stat().st_size
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Knowledge base save to %s failed (non-critical): %s", self.path, e)
            return None

        logger.info("Knowledge base saved to %s", self.path)
        return SaveResult(
            path=str(self.path),
            state_hash=state_hash(data),
            timestamp=saved_at,
            size_bytes=size,
        )


def write_json_report(path: str, data: Any) -> bool:
    """Write one sanitized JSON document. Failures are logged, not raised."""
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(sanitize_for_json(data), f, indent=2)
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Could not write %s: %s", file_path, e)
        return False
    return True
