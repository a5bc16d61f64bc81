"""
Reconciliation decisions, events and reports.

Decisions are produced independently per asset and per item and are never
persisted. Each applied decision emits ReconciliationEvents, which are the
structured form used for logging (what changed, old/new value, key).
"""
import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .asset import AssetRecord
from .item import ItemRecord


class DecisionKind(Enum):
    NOOP = "noop"
    CREATE = "create"
    UPDATE = "update"
    CONFLICT = "conflict"


# =============================================================================
# DECISIONS
# =============================================================================

@dataclass
class AssetDecision:
    """
    Outcome of comparing one local asset against the store.

    by_hash / by_name are the records the lookups returned; for a CONFLICT
    both are present with differing ids and both get removed.
    """
    kind: DecisionKind
    name: str
    hash: str
    by_hash: Optional[AssetRecord] = None
    by_name: Optional[AssetRecord] = None

    @property
    def removed_ids(self) -> List[int]:
        if self.kind is not DecisionKind.CONFLICT:
            return []
        return [r.id for r in (self.by_hash, self.by_name) if r is not None]


@dataclass
class FieldUpdate:
    """A single field-group update on an item row (one write)."""
    field: str
    old: Dict[str, Any]
    new: Dict[str, Any]


@dataclass
class ItemDecision:
    """
    Outcome of comparing one local item against its persisted row.

    CREATE carries the full row to insert; UPDATE carries the ordered
    per-field updates. anomalies lists fields skipped because they could
    not be derived (e.g. unmapped category).
    """
    kind: DecisionKind
    game_id: int
    record: Optional[ItemRecord] = None
    updates: List[FieldUpdate] = field(default_factory=list)
    anomalies: List[str] = field(default_factory=list)


# =============================================================================
# EVENTS / REPORTS
# =============================================================================

@dataclass
class ReconciliationEvent:
    """Structured record of one applied (or, in dry runs, planned) change."""
    phase: str
    kind: DecisionKind
    key: Any
    field_name: Optional[str] = None
    old: Any = None
    new: Any = None
    record_id: Optional[str] = None
    removed_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "phase": self.phase,
            "kind": self.kind.value,
            "key": self.key,
        }
        if self.field_name is not None:
            d["field"] = self.field_name
            d["old"] = self.old
            d["new"] = self.new
        if self.record_id is not None:
            d["record_id"] = self.record_id
        if self.removed_ids:
            d["removed_ids"] = list(self.removed_ids)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


@dataclass
class PhaseReport:
    """Counts, anomalies and timing for one reconciliation phase."""
    phase: str
    counts: Counter = field(default_factory=Counter)
    writes: int = 0
    anomalies: List[str] = field(default_factory=list)
    events: List[ReconciliationEvent] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    def count(self, kind: DecisionKind) -> int:
        return self.counts.get(kind, 0)

    def summary(self) -> str:
        parts = [f"{kind.value}={self.count(kind)}" for kind in DecisionKind]
        return (
            f"{self.phase}: {', '.join(parts)}, writes={self.writes}, "
            f"anomalies={len(self.anomalies)}, {self.elapsed_seconds:.2f}s"
        )


@dataclass
class ReconciliationReport:
    """Ordered phase reports for one full run."""
    phases: List[PhaseReport] = field(default_factory=list)
    dry_run: bool = False

    def phase(self, name: str) -> Optional[PhaseReport]:
        for report in self.phases:
            if report.phase == name:
                return report
        return None

    @property
    def total_writes(self) -> int:
        return sum(p.writes for p in self.phases)

    @property
    def elapsed_seconds(self) -> float:
        return sum(p.elapsed_seconds for p in self.phases)

    @property
    def durations(self) -> Dict[str, float]:
        return {p.phase: p.elapsed_seconds for p in self.phases}
