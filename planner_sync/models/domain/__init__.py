"""
Domain Models - Storage-agnostic data structures

These models represent local sources and persisted rows independent of
the storage layer. Reconcilers operate on these models, not raw rows.

Architecture:
- Domain models are pure Python objects (dataclasses)
- Storage details (PostgreSQL) are abstracted via repositories
- Decisions are computed from models, then applied through repositories
"""

from .category import ItemCategory
from .asset import AssetKind, LocalAsset, AssetRecord
from .item import LocalItem, ItemRecord
from .decision import (
    DecisionKind,
    AssetDecision,
    FieldUpdate,
    ItemDecision,
    ReconciliationEvent,
    PhaseReport,
    ReconciliationReport,
)

__all__ = [
    # Catalog
    'ItemCategory',
    'LocalItem',
    'ItemRecord',

    # Assets
    'AssetKind',
    'LocalAsset',
    'AssetRecord',

    # Decisions
    'DecisionKind',
    'AssetDecision',
    'FieldUpdate',
    'ItemDecision',

    # Reporting
    'ReconciliationEvent',
    'PhaseReport',
    'ReconciliationReport',
]
