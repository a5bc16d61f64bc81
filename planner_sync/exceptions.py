"""
Exceptions raised by the reconciliation pipeline.

Hierarchy:
    PlannerSyncError
      ├── CatalogError           - source catalog unreadable or malformed
      ├── MissingAssetError      - referenced asset has no file / hash (fatal, pre-write)
      ├── StoreError             - persisted store read/write failed
      └── ReconciliationAborted  - a driver phase failed, later phases skipped
"""
from typing import Iterable, List, Optional


class PlannerSyncError(Exception):
    """Base class for all reconciliation errors."""
    pass


class CatalogError(PlannerSyncError):
    """Raised when the item catalog cannot be read or fails envelope validation."""
    pass


class MissingAssetError(PlannerSyncError):
    """Raised before any write when referenced assets cannot be resolved."""

    def __init__(self, missing: Iterable[str], kind: str = "texture"):
        self.missing: List[str] = list(missing)
        self.kind = kind
        super().__init__(
            f"Missing {kind}s. A total of {len(self.missing)} {kind}s are missing: "
            f"{', '.join(self.missing)}"
        )


class StoreError(PlannerSyncError):
    """
    Raised when the persisted store fails on a read or write.

    "Not found" is never a StoreError - lookups return None for that.
    """

    def __init__(self, operation: str, key: object, message: str = ""):
        self.operation = operation
        self.key = key
        detail = f": {message}" if message else ""
        super().__init__(f"Store {operation} failed for {key!r}{detail}")


class ReconciliationAborted(PlannerSyncError):
    """Raised by the driver when a phase fails; the original error is __cause__."""

    def __init__(self, phase: str, report: Optional[object] = None):
        self.phase = phase
        self.report = report
        super().__init__(f"Reconciliation aborted during '{phase}' phase")
