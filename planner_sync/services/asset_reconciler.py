"""
Asset Reconciler - brings a texture or weather table in line with local files.

Per distinct asset name, two lookups (by content hash, by name) decide:

    hash match + name match, same row   -> NOOP
    hash match + name match, other rows -> CONFLICT: delete both, insert fresh
    name match only                     -> UPDATE hash + contents in place
    no name match                       -> CREATE with a new snowflake id

The hash lookup prefers the row carrying the asset's own name, so a name
whose bytes are shared with another asset resolves to itself. A hash match
with no name match means the bytes are already on file under another name;
the name still gets its own row. When the hash-matched row belongs to
another asset in the same pass, the content is shared rather than
conflicting, and only the named row is updated.

Decisions are applied one at a time, in input order.
"""
import logging
import time
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional

from ..models.domain import (
    AssetDecision,
    AssetRecord,
    DecisionKind,
    LocalAsset,
    PhaseReport,
    ReconciliationEvent,
)
from ..utils.id_generator import SnowflakeGenerator

logger = logging.getLogger(__name__)


class ConflictPolicy(Enum):
    """Which id the reinserted row gets when repairing a conflict."""
    FRESH = "fresh"
    PREFER_HASH_MATCH = "prefer_hash_match"


def dedupe_by_name(assets: Iterable[LocalAsset]) -> List[LocalAsset]:
    """Keep the first asset seen for each name."""
    seen = {}
    for asset in assets:
        first = seen.get(asset.name)
        if first is None:
            seen[asset.name] = asset
        elif first.hash != asset.hash:
            logger.warning(
                f"Duplicate asset name {asset.name!r} with differing contents, "
                f"keeping {first.hash}"
            )
    return list(seen.values())


def decide_asset(
    local: LocalAsset,
    by_hash: Optional[AssetRecord],
    by_name: Optional[AssetRecord],
    local_names: AbstractSet[str] = frozenset(),
) -> AssetDecision:
    """
    Pure decision for one asset given both lookup results.

    local_names holds every asset name in the current pass. A hash match on
    a row owned by one of those names is shared content, not a conflict:
    the named row is updated and the other row is left alone.
    """
    if by_hash is not None and by_name is not None:
        if by_hash.id == by_name.id:
            kind = DecisionKind.NOOP
        elif by_hash.name in local_names:
            kind = DecisionKind.UPDATE
        else:
            kind = DecisionKind.CONFLICT
    elif by_name is not None:
        kind = DecisionKind.UPDATE
    else:
        kind = DecisionKind.CREATE

    return AssetDecision(kind=kind, name=local.name, hash=local.hash, by_hash=by_hash, by_name=by_name)


class AssetReconciler:
    """
    Reconciles one asset table.

    Args:
        repository: AssetRepository (or any object with the same methods)
        id_generator: Snowflake source for new rows
        phase: Phase name used in events and reports
        conflict_policy: Id to use when reinserting after a conflict
        apply: False for a dry run - decide and report, write nothing
    """

    def __init__(
        self,
        repository,
        id_generator: SnowflakeGenerator,
        phase: str = "textures",
        conflict_policy: ConflictPolicy = ConflictPolicy.FRESH,
        apply: bool = True,
    ):
        self.repository = repository
        self.id_generator = id_generator
        self.phase = phase
        self.conflict_policy = conflict_policy
        self.apply = apply

    async def reconcile(self, assets: Iterable[LocalAsset]) -> PhaseReport:
        report = PhaseReport(phase=self.phase)
        start = time.time()

        assets = dedupe_by_name(assets)
        local_names = frozenset(asset.name for asset in assets)
        for asset in assets:
            decision = await self.decide(asset, local_names)
            await self.apply_decision(asset, decision, report)

        report.elapsed_seconds = time.time() - start
        logger.info(f"✅ {report.summary()}")
        return report

    async def decide(self, asset: LocalAsset, local_names: AbstractSet[str] = frozenset()) -> AssetDecision:
        by_hash = await self.repository.get_by_hash(asset.hash, prefer_name=asset.name)
        by_name = await self.repository.get_by_name(asset.name)
        return decide_asset(asset, by_hash, by_name, local_names)

    async def apply_decision(self, asset: LocalAsset, decision: AssetDecision, report: PhaseReport) -> None:
        report.counts[decision.kind] += 1

        if decision.kind is DecisionKind.NOOP:
            return

        if decision.kind is DecisionKind.CREATE:
            event = await self._create(asset)
        elif decision.kind is DecisionKind.UPDATE:
            event = await self._update(asset, decision.by_name)
        else:
            event = await self._repair_conflict(asset, decision)

        if self.apply:
            report.writes += 1
        report.events.append(event)

        log = logger.warning if decision.kind is DecisionKind.CONFLICT else logger.info
        log(event.to_json())

    async def _create(self, asset: LocalAsset) -> ReconciliationEvent:
        record = AssetRecord(id=self.id_generator.next_id(), name=asset.name, hash=asset.hash, contents=asset.contents)
        if self.apply:
            await self.repository.create(record)

        return ReconciliationEvent(
            phase=self.phase,
            kind=DecisionKind.CREATE,
            key=asset.name,
            field_name="hash",
            new=asset.hash,
            record_id=str(record.id),
        )

    async def _update(self, asset: LocalAsset, existing: AssetRecord) -> ReconciliationEvent:
        if self.apply:
            await self.repository.update_contents(existing.id, asset.hash, asset.contents)

        return ReconciliationEvent(
            phase=self.phase,
            kind=DecisionKind.UPDATE,
            key=asset.name,
            field_name="hash",
            old=existing.hash,
            new=asset.hash,
            record_id=str(existing.id),
        )

    async def _repair_conflict(self, asset: LocalAsset, decision: AssetDecision) -> ReconciliationEvent:
        if self.conflict_policy is ConflictPolicy.PREFER_HASH_MATCH:
            new_id = decision.by_hash.id
        else:
            new_id = self.id_generator.next_id()

        if self.apply:
            for asset_id in decision.removed_ids:
                await self.repository.delete(asset_id)
            await self.repository.create(
                AssetRecord(id=new_id, name=asset.name, hash=asset.hash, contents=asset.contents)
            )

        return ReconciliationEvent(
            phase=self.phase,
            kind=DecisionKind.CONFLICT,
            key=asset.name,
            field_name="hash",
            old=decision.by_name.hash,
            new=asset.hash,
            record_id=str(new_id),
            removed_ids=[str(i) for i in decision.removed_ids],
        )
