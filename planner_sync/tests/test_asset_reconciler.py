"""
Test: Asset Reconciler

Decision table per asset:
    hash + name match, same row   -> NOOP
    hash + name match, other rows -> CONFLICT (delete both, reinsert),
                                     or UPDATE when the hash row is another local asset
    name match only               -> UPDATE in place
    no name match                 -> CREATE
"""

import pytest

from planner_sync.models.domain import AssetRecord, DecisionKind, LocalAsset
from planner_sync.services.asset_reconciler import (
    AssetReconciler,
    ConflictPolicy,
    decide_asset,
    dedupe_by_name,
)
from planner_sync.utils.hashing import content_hash

from conftest import InMemoryAssetStore, make_asset

H1 = content_hash(b"one")
H2 = content_hash(b"two")


# =============================================================================
# decide_asset
# =============================================================================

class TestDecideAsset:

    def test_same_row_is_noop(self):
        record = AssetRecord(id=1, name="x", hash=H1)
        decision = decide_asset(make_asset("x", b"one"), record, record)
        assert decision.kind is DecisionKind.NOOP
        assert decision.removed_ids == []

    def test_different_rows_is_conflict(self):
        by_hash = AssetRecord(id=2, name="y", hash=H2)
        by_name = AssetRecord(id=1, name="x", hash=H1)
        decision = decide_asset(make_asset("x", b"two"), by_hash, by_name)
        assert decision.kind is DecisionKind.CONFLICT
        assert decision.removed_ids == [2, 1]

    def test_name_only_is_update(self):
        decision = decide_asset(make_asset("x", b"two"), None, AssetRecord(id=1, name="x", hash=H1))
        assert decision.kind is DecisionKind.UPDATE

    def test_nothing_found_is_create(self):
        assert decide_asset(make_asset("x", b"one"), None, None).kind is DecisionKind.CREATE

    def test_hash_only_is_create(self):
        decision = decide_asset(make_asset("x", b"one"), AssetRecord(id=9, name="other", hash=H1), None)
        assert decision.kind is DecisionKind.CREATE

    def test_hash_owned_by_another_local_asset_is_update(self):
        by_hash = AssetRecord(id=2, name="y", hash=H2)
        by_name = AssetRecord(id=1, name="x", hash=H1)
        decision = decide_asset(make_asset("x", b"two"), by_hash, by_name, frozenset({"x", "y"}))
        assert decision.kind is DecisionKind.UPDATE
        assert decision.removed_ids == []


def test_dedupe_keeps_first_per_name():
    assets = [make_asset("a", b"1"), make_asset("b", b"2"), make_asset("a", b"3")]
    deduped = dedupe_by_name(assets)
    assert [a.name for a in deduped] == ["a", "b"]
    assert deduped[0].contents == b"1"


# =============================================================================
# AssetReconciler against an in-memory store
# =============================================================================

@pytest.mark.asyncio
async def test_creates_new_assets(texture_store, id_generator):
    reconciler = AssetReconciler(texture_store, id_generator)

    report = await reconciler.reconcile([make_asset("a", b"1"), make_asset("b", b"2")])

    assert report.count(DecisionKind.CREATE) == 2
    assert report.writes == 2
    assert texture_store.by_name("a").hash == content_hash(b"1")
    assert texture_store.by_name("a").contents == b"1"
    assert texture_store.by_name("a").id != texture_store.by_name("b").id


@pytest.mark.asyncio
async def test_second_run_is_noop(texture_store, id_generator):
    reconciler = AssetReconciler(texture_store, id_generator)
    assets = [make_asset("a", b"1"), make_asset("b", b"2")]

    await reconciler.reconcile(assets)
    writes_after_first = len(texture_store.writes)
    report = await reconciler.reconcile(assets)

    assert report.count(DecisionKind.NOOP) == 2
    assert report.writes == 0
    assert len(texture_store.writes) == writes_after_first


@pytest.mark.asyncio
async def test_changed_bytes_update_in_place(id_generator):
    store = InMemoryAssetStore([AssetRecord(id=100, name="a", hash=H1, contents=b"one")])
    reconciler = AssetReconciler(store, id_generator)

    report = await reconciler.reconcile([make_asset("a", b"two")])

    assert report.count(DecisionKind.UPDATE) == 1
    assert store.writes == [("update", 100)]
    assert store.rows[100].hash == H2
    assert store.rows[100].contents == b"two"

    event = report.events[0].to_dict()
    assert event["old"] == H1
    assert event["new"] == H2
    assert event["record_id"] == "100"


@pytest.mark.asyncio
async def test_conflict_repair_deletes_both_and_reinserts(id_generator):
    store = InMemoryAssetStore([
        AssetRecord(id=1, name="x", hash=H1, contents=b"one"),
        AssetRecord(id=2, name="y", hash=H2, contents=b"two"),
    ])
    reconciler = AssetReconciler(store, id_generator)

    report = await reconciler.reconcile([make_asset("x", b"two")])

    assert report.count(DecisionKind.CONFLICT) == 1
    assert report.writes == 1
    assert ("delete", 1) in store.writes
    assert ("delete", 2) in store.writes

    assert len(store.rows) == 1
    (record,) = store.rows.values()
    assert record.name == "x"
    assert record.hash == H2
    assert record.id not in (1, 2)

    event = report.events[0]
    assert event.kind is DecisionKind.CONFLICT
    assert sorted(event.removed_ids) == ["1", "2"]


@pytest.mark.asyncio
async def test_conflict_prefer_hash_match_keeps_id(id_generator):
    store = InMemoryAssetStore([
        AssetRecord(id=1, name="x", hash=H1),
        AssetRecord(id=2, name="y", hash=H2),
    ])
    reconciler = AssetReconciler(store, id_generator, conflict_policy=ConflictPolicy.PREFER_HASH_MATCH)

    await reconciler.reconcile([make_asset("x", b"two")])

    assert list(store.rows) == [2]
    assert store.rows[2].name == "x"


@pytest.mark.asyncio
async def test_shared_contents_under_two_names_stays_idempotent(texture_store, id_generator):
    reconciler = AssetReconciler(texture_store, id_generator)
    assets = [make_asset("a", b"same"), make_asset("b", b"same")]

    first = await reconciler.reconcile(assets)
    second = await reconciler.reconcile(assets)

    assert first.count(DecisionKind.CREATE) == 2
    assert second.count(DecisionKind.NOOP) == 2
    assert second.writes == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("order", [("y", "x"), ("x", "y")])
async def test_name_taking_on_another_local_assets_bytes_keeps_both_rows(id_generator, order):
    store = InMemoryAssetStore([
        AssetRecord(id=1, name="x", hash=H1, contents=b"one"),
        AssetRecord(id=2, name="y", hash=H2, contents=b"two"),
    ])
    reconciler = AssetReconciler(store, id_generator)
    assets = [make_asset(name, b"two") for name in order]

    first = await reconciler.reconcile(assets)
    second = await reconciler.reconcile(assets)

    assert first.count(DecisionKind.CONFLICT) == 0
    assert first.writes == 1
    assert ("update", 1) in store.writes
    assert not any(kind == "delete" for kind, _ in store.writes)
    assert sorted((r.id, r.name, r.hash) for r in store.rows.values()) == [(1, "x", H2), (2, "y", H2)]
    assert second.writes == 0
    assert second.count(DecisionKind.NOOP) == 2


@pytest.mark.asyncio
async def test_dry_run_writes_nothing(id_generator):
    store = InMemoryAssetStore([AssetRecord(id=100, name="a", hash=H1)])
    reconciler = AssetReconciler(store, id_generator, apply=False)

    report = await reconciler.reconcile([make_asset("a", b"two"), make_asset("b", b"new")])

    assert store.writes == []
    assert report.writes == 0
    assert report.count(DecisionKind.UPDATE) == 1
    assert report.count(DecisionKind.CREATE) == 1
    assert len(report.events) == 2


@pytest.mark.asyncio
async def test_duplicate_names_reconciled_once(texture_store, id_generator):
    reconciler = AssetReconciler(texture_store, id_generator)

    report = await reconciler.reconcile([make_asset("a", b"1"), make_asset("a", b"1")])

    assert report.count(DecisionKind.CREATE) == 1
    assert len(texture_store.rows) == 1


def test_local_asset_hashes_contents():
    asset = LocalAsset(name="a", contents=b"abc")
    assert asset.hash == "a9993e364706816aba3e25717850c26c9cd0d89d"
