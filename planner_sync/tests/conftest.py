"""
Pytest configuration and in-memory stores for reconciliation tests.

The in-memory stores implement the same methods as AssetRepository /
ItemRepository and record every write, so tests can assert on exactly
which writes a run performed.
"""

import dataclasses
import itertools
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from planner_sync.models.domain import AssetRecord, ItemCategory, ItemRecord, LocalAsset, LocalItem
from planner_sync.services.classifier import Classifier
from planner_sync.utils.id_generator import EPOCH_MS, SnowflakeGenerator


def pytest_configure(config):
    """Configure pytest with asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test."
    )


# =============================================================================
# In-memory stores
# =============================================================================

class InMemoryAssetStore:
    """Dict-backed stand-in for AssetRepository."""

    def __init__(self, records: Optional[List[AssetRecord]] = None):
        self.rows: Dict[int, AssetRecord] = {r.id: r for r in (records or [])}
        self.writes: List[Tuple[str, object]] = []

    async def get_by_hash(self, content_hash, prefer_name=None):
        matches = [r for r in self.rows.values() if r.hash == content_hash]
        if not matches:
            return None
        matches.sort(key=lambda r: (r.name != prefer_name, r.id))
        return dataclasses.replace(matches[0])

    async def get_by_name(self, name):
        for record in self.rows.values():
            if record.name == name:
                return dataclasses.replace(record)
        return None

    async def create(self, record):
        assert record.id not in self.rows, f"duplicate id {record.id}"
        assert all(r.name != record.name for r in self.rows.values()), f"duplicate name {record.name}"
        self.rows[record.id] = dataclasses.replace(record)
        self.writes.append(("create", record.id))
        return record

    async def update_contents(self, asset_id, content_hash, contents):
        record = self.rows[asset_id]
        self.rows[asset_id] = dataclasses.replace(record, hash=content_hash, contents=contents)
        self.writes.append(("update", asset_id))
        return True

    async def delete(self, asset_id):
        self.writes.append(("delete", asset_id))
        return self.rows.pop(asset_id, None) is not None

    def by_name(self, name) -> Optional[AssetRecord]:
        return next((r for r in self.rows.values() if r.name == name), None)


class InMemoryItemStore:
    """Dict-backed stand-in for ItemRepository."""

    def __init__(self, records: Optional[List[ItemRecord]] = None):
        self.rows: Dict[int, ItemRecord] = {r.game_id: r for r in (records or [])}
        self.writes: List[Tuple[str, int, dict]] = []

    async def get_by_game_id(self, game_id):
        record = self.rows.get(game_id)
        return dataclasses.replace(record) if record else None

    async def create(self, record):
        assert record.game_id not in self.rows
        self.rows[record.game_id] = dataclasses.replace(record)
        self.writes.append(("create", record.game_id, {}))
        return record

    async def update_fields(self, game_id, fields, new_id=None):
        changes = dict(fields)
        if new_id is not None:
            changes['id'] = new_id
        self.rows[game_id] = dataclasses.replace(self.rows[game_id], **changes)
        self.writes.append(("update", game_id, dict(fields)))
        return True

    async def set_override(self, game_id, override=True):
        self.rows[game_id] = dataclasses.replace(self.rows[game_id], override_item_data=override)
        return True


class FakeSchemaManager:
    def __init__(self):
        self.calls = 0

    async def ensure_schema(self):
        self.calls += 1


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def classifier():
    return Classifier()


@pytest.fixture
def id_generator():
    """Snowflakes on a clock that advances 1ms per id."""
    ticks = itertools.count(EPOCH_MS + 1_000_000)
    return SnowflakeGenerator(machine_id=7, clock=lambda: next(ticks))


@pytest.fixture
def texture_store():
    return InMemoryAssetStore()


@pytest.fixture
def weather_store():
    return InMemoryAssetStore()


@pytest.fixture
def item_store():
    return InMemoryItemStore()


@pytest.fixture
def schema_manager():
    return FakeSchemaManager()


@pytest.fixture
def mock_pool():
    """asyncpg pool whose acquire() yields a shared AsyncMock connection."""
    conn = AsyncMock()
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    pool.acquire.return_value.__aexit__.return_value = False
    return pool, conn


def make_asset(name: str, contents: bytes) -> LocalAsset:
    return LocalAsset(name=name, contents=contents)


def make_item(game_id: int = 2, **overrides) -> LocalItem:
    values = dict(
        game_id=game_id,
        name="Dirt",
        category=ItemCategory.FOREGROUND,
        action_type=17,
        texture="tiles_page1",
        texture_x=1,
        texture_y=0,
        spread_type=2,
        collision_type=1,
        rarity=1,
        max_amount=200,
        break_hits=18,
    )
    values.update(overrides)
    return LocalItem(**values)
