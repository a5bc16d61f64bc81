"""
Test: catalog and asset loaders
"""

import json

import pytest

from planner_sync.exceptions import CatalogError, MissingAssetError
from planner_sync.models.domain import ItemCategory
from planner_sync.services.asset_loader import load_textures, load_weather, unique_names
from planner_sync.services.catalog_loader import build_local_items, load_catalog, strip_extension
from planner_sync.utils.hashing import content_hash


def write_catalog(path, items, version=19):
    payload = {"items": items}
    if version is not None:
        payload["item_dat_version"] = version
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def entry(item_id, name, action_type, texture="tiles_page1.rttex", **extra):
    values = {
        "item_id": item_id,
        "name": name,
        "action_type": action_type,
        "texture": texture,
        "texture_x": 0,
        "texture_y": 0,
        "spread_type": 1,
        "collision_type": 1,
        "rarity": 1,
        "max_amount": 200,
        "break_hits": 24,
    }
    values.update(extra)
    return values


# =============================================================================
# Catalog
# =============================================================================

class TestLoadCatalog:

    def test_valid_catalog(self, tmp_path):
        path = write_catalog(tmp_path / "items.json", [entry(i, f"Item {i}", 17) for i in range(5)])
        items = load_catalog(path, min_items=5)
        assert len(items) == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.json")

    def test_not_json(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="parsing"):
            load_catalog(path, min_items=0)

    def test_missing_version(self, tmp_path):
        path = write_catalog(tmp_path / "items.json", [entry(1, "Dirt", 17)], version=None)
        with pytest.raises(CatalogError, match="item_dat_version"):
            load_catalog(path, min_items=0)

    def test_too_few_items(self, tmp_path):
        path = write_catalog(tmp_path / "items.json", [entry(1, "Dirt", 17)])
        with pytest.raises(CatalogError, match="at least 11000"):
            load_catalog(path)


class TestBuildLocalItems:

    def test_scope_filter(self, classifier):
        entries = [
            entry(2, "Dirt", 17),
            entry(14, "Cave Background", 18),
            entry(18, "Fist", 0),
            entry(32, "Wrench", 1),
            entry(202, "Small Lock", 8),
            entry(3, "Dirt Seed", 19),
            entry(98, "Pickaxe", 1),
        ]

        items = build_local_items(entries, classifier)

        assert [i.game_id for i in items] == [2, 14, 18, 32]
        assert items[1].category is ItemCategory.BACKGROUND
        assert items[3].category is ItemCategory.TOOL

    def test_texture_extension_stripped(self, classifier):
        (item,) = build_local_items([entry(2, "Dirt", 17, texture="tiles_page1.rttex")], classifier)
        assert item.texture == "tiles_page1"
        assert strip_extension("no_extension") == "no_extension"

    def test_raw_values_kept_and_missing_defaulted(self, classifier):
        raw = entry(2, "Dirt", 17)
        del raw["rarity"]
        (item,) = build_local_items([raw], classifier)
        assert item.break_hits == 24
        assert item.rarity == 0
        assert item.max_amount == 200

    def test_entry_without_id_rejected(self, classifier):
        raw = entry(2, "Dirt", 17)
        del raw["item_id"]
        with pytest.raises(CatalogError):
            build_local_items([raw], classifier)

    @pytest.mark.parametrize("item_id", [-1, 2 ** 32])
    def test_item_id_outside_packed_range_rejected(self, classifier, item_id):
        with pytest.raises(CatalogError, match="outside"):
            build_local_items([entry(item_id, "Dirt", 17)], classifier)


# =============================================================================
# Assets
# =============================================================================

class TestLoadTextures:

    def test_loads_and_hashes(self, tmp_path):
        (tmp_path / "tiles_page1.png").write_bytes(b"png-1")
        (tmp_path / "tiles_page2.png").write_bytes(b"png-2")

        assets = load_textures(["tiles_page1", "tiles_page2", "tiles_page1"], tmp_path)

        assert [a.name for a in assets] == ["tiles_page1", "tiles_page2"]
        assert assets[0].hash == content_hash(b"png-1")
        assert assets[1].contents == b"png-2"

    def test_reports_every_missing_file(self, tmp_path):
        (tmp_path / "tiles_page1.png").write_bytes(b"png-1")

        with pytest.raises(MissingAssetError) as exc:
            load_textures(["tiles_page1", "gone_a", "gone_b"], tmp_path)

        assert exc.value.missing == ["gone_a.png", "gone_b.png"]
        assert "A total of 2 textures are missing" in str(exc.value)

    def test_unique_names_keeps_order(self):
        assert unique_names(["b", "a", "b", "c"]) == ["b", "a", "c"]


class TestLoadWeather:

    def test_loads_every_image(self, tmp_path):
        (tmp_path / "sunny.png").write_bytes(b"sun")
        (tmp_path / "night.png").write_bytes(b"moon")
        (tmp_path / "notes.txt").write_text("ignored")

        assets = load_weather(tmp_path)

        assert [a.name for a in assets] == ["night", "sunny"]

    def test_missing_directory_is_empty(self, tmp_path):
        assert load_weather(tmp_path / "weather") == []
