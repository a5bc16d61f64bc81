"""
Item domain models

Storage: PostgreSQL (items table), keyed by game_id
"""
from dataclasses import dataclass
from typing import Optional

from .category import ItemCategory


@dataclass
class LocalItem:
    """
    In-scope catalog entry after classification.

    Raw values as found in the catalog: break_hits is the raw
    catalog value (hits * 6), texture is the bare file name.
    """
    game_id: int
    name: str
    category: ItemCategory
    action_type: int
    texture: str
    texture_x: int = 0
    texture_y: int = 0
    spread_type: int = 0
    collision_type: int = 0
    rarity: int = 0
    max_amount: int = 0
    break_hits: int = 0


@dataclass
class ItemRecord:
    """
    Persisted item row.

    override_item_data is set by operators outside the pipeline; while set,
    gameplay-authoring fields (action type, texture file, placement) are not
    reconciled.
    """
    id: bytes
    game_id: int
    name: str
    action_type: int
    item_category: Optional[int]
    texture: str
    texture_hash: str
    texture_x: int = 0
    texture_y: int = 0
    spread_type: int = 0
    collision_type: int = 0
    rarity: int = 0
    max_amount: int = 1
    break_hits: int = 1
    override_item_data: bool = False

    @property
    def id_hex(self) -> str:
        return self.id.hex() if self.id else ""
