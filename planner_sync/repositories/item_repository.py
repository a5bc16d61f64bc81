"""
Item Repository - PostgreSQL storage for item rows

Storage: PostgreSQL ({schema}.items table), keyed by game_id

ID format: 9 byte packed id (see utils.id_generator), regenerated by the
reconciler on writes.
"""
import logging
from typing import Any, Dict, Optional

import asyncpg

from ..models.domain import ItemRecord
from ..services.item_fields import ITEM_COLUMNS
from .base import store_errors, validate_identifier

logger = logging.getLogger(__name__)

ITEM_SELECT_COLUMNS = ('id', 'game_id') + ITEM_COLUMNS + ('override_item_data',)


class ItemRepository:
    """Repository for ItemRecord."""

    def __init__(self, db_pool: asyncpg.Pool, schema: str = "world_planner"):
        self.db_pool = db_pool
        self.table = f"{validate_identifier(schema)}.items"

    @staticmethod
    def _to_record(row) -> ItemRecord:
        return ItemRecord(
            id=bytes(row['id']),
            game_id=row['game_id'],
            name=row['name'],
            action_type=row['action_type'],
            item_category=row['item_category'],
            texture=row['texture'],
            texture_hash=row['texture_hash'],
            texture_x=row['texture_x'],
            texture_y=row['texture_y'],
            spread_type=row['spread_type'],
            collision_type=row['collision_type'],
            rarity=row['rarity'],
            max_amount=row['max_amount'],
            break_hits=row['break_hits'],
            override_item_data=bool(row['override_item_data']),
        )

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_game_id(self, game_id: int) -> Optional[ItemRecord]:
        """
        Retrieve item by game id.

        Args:
            game_id: Catalog item id

        Returns:
            ItemRecord or None
        """
        with store_errors("items.get_by_game_id", game_id):
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(f"""
                    SELECT {', '.join(ITEM_SELECT_COLUMNS)}
                    FROM {self.table}
                    WHERE game_id = $1
                """, game_id)

        if not row:
            return None
        return self._to_record(row)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(self, record: ItemRecord) -> ItemRecord:
        """Insert a full item row."""
        values = [getattr(record, c) for c in ITEM_SELECT_COLUMNS]
        placeholders = ', '.join(f'${i}' for i in range(1, len(values) + 1))

        with store_errors("items.create", record.game_id):
            async with self.db_pool.acquire() as conn:
                await conn.execute(f"""
                    INSERT INTO {self.table} ({', '.join(ITEM_SELECT_COLUMNS)})
                    VALUES ({placeholders})
                """, *values)

        logger.debug(f"Created item {record.game_id} ({record.name}) as {record.id_hex}")
        return record

    async def update_fields(self, game_id: int, fields: Dict[str, Any], new_id: Optional[bytes] = None) -> bool:
        """
        Partial update of one item row.

        Args:
            game_id: Row key
            fields: Column -> new value (reconciled item columns only)
            new_id: Regenerated packed id to write alongside, if any

        Returns:
            True if a row was updated
        """
        unknown = set(fields) - set(ITEM_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown item columns: {sorted(unknown)}")

        assignments = dict(fields)
        if new_id is not None:
            assignments['id'] = new_id
        if not assignments:
            return False

        columns = list(assignments)
        set_clause = ', '.join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))

        with store_errors("items.update_fields", game_id):
            async with self.db_pool.acquire() as conn:
                result = await conn.execute(f"""
                    UPDATE {self.table}
                    SET {set_clause}
                    WHERE game_id = $1
                """, game_id, *[assignments[c] for c in columns])

        return result == "UPDATE 1"

    async def set_override(self, game_id: int, override: bool = True) -> bool:
        """
        Set or clear operator override protection on an item.

        Returns:
            True if a row was updated
        """
        with store_errors("items.set_override", game_id):
            async with self.db_pool.acquire() as conn:
                result = await conn.execute(f"""
                    UPDATE {self.table}
                    SET override_item_data = $2
                    WHERE game_id = $1
                """, game_id, override)

        return result == "UPDATE 1"
