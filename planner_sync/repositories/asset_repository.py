"""
Asset Repository - PostgreSQL storage for textures and weather overlays

Storage: PostgreSQL ({schema}.textures / {schema}.weather tables)

Lookups return None when no row matches; genuine store failures raise
StoreError so the run stops instead of deciding on partial state.
"""
import logging
from typing import Optional

import asyncpg

from ..models.domain import AssetKind, AssetRecord
from .base import store_errors, validate_identifier

logger = logging.getLogger(__name__)


class AssetRepository:
    """
    Repository for AssetRecord, one instance per asset table.

    Handles lookups by hash / name and the single-row writes the
    asset reconciler applies.
    """

    def __init__(self, db_pool: asyncpg.Pool, schema: str = "world_planner", kind: AssetKind = AssetKind.TEXTURE):
        self.db_pool = db_pool
        self.kind = kind
        self.table = f"{validate_identifier(schema)}.{kind.table}"

    @staticmethod
    def _to_record(row) -> AssetRecord:
        return AssetRecord(
            id=row['id'],
            name=row['name'],
            hash=row['hash'],
            contents=bytes(row['contents']) if row['contents'] is not None else b"",
        )

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_hash(self, content_hash: str, prefer_name: Optional[str] = None) -> Optional[AssetRecord]:
        """
        Retrieve an asset by content hash.

        Several names may legitimately share identical bytes; when that
        happens the row named prefer_name wins, then the oldest id.

        Args:
            content_hash: SHA-1 hex digest
            prefer_name: Name to prefer among rows sharing the hash

        Returns:
            AssetRecord or None
        """
        with store_errors(f"{self.kind.table}.get_by_hash", content_hash):
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(f"""
                    SELECT id, name, hash, contents
                    FROM {self.table}
                    WHERE hash = $1
                    ORDER BY (name = $2) DESC, id
                    LIMIT 1
                """, content_hash, prefer_name)

        if not row:
            return None
        return self._to_record(row)

    async def get_by_name(self, name: str) -> Optional[AssetRecord]:
        """
        Retrieve an asset by name.

        Returns:
            AssetRecord or None
        """
        with store_errors(f"{self.kind.table}.get_by_name", name):
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(f"""
                    SELECT id, name, hash, contents
                    FROM {self.table}
                    WHERE name = $1
                """, name)

        if not row:
            return None
        return self._to_record(row)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(self, record: AssetRecord) -> AssetRecord:
        """Insert a new asset row."""
        with store_errors(f"{self.kind.table}.create", record.name):
            async with self.db_pool.acquire() as conn:
                await conn.execute(f"""
                    INSERT INTO {self.table} (id, name, hash, contents)
                    VALUES ($1, $2, $3, $4)
                """, record.id, record.name, record.hash, record.contents)

        logger.debug(f"Created {self.kind.table} row {record.id} ({record.name})")
        return record

    async def update_contents(self, asset_id: int, content_hash: str, contents: bytes) -> bool:
        """
        Replace an asset's bytes and hash in place, id unchanged.

        Returns:
            True if a row was updated
        """
        with store_errors(f"{self.kind.table}.update_contents", asset_id):
            async with self.db_pool.acquire() as conn:
                result = await conn.execute(f"""
                    UPDATE {self.table}
                    SET hash = $2, contents = $3
                    WHERE id = $1
                """, asset_id, content_hash, contents)

        return result == "UPDATE 1"

    async def delete(self, asset_id: int) -> bool:
        """
        Delete an asset row (conflict repair only).

        Returns:
            True if a row was deleted
        """
        with store_errors(f"{self.kind.table}.delete", asset_id):
            async with self.db_pool.acquire() as conn:
                result = await conn.execute(f"""
                    DELETE FROM {self.table} WHERE id = $1
                """, asset_id)

        return result == "DELETE 1"
