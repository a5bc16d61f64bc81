"""
Schema Manager - creates the world planner schema and tables if missing.

Non-destructive: existing tables and rows are left alone, reconciliation
brings their contents up to date.
"""
import logging

import asyncpg

from ..models.domain import AssetKind
from .base import store_errors, validate_identifier

logger = logging.getLogger(__name__)

ASSET_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS {schema}.{table} (
        id BIGINT PRIMARY KEY,
        name VARCHAR(50) NOT NULL UNIQUE,
        hash CHAR(40) NOT NULL,
        contents BYTEA
    );
    CREATE INDEX IF NOT EXISTS {table}_hash_idx ON {schema}.{table} (hash);
"""

ITEMS_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS {schema}.items (
        id BYTEA NOT NULL,
        game_id INTEGER PRIMARY KEY,
        action_type SMALLINT,
        item_category SMALLINT,
        name VARCHAR(50),
        texture VARCHAR(50),
        texture_hash CHAR(40),
        texture_x SMALLINT,
        texture_y SMALLINT,
        spread_type SMALLINT,
        collision_type SMALLINT,
        rarity SMALLINT,
        max_amount SMALLINT,
        break_hits SMALLINT,
        override_item_data BOOLEAN NOT NULL DEFAULT FALSE
    );
"""


class SchemaManager:
    """Ensures the schema and the textures, weather and items tables exist."""

    def __init__(self, db_pool: asyncpg.Pool, schema: str = "world_planner"):
        self.db_pool = db_pool
        self.schema = validate_identifier(schema)

    async def ensure_schema(self) -> None:
        with store_errors("ensure_schema", self.schema):
            async with self.db_pool.acquire() as conn:
                logger.info(f"[Database]: Ensuring schema {self.schema} exists..")
                await conn.execute(f"CREATE SCHEMA IF NOT EXISTS {self.schema};")

                for kind in AssetKind:
                    await conn.execute(ASSET_TABLE_DDL.format(schema=self.schema, table=kind.table))

                await conn.execute(ITEMS_TABLE_DDL.format(schema=self.schema))
                logger.info("[Database]: Tables are in place.")
