"""
Database Configuration
======================

Connection configuration for the reconciliation run.
Built from Settings so .env files and environment variables are honoured.
"""
from dataclasses import dataclass
from typing import Optional

import asyncpg

from .settings import Settings, get_settings


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""
    host: str
    port: int
    user: str
    password: str
    database: str
    min_size: int = 1
    max_size: int = 2

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        min_size: int = 1,
        max_size: int = 2,
    ) -> 'PostgresConfig':
        """Create config from application settings."""
        settings = settings or get_settings()
        if not settings.postgres_host:
            raise ValueError("POSTGRES_HOST environment variable is required")

        return cls(
            host=settings.postgres_host,
            port=settings.postgres_port,
            user=settings.postgres_user,
            password=settings.postgres_password,
            database=settings.postgres_db,
            min_size=min_size,
            max_size=max_size,
        )

    def to_asyncpg_kwargs(self) -> dict:
        """Convert to asyncpg.create_pool kwargs."""
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'min_size': self.min_size,
            'max_size': self.max_size,
        }


async def create_postgres_pool(settings: Optional[Settings] = None) -> asyncpg.Pool:
    """
    Create PostgreSQL connection pool from settings.

    The pipeline is strictly sequential, so the pool stays small.
    """
    config = PostgresConfig.from_settings(settings)
    return await asyncpg.create_pool(**config.to_asyncpg_kwargs())
