"""
Repository Pattern - Storage abstraction layer

Repositories hide storage details (PostgreSQL) from the reconcilers.
Reconcilers work with domain models, not raw rows.

Storage:
- AssetRepository: {schema}.textures, {schema}.weather
- ItemRepository: {schema}.items
- SchemaManager: creates schema and tables when missing
"""
from .base import STORE_FAILURES, store_errors
from .schema import SchemaManager
from .asset_repository import AssetRepository
from .item_repository import ItemRepository

__all__ = [
    'STORE_FAILURES',
    'store_errors',
    'SchemaManager',
    'AssetRepository',
    'ItemRepository',
]
