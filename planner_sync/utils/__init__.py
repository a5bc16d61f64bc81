"""
Utility functions
"""
from .hashing import content_hash
from .id_generator import (
    SnowflakeGenerator,
    generate_item_id,
    extract_numeric_id,
    item_id_hex,
)

__all__ = [
    'content_hash',
    'SnowflakeGenerator',
    'generate_item_id',
    'extract_numeric_id',
    'item_id_hex',
]
