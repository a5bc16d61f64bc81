"""
Content fingerprints for asset change detection.

SHA-1 hex digests (40 chars) match the CHAR(40) hash columns
on the textures, weather and items tables.
"""
import hashlib

HASH_LENGTH = 40


def content_hash(data: bytes) -> str:
    """Return the hex SHA-1 digest of raw asset bytes."""
    return hashlib.sha1(data).hexdigest()
