"""
Asset domain models

Storage: PostgreSQL (textures and weather tables)
"""
from dataclasses import dataclass
from enum import Enum

from ...utils.hashing import content_hash


class AssetKind(Enum):
    """Asset class, one table per kind."""
    TEXTURE = "textures"
    WEATHER = "weather"

    @property
    def table(self) -> str:
        return self.value


@dataclass
class LocalAsset:
    """
    Asset read from disk - recomputed every run, never persisted as-is.

    Identity for comparison is `name`; `hash` is the change-detection key.
    """
    name: str
    contents: bytes
    hash: str = ""

    def __post_init__(self):
        """Fingerprint contents if no hash was supplied"""
        if not self.hash:
            self.hash = content_hash(self.contents)


@dataclass
class AssetRecord:
    """
    Persisted asset row.

    Invariant: at most one record per name, and under normal operation
    at most one record per hash.
    """
    id: int
    name: str
    hash: str
    contents: bytes = b""

    def __repr__(self) -> str:
        return f"AssetRecord(id={self.id}, name={self.name!r}, hash={self.hash!r})"
