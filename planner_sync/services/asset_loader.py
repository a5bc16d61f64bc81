"""
Asset Loader - resolves local texture and weather files into LocalAssets.

Textures are resolved from the names referenced by in-scope items; every
referenced file must exist before anything is read or written.
Weather overlays are every image file in the weather directory.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..exceptions import MissingAssetError
from ..models.domain import LocalAsset

logger = logging.getLogger(__name__)


def unique_names(names: Iterable[str]) -> List[str]:
    """De-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(names))


def load_textures(
    names: Iterable[str],
    directory: Union[str, Path],
    extension: str = '.png',
) -> List[LocalAsset]:
    """
    Read the texture file for each referenced name.

    Raises:
        MissingAssetError: Listing every missing file, before any file is read
    """
    directory = Path(directory)
    names = unique_names(names)

    missing = [f"{name}{extension}" for name in names if not (directory / f"{name}{extension}").is_file()]
    if missing:
        raise MissingAssetError(missing, kind="texture")

    assets = [LocalAsset(name=name, contents=(directory / f"{name}{extension}").read_bytes()) for name in names]
    logger.info(f"Loaded {len(assets)} textures from {directory}")
    return assets


def load_weather(directory: Union[str, Path], extension: str = '.png') -> List[LocalAsset]:
    """Read every weather overlay in a directory, named by file stem."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Weather directory {directory} not found, skipping weather assets")
        return []

    assets = [
        LocalAsset(name=path.stem, contents=path.read_bytes())
        for path in sorted(directory.glob(f"*{extension}"))
        if path.is_file()
    ]
    logger.info(f"Loaded {len(assets)} weather overlays from {directory}")
    return assets
