"""
Catalog Loader - reads the decoded item catalog (JSON) and builds LocalItems.

Expected envelope:
    {
        "item_dat_version": 19,
        "items": [
            {"item_id": 2, "name": "Dirt", "action_type": 17,
             "texture": "tiles_page1.rttex", "texture_x": 1, ...},
            ...
        ]
    }
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from ..exceptions import CatalogError
from ..models.domain import LocalItem
from ..utils.id_generator import MAX_NUMERIC_ID
from .classifier import Classifier

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    'texture_x',
    'texture_y',
    'spread_type',
    'collision_type',
    'rarity',
    'max_amount',
    'break_hits',
)


def load_catalog(path: Union[str, Path], min_items: int = 11000) -> List[Dict[str, Any]]:
    """
    Read and validate the catalog file.

    Args:
        path: Catalog JSON file
        min_items: Minimum number of entries for the catalog to be trusted

    Returns:
        Raw item entries in catalog order

    Raises:
        CatalogError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    if not path.is_file():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogError(f"An error occurred when parsing the item data: {e}") from e

    if not isinstance(data, dict) or not data.get('item_dat_version'):
        raise CatalogError("Invalid data file: missing item_dat_version")

    items = data.get('items')
    if not isinstance(items, list):
        raise CatalogError("Invalid data file: missing items")
    if len(items) < min_items:
        raise CatalogError(
            f"Invalid data file: expected at least {min_items} items, found {len(items)}"
        )

    logger.info(f"Loaded catalog v{data['item_dat_version']} with {len(items)} items from {path}")
    return items


def strip_extension(texture_file: str) -> str:
    """'tiles_page1.rttex' -> 'tiles_page1'"""
    return texture_file.split('.')[0]


def build_local_items(entries: Iterable[Dict[str, Any]], classifier: Classifier) -> List[LocalItem]:
    """
    Classify catalog entries and keep the ones in scope for persistence.

    Returns:
        LocalItems in catalog order
    """
    items = []
    skipped = 0

    for entry in entries:
        name = entry.get('name') or ''
        action_type = int(entry.get('action_type') or 0)
        category = classifier.classify(action_type)

        if not classifier.is_eligible(category, name):
            skipped += 1
            continue

        try:
            game_id = int(entry['item_id'])
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Catalog entry {name!r} has no valid item_id") from e
        if not 0 <= game_id <= MAX_NUMERIC_ID:
            raise CatalogError(f"Catalog entry {name!r} has item_id {game_id} outside 0..{MAX_NUMERIC_ID}")

        items.append(LocalItem(
            game_id=game_id,
            name=name,
            category=category,
            action_type=action_type,
            texture=strip_extension(entry.get('texture') or ''),
            **{f: int(entry.get(f) or 0) for f in NUMERIC_FIELDS},
        ))

    logger.info(f"Selected {len(items)} items for reconciliation ({skipped} out of scope)")
    return items
