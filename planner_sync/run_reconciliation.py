#!/usr/bin/env python3
"""
Reconciliation Runner
=====================

Loads the item catalog and local texture / weather files, then runs one
reconciliation pass against the world planner database.

Usage:
    planner-sync                          # Catalog at $CATALOG_PATH (default ./384390)
    planner-sync items.json               # Explicit catalog
    planner-sync items.json --dry-run     # Decide and log, write nothing
    planner-sync --protect 242            # Set override_item_data on an item, then exit
    planner-sync --unprotect 242          # Clear it again

Connection settings come from POSTGRES_* variables (or .env).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import Settings, create_postgres_pool
from .exceptions import PlannerSyncError
from .repositories import ItemRepository
from .services.asset_loader import load_textures, load_weather
from .services.catalog_loader import build_local_items, load_catalog
from .services.classifier import Classifier
from .workers import ReconciliationWorker

logger = logging.getLogger('planner-sync')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="World planner item and asset reconciliation")
    parser.add_argument(
        'catalog',
        nargs='?',
        help='Decoded item catalog (JSON). Defaults to CATALOG_PATH'
    )
    parser.add_argument('--textures-dir', help='Texture directory (default: TEXTURES_DIR)')
    parser.add_argument('--weather-dir', help='Weather overlay directory (default: WEATHER_DIR)')
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Compute and log decisions without writing'
    )
    parser.add_argument('--log-level', help='Logging level (default: LOG_LEVEL or INFO)')
    parser.add_argument(
        '--protect',
        type=int,
        metavar='GAME_ID',
        help='Set override_item_data on an item and exit'
    )
    parser.add_argument(
        '--unprotect',
        type=int,
        metavar='GAME_ID',
        help='Clear override_item_data on an item and exit'
    )
    return parser


async def set_override(settings: Settings, game_id: int, override: bool) -> bool:
    """Operator toggle for override protection on one item."""
    db_pool = await create_postgres_pool(settings)
    try:
        updated = await ItemRepository(db_pool, settings.db_schema).set_override(game_id, override)
    finally:
        await db_pool.close()

    state = "set" if override else "cleared"
    if updated:
        logger.info(f"✅ override_item_data {state} on item {game_id}")
    else:
        logger.warning(f"No item with game_id {game_id}")
    return updated


async def run_once(settings: Settings, args: argparse.Namespace) -> None:
    """Load local sources, then run a single reconciliation pass."""
    classifier = Classifier()

    entries = load_catalog(args.catalog or settings.catalog_path, min_items=settings.catalog_min_items)
    items = build_local_items(entries, classifier)

    # Fails on missing textures before a connection is even opened
    textures = load_textures(
        (item.texture for item in items),
        args.textures_dir or settings.textures_dir,
        settings.texture_extension,
    )
    weather = load_weather(args.weather_dir or settings.weather_dir, settings.texture_extension)

    logger.info("[PostgreSQL]: Creating a connection pool..")
    db_pool = await create_postgres_pool(settings)
    logger.info("[PostgreSQL]: Connection pool has been created.")

    worker = ReconciliationWorker.from_pool(db_pool, settings, classifier=classifier, dry_run=args.dry_run)
    try:
        report = await worker.run(textures, items, weather)
    finally:
        await db_pool.close()

    for phase in report.phases:
        logger.info(f"  {phase.summary()}")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(Path.cwd() / '.env')
    args = build_parser().parse_args(argv)
    settings = Settings()

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.protect is not None:
            asyncio.run(set_override(settings, args.protect, True))
        elif args.unprotect is not None:
            asyncio.run(set_override(settings, args.unprotect, False))
        else:
            asyncio.run(run_once(settings, args))
    except PlannerSyncError as e:
        logger.error(f"!! {e}")
        if e.__cause__ is not None:
            logger.error(f"   caused by: {e.__cause__}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
