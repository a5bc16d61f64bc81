"""
Reconciliation Worker - runs one full reconciliation pass
==========================================================

Phases, strictly in order:

    schema    ensure schema and tables exist
        ↓
    textures  AssetReconciler over the de-duplicated texture set
        ↓
    items     ItemReconciler, using the texture hashes just written
        ↓
    weather   AssetReconciler over the weather table (no item phase)

Every referenced texture is checked before the first write. A failing
phase aborts the run: later phases depend on earlier writes, so they
never run against partially-known state. Re-running the whole pass is
the recovery path; every decision is derived fresh from the store.
"""
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

import asyncpg

from ..config.settings import Settings
from ..exceptions import PlannerSyncError, ReconciliationAborted
from ..models.domain import AssetKind, LocalAsset, LocalItem, PhaseReport, ReconciliationReport
from ..repositories import AssetRepository, ItemRepository, SchemaManager
from ..services.asset_reconciler import AssetReconciler, ConflictPolicy, dedupe_by_name
from ..services.classifier import Classifier
from ..services.item_reconciler import ItemReconciler
from ..utils.id_generator import SnowflakeGenerator

logger = logging.getLogger(__name__)


class ReconciliationWorker:
    """
    Sequences the reconciliation phases against one store.

    Build with from_pool() for a live database; the constructor takes the
    repositories directly so tests can hand in in-memory stores.
    """

    def __init__(
        self,
        schema_manager,
        texture_repository,
        item_repository,
        weather_repository,
        classifier: Optional[Classifier] = None,
        id_generator: Optional[SnowflakeGenerator] = None,
        conflict_policy: ConflictPolicy = ConflictPolicy.FRESH,
        regenerate_item_ids: bool = True,
        dry_run: bool = False,
    ):
        self.schema_manager = schema_manager
        self.classifier = classifier or Classifier()
        self.id_generator = id_generator or SnowflakeGenerator()
        self.dry_run = dry_run

        apply = not dry_run
        self.texture_reconciler = AssetReconciler(
            texture_repository, self.id_generator,
            phase=AssetKind.TEXTURE.table, conflict_policy=conflict_policy, apply=apply,
        )
        self.weather_reconciler = AssetReconciler(
            weather_repository, self.id_generator,
            phase=AssetKind.WEATHER.table, conflict_policy=conflict_policy, apply=apply,
        )
        self.item_reconciler = ItemReconciler(
            item_repository, self.classifier,
            regenerate_ids=regenerate_item_ids, apply=apply,
        )

        # Stats
        self.runs_completed = 0
        self.last_report: Optional[ReconciliationReport] = None

    @classmethod
    def from_pool(
        cls,
        db_pool: asyncpg.Pool,
        settings: Settings,
        classifier: Optional[Classifier] = None,
        dry_run: bool = False,
    ) -> 'ReconciliationWorker':
        schema = settings.db_schema
        return cls(
            schema_manager=SchemaManager(db_pool, schema),
            texture_repository=AssetRepository(db_pool, schema, AssetKind.TEXTURE),
            item_repository=ItemRepository(db_pool, schema),
            weather_repository=AssetRepository(db_pool, schema, AssetKind.WEATHER),
            classifier=classifier,
            id_generator=SnowflakeGenerator(machine_id=settings.machine_id),
            conflict_policy=ConflictPolicy(settings.conflict_id_policy),
            regenerate_item_ids=settings.regenerate_item_id_on_update,
            dry_run=dry_run,
        )

    async def run(
        self,
        textures: Sequence[LocalAsset],
        items: Sequence[LocalItem],
        weather: Sequence[LocalAsset] = (),
    ) -> ReconciliationReport:
        """
        Run one full pass.

        Raises:
            MissingAssetError: Before any write, if an item's texture is absent
            ReconciliationAborted: If a phase fails; __cause__ holds the error
        """
        textures = dedupe_by_name(textures)
        texture_hashes = {asset.name: asset.hash for asset in textures}
        ItemReconciler.check_textures(items, texture_hashes)

        report = ReconciliationReport(dry_run=self.dry_run)
        mode = "DRY RUN" if self.dry_run else "live"
        logger.info(
            f"🏗️  Reconciling {len(textures)} textures, {len(items)} items, "
            f"{len(weather)} weather overlays ({mode})"
        )

        if self.dry_run:
            logger.info("Dry run: skipping schema creation")
        else:
            await self._run_phase(report, "schema", self._ensure_schema)

        await self._run_phase(report, "textures", lambda: self.texture_reconciler.reconcile(textures))
        await self._run_phase(report, "items", lambda: self.item_reconciler.reconcile(items, texture_hashes))
        await self._run_phase(report, "weather", lambda: self.weather_reconciler.reconcile(weather))

        self.runs_completed += 1
        self.last_report = report
        logger.info(
            f"✅ Reconciliation complete: {report.total_writes} writes in "
            f"{report.elapsed_seconds:.2f}s "
            f"({', '.join(f'{k}={v:.2f}s' for k, v in report.durations.items())})"
        )
        return report

    async def _ensure_schema(self) -> PhaseReport:
        report = PhaseReport(phase="schema")
        start = time.time()
        await self.schema_manager.ensure_schema()
        report.elapsed_seconds = time.time() - start
        return report

    async def _run_phase(
        self,
        report: ReconciliationReport,
        name: str,
        phase: Callable[[], Awaitable[PhaseReport]],
    ) -> None:
        try:
            phase_report = await phase()
        except PlannerSyncError as e:
            logger.error(f"❌ Phase '{name}' failed: {e}")
            raise ReconciliationAborted(name, report) from e

        phase_report.phase = name
        report.phases.append(phase_report)