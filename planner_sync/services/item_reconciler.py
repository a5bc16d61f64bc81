"""
Item Reconciler - brings the items table in line with the catalog.

For each in-scope item, matched on game_id:
- No row: CREATE a full row (fresh packed id, override_item_data = False)
- Row exists: one UPDATE per diverging field group in ITEM_FIELDS order.
  Override-protected groups are skipped when the row has
  override_item_data set.

Every update write carries a regenerated packed id unless the reconciler
is configured to keep ids stable.

Values that cannot be derived locally (unmapped category code) are
anomalies: logged, the field is skipped, the rest of the item proceeds.
"""
import dataclasses
import logging
import time
from typing import Dict, Iterable, Optional, Sequence

from ..exceptions import MissingAssetError
from ..models.domain import (
    DecisionKind,
    FieldUpdate,
    ItemDecision,
    ItemRecord,
    LocalItem,
    PhaseReport,
    ReconciliationEvent,
)
from ..utils.id_generator import generate_item_id, item_id_hex
from .classifier import Classifier
from .item_fields import ITEM_FIELDS, FieldDescriptor, LocalContext

logger = logging.getLogger(__name__)


def decide_item(
    local: LocalItem,
    texture_hash: str,
    record: Optional[ItemRecord],
    classifier: Classifier,
    fields: Sequence[FieldDescriptor] = ITEM_FIELDS,
) -> ItemDecision:
    """
    Pure decision for one item.

    Args:
        local: In-scope catalog item
        texture_hash: Current hash of the item's texture
        record: Persisted row for local.game_id, or None
        classifier: Supplies the persisted category mapping
        fields: Field table to evaluate

    Returns:
        ItemDecision (CREATE with record, UPDATE with updates, or NOOP)
    """
    ctx = LocalContext(item=local, texture_hash=texture_hash, classifier=classifier)
    anomalies = []

    if record is None:
        values = {}
        for descriptor in fields:
            local_values = descriptor.local_values(ctx)
            if local_values is None:
                anomalies.append(descriptor.name)
                local_values = {c: None for c in descriptor.columns}
            values.update(local_values)

        new_record = ItemRecord(id=b"", game_id=local.game_id, override_item_data=False, **values)
        return ItemDecision(kind=DecisionKind.CREATE, game_id=local.game_id, record=new_record, anomalies=anomalies)

    updates = []
    for descriptor in fields:
        if descriptor.protected and record.override_item_data:
            continue

        new = descriptor.local_values(ctx)
        if new is None:
            anomalies.append(descriptor.name)
            continue

        old = descriptor.record_values(record)
        if new != old:
            updates.append(FieldUpdate(field=descriptor.name, old=old, new=new))

    kind = DecisionKind.UPDATE if updates else DecisionKind.NOOP
    return ItemDecision(kind=kind, game_id=local.game_id, updates=updates, anomalies=anomalies)


def _display(values: Dict) -> object:
    """Single-column groups log as the bare value."""
    if len(values) == 1:
        return next(iter(values.values()))
    return values


class ItemReconciler:
    """
    Reconciles the items table.

    Args:
        repository: ItemRepository (or any object with the same methods)
        classifier: Category mapping for item_category
        fields: Field table; override protection follows each descriptor's flag
        regenerate_ids: Write a fresh packed id with every update
        apply: False for a dry run - decide and report, write nothing
    """

    phase = "items"

    def __init__(
        self,
        repository,
        classifier: Classifier,
        fields: Sequence[FieldDescriptor] = ITEM_FIELDS,
        regenerate_ids: bool = True,
        apply: bool = True,
    ):
        self.repository = repository
        self.classifier = classifier
        self.fields = tuple(fields)
        self.regenerate_ids = regenerate_ids
        self.apply = apply

    @staticmethod
    def check_textures(items: Iterable[LocalItem], texture_hashes: Dict[str, str]) -> None:
        """Raise MissingAssetError if any item's texture has no resolved hash."""
        missing = sorted({item.texture for item in items if item.texture not in texture_hashes})
        if missing:
            raise MissingAssetError(missing, kind="texture")

    async def reconcile(self, items: Sequence[LocalItem], texture_hashes: Dict[str, str]) -> PhaseReport:
        self.check_textures(items, texture_hashes)

        report = PhaseReport(phase=self.phase)
        start = time.time()

        for item in items:
            record = await self.repository.get_by_game_id(item.game_id)
            decision = decide_item(item, texture_hashes[item.texture], record, self.classifier, self.fields)
            await self.apply_decision(item, decision, report)

        report.elapsed_seconds = time.time() - start
        logger.info(f"✅ {report.summary()}")
        return report

    async def apply_decision(self, item: LocalItem, decision: ItemDecision, report: PhaseReport) -> None:
        report.counts[decision.kind] += 1

        for field_name in decision.anomalies:
            message = (
                f"Item {item.game_id} ({item.name}): no persisted {field_name} "
                f"for category {item.category.name}, skipping"
            )
            logger.warning(message)
            report.anomalies.append(message)

        if decision.kind is DecisionKind.CREATE:
            await self._create(decision.record, report)
        elif decision.kind is DecisionKind.UPDATE:
            for update in decision.updates:
                await self._update(item, update, report)

    async def _create(self, record: ItemRecord, report: PhaseReport) -> None:
        record = dataclasses.replace(record, id=generate_item_id(record.game_id))
        if self.apply:
            await self.repository.create(record)
            report.writes += 1

        event = ReconciliationEvent(
            phase=self.phase,
            kind=DecisionKind.CREATE,
            key=record.game_id,
            field_name="name",
            new=record.name,
            record_id=record.id_hex,
        )
        report.events.append(event)
        logger.info(event.to_json())

    async def _update(self, item: LocalItem, update: FieldUpdate, report: PhaseReport) -> None:
        new_id = generate_item_id(item.game_id) if self.regenerate_ids else None
        if self.apply:
            await self.repository.update_fields(item.game_id, update.new, new_id)
            report.writes += 1

        event = ReconciliationEvent(
            phase=self.phase,
            kind=DecisionKind.UPDATE,
            key=item.game_id,
            field_name=update.field,
            old=_display(update.old),
            new=_display(update.new),
            record_id=item_id_hex(new_id) if new_id else None,
        )
        report.events.append(event)
        logger.info(event.to_json())
