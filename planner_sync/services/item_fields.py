"""
Item field table - what the item reconciler compares, and how.

Each FieldDescriptor names one field group, the columns it writes, how to
derive its value from the local item and how to read it from the persisted
row. Protected descriptors are skipped for rows with override_item_data set.

Evaluation order is table order: always-reconciled fields first, then the
override-protected gameplay-authoring fields.
"""
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Tuple

from ..models.domain import ItemRecord, LocalItem
from .classifier import Classifier

BREAK_HITS_DIVISOR = 6


def derive_break_hits(raw: Optional[int]) -> int:
    """Catalog break hits are stored as hits * 6; persisted minimum is 1."""
    hits = (raw or 0) // BREAK_HITS_DIVISOR
    return hits if hits > 0 else 1


def derive_max_amount(raw: Optional[int]) -> int:
    """Zero / missing max amount persists as 1."""
    return raw if raw else 1


class LocalContext(NamedTuple):
    """Everything a local reader may need."""
    item: LocalItem
    texture_hash: str
    classifier: Classifier


# A local reader returns None when the value cannot be derived (anomaly)
LocalReader = Callable[[LocalContext], Optional[Tuple]]
RecordReader = Callable[[ItemRecord], Tuple]


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    columns: Tuple[str, ...]
    read_local: LocalReader
    read_record: RecordReader
    protected: bool = False

    def local_values(self, ctx: LocalContext) -> Optional[dict]:
        values = self.read_local(ctx)
        if values is None:
            return None
        return dict(zip(self.columns, values))

    def record_values(self, record: ItemRecord) -> dict:
        return dict(zip(self.columns, self.read_record(record)))


def _columns(*columns: str) -> RecordReader:
    return lambda record: tuple(getattr(record, c) for c in columns)


def _category(ctx: LocalContext) -> Optional[Tuple]:
    code = ctx.classifier.category_code(ctx.item.category)
    return None if code is None else (code,)


def _field(name: str, read_local: LocalReader, *columns: str, protected: bool = False) -> FieldDescriptor:
    columns = columns or (name,)
    return FieldDescriptor(
        name=name,
        columns=columns,
        read_local=read_local,
        read_record=_columns(*columns),
        protected=protected,
    )


ITEM_FIELDS: Tuple[FieldDescriptor, ...] = (
    # Always reconciled (bookkeeping)
    _field("texture_hash", lambda ctx: (ctx.texture_hash,)),
    _field("name", lambda ctx: (ctx.item.name,)),
    _field("max_amount", lambda ctx: (derive_max_amount(ctx.item.max_amount),)),
    _field("rarity", lambda ctx: (ctx.item.rarity,)),
    _field("item_category", _category),
    _field("break_hits", lambda ctx: (derive_break_hits(ctx.item.break_hits),)),
    _field("collision_type", lambda ctx: (ctx.item.collision_type,)),

    # Override-protected (gameplay authoring)
    _field("action_type", lambda ctx: (ctx.item.action_type,), protected=True),
    _field("texture", lambda ctx: (ctx.item.texture,), protected=True),
    _field(
        "placement",
        lambda ctx: (ctx.item.texture_x, ctx.item.texture_y, ctx.item.spread_type),
        "texture_x", "texture_y", "spread_type",
        protected=True,
    ),
)

PROTECTED_FIELDS = frozenset(d.name for d in ITEM_FIELDS if d.protected)

# Every column the reconciler may write besides id / game_id / override flag
ITEM_COLUMNS: Tuple[str, ...] = tuple(c for d in ITEM_FIELDS for c in d.columns)
