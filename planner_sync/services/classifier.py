"""
Item classifier - raw catalog action codes to semantic categories.

The classification feeds two independent uses:
1. Scope filter: which catalog entries are persisted at all
2. Category code: the numeric item_category written to the items table

All tables live in ClassifierConfig so deployments (and tests) can swap
them without touching the classifier.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from ..models.domain import ItemCategory

logger = logging.getLogger(__name__)


def _frozen_map(values: dict) -> Mapping:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class ClassifierConfig:
    """Immutable classification tables."""

    # Single action codes with a dedicated category
    exact_codes: Mapping[int, ItemCategory] = field(default_factory=lambda: _frozen_map({
        0: ItemCategory.FIST,
        1: ItemCategory.TOOL,
        19: ItemCategory.SEED,
        20: ItemCategory.CLOTH,
        129: ItemCategory.COMPONENT,
    }))
    none_codes: FrozenSet[int] = frozenset({8, 37, 44, 48, 64, 107, 121, 133, 137})
    background_codes: FrozenSet[int] = frozenset({18, 22, 23, 28})
    default_category: ItemCategory = ItemCategory.FOREGROUND

    # Scope filter
    eligible_categories: FrozenSet[ItemCategory] = frozenset({
        ItemCategory.FOREGROUND,
        ItemCategory.BACKGROUND,
    })
    allowed_names: FrozenSet[str] = frozenset({"Fist", "Wrench"})

    # Persisted item_category codes
    category_codes: Mapping[ItemCategory, int] = field(default_factory=lambda: _frozen_map({
        ItemCategory.FOREGROUND: 1,
        ItemCategory.BACKGROUND: 2,
        ItemCategory.FIST: 3,
        ItemCategory.TOOL: 3,
    }))


DEFAULT_CLASSIFIER_CONFIG = ClassifierConfig()


class Classifier:
    """Total, deterministic mapping from action code to ItemCategory."""

    def __init__(self, config: ClassifierConfig = DEFAULT_CLASSIFIER_CONFIG):
        self.config = config

    def classify(self, action_code: int) -> ItemCategory:
        config = self.config
        if action_code in config.exact_codes:
            return config.exact_codes[action_code]
        if action_code in config.none_codes:
            return ItemCategory.NONE
        if action_code in config.background_codes:
            return ItemCategory.BACKGROUND
        return config.default_category

    def is_eligible(self, category: ItemCategory, name: str) -> bool:
        """Whether an entry is in scope for persistence."""
        return category in self.config.eligible_categories or name in self.config.allowed_names

    def category_code(self, category: ItemCategory) -> Optional[int]:
        """
        Persisted item_category code.

        Returns None for categories with no mapping; callers report
        that as an anomaly rather than failing.
        """
        return self.config.category_codes.get(category)
