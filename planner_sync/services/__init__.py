"""
Reconciliation services

- Classifier: action code -> ItemCategory, scope filter, category codes
- catalog_loader / asset_loader: local sources -> LocalItem / LocalAsset
- AssetReconciler: textures and weather tables
- ItemReconciler: items table, field-by-field
"""
from .classifier import Classifier, ClassifierConfig, DEFAULT_CLASSIFIER_CONFIG
from .item_fields import (
    ITEM_FIELDS,
    PROTECTED_FIELDS,
    FieldDescriptor,
    derive_break_hits,
    derive_max_amount,
)
from .asset_reconciler import AssetReconciler, ConflictPolicy, decide_asset
from .item_reconciler import ItemReconciler, decide_item

__all__ = [
    'Classifier',
    'ClassifierConfig',
    'DEFAULT_CLASSIFIER_CONFIG',
    'ITEM_FIELDS',
    'PROTECTED_FIELDS',
    'FieldDescriptor',
    'derive_break_hits',
    'derive_max_amount',
    'AssetReconciler',
    'ConflictPolicy',
    'decide_asset',
    'ItemReconciler',
    'decide_item',
]
