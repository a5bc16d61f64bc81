"""
Item category domain model
"""
from enum import Enum


class ItemCategory(Enum):
    """Semantic item category derived from the raw catalog action code."""
    FIST = "fist"
    TOOL = "tool"
    NONE = "none"
    BACKGROUND = "background"
    SEED = "seed"
    CLOTH = "cloth"
    COMPONENT = "component"
    FOREGROUND = "foreground"
