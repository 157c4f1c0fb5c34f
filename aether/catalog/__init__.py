"""
Catalog - Static tarot card definitions, marks and their load-time checks.
"""

from .cards import (
    CardDefinition,
    EffectId,
    Element,
    SyncType,
    TAROT_LIBRARY,
    BLANK_CARD,
    get_card,
    get_card_by_effect,
    all_cards,
)
from .marks import Mark, MarkKind, LUNAR_PHASES, ZODIAC_SIGNS, mark_pattern
from .validation import (
    validate_catalog,
    ensure_valid_catalog,
    CatalogValidationError,
    ValidationResult,
)

__all__ = [
    "CardDefinition",
    "EffectId",
    "Element",
    "SyncType",
    "TAROT_LIBRARY",
    "BLANK_CARD",
    "get_card",
    "get_card_by_effect",
    "all_cards",
    "Mark",
    "MarkKind",
    "LUNAR_PHASES",
    "ZODIAC_SIGNS",
    "mark_pattern",
    "validate_catalog",
    "ensure_valid_catalog",
    "CatalogValidationError",
    "ValidationResult",
]
