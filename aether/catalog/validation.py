"""
Catalog Validation - Load-time checks for the card catalog.

Validates that:
1. Card ids are unique and names are present
2. Every effect id referenced by a card has a registered behaviour
3. Default marks name real lunar phases / zodiac signs
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .cards import CardDefinition, EffectId, all_cards
from .marks import LUNAR_PHASES, ZODIAC_SIGNS, MarkKind


class CatalogValidationError(Exception):
    """Raised when the catalog and the effect registry disagree."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s): {errors}")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(
    behaviors: Mapping[EffectId, Any],
    cards: Iterable[CardDefinition] | None = None,
) -> ValidationResult:
    """
    Validate catalog cards against the registered behaviours.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []
    cards = list(cards) if cards is not None else all_cards(include_blank=True)

    seen: set[int] = set()
    phase_names = {p.name for p in LUNAR_PHASES}
    sign_names = {s.name for s in ZODIAC_SIGNS}

    for card in cards:
        if card.id in seen:
            errors.append(f"Duplicate card id {card.id}")
        seen.add(card.id)

        if not card.name:
            errors.append(f"Card {card.id} has empty name")

        if card.effect_id is None:
            warnings.append(f"Card {card.id} ({card.name}) is decorative only")
        elif card.effect_id not in behaviors:
            errors.append(
                f"Card {card.id} ({card.name}) references unregistered effect '{card.effect_id.value}'"
            )

        for mark in card.marks:
            known = phase_names if mark.kind == MarkKind.LUNAR else sign_names
            if mark.name not in known:
                errors.append(f"Card {card.id} has unknown {mark.kind.value} mark '{mark.name}'")

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def ensure_valid_catalog(behaviors: Mapping[EffectId, Any]) -> None:
    """Raise CatalogValidationError if the catalog does not validate."""
    result = validate_catalog(behaviors)
    if not result.valid:
        raise CatalogValidationError(result.errors)
