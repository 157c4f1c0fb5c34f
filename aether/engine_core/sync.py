"""
Sync Calculator - Global synchronization score of the circle.

The score measures how well the marks in the circle match the sky:
the current lunar phase (counted only at night unless SUN_MOON is
active) and the current zodiac sign. Card presence and synergies then
reshape it:

- THE_MOON lowers the lunar and sign weights
- SUN_MOON lets lunar marks count in daylight, then scales the score down
- THE_STAR adds a flat bonus plus a per-mark bonus for sync cards
- permanent and Justice bonuses are added (quartered by an empowered
  WHEEL_JUDGEMENT)
- THE_EMPEROR multiplies the result
- WHEEL_JUDGEMENT clamps the result into [25, 75]

The order of these steps matters and is fixed.
"""

from __future__ import annotations
from collections import Counter
from typing import Iterable
import math

from ..catalog.cards import EffectId
from ..catalog.marks import LUNAR_PHASES, ZODIAC_SIGNS, Mark, MarkKind, mark_pattern
from .clock import is_daytime, phase_index, sign_index
from .state import CardInstance, CurseType, Slot, World
from .synergy import ActiveSynergy, SynergyId, effect_id_of, find_synergy

LUNAR_WEIGHT = 1.0
LUNAR_WEIGHT_MOON = 0.5
SIGN_WEIGHT = 0.5
SIGN_WEIGHT_MOON = 0.3

SUN_MOON_SCALE = 0.75
SUN_MOON_SCALE_EMPOWERED = 0.80

STAR_FLAT_BONUS = 20
STAR_MARK_BONUS = 30

EMPEROR_SYNC_MULTIPLIER = 1.25
WHEEL_JUDGEMENT_MIN = 25
WHEEL_JUDGEMENT_MAX = 75


def is_isolated(card: CardInstance) -> bool:
    return card.curse is not None and card.curse.type == CurseType.ISOLATED


def mark_matches(
    mark: Mark,
    phase_name: str,
    sign_name: str,
    lunar_counts: bool,
) -> bool:
    """Whether a mark matches the current sky."""
    if mark.kind == MarkKind.LUNAR:
        return lunar_counts and mark.name == phase_name
    return mark.name == sign_name


def lunar_marks_count(global_hours: int, active_synergies: Iterable[ActiveSynergy]) -> bool:
    """Lunar marks count at night, or always under SUN_MOON."""
    return not is_daytime(global_hours) or find_synergy(active_synergies, SynergyId.SUN_MOON) is not None


def compute_global_sync(
    slots: list[Slot],
    current_sign_index: int,
    current_phase_index: int,
    global_hours: int,
    permanent_sync_bonus: float,
    active_synergies: list[ActiveSynergy],
) -> int:
    """
    Compute the global sync score.

    Returns an integer, not capped except by the WHEEL_JUDGEMENT clamp.
    Blank cards and cards with unknown ids are ignored.
    """
    cards = [
        slot.card for slot in slots
        if slot.card is not None and not slot.card.is_blank and slot.card.definition is not None
    ]

    has_emperor = has_star = has_moon = False
    justice_bonus = 0
    for card in cards:
        effect_id = effect_id_of(card)
        if effect_id == EffectId.THE_EMPEROR:
            has_emperor = True
        elif effect_id == EffectId.THE_STAR:
            has_star = True
        elif effect_id == EffectId.THE_MOON:
            has_moon = True
        elif effect_id == EffectId.JUSTICE:
            justice_bonus += card.justice_bonus or 0

    sun_moon = find_synergy(active_synergies, SynergyId.SUN_MOON)
    wheel_judgement = find_synergy(active_synergies, SynergyId.WHEEL_JUDGEMENT)

    phase_name = LUNAR_PHASES[current_phase_index].name
    sign_name = ZODIAC_SIGNS[current_sign_index].name
    lunar_counts = lunar_marks_count(global_hours, active_synergies)

    if sun_moon is not None:
        lunar_weight = LUNAR_WEIGHT
    else:
        lunar_weight = LUNAR_WEIGHT_MOON if has_moon else LUNAR_WEIGHT
    sign_weight = SIGN_WEIGHT_MOON if has_moon else SIGN_WEIGHT

    valid_cards = [card for card in cards if not is_isolated(card)]

    lunar_names = {m.name for card in valid_cards for m in card.marks if m.kind == MarkKind.LUNAR}
    sign_names = {m.name for card in valid_cards for m in card.marks if m.kind == MarkKind.SIGN}

    lunar_synced = 1 if lunar_counts and phase_name in lunar_names else 0
    sign_synced = 1 if sign_name in sign_names else 0

    lunar_sync = (lunar_weight / len(lunar_names)) * lunar_synced if lunar_names else 0.0
    sign_sync = (sign_weight / len(sign_names)) * sign_synced if sign_names else 0.0
    total = (lunar_sync + sign_sync) * 100

    if sun_moon is not None:
        total *= SUN_MOON_SCALE_EMPOWERED if sun_moon.is_empowered else SUN_MOON_SCALE

    if has_star:
        total += STAR_FLAT_BONUS
        total += _star_bonus(valid_cards, phase_name, sign_name, lunar_counts)

    external_bonus = permanent_sync_bonus + justice_bonus
    if wheel_judgement is not None and wheel_judgement.is_empowered:
        external_bonus /= 4
    total += external_bonus

    if has_emperor:
        total *= EMPEROR_SYNC_MULTIPLIER

    if wheel_judgement is not None:
        total = max(WHEEL_JUDGEMENT_MIN, min(total, WHEEL_JUDGEMENT_MAX))

    return math.floor(total)


def _star_bonus(
    cards: list[CardInstance],
    phase_name: str,
    sign_name: str,
    lunar_counts: bool,
) -> float:
    """Per-mark bonus for sync cards, halved off the dominant mark pattern."""
    if not cards:
        return 0.0
    patterns = Counter(mark_pattern(card.marks) for card in cards)
    top = max(patterns.values())
    dominant = {pattern for pattern, count in patterns.items() if count == top}

    bonus = 0.0
    for card in cards:
        definition = card.definition
        if definition is None or not definition.is_sync_related:
            continue
        active = sum(1 for m in card.marks if mark_matches(m, phase_name, sign_name, lunar_counts))
        card_bonus = STAR_MARK_BONUS * active
        if mark_pattern(card.marks) not in dominant:
            card_bonus /= 2
        bonus += card_bonus
    return bonus


def slot_sync_percentage(
    card: CardInstance | None,
    current_sign_index: int,
    current_phase_index: int,
    lunar_counts: bool,
) -> int:
    """Share of a card's marks matching the sky, 0..100."""
    if card is None or card.is_blank or not card.marks or is_isolated(card):
        return 0
    phase_name = LUNAR_PHASES[current_phase_index].name
    sign_name = ZODIAC_SIGNS[current_sign_index].name
    active = sum(1 for m in card.marks if mark_matches(m, phase_name, sign_name, lunar_counts))
    return math.floor(100 * active / len(card.marks))


def world_sync(world: World, active_synergies: list[ActiveSynergy]) -> int:
    """Global sync score of a world at its current hour."""
    hours = world.global_hours
    return compute_global_sync(
        world.slots,
        sign_index(hours),
        phase_index(hours),
        hours,
        world.permanent_sync_bonus,
        active_synergies,
    )


def refresh_slot_sync(world: World, active_synergies: list[ActiveSynergy]) -> None:
    """Recompute every slot's sync percentage in place."""
    hours = world.global_hours
    lunar_counts = lunar_marks_count(hours, active_synergies)
    for slot in world.slots:
        slot.sync_percentage = slot_sync_percentage(
            slot.card, sign_index(hours), phase_index(hours), lunar_counts,
        )
