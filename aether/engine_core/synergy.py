"""
Synergies - Pairwise bonuses unlocked by cards sharing the circle.

A synergy is active when both of its effect ids are present anywhere in
the circle. Empowerment is global: every active synergy is empowered
while an Emperor-effect card is in the circle.

Detection is a pure function of slot contents, safe to call every tick
and after every slot mutation.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..catalog.cards import EffectId
from .state import CardInstance, Slot


class SynergyId(str, Enum):
    FOOL_WORLD = "FOOL_WORLD"
    MAGICIAN_PRIESTESS = "MAGICIAN_PRIESTESS"
    EMPRESS_EMPEROR = "EMPRESS_EMPEROR"
    HIEROPHANT_HERMIT = "HIEROPHANT_HERMIT"
    WHEEL_JUDGEMENT = "WHEEL_JUDGEMENT"
    DEATH_TOWER = "DEATH_TOWER"
    SUN_MOON = "SUN_MOON"
    LOVERS_BLANK = "LOVERS_BLANK"


@dataclass(frozen=True)
class Synergy:
    """Static synergy definition."""
    id: SynergyId
    name: str
    cards: tuple[EffectId, EffectId]
    description: str
    description_empowered: str
    icon: str = ""


@dataclass(frozen=True)
class ActiveSynergy:
    """A synergy currently in effect."""
    synergy: Synergy
    is_empowered: bool

    @property
    def id(self) -> SynergyId:
        return self.synergy.id

    @property
    def description(self) -> str:
        return self.synergy.description_empowered if self.is_empowered else self.synergy.description


SYNERGIES: tuple[Synergy, ...] = (
    Synergy(
        SynergyId.FOOL_WORLD, "Hero's Journey",
        (EffectId.THE_FOOL, EffectId.THE_WORLD),
        "+3% resources per cycle between 6h and 17h.",
        "+3.75% resources per cycle between 6h and 17h.",
        "🌀",
    ),
    Synergy(
        SynergyId.MAGICIAN_PRIESTESS, "Arcane Ritual",
        (EffectId.THE_MAGICIAN, EffectId.THE_HIGH_PRIESTESS),
        "Pure passive effects trigger a second time every cycle.",
        "Pure passive effects trigger a second time at 130% every cycle.",
        "🔮",
    ),
    Synergy(
        SynergyId.EMPRESS_EMPEROR, "Empire",
        (EffectId.THE_EMPRESS, EffectId.THE_EMPEROR),
        "Adds a fourth slot to the Circle.",
        "Adds a fourth slot to the Circle.",
        "👑",
    ),
    Synergy(
        SynergyId.HIEROPHANT_HERMIT, "Isolated Wisdom",
        (EffectId.THE_HIEROPHANT, EffectId.THE_HERMIT),
        "Nullifies both effects. Generates 0.5 resources per second.",
        "Nullifies both effects. Generates 0.625 resources per second.",
        "📜",
    ),
    Synergy(
        SynergyId.WHEEL_JUDGEMENT, "Inevitable Karma",
        (EffectId.WHEEL_OF_FORTUNE, EffectId.JUDGEMENT),
        "Sync locked between 25% and 75%. Removes both cards' penalties.",
        "Sync locked between 25% and 75%. External Sync bonuses apply at 1/4.",
        "⚖️",
    ),
    Synergy(
        SynergyId.DEATH_TOWER, "Inevitable Ruin",
        (EffectId.DEATH, EffectId.THE_TOWER),
        "The Tower cannot be consumed. Tower activation chance rises to 50%.",
        "Tower activation chance rises to 62.5%.",
        "💥",
    ),
    Synergy(
        SynergyId.SUN_MOON, "Eternal Eclipse",
        (EffectId.THE_SUN, EffectId.THE_MOON),
        "Day and night behave the same. Removes the Moon's penalty but cuts its influence by 25%.",
        "The Moon's influence is cut by only 20%.",
        "🌗",
    ),
    Synergy(
        SynergyId.LOVERS_BLANK, "Echo of the Void",
        (EffectId.THE_LOVERS, EffectId.BLANK),
        "Consume 1 Blank Card when activating The Lovers for +1 choice.",
        "Consume 2 Blank Cards for +3 choices in total.",
        "💔",
    ),
)


def effect_id_of(card: CardInstance | None) -> EffectId | None:
    """Effect id of an instance through the catalog (None if unknown)."""
    if card is None:
        return None
    definition = card.definition
    return definition.effect_id if definition else None


def present_effects(slots: Iterable[Slot]) -> set[EffectId]:
    """Set of effect ids across occupied slots."""
    effects = set()
    for slot in slots:
        effect_id = effect_id_of(slot.card)
        if effect_id is not None:
            effects.add(effect_id)
    return effects


def compute_active_synergies(slots: Iterable[Slot]) -> list[ActiveSynergy]:
    """
    Active synergies for a set of slots.

    Order-independent over slot positions; results follow SYNERGIES order.
    """
    effects = present_effects(slots)
    is_empowered = EffectId.THE_EMPEROR in effects
    return [
        ActiveSynergy(synergy=synergy, is_empowered=is_empowered)
        for synergy in SYNERGIES
        if synergy.cards[0] in effects and synergy.cards[1] in effects
    ]


def find_synergy(active: Iterable[ActiveSynergy], synergy_id: SynergyId) -> ActiveSynergy | None:
    for item in active:
        if item.id == synergy_id:
            return item
    return None


def is_active(active: Iterable[ActiveSynergy], synergy_id: SynergyId) -> bool:
    return find_synergy(active, synergy_id) is not None
