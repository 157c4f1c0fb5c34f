"""
Tarot Cards - Static catalog of card archetypes.

Card structure:
- id: stable integer (0-21 for the Major Arcana, -1 for the Blank placeholder)
- effect_id: key into the effect registry (None means decorative only)
- element and base sync stats (display/shop data)
- default marks, copied into every new CardInstance

The catalog is read-only. Lookups by unknown id return None and callers
treat that as "no effect".
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .marks import Mark, lunar, sign


class EffectId(str, Enum):
    """Effect keys understood by the effect registry."""
    THE_FOOL = "THE_FOOL"
    THE_MAGICIAN = "THE_MAGICIAN"
    THE_HIGH_PRIESTESS = "THE_HIGH_PRIESTESS"
    THE_EMPRESS = "THE_EMPRESS"
    THE_EMPEROR = "THE_EMPEROR"
    THE_HIEROPHANT = "THE_HIEROPHANT"
    THE_LOVERS = "THE_LOVERS"
    THE_CHARIOT = "THE_CHARIOT"
    STRENGTH = "STRENGTH"
    THE_HERMIT = "THE_HERMIT"
    WHEEL_OF_FORTUNE = "WHEEL_OF_FORTUNE"
    JUSTICE = "JUSTICE"
    THE_HANGED_MAN = "THE_HANGED_MAN"
    DEATH = "DEATH"
    TEMPERANCE = "TEMPERANCE"
    THE_DEVIL = "THE_DEVIL"
    THE_TOWER = "THE_TOWER"
    THE_STAR = "THE_STAR"
    THE_MOON = "THE_MOON"
    THE_SUN = "THE_SUN"
    JUDGEMENT = "JUDGEMENT"
    THE_WORLD = "THE_WORLD"
    BLANK = "BLANK"


class Element(str, Enum):
    FIRE = "fire"
    WATER = "water"
    AIR = "air"
    EARTH = "earth"
    SPIRIT = "spirit"


class SyncType(str, Enum):
    ELEMENT = "element"
    LUNAR = "lunar"
    SIGN = "sign"


IMG_BASE_URL = "https://www.sacred-texts.com/tarot/pkt/img/"


@dataclass(frozen=True)
class CardDefinition:
    """
    Immutable card archetype.

    Note: This is the definition, not a runtime instance.
    Runtime state lives in engine_core.state.CardInstance.
    """
    id: int
    name: str
    effect_text: str
    element: Element
    sync_value: int = 0
    sync_type: SyncType = SyncType.ELEMENT
    sync_bonus: int = 0
    image_url: str = ""
    marks: tuple[Mark, ...] = field(default_factory=tuple)
    effect_id: EffectId | None = None

    @property
    def is_sync_related(self) -> bool:
        """Whether the effect text talks about sync (The Star's filter)."""
        return "sync" in self.effect_text.lower()


def _card(
    card_id: int,
    name: str,
    effect_text: str,
    element: Element,
    sync_value: int,
    sync_type: SyncType,
    sync_bonus: int,
    marks: tuple[Mark, ...],
    effect_id: EffectId,
) -> CardDefinition:
    return CardDefinition(
        id=card_id,
        name=name,
        effect_text=effect_text,
        element=element,
        sync_value=sync_value,
        sync_type=sync_type,
        sync_bonus=sync_bonus,
        image_url=f"{IMG_BASE_URL}ar{card_id:02d}.jpg",
        marks=marks,
        effect_id=effect_id,
    )


# ============================================================================
# Major Arcana
# ============================================================================

TAROT_LIBRARY: tuple[CardDefinition, ...] = (
    _card(0, "The Fool",
          "Rewinds 24 cycles, single use. The next 12 cycles last twice as long (stacks).",
          Element.SPIRIT, 10, SyncType.ELEMENT, 5, (sign(10),), EffectId.THE_FOOL),
    _card(1, "The Magician",
          "Doubles every numeric effect of the card to its right.",
          Element.FIRE, 15, SyncType.ELEMENT, 10, (sign(2),), EffectId.THE_MAGICIAN),
    _card(2, "The High Priestess",
          "Advances 168 cycles. Cooldown of 168 cycles.",
          Element.WATER, 20, SyncType.LUNAR, 15, (lunar(0),), EffectId.THE_HIGH_PRIESTESS),
    _card(3, "The Empress",
          "Copies the effect and state of the card to her right, keeping her own marks.",
          Element.EARTH, 12, SyncType.SIGN, 8, (sign(1),), EffectId.THE_EMPRESS),
    _card(4, "The Emperor",
          "Empowers synergy effects by 25%.",
          Element.FIRE, 18, SyncType.ELEMENT, 12, (sign(0),), EffectId.THE_EMPEROR),
    _card(5, "The Hierophant",
          "Earns 0.3 resources * Sync² each cycle.",
          Element.EARTH, 14, SyncType.SIGN, 9, (sign(8),), EffectId.THE_HIEROPHANT),
    _card(6, "The Lovers",
          "Choose between 2 cards. Leaves a blank card behind that inherits the marks.",
          Element.AIR, 25, SyncType.ELEMENT, 20, (sign(2),), EffectId.THE_LOVERS),
    _card(7, "The Chariot",
          "Shortens each day by 1 cycle. 10% chance to cut circle cooldowns by 2 cycles.",
          Element.FIRE, 17, SyncType.ELEMENT, 11, (sign(3),), EffectId.THE_CHARIOT),
    _card(8, "Strength",
          "+1 to the main numeric effect of adjacent cards.",
          Element.FIRE, 19, SyncType.ELEMENT, 13, (sign(4),), EffectId.STRENGTH),
    _card(9, "The Hermit",
          "Earns 2.5 resources per cycle for every empty space in the Circle.",
          Element.EARTH, 16, SyncType.SIGN, 10, (sign(5),), EffectId.THE_HERMIT),
    _card(10, "Wheel of Fortune",
          "Boosts circle income by 50% * Sync while marks are active.",
          Element.FIRE, 30, SyncType.SIGN, 25, (sign(8),), EffectId.WHEEL_OF_FORTUNE),
    _card(11, "Justice",
          "+1% Sync and 25 resources every 7 cycles. Resets every 168 cycles.",
          Element.AIR, 21, SyncType.ELEMENT, 14, (sign(6),), EffectId.JUSTICE),
    _card(12, "The Hanged Man",
          "Opens a sacrificial altar. Receive ((n+1)n/2)*50 Aether after 1 Moon. Cooldown of 1 Moon.",
          Element.WATER, 13, SyncType.LUNAR, 16, (sign(11),), EffectId.THE_HANGED_MAN),
    _card(13, "Death",
          "On the new moon, consumes the card to the left and turns another into Death (inherits marks).",
          Element.WATER, 5, SyncType.LUNAR, 40, (sign(7),), EffectId.DEATH),
    _card(14, "Temperance",
          "Equalizes the values produced across the Circle.",
          Element.AIR, 23, SyncType.SIGN, 17, (lunar(1),), EffectId.TEMPERANCE),
    _card(15, "The Devil",
          "Consumes marks for rewards and curses (Isolated, Volatile, Temporal).",
          Element.EARTH, 24, SyncType.ELEMENT, 18, (sign(9),), EffectId.THE_DEVIL),
    _card(16, "The Tower",
          "Reshuffles every 8 cycles. 15% chance to run ALL effects again.",
          Element.FIRE, 8, SyncType.ELEMENT, 30, (lunar(3),), EffectId.THE_TOWER),
    _card(17, "The Star",
          "+20% base Sync. +30% per active mark for Sync cards. Penalizes deviations.",
          Element.AIR, 22, SyncType.SIGN, 18, (sign(10),), EffectId.THE_STAR),
    _card(18, "The Moon",
          "Halves lunar weight and cuts signs to 30% of the Sync score.",
          Element.WATER, 28, SyncType.LUNAR, 22, (lunar(2),), EffectId.THE_MOON),
    _card(19, "The Sun",
          "At the noon cycle every effect in the Circle is multiplied by 4.",
          Element.FIRE, 28, SyncType.ELEMENT, 22, (sign(4),), EffectId.THE_SUN),
    _card(20, "Judgement",
          "Replicates 50% of adjacent effects, but reduces its targets by 25%.",
          Element.SPIRIT, 26, SyncType.LUNAR, 20, (lunar(1),), EffectId.JUDGEMENT),
    _card(21, "The World",
          "Cooldown of 2 Moons. 999 Aether. +100% effects (24h), x4 Sync effects (12h).",
          Element.SPIRIT, 35, SyncType.SIGN, 30, (sign(9),), EffectId.THE_WORLD),
)

BLANK_CARD = CardDefinition(
    id=-1,
    name="Blank Card",
    effect_text="Inherits the marks of its origin. Can be replaced by any other card.",
    element=Element.SPIRIT,
    image_url="about:blank",
    effect_id=EffectId.BLANK,
)

_BY_ID: dict[int, CardDefinition] = {card.id: card for card in TAROT_LIBRARY}
_BY_ID[BLANK_CARD.id] = BLANK_CARD


def get_card(card_id: int) -> CardDefinition | None:
    """Look up a card definition by id (None if unknown)."""
    return _BY_ID.get(card_id)


def get_card_by_effect(effect_id: EffectId) -> CardDefinition | None:
    """First catalog card carrying the given effect id."""
    for card in _BY_ID.values():
        if card.effect_id == effect_id:
            return card
    return None


def all_cards(include_blank: bool = False) -> list[CardDefinition]:
    """List catalog cards in id order."""
    cards = list(TAROT_LIBRARY)
    if include_blank:
        cards.insert(0, BLANK_CARD)
    return cards
