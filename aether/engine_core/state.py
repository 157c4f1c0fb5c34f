"""
Game State - The mutable world the engine operates on.

Design principles:
- Single source of truth: clock, slots, inventory, currency, buffs, payouts
- Ownership: a CardInstance lives in exactly one slot XOR the inventory
- Serializable: every field maps onto the persistence schema
- Cloneable: commands run against a deep copy so rejected commands never leak
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any
from copy import deepcopy
from enum import Enum
import random
import uuid

from ..catalog.cards import CardDefinition, get_card
from ..catalog.marks import Mark
from .clock import CycleState, TICK_RATE_MS

BASE_SLOT_COUNT = 3
EXTENDED_SLOT_COUNT = 4
STARTING_CURRENCY = 4999
EMPRESS_WINDOW_SECONDS = 30.0


def new_instance_id() -> str:
    """Fresh, never reused instance id."""
    return uuid.uuid4().hex


class CurseType(str, Enum):
    """Curses applied by The Devil."""
    ISOLATED = "ISOLATED"
    VOLATILE = "VOLATILE"
    TEMPORAL = "TEMPORAL"


@dataclass
class Curse:
    """
    A persistent curse on a card instance.

    state holds per-type data: for TEMPORAL it is the lunar-cycle parity
    in which the card stays awake.
    """
    id: str
    type: CurseType
    state: int | None = None


@dataclass
class CardInstance:
    """
    A card in play (slot) or owned (inventory).

    Note: This is a runtime instance, not the definition.
    The definition lives in catalog.cards.
    """
    instance_id: str
    card_id: int
    marks: list[Mark] = field(default_factory=list)
    name: str | None = None  # Custom display name (blank cards)

    cooldown_until: int | None = None
    curse: Curse | None = None
    effect_multiplier: int | None = None
    is_blank: bool = False
    justice_bonus: int | None = None

    tower_arcano_active: bool = False
    tower_arcano_cycles: int | None = None

    hanged_man_active: bool = False
    hanged_man_consumes: int | None = None
    hanged_man_activated_at: int | None = None

    @classmethod
    def create(cls, card: CardDefinition, marks: list[Mark] | None = None) -> CardInstance:
        """New instance of a catalog card with its default (or given) marks."""
        return cls(
            instance_id=new_instance_id(),
            card_id=card.id,
            marks=list(marks if marks is not None else card.marks),
        )

    @property
    def definition(self) -> CardDefinition | None:
        return get_card(self.card_id)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        card = self.definition
        return card.name if card else f"Unknown card {self.card_id}"

    def is_on_cooldown(self, global_hours: int) -> bool:
        return self.cooldown_until is not None and self.cooldown_until > global_hours

    def apply_patch(self, patch: dict[str, Any]) -> None:
        """Merge a partial update (a handler's selfUpdate) into this instance."""
        known = {f.name for f in fields(self)}
        for key, value in patch.items():
            if key in known and key != "instance_id":
                setattr(self, key, value)

    def clone(self, fresh_id: bool = False) -> CardInstance:
        copy = deepcopy(self)
        if fresh_id:
            copy.instance_id = new_instance_id()
        return copy


@dataclass
class Slot:
    """A position in the circle."""
    position: int
    card: CardInstance | None = None
    sync_percentage: int = 0

    @property
    def is_empty(self) -> bool:
        return self.card is None


class BuffType(str, Enum):
    EFFECT_MULTIPLIER = "EFFECT_MULTIPLIER"
    SYNC_MODIFIER = "SYNC_MODIFIER"
    TICK_SPEED = "TICK_SPEED"


@dataclass
class GlobalBuff:
    """Time-boxed multiplier; duration counts down once per tick."""
    id: str
    source_card_id: int
    modifier: float
    duration: int
    type: BuffType


@dataclass
class PendingPayout:
    """Currency delivered once globalHours reaches delivery_time."""
    amount: float
    delivery_time: int


class ItemType(str, Enum):
    TAROT = "tarot"
    CONSUMABLE = "consumable"
    UPGRADE = "upgrade"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


@dataclass
class ShopItem:
    """A purchasable card offer."""
    id: str
    card_id: int
    name: str
    description: str
    cost: float
    marks: list[Mark] = field(default_factory=list)
    item_type: ItemType = ItemType.TAROT
    rarity: Rarity = Rarity.COMMON


@dataclass
class EmpressWindow:
    """
    Real-time activation window for one Empress instance.

    One active 30-second block followed by three inactive ones,
    restarted whenever the card is clicked.
    """
    is_active: bool = True
    cycles_left: int = 3
    last_tick: float = 0.0

    def advance(self, now: float, period: float) -> bool:
        """Step the window if a full period elapsed. Returns True if it changed."""
        if now - self.last_tick < period:
            return False
        if self.cycles_left > 0:
            self.cycles_left -= 1
            self.is_active = False
        else:
            self.is_active = True
            self.cycles_left = 3
        self.last_tick = now
        return True


@dataclass
class World:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    Player commands go through the reducer, hourly progress through
    the game loop.
    """
    world_id: str = field(default_factory=new_instance_id)

    # Clock and economy
    currency: float = STARTING_CURRENCY
    global_hours: int = 0
    tick_rate: int = TICK_RATE_MS
    permanent_sync_bonus: float = 0

    # Cards
    slots: list[Slot] = field(
        default_factory=lambda: [Slot(position=i) for i in range(BASE_SLOT_COUNT)]
    )
    inventory: list[CardInstance] = field(default_factory=list)
    shop_items: list[ShopItem] = field(default_factory=list)

    # Time-driven modifiers
    global_buffs: list[GlobalBuff] = field(default_factory=list)
    pending_payouts: list[PendingPayout] = field(default_factory=list)
    synergy_resource_rate: float = 0.0  # resources per real second

    # Player choice flow (PendingChoice from effect_resolver)
    pending_choice: Any | None = None

    # Derived / UI state
    cycle: CycleState = field(default_factory=CycleState)
    is_restocking: bool = False
    last_cycle_sync: float = 0.0
    empress_windows: dict[str, EmpressWindow] = field(default_factory=dict)

    # Random source for determinism
    random_seed: int | None = None
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(
        cls,
        seed: int | None = None,
        currency: float = STARTING_CURRENCY,
        tick_rate: int = TICK_RATE_MS,
    ) -> World:
        """Fresh world with an empty three-slot circle."""
        return cls(
            currency=currency,
            tick_rate=tick_rate,
            random_seed=seed,
            rng=random.Random(seed),
            cycle=CycleState.at(0, tick_rate),
        )

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    def card_at(self, index: int) -> CardInstance | None:
        if 0 <= index < len(self.slots):
            return self.slots[index].card
        return None

    def occupied_indices(self) -> list[int]:
        return [i for i, slot in enumerate(self.slots) if slot.card is not None]

    def empty_slot_count(self) -> int:
        return sum(1 for slot in self.slots if slot.card is None)

    def find_in_circle(self, instance_id: str) -> int | None:
        """Slot index holding the instance, or None."""
        for i, slot in enumerate(self.slots):
            if slot.card is not None and slot.card.instance_id == instance_id:
                return i
        return None

    def find_in_inventory(self, instance_id: str) -> int | None:
        for i, card in enumerate(self.inventory):
            if card.instance_id == instance_id:
                return i
        return None

    @property
    def effective_tick_rate(self) -> int:
        """tickRate scaled by every active TICK_SPEED buff."""
        rate = float(self.tick_rate)
        for buff in self.global_buffs:
            if buff.type == BuffType.TICK_SPEED:
                rate *= buff.modifier
        return int(rate)

    def clone(self) -> World:
        """Deep copy the world."""
        return deepcopy(self)
