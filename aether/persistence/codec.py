"""
Save Codec - Maps the World onto the versioned save record and back.

The record uses short keys so codes stay small:
    {v, cur, gh, tr, psb, inv, sl, pp, gb}

Card instances only carry their non-default optional fields; anything
omitted decodes to unset. Import never mutates the given world: it
returns a clone with the persisted fields replaced, or raises
SaveCodeError.
"""

from __future__ import annotations
from typing import Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..catalog.marks import Mark, MarkKind
from ..engine_core.clock import TICK_RATE_MS, CycleState
from ..engine_core.state import (
    BASE_SLOT_COUNT,
    EXTENDED_SLOT_COUNT,
    BuffType,
    CardInstance,
    Curse,
    CurseType,
    GlobalBuff,
    PendingPayout,
    Slot,
    World,
)
from .transport import SaveCodeError, decode, encode

logger = logging.getLogger(__name__)

SAVE_VERSION = 1


class SavedMark(BaseModel):
    kind: MarkKind
    name: str
    icon: str = ""


class SavedCurse(BaseModel):
    id: str
    type: CurseType
    state: Optional[int] = None


class SavedCardInstance(BaseModel):
    """A CardInstance with short keys; None fields are left out of the record."""
    model_config = ConfigDict(populate_by_name=True)

    card_id: int = Field(alias="cid")
    instance_id: str = Field(alias="iid")
    marks: list[SavedMark] = Field(default_factory=list, alias="m")
    name: Optional[str] = Field(None, alias="n")
    cooldown_until: Optional[int] = Field(None, alias="cd")
    curse: Optional[SavedCurse] = Field(None, alias="cr")
    is_blank: Optional[bool] = Field(None, alias="ib")
    justice_bonus: Optional[int] = Field(None, alias="jb")
    tower_arcano_cycles: Optional[int] = Field(None, alias="tc")
    tower_arcano_active: Optional[bool] = Field(None, alias="ta")
    effect_multiplier: Optional[int] = Field(None, alias="em")
    hanged_man_active: Optional[bool] = Field(None, alias="hma")
    hanged_man_consumes: Optional[int] = Field(None, alias="hmc")
    hanged_man_activated_at: Optional[int] = Field(None, alias="hmaa")

    @classmethod
    def from_instance(cls, card: CardInstance) -> SavedCardInstance:
        return cls(
            card_id=card.card_id,
            instance_id=card.instance_id,
            marks=[SavedMark(kind=m.kind, name=m.name, icon=m.icon) for m in card.marks],
            name=card.name,
            cooldown_until=card.cooldown_until,
            curse=(
                SavedCurse(id=card.curse.id, type=card.curse.type, state=card.curse.state)
                if card.curse else None
            ),
            is_blank=card.is_blank or None,
            justice_bonus=card.justice_bonus,
            tower_arcano_cycles=card.tower_arcano_cycles,
            tower_arcano_active=card.tower_arcano_active or None,
            effect_multiplier=card.effect_multiplier,
            hanged_man_active=card.hanged_man_active or None,
            hanged_man_consumes=card.hanged_man_consumes,
            hanged_man_activated_at=card.hanged_man_activated_at,
        )

    def to_instance(self) -> CardInstance:
        return CardInstance(
            instance_id=self.instance_id,
            card_id=self.card_id,
            marks=[Mark(kind=m.kind, name=m.name, icon=m.icon) for m in self.marks],
            name=self.name,
            cooldown_until=self.cooldown_until,
            curse=(
                Curse(id=self.curse.id, type=self.curse.type, state=self.curse.state)
                if self.curse else None
            ),
            is_blank=bool(self.is_blank),
            justice_bonus=self.justice_bonus,
            tower_arcano_cycles=self.tower_arcano_cycles,
            tower_arcano_active=bool(self.tower_arcano_active),
            effect_multiplier=self.effect_multiplier,
            hanged_man_active=bool(self.hanged_man_active),
            hanged_man_consumes=self.hanged_man_consumes,
            hanged_man_activated_at=self.hanged_man_activated_at,
        )


class SavedPayout(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float
    delivery_time: int = Field(alias="deliveryTime")


class SavedBuff(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    source_card_id: int = Field(alias="sourceCardId")
    modifier: float
    duration: int
    type: BuffType


class SaveState(BaseModel):
    """The versioned save record."""
    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(alias="v")
    currency: float = Field(alias="cur")
    global_hours: int = Field(alias="gh", ge=0)
    tick_rate: int = Field(TICK_RATE_MS, alias="tr", ge=1)
    permanent_sync_bonus: float = Field(0, alias="psb")
    inventory: list[SavedCardInstance] = Field(default_factory=list, alias="inv")
    slots: list[Optional[SavedCardInstance]] = Field(default_factory=list, alias="sl")
    pending_payouts: list[SavedPayout] = Field(default_factory=list, alias="pp")
    global_buffs: list[SavedBuff] = Field(default_factory=list, alias="gb")

    @classmethod
    def from_world(cls, world: World) -> SaveState:
        return cls(
            version=SAVE_VERSION,
            currency=world.currency,
            global_hours=world.global_hours,
            tick_rate=world.tick_rate,
            permanent_sync_bonus=world.permanent_sync_bonus,
            inventory=[SavedCardInstance.from_instance(c) for c in world.inventory],
            slots=[
                SavedCardInstance.from_instance(s.card) if s.card is not None else None
                for s in world.slots
            ],
            pending_payouts=[
                SavedPayout(amount=p.amount, delivery_time=p.delivery_time)
                for p in world.pending_payouts
            ],
            global_buffs=[
                SavedBuff(
                    id=b.id,
                    source_card_id=b.source_card_id,
                    modifier=b.modifier,
                    duration=b.duration,
                    type=b.type,
                )
                for b in world.global_buffs
            ],
        )

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def export_save(world: World) -> str:
    """Encode the persisted part of the world into a save code."""
    return encode(SaveState.from_world(world).to_record())


def decode_save(code: str) -> SaveState:
    """
    Decode and validate a save code.

    Raises SaveCodeError for malformed codes, schema violations or a
    version other than SAVE_VERSION.
    """
    record = decode(code)
    try:
        state = SaveState.model_validate(record)
    except ValidationError as e:
        raise SaveCodeError(f"Save record failed validation: {e.error_count()} error(s)") from e
    if state.version != SAVE_VERSION:
        raise SaveCodeError(
            f"Incompatible save version {state.version} (expected {SAVE_VERSION})"
        )
    if len(state.slots) > EXTENDED_SLOT_COUNT:
        raise SaveCodeError(f"Save has {len(state.slots)} slots (at most {EXTENDED_SLOT_COUNT})")
    return state


def import_save(code: str, world: World) -> World:
    """Return a clone of world with every persisted field taken from the code."""
    state = decode_save(code)
    new_world = world.clone()
    new_world.currency = state.currency
    new_world.global_hours = state.global_hours
    new_world.tick_rate = state.tick_rate
    new_world.permanent_sync_bonus = state.permanent_sync_bonus
    new_world.inventory = [c.to_instance() for c in state.inventory]

    saved_slots = list(state.slots)
    while len(saved_slots) < BASE_SLOT_COUNT:
        saved_slots.append(None)
    new_world.slots = [
        Slot(position=i, card=saved.to_instance() if saved is not None else None)
        for i, saved in enumerate(saved_slots)
    ]
    new_world.pending_payouts = [
        PendingPayout(amount=p.amount, delivery_time=p.delivery_time)
        for p in state.pending_payouts
    ]
    new_world.global_buffs = [
        GlobalBuff(
            id=b.id,
            source_card_id=b.source_card_id,
            modifier=b.modifier,
            duration=b.duration,
            type=b.type,
        )
        for b in state.global_buffs
    ]
    new_world.empress_windows = {}
    new_world.cycle = CycleState.at(new_world.global_hours, new_world.effective_tick_rate)
    logger.info("Imported save at hour %d", new_world.global_hours)
    return new_world
