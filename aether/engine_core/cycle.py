"""
Cycle Processor - The hourly pipeline.

Runs once per elapsed game hour, in this fixed order:
1. Raw pass: on_cycle for every occupied slot (nullified cards yield zero)
2. Arcane Ritual: pure passive handlers run a second time
3. Adjacency: Magician, Strength, Judgement on a copy of the raw outputs
4. Global modifiers: Sun at noon, effect multipliers, curses, buffs, Emperor
5. Equalization: Temperance averages strictly positive outputs
6. Aggregation into totals
7. Synergy-scoped scalars: Hero's Journey, Wheel of Fortune, and the
   real-time rate from Isolated Wisdom

Outputs are keyed by instance id while handlers run (Death and the Tower
can move or destroy cards mid-pass) and laid out by slot position for
passes 3-6. The processor returns deltas; applying them is the game
loop's job.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..catalog.cards import EffectId
from .clock import is_daytime, is_peak_hour, lunar_cycle_number
from .effect_resolver import BEHAVIORS, CycleOutput, EffectContext
from .state import BuffType, CardInstance, CurseType, GlobalBuff, Slot, World
from .synergy import ActiveSynergy, SynergyId, effect_id_of, find_synergy, present_effects

logger = logging.getLogger(__name__)

ARCANE_RITUAL_FACTOR = 1.0
ARCANE_RITUAL_FACTOR_EMPOWERED = 1.3
SUN_NOON_MULTIPLIER = 4
EMPEROR_OUTPUT_MULTIPLIER = 1.25
ISOLATED_MULTIPLIER = 1.5
VOLATILE_RESOURCE_MULTIPLIER = 3
VOLATILE_SYNC_BONUS = 0.2
TEMPORAL_MULTIPLIER = 3
FOOL_WORLD_BONUS = 0.03
FOOL_WORLD_BONUS_EMPOWERED = 0.0375
WHEEL_SYNC_FACTOR = 0.5
HIEROPHANT_HERMIT_RATE = 0.5
HIEROPHANT_HERMIT_RATE_EMPOWERED = 0.625


@dataclass
class SlotOutput:
    """Resources and sync attributed to one slot position."""
    resources: float = 0.0
    sync: float = 0.0

    def copy(self) -> SlotOutput:
        return SlotOutput(self.resources, self.sync)

    def scale(self, factor: float) -> None:
        self.resources *= factor
        self.sync *= factor


@dataclass
class CycleResult:
    """Unapplied result of one hour."""
    total_resources: float = 0.0
    total_sync: float = 0.0
    time_adjustment: int = 0
    slot_updates: dict[str, dict[str, Any]] = field(default_factory=dict)  # instance_id -> patch
    slot_outputs: list[SlotOutput] = field(default_factory=list)
    synergy_resource_rate: float = 0.0


def synergy_resource_rate(active_synergies: list[ActiveSynergy]) -> float:
    """Fixed resources-per-second rate granted by Isolated Wisdom."""
    synergy = find_synergy(active_synergies, SynergyId.HIEROPHANT_HERMIT)
    if synergy is None:
        return 0.0
    return HIEROPHANT_HERMIT_RATE_EMPOWERED if synergy.is_empowered else HIEROPHANT_HERMIT_RATE


def _merge_patch(patches: dict[str, dict[str, Any]], instance_id: str, patch: dict[str, Any] | None) -> None:
    if patch:
        patches.setdefault(instance_id, {}).update(patch)


# ============================================================================
# Passes
# ============================================================================

def apply_adjacency(
    slots: list[Slot],
    raw: list[SlotOutput],
    wheel_judgement: bool = False,
) -> list[SlotOutput]:
    """
    Adjacency pass.

    Reads neighbours' raw outputs and writes into a separate modified
    copy, so no write is ever seen by a later read.
    """
    modified = [output.copy() for output in raw]
    count = len(slots)
    for i, slot in enumerate(slots):
        effect_id = effect_id_of(slot.card)
        if effect_id is None:
            continue
        right = (i + 1) % count
        left = (i - 1) % count

        if effect_id == EffectId.THE_MAGICIAN:
            modified[right].scale(2)
        elif effect_id == EffectId.STRENGTH:
            for neighbor in {left, right}:
                if neighbor != i and slots[neighbor].card is not None:
                    modified[neighbor].resources += 1
        elif effect_id == EffectId.JUDGEMENT:
            for neighbor in {left, right}:
                if neighbor == i:
                    continue
                modified[i].resources += raw[neighbor].resources * 0.5
                modified[i].sync += raw[neighbor].sync * 0.5
                if not wheel_judgement:
                    modified[neighbor].scale(0.75)
    return modified


def _curse_factor(card: CardInstance, output: SlotOutput, global_hours: int) -> None:
    curse = card.curse
    if curse is None:
        return
    if curse.type == CurseType.ISOLATED:
        output.scale(ISOLATED_MULTIPLIER)
    elif curse.type == CurseType.VOLATILE:
        mode = global_hours % 3
        if mode == 0:
            output.resources *= VOLATILE_RESOURCE_MULTIPLIER
        elif mode == 1:
            output.sync += VOLATILE_SYNC_BONUS
    elif curse.type == CurseType.TEMPORAL:
        awake = lunar_cycle_number(global_hours) % 2 == (curse.state or 0)
        output.scale(TEMPORAL_MULTIPLIER if awake else 0)


def apply_global_modifiers(
    slots: list[Slot],
    outputs: list[SlotOutput],
    global_hours: int,
    buffs: list[GlobalBuff],
) -> list[SlotOutput]:
    """Global modifier pass over every occupied slot's modified output."""
    effects = present_effects(slots)
    sun_noon = EffectId.THE_SUN in effects and is_peak_hour(global_hours)
    has_emperor = EffectId.THE_EMPEROR in effects

    result = [output.copy() for output in outputs]
    for slot, output in zip(slots, result):
        card = slot.card
        if card is None:
            continue
        if sun_noon:
            output.scale(SUN_NOON_MULTIPLIER)
        if card.effect_multiplier:
            output.scale(card.effect_multiplier)
        _curse_factor(card, output, global_hours)
        for buff in buffs:
            if buff.type == BuffType.EFFECT_MULTIPLIER:
                output.resources *= buff.modifier
            elif buff.type == BuffType.SYNC_MODIFIER:
                output.sync *= buff.modifier
        if has_emperor:
            output.scale(EMPEROR_OUTPUT_MULTIPLIER)
    return result


def equalize(outputs: list[SlotOutput]) -> list[SlotOutput]:
    """Temperance: average strictly positive values, per quantity."""
    result = [output.copy() for output in outputs]
    for attr in ("resources", "sync"):
        members = [output for output in result if getattr(output, attr) > 0]
        if not members:
            continue
        mean = sum(getattr(output, attr) for output in members) / len(members)
        for output in members:
            setattr(output, attr, mean)
    return result


# ============================================================================
# Pipeline
# ============================================================================

def process_cycle(
    world: World,
    global_sync: int,
    active_synergies: list[ActiveSynergy],
) -> CycleResult:
    """
    Run the hourly pipeline against the world.

    Only self-contained handler side effects (Death, Tower, Chariot) touch
    the world here; currency, clock, patches and buffs are left to the caller.
    """
    nullified: frozenset[EffectId] = frozenset()
    if find_synergy(active_synergies, SynergyId.HIEROPHANT_HERMIT):
        nullified = frozenset({EffectId.THE_HIEROPHANT, EffectId.THE_HERMIT})

    raw_by_instance: dict[str, CycleOutput] = {}
    patches: dict[str, dict[str, Any]] = {}
    snapshot = [slot.card for slot in world.slots if slot.card is not None]

    def run(card: CardInstance, replay: bool) -> CycleOutput | None:
        index = world.find_in_circle(card.instance_id)
        if index is None:
            return None  # destroyed earlier this hour
        effect_id = effect_id_of(card)
        behavior = BEHAVIORS.get(effect_id) if effect_id is not None else None
        if behavior is None or behavior.on_cycle is None:
            return None
        if replay and not behavior.is_pure_passive:
            return None
        if effect_id in nullified:
            return CycleOutput()
        ctx = EffectContext(
            world=world,
            card=card,
            slot_index=index,
            global_sync=global_sync,
            active_synergies=active_synergies,
            nullified=nullified,
            replay=replay,
        )
        return behavior.on_cycle(ctx)

    # 1. Raw pass
    for card in snapshot:
        output = run(card, replay=False)
        if output is not None:
            raw_by_instance[card.instance_id] = output
            _merge_patch(patches, card.instance_id, output.self_update)

    # 2. Arcane Ritual bonus pass
    ritual = find_synergy(active_synergies, SynergyId.MAGICIAN_PRIESTESS)
    if ritual is not None:
        factor = ARCANE_RITUAL_FACTOR_EMPOWERED if ritual.is_empowered else ARCANE_RITUAL_FACTOR
        for card in snapshot:
            output = run(card, replay=True)
            if output is None:
                continue
            raw_by_instance.setdefault(card.instance_id, CycleOutput()).add(output, factor)
            _merge_patch(patches, card.instance_id, output.self_update)

    time_adjustment = sum(output.time_adjustment for output in raw_by_instance.values())

    raw = []
    for slot in world.slots:
        output = raw_by_instance.get(slot.card.instance_id) if slot.card is not None else None
        raw.append(SlotOutput(output.resources, output.sync) if output else SlotOutput())

    # 3-5. Adjacency, global modifiers, equalization
    wheel_judgement = find_synergy(active_synergies, SynergyId.WHEEL_JUDGEMENT) is not None
    modified = apply_adjacency(world.slots, raw, wheel_judgement)
    modified = apply_global_modifiers(world.slots, modified, world.global_hours, world.global_buffs)
    effects = present_effects(world.slots)
    if EffectId.TEMPERANCE in effects:
        modified = equalize(modified)

    # 6. Aggregation
    total_resources = sum(output.resources for output in modified)
    total_sync = sum(output.sync for output in modified)

    # 7. Synergy-scoped scalars
    fool_world = find_synergy(active_synergies, SynergyId.FOOL_WORLD)
    if fool_world is not None and is_daytime(world.global_hours):
        bonus = FOOL_WORLD_BONUS_EMPOWERED if fool_world.is_empowered else FOOL_WORLD_BONUS
        total_resources *= 1 + bonus

    has_marks = any(slot.card is not None and slot.card.marks for slot in world.slots)
    if EffectId.WHEEL_OF_FORTUNE in effects and has_marks:
        total_resources *= 1 + WHEEL_SYNC_FACTOR * global_sync

    logger.debug(
        "Cycle at hour %d: resources=%.2f sync=%.2f time=%+d",
        world.global_hours, total_resources, total_sync, time_adjustment,
    )
    return CycleResult(
        total_resources=total_resources,
        total_sync=total_sync,
        time_adjustment=time_adjustment,
        slot_updates=patches,
        slot_outputs=modified,
        synergy_resource_rate=synergy_resource_rate(active_synergies),
    )
