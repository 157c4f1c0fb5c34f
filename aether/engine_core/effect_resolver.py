"""
Effect Resolver - Card behaviours and the player-choice flow.

This module holds the effect registry: for every catalog effect id a
CardBehavior with up to three handlers:
- on_activate(ctx): runs once per explicit activation click
- on_cycle(ctx) -> CycleOutput: runs once per hour, returns unapplied deltas
  plus an optional patch for the card's own instance
- on_restock(ctx, items): runs during a shop restock

Handlers never receive raw whole-state setters. They get an EffectContext
exposing narrow mutation methods (add_currency, push_buff, schedule_payout,
set_slot_card, ...). Replayed invocations (Arcane Ritual's second pass,
Tower's Arcano Maior) run with replay=True, which turns those mutation
methods into no-ops so only the numeric output is repeated.

Multi-step activations (Lovers, Hanged Man, Devil) open a PendingChoice
on the world; resolve_choice() finishes them once the player answers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable
import logging
import uuid

from ..catalog.cards import BLANK_CARD, EffectId, all_cards, get_card, get_card_by_effect
from .clock import DAILY_MAX, LUNAR_MAX, day_hour, is_new_moon, lunar_cycle_number
from .state import (
    BuffType,
    CardInstance,
    Curse,
    CurseType,
    GlobalBuff,
    PendingPayout,
    ShopItem,
    World,
    new_instance_id,
)
from .synergy import ActiveSynergy, SynergyId, effect_id_of, find_synergy

logger = logging.getLogger(__name__)

MAX_DELEGATION_DEPTH = 3

TOWER_PERIOD = 8
TOWER_ARCANO_CYCLES = 8
TOWER_CHANCE = 0.15
TOWER_CHANCE_DEATH_TOWER = 0.50
TOWER_CHANCE_DEATH_TOWER_EMPOWERED = 0.625

JUSTICE_PERIOD = 7
JUSTICE_RESOURCES = 25
JUSTICE_SYNC = 1

HANGED_MAN_UNIT = 50
DEVIL_MAX_MARKS = 2
DEVIL_CURRENCY_REWARD = 250
DEVIL_SYNC_REWARD = 5

WORLD_CURRENCY = 999
FOOL_TICK_SLOWDOWN = 2.0
FOOL_SLOWDOWN_HOURS = 12


# ============================================================================
# Outputs and context
# ============================================================================

@dataclass
class CycleOutput:
    """Unapplied per-slot deltas for one hour."""
    resources: float = 0.0
    sync: float = 0.0
    time_adjustment: int = 0
    self_update: dict[str, Any] | None = None

    def add(self, other: CycleOutput, factor: float = 1.0) -> None:
        """Accumulate another output's numbers (not its patch)."""
        self.resources += other.resources * factor
        self.sync += other.sync * factor
        self.time_adjustment += int(other.time_adjustment * factor)


class ChoiceType(str, Enum):
    LOVERS = "lovers"
    HANGED_MAN = "hanged_man"
    DEVIL = "devil"


@dataclass
class PendingChoice:
    """
    A choice the player must make before play continues.

    This is returned to the UI when an activation needs input.
    Ticks keep running while it is open.
    """
    choice_id: str
    choice_type: ChoiceType
    prompt: str
    options: list[Any]  # card ids, inventory instance ids or mark picks
    source_slot: int
    source_instance_id: str
    min_choices: int = 1
    max_choices: int = 1
    optional: bool = True

    # Lovers: blank cards consumed on resolution
    extra_choices: int = 0


class ActivationError(ValueError):
    """An activation that cannot start in the current state."""


class ChoiceError(ValueError):
    """A choice selection that does not fit the pending choice."""


@dataclass
class EffectContext:
    """
    Context handed to a card handler.

    Wraps the world together with the card being resolved and
    per-hour facts (sync score, active synergies, nullified effects).
    """
    world: World
    card: CardInstance
    slot_index: int
    global_sync: int = 0
    active_synergies: list[ActiveSynergy] = field(default_factory=list)
    nullified: frozenset[EffectId] = frozenset()
    replay: bool = False
    depth: int = 0

    @property
    def global_hours(self) -> int:
        return self.world.global_hours

    @property
    def rng(self):
        return self.world.rng

    def synergy(self, synergy_id: SynergyId) -> ActiveSynergy | None:
        return find_synergy(self.active_synergies, synergy_id)

    def neighbor_index(self, offset: int) -> int:
        """Index offset slots away around the circle (+1 clockwise)."""
        return (self.slot_index + offset) % self.world.slot_count

    def derive(self, card: CardInstance, slot_index: int, replay: bool | None = None) -> EffectContext:
        """Context for a delegated or replayed handler call."""
        return EffectContext(
            world=self.world,
            card=card,
            slot_index=slot_index,
            global_sync=self.global_sync,
            active_synergies=self.active_synergies,
            nullified=self.nullified,
            replay=self.replay if replay is None else replay,
            depth=self.depth + 1,
        )

    # --- Narrow mutations (no-ops while replaying) ---

    def add_currency(self, amount: float) -> None:
        if not self.replay:
            self.world.currency += amount

    def add_permanent_sync(self, amount: float) -> None:
        if not self.replay:
            self.world.permanent_sync_bonus += amount

    def advance_clock(self, hours: int) -> None:
        """Move the clock forward (or back, never below zero)."""
        if not self.replay:
            self.world.global_hours = max(0, self.world.global_hours + hours)

    def push_buff(self, modifier: float, duration: int, buff_type: BuffType) -> None:
        if not self.replay:
            self.world.global_buffs.append(GlobalBuff(
                id=f"buff-{uuid.uuid4().hex[:8]}",
                source_card_id=self.card.card_id,
                modifier=modifier,
                duration=duration,
                type=buff_type,
            ))

    def schedule_payout(self, amount: float, delay: int) -> None:
        if not self.replay:
            self.world.pending_payouts.append(
                PendingPayout(amount=amount, delivery_time=self.global_hours + delay)
            )

    def set_slot_card(self, index: int, card: CardInstance | None) -> None:
        if not self.replay:
            self.world.slots[index].card = card

    def shuffle_slots(self) -> None:
        """Fisher-Yates shuffle of every slot's content."""
        if self.replay:
            return
        slots = self.world.slots
        for i in range(len(slots) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            slots[i].card, slots[j].card = slots[j].card, slots[i].card

    def reduce_cooldowns(self, hours: int) -> None:
        """Cut every circle card's cooldown, never below the current hour."""
        if self.replay:
            return
        for slot in self.world.slots:
            if slot.card is not None and slot.card.cooldown_until:
                slot.card.cooldown_until = max(self.global_hours, slot.card.cooldown_until - hours)

    def open_choice(self, choice: PendingChoice) -> None:
        if not self.replay:
            self.world.pending_choice = choice


CycleHandler = Callable[[EffectContext], CycleOutput]
ActivateHandler = Callable[[EffectContext], None]
RestockHandler = Callable[[EffectContext, list[ShopItem]], None]


@dataclass(frozen=True)
class CardBehavior:
    """Handlers registered for one effect id."""
    on_activate: ActivateHandler | None = None
    on_cycle: CycleHandler | None = None
    on_restock: RestockHandler | None = None

    @property
    def is_pure_passive(self) -> bool:
        return self.on_cycle is not None and self.on_activate is None


def _empty(ctx: EffectContext) -> CycleOutput:
    return CycleOutput()


# ============================================================================
# Handlers
# ============================================================================

def _fool_activate(ctx: EffectContext) -> None:
    ctx.advance_clock(-DAILY_MAX)
    ctx.push_buff(FOOL_TICK_SLOWDOWN, FOOL_SLOWDOWN_HOURS, BuffType.TICK_SPEED)
    ctx.set_slot_card(ctx.slot_index, None)


def _high_priestess_activate(ctx: EffectContext) -> None:
    ctx.card.cooldown_until = ctx.global_hours + 2 * LUNAR_MAX
    ctx.advance_clock(LUNAR_MAX)


def _empress_cycle(ctx: EffectContext) -> CycleOutput:
    """Run the clockwise neighbour's handler on the Empress's own instance."""
    if ctx.depth >= MAX_DELEGATION_DEPTH:
        return CycleOutput()
    right_index = ctx.neighbor_index(1)
    right = ctx.world.card_at(right_index)
    right_effect = effect_id_of(right)
    if right is None or right_effect in (None, EffectId.THE_EMPRESS) or right_effect in ctx.nullified:
        return CycleOutput()
    behavior = BEHAVIORS.get(right_effect)
    if behavior is None or behavior.on_cycle is None:
        return CycleOutput()
    return behavior.on_cycle(ctx.derive(ctx.card, ctx.slot_index))


def _hierophant_cycle(ctx: EffectContext) -> CycleOutput:
    return CycleOutput(resources=0.3 * ctx.global_sync ** 2)


def _chariot_cycle(ctx: EffectContext) -> CycleOutput:
    output = CycleOutput()
    if ctx.global_hours > 0 and day_hour(ctx.global_hours) == DAILY_MAX - 1:
        output.time_adjustment = 1
    if ctx.rng.random() < 0.10:
        ctx.reduce_cooldowns(2)
    return output


def _justice_cycle(ctx: EffectContext) -> CycleOutput:
    hours = ctx.global_hours
    if hours > 0 and hours % LUNAR_MAX == 0:
        return CycleOutput(self_update={"justice_bonus": 0})
    if hours > 0 and hours % JUSTICE_PERIOD == 0:
        return CycleOutput(
            resources=JUSTICE_RESOURCES,
            sync=JUSTICE_SYNC,
            self_update={"justice_bonus": (ctx.card.justice_bonus or 0) + 1},
        )
    return CycleOutput()


def _hermit_cycle(ctx: EffectContext) -> CycleOutput:
    return CycleOutput(resources=2.5 * ctx.world.empty_slot_count())


def _hanged_man_cycle(ctx: EffectContext) -> CycleOutput:
    card = ctx.card
    if card.hanged_man_active and card.hanged_man_activated_at is not None:
        if ctx.global_hours - card.hanged_man_activated_at >= LUNAR_MAX:
            return CycleOutput(self_update={
                "hanged_man_active": False,
                "hanged_man_consumes": None,
                "hanged_man_activated_at": None,
            })
    return CycleOutput()


def _death_cycle(ctx: EffectContext) -> CycleOutput:
    """On the new moon, consume the left neighbour and spread Death."""
    if ctx.replay or not is_new_moon(ctx.global_hours):
        return CycleOutput()

    world = ctx.world
    left_index = ctx.neighbor_index(-1)
    left = world.card_at(left_index)
    if left is None or left_index == ctx.slot_index:
        return CycleOutput()
    if effect_id_of(left) == EffectId.THE_TOWER and ctx.synergy(SynergyId.DEATH_TOWER):
        return CycleOutput()

    inherited = list(left.marks)
    ctx.set_slot_card(left_index, None)
    candidates = [
        i for i in world.occupied_indices()
        if i not in (ctx.slot_index, left_index)
    ]
    if candidates:
        target = candidates[ctx.rng.randrange(len(candidates))]
        ctx.set_slot_card(target, CardInstance(
            instance_id=new_instance_id(),
            card_id=get_card_by_effect(EffectId.DEATH).id,
            marks=inherited,
        ))
        logger.info("Death consumed slot %d and transformed slot %d", left_index, target)
    else:
        logger.info("Death consumed slot %d", left_index)
    return CycleOutput()


def _tower_cycle(ctx: EffectContext) -> CycleOutput:
    """Reshuffle every 8 hours; while Arcano Maior is active, replay the circle."""
    output = CycleOutput()
    active = ctx.card.tower_arcano_active
    cycles = ctx.card.tower_arcano_cycles or 0
    patch: dict[str, Any] = {}

    if not ctx.replay and ctx.global_hours > 0 and ctx.global_hours % TOWER_PERIOD == 0:
        ctx.shuffle_slots()
        moved_to = ctx.world.find_in_circle(ctx.card.instance_id)
        if moved_to is not None:
            ctx.slot_index = moved_to
        synergy = ctx.synergy(SynergyId.DEATH_TOWER)
        if synergy is None:
            chance = TOWER_CHANCE
        else:
            chance = TOWER_CHANCE_DEATH_TOWER_EMPOWERED if synergy.is_empowered else TOWER_CHANCE_DEATH_TOWER
        logger.info("The Tower reshuffled the circle")
        if ctx.rng.random() < chance:
            active, cycles = True, TOWER_ARCANO_CYCLES
            patch.update(tower_arcano_active=True, tower_arcano_cycles=cycles)
            logger.info("Arcano Maior activated for %d cycles", cycles)

    if active and cycles > 0 and ctx.depth < MAX_DELEGATION_DEPTH:
        for index, slot in enumerate(ctx.world.slots):
            other = slot.card
            if other is None or index == ctx.slot_index:
                continue
            effect_id = effect_id_of(other)
            if effect_id in (None, EffectId.THE_TOWER) or effect_id in ctx.nullified:
                continue
            behavior = BEHAVIORS.get(effect_id)
            if behavior is None or behavior.on_cycle is None:
                continue
            output.add(behavior.on_cycle(ctx.derive(other, index, replay=True)))
        cycles -= 1
        patch["tower_arcano_cycles"] = cycles
        patch["tower_arcano_active"] = cycles > 0

    output.self_update = patch or None
    return output


def _world_activate(ctx: EffectContext) -> None:
    ctx.add_currency(WORLD_CURRENCY)
    ctx.push_buff(2.0, 24, BuffType.EFFECT_MULTIPLIER)
    ctx.push_buff(4.0, 12, BuffType.SYNC_MODIFIER)
    ctx.card.cooldown_until = ctx.global_hours + 2 * LUNAR_MAX


def _wheel_restock(ctx: EffectContext, items: list[ShopItem]) -> None:
    if items and ctx.rng.random() < 0.15:
        item = items[ctx.rng.randrange(len(items))]
        item.cost = 0
        logger.info("Wheel of Fortune made %s free", item.name)


# --- Choice openers ---

def _lovers_activate(ctx: EffectContext) -> None:
    blanks = sum(1 for slot in ctx.world.slots if slot.card is not None and slot.card.is_blank)
    synergy = ctx.synergy(SynergyId.LOVERS_BLANK)
    extra_choices = blanks if synergy else 0
    count = 2 + extra_choices
    if synergy and synergy.is_empowered and blanks >= 2:
        count += 1

    pool = [card.id for card in all_cards()]
    count = min(count, len(pool))
    options = ctx.rng.sample(pool, count)

    ctx.open_choice(PendingChoice(
        choice_id=uuid.uuid4().hex,
        choice_type=ChoiceType.LOVERS,
        prompt="Choose one card to keep",
        options=options,
        source_slot=ctx.slot_index,
        source_instance_id=ctx.card.instance_id,
        extra_choices=extra_choices,
    ))


def _hanged_man_activate(ctx: EffectContext) -> None:
    options = [card.instance_id for card in ctx.world.inventory]
    if not options:
        raise ActivationError("Nothing in the inventory to sacrifice")
    ctx.open_choice(PendingChoice(
        choice_id=uuid.uuid4().hex,
        choice_type=ChoiceType.HANGED_MAN,
        prompt="Choose inventory cards to sacrifice",
        options=options,
        source_slot=ctx.slot_index,
        source_instance_id=ctx.card.instance_id,
        min_choices=1,
        max_choices=len(options),
    ))


def _devil_activate(ctx: EffectContext) -> None:
    options = []
    for index, slot in enumerate(ctx.world.slots):
        card = slot.card
        if card is None or index == ctx.slot_index:
            continue
        for mark_index, _ in enumerate(card.marks):
            options.append({"instance_id": card.instance_id, "mark_index": mark_index})
    if not options:
        raise ActivationError("No marks in the circle to consume")
    ctx.open_choice(PendingChoice(
        choice_id=uuid.uuid4().hex,
        choice_type=ChoiceType.DEVIL,
        prompt=f"Choose up to {DEVIL_MAX_MARKS} marks on different cards",
        options=options,
        source_slot=ctx.slot_index,
        source_instance_id=ctx.card.instance_id,
        min_choices=1,
        max_choices=DEVIL_MAX_MARKS,
    ))


# ============================================================================
# Registry
# ============================================================================

BEHAVIORS: dict[EffectId, CardBehavior] = {
    EffectId.THE_FOOL: CardBehavior(on_activate=_fool_activate),
    EffectId.THE_MAGICIAN: CardBehavior(on_cycle=_empty),
    EffectId.THE_HIGH_PRIESTESS: CardBehavior(on_activate=_high_priestess_activate),
    EffectId.THE_EMPRESS: CardBehavior(on_cycle=_empress_cycle),
    EffectId.THE_EMPEROR: CardBehavior(),
    EffectId.THE_HIEROPHANT: CardBehavior(on_cycle=_hierophant_cycle),
    EffectId.THE_LOVERS: CardBehavior(on_activate=_lovers_activate),
    EffectId.THE_CHARIOT: CardBehavior(on_cycle=_chariot_cycle),
    EffectId.STRENGTH: CardBehavior(),
    EffectId.THE_HERMIT: CardBehavior(on_cycle=_hermit_cycle),
    EffectId.WHEEL_OF_FORTUNE: CardBehavior(on_restock=_wheel_restock),
    EffectId.JUSTICE: CardBehavior(on_cycle=_justice_cycle),
    EffectId.THE_HANGED_MAN: CardBehavior(on_activate=_hanged_man_activate, on_cycle=_hanged_man_cycle),
    EffectId.DEATH: CardBehavior(on_cycle=_death_cycle),
    EffectId.TEMPERANCE: CardBehavior(on_cycle=_empty),
    EffectId.THE_DEVIL: CardBehavior(on_activate=_devil_activate),
    EffectId.THE_TOWER: CardBehavior(on_cycle=_tower_cycle),
    EffectId.THE_STAR: CardBehavior(),
    EffectId.THE_MOON: CardBehavior(),
    EffectId.THE_SUN: CardBehavior(on_cycle=_empty),
    EffectId.JUDGEMENT: CardBehavior(on_cycle=_empty),
    EffectId.THE_WORLD: CardBehavior(on_activate=_world_activate),
    EffectId.BLANK: CardBehavior(on_cycle=_empty),
}


def behavior_for(card: CardInstance | None) -> CardBehavior | None:
    """Registered behaviour for an instance (None for unknown cards)."""
    effect_id = effect_id_of(card)
    if effect_id is None:
        return None
    return BEHAVIORS.get(effect_id)


def is_activatable(card: CardInstance | None) -> bool:
    behavior = behavior_for(card)
    return behavior is not None and behavior.on_activate is not None


def activate(ctx: EffectContext) -> None:
    """Run a card's on_activate handler. Unknown effects do nothing."""
    behavior = behavior_for(ctx.card)
    if behavior is None or behavior.on_activate is None:
        return
    behavior.on_activate(ctx)
    logger.info("Activated %s in slot %d", ctx.card.display_name, ctx.slot_index)


def run_restock_hooks(world: World, items: list[ShopItem], active_synergies: list[ActiveSynergy]) -> list[ShopItem]:
    """Let circle cards with an on_restock hook alter the new shop items."""
    for index, slot in enumerate(world.slots):
        behavior = behavior_for(slot.card)
        if behavior is not None and behavior.on_restock is not None:
            ctx = EffectContext(world=world, card=slot.card, slot_index=index, active_synergies=active_synergies)
            behavior.on_restock(ctx, items)
    return items


# ============================================================================
# Choice resolution
# ============================================================================

def hanged_man_payout(sacrificed: int) -> float:
    """Triangular payout: ((n+1)*n/2) * 50."""
    return ((sacrificed + 1) * sacrificed / 2) * HANGED_MAN_UNIT


def _source_card(world: World, choice: PendingChoice) -> tuple[int, CardInstance]:
    index = world.find_in_circle(choice.source_instance_id)
    if index is None:
        raise ChoiceError("The card that opened this choice has left the circle")
    return index, world.slots[index].card


def _resolve_lovers(world: World, choice: PendingChoice, selection: list[Any]) -> None:
    if len(selection) != 1:
        raise ChoiceError("Choose exactly one card")
    try:
        card_id = int(selection[0])
    except (TypeError, ValueError):
        raise ChoiceError(f"Invalid card id: {selection[0]!r}")
    if card_id not in choice.options:
        raise ChoiceError(f"Card {card_id} was not offered")
    definition = get_card(card_id)
    if definition is None:
        raise ChoiceError(f"Unknown card {card_id}")

    source_index, lovers = _source_card(world, choice)

    world.inventory.append(CardInstance.create(definition))

    consumed = 0
    for index, slot in enumerate(world.slots):
        if consumed >= choice.extra_choices:
            break
        if index != source_index and slot.card is not None and slot.card.is_blank:
            slot.card = None
            consumed += 1

    world.slots[source_index].card = CardInstance(
        instance_id=new_instance_id(),
        card_id=BLANK_CARD.id,
        marks=list(lovers.marks),
        name=BLANK_CARD.name,
        is_blank=True,
    )
    logger.info("The Lovers granted %s, consumed %d blank card(s)", definition.name, consumed)


def _resolve_hanged_man(world: World, choice: PendingChoice, selection: list[Any]) -> None:
    chosen = [str(item) for item in selection]
    if not chosen:
        raise ChoiceError("Select at least one card to sacrifice")
    if len(set(chosen)) != len(chosen):
        raise ChoiceError("A card can only be sacrificed once")
    for instance_id in chosen:
        if instance_id not in choice.options or world.find_in_inventory(instance_id) is None:
            raise ChoiceError(f"Card {instance_id} is not available to sacrifice")

    _, hanged_man = _source_card(world, choice)

    n = len(chosen)
    world.inventory = [card for card in world.inventory if card.instance_id not in chosen]
    world.pending_payouts.append(PendingPayout(
        amount=hanged_man_payout(n),
        delivery_time=world.global_hours + LUNAR_MAX,
    ))
    hanged_man.cooldown_until = world.global_hours + LUNAR_MAX
    hanged_man.hanged_man_active = True
    hanged_man.hanged_man_consumes = n
    hanged_man.hanged_man_activated_at = world.global_hours
    logger.info("The Hanged Man sacrificed %d card(s) for %.0f", n, hanged_man_payout(n))


def _parse_mark_pick(item: Any) -> tuple[str, int]:
    try:
        if isinstance(item, dict):
            return str(item["instance_id"]), int(item["mark_index"])
        instance_id, mark_index = item
        return str(instance_id), int(mark_index)
    except (KeyError, TypeError, ValueError):
        raise ChoiceError(f"Invalid mark selection: {item!r}")


def _resolve_devil(world: World, choice: PendingChoice, selection: list[Any]) -> None:
    picks = [_parse_mark_pick(item) for item in selection]
    if not picks or len(picks) > DEVIL_MAX_MARKS:
        raise ChoiceError(f"Select between 1 and {DEVIL_MAX_MARKS} marks")
    if len({instance_id for instance_id, _ in picks}) != len(picks):
        raise ChoiceError("Each mark must come from a different card")

    source_index, devil = _source_card(world, choice)

    targets = []
    for instance_id, mark_index in picks:
        index = world.find_in_circle(instance_id)
        if index is None or index == source_index:
            raise ChoiceError(f"Card {instance_id} is not a valid target")
        card = world.slots[index].card
        if not 0 <= mark_index < len(card.marks):
            raise ChoiceError(f"Card {instance_id} has no mark {mark_index}")
        targets.append((card, mark_index))

    rng = world.rng
    curse_types = list(CurseType)
    for card, mark_index in targets:
        card.marks.pop(mark_index)
        curse_type = curse_types[rng.randrange(len(curse_types))]
        state = lunar_cycle_number(world.global_hours) % 2 if curse_type == CurseType.TEMPORAL else None
        card.curse = Curse(id=f"curse-{uuid.uuid4().hex[:8]}", type=curse_type, state=state)

        draws = 2 if rng.random() < 0.5 else 1
        for _ in range(draws):
            reward = rng.randrange(3)
            if reward == 0:
                world.currency += DEVIL_CURRENCY_REWARD
            elif reward == 1:
                world.permanent_sync_bonus += DEVIL_SYNC_REWARD
            else:
                devil.effect_multiplier = (devil.effect_multiplier or 1) + 1
        logger.info("The Devil cursed %s with %s", card.display_name, curse_type.value)


CHOICE_RESOLVERS: dict[ChoiceType, Callable[[World, PendingChoice, list[Any]], None]] = {
    ChoiceType.LOVERS: _resolve_lovers,
    ChoiceType.HANGED_MAN: _resolve_hanged_man,
    ChoiceType.DEVIL: _resolve_devil,
}


def resolve_choice(world: World, selection: Iterable[Any]) -> None:
    """
    Apply the player's answer to the world's pending choice.

    Raises ChoiceError if nothing is pending or the selection is invalid;
    the caller is expected to run this on a copy of the world.
    """
    choice = world.pending_choice
    if choice is None:
        raise ChoiceError("No choice pending")
    selection = list(selection)
    if len(selection) > choice.max_choices:
        raise ChoiceError(f"At most {choice.max_choices} selection(s) allowed")
    CHOICE_RESOLVERS[choice.choice_type](world, choice, selection)
    world.pending_choice = None
