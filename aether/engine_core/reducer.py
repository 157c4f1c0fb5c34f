"""
Reducer - Applies player commands to the world.

The reducer is the single point of command-driven state mutation.
All player commands must go through apply().

Design principles:
- (world, action) -> new world; the input world is never touched
- Validates before applying
- Returns ActionResult with success/failure and an error code
- Delegates card behaviour to the effect resolver
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import time

from ..catalog.cards import EffectId
from .action import Action, ActionType, ActionResult
from .effect_resolver import (
    ActivationError,
    ChoiceError,
    EffectContext,
    activate,
    is_activatable,
    resolve_choice,
)
from .state import (
    BASE_SLOT_COUNT,
    EXTENDED_SLOT_COUNT,
    CardInstance,
    EmpressWindow,
    Slot,
    World,
    new_instance_id,
)
from .sync import refresh_slot_sync, world_sync
from .synergy import SynergyId, compute_active_synergies, effect_id_of, is_active
from .cycle import synergy_resource_rate

logger = logging.getLogger(__name__)


def reconcile_slots(world: World) -> list[str]:
    """
    Grow or shrink the circle to match the Empire synergy.

    A card left in the fourth slot is evicted to the inventory before the
    slot is removed. Returns human-readable changes.
    """
    changes = []
    extended = is_active(compute_active_synergies(world.slots), SynergyId.EMPRESS_EMPEROR)
    if extended and len(world.slots) == BASE_SLOT_COUNT:
        world.slots.append(Slot(position=BASE_SLOT_COUNT))
        changes.append("The circle gained a fourth slot")
        logger.debug("Slot count changed to %d", EXTENDED_SLOT_COUNT)
    elif not extended and len(world.slots) == EXTENDED_SLOT_COUNT:
        evicted = world.slots[-1].card
        if evicted is not None:
            world.inventory.append(evicted)
            changes.append(f"{evicted.display_name} returned to the inventory")
        world.slots.pop()
        changes.append("The circle lost its fourth slot")
        logger.debug("Slot count changed to %d", BASE_SLOT_COUNT)
    return changes


def refresh_derived(world: World) -> list[str]:
    """Recompute everything derived from slot contents and the clock."""
    changes = reconcile_slots(world)
    active = compute_active_synergies(world.slots)
    refresh_slot_sync(world, active)
    world.synergy_resource_rate = synergy_resource_rate(active)
    return changes


@dataclass
class Reducer:
    """
    Reducer applies player commands to a world.

    Stateless apart from the wall clock used for Empress windows.
    """
    clock: Callable[[], float] = field(default=time.monotonic)

    def apply(self, state: World, action: Action) -> ActionResult:
        """
        Apply a command to the world.

        Returns ActionResult with the new world or an error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            logger.info("Rejected %s: %s", action.action_type.value, validation_error)
            return ActionResult.failure(validation_error, error_code="CHOICE_PENDING")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        result = handler(state, action)
        if result.success:
            result.state_changes.extend(refresh_derived(result.new_state))
            result.pending_choice = result.new_state.pending_choice
        else:
            logger.info("Rejected %s: %s", action.action_type.value, result.error)
        return result

    def _validate_action(self, state: World, action: Action) -> str | None:
        """
        Validate that a command may run in the current state.

        Returns error message if invalid, None if valid.
        """
        if state.pending_choice is not None and action.action_type not in {
            ActionType.RESOLVE_CHOICE,
            ActionType.CANCEL_CHOICE,
        }:
            return "Resolve or cancel the pending choice first"
        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLACE_CARD: self._handle_place_card,
            ActionType.REMOVE_CARD: self._handle_remove_card,
            ActionType.BUY_ITEM: self._handle_buy_item,
            ActionType.ACTIVATE_EFFECT: self._handle_activate_effect,
            ActionType.RETURN_READY: self._handle_return_ready,
            ActionType.RESOLVE_CHOICE: self._handle_resolve_choice,
            ActionType.CANCEL_CHOICE: self._handle_cancel_choice,
            ActionType.IMPORT_SAVE: self._handle_import_save,
        }
        return handlers.get(action_type)

    @staticmethod
    def _slot_error(state: World, slot_index: int | None) -> ActionResult | None:
        if slot_index is None or not 0 <= slot_index < state.slot_count:
            return ActionResult.failure(f"Invalid slot index: {slot_index}", error_code="INVALID_SLOT")
        return None

    def _handle_place_card(self, state: World, action: Action) -> ActionResult:
        """Move an inventory card into a slot (replacing a blank card)."""
        slot_index = action.payload.slot_index
        inventory_index = action.payload.inventory_index
        error = self._slot_error(state, slot_index)
        if error:
            return error
        if inventory_index is None or not 0 <= inventory_index < len(state.inventory):
            return ActionResult.failure(
                f"Invalid inventory index: {inventory_index}",
                error_code="INVALID_INVENTORY_INDEX",
            )
        occupant = state.slots[slot_index].card
        if occupant is not None and not occupant.is_blank:
            return ActionResult.failure(f"Slot {slot_index} is occupied", error_code="SLOT_OCCUPIED")

        new_state = state.clone()
        card = new_state.inventory.pop(inventory_index)
        new_state.slots[slot_index].card = card
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Placed {card.display_name} in slot {slot_index}"],
        )

    def _handle_remove_card(self, state: World, action: Action) -> ActionResult:
        """Move a slot card back to the inventory."""
        slot_index = action.payload.slot_index
        error = self._slot_error(state, slot_index)
        if error:
            return error
        card = state.slots[slot_index].card
        if card is None:
            return ActionResult.failure(f"Slot {slot_index} is empty", error_code="EMPTY_SLOT")
        if card.is_blank:
            return ActionResult.failure("Blank cards cannot be removed", error_code="BLANK_CARD")

        new_state = state.clone()
        card = new_state.slots[slot_index].card
        new_state.slots[slot_index].card = None
        new_state.inventory.append(card)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Returned {card.display_name} to the inventory"],
        )

    def _handle_buy_item(self, state: World, action: Action) -> ActionResult:
        """Buy a shop item into the inventory."""
        item_id = action.payload.item_id
        item = next((i for i in state.shop_items if i.id == item_id), None)
        if item is None:
            return ActionResult.failure(f"Unknown shop item: {item_id}", error_code="UNKNOWN_ITEM")
        if state.currency < item.cost:
            return ActionResult.failure(
                f"Not enough currency for {item.name} ({item.cost:.0f})",
                error_code="INSUFFICIENT_FUNDS",
            )

        new_state = state.clone()
        new_state.currency -= item.cost
        new_state.inventory.append(CardInstance(
            instance_id=new_instance_id(),
            card_id=item.card_id,
            marks=list(item.marks),
        ))
        new_state.shop_items = [i for i in new_state.shop_items if i.id != item_id]
        return ActionResult.success_with_state(new_state, changes=[f"Bought {item.name}"])

    def _handle_activate_effect(self, state: World, action: Action) -> ActionResult:
        """Run a slot card's activation."""
        slot_index = action.payload.slot_index
        error = self._slot_error(state, slot_index)
        if error:
            return error
        card = state.slots[slot_index].card
        if card is None:
            return ActionResult.failure(f"Slot {slot_index} is empty", error_code="EMPTY_SLOT")
        if card.is_blank:
            return ActionResult.failure("Blank cards have no activation", error_code="BLANK_CARD")

        if effect_id_of(card) == EffectId.THE_EMPRESS:
            new_state = state.clone()
            new_state.empress_windows[card.instance_id] = EmpressWindow(last_tick=self.clock())
            return ActionResult.success_with_state(
                new_state,
                changes=["The Empress started a new activation window"],
            )

        if card.is_on_cooldown(state.global_hours):
            return ActionResult.failure(
                f"{card.display_name} is on cooldown until hour {card.cooldown_until}",
                error_code="ON_COOLDOWN",
            )
        if not is_activatable(card):
            return ActionResult.failure(
                f"{card.display_name} has no activation",
                error_code="NOT_ACTIVATABLE",
            )

        new_state = state.clone()
        active = compute_active_synergies(new_state.slots)
        ctx = EffectContext(
            world=new_state,
            card=new_state.slots[slot_index].card,
            slot_index=slot_index,
            global_sync=world_sync(new_state, active),
            active_synergies=active,
        )
        try:
            activate(ctx)
        except ActivationError as e:
            return ActionResult.failure(str(e), error_code="NOT_ACTIVATABLE")
        return ActionResult.success_with_state(new_state, changes=[f"Activated {card.display_name}"])

    def _handle_return_ready(self, state: World, action: Action) -> ActionResult:
        """Return every activatable, ready, non-blank circle card to the inventory."""
        new_state = state.clone()
        returned = []
        for slot in new_state.slots:
            card = slot.card
            if card is None or card.is_blank:
                continue
            if is_activatable(card) and not card.is_on_cooldown(new_state.global_hours):
                slot.card = None
                new_state.inventory.append(card)
                returned.append(card.display_name)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Returned {name} to the inventory" for name in returned],
        )

    def _handle_resolve_choice(self, state: World, action: Action) -> ActionResult:
        """Answer the pending choice."""
        if state.pending_choice is None:
            return ActionResult.failure("No choice pending", error_code="NO_CHOICE_PENDING")
        new_state = state.clone()
        try:
            resolve_choice(new_state, action.payload.choice_values or [])
        except ChoiceError as e:
            return ActionResult.failure(str(e), error_code="INVALID_SELECTION")
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Resolved {state.pending_choice.choice_type.value} choice"],
        )

    def _handle_cancel_choice(self, state: World, action: Action) -> ActionResult:
        """Close the pending choice without changing anything else."""
        if state.pending_choice is None:
            return ActionResult.failure("No choice pending", error_code="NO_CHOICE_PENDING")
        new_state = state.clone()
        new_state.pending_choice = None
        return ActionResult.success_with_state(new_state, changes=["Choice cancelled"])

    def _handle_import_save(self, state: World, action: Action) -> ActionResult:
        """Replace the persisted part of the world with a decoded save."""
        from ..persistence import SaveCodeError, import_save

        try:
            new_state = import_save(action.payload.save_code or "", state)
        except SaveCodeError as e:
            logger.warning("Invalid save import: %s", e)
            return ActionResult.failure(str(e), error_code="INVALID_SAVE")
        return ActionResult.success_with_state(new_state, changes=["Save imported"])


def apply_action(state: World, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer()
    return reducer.apply(state, action)
