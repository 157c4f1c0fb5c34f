"""
Action Generator - Enumerates the commands that are valid right now.

Used by:
1. The HTTP layer to tell the UI which controls to enable
2. The CLI simulator to pick activations
3. Validation (is this action in legal_actions?)

Design: generates Action objects, not just action types, so every
generated command is fully specified. Choice responses are the
exception: their selections are open-ended, so only the cancel
command is generated while a choice is pending.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..catalog.cards import EffectId
from .action import Action, ActionType
from .effect_resolver import is_activatable
from .state import World
from .synergy import effect_id_of


@dataclass
class ActionGenerator:
    """Generates legal commands for a world."""

    def generate(self, state: World) -> list[Action]:
        """
        Generate every legal command.

        Returns a list of fully-specified Action objects.
        """
        if state.pending_choice is not None:
            return [Action.cancel_choice()]

        actions = []
        actions.extend(self._generate_place_actions(state))
        actions.extend(self._generate_remove_actions(state))
        actions.extend(self._generate_buy_actions(state))
        actions.extend(self._generate_activate_actions(state))
        if any(self._is_ready(state, i) for i in range(state.slot_count)):
            actions.append(Action.return_ready())
        return actions

    def _generate_place_actions(self, state: World) -> list[Action]:
        actions = []
        for slot_index, slot in enumerate(state.slots):
            if slot.card is not None and not slot.card.is_blank:
                continue
            for inventory_index in range(len(state.inventory)):
                actions.append(Action.place_card(slot_index, inventory_index))
        return actions

    def _generate_remove_actions(self, state: World) -> list[Action]:
        return [
            Action.remove_card(i)
            for i, slot in enumerate(state.slots)
            if slot.card is not None and not slot.card.is_blank
        ]

    def _generate_buy_actions(self, state: World) -> list[Action]:
        return [
            Action.buy_item(item.id)
            for item in state.shop_items
            if state.currency >= item.cost
        ]

    def _generate_activate_actions(self, state: World) -> list[Action]:
        actions = []
        for i, slot in enumerate(state.slots):
            card = slot.card
            if card is None or card.is_blank:
                continue
            if effect_id_of(card) == EffectId.THE_EMPRESS or self._is_ready(state, i):
                actions.append(Action.activate_effect(i))
        return actions

    @staticmethod
    def _is_ready(state: World, slot_index: int) -> bool:
        card = state.slots[slot_index].card
        return (
            card is not None
            and not card.is_blank
            and is_activatable(card)
            and not card.is_on_cooldown(state.global_hours)
        )


def legal_actions(state: World) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator()
    return generator.generate(state)


def is_legal(state: World, action: Action) -> bool:
    """Check if a specific action is legal."""
    if action.action_type == ActionType.RESOLVE_CHOICE:
        return state.pending_choice is not None
    for candidate in legal_actions(state):
        if (
            candidate.action_type == action.action_type
            and candidate.payload.slot_index == action.payload.slot_index
            and candidate.payload.inventory_index == action.payload.inventory_index
            and candidate.payload.item_id == action.payload.item_id
        ):
            return True
    return False
