"""
Tests for the reducer (state transitions).

Tests:
- Command application
- Input world is never mutated
- Validation and error codes
- Legal command generation
"""

import pytest

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import is_legal, legal_actions
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.state import CardInstance, ShopItem, Slot
from .conftest import make_card


def shop_item(card_id=9, cost=1000.0, item_id="item-1") -> ShopItem:
    return ShopItem(id=item_id, card_id=card_id, name="The Hermit", description="", cost=cost)


class TestPlaceCard:
    """Tests for placing inventory cards."""

    def test_place_moves_card(self, world):
        """Placing moves the card from the inventory into the slot."""
        card = make_card(9)
        world.inventory.append(card)

        result = apply_action(world, Action.place_card(1, 0))

        assert result.success
        assert result.new_state.inventory == []
        assert result.new_state.slots[1].card.instance_id == card.instance_id

    def test_input_world_untouched(self, world):
        """The reducer works on a copy."""
        world.inventory.append(make_card(9))
        apply_action(world, Action.place_card(1, 0))
        assert len(world.inventory) == 1
        assert world.slots[1].card is None

    def test_place_replaces_blank(self, world):
        """A blank card is overwritten by the placed card."""
        world.slots[0].card = CardInstance(instance_id="blank", card_id=-1, is_blank=True)
        world.inventory.append(make_card(9))

        result = apply_action(world, Action.place_card(0, 0))

        assert result.success
        assert result.new_state.slots[0].card.card_id == 9

    def test_occupied_slot(self, world, place):
        """A non-blank occupant blocks placement."""
        place(world, 0, 1)
        world.inventory.append(make_card(9))
        result = apply_action(world, Action.place_card(0, 0))
        assert result.error_code == "SLOT_OCCUPIED"

    @pytest.mark.parametrize("slot_index,inventory_index,code", [
        (3, 0, "INVALID_SLOT"),
        (-1, 0, "INVALID_SLOT"),
        (0, 1, "INVALID_INVENTORY_INDEX"),
    ])
    def test_bad_indices(self, world, slot_index, inventory_index, code):
        """Out-of-range indices are rejected."""
        world.inventory.append(make_card(9))
        result = apply_action(world, Action.place_card(slot_index, inventory_index))
        assert not result.success
        assert result.error_code == code

    def test_empire_grows_circle(self, world, place):
        """Placing the Emperor next to the Empress opens a fourth slot."""
        place(world, 0, 3)
        world.inventory.append(make_card(4))

        result = apply_action(world, Action.place_card(1, 0))

        assert result.new_state.slot_count == 4
        assert any("fourth slot" in change for change in result.state_changes)


class TestRemoveCard:
    """Tests for removing circle cards."""

    def test_remove_returns_to_inventory(self, world, place):
        """Removing puts the card at the end of the inventory."""
        card = place(world, 2, 9)
        result = apply_action(world, Action.remove_card(2))

        assert result.success
        assert result.new_state.slots[2].card is None
        assert result.new_state.inventory[-1].instance_id == card.instance_id

    def test_empty_slot(self, world):
        """Nothing to remove."""
        assert apply_action(world, Action.remove_card(0)).error_code == "EMPTY_SLOT"

    def test_blank_stays(self, world):
        """Blank cards are locked in place."""
        world.slots[0].card = CardInstance(instance_id="blank", card_id=-1, is_blank=True)
        assert apply_action(world, Action.remove_card(0)).error_code == "BLANK_CARD"

    def test_empire_break_evicts_fourth_slot(self, world, place):
        """Breaking the Empire returns the fourth slot's card and removes the slot."""
        place(world, 0, 3)
        place(world, 1, 4)
        world.slots.append(Slot(position=3))
        evicted = place(world, 3, 9)

        result = apply_action(world, Action.remove_card(1))

        new_world = result.new_state
        assert new_world.slot_count == 3
        assert evicted.instance_id in {card.instance_id for card in new_world.inventory}


class TestBuyItem:
    """Tests for shop purchases."""

    def test_buy(self, world):
        """Buying deducts the cost and moves the card to the inventory."""
        world.shop_items = [shop_item()]
        result = apply_action(world, Action.buy_item("item-1"))

        assert result.success
        new_world = result.new_state
        assert new_world.currency == world.currency - 1000
        assert new_world.shop_items == []
        assert new_world.inventory[0].card_id == 9

    def test_insufficient_funds(self, world):
        """Items that cost more than the balance are refused."""
        world.shop_items = [shop_item(cost=world.currency + 1)]
        result = apply_action(world, Action.buy_item("item-1"))
        assert result.error_code == "INSUFFICIENT_FUNDS"

    def test_unknown_item(self, world):
        """Unknown ids are refused."""
        assert apply_action(world, Action.buy_item("nope")).error_code == "UNKNOWN_ITEM"


class TestActivateEffect:
    """Tests for activation validation."""

    def test_empty_slot(self, world):
        """Nothing to activate."""
        assert apply_action(world, Action.activate_effect(0)).error_code == "EMPTY_SLOT"

    def test_passive_card(self, world, place):
        """Cards without an activation are refused."""
        place(world, 0, 9)
        assert apply_action(world, Action.activate_effect(0)).error_code == "NOT_ACTIVATABLE"

    def test_empress_window(self, world, place):
        """Clicking the Empress registers a real-time window."""
        empress = place(world, 0, 3)
        result = Reducer(clock=lambda: 12.5).apply(world, Action.activate_effect(0))

        assert result.success
        window = result.new_state.empress_windows[empress.instance_id]
        assert window.last_tick == 12.5
        assert world.empress_windows == {}


class TestReturnReady:
    """Tests for returning ready activations."""

    def test_returns_only_ready_activatable(self, world, place):
        """Ready activatable cards go back; passive and cooling cards stay."""
        place(world, 0, 0)
        place(world, 1, 9)
        place(world, 2, 2, cooldown_until=50)

        result = apply_action(world, Action.return_ready())

        new_world = result.new_state
        assert new_world.slots[0].card is None
        assert new_world.slots[1].card.card_id == 9
        assert new_world.slots[2].card.card_id == 2
        assert [card.card_id for card in new_world.inventory] == [0]


class TestChoiceCommands:
    """Tests for choice commands without a pending choice."""

    def test_resolve_without_choice(self, world):
        """Nothing to resolve."""
        result = apply_action(world, Action.resolve_choice([1]))
        assert result.error_code == "NO_CHOICE_PENDING"

    def test_cancel_without_choice(self, world):
        """Nothing to cancel."""
        assert apply_action(world, Action.cancel_choice()).error_code == "NO_CHOICE_PENDING"


class TestLegalActions:
    """Tests for the legal command generator."""

    def test_fresh_world(self, world):
        """Only affordable purchases are legal in an empty world."""
        world.shop_items = [shop_item(), shop_item(cost=world.currency + 1, item_id="item-2")]
        actions = legal_actions(world)
        assert [a.action_type for a in actions] == [ActionType.BUY_ITEM]
        assert actions[0].payload.item_id == "item-1"

    def test_place_and_activate(self, world, place):
        """Placement targets empty slots; ready activatable cards can activate."""
        place(world, 0, 0)
        world.inventory.append(make_card(9))

        assert is_legal(world, Action.place_card(1, 0))
        assert not is_legal(world, Action.place_card(0, 0))
        assert is_legal(world, Action.activate_effect(0))
        assert is_legal(world, Action.return_ready())

    def test_pending_choice(self, world, place):
        """While a choice is open only resolving or cancelling is legal."""
        place(world, 0, 6)
        opened = apply_action(world, Action.activate_effect(0)).new_state

        assert [a.action_type for a in legal_actions(opened)] == [ActionType.CANCEL_CHOICE]
        assert is_legal(opened, Action.resolve_choice([0]))
        assert not is_legal(opened, Action.remove_card(0))
