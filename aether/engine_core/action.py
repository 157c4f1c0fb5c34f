"""
Action System - Player commands, payloads, and results.

Commands represent what the player can do between ticks:
1. Circle management (place, remove, return ready cards)
2. Economy (buy a shop item)
3. Card activations and their follow-up choices
4. Save import

All player-driven state changes flow through actions; hourly progress
flows through the game loop instead.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of player commands."""
    PLACE_CARD = "place_card"
    REMOVE_CARD = "remove_card"
    BUY_ITEM = "buy_item"
    ACTIVATE_EFFECT = "activate_effect"
    RETURN_READY = "return_ready"

    # Choice flow
    RESOLVE_CHOICE = "resolve_choice"
    CANCEL_CHOICE = "cancel_choice"

    # Persistence
    IMPORT_SAVE = "import_save"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the command parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    slot_index: int | None = None
    inventory_index: int | None = None
    item_id: str | None = None

    # For choice responses
    choice_values: list[Any] | None = None

    # For save import
    save_code: str | None = None


@dataclass
class Action:
    """
    A complete command to be applied to the world.

    Commands are validated and applied atomically by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def place_card(cls, slot_index: int, inventory_index: int) -> Action:
        return cls(
            action_type=ActionType.PLACE_CARD,
            payload=ActionPayload(slot_index=slot_index, inventory_index=inventory_index),
        )

    @classmethod
    def remove_card(cls, slot_index: int) -> Action:
        return cls(
            action_type=ActionType.REMOVE_CARD,
            payload=ActionPayload(slot_index=slot_index),
        )

    @classmethod
    def buy_item(cls, item_id: str) -> Action:
        return cls(
            action_type=ActionType.BUY_ITEM,
            payload=ActionPayload(item_id=item_id),
        )

    @classmethod
    def activate_effect(cls, slot_index: int) -> Action:
        return cls(
            action_type=ActionType.ACTIVATE_EFFECT,
            payload=ActionPayload(slot_index=slot_index),
        )

    @classmethod
    def return_ready(cls) -> Action:
        return cls(action_type=ActionType.RETURN_READY)

    @classmethod
    def resolve_choice(cls, choice_values: list[Any]) -> Action:
        """Factory for a choice response."""
        return cls(
            action_type=ActionType.RESOLVE_CHOICE,
            payload=ActionPayload(choice_values=list(choice_values)),
        )

    @classmethod
    def cancel_choice(cls) -> Action:
        return cls(action_type=ActionType.CANCEL_CHOICE)

    @classmethod
    def import_save(cls, code: str) -> Action:
        return cls(
            action_type=ActionType.IMPORT_SAVE,
            payload=ActionPayload(save_code=code),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - Human-readable changes (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # World
    error: str | None = None
    error_code: str | None = None

    state_changes: list[str] = field(default_factory=list)

    # If the action opened a choice
    pending_choice: Any | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            pending_choice=getattr(state, "pending_choice", None),
        )
