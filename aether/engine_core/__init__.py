"""
Engine Core - The tarot circle simulation.

The engine is the runtime that:
1. Holds the World (clock, slots, inventory, currency, buffs, payouts)
2. Detects synergies and scores sync
3. Runs the hourly cycle pipeline over the effect registry
4. Applies player commands via the reducer
5. Resolves multi-step card choices
"""

from .state import (
    World,
    CardInstance,
    Slot,
    Curse,
    CurseType,
    GlobalBuff,
    BuffType,
    PendingPayout,
    ShopItem,
    EmpressWindow,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action, refresh_derived
from .action_generator import ActionGenerator, legal_actions, is_legal
from .effect_resolver import (
    BEHAVIORS,
    CardBehavior,
    CycleOutput,
    EffectContext,
    PendingChoice,
    ChoiceType,
    behavior_for,
    hanged_man_payout,
)
from .synergy import SYNERGIES, SynergyId, ActiveSynergy, compute_active_synergies
from .sync import compute_global_sync, world_sync
from .cycle import CycleResult, SlotOutput, process_cycle

__all__ = [
    "World",
    "CardInstance",
    "Slot",
    "Curse",
    "CurseType",
    "GlobalBuff",
    "BuffType",
    "PendingPayout",
    "ShopItem",
    "EmpressWindow",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "refresh_derived",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "BEHAVIORS",
    "CardBehavior",
    "CycleOutput",
    "EffectContext",
    "PendingChoice",
    "ChoiceType",
    "behavior_for",
    "hanged_man_payout",
    "SYNERGIES",
    "SynergyId",
    "ActiveSynergy",
    "compute_active_synergies",
    "compute_global_sync",
    "world_sync",
    "CycleResult",
    "SlotOutput",
    "process_cycle",
]
