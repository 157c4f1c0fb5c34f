"""
Game Loop - The orchestrator that owns the world and drives the hours.

The loop:
1. The hourly timer fires and the clock advances one hour
2. Synergies and sync are computed for the current circle
3. The cycle pipeline runs and its deltas are applied
4. Payouts mature, buffs count down, the daily/lunar/sign breakdown updates
5. A new day flags a shop restock (completed a few seconds later)
6. Derived state (slot count, slot sync, real-time rate) is refreshed

Hour 0 only generates the initial shop. Player commands go through the
reducer and may arrive between any two hours, including while a choice
is open; the clock never waits for the player.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import time

from ..catalog.validation import ensure_valid_catalog
from ..engine_core.action import Action, ActionResult
from ..engine_core.clock import CycleState
from ..engine_core.cycle import process_cycle
from ..engine_core.effect_resolver import BEHAVIORS
from ..engine_core.reducer import Reducer, refresh_derived
from ..engine_core.shop import generate_shop_items
from ..engine_core.state import EMPRESS_WINDOW_SECONDS, World
from ..engine_core.synergy import ActiveSynergy, compute_active_synergies
from ..engine_core.sync import world_sync

logger = logging.getLogger(__name__)

BASE_RESOURCE_RATE = 0.05  # per real second, scaled by sync
RESTOCK_DELAY_SECONDS = 4.0


class LoopState(Enum):
    """State of the game loop."""
    RUNNING = "running"
    WAITING_CHOICE = "waiting_choice"  # Ticks continue underneath
    RESTOCKING = "restocking"


@dataclass
class TickResult:
    """
    Result of processing one hour.

    Contains the applied totals and anything the driver or the UI
    needs to react to.
    """
    hour: int
    resources: float = 0.0
    sync: float = 0.0
    global_sync: int = 0
    time_adjustment: int = 0
    payouts: float = 0.0
    expired_buffs: list[str] = field(default_factory=list)
    restock_due: bool = False
    changes: list[str] = field(default_factory=list)


class GameLoop:
    """
    The authoritative orchestrator for one game.

    Usage:
        loop = GameLoop(World.create(seed=7))
        loop.start()                      # hour 0: initial shop
        loop.dispatch(Action.place_card(0, 0))
        loop.tick()                       # called by the hourly timer
        loop.accrue(1.0)                  # called by the real-time timer
    """

    def __init__(self, world: World | None = None, reducer: Reducer | None = None):
        ensure_valid_catalog(BEHAVIORS)
        self.world = world if world is not None else World.create()
        self.reducer = reducer or Reducer()
        self.started = False

    # --- Read-only views ---

    @property
    def state(self) -> LoopState:
        if self.world.pending_choice is not None:
            return LoopState.WAITING_CHOICE
        if self.world.is_restocking:
            return LoopState.RESTOCKING
        return LoopState.RUNNING

    @property
    def active_synergies(self) -> list[ActiveSynergy]:
        return compute_active_synergies(self.world.slots)

    @property
    def global_sync(self) -> int:
        return world_sync(self.world, self.active_synergies)

    @property
    def realtime_rate(self) -> float:
        """Resources per real second from the continuous accrual channel."""
        base = BASE_RESOURCE_RATE * (1 + self.global_sync / 100)
        return base + self.world.synergy_resource_rate

    # --- Clock ---

    def start(self) -> None:
        """Hour 0: stock the shop. Idempotent."""
        if self.started:
            return
        self.started = True
        if not self.world.shop_items:
            self.world.shop_items = generate_shop_items(self.world, self.active_synergies)
        refresh_derived(self.world)
        self.world.cycle = CycleState.at(self.world.global_hours, self.world.effective_tick_rate)

    def tick(self) -> TickResult:
        """
        One firing of the hourly timer.

        A positive time adjustment (The Chariot) processes the skipped
        hours immediately, so the day gets shorter in real time without
        any hour going unprocessed. A negative one moves the clock back.
        """
        self.start()
        self.world.global_hours += 1
        result = self._process_hour()
        pending = result.time_adjustment
        while pending > 0:
            pending -= 1
            self.world.global_hours += 1
            follow = self._process_hour()
            pending += max(0, follow.time_adjustment)
            result.hour = follow.hour
            result.resources += follow.resources
            result.sync += follow.sync
            result.payouts += follow.payouts
            result.expired_buffs.extend(follow.expired_buffs)
            result.restock_due = result.restock_due or follow.restock_due
            result.changes.extend(follow.changes)
        if pending < 0:
            self.world.global_hours = max(0, self.world.global_hours + pending)
            self.world.cycle = CycleState.at(self.world.global_hours, self.world.effective_tick_rate)
        return result

    def advance(self, hours: int) -> list[TickResult]:
        """Run several hours back to back, restocking without delay."""
        results = []
        for _ in range(hours):
            result = self.tick()
            if result.restock_due:
                self.complete_restock()
            results.append(result)
        return results

    def _process_hour(self) -> TickResult:
        world = self.world
        active = self.active_synergies
        global_sync = world_sync(world, active)

        cycle = process_cycle(world, global_sync, active)
        result = TickResult(
            hour=world.global_hours,
            resources=cycle.total_resources,
            sync=cycle.total_sync,
            global_sync=global_sync,
            time_adjustment=cycle.time_adjustment,
        )

        for instance_id, patch in cycle.slot_updates.items():
            index = world.find_in_circle(instance_id)
            if index is not None:
                world.slots[index].card.apply_patch(patch)

        world.currency += cycle.total_resources
        world.last_cycle_sync = cycle.total_sync

        due = [p for p in world.pending_payouts if p.delivery_time <= world.global_hours]
        if due:
            result.payouts = sum(p.amount for p in due)
            world.currency += result.payouts
            world.pending_payouts = [p for p in world.pending_payouts if p.delivery_time > world.global_hours]
            result.changes.append(f"Received {result.payouts:.0f} from pending payouts")

        remaining = []
        for buff in world.global_buffs:
            buff.duration -= 1
            if buff.duration > 0:
                remaining.append(buff)
            else:
                result.expired_buffs.append(buff.id)
        world.global_buffs = remaining

        world.cycle = CycleState.at(world.global_hours, world.effective_tick_rate)
        if world.cycle.daily_complete:
            world.is_restocking = True
            result.restock_due = True
            result.changes.append("A new day begins, the shop is restocking")

        result.changes.extend(refresh_derived(world))
        return result

    def complete_restock(self) -> None:
        """Replace the shop stock; ends the restocking state."""
        self.world.shop_items = generate_shop_items(self.world, self.active_synergies)
        self.world.is_restocking = False

    # --- Real-time channels ---

    def accrue(self, seconds: float = 1.0) -> float:
        """Add the continuous income for the elapsed real seconds."""
        amount = self.realtime_rate * seconds
        self.world.currency += amount
        return amount

    def check_empress_windows(self, now: float | None = None) -> list[str]:
        """Step every Empress activation window; drop windows of departed cards."""
        now = time.monotonic() if now is None else now
        changed = []
        in_circle = {slot.card.instance_id for slot in self.world.slots if slot.card is not None}
        for instance_id in list(self.world.empress_windows):
            if instance_id not in in_circle:
                del self.world.empress_windows[instance_id]
                continue
            if self.world.empress_windows[instance_id].advance(now, EMPRESS_WINDOW_SECONDS):
                changed.append(instance_id)
        return changed

    # --- Commands ---

    def dispatch(self, action: Action) -> ActionResult:
        """Apply a player command; the world is replaced only on success."""
        result = self.reducer.apply(self.world, action)
        if result.success:
            self.world = result.new_state
        return result

    def place_card(self, slot_index: int, inventory_index: int) -> ActionResult:
        return self.dispatch(Action.place_card(slot_index, inventory_index))

    def remove_card(self, slot_index: int) -> ActionResult:
        return self.dispatch(Action.remove_card(slot_index))

    def buy_item(self, item_id: str) -> ActionResult:
        return self.dispatch(Action.buy_item(item_id))

    def activate_effect(self, slot_index: int) -> ActionResult:
        return self.dispatch(Action.activate_effect(slot_index))

    def resolve_choice(self, selection: list) -> ActionResult:
        return self.dispatch(Action.resolve_choice(selection))

    def cancel_choice(self) -> ActionResult:
        return self.dispatch(Action.cancel_choice())

    def return_ready_activations(self) -> ActionResult:
        return self.dispatch(Action.return_ready())

    def import_save(self, code: str) -> ActionResult:
        return self.dispatch(Action.import_save(code))

    def export_save(self) -> str:
        from ..persistence import export_save

        return export_save(self.world)
