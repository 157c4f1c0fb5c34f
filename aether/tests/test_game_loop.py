"""
Tests for the game loop (orchestrator).

Tests:
- Start and the initial shop
- Hourly processing: payouts, buffs, restocks
- Time adjustments
- Real-time accrual and Empress windows
- Commands and saves through the loop
"""

import pytest

from ..engine_core.reducer import refresh_derived
from ..engine_core.state import BuffType, EmpressWindow, GlobalBuff, PendingPayout, World
from ..session import GameLoop, LoopState
from .conftest import make_card


class TestStart:
    """Tests for hour 0."""

    def test_initial_shop(self, loop):
        """Starting stocks three priced offers."""
        items = loop.world.shop_items
        assert len(items) == 3
        for item in items:
            assert item.cost == 100 + 100 * item.card_id
        assert loop.world.global_hours == 0

    def test_start_is_idempotent(self, loop):
        """A second start keeps the existing shop."""
        items = list(loop.world.shop_items)
        loop.start()
        assert loop.world.shop_items == items


class TestTick:
    """Tests for hourly processing."""

    def test_tick_advances_hour(self, loop):
        """Each tick is one game hour."""
        result = loop.tick()
        assert result.hour == 1
        assert loop.world.global_hours == 1
        assert loop.world.cycle.daily == 1

    def test_payout_delivery(self, loop):
        """Payouts are delivered once their hour arrives."""
        loop.world.pending_payouts.append(PendingPayout(amount=300, delivery_time=2))
        before = loop.world.currency

        first = loop.tick()
        assert first.payouts == 0
        second = loop.tick()

        assert second.payouts == 300
        assert loop.world.currency == pytest.approx(before + 300)
        assert loop.world.pending_payouts == []

    def test_buffs_expire(self, loop):
        """Buff durations count down and expired buffs are dropped."""
        loop.world.global_buffs.append(GlobalBuff(
            id="slow", source_card_id=0, modifier=2.0, duration=2, type=BuffType.TICK_SPEED,
        ))
        assert loop.world.effective_tick_rate == 60_000

        loop.tick()
        assert loop.world.global_buffs[0].duration == 1
        result = loop.tick()

        assert result.expired_buffs == ["slow"]
        assert loop.world.effective_tick_rate == loop.world.tick_rate

    def test_new_day_restock(self, loop):
        """Hour 24 flags a restock that completes separately."""
        loop.world.global_hours = 23
        result = loop.tick()

        assert result.restock_due
        assert loop.state == LoopState.RESTOCKING

        old_ids = {item.id for item in loop.world.shop_items}
        loop.complete_restock()
        assert loop.state == LoopState.RUNNING
        assert {item.id for item in loop.world.shop_items}.isdisjoint(old_ids)

    def test_advance_restocks_immediately(self, loop):
        """advance() completes restocks without the real-time delay."""
        results = loop.advance(24)
        assert len(results) == 24
        assert loop.world.global_hours == 24
        assert not loop.world.is_restocking

    def test_chariot_shortens_day(self, loop, place):
        """The Chariot's extra hour is processed in the same tick."""
        place(loop.world, 0, 7)
        loop.world.global_hours = 22

        result = loop.tick()

        assert loop.world.global_hours == 24
        assert result.hour == 24
        assert result.restock_due

    def test_cycle_resources_credited(self, loop, place):
        """Cycle resources land in the currency."""
        place(loop.world, 0, 11)
        loop.world.global_hours = 5
        before = loop.world.currency

        result = loop.tick()

        assert loop.world.currency == pytest.approx(before + result.resources)


class TestRealtime:
    """Tests for the continuous channels."""

    def test_accrue_empty_circle(self, loop):
        """Base rate is 0.05 per second at zero sync."""
        before = loop.world.currency
        assert loop.accrue(10) == pytest.approx(0.5)
        assert loop.world.currency == pytest.approx(before + 0.5)

    def test_isolated_wisdom_rate(self, loop, place):
        """Isolated Wisdom adds its fixed rate on top of the base."""
        place(loop.world, 0, 5)
        place(loop.world, 1, 9)
        refresh_derived(loop.world)

        base = 0.05 * (1 + loop.global_sync / 100)
        assert loop.realtime_rate == pytest.approx(base + 0.5)

    def test_departed_empress_windows_dropped(self, loop, place):
        """Windows of cards no longer in the circle are forgotten."""
        empress = place(loop.world, 0, 3)
        loop.world.empress_windows[empress.instance_id] = EmpressWindow(last_tick=0.0)
        loop.world.empress_windows["gone"] = EmpressWindow(last_tick=0.0)

        changed = loop.check_empress_windows(now=100.0)

        assert "gone" not in loop.world.empress_windows
        assert changed == [empress.instance_id]


class TestCommands:
    """Tests for commands through the loop."""

    def test_success_replaces_world(self, loop):
        """A successful command swaps in the new world."""
        loop.world.inventory.append(make_card(9))
        old_world = loop.world

        result = loop.place_card(0, 0)

        assert result.success
        assert loop.world is not old_world
        assert loop.world.slots[0].card.card_id == 9

    def test_failure_keeps_world(self, loop):
        """A rejected command leaves the world in place."""
        old_world = loop.world
        result = loop.remove_card(0)
        assert not result.success
        assert loop.world is old_world

    def test_choice_state(self, loop, place):
        """An open choice is reported but the clock keeps running."""
        place(loop.world, 0, 6)
        loop.activate_effect(0)
        assert loop.state == LoopState.WAITING_CHOICE

        loop.tick()
        assert loop.world.global_hours == 1
        assert loop.world.pending_choice is not None

    def test_save_round_trip(self, loop, place):
        """A save exported from one loop loads into another."""
        place(loop.world, 1, 9)
        loop.world.currency = 1234.5
        loop.world.global_hours = 40
        code = loop.export_save()

        other = GameLoop(World.create(seed=1))
        other.start()
        result = other.import_save(code)

        assert result.success
        assert other.world.currency == 1234.5
        assert other.world.global_hours == 40
        assert other.world.slots[1].card.card_id == 9
