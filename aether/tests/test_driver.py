"""
Tests for the real-time tick driver.

Runs short event loops with millisecond tick periods.
"""

import asyncio

from ..engine_core.state import BuffType, GlobalBuff, World
from ..session import GameLoop, TickDriver


def fast_loop() -> GameLoop:
    return GameLoop(World.create(seed=3, tick_rate=10))


class TestTickDriver:
    """Tests for the asyncio timers."""

    def test_timers_advance_world(self):
        """Hours pass and income accrues while the driver runs."""
        loop = fast_loop()
        ticks = []

        async def run():
            driver = TickDriver(loop, accrual_period=0.01, restock_delay=0, on_tick=ticks.append)
            driver.start()
            assert driver.running
            await asyncio.sleep(0.2)
            await driver.stop()
            assert not driver.running

        start_currency = loop.world.currency
        asyncio.run(run())

        assert loop.world.global_hours > 0
        assert len(ticks) == loop.world.global_hours
        assert loop.world.currency > start_currency

    def test_stop_halts_clock(self):
        """No hour passes after stop()."""
        loop = fast_loop()

        async def run():
            driver = TickDriver(loop, accrual_period=0.01)
            driver.start()
            await asyncio.sleep(0.05)
            await driver.stop()
            hours = loop.world.global_hours
            await asyncio.sleep(0.05)
            return hours

        assert asyncio.run(run()) == loop.world.global_hours

    def test_tick_speed_change_restarts_timer(self):
        """A slowdown buff changes the hourly period."""
        loop = fast_loop()

        async def run():
            driver = TickDriver(loop, accrual_period=10)
            driver.start()
            assert driver.period_ms == 10
            assert not driver.sync_tick_rate()

            loop.world.global_buffs.append(GlobalBuff(
                id="slow", source_card_id=0, modifier=2.0, duration=12, type=BuffType.TICK_SPEED,
            ))
            changed = driver.sync_tick_rate()
            period = driver.period_ms
            await driver.stop()
            return changed, period

        assert asyncio.run(run()) == (True, 20)
