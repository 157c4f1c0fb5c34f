"""
Tick Driver - Real-time timers around a GameLoop.

Three independent asyncio tasks:
- hourly: sleeps the effective tick period, then calls GameLoop.tick();
  restarted whenever the effective period changes (Fool slowdowns)
- accrual: once per real second adds the continuous income and steps
  the Empress activation windows
- restock: a one-shot task that completes a shop restock a few seconds
  after a new day

All tasks run on one event loop; GameLoop itself is synchronous.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Callable

from .game_loop import RESTOCK_DELAY_SECONDS, GameLoop, TickResult

logger = logging.getLogger(__name__)


class TickDriver:
    """
    Drives a GameLoop in real time.

    Usage:
        driver = TickDriver(loop)
        driver.start()          # inside a running event loop
        ...
        await driver.stop()
    """

    def __init__(
        self,
        loop: GameLoop,
        accrual_period: float = 1.0,
        restock_delay: float = RESTOCK_DELAY_SECONDS,
        on_tick: Callable[[TickResult], None] | None = None,
    ):
        self.loop = loop
        self.accrual_period = accrual_period
        self.restock_delay = restock_delay
        self.on_tick = on_tick
        self._hourly: asyncio.Task | None = None
        self._accrual: asyncio.Task | None = None
        self._restock: asyncio.Task | None = None
        self._period_ms: int | None = None

    @property
    def running(self) -> bool:
        return self._accrual is not None and not self._accrual.done()

    @property
    def period_ms(self) -> int | None:
        """Period the hourly timer is currently running at."""
        return self._period_ms

    def start(self) -> None:
        """Start all timers. Idempotent."""
        if self.running:
            return
        self.loop.start()
        self._restart_hourly()
        self._accrual = asyncio.create_task(self._accrual_loop())
        logger.info("Driver started for world %s", self.loop.world.world_id)

    async def stop(self) -> None:
        """Cancel every timer and wait for them to finish."""
        tasks = [t for t in (self._hourly, self._accrual, self._restock) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._hourly = self._accrual = self._restock = None
        self._period_ms = None

    def sync_tick_rate(self) -> bool:
        """Restart the hourly timer if the effective period changed."""
        period = self.loop.world.effective_tick_rate
        if period == self._period_ms:
            return False
        logger.debug("Tick period changed from %s to %d ms", self._period_ms, period)
        self._restart_hourly()
        return True

    def _restart_hourly(self) -> None:
        if self._hourly is not None:
            self._hourly.cancel()
        self._period_ms = self.loop.world.effective_tick_rate
        self._hourly = asyncio.create_task(self._hourly_loop(self._period_ms))

    async def _hourly_loop(self, period_ms: int) -> None:
        while True:
            await asyncio.sleep(period_ms / 1000)
            result = self.loop.tick()
            if result.restock_due:
                self._schedule_restock()
            if self.on_tick is not None:
                self.on_tick(result)
            if self.loop.world.effective_tick_rate != period_ms:
                # Restart at the new period from a fresh task.
                self._period_ms = self.loop.world.effective_tick_rate
                self._hourly = asyncio.create_task(self._hourly_loop(self._period_ms))
                return

    async def _accrual_loop(self) -> None:
        while True:
            await asyncio.sleep(self.accrual_period)
            self.loop.accrue(self.accrual_period)
            self.loop.check_empress_windows()
            self.sync_tick_rate()

    def _schedule_restock(self) -> None:
        if self._restock is not None and not self._restock.done():
            return
        self._restock = asyncio.create_task(self._restock_after_delay())

    async def _restock_after_delay(self) -> None:
        await asyncio.sleep(self.restock_delay)
        self.loop.complete_restock()
