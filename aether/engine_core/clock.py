"""
Game Clock - Pure functions over the single global hour counter.

globalHours is the only clock in the engine. Every periodic behaviour
(day/night, lunar phase, zodiac sign, Justice's 7-hour rhythm, Tower's
8-hour reshuffle) is derived from it here; no component keeps its own.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..catalog.marks import LUNAR_PHASES, ZODIAC_SIGNS

TICK_RATE_MS = 30_000  # 30 real seconds = 1 game hour
DAILY_MAX = 24
LUNAR_MAX = 168  # 7 days
SIGN_MAX = 672  # 28 days
PHASE_LENGTH = LUNAR_MAX // len(LUNAR_PHASES)  # 42 hours

DAY_START = 6
DAY_END = 17
PEAK_HOUR = 12


def day_hour(global_hours: int) -> int:
    return global_hours % DAILY_MAX


def lunar_hour(global_hours: int) -> int:
    return global_hours % LUNAR_MAX


def sign_hour(global_hours: int) -> int:
    return global_hours % SIGN_MAX


def is_daytime(global_hours: int) -> bool:
    """Inclusive day window DAY_START..DAY_END."""
    return DAY_START <= day_hour(global_hours) <= DAY_END


def is_peak_hour(global_hours: int) -> bool:
    return day_hour(global_hours) == PEAK_HOUR


def phase_index(global_hours: int) -> int:
    """Current lunar phase index (0=New .. 3=Waning)."""
    return (lunar_hour(global_hours) // PHASE_LENGTH) % len(LUNAR_PHASES)


def sign_index(global_hours: int) -> int:
    """Current zodiac sign index (0=Aries .. 11=Pisces)."""
    return (global_hours // SIGN_MAX) % len(ZODIAC_SIGNS)


def lunar_cycle_number(global_hours: int) -> int:
    """How many full lunar cycles have elapsed."""
    return global_hours // LUNAR_MAX


def is_new_moon(global_hours: int) -> bool:
    """Exact start of a lunar cycle (never at hour 0)."""
    return global_hours > 0 and lunar_hour(global_hours) == 0


def daylight_intensity(global_hours: int) -> float:
    """0..1 brightness peaking at noon, 0 at night."""
    hour = day_hour(global_hours)
    if hour < DAY_START or hour > DAY_END:
        return 0.0
    max_distance = (PEAK_HOUR - DAY_START) if hour < PEAK_HOUR else (DAY_END - PEAK_HOUR)
    intensity = 1 - abs(hour - PEAK_HOUR) / max_distance
    return max(0.0, min(1.0, intensity))


@dataclass
class CycleState:
    """Daily/lunar/sign breakdown of the clock for display."""
    daily: int = 0
    lunar: int = 0
    sign: int = 0
    cycle_duration: int = TICK_RATE_MS
    daily_complete: bool = False
    lunar_complete: bool = False
    sign_complete: bool = False

    @classmethod
    def at(cls, global_hours: int, cycle_duration: int = TICK_RATE_MS) -> CycleState:
        started = global_hours > 0
        return cls(
            daily=day_hour(global_hours),
            lunar=lunar_hour(global_hours),
            sign=sign_hour(global_hours),
            cycle_duration=cycle_duration,
            daily_complete=started and day_hour(global_hours) == 0,
            lunar_complete=started and lunar_hour(global_hours) == 0,
            sign_complete=started and sign_hour(global_hours) == 0,
        )
