"""
Marks - Lunar phase and zodiac sign tags.

A mark is what a card "listens to" in the sky:
- Lunar marks match one of the four moon phases (42 hours each)
- Sign marks match one of the twelve zodiac signs (672 hours each)

Card instances own their mark lists; the catalog only provides defaults.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class MarkKind(str, Enum):
    """Mark categories."""
    LUNAR = "lunar"
    SIGN = "sign"


@dataclass(frozen=True)
class Mark:
    """A single lunar or sign tag on a card."""
    kind: MarkKind
    name: str
    icon: str = ""


@dataclass(frozen=True)
class CelestialBody:
    """Name/icon pair for a lunar phase or zodiac sign."""
    name: str
    icon: str

    def as_mark(self, kind: MarkKind) -> Mark:
        return Mark(kind=kind, name=self.name, icon=self.icon)


LUNAR_PHASES: tuple[CelestialBody, ...] = (
    CelestialBody("New", "🌑"),
    CelestialBody("Waxing", "🌓"),
    CelestialBody("Full", "🌕"),
    CelestialBody("Waning", "🌗"),
)

ZODIAC_SIGNS: tuple[CelestialBody, ...] = (
    CelestialBody("Aries", "♈"),
    CelestialBody("Taurus", "♉"),
    CelestialBody("Gemini", "♊"),
    CelestialBody("Cancer", "♋"),
    CelestialBody("Leo", "♌"),
    CelestialBody("Virgo", "♍"),
    CelestialBody("Libra", "♎"),
    CelestialBody("Scorpio", "♏"),
    CelestialBody("Sagittarius", "♐"),
    CelestialBody("Capricorn", "♑"),
    CelestialBody("Aquarius", "♒"),
    CelestialBody("Pisces", "♓"),
)


def lunar(index: int) -> Mark:
    """Lunar mark for phase index 0..3."""
    return LUNAR_PHASES[index].as_mark(MarkKind.LUNAR)


def sign(index: int) -> Mark:
    """Sign mark for zodiac index 0..11."""
    return ZODIAC_SIGNS[index].as_mark(MarkKind.SIGN)


def mark_pattern(marks: list[Mark] | tuple[Mark, ...]) -> str:
    """Order-independent key for a mark set, e.g. "Aries+New"."""
    return "+".join(sorted(m.name for m in marks))
