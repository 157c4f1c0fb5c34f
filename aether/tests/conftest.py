"""
Pytest fixtures for Aether tests.
"""

import random

import pytest

from ..catalog.cards import get_card
from ..engine_core.state import CardInstance, World
from ..session import GameLoop


class StubRandom(random.Random):
    """Random source with a fixed random() value and first-choice randrange()."""

    def __init__(self, value: float = 0.0):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value

    def randrange(self, start, stop=None, step=1):
        return start if stop is not None else 0


def make_card(card_id: int, **fields) -> CardInstance:
    """New instance of a catalog card; extra fields override defaults."""
    card = CardInstance.create(get_card(card_id))
    for name, value in fields.items():
        setattr(card, name, value)
    return card


@pytest.fixture
def world() -> World:
    """Seeded world at hour 0 with an empty circle."""
    return World.create(seed=42)


@pytest.fixture
def place():
    """Put catalog cards straight into slots: place(world, slot, card_id, **fields)."""
    def _place(world: World, slot_index: int, card_id: int, **fields) -> CardInstance:
        card = make_card(card_id, **fields)
        world.slots[slot_index].card = card
        return card
    return _place


@pytest.fixture
def loop(world) -> GameLoop:
    """Started game loop over the seeded world."""
    game_loop = GameLoop(world)
    game_loop.start()
    return game_loop
