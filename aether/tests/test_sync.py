"""
Tests for the sync calculator.

All scenarios run at hour 0 unless stated: night, New moon, Aries.
"""

import pytest

from ..catalog.marks import lunar, sign
from ..engine_core.state import CardInstance, Curse, CurseType, Slot
from ..engine_core.sync import compute_global_sync, slot_sync_percentage
from ..engine_core.synergy import compute_active_synergies
from .conftest import make_card


def _sync(cards, hours=0, bonus=0, sign_idx=0, phase_idx=0):
    slots = [Slot(position=i, card=card) for i, card in enumerate(cards)]
    active = compute_active_synergies(slots)
    return compute_global_sync(slots, sign_idx, phase_idx, hours, bonus, active)


class TestGlobalSync:
    """Tests for compute_global_sync."""

    def test_empty_circle(self):
        """No marks, no sync."""
        assert _sync([None, None, None]) == 0

    def test_lunar_match_at_night(self):
        """A single matching lunar mark gives the full lunar weight."""
        assert _sync([make_card(2), None, None]) == 100

    def test_lunar_ignored_in_daylight(self):
        """Lunar marks do not count between 6h and 17h."""
        assert _sync([make_card(2), None, None], hours=12) == 0

    def test_moon_halves_lunar_weight(self):
        """The Moon halves the lunar weight; distinct lunar names split it."""
        assert _sync([make_card(2), make_card(18), None]) == 25

    def test_eclipse_counts_lunar_in_daylight(self):
        """Sun + Moon restores the lunar weight, counts it by day, then scales by 0.75."""
        cards = [make_card(2), make_card(18), make_card(19)]
        # New + Full lunar marks: 1.0 / 2 = 50, Sun's Leo mark misses Aries
        assert _sync(cards, hours=12) == 37

    def test_sign_and_emperor(self):
        """A matching sign mark gives 50; The Emperor multiplies by 1.25."""
        assert _sync([make_card(4), None, None]) == 62

    def test_permanent_bonus(self):
        """Permanent bonus is added after the mark score."""
        assert _sync([make_card(2), None, None], bonus=7) == 107

    def test_isolated_cards_ignored(self):
        """Isolated cards contribute no marks."""
        card = make_card(2, curse=Curse(id="c", type=CurseType.ISOLATED))
        assert _sync([card, None, None]) == 0

    def test_unknown_card_ignored(self):
        """Cards with unknown ids are skipped."""
        card = CardInstance(instance_id="x", card_id=999, marks=[sign(0)])
        assert _sync([card, None, None]) == 0

    def test_blank_card_ignored(self):
        """Blank cards never contribute marks, even ones they carry."""
        blank = CardInstance(instance_id="b", card_id=-1, is_blank=True, marks=[sign(0)])
        assert _sync([blank, None, None]) == 0

    def test_star_bonus(self):
        """The Star adds 20 plus 30 per active mark on sync cards."""
        hierophant = make_card(5, marks=[sign(0)])
        # sign 0.5 / 2 names = 25, +20 flat, +30 for the Hierophant's Aries
        assert _sync([make_card(17), hierophant, None]) == 75

    def test_star_penalizes_deviation(self):
        """Sync cards off the dominant mark pattern get half the bonus."""
        hierophant = make_card(5, marks=[sign(0)])
        # Two Aquarius cards dominate; the Hierophant's bonus is halved
        assert _sync([make_card(17), hierophant, make_card(0)]) == 60

    @pytest.mark.parametrize("bonus", [0, 30, 100, 10_000])
    def test_wheel_judgement_clamp(self, bonus):
        """Inevitable Karma keeps the score within [25, 75]."""
        score = _sync([make_card(10), make_card(20), make_card(2)], bonus=bonus)
        assert 25 <= score <= 75

    def test_result_is_integer(self):
        """The score is floored to an integer."""
        assert isinstance(_sync([make_card(4), None, None]), int)


class TestSlotSync:
    """Tests for per-slot sync percentage."""

    def test_partial_match(self):
        """Half the marks matching gives 50%."""
        card = make_card(2, marks=[sign(0), lunar(1)])
        assert slot_sync_percentage(card, 0, 0, lunar_counts=True) == 50

    def test_empty_and_isolated(self):
        """Empty slots and Isolated cards are 0%."""
        assert slot_sync_percentage(None, 0, 0, True) == 0
        card = make_card(2, curse=Curse(id="c", type=CurseType.ISOLATED))
        assert slot_sync_percentage(card, 0, 0, True) == 0

    def test_blank_card(self):
        """A blank card is 0% even with a matching mark."""
        blank = CardInstance(instance_id="b", card_id=-1, is_blank=True, marks=[sign(0)])
        assert slot_sync_percentage(blank, 0, 0, True) == 0
