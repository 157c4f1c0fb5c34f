"""
Tests for the card catalog.

Tests:
- Catalog contents and lookups
- Load-time validation against the effect registry
- Clock-derived helpers
"""

import pytest

from ..catalog import (
    BLANK_CARD,
    CatalogValidationError,
    EffectId,
    MarkKind,
    all_cards,
    ensure_valid_catalog,
    get_card,
    get_card_by_effect,
    validate_catalog,
)
from ..engine_core.clock import (
    CycleState,
    daylight_intensity,
    is_daytime,
    is_new_moon,
    phase_index,
    sign_index,
)
from ..engine_core.effect_resolver import BEHAVIORS


class TestCatalog:
    """Tests for catalog contents."""

    def test_major_arcana_ids(self):
        """The library holds the 22 Major Arcana with ids 0..21."""
        assert [card.id for card in all_cards()] == list(range(22))

    def test_blank_card_is_optional(self):
        """The blank placeholder is only listed on request."""
        cards = all_cards(include_blank=True)
        assert cards[0] is BLANK_CARD
        assert BLANK_CARD.id == -1
        assert BLANK_CARD.effect_id == EffectId.BLANK

    def test_lookup(self):
        """Cards are found by id and effect id; unknown ids give None."""
        assert get_card(13).name == "Death"
        assert get_card_by_effect(EffectId.THE_TOWER).id == 16
        assert get_card(99) is None

    def test_default_marks(self):
        """Every card carries one default mark of a known kind."""
        for card in all_cards():
            assert len(card.marks) == 1
            assert card.marks[0].kind in (MarkKind.LUNAR, MarkKind.SIGN)

    def test_sync_related(self):
        """Effect text mentioning sync marks a card for The Star."""
        assert get_card(17).is_sync_related
        assert get_card(5).is_sync_related
        assert not get_card(0).is_sync_related


class TestCatalogValidation:
    """Tests for load-time validation."""

    def test_registry_covers_catalog(self):
        """Every effect id in the catalog has a registered behaviour."""
        result = validate_catalog(BEHAVIORS)
        assert result.valid
        assert result.errors == []

    def test_missing_behaviours_reported(self):
        """An empty registry fails for every card including the blank."""
        result = validate_catalog({})
        assert not result.valid
        assert len(result.errors) == 23

    def test_ensure_raises(self):
        """ensure_valid_catalog raises with the collected errors."""
        with pytest.raises(CatalogValidationError) as exc:
            ensure_valid_catalog({})
        assert len(exc.value.errors) == 23


class TestClock:
    """Tests for time derived from globalHours."""

    def test_lunar_phases(self):
        """Each phase lasts 42 hours and the cycle repeats every 168."""
        assert phase_index(0) == 0
        assert phase_index(41) == 0
        assert phase_index(42) == 1
        assert phase_index(167) == 3
        assert phase_index(168) == 0

    def test_zodiac_signs(self):
        """Signs change every 672 hours."""
        assert sign_index(671) == 0
        assert sign_index(672) == 1
        assert sign_index(672 * 12) == 0

    def test_daytime_window(self):
        """Daytime is 6h..17h inclusive."""
        assert not is_daytime(5)
        assert is_daytime(6)
        assert is_daytime(17)
        assert not is_daytime(18)
        assert is_daytime(24 + 12)

    def test_new_moon(self):
        """Hour 0 is not a new moon; every later multiple of 168 is."""
        assert not is_new_moon(0)
        assert is_new_moon(168)
        assert not is_new_moon(169)

    def test_daylight_intensity(self):
        """Brightness peaks at noon and is zero at night."""
        assert daylight_intensity(12) == 1.0
        assert daylight_intensity(3) == 0.0
        assert 0.0 < daylight_intensity(9) < 1.0

    def test_cycle_state(self):
        """Completion flags are raised when a counter wraps after hour 0."""
        assert not CycleState.at(0).daily_complete
        state = CycleState.at(168)
        assert state.daily_complete
        assert state.lunar_complete
        assert not state.sign_complete
        assert state.daily == 0
