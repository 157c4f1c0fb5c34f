"""
Tests for save codes.

Tests:
- Export/import preserves every persisted field
- Code format and omitted optional fields
- Rejection of malformed, incompatible and incomplete codes
"""

import base64

import pytest

from ..engine_core.action import Action
from ..engine_core.reducer import apply_action
from ..engine_core.state import BuffType, Curse, CurseType, EmpressWindow, GlobalBuff, PendingPayout, World
from ..persistence import SAVE_VERSION, SaveCodeError, decode, encode, export_save, import_save
from ..persistence.transport import SALT, xor_cipher
from .conftest import make_card


class TestRoundTrip:
    """Tests for export followed by import."""

    def test_all_fields(self, world, place):
        """Every persisted field survives a save and load."""
        world.currency = 777.25
        world.global_hours = 345
        world.tick_rate = 15_000
        world.permanent_sync_bonus = 10
        world.inventory = [make_card(9, cooldown_until=400)]
        place(world, 0, 12, hanged_man_active=True, hanged_man_consumes=2, hanged_man_activated_at=0)
        place(world, 2, 16, tower_arcano_active=True, tower_arcano_cycles=3,
              curse=Curse(id="c1", type=CurseType.TEMPORAL, state=1))
        world.pending_payouts = [PendingPayout(amount=150, delivery_time=500)]
        world.global_buffs = [GlobalBuff(
            id="b1", source_card_id=21, modifier=2.0, duration=7, type=BuffType.EFFECT_MULTIPLIER,
        )]

        loaded = import_save(export_save(world), World.create(seed=1))

        assert loaded.currency == 777.25
        assert loaded.global_hours == 345
        assert loaded.tick_rate == 15_000
        assert loaded.permanent_sync_bonus == 10
        assert loaded.inventory == world.inventory
        assert [s.card for s in loaded.slots] == [s.card for s in world.slots]
        assert loaded.pending_payouts == world.pending_payouts
        assert loaded.global_buffs == world.global_buffs
        assert loaded.slots[0].card.hanged_man_activated_at == 0

    def test_cycle_recomputed(self, world):
        """The clock breakdown follows the loaded hour."""
        world.global_hours = 50
        loaded = import_save(export_save(world), World.create())
        assert loaded.cycle.daily == 2
        assert loaded.cycle.lunar == 50

    def test_transient_state_reset(self, world, place):
        """Empress windows are not persisted."""
        empress = place(world, 0, 3)
        world.empress_windows[empress.instance_id] = EmpressWindow()
        loaded = import_save(export_save(world), world)
        assert loaded.empress_windows == {}

    def test_short_circle_padded(self, world):
        """Saves with fewer than three slots load into a three-slot circle."""
        code = encode({"v": SAVE_VERSION, "cur": 1, "gh": 0, "sl": [None]})
        assert import_save(code, world).slot_count == 3


class TestCodeFormat:
    """Tests for the code layout."""

    def test_dynamic_key_prefix(self, world, place):
        """The key names the circle's effects, null for empty slots."""
        place(world, 0, 0)
        assert export_save(world).startswith("thefoolnullnull&")

    def test_optional_fields_omitted(self, world):
        """Unset and false card fields are left out of the record."""
        world.inventory = [make_card(9)]
        record = decode(export_save(world))
        assert set(record["inv"][0]) == {"cid", "iid", "m"}
        assert record["v"] == SAVE_VERSION


class TestRejection:
    """Tests for invalid codes."""

    @pytest.mark.parametrize("code", [
        "garbage",
        "a&b&c",
        "key&not base64!!",
    ])
    def test_malformed(self, world, code):
        """Codes that cannot be decoded are rejected."""
        with pytest.raises(SaveCodeError):
            import_save(code, world)

    def test_not_json(self, world):
        """Valid base64 that does not decrypt to JSON is rejected."""
        data = base64.b64encode(xor_cipher("{oops", SALT).encode("utf-8")).decode("ascii")
        with pytest.raises(SaveCodeError):
            import_save(f"&{data}", world)

    def test_wrong_version(self, world):
        """Saves from another schema version are refused."""
        code = encode({"v": SAVE_VERSION + 1, "cur": 1, "gh": 0})
        with pytest.raises(SaveCodeError, match="version"):
            import_save(code, world)

    def test_missing_currency(self, world):
        """The currency field is required."""
        code = encode({"v": SAVE_VERSION, "gh": 0})
        with pytest.raises(SaveCodeError, match="cur"):
            import_save(code, world)

    def test_too_many_slots(self, world):
        """More than four slots is not a valid circle."""
        code = encode({"v": SAVE_VERSION, "cur": 1, "gh": 0, "sl": [None] * 5})
        with pytest.raises(SaveCodeError):
            import_save(code, world)

    @pytest.mark.parametrize("fields", [{"tr": 0}, {"tr": -250}, {"gh": -1}])
    def test_out_of_range_clock(self, world, fields):
        """A non-positive tick rate or negative hour count is refused."""
        code = encode({"v": SAVE_VERSION, "cur": 1, "gh": 0, **fields})
        with pytest.raises(SaveCodeError):
            import_save(code, world)

        result = apply_action(world, Action.import_save(code))
        assert result.error_code == "INVALID_SAVE"
        assert world.tick_rate > 0

    def test_reducer_keeps_world(self, world):
        """A failed import through the reducer leaves the world untouched."""
        world.currency = 42
        result = apply_action(world, Action.import_save("garbage"))

        assert not result.success
        assert result.error_code == "INVALID_SAVE"
        assert world.currency == 42
