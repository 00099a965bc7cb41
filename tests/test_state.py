"""Tests for state module."""
import pytest

from kingdomengine.state import GameState, LoopActionState


def _make_state() -> GameState:
    return GameState(
        resources={"gold": 100.0, "wood": 5.0},
        lifetime={"gold": 100.0, "wood": 5.0},
        buildings={"farm": 2},
        technologies={"agriculture": 0},
        upgrades={"royalDecrees": 1},
    )


class TestQueries:
    def test_defaults_for_missing_keys(self):
        s = _make_state()
        assert s.resource("stone") == 0.0
        assert s.lifetime_total("stone") == 0.0
        assert s.building_count("mine") == 0
        assert s.upgrade_level("fertileLands") == 0

    def test_totals(self):
        s = _make_state()
        assert s.total_buildings() == 2
        assert not s.has_technology("agriculture")


class TestWriters:
    def test_noop_writes_return_same_object(self):
        s = _make_state()
        assert s.with_resource("gold", 100.0) is s
        assert s.with_resources({"gold": 100.0}) is s
        assert s.add_resources({"gold": 0.0}) is s
        assert s.pay({}) is s
        assert s.with_building_count("farm", 2) is s
        assert s.with_upgrade_level("royalDecrees", 1) is s

    def test_writes_do_not_mutate(self):
        s = _make_state()
        s2 = s.with_resource("gold", 50.0)
        assert s2 is not s
        assert s.resource("gold") == 100.0
        assert s2.resource("gold") == 50.0

    def test_with_resource_clamps(self):
        assert _make_state().with_resource("gold", -5).resource("gold") == 0.0

    def test_int_balances_stored_as_float(self):
        s = _make_state().with_resource("gold", 7).with_resources({"wood": 3, "stone": 0})
        assert isinstance(s.resources["gold"], float)
        assert isinstance(s.resources["wood"], float)
        assert s.with_resource("gold", 7) is s

    def test_add_resources_tracks_lifetime_of_gains_only(self):
        s = _make_state().add_resources({"gold": 20.0, "wood": -10.0})
        assert s.resource("gold") == 120.0
        assert s.lifetime_total("gold") == 120.0
        assert s.resource("wood") == 0.0
        assert s.lifetime_total("wood") == 5.0

    def test_pay_clamps_at_zero(self):
        s = _make_state().pay({"gold": 150.0, "wood": 1.0})
        assert s.resource("gold") == 0.0
        assert s.resource("wood") == 4.0

    def test_technology_level_is_binary(self):
        s = _make_state()
        assert s.with_technology_level("agriculture", 5).technology_level("agriculture") == 1
        assert s.with_technology_level("agriculture", -1).technology_level("agriculture") == 0

    def test_building_count_never_negative(self):
        assert _make_state().with_building_count("farm", -3).building_count("farm") == 0


class TestLoopActions:
    def test_append_then_replace(self):
        s = GameState()
        s = s.with_loop_action(LoopActionState("gatherWood", is_active=True))
        assert s.loop_action("gatherWood").is_active
        s = s.with_loop_action(LoopActionState("gatherWood", is_paused=True))
        assert len(s.loop_actions) == 1
        assert s.loop_action("gatherWood").is_paused
        assert s.active_loop_actions() == []

    def test_identical_entry_is_noop(self):
        s = GameState().with_loop_action(LoopActionState("gatherWood"))
        assert s.with_loop_action(LoopActionState("gatherWood")) is s


def test_state_is_frozen():
    with pytest.raises(AttributeError):
        _make_state().clicks = 3
