"""Tests for requirement module."""
import pytest

from kingdomengine.requirement import Req, Requirement, referenced_keys
from kingdomengine.state import GameState


def _make_state() -> GameState:
    """Create a GameState with known values."""
    return GameState(
        resources={"gold": 500.0, "wood": 10.0},
        lifetime={"gold": 2000.0, "wood": 10.0},
        buildings={"farm": 5, "mine": 0},
        technologies={"agriculture": 1, "engineering": 0},
        upgrades={"royalDecrees": 2},
    )


class TestThresholds:
    def test_resource(self):
        s = _make_state()
        assert Req.resource("gold", ">=", 500).evaluate(s)
        assert not Req.resource("gold", ">", 500).evaluate(s)
        assert Req.resource("wood", "<", 11).evaluate(s)

    def test_missing_resource_reads_zero(self):
        assert Req.resource("stone", "<=", 0).evaluate(_make_state())

    def test_lifetime(self):
        s = _make_state()
        assert Req.lifetime("gold", ">=", 1500).evaluate(s)
        assert not Req.resource("gold", ">=", 1500).evaluate(s)

    def test_building(self):
        s = _make_state()
        assert Req.building("farm", ">=", 5).evaluate(s)
        assert not Req.building("mine").evaluate(s)

    def test_technology(self):
        s = _make_state()
        assert Req.technology("agriculture").evaluate(s)
        assert not Req.technology("engineering").evaluate(s)

    def test_prestige_upgrade_level(self):
        s = _make_state()
        assert Req.prestige("royalDecrees", 2).evaluate(s)
        assert not Req.prestige("royalDecrees", 3).evaluate(s)


class TestComposites:
    def test_and(self):
        s = _make_state()
        assert (Req.resource("gold", ">=", 100) & Req.building("farm", ">=", 1)).evaluate(s)
        assert not (Req.resource("gold", ">=", 100) & Req.building("mine")).evaluate(s)

    def test_or(self):
        s = _make_state()
        assert (Req.building("mine") | Req.technology("agriculture")).evaluate(s)
        assert not (Req.building("mine") | Req.technology("engineering")).evaluate(s)

    def test_all_any_factories(self):
        s = _make_state()
        assert Req.all(Req.resource("gold", ">=", 1), Req.resource("wood", ">=", 1)).evaluate(s)
        assert Req.any(Req.building("mine"), Req.building("farm")).evaluate(s)
        assert Req.all().evaluate(s)
        assert not Req.any().evaluate(s)

    def test_custom(self):
        req = Req.custom(lambda s: s.total_buildings() == 5, "five buildings")
        assert isinstance(req, Requirement)
        assert req.evaluate(_make_state())
        assert req.describe() == "five buildings"


class TestDescribe:
    def test_threshold(self):
        assert Req.resource("gold", ">=", 10).describe() == "resource gold >= 10"

    def test_composites(self):
        req = Req.resource("gold", ">=", 10) & Req.building("farm", ">=", 2)
        assert req.describe() == "resource gold >= 10 and building farm >= 2"
        req = Req.lifetime("wood", ">", 1.5) | Req.technology("agriculture")
        assert req.describe() == "lifetime wood > 1.5 or technology agriculture >= 1"

    def test_custom_without_description(self):
        assert Req.custom(lambda s: True).describe() == "custom"


def test_referenced_keys_recurses():
    req = Req.all(
        Req.resource("gold", ">=", 1),
        Req.any(Req.building("farm"), Req.technology("agriculture")),
        Req.custom(lambda s: True),
    )
    assert referenced_keys(req) == [
        ("resource", "gold"),
        ("building", "farm"),
        ("technology", "agriculture"),
    ]


def test_unknown_operator_behaves_like_ge():
    s = _make_state()
    assert Req.resource("gold", "=>", 400).evaluate(s)
    assert not Req.resource("gold", "=>", 600).evaluate(s)
