"""Tests for economy module."""
import math

import pytest

from kingdomengine.building import BuildingDef
from kingdomengine.cost_scaling import CostCurve
from kingdomengine.definition import GameConfig, GameSettings
from kingdomengine.economy import (
    can_afford,
    can_buy_building,
    can_buy_upgrade,
    cost_for,
    get_click_gains,
    get_per_sec,
    get_upgrade_cost,
    is_building_unlocked,
    technology_cost_for,
)
from kingdomengine.effect import Effect, EffectType
from kingdomengine.factory import new_game
from kingdomengine.multipliers import Multipliers
from kingdomengine.resource import ResourceDef
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef


def _make_config() -> GameConfig:
    return GameConfig(
        settings=GameSettings(name="Test"),
        resources=[
            ResourceDef("gold", initial_amount=100, click_base=1),
            ResourceDef("wood"),
            ResourceDef("food", click_base=0.1),
            ResourceDef("prestige"),
        ],
        buildings=[
            BuildingDef("farm", base_cost={"gold": 10}, cost_scale=1.15, base_prod={"food": 1}),
            BuildingDef(
                "sawmill",
                base_cost={"gold": 20, "wood": 5},
                base_prod={"wood": 2},
                base_use={"food": 0.5},
                requires_tech=["engineering"],
            ),
        ],
        technologies=[TechnologyDef("engineering", base_cost={"gold": 50})],
        upgrades=[
            PrestigeUpgradeDef(
                "masterCraftsmen",
                cost_curve=CostCurve.exponential(1.0, 2.0),
                max_level=2,
                effects=[Effect.exponential(EffectType.COST_MULT, 0.5)],
            ),
            PrestigeUpgradeDef(
                "fertileLands",
                cost_curve=CostCurve.fixed(3.5),
                effects=[Effect.static(EffectType.PRODUCTION_MULT, 2.0, target="food")],
            ),
        ],
    )


class TestBuildingCost:
    def test_base_price(self):
        config = _make_config()
        assert cost_for(config, new_game(config, now=0.0), "farm") == {"gold": 10}

    def test_price_scales_with_owned(self):
        config = _make_config()
        state = new_game(config, now=0.0).with_building_count("farm", 3)
        # 10 * 1.15^3 = 15.21, rounded up
        assert cost_for(config, state, "farm") == {"gold": 16}

    def test_cost_multiplier_applies_before_rounding(self):
        config = _make_config()
        state = new_game(config, now=0.0).with_upgrade_level("masterCraftsmen", 1)
        assert cost_for(config, state, "farm") == {"gold": 5}

    def test_explicit_multipliers(self):
        config = _make_config()
        state = new_game(config, now=0.0)
        assert cost_for(config, state, "farm", Multipliers(cost=0.25)) == {"gold": 3}

    def test_unknown_building_is_empty(self, caplog):
        config = _make_config()
        assert cost_for(config, new_game(config, now=0.0), "castle") == {}
        assert "Unknown building" in caplog.text


class TestAffordability:
    def test_can_afford(self):
        config = _make_config()
        state = new_game(config, now=0.0)
        assert can_afford(state, {"gold": 100})
        assert not can_afford(state, {"gold": 100, "wood": 1})
        assert can_afford(state, {})

    def test_locked_building(self):
        config = _make_config()
        state = new_game(config, now=0.0).with_resource("wood", 100)
        assert not is_building_unlocked(config, state, "sawmill")
        assert not can_buy_building(config, state, "sawmill")
        state = state.with_technology_level("engineering", 1)
        assert is_building_unlocked(config, state, "sawmill")
        assert can_buy_building(config, state, "sawmill")

    def test_unknown_building_not_buyable(self):
        config = _make_config()
        assert not can_buy_building(config, new_game(config, now=0.0), "castle")

    def test_technology_cost(self):
        config = _make_config()
        assert technology_cost_for(config, "engineering") == {"gold": 50}
        assert technology_cost_for(config, "alchemy") == {}


class TestProduction:
    def test_dense_over_resources(self):
        config = _make_config()
        rates = get_per_sec(config, new_game(config, now=0.0))
        assert rates == {"gold": 0.0, "wood": 0.0, "food": 0.0, "prestige": 0.0}

    def test_production_and_consumption(self):
        config = _make_config()
        state = (
            new_game(config, now=0.0)
            .with_building_count("farm", 3)
            .with_building_count("sawmill", 2)
        )
        rates = get_per_sec(config, state)
        assert rates["food"] == pytest.approx(3 - 1.0)
        assert rates["wood"] == pytest.approx(4.0)

    def test_production_multiplier(self):
        config = _make_config()
        state = (
            new_game(config, now=0.0)
            .with_building_count("farm", 3)
            .with_upgrade_level("fertileLands", 1)
        )
        assert get_per_sec(config, state)["food"] == pytest.approx(6.0)

    def test_click_gains(self):
        config = _make_config()
        gains = get_click_gains(config, new_game(config, now=0.0))
        assert gains == {"gold": 1.0, "food": pytest.approx(0.1)}


class TestUpgradeCost:
    def test_rounds_up(self):
        config = _make_config()
        assert get_upgrade_cost(config, "fertileLands", 0) == 4
        assert get_upgrade_cost(config, "masterCraftsmen", 1) == 2

    def test_unknown_or_negative_is_unaffordable(self):
        config = _make_config()
        assert math.isinf(get_upgrade_cost(config, "nope", 0))
        assert math.isinf(get_upgrade_cost(config, "fertileLands", -1))

    def test_can_buy_upgrade_uses_prestige(self):
        config = _make_config()
        state = new_game(config, now=0.0)
        assert not can_buy_upgrade(config, state, "masterCraftsmen")
        state = state.with_resource("prestige", 1)
        assert can_buy_upgrade(config, state, "masterCraftsmen")

    def test_max_level(self):
        config = _make_config()
        state = (
            new_game(config, now=0.0)
            .with_resource("prestige", 100)
            .with_upgrade_level("masterCraftsmen", 2)
        )
        assert not can_buy_upgrade(config, state, "masterCraftsmen")
