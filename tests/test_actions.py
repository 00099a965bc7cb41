"""Tests for actions module."""
from dataclasses import replace

import pytest

from kingdomengine.action import ActionDef
from kingdomengine.actions import (
    buy_building,
    buy_upgrade,
    click_action,
    cooldown_remaining,
    execute_action,
    get_action_status,
    get_available_actions,
    is_action_unlocked,
)
from kingdomengine.building import BuildingDef
from kingdomengine.cost_scaling import CostCurve
from kingdomengine.definition import GameConfig
from kingdomengine.factory import new_game
from kingdomengine.requirement import Req
from kingdomengine.resource import ResourceDef
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef


def _make_config() -> GameConfig:
    return GameConfig(
        resources=[
            ResourceDef("gold", initial_amount=100, click_base=1),
            ResourceDef("wood", initial_amount=20),
            ResourceDef("food"),
            ResourceDef("prestige"),
        ],
        buildings=[
            BuildingDef("farm", base_cost={"gold": 10}, base_prod={"food": 1}),
            BuildingDef("mine", base_cost={"gold": 10}, requires_tech=["mining"]),
        ],
        technologies=[TechnologyDef("mining", base_cost={"gold": 10})],
        upgrades=[PrestigeUpgradeDef("royalDecrees", cost_curve=CostCurve.fixed(2), max_level=1)],
        actions=[
            ActionDef("chop", gains={"wood": 5}, cooldown=10),
            ActionDef(
                "sellWood",
                cost={"wood": 10},
                gains={"gold": 15},
                unlock_conditions=[Req.building("farm", ">=", 1)],
                one_time_unlock=True,
            ),
        ],
    )


def _make_state(config: GameConfig):
    return new_game(config, now=0.0)


class TestBuildings:
    def test_buy_pays_and_counts(self):
        config = _make_config()
        s = buy_building(config, _make_state(config), "farm")
        assert s.building_count("farm") == 1
        assert s.resource("gold") == 90

    def test_unaffordable_is_noop(self):
        config = _make_config()
        s = _make_state(config).with_resource("gold", 5)
        assert buy_building(config, s, "farm") is s

    def test_locked_and_unknown_are_noops(self):
        config = _make_config()
        s = _make_state(config)
        assert buy_building(config, s, "mine") is s
        assert buy_building(config, s, "castle") is s


class TestUpgrades:
    def test_buy_spends_prestige(self):
        config = _make_config()
        s = _make_state(config).with_resource("prestige", 5)
        s = buy_upgrade(config, s, "royalDecrees")
        assert s.upgrade_level("royalDecrees") == 1
        assert s.resource("prestige") == 3

    def test_capped_at_max_level(self):
        config = _make_config()
        s = _make_state(config).with_resource("prestige", 5).with_upgrade_level("royalDecrees", 1)
        assert buy_upgrade(config, s, "royalDecrees") is s


def test_click_counts_and_grants():
    config = _make_config()
    s = click_action(config, _make_state(config))
    assert s.clicks == 1
    assert s.resource("gold") == 101
    assert s.lifetime_total("gold") == 1


class TestOneShotActions:
    def test_execute_pays_gains_and_cools_down(self):
        config = _make_config()
        s = execute_action(config, _make_state(config), "chop")
        assert s.resource("wood") == 25
        assert s.clicks == 1
        assert s.actions.unlocks["chop"].last_used == 0.0
        assert cooldown_remaining(s, "chop") == 10

        again = execute_action(config, s, "chop")
        assert again is s
        status = get_action_status(config, s, "chop")
        assert status.on_cooldown
        assert status.reason == "On cooldown for 10.0s"

    def test_cooldown_expires(self):
        config = _make_config()
        s = execute_action(config, _make_state(config), "chop")
        s = replace(s, t=10.0)
        assert cooldown_remaining(s, "chop") == 0
        assert execute_action(config, s, "chop").resource("wood") == 30

    def test_locked_action(self):
        config = _make_config()
        s = _make_state(config)
        assert not is_action_unlocked(config, s, "sellWood")
        assert get_action_status(config, s, "sellWood").reason == "Locked"
        assert execute_action(config, s, "sellWood") is s

    def test_cannot_afford(self):
        config = _make_config()
        s = buy_building(config, _make_state(config), "farm").with_resource("wood", 5)
        assert get_action_status(config, s, "sellWood").reason == "Cannot afford"

    def test_one_time_unlock_persists(self):
        config = _make_config()
        s = buy_building(config, _make_state(config), "farm")
        s = execute_action(config, s, "sellWood")
        assert s.resource("gold") == 105
        assert s.actions.unlocks["sellWood"].unlocked
        s = s.with_building_count("farm", 0)
        assert is_action_unlocked(config, s, "sellWood")
        assert "sellWood" in get_available_actions(config, s)

    def test_unknown_action(self):
        config = _make_config()
        s = _make_state(config)
        assert get_action_status(config, s, "dance").reason == "Unknown action"
        assert execute_action(config, s, "dance") is s
