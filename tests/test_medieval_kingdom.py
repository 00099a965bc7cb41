"""Integration test with the medieval kingdom example."""
import sys
import os
import random
from dataclasses import replace

import pytest

# Ensure examples can be imported
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from examples.medieval_kingdom import BASIC_RESOURCES, define_game
from kingdomengine.achievements import check_achievements
from kingdomengine.actions import buy_building, execute_action, is_action_unlocked
from kingdomengine.economy import cost_for, get_per_sec
from kingdomengine.factory import new_game
from kingdomengine.formatting import format_text_report
from kingdomengine.prestige import prestige_gain
from kingdomengine.requirement import Req
from kingdomengine.research import check_research_progress, start_research
from kingdomengine.simulation import Simulation
from kingdomengine.strategy import ClickProfile, GreedyCheapest


def test_kingdom_validates():
    config = define_game()
    errors = config.validate()
    assert errors == [], f"Validation errors: {errors}"


def test_content_counts():
    config = define_game()
    assert config.name == "Medieval Kingdom"
    assert len(config.resources) == 6
    assert len(config.buildings) == 8
    assert len(config.technologies) == 6
    assert len(config.upgrades) == 4
    assert len(config.events) == 8
    assert len(config.actions) == 12
    assert len(config.loop_actions) == 10
    assert len(config.achievements) == 32
    assert set(BASIC_RESOURCES) <= set(config.resource_keys)


def test_new_game_starts_with_ten_gold():
    config = define_game()
    state = new_game(config, now=0.0, rng=random.Random(0))
    assert state.resource("gold") == 10
    assert all(state.resource(k) == 0 for k in ("wood", "stone", "food", "prestige"))
    assert cost_for(config, state, "woodcutter") == {"gold": 15}


def test_research_buildings_need_technology():
    config = define_game()
    state = new_game(config, now=0.0).with_resources({"gold": 1000, "wood": 1000})
    assert buy_building(config, state, "library") is state
    state = start_research(config, state, "writing")
    state = check_research_progress(config, replace(state, t=30.0))
    assert state.has_technology("writing")
    assert buy_building(config, state, "library").building_count("library") == 1


def test_engineering_grants_stone():
    config = define_game()
    state = new_game(config, now=0.0).with_resources(
        {"gold": 1000, "stone": 50, "research_points": 100}
    )
    state = state.with_technology_level("writing", 1).with_technology_level("mathematics", 1)
    state = start_research(config, state, "engineering")
    assert state.resource("stone") == 0
    state = check_research_progress(config, replace(state, t=90.0))
    assert state.resource("stone") == 50


def test_trade_actions_unlock_permanently():
    config = define_game()
    state = new_game(config, now=0.0).with_resource("wood", 50)
    assert is_action_unlocked(config, state, "sellWood")
    state = execute_action(config, state, "sellWood")
    assert state.resource("gold") == 15
    assert is_action_unlocked(config, state, "sellWood")


def test_prestige_from_food():
    config = define_game()
    state = new_game(config, now=0.0).add_resources({"food": 4000})
    assert prestige_gain(config, state) == 2


def test_castle_consumes_food():
    config = define_game()
    state = new_game(config, now=0.0).with_building_count("castle", 2)
    rates = get_per_sec(config, state)
    assert rates["food"] == pytest.approx(-1.0)
    assert rates["prestige"] == pytest.approx(0.2)


def test_first_gold_achievement():
    config = define_game()
    state = new_game(config, now=0.0).with_resource("gold", 100)
    state = check_achievements(config, state)
    assert state.achievements.unlocked["firstGold"] == 1
    assert state.achievements.unlocked["perfectionist"] == 0
    assert state.achievements.unlocked["completionist"] == 0


def test_kingdom_simulation():
    config = define_game()
    sim = Simulation(
        config=config,
        strategy=GreedyCheapest(click_profile=ClickProfile(cps=5)),
        duration=1800,
        tick_resolution=1.0,
        seed=42,
        stop_when=Req.building("castle"),
    )
    report = sim.run()
    assert report.total_time > 0
    assert report.final_buildings["woodcutter"] > 0
    assert report.achievement_time("firstGold") is not None
    assert all(v >= 0 for v in report.final_resources.values())

    text = format_text_report(report)
    assert "Medieval Kingdom" in text
    assert "GreedyCheapest" in text
