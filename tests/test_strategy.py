"""Tests for strategy module."""
import pytest

from kingdomengine.building import BuildingDef
from kingdomengine.definition import GameConfig
from kingdomengine.event import EventChoice, EventDef
from kingdomengine.loop_action import LoopActionDef
from kingdomengine.requirement import Req
from kingdomengine.resource import ResourceDef
from kingdomengine.runtime import GameRuntime
from kingdomengine.strategy import ClickProfile, GreedyCheapest, Idle
from kingdomengine.technology import TechnologyDef


def _make_config() -> GameConfig:
    return GameConfig(
        resources=[
            ResourceDef("gold", initial_amount=100),
            ResourceDef("wood", initial_amount=100),
            ResourceDef("food"),
            ResourceDef("prestige"),
        ],
        buildings=[
            BuildingDef("hut", base_cost={"gold": 50}),
            BuildingDef("farm", base_cost={"gold": 10}),
            BuildingDef("lumberyard", base_cost={"wood": 30}),
            BuildingDef("castle", base_cost={"gold": 1000}),
        ],
        technologies=[
            TechnologyDef("writing", base_cost={"gold": 500}),
            TechnologyDef("agriculture", base_cost={"gold": 10}),
        ],
        events=[
            EventDef("bandits", choices=[
                EventChoice("Pay", takes={"gold": 20}),
                EventChoice("Fight", gives={"gold": 5}, requires={"wood": 1000}),
                EventChoice("Hide"),
            ]),
        ],
        loop_actions=[
            LoopActionDef("gather"),
            LoopActionDef("mine"),
            LoopActionDef("smith", unlock_conditions=[Req.building("castle")]),
        ],
    )


def _runtime() -> GameRuntime:
    return GameRuntime(_make_config(), seed=0, now=0.0)


class TestClickProfile:
    def test_clicks_per_duration(self):
        assert ClickProfile(cps=5).get_clicks(_runtime().state, 2.0) == 10

    def test_stops_once_condition_met(self):
        profile = ClickProfile(cps=5, active_until=Req.resource("gold", ">=", 50))
        assert profile.get_clicks(_runtime().state, 1.0) == 0


class TestGreedyCheapest:
    def test_cheapest_first(self):
        rt = _runtime()
        assert GreedyCheapest().decide_purchases(rt) == ["farm", "lumberyard", "hut"]

    def test_cost_weights(self):
        rt = _runtime()
        strategy = GreedyCheapest(cost_weights={"wood": 0.1})
        assert strategy.decide_purchases(rt) == ["lumberyard", "farm", "hut"]

    def test_research_first_affordable(self):
        assert GreedyCheapest().choose_research(_runtime()) == "agriculture"

    def test_loop_actions_fill_free_slots(self):
        rt = _runtime()
        assert GreedyCheapest().choose_loop_actions(rt) == ["mine", "gather"]
        rt.start_loop_action("gather")
        rt.start_loop_action("mine")
        assert GreedyCheapest().choose_loop_actions(rt) == []

    def test_event_choice_maximises_net_gain(self):
        rt = _runtime()
        event = rt.config.get_event("bandits")
        assert GreedyCheapest().choose_event_choice(rt, event) == 2

    def test_prestige_threshold(self):
        rt = _runtime()
        assert not GreedyCheapest().should_prestige(rt)
        strategy = GreedyCheapest(prestige_at=1)
        assert not strategy.should_prestige(rt)
        rt.state = rt.state.add_resources({"food": 1000})
        assert strategy.should_prestige(rt)

    def test_describe(self):
        assert GreedyCheapest().describe() == "GreedyCheapest"
        strategy = GreedyCheapest(click_profile=ClickProfile(cps=5), prestige_at=3)
        assert strategy.describe() == "GreedyCheapest (5 CPS) prestige at 3"


def test_idle_does_nothing():
    rt = _runtime()
    idle = Idle()
    assert idle.decide_purchases(rt) == []
    assert idle.choose_research(rt) is None
    assert idle.choose_event_choice(rt, rt.config.get_event("bandits")) is None
    assert not idle.should_prestige(rt)
    assert idle.get_clicks(rt.state, 10.0) == 0
    assert idle.describe() == "Idle"
