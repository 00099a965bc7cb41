"""Tests for MCP server tool functions."""

import pytest

from kingdomengine.achievement import AchievementDef, AchievementRequirement
from kingdomengine.action import ActionDef
from kingdomengine.building import BuildingDef
from kingdomengine.cost_scaling import CostCurve
from kingdomengine.definition import GameConfig, GameSettings
from kingdomengine.event import EventChoice, EventDef
from kingdomengine.loop_action import LoopActionDef
from kingdomengine.resource import ResourceDef
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef

from kingdomengine.mcp.server import (
    _GameHolder,
    _new_runtime,
    _tool_buy_building,
    _tool_buy_upgrade,
    _tool_choose_event,
    _tool_click,
    _tool_execute_action,
    _tool_export_save,
    _tool_get_achievements,
    _tool_get_actions,
    _tool_get_available_purchases,
    _tool_get_event,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_get_loop_actions,
    _tool_import_save,
    _tool_loop_action,
    _tool_new_game,
    _tool_prestige,
    _tool_research,
    _tool_wait,
)


def _make_test_config() -> GameConfig:
    """A small but complete kingdom for testing."""
    return GameConfig(
        settings=GameSettings(name="Test Kingdom", prestige_gain_from="gold", prestige_divisor=100),
        resources=[
            ResourceDef("gold", display_name="Gold", initial_amount=100, click_base=1),
            ResourceDef("food", display_name="Food"),
            ResourceDef("prestige", display_name="Prestige"),
        ],
        buildings=[
            BuildingDef("farm", base_cost={"gold": 10}, cost_scale=1.5, base_prod={"food": 1},
                        category="food"),
            BuildingDef("mill", base_cost={"gold": 50}, requires_tech=["milling"]),
        ],
        technologies=[TechnologyDef("milling", base_cost={"gold": 30}, research_time=5)],
        upgrades=[PrestigeUpgradeDef("royalDecrees", cost_curve=CostCurve.fixed(1), max_level=1)],
        events=[
            EventDef(
                "festival",
                choices=[
                    EventChoice("Celebrate", gives={"food": 5}),
                    EventChoice("Bribe", takes={"gold": 1000}, requires={"gold": 1000}),
                ],
            ),
        ],
        actions=[ActionDef("tax", gains={"gold": 20}, cooldown=60)],
        loop_actions=[LoopActionDef("hunt", gains={"food": 3}, loop_points_required=500)],
        achievements=[
            AchievementDef("firstFarm", name="First Farm",
                           requirements=[AchievementRequirement("building", "farm", 1)]),
            AchievementDef("secret", hidden=True,
                           requirements=[AchievementRequirement("click", "total", 1000)]),
        ],
    )


def _make_holder() -> _GameHolder:
    config = _make_test_config()
    return _GameHolder(config=config, runtime=_new_runtime(config, seed=1))


def _trigger_event(holder: _GameHolder) -> None:
    while holder.runtime.state.events.active_event is None:
        holder.runtime.tick(1.0)


# ── get_game_info ────────────────────────────────────────────────────


class TestGetGameInfo:
    def test_returns_expected_structure(self):
        result = _tool_get_game_info(_make_holder())
        assert result["name"] == "Test Kingdom"
        assert [r["key"] for r in result["resources"]] == ["gold", "food", "prestige"]
        assert len(result["buildings"]) == 2
        assert result["technologies"][0]["key"] == "milling"
        assert result["actions"] == ["tax"]
        assert result["loop_actions"] == ["hunt"]
        assert result["prestige_formula"] == "floor(sqrt(lifetime gold / 100))"

    def test_building_categories(self):
        result = _tool_get_game_info(_make_holder())
        buildings = {b["key"]: b for b in result["buildings"]}
        assert buildings["farm"]["category"] == "food"


# ── get_game_state ───────────────────────────────────────────────────


class TestGetGameState:
    def test_initial_values(self):
        result = _tool_get_game_state(_make_holder())
        assert result["time"] == 0.0
        assert result["resources"]["gold"]["current"] == 100.0
        assert result["buildings"] == {}
        assert result["research"] is None
        assert result["prestige_count"] == 0

    def test_after_purchase_and_research(self):
        holder = _make_holder()
        _tool_buy_building(holder, "farm")
        _tool_research(holder, "milling")
        result = _tool_get_game_state(holder)
        assert result["buildings"] == {"farm": 1}
        assert result["resources"]["food"]["rate"] == 1.0
        assert result["research"]["technology"] == "milling"
        assert result["research"]["seconds_remaining"] == 5.0


# ── purchases ────────────────────────────────────────────────────────


class TestPurchases:
    def test_buy_building(self):
        holder = _make_holder()
        result = _tool_buy_building(holder, "farm")
        assert result == {"success": True, "building": "farm", "owned": 1}
        assert holder.runtime.state.resource("gold") == 90

    def test_unknown_building(self):
        assert _tool_buy_building(_make_holder(), "castle") == {"error": "Unknown building: 'castle'"}

    def test_locked_building(self):
        result = _tool_buy_building(_make_holder(), "mill")
        assert not result["success"]
        assert "technology" in result["reason"]

    def test_cannot_afford(self):
        holder = _make_holder()
        holder.runtime.state = holder.runtime.state.with_resource("gold", 0)
        assert _tool_buy_building(holder, "farm") == {"success": False, "reason": "Cannot afford"}

    def test_available_purchases(self):
        holder = _make_holder()
        result = _tool_get_available_purchases(holder)
        assert [b["key"] for b in result["buildings"]] == ["farm"]
        assert result["buildings"][0]["cost"] == {"gold": 10}
        assert result["buildings"][0]["time_to_afford"] == 0.0
        assert result["technologies"] == [{"key": "milling", "cost": {"gold": 30}, "affordable": True}]
        assert result["upgrades"][0]["affordable"] is False

    def test_upgrade_flow(self):
        holder = _make_holder()
        assert _tool_buy_upgrade(holder, "royalDecrees")["reason"] == "Cannot afford"
        holder.runtime.state = holder.runtime.state.with_resource("prestige", 5)
        assert _tool_buy_upgrade(holder, "royalDecrees") == {
            "success": True, "upgrade": "royalDecrees", "level": 1,
        }
        assert _tool_buy_upgrade(holder, "royalDecrees")["reason"] == "Already at max level"
        assert "error" in _tool_buy_upgrade(holder, "nope")


class TestResearch:
    def test_start_and_reject_second(self):
        holder = _make_holder()
        assert _tool_research(holder, "milling") == {
            "success": True, "technology": "milling", "research_time": 5,
        }
        result = _tool_research(holder, "milling")
        assert result == {"success": False, "reason": "Already researching milling"}

    def test_already_researched(self):
        holder = _make_holder()
        _tool_research(holder, "milling")
        _tool_wait(holder, 5)
        assert _tool_research(holder, "milling")["reason"] == "Already researched"
        assert _tool_buy_building(holder, "mill")["success"]

    def test_unknown(self):
        assert "error" in _tool_research(_make_holder(), "sorcery")


# ── click ────────────────────────────────────────────────────────────


class TestClick:
    def test_single_click(self):
        result = _tool_click(_make_holder())
        assert result == {"clicks": 1, "earned": {"gold": 1.0}, "total_clicks": 1}

    def test_multiple_clicks(self):
        result = _tool_click(_make_holder(), 10)
        assert result["earned"] == {"gold": 10.0}

    @pytest.mark.parametrize("count", [0, 1001])
    def test_bounds(self, count):
        assert "error" in _tool_click(_make_holder(), count)


# ── actions ──────────────────────────────────────────────────────────


class TestActions:
    def test_execute_then_cooldown(self):
        holder = _make_holder()
        assert _tool_execute_action(holder, "tax") == {"success": True, "action": "tax"}
        assert holder.runtime.state.resource("gold") == 120
        result = _tool_execute_action(holder, "tax")
        assert not result["success"]
        assert result["reason"].startswith("On cooldown")
        listed = _tool_get_actions(holder)["actions"][0]
        assert listed["cooldown_remaining"] == 60.0
        assert not listed["can_execute"]

    def test_unknown(self):
        assert _tool_execute_action(_make_holder(), "dance") == {"error": "Unknown action: 'dance'"}


class TestLoopActions:
    def test_start_and_progress(self):
        holder = _make_holder()
        result = _tool_loop_action(holder, "hunt", "start")
        assert result == {"success": True, "action": "hunt", "active_loop_actions": ["hunt"]}
        holder.runtime.tick(0.05)
        listed = _tool_get_loop_actions(holder)
        assert listed["max_concurrent"] == 2
        assert listed["can_start_more"] is True
        assert listed["loop_actions"][0]["progress"] == 20.0

    def test_bad_command_and_key(self):
        holder = _make_holder()
        assert "error" in _tool_loop_action(holder, "hunt", "sprint")
        assert "error" in _tool_loop_action(holder, "fish", "start")
        assert _tool_loop_action(holder, "hunt", "resume") == {
            "success": False, "reason": "Cannot resume hunt",
        }


# ── events ───────────────────────────────────────────────────────────


class TestEvents:
    def test_no_active_event(self):
        holder = _make_holder()
        result = _tool_get_event(holder)
        assert result["active"] is False
        assert 10.0 <= result["seconds_until_next"] <= 30.0
        assert _tool_choose_event(holder, 0) == {"error": "No active event"}

    def test_choose(self):
        holder = _make_holder()
        _trigger_event(holder)
        result = _tool_get_event(holder)
        assert result["event"] == "festival"
        assert [c["available"] for c in result["choices"]] == [True, False]
        assert _tool_choose_event(holder, 1) == {"success": False, "reason": "Choice unavailable"}
        assert _tool_choose_event(holder, 0) == {"success": True, "event": "festival", "choice": 0}
        assert holder.runtime.state.resource("food") == 5


# ── achievements ─────────────────────────────────────────────────────


def test_achievements_hide_secret_ones():
    holder = _make_holder()
    _tool_buy_building(holder, "farm")
    result = _tool_wait(holder, 1)
    assert result["new_achievements"] == ["firstFarm"]
    listing = _tool_get_achievements(holder)
    assert [a["key"] for a in listing["achievements"]] == ["firstFarm"]
    assert listing["achievements"][0]["level"] == 1
    assert listing["total_points"] == 10
    assert listing["pending_notifications"] == ["firstFarm"]


# ── wait ─────────────────────────────────────────────────────────────


class TestWait:
    def test_production(self):
        holder = _make_holder()
        _tool_buy_building(holder, "farm")
        result = _tool_wait(holder, 10)
        assert result["waited"] == 10
        assert result["time"] == 10.0
        assert result["resources"]["food"]["current"] == 10.0

    def test_events_time_out_while_waiting(self):
        holder = _make_holder()
        result = _tool_wait(holder, 120)
        assert result["events_resolved"][0] == {"event": "festival", "choice": 0}

    @pytest.mark.parametrize("seconds", [0, -5, 86401])
    def test_bounds(self, seconds):
        assert "error" in _tool_wait(_make_holder(), seconds)


# ── prestige & saves ─────────────────────────────────────────────────


class TestPrestige:
    def test_nothing_to_gain(self):
        assert _tool_prestige(_make_holder()) == {"success": False, "reason": "No prestige to gain yet"}

    def test_prestige(self):
        holder = _make_holder()
        _tool_click(holder, 400)
        assert _tool_prestige(holder) == {"success": True, "gain": 2, "new_balance": 2.0}
        assert _tool_get_game_state(holder)["prestige_count"] == 1


class TestSaves:
    def test_round_trip(self):
        holder = _make_holder()
        _tool_buy_building(holder, "farm")
        text = _tool_export_save(holder)["save"]
        other = _make_holder()
        assert _tool_import_save(other, text) == {"success": True, "time": 0.0}
        assert other.runtime.state == holder.runtime.state

    def test_bad_save(self):
        assert not _tool_import_save(_make_holder(), "nonsense")["success"]


class TestNewGame:
    def test_resets_state(self):
        holder = _make_holder()
        _tool_buy_building(holder, "farm")
        assert _tool_new_game(holder)["success"]
        assert holder.runtime.state.building_count("farm") == 0
        assert holder.runtime.state.resource("gold") == 100


# ── create_server ────────────────────────────────────────────────────


class TestCreateServer:
    def test_creates_server(self):
        from kingdomengine.mcp.server import create_server

        server = create_server(_make_test_config())
        assert server is not None
