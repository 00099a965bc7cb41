"""MCP server wrapping GameRuntime for interactive AI playtesting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from kingdomengine.achievements import get_achievement_progress, pending_notifications, visible_achievements
from kingdomengine.actions import get_action_status
from kingdomengine.definition import GameConfig
from kingdomengine.economy import can_buy_building, can_buy_upgrade, is_building_unlocked, technology_cost_for
from kingdomengine.events import can_make_event_choice, time_until_next_event
from kingdomengine.loop_actions import (
    can_have_more_loop_actions,
    get_loop_action_progress,
    is_loop_action_unlocked,
)
from kingdomengine.prestige import prestige_formula
from kingdomengine.research import (
    can_research_technology,
    get_available_technologies,
    get_research_progress,
    get_research_time_remaining,
)
from kingdomengine.runtime import GameRuntime

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum clicks per click() call
_MAX_CLICKS = 1000
_LOOP_COMMANDS = ("start", "pause", "resume", "stop")


@dataclass
class _GameHolder:
    """Holds the active config and runtime."""

    config: GameConfig
    runtime: GameRuntime


def _new_runtime(config: GameConfig, seed: int | None = None) -> GameRuntime:
    return GameRuntime(config, seed=seed, now=0.0)


def _round_map(values: dict[str, float], digits: int = 2) -> dict[str, float]:
    return {k: round(v, digits) for k, v in values.items()}


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    cfg = holder.config
    return {
        "name": cfg.name,
        "resources": [
            {"key": r.key, "display_name": r.display_name, "click_base": r.click_base}
            for r in cfg.resources
        ],
        "buildings": [
            {"key": b.key, "display_name": b.display_name, "category": b.category}
            for b in cfg.buildings
        ],
        "technologies": [
            {"key": t.key, "display_name": t.display_name, "requires": list(t.requires_tech)}
            for t in cfg.technologies
        ],
        "upgrades": [
            {"key": u.key, "display_name": u.display_name, "max_level": u.max_level}
            for u in cfg.upgrades
        ],
        "actions": [a.key for a in cfg.actions],
        "loop_actions": [la.key for la in cfg.loop_actions],
        "prestige_formula": prestige_formula(cfg),
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    state = rt.state
    rates = rt.per_sec()
    research = None
    if state.research.active_research is not None:
        research = {
            "technology": state.research.active_research,
            "progress": round(get_research_progress(state), 1),
            "seconds_remaining": round(get_research_time_remaining(state), 1),
        }
    return {
        "time": round(state.t, 2),
        "play_time": round(state.play_time, 2),
        "resources": {
            key: {"current": round(value, 2), "rate": round(rates.get(key, 0.0), 4)}
            for key, value in state.resources.items()
        },
        "buildings": {k: v for k, v in state.buildings.items() if v > 0},
        "technologies": [k for k, v in state.technologies.items() if v > 0],
        "upgrades": {k: v for k, v in state.upgrades.items() if v > 0},
        "research": research,
        "active_event": state.events.active_event,
        "active_loop_actions": [la.action_key for la in state.active_loop_actions()],
        "clicks": state.clicks,
        "prestige_count": state.prestige_count,
        "prestige_available": rt.prestige_gain(),
        "achievement_points": state.achievements.total_points,
    }


def _tool_get_available_purchases(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    cfg, state = holder.config, rt.state

    buildings = []
    for b in cfg.buildings:
        if not is_building_unlocked(cfg, state, b.key):
            continue
        cost = rt.building_cost(b.key)
        wait = rt.time_to_afford(cost)
        buildings.append({
            "key": b.key,
            "owned": state.building_count(b.key),
            "cost": _round_map(cost),
            "affordable": can_buy_building(cfg, state, b.key),
            "time_to_afford": round(wait, 2) if wait is not None else None,
        })

    technologies = [
        {
            "key": key,
            "cost": _round_map(technology_cost_for(cfg, key)),
            "affordable": can_research_technology(cfg, state, key),
        }
        for key in get_available_technologies(cfg, state)
    ]

    upgrades = []
    for u in cfg.upgrades:
        level = state.upgrade_level(u.key)
        if level >= u.max_level:
            continue
        upgrades.append({
            "key": u.key,
            "level": level,
            "cost": rt.upgrade_cost(u.key),
            "affordable": can_buy_upgrade(cfg, state, u.key),
        })

    return {"buildings": buildings, "technologies": technologies, "upgrades": upgrades}


def _tool_buy_building(holder: _GameHolder, building_key: str) -> dict[str, Any]:
    if holder.config.get_building(building_key) is None:
        return {"error": f"Unknown building: {building_key!r}"}
    state = holder.runtime.state
    if not is_building_unlocked(holder.config, state, building_key):
        return {"success": False, "reason": "Requires technology not yet researched"}
    if not holder.runtime.buy_building(building_key):
        return {"success": False, "reason": "Cannot afford"}
    return {
        "success": True,
        "building": building_key,
        "owned": holder.runtime.state.building_count(building_key),
    }


def _tool_buy_upgrade(holder: _GameHolder, upgrade_key: str) -> dict[str, Any]:
    udef = holder.config.get_upgrade(upgrade_key)
    if udef is None:
        return {"error": f"Unknown upgrade: {upgrade_key!r}"}
    if holder.runtime.state.upgrade_level(upgrade_key) >= udef.max_level:
        return {"success": False, "reason": "Already at max level"}
    if not holder.runtime.buy_upgrade(upgrade_key):
        return {"success": False, "reason": "Cannot afford"}
    return {
        "success": True,
        "upgrade": upgrade_key,
        "level": holder.runtime.state.upgrade_level(upgrade_key),
    }


def _tool_research(holder: _GameHolder, technology_key: str) -> dict[str, Any]:
    tdef = holder.config.get_technology(technology_key)
    if tdef is None:
        return {"error": f"Unknown technology: {technology_key!r}"}
    state = holder.runtime.state
    if state.has_technology(technology_key):
        return {"success": False, "reason": "Already researched"}
    if state.research.active_research is not None:
        return {"success": False, "reason": f"Already researching {state.research.active_research}"}
    if not holder.runtime.research(technology_key):
        return {"success": False, "reason": "Prerequisites missing or cannot afford"}
    return {"success": True, "technology": technology_key, "research_time": tdef.research_time}


def _tool_click(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    before = dict(holder.runtime.state.resources)
    for _ in range(count):
        holder.runtime.click()
    after = holder.runtime.state.resources
    earned = {k: after[k] - before.get(k, 0.0) for k in after if after[k] != before.get(k, 0.0)}
    return {"clicks": count, "earned": _round_map(earned), "total_clicks": holder.runtime.state.clicks}


def _tool_get_actions(holder: _GameHolder) -> dict[str, Any]:
    cfg, state = holder.config, holder.runtime.state
    result = []
    for a in cfg.actions:
        status = get_action_status(cfg, state, a.key)
        result.append({
            "key": a.key,
            "cost": dict(a.cost),
            "gains": dict(a.gains),
            "unlocked": status.unlocked,
            "can_execute": status.can_execute,
            "cooldown_remaining": round(status.cooldown_remaining, 2),
            "reason": status.reason,
        })
    return {"actions": result}


def _tool_execute_action(holder: _GameHolder, action_key: str) -> dict[str, Any]:
    if holder.config.get_action(action_key) is None:
        return {"error": f"Unknown action: {action_key!r}"}
    status = get_action_status(holder.config, holder.runtime.state, action_key)
    if not status.can_execute:
        return {"success": False, "reason": status.reason}
    holder.runtime.execute_action(action_key)
    return {"success": True, "action": action_key}


def _tool_get_loop_actions(holder: _GameHolder) -> dict[str, Any]:
    cfg, state = holder.config, holder.runtime.state
    result = []
    for la in cfg.loop_actions:
        progress = get_loop_action_progress(cfg, state, la.key)
        result.append({
            "key": la.key,
            "unlocked": is_loop_action_unlocked(cfg, state, la.key),
            "cost": dict(la.cost),
            "gains": dict(la.gains),
            "progress": round(progress.percentage, 1),
            "loops_completed": progress.total_loops_completed,
            "active": progress.is_active,
            "paused": progress.is_paused,
        })
    return {
        "max_concurrent": state.loop_settings.max_concurrent_actions,
        "can_start_more": can_have_more_loop_actions(state),
        "loop_actions": result,
    }


def _tool_loop_action(holder: _GameHolder, action_key: str, command: str) -> dict[str, Any]:
    if holder.config.get_loop_action(action_key) is None:
        return {"error": f"Unknown loop action: {action_key!r}"}
    if command not in _LOOP_COMMANDS:
        return {"error": f"Command must be one of {', '.join(_LOOP_COMMANDS)}"}
    rt = holder.runtime
    handler = {
        "start": rt.start_loop_action,
        "pause": rt.pause_loop_action,
        "resume": rt.resume_loop_action,
        "stop": rt.stop_loop_action,
    }[command]
    if not handler(action_key):
        return {"success": False, "reason": f"Cannot {command} {action_key}"}
    return {
        "success": True,
        "action": action_key,
        "active_loop_actions": [la.action_key for la in rt.state.active_loop_actions()],
    }


def _tool_get_event(holder: _GameHolder) -> dict[str, Any]:
    state = holder.runtime.state
    key = state.events.active_event
    if key is None:
        return {"active": False, "seconds_until_next": round(time_until_next_event(state), 1)}
    edef = holder.config.get_event(key)
    if edef is None:
        return {"active": True, "event": key, "choices": []}
    return {
        "active": True,
        "event": key,
        "title": edef.title,
        "description": edef.description,
        "default_choice": edef.default_choice,
        "choices": [
            {
                "index": i,
                "label": c.label,
                "gives": dict(c.gives),
                "takes": dict(c.takes),
                "available": can_make_event_choice(holder.config, state, key, i),
            }
            for i, c in enumerate(edef.choices)
        ],
    }


def _tool_choose_event(holder: _GameHolder, choice_index: int) -> dict[str, Any]:
    active = holder.runtime.state.events.active_event
    if active is None:
        return {"error": "No active event"}
    if not holder.runtime.make_event_choice(choice_index):
        return {"success": False, "reason": "Choice unavailable"}
    return {"success": True, "event": active, "choice": choice_index}


def _tool_get_achievements(holder: _GameHolder) -> dict[str, Any]:
    cfg, state = holder.config, holder.runtime.state
    result = []
    for adef in visible_achievements(cfg, state):
        progress = get_achievement_progress(cfg, state, adef.key)
        result.append({
            "key": adef.key,
            "name": adef.name,
            "description": adef.description,
            "level": state.achievements.unlocked.get(adef.key, 0),
            "progress": round(progress.progress, 3),
        })
    return {
        "total_points": state.achievements.total_points,
        "pending_notifications": [n.achievement_key for n in pending_notifications(state)],
        "achievements": result,
    }


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    rt = holder.runtime
    unlocked_before = dict(rt.state.achievements.unlocked)
    history_before = set(rt.state.events.event_history)

    # Subdivide into 1-second ticks
    rt.advance(seconds, step=1.0)

    state = rt.state
    new_achievements = sorted(
        k for k, level in state.achievements.unlocked.items() if level > unlocked_before.get(k, 0)
    )
    resolved = [
        {"event": rec.event_key, "choice": rec.choice_index}
        for rec in state.events.event_history
        if rec not in history_before
    ]
    rates = rt.per_sec()
    result: dict[str, Any] = {
        "waited": seconds,
        "time": round(state.t, 2),
        "resources": {
            key: {"current": round(value, 2), "rate": round(rates.get(key, 0.0), 4)}
            for key, value in state.resources.items()
        },
    }
    if new_achievements:
        result["new_achievements"] = new_achievements
    if resolved:
        result["events_resolved"] = resolved
    if state.events.active_event is not None:
        result["active_event"] = state.events.active_event
    return result


def _tool_prestige(holder: _GameHolder) -> dict[str, Any]:
    result = holder.runtime.prestige()
    if result.success:
        return {"success": True, "gain": result.gain, "new_balance": round(result.new_balance, 2)}
    return {"success": False, "reason": result.reason}


def _tool_export_save(holder: _GameHolder) -> dict[str, Any]:
    return {"save": holder.runtime.export_save()}


def _tool_import_save(holder: _GameHolder, save_text: str) -> dict[str, Any]:
    if not holder.runtime.import_save(save_text):
        return {"success": False, "reason": "Save is corrupt or from an incompatible version"}
    return {"success": True, "time": round(holder.runtime.state.t, 2)}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    holder.runtime = _new_runtime(holder.config)
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(config: GameConfig) -> FastMCP:
    """Create an MCP server wrapping a GameRuntime for the given config."""
    holder = _GameHolder(config=config, runtime=_new_runtime(config))

    mcp = FastMCP(name=f"Kingdom: {config.name}")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static game overview: resources, buildings, technologies, upgrades, actions."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current state: balances and rates, buildings, research, event, loop actions."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_available_purchases() -> dict[str, Any]:
        """Get unlocked buildings, researchable technologies and prestige upgrades with costs."""
        return _tool_get_available_purchases(holder)

    @mcp.tool()
    def buy_building(building_key: str) -> dict[str, Any]:
        """Buy one building."""
        return _tool_buy_building(holder, building_key)

    @mcp.tool()
    def buy_upgrade(upgrade_key: str) -> dict[str, Any]:
        """Buy one level of a prestige upgrade."""
        return _tool_buy_upgrade(holder, upgrade_key)

    @mcp.tool()
    def research(technology_key: str) -> dict[str, Any]:
        """Start researching a technology."""
        return _tool_research(holder, technology_key)

    @mcp.tool()
    def click(count: int = 1) -> dict[str, Any]:
        """Click N times (max 1000). Returns what was earned."""
        return _tool_click(holder, count)

    @mcp.tool()
    def get_actions() -> dict[str, Any]:
        """List one-shot actions with their availability."""
        return _tool_get_actions(holder)

    @mcp.tool()
    def execute_action(action_key: str) -> dict[str, Any]:
        """Run a one-shot action."""
        return _tool_execute_action(holder, action_key)

    @mcp.tool()
    def get_loop_actions() -> dict[str, Any]:
        """List loop actions with progress."""
        return _tool_get_loop_actions(holder)

    @mcp.tool()
    def loop_action(action_key: str, command: str) -> dict[str, Any]:
        """Control a loop action. Command is start, pause, resume or stop."""
        return _tool_loop_action(holder, action_key, command)

    @mcp.tool()
    def get_event() -> dict[str, Any]:
        """Show the active event and its choices, or time until the next one."""
        return _tool_get_event(holder)

    @mcp.tool()
    def choose_event(choice_index: int) -> dict[str, Any]:
        """Answer the active event."""
        return _tool_choose_event(holder, choice_index)

    @mcp.tool()
    def get_achievements() -> dict[str, Any]:
        """List visible achievements with progress and points."""
        return _tool_get_achievements(holder)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400). Time is subdivided into 1s ticks."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Reset the kingdom for prestige."""
        return _tool_prestige(holder)

    @mcp.tool()
    def export_save() -> dict[str, Any]:
        """Export the current game as base64 text."""
        return _tool_export_save(holder)

    @mcp.tool()
    def import_save(save_text: str) -> dict[str, Any]:
        """Replace the current game with an exported save."""
        return _tool_import_save(holder, save_text)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the game to initial state."""
        return _tool_new_game(holder)

    return mcp
