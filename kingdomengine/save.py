"""Save data: JSON serialization, base64 export and save files.

A save is accepted only if its ``version`` matches the configured version;
anything else is treated as if there were no save at all. Accepted saves
pass through :func:`migrate`, which backfills fields older saves lack.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kingdomengine.multipliers import Multipliers
from kingdomengine.state import (
    AchievementNotification,
    AchievementState,
    AchievementStats,
    ActionUnlock,
    ActionsState,
    EventRecord,
    EventState,
    GameState,
    LoopActionState,
    LoopSettings,
    ResearchState,
)

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig

logger = logging.getLogger(__name__)


# ── Serialisation helpers ────────────────────────────────────────


def _state_to_dict(state: GameState) -> dict:
    s = state
    ach = s.achievements
    return {
        "version": s.version,
        "t": s.t,
        "resources": dict(s.resources),
        "lifetime": dict(s.lifetime),
        "buildings": dict(s.buildings),
        "technologies": dict(s.technologies),
        "upgrades": dict(s.upgrades),
        "clicks": s.clicks,
        "events": {
            "active_event": s.events.active_event,
            "active_event_start_time": s.events.active_event_start_time,
            "next_event_time": s.events.next_event_time,
            "event_history": [
                {"event_key": r.event_key, "choice_index": r.choice_index, "timestamp": r.timestamp}
                for r in s.events.event_history
            ],
        },
        "research": {
            "active_research": s.research.active_research,
            "research_start_time": s.research.research_start_time,
            "research_end_time": s.research.research_end_time,
        },
        "actions": {
            "unlocks": {
                k: {"unlocked": u.unlocked, "unlocked_at": u.unlocked_at, "last_used": u.last_used}
                for k, u in s.actions.unlocks.items()
            },
            "cooldowns": dict(s.actions.cooldowns),
        },
        "loop_actions": [
            {
                "action_key": la.action_key,
                "is_active": la.is_active,
                "is_paused": la.is_paused,
                "current_points": la.current_points,
                "total_loops_completed": la.total_loops_completed,
                "started_at": la.started_at,
                "last_tick_at": la.last_tick_at,
                "cost_paid": la.cost_paid,
            }
            for la in s.loop_actions
        ],
        "loop_settings": {
            "max_concurrent_actions": s.loop_settings.max_concurrent_actions,
            "base_points_per_tick": s.loop_settings.base_points_per_tick,
        },
        "achievements": {
            "unlocked": dict(ach.unlocked),
            "progress": dict(ach.progress),
            "notifications": [
                {
                    "achievement_key": n.achievement_key,
                    "timestamp": n.timestamp,
                    "level": n.level,
                    "shown": n.shown,
                }
                for n in ach.notifications
            ],
            "total_points": ach.total_points,
            "stats": {
                "unlocked_count": ach.stats.unlocked_count,
                "session_unlocks": ach.stats.session_unlocks,
                "last_unlocked": ach.stats.last_unlocked,
                "last_unlock_time": ach.stats.last_unlock_time,
            },
        },
        "achievement_multipliers": s.achievement_multipliers.to_dict(),
        "play_time": s.play_time,
        "run_started_at": s.run_started_at,
        "prestige_count": s.prestige_count,
    }


def _dict_to_state(d: dict) -> GameState:
    ev = d.get("events", {})
    rs = d.get("research", {})
    acts = d.get("actions", {})
    ls = d.get("loop_settings", {})
    ach = d.get("achievements", {})
    stats_d = ach.get("stats", {})

    return GameState(
        t=float(d.get("t", 0.0)),
        resources={k: float(v) for k, v in d.get("resources", {}).items()},
        lifetime={k: float(v) for k, v in d.get("lifetime", {}).items()},
        buildings={k: int(v) for k, v in d.get("buildings", {}).items()},
        technologies={k: int(v) for k, v in d.get("technologies", {}).items()},
        upgrades={k: int(v) for k, v in d.get("upgrades", {}).items()},
        clicks=int(d.get("clicks", 0)),
        events=EventState(
            active_event=ev.get("active_event"),
            active_event_start_time=ev.get("active_event_start_time"),
            next_event_time=float(ev.get("next_event_time", 0.0)),
            event_history=tuple(
                EventRecord(r["event_key"], int(r.get("choice_index", 0)), float(r.get("timestamp", 0.0)))
                for r in ev.get("event_history", [])
            ),
        ),
        research=ResearchState(
            active_research=rs.get("active_research"),
            research_start_time=rs.get("research_start_time"),
            research_end_time=rs.get("research_end_time"),
        ),
        actions=ActionsState(
            unlocks={
                k: ActionUnlock(
                    unlocked=bool(u.get("unlocked", False)),
                    unlocked_at=u.get("unlocked_at"),
                    last_used=u.get("last_used"),
                )
                for k, u in acts.get("unlocks", {}).items()
            },
            cooldowns={k: float(v) for k, v in acts.get("cooldowns", {}).items()},
        ),
        loop_actions=tuple(
            LoopActionState(
                action_key=la["action_key"],
                is_active=bool(la.get("is_active", False)),
                is_paused=bool(la.get("is_paused", False)),
                current_points=int(la.get("current_points", 0)),
                total_loops_completed=int(la.get("total_loops_completed", 0)),
                started_at=float(la.get("started_at", 0.0)),
                last_tick_at=float(la.get("last_tick_at", 0.0)),
                cost_paid=bool(la.get("cost_paid", False)),
            )
            for la in d.get("loop_actions", [])
        ),
        loop_settings=LoopSettings(
            max_concurrent_actions=int(ls.get("max_concurrent_actions", 2)),
            base_points_per_tick=int(ls.get("base_points_per_tick", 100)),
        ),
        achievements=AchievementState(
            unlocked={k: int(v) for k, v in ach.get("unlocked", {}).items()},
            progress={k: float(v) for k, v in ach.get("progress", {}).items()},
            notifications=tuple(
                AchievementNotification(
                    achievement_key=n["achievement_key"],
                    timestamp=float(n.get("timestamp", 0.0)),
                    level=int(n.get("level", 1)),
                    shown=bool(n.get("shown", False)),
                )
                for n in ach.get("notifications", [])
            ),
            total_points=int(ach.get("total_points", 0)),
            stats=AchievementStats(
                unlocked_count=int(stats_d.get("unlocked_count", 0)),
                session_unlocks=int(stats_d.get("session_unlocks", 0)),
                last_unlocked=stats_d.get("last_unlocked"),
                last_unlock_time=stats_d.get("last_unlock_time"),
            ),
        ),
        achievement_multipliers=Multipliers.from_dict(d.get("achievement_multipliers", {})),
        play_time=float(d.get("play_time", 0.0)),
        run_started_at=float(d.get("run_started_at", d.get("t", 0.0))),
        prestige_count=int(d.get("prestige_count", 0)),
        version=int(d.get("version", 0)),
    )


# ── Migration ────────────────────────────────────────────────────


def _backfill(mapping: Any, keys: list[str], default: Any) -> dict:
    result = dict(mapping) if isinstance(mapping, dict) else {}
    for k in keys:
        result.setdefault(k, default)
    return result


def migrate(config: GameConfig, data: dict) -> dict:
    """Backfill every field a save may be missing. Idempotent.

    Works on the raw save dict and returns a new dict; *data* is not
    modified.
    """
    s = config.settings
    d = dict(data)
    resource_keys = config.resource_keys
    initial = {r.key: float(r.initial_amount) for r in config.resources}

    d["resources"] = {**initial, **(d.get("resources") or {})}
    d["lifetime"] = _backfill(d.get("lifetime"), resource_keys, 0.0)
    d["buildings"] = _backfill(d.get("buildings"), [b.key for b in config.buildings], 0)
    d["technologies"] = _backfill(d.get("technologies"), [t.key for t in config.technologies], 0)
    d["upgrades"] = _backfill(d.get("upgrades"), [u.key for u in config.upgrades], 0)
    d.setdefault("clicks", 0)

    events = dict(d.get("events") or {})
    events.setdefault("active_event", None)
    events.setdefault("active_event_start_time", None)
    events.setdefault("next_event_time", float(d.get("t", 0.0)) + s.initial_event_max_seconds)
    events.setdefault("event_history", [])
    d["events"] = events

    research = dict(d.get("research") or {})
    for key in ("active_research", "research_start_time", "research_end_time"):
        research.setdefault(key, None)
    d["research"] = research

    actions = dict(d.get("actions") or {})
    actions["unlocks"] = _backfill(
        actions.get("unlocks"),
        [a.key for a in config.actions],
        {"unlocked": False, "unlocked_at": None, "last_used": None},
    )
    actions.setdefault("cooldowns", {})
    d["actions"] = actions

    d.setdefault("loop_actions", [])
    loop_settings = dict(d.get("loop_settings") or {})
    loop_settings.setdefault("max_concurrent_actions", s.default_max_concurrent_loop_actions)
    loop_settings.setdefault("base_points_per_tick", s.default_base_points_per_tick)
    d["loop_settings"] = loop_settings

    achievement_keys = [a.key for a in config.achievements]
    ach = dict(d.get("achievements") or {})
    ach["unlocked"] = _backfill(ach.get("unlocked"), achievement_keys, 0)
    ach["progress"] = _backfill(ach.get("progress"), achievement_keys, 0.0)
    ach.setdefault("notifications", [])
    ach.setdefault("total_points", 0)
    ach.setdefault(
        "stats",
        {"unlocked_count": 0, "session_unlocks": 0, "last_unlocked": None, "last_unlock_time": None},
    )
    d["achievements"] = ach

    mults = dict(d.get("achievement_multipliers") or {})
    mults.setdefault("click_gain", 1.0)
    mults.setdefault("cost", 1.0)
    mults["prod_mul"] = _backfill(mults.get("prod_mul"), resource_keys, 1.0)
    mults["use_mul"] = _backfill(mults.get("use_mul"), resource_keys, 1.0)
    d["achievement_multipliers"] = mults

    d.setdefault("play_time", 0.0)
    d.setdefault("run_started_at", d.get("t", 0.0))
    d.setdefault("prestige_count", 0)
    return d


# ── Public API ───────────────────────────────────────────────────


def serialize(state: GameState) -> str:
    return json.dumps(_state_to_dict(state))


def _load_dict(config: GameConfig, data: Any) -> GameState | None:
    if not isinstance(data, dict):
        logger.warning("Save data is not an object")
        return None
    version = data.get("version")
    if version != config.settings.version:
        logger.warning("Save version %r does not match %r, ignoring it", version, config.settings.version)
        return None
    try:
        return _dict_to_state(migrate(config, data))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Corrupt save data: %s", exc)
        return None


def deserialize(config: GameConfig, text: str) -> GameState | None:
    """Parse a JSON save. Returns None if it is corrupt or from another version."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        logger.warning("Save is not valid JSON: %s", exc)
        return None
    return _load_dict(config, data)


def export_save(state: GameState) -> str:
    """Shareable base64 text of the JSON save."""
    return base64.b64encode(serialize(state).encode("utf-8")).decode("ascii")


def import_save(config: GameConfig, text: str) -> GameState | None:
    try:
        raw = base64.b64decode(text.strip().encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        logger.warning("Import text is not a valid save: %s", exc)
        return None
    return deserialize(config, raw)


def save_to_file(state: GameState, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(_state_to_dict(state), indent=2))


def load_from_file(config: GameConfig, path: str | Path) -> GameState | None:
    """Load a save file. Returns None if it is missing, corrupt or outdated."""
    p = Path(path)
    if not p.exists():
        return None
    try:
        text = p.read_text()
    except OSError as exc:
        logger.warning("Could not read save file %s: %s", p, exc)
        return None
    return deserialize(config, text)
