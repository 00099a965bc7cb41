"""Achievement evaluation, unlocking and rewards."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from kingdomengine._types import compare
from kingdomengine.achievement import AchievementDef, AchievementProgress
from kingdomengine.errors import ErrorCategory, guarded, validation_handler
from kingdomengine.multipliers import MultiplierAccumulator, Multipliers
from kingdomengine.state import (
    AchievementNotification,
    AchievementState,
    AchievementStats,
)

if TYPE_CHECKING:
    from kingdomengine.achievement import AchievementRequirement, AchievementReward
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)
_invalid = validation_handler("achievements")

_EMPTY_PROGRESS = AchievementProgress(progress=0.0, current_value=0.0, target_value=0.0, is_complete=False)


def init_achievement_state(config: GameConfig) -> AchievementState:
    return AchievementState(
        unlocked={a.key: 0 for a in config.achievements},
        progress={a.key: 0.0 for a in config.achievements},
    )


# ── Requirement evaluation ───────────────────────────────────────────


def _others_unlocked(keys: list[str], owner_key: str, unlocked: dict[str, int]) -> float:
    others = [k for k in keys if k != owner_key]
    return 1.0 if all(unlocked.get(k, 0) > 0 for k in others) else 0.0


def requirement_value(
    config: GameConfig,
    state: GameState,
    req: AchievementRequirement,
    owner_key: str = "",
    unlocked: dict[str, int] | None = None,
) -> float | None:
    """Current value a requirement is compared against; None if unknown."""
    target = req.target
    if req.type == "resource":
        if target.startswith("lifetime."):
            return state.lifetime_total(target[len("lifetime."):])
        return state.resource(target)
    if req.type == "building":
        return state.total_buildings() if target == "total" else state.building_count(target)
    if req.type == "technology":
        return state.technology_level(target)
    if req.type == "action":
        unlocks = state.actions.unlocks
        if target == "total":
            return sum(1 for u in unlocks.values() if u.unlocked)
        entry = unlocks.get(target)
        return 1.0 if entry is not None and entry.unlocked else 0.0
    if req.type == "event":
        history = state.events.event_history
        if target == "count":
            return len(history)
        return sum(1 for rec in history if rec.event_key == target)
    if req.type == "click":
        return state.clicks
    if req.type == "prestige":
        return state.prestige_count if target == "count" else state.upgrade_level(target)
    if req.type == "time":
        if target == "session":
            return state.t - state.run_started_at
        return state.play_time
    if req.type == "combo":
        done = unlocked if unlocked is not None else state.achievements.unlocked
        if target == "category_complete":
            keys = [a.key for a in config.achievements if a.category.value == req.category]
            return _others_unlocked(keys, owner_key, done)
        if target == "all_complete":
            return _others_unlocked([a.key for a in config.achievements], owner_key, done)
        return None
    return None


def check_requirement(
    config: GameConfig,
    state: GameState,
    req: AchievementRequirement,
    owner_key: str = "",
    unlocked: dict[str, int] | None = None,
) -> AchievementProgress:
    current = requirement_value(config, state, req, owner_key, unlocked)
    if current is None:
        _invalid("Unknown requirement", type=req.type, target=req.target)
        return replace(_EMPTY_PROGRESS, target_value=req.value)
    met = compare(current, req.operator, req.value)
    if met:
        progress = 1.0
    elif req.value > 0:
        progress = max(0.0, min(1.0, current / req.value))
    else:
        progress = 0.0
    return AchievementProgress(
        progress=progress, current_value=current, target_value=req.value, is_complete=met
    )


@guarded(ErrorCategory.CALCULATION, "achievements", fallback=_EMPTY_PROGRESS)
def calculate_achievement_progress(
    config: GameConfig,
    state: GameState,
    achievement: AchievementDef,
    unlocked: dict[str, int] | None = None,
) -> AchievementProgress:
    """Mean of per-requirement progress; complete only when every one is met."""
    if not achievement.requirements:
        return _EMPTY_PROGRESS
    results = [
        check_requirement(config, state, req, achievement.key, unlocked)
        for req in achievement.requirements
    ]
    first = results[0]
    return AchievementProgress(
        progress=min(1.0, sum(r.progress for r in results) / len(results)),
        current_value=first.current_value,
        target_value=first.target_value,
        is_complete=all(r.is_complete for r in results),
    )


def get_achievement_progress(config: GameConfig, state: GameState, key: str) -> AchievementProgress:
    adef = config.get_achievement(key)
    if adef is None:
        _invalid("Unknown achievement", achievement=key)
        return _EMPTY_PROGRESS
    return calculate_achievement_progress(config, state, adef)


# ── Rewards ──────────────────────────────────────────────────────────


def _apply_reward(state: GameState, reward: AchievementReward) -> GameState:
    if reward.type == "resource":
        if reward.target not in state.resources:
            _invalid("Reward targets unknown resource", target=reward.target)
            return state
        return state.add_resources({reward.target: reward.value})
    if reward.type == "multiplier":
        acc = MultiplierAccumulator.from_multipliers(state.achievement_multipliers)
        if not acc.scale(reward.target, reward.value):
            _invalid("Unknown multiplier target", target=reward.target)
            return state
        return replace(state, achievement_multipliers=acc.freeze())
    if reward.type == "unlock":
        if reward.target not in state.actions.unlocks:
            _invalid("Reward unlocks unknown action", target=reward.target)
            return state
        unlocks = {
            **state.actions.unlocks,
            reward.target: replace(
                state.actions.unlocks[reward.target], unlocked=True, unlocked_at=state.t
            ),
        }
        return replace(state, actions=replace(state.actions, unlocks=unlocks))
    if reward.type == "cosmetic":
        return state
    _invalid("Unknown reward type", type=reward.type)
    return state


@guarded(ErrorCategory.STATE, "achievements")
def apply_achievement_rewards(config: GameConfig, state: GameState, achievement: AchievementDef) -> GameState:
    result = state
    for reward in achievement.rewards:
        result = _apply_reward(result, reward)
    return result


def rebuild_permanent_multipliers(config: GameConfig, unlocked: dict[str, int]) -> Multipliers:
    """Multipliers granted by permanent rewards of unlocked achievements."""
    acc = MultiplierAccumulator.from_multipliers(Multipliers.identity(config.resource_keys))
    for adef in config.achievements:
        level = unlocked.get(adef.key, 0)
        if level <= 0:
            continue
        for reward in adef.rewards:
            if reward.type == "multiplier" and reward.permanent:
                acc.scale(reward.target, reward.value ** level)
    return acc.freeze()


# ── Checking ─────────────────────────────────────────────────────────


def _stats(
    unlocked: dict[str, int],
    notifications: tuple[AchievementNotification, ...],
    previous: AchievementStats,
) -> AchievementStats:
    last = notifications[-1] if notifications else None
    return AchievementStats(
        unlocked_count=sum(1 for level in unlocked.values() if level > 0),
        session_unlocks=sum(1 for n in notifications if not n.shown),
        last_unlocked=last.achievement_key if last else previous.last_unlocked,
        last_unlock_time=last.timestamp if last else previous.last_unlock_time,
    )


def total_points(config: GameConfig, unlocked: dict[str, int]) -> int:
    total = 0
    for key, level in unlocked.items():
        adef = config.get_achievement(key)
        if adef is not None:
            total += adef.points * level
    return total


@guarded(ErrorCategory.STATE, "achievements")
def check_achievements(config: GameConfig, state: GameState) -> GameState:
    """Re-evaluate achievements, unlocking and rewarding any newly complete.

    Non-repeatable achievements unlock once. Repeatable ones unlock again
    each time their requirements go from unmet to met.
    """
    ach = state.achievements
    unlocked = dict(ach.unlocked)
    progress = dict(ach.progress)
    notifications = list(ach.notifications)
    result = state
    unlocked_any = False

    for adef in config.achievements:
        level = unlocked.get(adef.key, 0)
        if level > 0 and not adef.repeatable:
            continue
        previous = progress.get(adef.key, 0.0)
        p = calculate_achievement_progress(config, result, adef, unlocked)
        progress[adef.key] = p.progress
        if not p.is_complete:
            continue
        if level > 0 and previous >= 1.0:
            continue

        unlocked[adef.key] = level + 1
        unlocked_any = True
        if not any(n.achievement_key == adef.key for n in notifications):
            notifications.append(
                AchievementNotification(achievement_key=adef.key, timestamp=state.t, level=level + 1)
            )
        logger.info("Achievement unlocked: %s (level %d)", adef.key, level + 1)
        result = apply_achievement_rewards(config, result, adef)

    if not unlocked_any and progress == ach.progress:
        return state

    notes = tuple(notifications)
    return replace(
        result,
        achievements=AchievementState(
            unlocked=unlocked,
            progress=progress,
            notifications=notes,
            total_points=total_points(config, unlocked),
            stats=_stats(unlocked, notes, ach.stats),
        ),
    )


# ── Notifications & queries ──────────────────────────────────────────


def mark_notification_shown(state: GameState, achievement_key: str) -> GameState:
    ach = state.achievements
    if not any(n.achievement_key == achievement_key and not n.shown for n in ach.notifications):
        return state
    notes = tuple(
        replace(n, shown=True) if n.achievement_key == achievement_key else n
        for n in ach.notifications
    )
    return replace(
        state,
        achievements=replace(ach, notifications=notes, stats=_stats(ach.unlocked, notes, ach.stats)),
    )


def pending_notifications(state: GameState) -> list[AchievementNotification]:
    return [n for n in state.achievements.notifications if not n.shown]


def visible_achievements(config: GameConfig, state: GameState) -> list[AchievementDef]:
    """Hidden achievements only appear once unlocked."""
    return [
        a for a in config.achievements
        if not a.hidden or state.achievements.unlocked.get(a.key, 0) > 0
    ]


def get_achievement_stats(config: GameConfig, state: GameState) -> dict[str, Any]:
    unlocked = state.achievements.unlocked
    by_category: dict[str, dict[str, int]] = {}
    by_rarity: dict[str, dict[str, int]] = {}
    for adef in config.achievements:
        done = 1 if unlocked.get(adef.key, 0) > 0 else 0
        for bucket, name in ((by_category, adef.category.value), (by_rarity, adef.rarity.value)):
            entry = bucket.setdefault(name, {"unlocked": 0, "total": 0})
            entry["unlocked"] += done
            entry["total"] += 1
    total = len(config.achievements)
    count = state.achievements.stats.unlocked_count
    return {
        "total": total,
        "unlocked": count,
        "completion": (count / total * 100.0) if total else 0.0,
        "total_points": state.achievements.total_points,
        "by_category": by_category,
        "by_rarity": by_rarity,
    }
