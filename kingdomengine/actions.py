"""Discrete player intents: buildings, upgrades, clicks, research and one-shot actions."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from kingdomengine.action import ActionStatus
from kingdomengine.economy import (
    can_afford,
    can_buy_building,
    can_buy_upgrade,
    cost_for,
    get_click_gains,
    get_upgrade_cost,
    is_building_unlocked,
)
from kingdomengine.errors import ErrorCategory, guarded, validation_handler
from kingdomengine.research import start_research
from kingdomengine.state import ActionUnlock

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)
_invalid = validation_handler("actions")


@guarded(ErrorCategory.STATE, "actions")
def buy_building(config: GameConfig, state: GameState, building_key: str) -> GameState:
    if config.get_building(building_key) is None:
        _invalid("Unknown building", building=building_key)
        return state
    if not is_building_unlocked(config, state, building_key):
        _invalid("Building is locked", building=building_key)
        return state
    if not can_buy_building(config, state, building_key):
        return state
    cost = cost_for(config, state, building_key)
    paid = state.pay(cost)
    return paid.with_building_count(building_key, state.building_count(building_key) + 1)


@guarded(ErrorCategory.STATE, "actions")
def buy_upgrade(config: GameConfig, state: GameState, upgrade_key: str) -> GameState:
    """Spend prestige to raise *upgrade_key* by one level."""
    if config.get_upgrade(upgrade_key) is None:
        _invalid("Unknown upgrade", upgrade=upgrade_key)
        return state
    if not can_buy_upgrade(config, state, upgrade_key):
        return state
    level = state.upgrade_level(upgrade_key)
    cost = get_upgrade_cost(config, upgrade_key, level)
    paid = state.pay({config.settings.prestige_resource: cost})
    return paid.with_upgrade_level(upgrade_key, level + 1)


@guarded(ErrorCategory.STATE, "actions")
def click_action(config: GameConfig, state: GameState) -> GameState:
    gained = state.add_resources(get_click_gains(config, state))
    return replace(gained, clicks=state.clicks + 1)


def research_technology(config: GameConfig, state: GameState, technology_key: str) -> GameState:
    return start_research(config, state, technology_key)


# ── One-shot actions ─────────────────────────────────────────────────


def is_action_unlocked(config: GameConfig, state: GameState, action_key: str) -> bool:
    adef = config.get_action(action_key)
    if adef is None:
        return False
    entry = state.actions.unlocks.get(action_key)
    if entry is not None and entry.unlocked:
        return True
    return all(cond.evaluate(state) for cond in adef.unlock_conditions)


def cooldown_remaining(state: GameState, action_key: str) -> float:
    ready_at = state.actions.cooldowns.get(action_key)
    if ready_at is None:
        return 0.0
    return max(0.0, ready_at - state.t)


def is_action_on_cooldown(state: GameState, action_key: str) -> bool:
    return cooldown_remaining(state, action_key) > 0


def get_action_status(config: GameConfig, state: GameState, action_key: str) -> ActionStatus:
    adef = config.get_action(action_key)
    if adef is None:
        return ActionStatus(action_key, False, False, False, 0.0, False, "Unknown action")
    unlocked = is_action_unlocked(config, state, action_key)
    affordable = can_afford(state, adef.cost)
    remaining = cooldown_remaining(state, action_key)
    reason = ""
    if not unlocked:
        reason = "Locked"
    elif remaining > 0:
        reason = f"On cooldown for {remaining:.1f}s"
    elif not affordable:
        reason = "Cannot afford"
    return ActionStatus(
        key=action_key,
        unlocked=unlocked,
        affordable=affordable,
        on_cooldown=remaining > 0,
        cooldown_remaining=remaining,
        can_execute=not reason,
        reason=reason,
    )


def can_execute_action(config: GameConfig, state: GameState, action_key: str) -> bool:
    return get_action_status(config, state, action_key).can_execute


def get_available_actions(config: GameConfig, state: GameState) -> list[str]:
    return [a.key for a in config.actions if is_action_unlocked(config, state, a.key)]


@guarded(ErrorCategory.STATE, "actions")
def execute_action(config: GameConfig, state: GameState, action_key: str) -> GameState:
    """Pay, collect gains, start the cooldown and count it as a click."""
    adef = config.get_action(action_key)
    if adef is None:
        _invalid("Unknown action", action=action_key)
        return state
    status = get_action_status(config, state, action_key)
    if not status.can_execute:
        _invalid("Cannot execute action", action=action_key, reason=status.reason)
        return state

    result = state.pay(adef.cost).add_resources(adef.gains)

    entry = state.actions.unlocks.get(action_key, ActionUnlock())
    if adef.one_time_unlock and not entry.unlocked:
        entry = replace(entry, unlocked=True, unlocked_at=state.t)
    entry = replace(entry, last_used=state.t)
    unlocks = {**state.actions.unlocks, action_key: entry}

    cooldowns = dict(state.actions.cooldowns)
    if adef.cooldown > 0:
        cooldowns[action_key] = state.t + adef.cooldown

    logger.debug("Executed action %s", action_key)
    return replace(
        result,
        actions=replace(state.actions, unlocks=unlocks, cooldowns=cooldowns),
        clicks=state.clicks + 1,
    )
