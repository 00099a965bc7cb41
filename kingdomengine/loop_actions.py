"""Repeating loop actions under a concurrency cap.

Every active, unpaused loop action gains ``base_points_per_tick`` points
per tick. Its cost is charged once at the start of each loop; completing a
loop grants its gains and immediately tries to pay for the next one,
pausing the action if that is unaffordable. When the active set is full,
starting another action pauses the one that was started earliest.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING

from kingdomengine.economy import can_afford
from kingdomengine.errors import ErrorCategory, guarded, validation_handler
from kingdomengine.loop_action import LoopActionProgress
from kingdomengine.state import LoopActionState

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.loop_action import LoopActionDef
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)
_invalid = validation_handler("loop_actions")


def is_loop_action_unlocked(config: GameConfig, state: GameState, action_key: str) -> bool:
    ldef = config.get_loop_action(action_key)
    if ldef is None:
        return False
    return all(cond.evaluate(state) for cond in ldef.unlock_conditions)


def get_unlocked_loop_actions(config: GameConfig, state: GameState) -> list[str]:
    return [la.key for la in config.loop_actions if is_loop_action_unlocked(config, state, la.key)]


def can_have_more_loop_actions(state: GameState) -> bool:
    return len(state.active_loop_actions()) < state.loop_settings.max_concurrent_actions


def can_start_loop_action(config: GameConfig, state: GameState, action_key: str) -> bool:
    """Unlocked, not already running, and the current loop paid or affordable."""
    ldef = config.get_loop_action(action_key)
    if ldef is None:
        return False
    if state.loop_settings.max_concurrent_actions <= 0:
        return False
    if not is_loop_action_unlocked(config, state, action_key):
        return False
    entry = state.loop_action(action_key)
    if entry is not None and entry.is_active:
        return False
    if entry is not None and entry.cost_paid:
        return True
    return can_afford(state, ldef.cost)


def _evict_oldest(state: GameState) -> GameState:
    active = [la for la in state.loop_actions if la.is_active]
    if not active:
        return state
    oldest = min(active, key=lambda la: la.started_at)
    logger.info("Pausing loop action %s to make room", oldest.action_key)
    return state.with_loop_action(replace(oldest, is_active=False, is_paused=True))


@guarded(ErrorCategory.STATE, "loop_actions")
def start_loop_action(config: GameConfig, state: GameState, action_key: str) -> GameState:
    """Activate *action_key*, paying for its loop if not yet paid.

    Rejected without any charge when locked, already active, or
    unaffordable.
    """
    ldef = config.get_loop_action(action_key)
    if ldef is None:
        _invalid("Unknown loop action", action=action_key)
        return state
    if not can_start_loop_action(config, state, action_key):
        _invalid("Cannot start loop action", action=action_key)
        return state

    result = state
    while not can_have_more_loop_actions(result):
        result = _evict_oldest(result)

    entry = result.loop_action(action_key) or LoopActionState(action_key=action_key)
    if not entry.cost_paid:
        result = result.pay(ldef.cost)
    return result.with_loop_action(
        replace(
            entry,
            is_active=True,
            is_paused=False,
            started_at=state.t,
            last_tick_at=state.t,
            cost_paid=True,
        )
    )


@guarded(ErrorCategory.STATE, "loop_actions")
def pause_loop_action(config: GameConfig, state: GameState, action_key: str) -> GameState:
    """Deactivate *action_key*, keeping its points."""
    entry = state.loop_action(action_key)
    if entry is None or not entry.is_active:
        _invalid("Loop action is not running", action=action_key)
        return state
    return state.with_loop_action(replace(entry, is_active=False, is_paused=True))


@guarded(ErrorCategory.STATE, "loop_actions")
def resume_loop_action(config: GameConfig, state: GameState, action_key: str) -> GameState:
    """Restart a paused action through the normal start path."""
    entry = state.loop_action(action_key)
    if entry is None or not entry.is_paused:
        _invalid("Loop action is not paused", action=action_key)
        return state
    return start_loop_action(config, state, action_key)


@guarded(ErrorCategory.STATE, "loop_actions")
def stop_loop_action(config: GameConfig, state: GameState, action_key: str) -> GameState:
    """Deactivate *action_key* and forfeit its progress on the current loop."""
    entry = state.loop_action(action_key)
    if entry is None:
        _invalid("Unknown loop action entry", action=action_key)
        return state
    return state.with_loop_action(
        replace(entry, is_active=False, is_paused=False, current_points=0, cost_paid=False)
    )


def _complete_loop(state: GameState, ldef: LoopActionDef, entry: LoopActionState) -> GameState:
    result = state.add_resources(ldef.gains)
    finished = replace(
        entry,
        current_points=0,
        total_loops_completed=entry.total_loops_completed + 1,
        cost_paid=False,
    )
    if can_afford(result, ldef.cost):
        result = result.pay(ldef.cost)
        finished = replace(finished, cost_paid=True)
    else:
        logger.info("Loop action %s paused: next loop unaffordable", ldef.key)
        finished = replace(finished, is_active=False, is_paused=True)
    return result.with_loop_action(finished)


@guarded(ErrorCategory.STATE, "loop_actions")
def process_loop_action_tick(config: GameConfig, state: GameState) -> GameState:
    """Advance every running loop action by one tick, in list order."""
    step = state.loop_settings.base_points_per_tick
    result = state
    for entry in state.loop_actions:
        if not entry.is_active or entry.is_paused:
            continue
        ldef = config.get_loop_action(entry.action_key)
        if ldef is None:
            _invalid("Running loop action has no definition", action=entry.action_key)
            result = result.with_loop_action(replace(entry, is_active=False))
            continue
        advanced = replace(entry, current_points=entry.current_points + step, last_tick_at=state.t)
        if advanced.current_points >= ldef.loop_points_required:
            result = _complete_loop(result, ldef, advanced)
        else:
            result = result.with_loop_action(advanced)
    return result


def get_loop_action_progress(
    config: GameConfig, state: GameState, action_key: str
) -> LoopActionProgress | None:
    ldef = config.get_loop_action(action_key)
    if ldef is None:
        return None
    entry = state.loop_action(action_key) or LoopActionState(action_key=action_key)
    required = ldef.loop_points_required
    remaining_points = max(0, required - entry.current_points)
    step = state.loop_settings.base_points_per_tick
    if step > 0:
        ticks = math.ceil(remaining_points / step)
        seconds = ticks / config.settings.tick_rate
    else:
        seconds = math.inf
    return LoopActionProgress(
        key=action_key,
        percentage=min(100.0, entry.current_points / required * 100.0),
        current_points=entry.current_points,
        points_required=required,
        seconds_remaining=seconds,
        total_loops_completed=entry.total_loops_completed,
        is_active=entry.is_active,
        is_paused=entry.is_paused,
    )
