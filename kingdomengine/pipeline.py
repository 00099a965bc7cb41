from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from typing import TYPE_CHECKING

from kingdomengine.achievements import check_achievements
from kingdomengine.economy import get_per_sec
from kingdomengine.errors import ErrorCategory, guarded
from kingdomengine.events import check_and_trigger_events
from kingdomengine.loop_actions import process_loop_action_tick
from kingdomengine.research import check_research_progress

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)


def integrate_resources(config: GameConfig, state: GameState, dt: float) -> GameState:
    """Apply *dt* seconds of production and consumption and advance the clock.

    Consumption is clamped so a balance never drops below zero; lifetime
    totals only count what was produced.
    """
    per_sec = get_per_sec(config, state)
    resources = dict(state.resources)
    lifetime = dict(state.lifetime)
    for key, rate in per_sec.items():
        if rate == 0:
            continue
        delta = rate * dt
        have = resources.get(key, 0.0)
        if delta > 0:
            resources[key] = have + delta
            lifetime[key] = lifetime.get(key, 0.0) + delta
        else:
            resources[key] = have + max(-have, delta)
    return replace(
        state,
        t=state.t + dt,
        play_time=state.play_time + dt,
        resources=resources,
        lifetime=lifetime,
    )


@guarded(ErrorCategory.STATE, "pipeline")
def tick(
    config: GameConfig,
    state: GameState,
    dt: float,
    tick_counter: int = 0,
    rng: random.Random | None = None,
) -> GameState:
    """Advance the kingdom by *dt* seconds.

    Stages run in a fixed order: resources, events (every
    ``event_frame_skip`` ticks), research, loop actions, then achievements
    (every ``achievement_frame_skip`` ticks). The caller advances
    *tick_counter* by one per call.
    """
    if not math.isfinite(dt) or dt <= 0:
        return state
    s = config.settings

    result = integrate_resources(config, state, dt)
    if tick_counter % s.event_frame_skip == 0:
        result = check_and_trigger_events(config, result, rng)
    result = check_research_progress(config, result)
    result = process_loop_action_tick(config, result)
    if tick_counter % s.achievement_frame_skip == 0:
        result = check_achievements(config, result)
    return result


def offline_progress(
    config: GameConfig,
    state: GameState,
    now: float,
    rng: random.Random | None = None,
) -> GameState:
    """Catch up on time spent away as one capped tick.

    Time beyond the cap is skipped: the clock still ends at *now*.
    """
    elapsed = now - state.t
    if elapsed <= 0:
        return state
    capped = min(elapsed, config.settings.offline_cap_seconds)
    if capped < elapsed:
        logger.info("Offline time %.0fs capped to %.0fs", elapsed, capped)
    result = tick(config, state, capped, tick_counter=0, rng=rng)
    if result is state or result.t >= now:
        return result
    return replace(result, t=now)
