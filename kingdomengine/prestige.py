"""Prestige: trade lifetime production for a persistent currency.

Prestige rebuilds the state from the factory and carries over:

* the prestige balance plus the gain,
* prestige upgrade levels,
* unlocked achievements, their notifications and points,
* multipliers from *permanent* achievement rewards,
* total play time and the prestige counter (incremented).

Everything else (buildings, technologies, loop actions, one-shot action
unlocks, the event schedule, non-permanent achievement multipliers and
achievement progress toward locked achievements) starts over.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from kingdomengine.achievements import rebuild_permanent_multipliers
from kingdomengine.errors import ErrorCategory, guarded
from kingdomengine.factory import new_game

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a prestige attempt."""

    success: bool
    gain: int = 0
    new_balance: float = 0.0
    reason: str = ""


@guarded(ErrorCategory.CALCULATION, "prestige", fallback=0)
def prestige_gain(config: GameConfig, state: GameState) -> int:
    """``floor(sqrt(lifetime[gain_from] / divisor))``."""
    s = config.settings
    produced = max(0.0, state.lifetime_total(s.prestige_gain_from))
    return int(math.floor(math.sqrt(produced / s.prestige_divisor)))


def prestige_formula(config: GameConfig) -> str:
    s = config.settings
    return f"floor(sqrt(lifetime {s.prestige_gain_from} / {s.prestige_divisor:g}))"


@guarded(ErrorCategory.STATE, "prestige")
def do_prestige(
    config: GameConfig,
    state: GameState,
    now: float | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Reset the kingdom, keeping prestige, upgrades and unlocked achievements."""
    s = config.settings
    gain = prestige_gain(config, state)
    balance = state.resource(s.prestige_resource) + gain

    fresh = new_game(config, now=state.t if now is None else now, rng=rng)
    upgrades = {**fresh.upgrades, **state.upgrades}
    kept_achievements = replace(
        fresh.achievements,
        unlocked={**fresh.achievements.unlocked, **state.achievements.unlocked},
        notifications=state.achievements.notifications,
        total_points=state.achievements.total_points,
        stats=state.achievements.stats,
    )

    logger.info("Prestige #%d: gained %d %s", state.prestige_count + 1, gain, s.prestige_resource)
    return replace(
        fresh.with_resource(s.prestige_resource, balance),
        upgrades=upgrades,
        achievements=kept_achievements,
        achievement_multipliers=rebuild_permanent_multipliers(config, kept_achievements.unlocked),
        play_time=state.play_time,
        prestige_count=state.prestige_count + 1,
    )


def try_prestige(
    config: GameConfig,
    state: GameState,
    now: float | None = None,
    rng: random.Random | None = None,
) -> tuple[GameState, PrestigeResult]:
    """Prestige only if it would gain something."""
    gain = prestige_gain(config, state)
    if gain <= 0:
        return state, PrestigeResult(success=False, reason="No prestige to gain yet")
    new_state = do_prestige(config, state, now=now, rng=rng)
    if new_state is state:
        return state, PrestigeResult(success=False, reason="Prestige failed")
    balance = new_state.resource(config.settings.prestige_resource)
    return new_state, PrestigeResult(success=True, gain=gain, new_balance=balance)
