"""Cost, affordability and production calculations.

Bad keys never raise: they are logged as validation problems and a safe
empty or zero value comes back instead.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from kingdomengine.cost_scaling import scaled_cost
from kingdomengine.errors import (
    ErrorCategory,
    calculation_handler,
    guarded,
    validation_handler,
)
from kingdomengine.multipliers import Multipliers, get_multipliers

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState

# Price reported for upgrades that cannot be priced; never affordable.
UNAFFORDABLE = math.inf

_invalid = validation_handler("economy")
_calc_failed = calculation_handler("economy")


@guarded(ErrorCategory.CALCULATION, "economy", fallback=dict)
def cost_for(
    config: GameConfig,
    state: GameState,
    building_key: str,
    multipliers: Multipliers | None = None,
) -> dict[str, float]:
    """Price of the next *building_key*: ``ceil(base * scale^owned * cost_mul)``."""
    bdef = config.get_building(building_key)
    if bdef is None:
        _invalid("Unknown building", building=building_key)
        return {}
    m = multipliers or get_multipliers(config, state)
    raw = scaled_cost(bdef.base_cost, bdef.cost_scale, state.building_count(building_key), m.cost)
    return {k: math.ceil(v) for k, v in raw.items()}


def technology_cost_for(config: GameConfig, technology_key: str) -> dict[str, float]:
    tdef = config.get_technology(technology_key)
    if tdef is None:
        _invalid("Unknown technology", technology=technology_key)
        return {}
    return dict(tdef.base_cost)


def can_afford(state: GameState, cost: dict[str, float]) -> bool:
    return all(state.resource(k) >= v for k, v in cost.items())


def is_building_unlocked(config: GameConfig, state: GameState, building_key: str) -> bool:
    bdef = config.get_building(building_key)
    if bdef is None:
        return False
    return all(state.has_technology(t) for t in bdef.requires_tech)


def can_buy_building(config: GameConfig, state: GameState, building_key: str) -> bool:
    if not is_building_unlocked(config, state, building_key):
        return False
    cost = cost_for(config, state, building_key)
    return bool(cost) and can_afford(state, cost)


@guarded(ErrorCategory.CALCULATION, "economy", fallback=dict)
def get_per_sec(
    config: GameConfig,
    state: GameState,
    multipliers: Multipliers | None = None,
) -> dict[str, float]:
    """Net per-second change of every resource from owned buildings."""
    m = multipliers or get_multipliers(config, state)
    per_sec = {k: 0.0 for k in config.resource_keys}
    for bdef in config.buildings:
        n = state.building_count(bdef.key)
        if n <= 0:
            continue
        for r, amount in bdef.base_prod.items():
            per_sec[r] = per_sec.get(r, 0.0) + amount * n * m.prod(r)
        for r, amount in bdef.base_use.items():
            per_sec[r] = per_sec.get(r, 0.0) - amount * n * m.use(r)
    return per_sec


@guarded(ErrorCategory.CALCULATION, "economy", fallback=dict)
def get_click_gains(
    config: GameConfig,
    state: GameState,
    multipliers: Multipliers | None = None,
) -> dict[str, float]:
    m = multipliers or get_multipliers(config, state)
    return {
        r.key: r.click_base * m.click_gain
        for r in config.resources
        if r.click_base
    }


def get_upgrade_cost(config: GameConfig, upgrade_key: str, level: int) -> float:
    """Prestige price of raising *upgrade_key* from *level* to ``level + 1``."""
    udef = config.get_upgrade(upgrade_key)
    if udef is None:
        _invalid("Unknown upgrade", upgrade=upgrade_key)
        return UNAFFORDABLE
    if level < 0:
        _invalid("Negative upgrade level", upgrade=upgrade_key, level=level)
        return UNAFFORDABLE
    try:
        return math.ceil(udef.cost_curve(level))
    except (ArithmeticError, ValueError, TypeError):
        _calc_failed("Upgrade cost curve failed", upgrade=upgrade_key, level=level)
        return UNAFFORDABLE


def can_buy_upgrade(config: GameConfig, state: GameState, upgrade_key: str) -> bool:
    udef = config.get_upgrade(upgrade_key)
    if udef is None:
        return False
    level = state.upgrade_level(upgrade_key)
    if level >= udef.max_level:
        return False
    cost = get_upgrade_cost(config, upgrade_key, level)
    return state.resource(config.settings.prestige_resource) >= cost
