# kingdomengine — Medieval Kingdom Idle Game Core & Headless Simulation

from kingdomengine._types import ResourceMap, compare
from kingdomengine.errors import ConfigError, ErrorCategory, GameError, guarded, handle_game_error
from kingdomengine.requirement import Requirement, Req
from kingdomengine.cost_scaling import CostCurve
from kingdomengine.effect import EffectType, EffectDef, Effect
from kingdomengine.resource import ResourceDef
from kingdomengine.building import BuildingDef
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef
from kingdomengine.event import EventChoice, EventDef
from kingdomengine.action import ActionDef, ActionStatus
from kingdomengine.loop_action import LoopActionDef, LoopCategory
from kingdomengine.achievement import (
    AchievementCategory,
    AchievementDef,
    AchievementRequirement,
    AchievementReward,
    Rarity,
)
from kingdomengine.definition import GameConfig, GameSettings
from kingdomengine.multipliers import Multipliers, get_multipliers
from kingdomengine.state import GameState
from kingdomengine.factory import new_game
from kingdomengine.pipeline import offline_progress, tick
from kingdomengine.prestige import PrestigeResult
from kingdomengine.runtime import GameRuntime
from kingdomengine.strategy import Strategy, ClickProfile, GreedyCheapest, Idle
from kingdomengine.report import MetricsCollector, SimulationReport, build_report
from kingdomengine.simulation import Simulation
from kingdomengine.formatting import format_text_report

__all__ = [
    # Types & errors
    "ResourceMap",
    "compare",
    "ConfigError",
    "ErrorCategory",
    "GameError",
    "guarded",
    "handle_game_error",
    # Requirements & curves
    "Requirement",
    "Req",
    "CostCurve",
    "EffectType",
    "EffectDef",
    "Effect",
    # Definitions
    "ResourceDef",
    "BuildingDef",
    "TechnologyDef",
    "PrestigeUpgradeDef",
    "EventChoice",
    "EventDef",
    "ActionDef",
    "ActionStatus",
    "LoopActionDef",
    "LoopCategory",
    "AchievementCategory",
    "AchievementDef",
    "AchievementRequirement",
    "AchievementReward",
    "Rarity",
    "GameConfig",
    "GameSettings",
    # State & transitions
    "Multipliers",
    "get_multipliers",
    "GameState",
    "new_game",
    "tick",
    "offline_progress",
    "PrestigeResult",
    # Runtime
    "GameRuntime",
    # Simulation
    "Strategy",
    "ClickProfile",
    "GreedyCheapest",
    "Idle",
    "MetricsCollector",
    "Simulation",
    "SimulationReport",
    "build_report",
    "format_text_report",
]
