from __future__ import annotations

import logging
from dataclasses import dataclass, field

from kingdomengine._types import is_valid_operator
from kingdomengine.achievement import (
    MULTIPLIER_TARGETS,
    REQUIREMENT_TYPES,
    REWARD_TYPES,
    AchievementDef,
)
from kingdomengine.action import ActionDef
from kingdomengine.building import BuildingDef
from kingdomengine.event import EventDef
from kingdomengine.loop_action import LoopActionDef
from kingdomengine.requirement import referenced_keys
from kingdomengine.resource import ResourceDef
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSettings:
    """Engine constants shared by every subsystem."""

    name: str = "Untitled Kingdom"
    version: int = 5
    tick_rate: int = 20
    event_frame_skip: int = 3
    achievement_frame_skip: int = 5
    event_auto_resolve_seconds: float = 30.0
    event_history_max: int = 50
    initial_event_min_seconds: float = 10.0
    initial_event_max_seconds: float = 30.0
    offline_cap_seconds: float = 3600.0
    prestige_resource: str = "prestige"
    prestige_gain_from: str = "food"
    prestige_divisor: float = 1000.0
    default_max_concurrent_loop_actions: int = 2
    default_base_points_per_tick: int = 100


@dataclass
class GameConfig:
    """Complete static configuration of a kingdom game. Never mutated."""

    settings: GameSettings = field(default_factory=GameSettings)
    resources: list[ResourceDef] = field(default_factory=list)
    buildings: list[BuildingDef] = field(default_factory=list)
    technologies: list[TechnologyDef] = field(default_factory=list)
    upgrades: list[PrestigeUpgradeDef] = field(default_factory=list)
    events: list[EventDef] = field(default_factory=list)
    actions: list[ActionDef] = field(default_factory=list)
    loop_actions: list[LoopActionDef] = field(default_factory=list)
    achievements: list[AchievementDef] = field(default_factory=list)

    # Lookup dicts built in __post_init__
    _resources_by_key: dict[str, ResourceDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _buildings_by_key: dict[str, BuildingDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _technologies_by_key: dict[str, TechnologyDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _upgrades_by_key: dict[str, PrestigeUpgradeDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _events_by_key: dict[str, EventDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _actions_by_key: dict[str, ActionDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _loop_actions_by_key: dict[str, LoopActionDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _achievements_by_key: dict[str, AchievementDef] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._resources_by_key = {r.key: r for r in self.resources}
        self._buildings_by_key = {b.key: b for b in self.buildings}
        self._technologies_by_key = {t.key: t for t in self.technologies}
        self._upgrades_by_key = {u.key: u for u in self.upgrades}
        self._events_by_key = {e.key: e for e in self.events}
        self._actions_by_key = {a.key: a for a in self.actions}
        self._loop_actions_by_key = {la.key: la for la in self.loop_actions}
        self._achievements_by_key = {a.key: a for a in self.achievements}

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def resource_keys(self) -> list[str]:
        return [r.key for r in self.resources]

    def get_resource(self, key: str) -> ResourceDef | None:
        return self._resources_by_key.get(key)

    def get_building(self, key: str) -> BuildingDef | None:
        return self._buildings_by_key.get(key)

    def get_technology(self, key: str) -> TechnologyDef | None:
        return self._technologies_by_key.get(key)

    def get_upgrade(self, key: str) -> PrestigeUpgradeDef | None:
        return self._upgrades_by_key.get(key)

    def get_event(self, key: str) -> EventDef | None:
        return self._events_by_key.get(key)

    def get_action(self, key: str) -> ActionDef | None:
        return self._actions_by_key.get(key)

    def get_loop_action(self, key: str) -> LoopActionDef | None:
        return self._loop_actions_by_key.get(key)

    def get_achievement(self, key: str) -> AchievementDef | None:
        return self._achievements_by_key.get(key)

    def validate(self) -> list[str]:
        """Check for configuration errors. Returns list of error messages."""
        errors: list[str] = []
        s = self.settings

        # Duplicate keys
        for label, items in (
            ("resource", self.resources),
            ("building", self.buildings),
            ("technology", self.technologies),
            ("upgrade", self.upgrades),
            ("event", self.events),
            ("action", self.actions),
            ("loop action", self.loop_actions),
            ("achievement", self.achievements),
        ):
            seen: set[str] = set()
            for item in items:
                if item.key in seen:
                    errors.append(f"Duplicate {label} key: {item.key!r}")
                seen.add(item.key)

        resource_keys = set(self._resources_by_key)
        building_keys = set(self._buildings_by_key)
        tech_keys = set(self._technologies_by_key)
        upgrade_keys = set(self._upgrades_by_key)

        def _check_amounts(owner: str, field_name: str, amounts: dict[str, float]) -> None:
            for rkey in amounts:
                if rkey not in resource_keys:
                    errors.append(
                        f"{owner} references unknown resource {rkey!r} in {field_name}"
                    )

        def _check_conditions(owner: str, conditions: list) -> None:
            known = {
                "resource": resource_keys,
                "lifetime": resource_keys,
                "building": building_keys,
                "technology": tech_keys,
                "prestige": upgrade_keys,
            }
            for cond in conditions:
                for kind, key in referenced_keys(cond):
                    if kind in known and key not in known[kind]:
                        errors.append(f"{owner} unlock condition references unknown {kind} {key!r}")

        # Settings
        if s.prestige_resource not in resource_keys:
            errors.append(f"Unknown prestige resource {s.prestige_resource!r}")
        if s.prestige_gain_from not in resource_keys:
            errors.append(f"Unknown prestige source resource {s.prestige_gain_from!r}")
        if s.prestige_divisor <= 0:
            errors.append("prestige_divisor must be positive")
        if s.event_frame_skip < 1 or s.achievement_frame_skip < 1:
            errors.append("Frame skips must be at least 1")
        if s.initial_event_min_seconds > s.initial_event_max_seconds:
            errors.append("Initial event interval is inverted")

        # Buildings
        for b in self.buildings:
            owner = f"Building {b.key!r}"
            if b.cost_scale <= 1:
                errors.append(f"{owner} cost_scale must be > 1, got {b.cost_scale}")
            _check_amounts(owner, "base_cost", b.base_cost)
            _check_amounts(owner, "base_prod", b.base_prod)
            _check_amounts(owner, "base_use", b.base_use)
            for tkey in b.requires_tech:
                if tkey not in tech_keys:
                    errors.append(f"{owner} requires unknown technology {tkey!r}")

        # Technologies
        for t in self.technologies:
            owner = f"Technology {t.key!r}"
            if t.research_time <= 0:
                errors.append(f"{owner} research_time must be positive")
            _check_amounts(owner, "base_cost", t.base_cost)
            for tkey in t.requires_tech:
                if tkey not in tech_keys:
                    errors.append(f"{owner} requires unknown technology {tkey!r}")
            for bkey in t.unlocks_buildings:
                if bkey not in building_keys:
                    errors.append(f"{owner} unlocks unknown building {bkey!r}")

        # Upgrades
        for u in self.upgrades:
            if u.max_level < 1:
                errors.append(f"Upgrade {u.key!r} max_level must be at least 1")
            for eff in u.effects:
                if eff.target != "all" and eff.target not in resource_keys:
                    errors.append(
                        f"Upgrade {u.key!r} has effect targeting unknown resource {eff.target!r}"
                    )

        # Events
        for e in self.events:
            owner = f"Event {e.key!r}"
            if e.weight < 0:
                errors.append(f"{owner} weight must not be negative")
            if not e.choices:
                errors.append(f"{owner} has no choices")
            elif not 0 <= e.default_choice < len(e.choices):
                errors.append(f"{owner} default_choice {e.default_choice} out of range")
            if e.min_interval > e.max_interval:
                errors.append(f"{owner} interval is inverted")
            for choice in e.choices:
                _check_amounts(owner, "gives", choice.gives)
                _check_amounts(owner, "takes", choice.takes)
                _check_amounts(owner, "requires", choice.requires)

        # Actions
        for a in self.actions:
            owner = f"Action {a.key!r}"
            if a.cooldown < 0:
                errors.append(f"{owner} cooldown must not be negative")
            _check_amounts(owner, "cost", a.cost)
            _check_amounts(owner, "gains", a.gains)
            _check_conditions(owner, a.unlock_conditions)

        # Loop actions
        for la in self.loop_actions:
            owner = f"Loop action {la.key!r}"
            if la.loop_points_required <= 0:
                errors.append(f"{owner} loop_points_required must be positive")
            _check_amounts(owner, "cost", la.cost)
            _check_amounts(owner, "gains", la.gains)
            _check_conditions(owner, la.unlock_conditions)

        # Achievements. Unknown types are soft failures at runtime, so they
        # are only warned about here.
        for ach in self.achievements:
            owner = f"Achievement {ach.key!r}"
            if not ach.requirements:
                errors.append(f"{owner} has no requirements")
            for req in ach.requirements:
                if req.type not in REQUIREMENT_TYPES:
                    logger.warning("%s has unknown requirement type %r", owner, req.type)
                if not is_valid_operator(req.operator):
                    logger.warning("%s has unknown operator %r", owner, req.operator)
            for reward in ach.rewards:
                if reward.type not in REWARD_TYPES:
                    logger.warning("%s has unknown reward type %r", owner, reward.type)
                elif reward.type == "resource" and reward.target not in resource_keys:
                    errors.append(f"{owner} rewards unknown resource {reward.target!r}")
                elif reward.type == "multiplier":
                    base, _, rkey = reward.target.partition(".")
                    if base not in MULTIPLIER_TARGETS or (rkey and rkey not in resource_keys):
                        logger.warning(
                            "%s has unknown multiplier target %r", owner, reward.target
                        )

        return errors
