"""Immutable game state.

Every value here is a frozen dataclass and every mapping is treated as
copy-on-write: transitions build new dicts and return a new state through
:func:`dataclasses.replace`. Writers return the very same object when a write
would change nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from kingdomengine.multipliers import Multipliers


@dataclass(frozen=True)
class EventRecord:
    event_key: str
    choice_index: int
    timestamp: float


@dataclass(frozen=True)
class EventState:
    active_event: str | None = None
    active_event_start_time: float | None = None
    next_event_time: float = 0.0
    event_history: tuple[EventRecord, ...] = ()


@dataclass(frozen=True)
class ResearchState:
    active_research: str | None = None
    research_start_time: float | None = None
    research_end_time: float | None = None


@dataclass(frozen=True)
class ActionUnlock:
    unlocked: bool = False
    unlocked_at: float | None = None
    last_used: float | None = None


@dataclass(frozen=True)
class ActionsState:
    unlocks: dict[str, ActionUnlock] = field(default_factory=dict)
    cooldowns: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class LoopActionState:
    """Progress of one loop action.

    ``cost_paid`` records that the current loop's cost has already been
    charged, so pausing and resuming never charges it twice.
    """

    action_key: str
    is_active: bool = False
    is_paused: bool = False
    current_points: int = 0
    total_loops_completed: int = 0
    started_at: float = 0.0
    last_tick_at: float = 0.0
    cost_paid: bool = False


@dataclass(frozen=True)
class LoopSettings:
    max_concurrent_actions: int = 2
    base_points_per_tick: int = 100


@dataclass(frozen=True)
class AchievementNotification:
    achievement_key: str
    timestamp: float
    level: int = 1
    shown: bool = False


@dataclass(frozen=True)
class AchievementStats:
    unlocked_count: int = 0
    session_unlocks: int = 0
    last_unlocked: str | None = None
    last_unlock_time: float | None = None


@dataclass(frozen=True)
class AchievementState:
    unlocked: dict[str, int] = field(default_factory=dict)
    progress: dict[str, float] = field(default_factory=dict)
    notifications: tuple[AchievementNotification, ...] = ()
    total_points: int = 0
    stats: AchievementStats = field(default_factory=AchievementStats)


@dataclass(frozen=True)
class GameState:
    """Single source of truth for one kingdom."""

    t: float = 0.0
    resources: dict[str, float] = field(default_factory=dict)
    lifetime: dict[str, float] = field(default_factory=dict)
    buildings: dict[str, int] = field(default_factory=dict)
    technologies: dict[str, int] = field(default_factory=dict)
    upgrades: dict[str, int] = field(default_factory=dict)
    clicks: int = 0
    events: EventState = field(default_factory=EventState)
    research: ResearchState = field(default_factory=ResearchState)
    actions: ActionsState = field(default_factory=ActionsState)
    loop_actions: tuple[LoopActionState, ...] = ()
    loop_settings: LoopSettings = field(default_factory=LoopSettings)
    achievements: AchievementState = field(default_factory=AchievementState)
    achievement_multipliers: Multipliers = field(default_factory=Multipliers)
    play_time: float = 0.0
    run_started_at: float = 0.0
    prestige_count: int = 0
    version: int = 5

    # ── Queries ──────────────────────────────────────────────────────

    def resource(self, key: str) -> float:
        return self.resources.get(key, 0.0)

    def lifetime_total(self, key: str) -> float:
        return self.lifetime.get(key, 0.0)

    def building_count(self, key: str) -> int:
        return self.buildings.get(key, 0)

    def total_buildings(self) -> int:
        return sum(self.buildings.values())

    def technology_level(self, key: str) -> int:
        return self.technologies.get(key, 0)

    def has_technology(self, key: str) -> bool:
        return self.technology_level(key) >= 1

    def upgrade_level(self, key: str) -> int:
        return self.upgrades.get(key, 0)

    def loop_action(self, key: str) -> LoopActionState | None:
        for la in self.loop_actions:
            if la.action_key == key:
                return la
        return None

    def active_loop_actions(self) -> list[LoopActionState]:
        return [la for la in self.loop_actions if la.is_active]

    # ── Writers ──────────────────────────────────────────────────────

    def with_resource(self, key: str, amount: float) -> GameState:
        """Set a resource balance, clamped at zero."""
        amount = max(0.0, float(amount))
        if self.resources.get(key) == amount:
            return self
        return replace(self, resources={**self.resources, key: amount})

    def with_resources(self, amounts: dict[str, float]) -> GameState:
        clamped = {k: max(0.0, float(v)) for k, v in amounts.items()}
        changed = {k: v for k, v in clamped.items() if self.resources.get(k) != v}
        if not changed:
            return self
        return replace(self, resources={**self.resources, **changed})

    def add_resources(self, gains: dict[str, float]) -> GameState:
        """Add amounts to balances. Positive amounts also count toward lifetime."""
        if not any(gains.values()):
            return self
        resources = dict(self.resources)
        lifetime = dict(self.lifetime)
        for k, v in gains.items():
            if v == 0:
                continue
            resources[k] = max(0.0, resources.get(k, 0.0) + v)
            if v > 0:
                lifetime[k] = lifetime.get(k, 0.0) + v
        return replace(self, resources=resources, lifetime=lifetime)

    def pay(self, cost: dict[str, float]) -> GameState:
        """Subtract *cost*, clamping each balance at zero."""
        if not any(cost.values()):
            return self
        resources = dict(self.resources)
        for k, v in cost.items():
            resources[k] = max(0.0, resources.get(k, 0.0) - v)
        return replace(self, resources=resources)

    def with_building_count(self, key: str, count: int) -> GameState:
        count = max(0, int(count))
        if self.buildings.get(key) == count:
            return self
        return replace(self, buildings={**self.buildings, key: count})

    def with_technology_level(self, key: str, level: int) -> GameState:
        level = min(1, max(0, int(level)))
        if self.technologies.get(key) == level:
            return self
        return replace(self, technologies={**self.technologies, key: level})

    def with_upgrade_level(self, key: str, level: int) -> GameState:
        level = max(0, int(level))
        if self.upgrades.get(key) == level:
            return self
        return replace(self, upgrades={**self.upgrades, key: level})

    def with_loop_action(self, updated: LoopActionState) -> GameState:
        """Replace the entry for ``updated.action_key``, or append it."""
        entries = list(self.loop_actions)
        for i, la in enumerate(entries):
            if la.action_key == updated.action_key:
                if la == updated:
                    return self
                entries[i] = updated
                return replace(self, loop_actions=tuple(entries))
        entries.append(updated)
        return replace(self, loop_actions=tuple(entries))
