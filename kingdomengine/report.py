from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kingdomengine.state import GameState


@dataclass
class ResourceSnapshot:
    time: float
    resource: str
    value: float
    rate: float
    lifetime: float


@dataclass
class PurchaseEvent:
    time: float
    kind: str  # "building", "upgrade" or "technology"
    key: str
    cost_paid: dict[str, float]


@dataclass
class AchievementEvent:
    time: float
    achievement_key: str
    level: int


@dataclass
class EventOutcome:
    time: float
    event_key: str
    choice_index: int


@dataclass
class PrestigeEvent:
    time: float
    gain: int
    run_duration: float


class MetricsCollector:
    """Collects simulation metrics at configurable intervals."""

    def __init__(self, snapshot_interval: float = 1.0) -> None:
        self.snapshot_interval = snapshot_interval
        self._last_snapshot_time: float | None = None

        self.resource_snapshots: list[ResourceSnapshot] = []
        self.purchases: list[PurchaseEvent] = []
        self.achievements: list[AchievementEvent] = []
        self.events: list[EventOutcome] = []
        self.prestiges: list[PrestigeEvent] = []

    def record_tick(self, elapsed: float, state: GameState, rates: dict[str, float]) -> None:
        """Record a snapshot if enough time has passed."""
        last = self._last_snapshot_time
        if last is None or elapsed - last >= self.snapshot_interval:
            for key, value in state.resources.items():
                self.resource_snapshots.append(
                    ResourceSnapshot(
                        time=elapsed,
                        resource=key,
                        value=value,
                        rate=rates.get(key, 0.0),
                        lifetime=state.lifetime_total(key),
                    )
                )
            self._last_snapshot_time = elapsed

    def record_purchase(self, elapsed: float, kind: str, key: str, cost_paid: dict[str, float]) -> None:
        self.purchases.append(PurchaseEvent(time=elapsed, kind=kind, key=key, cost_paid=dict(cost_paid)))

    def record_achievement(self, elapsed: float, key: str, level: int) -> None:
        self.achievements.append(AchievementEvent(time=elapsed, achievement_key=key, level=level))

    def record_event(self, elapsed: float, key: str, choice_index: int) -> None:
        self.events.append(EventOutcome(time=elapsed, event_key=key, choice_index=choice_index))

    def record_prestige(self, elapsed: float, gain: int, run_duration: float) -> None:
        self.prestiges.append(PrestigeEvent(time=elapsed, gain=gain, run_duration=run_duration))


@dataclass
class SimulationReport:
    """Container for simulation results and derived metrics."""

    game_name: str = ""
    strategy_description: str = ""
    outcome: str = ""
    total_time: float = 0.0
    final_resources: dict[str, float] = field(default_factory=dict)
    final_buildings: dict[str, int] = field(default_factory=dict)
    technologies: list[str] = field(default_factory=list)
    clicks: int = 0

    # Raw metrics
    resource_snapshots: list[ResourceSnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    achievements: list[AchievementEvent] = field(default_factory=list)
    events: list[EventOutcome] = field(default_factory=list)
    prestiges: list[PrestigeEvent] = field(default_factory=list)

    # Derived metrics
    achievement_times: dict[str, float] = field(default_factory=dict)
    purchase_gaps: list[float] = field(default_factory=list)
    max_purchase_gap: float = 0.0
    mean_purchase_gap: float = 0.0
    purchases_per_minute: float = 0.0

    def achievement_time(self, key: str) -> float | None:
        return self.achievement_times.get(key)

    def resource_series(self, resource: str) -> list[tuple[float, float]]:
        """Return (time, value) series for a resource."""
        return [(s.time, s.value) for s in self.resource_snapshots if s.resource == resource]

    def rate_series(self, resource: str) -> list[tuple[float, float]]:
        """Return (time, rate) series for a resource."""
        return [(s.time, s.rate) for s in self.resource_snapshots if s.resource == resource]


def build_report(
    collector: MetricsCollector,
    state: GameState,
    game_name: str,
    strategy_description: str,
    outcome: str,
    total_time: float,
    technologies: list[str],
) -> SimulationReport:
    """Build a SimulationReport from collected metrics and the final state."""
    achievement_times: dict[str, float] = {}
    for a in collector.achievements:
        achievement_times.setdefault(a.achievement_key, a.time)

    purchase_gaps: list[float] = []
    purchase_times = sorted(p.time for p in collector.purchases)
    if purchase_times:
        purchase_gaps.append(purchase_times[0])  # gap from t=0 to first purchase
        for i in range(1, len(purchase_times)):
            purchase_gaps.append(purchase_times[i] - purchase_times[i - 1])

    max_gap = max(purchase_gaps) if purchase_gaps else 0.0
    mean_gap = (sum(purchase_gaps) / len(purchase_gaps)) if purchase_gaps else 0.0
    ppm = (len(collector.purchases) / total_time * 60.0) if total_time > 0 else 0.0

    return SimulationReport(
        game_name=game_name,
        strategy_description=strategy_description,
        outcome=outcome,
        total_time=total_time,
        final_resources=dict(state.resources),
        final_buildings=dict(state.buildings),
        technologies=technologies,
        clicks=state.clicks,
        resource_snapshots=collector.resource_snapshots,
        purchases=collector.purchases,
        achievements=collector.achievements,
        events=collector.events,
        prestiges=collector.prestiges,
        achievement_times=achievement_times,
        purchase_gaps=purchase_gaps,
        max_purchase_gap=max_gap,
        mean_purchase_gap=mean_gap,
        purchases_per_minute=ppm,
    )
