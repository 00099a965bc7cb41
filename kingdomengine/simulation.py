from __future__ import annotations

import logging
import math

from kingdomengine.definition import GameConfig
from kingdomengine.report import MetricsCollector, SimulationReport, build_report
from kingdomengine.requirement import Requirement
from kingdomengine.research import get_researched_technologies
from kingdomengine.runtime import GameRuntime
from kingdomengine.strategy import Strategy

logger = logging.getLogger(__name__)

MAX_TICKS = 10_000_000


class Simulation:
    """Orchestrates a headless run of a kingdom config under a strategy."""

    def __init__(
        self,
        config: GameConfig,
        strategy: Strategy,
        duration: float = 3600.0,
        tick_resolution: float = 1.0,
        seed: int | None = None,
        stop_when: Requirement | None = None,
    ) -> None:
        self.config = config
        self.strategy = strategy
        self.duration = duration
        self.tick_resolution = tick_resolution
        self.stop_when = stop_when

        self.runtime = GameRuntime(config, seed=seed, now=0.0)
        self.collector = MetricsCollector(snapshot_interval=tick_resolution)
        self._run_started = 0.0

    @property
    def elapsed(self) -> float:
        return self.runtime.state.t

    def _terminal_met(self) -> bool:
        if self.elapsed >= self.duration - 1e-9:
            return True
        return self.stop_when is not None and self.stop_when.evaluate(self.runtime.state)

    def run(self) -> SimulationReport:
        tick_count = 0
        while not self._terminal_met():
            tick_count += 1
            if tick_count > MAX_TICKS:
                return self._build_report("Max ticks reached")
            self._step(min(self.tick_resolution, self.duration - self.elapsed))

            if any(not math.isfinite(v) for v in self.runtime.state.resources.values()):
                logger.error("Non-finite resource at t=%.1f, aborting", self.elapsed)
                return self._build_report("Aborted: NaN/Inf detected")

        if self.stop_when is not None and self.stop_when.evaluate(self.runtime.state):
            return self._build_report(f"Stop condition met: {self.stop_when.describe()}")
        return self._build_report("Time limit reached")

    def _step(self, dt: float) -> None:
        rt = self.runtime
        strategy = self.strategy
        collector = self.collector

        # 1. Clicks
        for _ in range(strategy.get_clicks(rt.state, dt)):
            rt.click()

        # 2. Advance time
        history_before = set(rt.state.events.event_history)
        unlocked_before = dict(rt.state.achievements.unlocked)
        rt.tick(dt)

        # 3. Answer the active event
        active = rt.state.events.active_event
        if active is not None:
            edef = self.config.get_event(active)
            choice = strategy.choose_event_choice(rt, edef) if edef is not None else None
            if choice is not None:
                rt.make_event_choice(choice)
        for rec in rt.state.events.event_history:
            if rec not in history_before:
                collector.record_event(self.elapsed, rec.event_key, rec.choice_index)

        # 4. Research
        tech = strategy.choose_research(rt)
        if tech is not None:
            cost = dict(self.config.get_technology(tech).base_cost)
            if rt.research(tech):
                collector.record_purchase(self.elapsed, "technology", tech, cost)

        # 5. Buildings and upgrades
        for key in strategy.decide_purchases(rt):
            cost = rt.building_cost(key)
            if rt.buy_building(key):
                collector.record_purchase(self.elapsed, "building", key, cost)
        for key in strategy.decide_upgrades(rt):
            cost = {self.config.settings.prestige_resource: rt.upgrade_cost(key)}
            if rt.buy_upgrade(key):
                collector.record_purchase(self.elapsed, "upgrade", key, cost)

        # 6. Loop actions
        for key in strategy.choose_loop_actions(rt):
            rt.start_loop_action(key)

        for key, level in rt.state.achievements.unlocked.items():
            if level > unlocked_before.get(key, 0):
                collector.record_achievement(self.elapsed, key, level)

        # 7. Prestige
        if strategy.should_prestige(rt):
            result = rt.prestige()
            if result.success:
                collector.record_prestige(self.elapsed, result.gain, self.elapsed - self._run_started)
                self._run_started = self.elapsed

        collector.record_tick(self.elapsed, rt.state, rt.per_sec())

    def _build_report(self, outcome: str) -> SimulationReport:
        state = self.runtime.state
        return build_report(
            collector=self.collector,
            state=state,
            game_name=self.config.name,
            strategy_description=self.strategy.describe(),
            outcome=outcome,
            total_time=self.elapsed,
            technologies=get_researched_technologies(self.config, state),
        )
