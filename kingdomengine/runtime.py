from __future__ import annotations

import logging
import random
import time

from kingdomengine import actions, events, loop_actions, prestige, save
from kingdomengine.definition import GameConfig
from kingdomengine.economy import cost_for, get_per_sec, get_upgrade_cost
from kingdomengine.factory import new_game
from kingdomengine.pipeline import offline_progress, tick
from kingdomengine.prestige import PrestigeResult
from kingdomengine.state import GameState

logger = logging.getLogger(__name__)


class GameRuntime:
    """Host-side owner of the current state.

    Holds the config, the latest :class:`GameState`, the tick counter and
    the random source, and swaps in the new state after every transition.
    """

    def __init__(
        self,
        config: GameConfig,
        state: GameState | None = None,
        seed: int | None = None,
        now: float | None = None,
    ) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self.tick_counter = 0
        self.state = state if state is not None else new_game(config, now=now, rng=self.rng)

    # ── Core loop ────────────────────────────────────────────────────

    def tick(self, dt: float) -> GameState:
        """Advance by *dt* seconds and bump the tick counter."""
        self.state = tick(self.config, self.state, dt, self.tick_counter, self.rng)
        self.tick_counter += 1
        return self.state

    def advance(self, seconds: float, step: float | None = None) -> GameState:
        """Run fixed-size ticks until *seconds* have elapsed."""
        step = step or 1.0 / self.config.settings.tick_rate
        remaining = seconds
        while remaining > 1e-9:
            dt = min(step, remaining)
            self.tick(dt)
            remaining -= dt
        return self.state

    def catch_up(self, now: float | None = None) -> GameState:
        """Apply offline progress up to *now* (wall clock by default)."""
        now = time.time() if now is None else now
        self.state = offline_progress(self.config, self.state, now, self.rng)
        return self.state

    # ── Player actions ───────────────────────────────────────────────

    def _apply(self, new_state: GameState) -> bool:
        changed = new_state is not self.state
        self.state = new_state
        return changed

    def click(self) -> bool:
        return self._apply(actions.click_action(self.config, self.state))

    def buy_building(self, building_key: str) -> bool:
        return self._apply(actions.buy_building(self.config, self.state, building_key))

    def buy_upgrade(self, upgrade_key: str) -> bool:
        return self._apply(actions.buy_upgrade(self.config, self.state, upgrade_key))

    def research(self, technology_key: str) -> bool:
        return self._apply(actions.research_technology(self.config, self.state, technology_key))

    def execute_action(self, action_key: str) -> bool:
        return self._apply(actions.execute_action(self.config, self.state, action_key))

    def make_event_choice(self, choice_index: int) -> bool:
        active = self.state.events.active_event
        if active is None:
            return False
        return self._apply(
            events.make_event_choice(self.config, self.state, active, choice_index, self.rng)
        )

    def start_loop_action(self, action_key: str) -> bool:
        return self._apply(loop_actions.start_loop_action(self.config, self.state, action_key))

    def pause_loop_action(self, action_key: str) -> bool:
        return self._apply(loop_actions.pause_loop_action(self.config, self.state, action_key))

    def resume_loop_action(self, action_key: str) -> bool:
        return self._apply(loop_actions.resume_loop_action(self.config, self.state, action_key))

    def stop_loop_action(self, action_key: str) -> bool:
        return self._apply(loop_actions.stop_loop_action(self.config, self.state, action_key))

    def prestige(self) -> PrestigeResult:
        self.state, result = prestige.try_prestige(self.config, self.state, rng=self.rng)
        return result

    def new_game(self, now: float | None = None) -> GameState:
        self.state = new_game(self.config, now=now, rng=self.rng)
        self.tick_counter = 0
        return self.state

    # ── Queries ──────────────────────────────────────────────────────

    def per_sec(self) -> dict[str, float]:
        return get_per_sec(self.config, self.state)

    def building_cost(self, building_key: str) -> dict[str, float]:
        return cost_for(self.config, self.state, building_key)

    def upgrade_cost(self, upgrade_key: str) -> float:
        return get_upgrade_cost(self.config, upgrade_key, self.state.upgrade_level(upgrade_key))

    def prestige_gain(self) -> int:
        return prestige.prestige_gain(self.config, self.state)

    def time_to_afford(self, cost: dict[str, float]) -> float | None:
        """Seconds until *cost* is affordable at current rates. None if never."""
        rates = self.per_sec()
        worst = 0.0
        for key, amount in cost.items():
            have = self.state.resource(key)
            if have >= amount:
                continue
            rate = rates.get(key, 0.0)
            if rate <= 0:
                return None
            worst = max(worst, (amount - have) / rate)
        return worst

    # ── Persistence ──────────────────────────────────────────────────

    def export_save(self) -> str:
        return save.export_save(self.state)

    def import_save(self, text: str) -> bool:
        loaded = save.import_save(self.config, text)
        if loaded is None:
            return False
        self.state = loaded
        return True
