from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kingdomengine.economy import can_buy_building, can_buy_upgrade, cost_for
from kingdomengine.events import can_make_event_choice
from kingdomengine.loop_actions import can_start_loop_action
from kingdomengine.prestige import prestige_gain
from kingdomengine.requirement import Requirement
from kingdomengine.research import can_research_technology, get_available_technologies

if TYPE_CHECKING:
    from kingdomengine.event import EventDef
    from kingdomengine.runtime import GameRuntime
    from kingdomengine.state import GameState


@dataclass
class ClickProfile:
    """How often the simulated player clicks."""

    cps: float = 0.0
    active_until: Requirement | None = None

    def get_clicks(self, state: GameState, duration: float) -> int:
        if self.active_until is not None and self.active_until.evaluate(state):
            return 0
        return int(self.cps * duration)


class Strategy(ABC):
    """Base class for simulated players."""

    click_profile: ClickProfile | None = None

    def get_clicks(self, state: GameState, duration: float) -> int:
        if self.click_profile is None:
            return 0
        return self.click_profile.get_clicks(state, duration)

    @abstractmethod
    def decide_purchases(self, runtime: GameRuntime) -> list[str]:
        """Building keys to try buying, in order."""
        ...

    def decide_upgrades(self, runtime: GameRuntime) -> list[str]:
        return []

    def choose_research(self, runtime: GameRuntime) -> str | None:
        return None

    def choose_loop_actions(self, runtime: GameRuntime) -> list[str]:
        return []

    def choose_event_choice(self, runtime: GameRuntime, event: EventDef) -> int | None:
        """Index to pick for the active event, or None to let it time out."""
        return None

    def should_prestige(self, runtime: GameRuntime) -> bool:
        return False

    @abstractmethod
    def describe(self) -> str: ...


class Idle(Strategy):
    """Never acts. Events resolve through their timeout."""

    def __init__(self, click_profile: ClickProfile | None = None) -> None:
        self.click_profile = click_profile

    def decide_purchases(self, runtime: GameRuntime) -> list[str]:
        return []

    def describe(self) -> str:
        return "Idle"


class GreedyCheapest(Strategy):
    """Buy the cheapest affordable building first and keep everything busy.

    Upgrades are bought whenever affordable, the first available technology
    is researched and free loop slots go to the last-listed (most advanced)
    startable loop actions. Events get the choice that yields the most.
    """

    def __init__(
        self,
        click_profile: ClickProfile | None = None,
        prestige_at: int | None = None,
        cost_weights: dict[str, float] | None = None,
    ) -> None:
        self.click_profile = click_profile
        self.prestige_at = prestige_at
        self.cost_weights = cost_weights or {}

    def _weighted_cost(self, cost: dict[str, float]) -> float:
        return sum(amount * self.cost_weights.get(key, 1.0) for key, amount in cost.items())

    def decide_purchases(self, runtime: GameRuntime) -> list[str]:
        config, state = runtime.config, runtime.state
        affordable = [b.key for b in config.buildings if can_buy_building(config, state, b.key)]
        return sorted(affordable, key=lambda k: self._weighted_cost(cost_for(config, state, k)))

    def decide_upgrades(self, runtime: GameRuntime) -> list[str]:
        config, state = runtime.config, runtime.state
        return [u.key for u in config.upgrades if can_buy_upgrade(config, state, u.key)]

    def choose_research(self, runtime: GameRuntime) -> str | None:
        config, state = runtime.config, runtime.state
        for key in get_available_technologies(config, state):
            if can_research_technology(config, state, key):
                return key
        return None

    def choose_loop_actions(self, runtime: GameRuntime) -> list[str]:
        config, state = runtime.config, runtime.state
        free = state.loop_settings.max_concurrent_actions - len(state.active_loop_actions())
        if free <= 0:
            return []
        picks = [
            la.key for la in reversed(config.loop_actions)
            if can_start_loop_action(config, state, la.key)
        ]
        return picks[:free]

    def choose_event_choice(self, runtime: GameRuntime, event: EventDef) -> int | None:
        config, state = runtime.config, runtime.state
        best: int | None = None
        best_value = float("-inf")
        for index, choice in enumerate(event.choices):
            if not can_make_event_choice(config, state, event.key, index):
                continue
            value = sum(choice.gives.values()) - sum(choice.takes.values())
            if value > best_value:
                best, best_value = index, value
        return best

    def should_prestige(self, runtime: GameRuntime) -> bool:
        if self.prestige_at is None:
            return False
        return prestige_gain(runtime.config, runtime.state) >= self.prestige_at

    def describe(self) -> str:
        parts = ["GreedyCheapest"]
        if self.click_profile and self.click_profile.cps > 0:
            parts.append(f"({self.click_profile.cps:g} CPS)")
        if self.prestige_at is not None:
            parts.append(f"prestige at {self.prestige_at}")
        return " ".join(parts)
