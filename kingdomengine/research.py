"""Single-slot technology research: idle, researching, researched."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from kingdomengine.economy import can_afford, technology_cost_for
from kingdomengine.errors import ErrorCategory, guarded, state_handler, validation_handler
from kingdomengine.state import ResearchState

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState
    from kingdomengine.technology import TechnologyDef

_invalid = validation_handler("research")
_state_error = state_handler("research")


def can_research_technology(config: GameConfig, state: GameState, technology_key: str) -> bool:
    tdef = config.get_technology(technology_key)
    if tdef is None:
        return False
    if state.research.active_research is not None:
        return False
    if state.has_technology(technology_key):
        return False
    if not all(state.has_technology(req) for req in tdef.requires_tech):
        return False
    return can_afford(state, technology_cost_for(config, technology_key))


@guarded(ErrorCategory.STATE, "research")
def start_research(config: GameConfig, state: GameState, technology_key: str) -> GameState:
    """Pay for *technology_key* and occupy the research slot until it is done."""
    tdef = config.get_technology(technology_key)
    if tdef is None:
        _invalid("Unknown technology", technology=technology_key)
        return state
    if not can_research_technology(config, state, technology_key):
        _invalid("Cannot research technology", technology=technology_key)
        return state

    paid = state.pay(technology_cost_for(config, technology_key))
    return replace(
        paid,
        research=ResearchState(
            active_research=technology_key,
            research_start_time=state.t,
            research_end_time=state.t + tdef.research_time,
        ),
    )


@guarded(ErrorCategory.STATE, "research")
def complete_research(config: GameConfig, state: GameState) -> GameState:
    """Mark the active technology researched, run its effect and clear the slot."""
    key = state.research.active_research
    if key is None:
        return state
    tdef = config.get_technology(key)
    cleared = replace(state, research=ResearchState())
    if tdef is None:
        _state_error("Active research references unknown technology", technology=key)
        return cleared

    result = cleared.with_technology_level(key, 1)
    if tdef.effect is not None:
        result = _run_effect(tdef, result)
    return result


def _run_effect(tdef: TechnologyDef, state: GameState) -> GameState:
    try:
        updated = tdef.effect(state)
    except Exception as exc:
        _state_error("Technology effect failed", technology=tdef.key, error=str(exc))
        return state
    return updated if updated is not None else state


def check_research_progress(config: GameConfig, state: GameState) -> GameState:
    end = state.research.research_end_time
    if state.research.active_research is None or end is None:
        return state
    if state.t >= end:
        return complete_research(config, state)
    return state


def get_research_progress(state: GameState) -> float:
    """Percentage complete of the active research, 0 when idle."""
    r = state.research
    if r.active_research is None or r.research_start_time is None or r.research_end_time is None:
        return 0.0
    total = r.research_end_time - r.research_start_time
    if total <= 0:
        return 100.0
    return max(0.0, min(100.0, (state.t - r.research_start_time) / total * 100.0))


def get_research_time_remaining(state: GameState) -> float:
    r = state.research
    if r.active_research is None or r.research_end_time is None:
        return 0.0
    return max(0.0, r.research_end_time - state.t)


def get_available_technologies(config: GameConfig, state: GameState) -> list[str]:
    """Unresearched technologies whose prerequisites are all met."""
    return [
        t.key
        for t in config.technologies
        if not state.has_technology(t.key)
        and all(state.has_technology(req) for req in t.requires_tech)
    ]


def get_researched_technologies(config: GameConfig, state: GameState) -> list[str]:
    return [t.key for t in config.technologies if state.has_technology(t.key)]
