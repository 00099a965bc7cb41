"""Random kingdom events.

An event is either idle (waiting for ``next_event_time``) or active (one
event shown, choice pending). Resolving a choice, by the player or by the
auto-resolve timeout, returns the scheduler to idle and schedules the next
draw.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import TYPE_CHECKING

from kingdomengine.economy import can_afford
from kingdomengine.errors import ErrorCategory, guarded, validation_handler
from kingdomengine.state import EventRecord, EventState

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.event import EventChoice, EventDef
    from kingdomengine.state import GameState

logger = logging.getLogger(__name__)
_invalid = validation_handler("events")


def draw_event(config: GameConfig, rng: random.Random | None = None) -> EventDef | None:
    """Weighted random pick; falls back to the first event on rounding."""
    if not config.events:
        return None
    r = rng or random.Random()
    total = sum(max(0.0, e.weight) for e in config.events)
    if total <= 0:
        return config.events[0]
    remainder = r.uniform(0, total)
    for edef in config.events:
        remainder -= max(0.0, edef.weight)
        if remainder <= 0:
            return edef
    return config.events[0]


def _get_choice(edef: EventDef, index: int) -> EventChoice | None:
    if 0 <= index < len(edef.choices):
        return edef.choices[index]
    return None


def can_make_event_choice(config: GameConfig, state: GameState, event_key: str, choice_index: int) -> bool:
    edef = config.get_event(event_key)
    if edef is None:
        return False
    choice = _get_choice(edef, choice_index)
    if choice is None:
        return False
    return can_afford(state, choice.requires)


def _apply_choice(state: GameState, choice: EventChoice) -> GameState:
    result = state.add_resources(choice.gives)
    losses = {k: v for k, v in choice.takes.items() if v > 0}
    deltas = {k: v for k, v in choice.takes.items() if v < 0}
    return result.pay(losses).add_resources(deltas)


def _resolve(
    config: GameConfig,
    state: GameState,
    edef: EventDef,
    choice_index: int,
    rng: random.Random | None,
) -> GameState:
    choice = edef.choices[choice_index]
    result = _apply_choice(state, choice)

    history = state.events.event_history + (
        EventRecord(event_key=edef.key, choice_index=choice_index, timestamp=state.t),
    )
    cap = config.settings.event_history_max
    if len(history) > cap:
        history = history[len(history) - cap:]

    r = rng or random.Random()
    next_time = state.t + r.uniform(edef.min_interval, edef.max_interval)
    logger.debug("Resolved event %s with choice %d", edef.key, choice_index)
    return replace(
        result,
        events=EventState(
            active_event=None,
            active_event_start_time=None,
            next_event_time=next_time,
            event_history=history,
        ),
    )


@guarded(ErrorCategory.STATE, "events")
def make_event_choice(
    config: GameConfig,
    state: GameState,
    event_key: str,
    choice_index: int,
    rng: random.Random | None = None,
) -> GameState:
    """Resolve the active event with the player's choice.

    Rejected (state returned unchanged) if *event_key* is not the active
    event, the index is out of range, or ``choice.requires`` is unaffordable.
    """
    if state.events.active_event != event_key:
        _invalid("Event is not active", event=event_key, active=state.events.active_event)
        return state
    edef = config.get_event(event_key)
    if edef is None:
        _invalid("Unknown event", event=event_key)
        return state
    if _get_choice(edef, choice_index) is None:
        _invalid("Invalid event choice", event=event_key, choice=choice_index)
        return state
    if not can_make_event_choice(config, state, event_key, choice_index):
        _invalid("Cannot afford event choice", event=event_key, choice=choice_index)
        return state
    return _resolve(config, state, edef, choice_index, rng)


@guarded(ErrorCategory.STATE, "events")
def check_and_trigger_events(
    config: GameConfig,
    state: GameState,
    rng: random.Random | None = None,
) -> GameState:
    """Auto-resolve an expired event, or activate a new one when due."""
    ev = state.events
    now = state.t

    if ev.active_event is not None:
        started = ev.active_event_start_time if ev.active_event_start_time is not None else now
        if now - started <= config.settings.event_auto_resolve_seconds:
            return state
        edef = config.get_event(ev.active_event)
        if edef is None or not edef.choices:
            _invalid("Active event is unknown, clearing it", event=ev.active_event)
            return replace(state, events=replace(ev, active_event=None, active_event_start_time=None))
        # The default choice is forced through even if unaffordable; takes clamp at 0.
        logger.info("Auto-resolving event %s after timeout", edef.key)
        return _resolve(config, state, edef, edef.default_choice, rng)

    if now < ev.next_event_time:
        return state

    edef = draw_event(config, rng)
    if edef is None:
        return state
    logger.info("Event triggered: %s", edef.key)
    return replace(state, events=replace(ev, active_event=edef.key, active_event_start_time=now))


def time_until_next_event(state: GameState) -> float:
    if state.events.active_event is not None:
        return 0.0
    return max(0.0, state.events.next_event_time - state.t)


def event_count(state: GameState, event_key: str | None = None) -> int:
    history = state.events.event_history
    if event_key is None:
        return len(history)
    return sum(1 for rec in history if rec.event_key == event_key)
