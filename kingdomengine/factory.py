from __future__ import annotations

import logging
import random
import time

from kingdomengine.achievements import init_achievement_state
from kingdomengine.definition import GameConfig
from kingdomengine.errors import ConfigError
from kingdomengine.multipliers import Multipliers
from kingdomengine.state import (
    ActionsState,
    ActionUnlock,
    EventState,
    GameState,
    LoopSettings,
)

logger = logging.getLogger(__name__)


def initial_event_time(config: GameConfig, now: float, rng: random.Random | None = None) -> float:
    s = config.settings
    r = rng or random.Random()
    return now + r.uniform(s.initial_event_min_seconds, s.initial_event_max_seconds)


def new_game(
    config: GameConfig,
    now: float | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Build a fresh state with every config-derived map fully populated.

    Raises :class:`ConfigError` if *config* does not validate; this is the
    one place the core lets an error escape.
    """
    errors = config.validate()
    if errors:
        logger.error("Refusing to start with %d configuration error(s)", len(errors))
        raise ConfigError(errors)

    if now is None:
        now = time.time()
    s = config.settings

    return GameState(
        t=now,
        resources={r.key: float(r.initial_amount) for r in config.resources},
        lifetime={r.key: 0.0 for r in config.resources},
        buildings={b.key: 0 for b in config.buildings},
        technologies={t.key: 0 for t in config.technologies},
        upgrades={u.key: 0 for u in config.upgrades},
        clicks=0,
        events=EventState(next_event_time=initial_event_time(config, now, rng)),
        actions=ActionsState(
            unlocks={a.key: ActionUnlock() for a in config.actions},
            cooldowns={},
        ),
        loop_actions=(),
        loop_settings=LoopSettings(
            max_concurrent_actions=s.default_max_concurrent_loop_actions,
            base_points_per_tick=s.default_base_points_per_tick,
        ),
        achievements=init_achievement_state(config),
        achievement_multipliers=Multipliers.identity(config.resource_keys),
        play_time=0.0,
        run_started_at=now,
        prestige_count=0,
        version=s.version,
    )
