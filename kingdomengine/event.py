from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class EventChoice:
    """One option offered by a random event.

    ``gives`` is added outright. Positive ``takes`` amounts are subtracted and
    negative ones are added as signed deltas; either way balances clamp at
    zero. ``requires`` must be affordable for the choice to be selectable by
    the player.
    """

    label: str
    gives: dict[str, float] = field(default_factory=dict)
    takes: dict[str, float] = field(default_factory=dict)
    requires: dict[str, float] = field(default_factory=dict)


@dataclass
class EventDef:
    """Static definition of a random kingdom event."""

    key: str
    title: str = ""
    description: str = ""
    weight: float = 1.0
    choices: list[EventChoice] = field(default_factory=list)
    default_choice: int = 0
    min_interval: float = 60.0
    max_interval: float = 180.0

    def __post_init__(self) -> None:
        if not self.title:
            self.title = self.key
