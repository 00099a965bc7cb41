from __future__ import annotations

from dataclasses import dataclass, field

from kingdomengine.requirement import Requirement


@dataclass
class ActionDef:
    """A one-shot manual action.

    With ``one_time_unlock`` the action is recorded as unlocked the first time
    it runs and stays available afterwards even if its conditions lapse.
    """

    key: str
    display_name: str = ""
    description: str = ""
    cost: dict[str, float] = field(default_factory=dict)
    gains: dict[str, float] = field(default_factory=dict)
    unlock_conditions: list[Requirement] = field(default_factory=list)
    cooldown: float = 0.0
    one_time_unlock: bool = False
    category: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key


@dataclass(frozen=True)
class ActionStatus:
    """Read-only snapshot of whether an action can run right now."""

    key: str
    unlocked: bool
    affordable: bool
    on_cooldown: bool
    cooldown_remaining: float
    can_execute: bool
    reason: str = ""
