from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from kingdomengine.requirement import Requirement


class LoopCategory(Enum):
    GATHERING = "gathering"
    CRAFTING = "crafting"
    RESEARCH = "research"
    MILITARY = "military"


@dataclass
class LoopActionDef:
    """A repeating task that yields ``gains`` every ``loop_points_required`` points.

    ``cost`` is charged once at the start of every loop.
    """

    key: str
    display_name: str = ""
    description: str = ""
    cost: dict[str, float] = field(default_factory=dict)
    gains: dict[str, float] = field(default_factory=dict)
    loop_points_required: int = 1000
    unlock_conditions: list[Requirement] = field(default_factory=list)
    category: LoopCategory = LoopCategory.GATHERING

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key


@dataclass(frozen=True)
class LoopActionProgress:
    """Read-only progress snapshot for one loop action."""

    key: str
    percentage: float
    current_points: int
    points_required: int
    seconds_remaining: float
    total_loops_completed: int
    is_active: bool
    is_paused: bool
