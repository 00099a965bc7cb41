from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from kingdomengine.state import GameState


@dataclass
class TechnologyDef:
    """Static definition of a researchable technology.

    *effect*, when given, is a pure function run once against the state at
    the moment research completes.
    """

    key: str
    display_name: str = ""
    description: str = ""
    base_cost: dict[str, float] = field(default_factory=dict)
    research_time: float = 30.0
    requires_tech: list[str] = field(default_factory=list)
    unlocks_buildings: list[str] = field(default_factory=list)
    effect: Callable[[GameState], GameState] | None = None

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key
