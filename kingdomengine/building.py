from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BuildingDef:
    """Static definition of a building.

    Each owned building adds ``base_prod`` per second and draws ``base_use``
    per second. The price of the next one is ``base_cost * cost_scale^owned``.
    """

    key: str
    display_name: str = ""
    description: str = ""
    base_cost: dict[str, float] = field(default_factory=dict)
    cost_scale: float = 1.15
    base_prod: dict[str, float] = field(default_factory=dict)
    base_use: dict[str, float] = field(default_factory=dict)
    requires_tech: list[str] = field(default_factory=list)
    category: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key
