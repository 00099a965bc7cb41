from __future__ import annotations

from dataclasses import dataclass, field

from kingdomengine.cost_scaling import CostCurve
from kingdomengine.effect import EffectDef


@dataclass
class PrestigeUpgradeDef:
    """A permanent upgrade bought with the prestige resource."""

    key: str
    display_name: str = ""
    description: str = ""
    cost_curve: CostCurve = field(default_factory=lambda: CostCurve.exponential(1.0, 2.0))
    max_level: int = 10
    effects: list[EffectDef] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key
