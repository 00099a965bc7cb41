"""Composition of prestige-upgrade effects and achievement rewards.

Every factor is a product, so the order upgrades are applied in never
changes the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from kingdomengine.effect import ALL_RESOURCES, EffectDef, EffectType
from kingdomengine.errors import ErrorCategory, guarded

if TYPE_CHECKING:
    from kingdomengine.definition import GameConfig
    from kingdomengine.state import GameState


@dataclass(frozen=True)
class Multipliers:
    """Click-gain, cost and per-resource production/consumption factors."""

    click_gain: float = 1.0
    cost: float = 1.0
    prod_mul: dict[str, float] = field(default_factory=dict)
    use_mul: dict[str, float] = field(default_factory=dict)

    @classmethod
    def identity(cls, resource_keys: list[str] | None = None) -> Multipliers:
        keys = resource_keys or []
        return cls(
            prod_mul={k: 1.0 for k in keys},
            use_mul={k: 1.0 for k in keys},
        )

    def prod(self, resource: str) -> float:
        return self.prod_mul.get(resource, 1.0)

    def use(self, resource: str) -> float:
        return self.use_mul.get(resource, 1.0)

    def combine(self, other: Multipliers) -> Multipliers:
        """Component-wise product; missing resources count as 1."""
        prod_keys = list(self.prod_mul) + [k for k in other.prod_mul if k not in self.prod_mul]
        use_keys = list(self.use_mul) + [k for k in other.use_mul if k not in self.use_mul]
        return Multipliers(
            click_gain=self.click_gain * other.click_gain,
            cost=self.cost * other.cost,
            prod_mul={k: self.prod(k) * other.prod(k) for k in prod_keys},
            use_mul={k: self.use(k) * other.use(k) for k in use_keys},
        )

    def scaled(self, target: str, factor: float) -> Multipliers:
        """Return a copy with *target* multiplied by *factor*.

        *target* is ``click_gain``, ``cost``, ``prod_mul``/``use_mul`` (every
        resource) or ``prod_mul.<resource>``/``use_mul.<resource>``.
        """
        acc = MultiplierAccumulator.from_multipliers(self)
        acc.scale(target, factor)
        return acc.freeze()

    def to_dict(self) -> dict[str, Any]:
        return {
            "click_gain": self.click_gain,
            "cost": self.cost,
            "prod_mul": dict(self.prod_mul),
            "use_mul": dict(self.use_mul),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Multipliers:
        return cls(
            click_gain=float(data.get("click_gain", 1.0)),
            cost=float(data.get("cost", 1.0)),
            prod_mul={k: float(v) for k, v in data.get("prod_mul", {}).items()},
            use_mul={k: float(v) for k, v in data.get("use_mul", {}).items()},
        )


@dataclass
class MultiplierAccumulator:
    """Mutable scratch space that effects are applied against."""

    click_gain: float = 1.0
    cost: float = 1.0
    prod_mul: dict[str, float] = field(default_factory=dict)
    use_mul: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_multipliers(cls, m: Multipliers) -> MultiplierAccumulator:
        return cls(m.click_gain, m.cost, dict(m.prod_mul), dict(m.use_mul))

    def _scale_map(self, mapping: dict[str, float], resource: str, factor: float) -> None:
        if resource == ALL_RESOURCES:
            for k in mapping:
                mapping[k] *= factor
        else:
            mapping[resource] = mapping.get(resource, 1.0) * factor

    def apply(self, effect: EffectDef, level: int) -> None:
        factor = effect.resolve(level)
        if effect.type is EffectType.CLICK_MULT:
            self.click_gain *= factor
        elif effect.type is EffectType.COST_MULT:
            self.cost *= factor
        elif effect.type is EffectType.PRODUCTION_MULT:
            self._scale_map(self.prod_mul, effect.target, factor)
        elif effect.type is EffectType.CONSUMPTION_MULT:
            self._scale_map(self.use_mul, effect.target, factor)

    def scale(self, target: str, factor: float) -> bool:
        """Scale a named target. Returns False if *target* is not recognised."""
        base, _, resource = target.partition(".")
        if base == "click_gain" and not resource:
            self.click_gain *= factor
        elif base == "cost" and not resource:
            self.cost *= factor
        elif base == "prod_mul":
            self._scale_map(self.prod_mul, resource or ALL_RESOURCES, factor)
        elif base == "use_mul":
            self._scale_map(self.use_mul, resource or ALL_RESOURCES, factor)
        else:
            return False
        return True

    def freeze(self) -> Multipliers:
        return Multipliers(self.click_gain, self.cost, dict(self.prod_mul), dict(self.use_mul))


def _identity_for(config: GameConfig) -> Multipliers:
    return Multipliers.identity(config.resource_keys)


@guarded(ErrorCategory.CALCULATION, "multipliers", fallback=None)
def _compose(config: GameConfig, state: GameState) -> Multipliers:
    acc = MultiplierAccumulator.from_multipliers(_identity_for(config))
    for udef in config.upgrades:
        level = state.upgrade_level(udef.key)
        if level <= 0:
            continue
        for eff in udef.effects:
            acc.apply(eff, level)
    return acc.freeze().combine(state.achievement_multipliers)


def get_multipliers(config: GameConfig, state: GameState) -> Multipliers:
    """Compose upgrade effects (in config order) with achievement multipliers.

    Falls back to identity if anything about the state is unusable.
    """
    result = _compose(config, state)
    if result is None:
        return _identity_for(config)
    return result
