from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

ALL_RESOURCES = "all"


class EffectType(Enum):
    CLICK_MULT = auto()
    COST_MULT = auto()
    PRODUCTION_MULT = auto()
    CONSUMPTION_MULT = auto()


@dataclass(frozen=True)
class EffectDef:
    """A multiplicative effect of a prestige upgrade, as a function of its level.

    *target* is a resource key or ``"all"`` and is ignored for click and
    cost effects.
    """

    type: EffectType
    target: str = ALL_RESOURCES
    value: Callable[[int], float] | float = 1.0

    def resolve(self, level: int) -> float:
        if callable(self.value):
            return self.value(level)
        return self.value


class Effect:
    """Convenience constructors for common upgrade effect curves."""

    @staticmethod
    def linear(type: EffectType, per_level: float, target: str = ALL_RESOURCES) -> EffectDef:
        """Factor ``1 + per_level * level``."""
        _per_level = per_level

        def _value(level: int) -> float:
            return 1.0 + _per_level * level

        return EffectDef(type=type, target=target, value=_value)

    @staticmethod
    def exponential(type: EffectType, base: float, target: str = ALL_RESOURCES) -> EffectDef:
        """Factor ``base ** level``."""
        _base = base

        def _value(level: int) -> float:
            return _base ** level

        return EffectDef(type=type, target=target, value=_value)

    @staticmethod
    def static(type: EffectType, value: float, target: str = ALL_RESOURCES) -> EffectDef:
        """Constant factor whenever the upgrade is owned."""
        return EffectDef(type=type, target=target, value=value)

    @staticmethod
    def custom(
        type: EffectType, fn: Callable[[int], float], target: str = ALL_RESOURCES
    ) -> EffectDef:
        return EffectDef(type=type, target=target, value=fn)
