from __future__ import annotations

from typing import Callable


class CostCurve:
    """Maps an upgrade level to the price of the next level."""

    def __init__(self, fn: Callable[[int], float]) -> None:
        self._fn = fn

    def compute(self, level: int) -> float:
        return self._fn(level)

    def __call__(self, level: int) -> float:
        return self._fn(level)

    @classmethod
    def fixed(cls, amount: float) -> CostCurve:
        """Cost never changes."""
        return cls(lambda _level: amount)

    @classmethod
    def exponential(cls, base: float, growth_rate: float = 1.15) -> CostCurve:
        """Cost = base * growth_rate^level."""
        b, gr = base, growth_rate  # capture

        return cls(lambda level: b * gr ** level)

    @classmethod
    def linear(cls, base: float, increment: float) -> CostCurve:
        """Cost = base + increment * level."""
        b, inc = base, increment

        return cls(lambda level: b + inc * level)

    @classmethod
    def custom(cls, fn: Callable[[int], float]) -> CostCurve:
        """Arbitrary cost function."""
        return cls(fn)


def scaled_cost(
    base_cost: dict[str, float],
    cost_scale: float,
    owned: int,
    multiplier: float = 1.0,
) -> dict[str, float]:
    """Unrounded ``base * cost_scale^owned * multiplier`` per resource."""
    mult = cost_scale ** owned * multiplier
    return {k: v * mult for k, v in base_cost.items()}
