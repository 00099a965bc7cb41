from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from kingdomengine._types import compare

if TYPE_CHECKING:
    from kingdomengine.state import GameState


class Requirement(ABC):
    """Base class for unlock conditions: boolean checks on game state."""

    kind: str = "custom"

    @abstractmethod
    def evaluate(self, state: GameState) -> bool: ...

    def describe(self) -> str:
        return self.kind

    def __and__(self, other: Requirement) -> Requirement:
        return _AllRequirement([self, other])

    def __or__(self, other: Requirement) -> Requirement:
        return _AnyRequirement([self, other])


# ── Private implementations ──────────────────────────────────────────


class _ThresholdRequirement(Requirement):
    def __init__(self, key: str, op: str, threshold: float) -> None:
        self.key = key
        self.op = op
        self.threshold = threshold

    def current(self, state: GameState) -> float:
        raise NotImplementedError

    def evaluate(self, state: GameState) -> bool:
        return compare(self.current(state), self.op, self.threshold)

    def describe(self) -> str:
        return f"{self.kind} {self.key} {self.op} {self.threshold:g}"


class _ResourceRequirement(_ThresholdRequirement):
    kind = "resource"

    def current(self, state: GameState) -> float:
        return state.resource(self.key)


class _LifetimeRequirement(_ThresholdRequirement):
    kind = "lifetime"

    def current(self, state: GameState) -> float:
        return state.lifetime_total(self.key)


class _BuildingRequirement(_ThresholdRequirement):
    kind = "building"

    def current(self, state: GameState) -> float:
        return state.building_count(self.key)


class _TechnologyRequirement(_ThresholdRequirement):
    kind = "technology"

    def current(self, state: GameState) -> float:
        return state.technology_level(self.key)


class _PrestigeRequirement(_ThresholdRequirement):
    kind = "prestige"

    def current(self, state: GameState) -> float:
        return state.upgrade_level(self.key)


class _AllRequirement(Requirement):
    kind = "all"

    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return all(r.evaluate(state) for r in self.reqs)

    def describe(self) -> str:
        return " and ".join(r.describe() for r in self.reqs)


class _AnyRequirement(Requirement):
    kind = "any"

    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return any(r.evaluate(state) for r in self.reqs)

    def describe(self) -> str:
        return " or ".join(r.describe() for r in self.reqs)


class _CustomRequirement(Requirement):
    def __init__(self, fn: Callable[[GameState], bool], description: str) -> None:
        self.fn = fn
        self.description = description

    def evaluate(self, state: GameState) -> bool:
        return self.fn(state)

    def describe(self) -> str:
        return self.description or "custom"


# ── Public factory ───────────────────────────────────────────────────


class Req:
    """Factory for built-in unlock conditions."""

    @staticmethod
    def resource(key: str, op: str = ">=", threshold: float = 0.0) -> Requirement:
        return _ResourceRequirement(key, op, threshold)

    @staticmethod
    def lifetime(key: str, op: str = ">=", threshold: float = 0.0) -> Requirement:
        return _LifetimeRequirement(key, op, threshold)

    @staticmethod
    def building(key: str, op: str = ">=", threshold: int = 1) -> Requirement:
        return _BuildingRequirement(key, op, threshold)

    @staticmethod
    def technology(key: str) -> Requirement:
        return _TechnologyRequirement(key, ">=", 1)

    @staticmethod
    def prestige(upgrade_key: str, level: int = 1) -> Requirement:
        """Met once the prestige upgrade *upgrade_key* reaches *level*."""
        return _PrestigeRequirement(upgrade_key, ">=", level)

    @staticmethod
    def all(*reqs: Requirement) -> Requirement:
        return _AllRequirement(list(reqs))

    @staticmethod
    def any(*reqs: Requirement) -> Requirement:
        return _AnyRequirement(list(reqs))

    @staticmethod
    def custom(fn: Callable[[GameState], bool], description: str = "") -> Requirement:
        return _CustomRequirement(fn, description)


def referenced_keys(req: Requirement) -> list[tuple[str, str]]:
    """Return ``(kind, key)`` pairs named by *req*, recursing into composites."""
    if isinstance(req, (_AllRequirement, _AnyRequirement)):
        pairs: list[tuple[str, str]] = []
        for sub in req.reqs:
            pairs.extend(referenced_keys(sub))
        return pairs
    if isinstance(req, _ThresholdRequirement):
        return [(req.kind, req.key)]
    return []
