from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

REQUIREMENT_TYPES = frozenset(
    {"resource", "building", "technology", "action", "event", "click", "prestige", "time", "combo"}
)
REWARD_TYPES = frozenset({"resource", "multiplier", "unlock", "cosmetic"})
MULTIPLIER_TARGETS = frozenset({"click_gain", "cost", "prod_mul", "use_mul"})


class AchievementCategory(Enum):
    RESOURCE = "resource"
    BUILDING = "building"
    TECHNOLOGY = "technology"
    ACTION = "action"
    EVENT = "event"
    PRESTIGE = "prestige"
    TIME = "time"
    COMBO = "combo"
    HIDDEN = "hidden"


class Rarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class AchievementRequirement:
    """A typed condition over the whole game state.

    *type* is one of :data:`REQUIREMENT_TYPES`. Special targets: ``total`` for
    building/action/click, ``count`` for event/prestige, ``total`` and
    ``session`` for time, ``category_complete`` and ``all_complete`` for
    combo. A ``lifetime.<resource>`` target on a resource requirement reads
    cumulative production. *category* scopes ``category_complete``.
    """

    type: str
    target: str
    value: float
    operator: str = ">="
    category: str = "resource"


@dataclass(frozen=True)
class AchievementReward:
    """What an achievement grants when it unlocks.

    ``multiplier`` rewards target ``click_gain``, ``cost``, ``prod_mul`` or
    ``use_mul`` (all resources), or ``prod_mul.<resource>`` /
    ``use_mul.<resource>`` for a single one. Only ``permanent`` multipliers
    are rebuilt after a prestige.
    """

    type: str
    target: str = ""
    value: float = 0.0
    permanent: bool = False


@dataclass
class AchievementDef:
    """Static definition of an achievement."""

    key: str
    name: str = ""
    description: str = ""
    category: AchievementCategory = AchievementCategory.RESOURCE
    rarity: Rarity = Rarity.COMMON
    points: int = 10
    requirements: list[AchievementRequirement] = field(default_factory=list)
    rewards: list[AchievementReward] = field(default_factory=list)
    hidden: bool = False
    repeatable: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.key


@dataclass(frozen=True)
class AchievementProgress:
    """Evaluation of one achievement against a state."""

    progress: float
    current_value: float
    target_value: float
    is_complete: bool
